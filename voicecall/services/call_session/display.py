"""Text rendering for the call widget."""
from typing import List

from voicecall.services.call_session.models import CallSession, TranscriptEntry
from voicecall.services.call_session.status import CallMode, CallStatus

VISIBLE_TRANSCRIPT_ENTRIES = 5


def format_duration(seconds: int) -> str:
    """Format elapsed seconds as ``MM:SS``."""
    mins, secs = divmod(max(seconds, 0), 60)
    return f"{mins:02d}:{secs:02d}"


def visible_transcript(session: CallSession) -> List[TranscriptEntry]:
    """Last few transcript entries, oldest first."""
    return session.transcript[-VISIBLE_TRANSCRIPT_ENTRIES:]


def speaker_label(entry: TranscriptEntry, agent_name: str = "Anshika") -> str:
    return f"{agent_name}: " if entry.role == "agent" else "You: "


def status_text(session: CallSession, assistant_name: str = "Shakti AI") -> str:
    """Headline shown under the call button."""
    if session.status == CallStatus.IDLE:
        if session.mode == CallMode.WEB:
            return f"Tap to call {assistant_name}"
        return "Tap to initiate phone call"
    if session.status == CallStatus.CONNECTING:
        return "Connecting..."
    if session.status == CallStatus.CALLING:
        return f"Calling {session.phone_number}..."
    if session.status == CallStatus.CONNECTED:
        return format_duration(session.elapsed_seconds)
    return "Call ended"


def render_transcript(session: CallSession, agent_name: str = "Anshika") -> str:
    """Visible transcript as ``Speaker: text`` lines."""
    return "\n".join(
        f"{speaker_label(entry, agent_name)}{entry.text}"
        for entry in visible_transcript(session)
    )
