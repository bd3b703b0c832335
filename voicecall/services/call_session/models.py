"""Call session models."""
from typing import List, Literal

from pydantic import AliasChoices, BaseModel, Field

from voicecall.services.call_session.status import CallMode, CallStatus


class TranscriptEntry(BaseModel):
    """One utterance in the live transcript."""

    role: str  # "agent" or "user"
    # Retell snapshots call this field "content"
    text: str = Field(default="", validation_alias=AliasChoices("text", "content"))


class Notification(BaseModel):
    """Transient message shown to the user."""

    title: str
    description: str = ""
    variant: Literal["default", "destructive"] = "default"


class CallSession(BaseModel):
    """In-memory state of the call widget. Never persisted."""

    status: CallStatus = CallStatus.IDLE
    mode: CallMode = CallMode.WEB
    is_muted: bool = False
    elapsed_seconds: int = Field(default=0, ge=0)
    transcript: List[TranscriptEntry] = []
    phone_number: str = ""

    @property
    def is_active(self) -> bool:
        """Whether a call is pending or live."""
        return self.status in (
            CallStatus.CONNECTING,
            CallStatus.CALLING,
            CallStatus.CONNECTED,
        )

    def replace_transcript(self, entries: List[TranscriptEntry]) -> None:
        """Replace the whole transcript with the latest vendor snapshot."""
        self.transcript = list(entries)

    def reset_for_new_call(self) -> None:
        """Clear per-call state before a new attempt."""
        self.transcript = []
        self.elapsed_seconds = 0
        self.is_muted = False
