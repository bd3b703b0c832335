"""Call widget controller."""
import asyncio
import logging
from typing import Any, Callable, List, Optional

import httpx

from voicecall.core.config import Settings
from voicecall.services.call_session.display import format_duration
from voicecall.services.call_session.exceptions import (
    CallInProgressError,
    ProxyError,
)
from voicecall.services.call_session.models import (
    CallSession,
    Notification,
    TranscriptEntry,
)
from voicecall.services.call_session.proxy_client import ProxyClient
from voicecall.services.call_session.status import CallMode, CallStatus
from voicecall.services.call_session.transitions import transition
from voicecall.services.call_session.vendor import (
    CALL_ENDED,
    CALL_STARTED,
    ERROR,
    UPDATE,
    MicrophoneAccess,
    VendorEvent,
    VoiceSession,
)
from voicecall.services.retell.phone import clean_phone_input, is_valid_phone_number

logger = logging.getLogger(__name__)

# Statuses a failed attempt or vendor error may reset from
_RESETTABLE = (CallStatus.CONNECTING, CallStatus.CALLING, CallStatus.CONNECTED)


class CallSessionManager:
    """Drives one call at a time: web calls through a vendor session, phone calls through the proxy.

    The manager owns a single slot for the active vendor session, a repeating
    elapsed-time task while a call is connected, and a delayed task that moves
    ``ended`` back to ``idle``. Nothing is retried; every failure ends the
    attempt with a notification.
    """

    def __init__(
        self,
        proxy: Any,
        session_factory: Callable[[], VoiceSession],
        agent_id: Optional[str] = None,
        microphone: Optional[MicrophoneAccess] = None,
        assistant_name: str = "Shakti AI",
        timer_interval: float = 1.0,
        reset_delay: float = 2.0,
        notify: Optional[Callable[[Notification], None]] = None,
    ):
        self.proxy = proxy
        self.session_factory = session_factory
        self.agent_id = agent_id
        self.microphone = microphone or MicrophoneAccess()
        self.assistant_name = assistant_name
        self.timer_interval = timer_interval
        self.reset_delay = reset_delay
        self._notify_callback = notify

        self.session = CallSession()
        self.notifications: List[Notification] = []

        self._voice_session: Optional[VoiceSession] = None
        self._events_task: Optional[asyncio.Task] = None
        self._timer_task: Optional[asyncio.Task] = None
        self._reset_task: Optional[asyncio.Task] = None
        self._attempt = 0

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        session_factory: Callable[[], VoiceSession],
        microphone: Optional[MicrophoneAccess] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        notify: Optional[Callable[[Notification], None]] = None,
    ) -> "CallSessionManager":
        """Build a manager wired to the configured proxy URL and timings."""
        return cls(
            proxy=ProxyClient(settings.proxy_url, transport=transport),
            session_factory=session_factory,
            agent_id=settings.retell_agent_id,
            microphone=microphone,
            assistant_name=settings.assistant_name,
            timer_interval=settings.timer_interval_seconds,
            reset_delay=settings.ended_reset_delay_seconds,
            notify=notify,
        )

    @property
    def voice_session(self) -> Optional[VoiceSession]:
        """The vendor session currently holding the slot, if any."""
        return self._voice_session

    # ----- widget inputs -----

    def set_mode(self, mode: CallMode) -> None:
        """Switch between web and phone calls while no call is active."""
        if self.session.is_active:
            raise CallInProgressError("Cannot switch call mode during a call")
        self.session.mode = CallMode(mode)

    def set_phone_number(self, value: str) -> str:
        """Store phone input, keeping only digits and ``+``."""
        self.session.phone_number = clean_phone_input(value)
        return self.session.phone_number

    # ----- call lifecycle -----

    async def start_web_call(self) -> None:
        """
        Start a browser call.

        Asks for the microphone, fetches an access token through the proxy,
        then opens the vendor session. Status stays ``connecting`` until the
        vendor reports ``call_started``.
        """
        self._ensure_idle()
        self.session.mode = CallMode.WEB
        self.session.reset_for_new_call()
        transition(self.session, CallStatus.CONNECTING)
        attempt = self._next_attempt()

        voice: Optional[VoiceSession] = None
        try:
            await self.microphone.request()

            logger.info("[CALL SESSION] Requesting web call from proxy")
            data = await self.proxy.invoke("create-web-call", agent_id=self.agent_id)
            if not self._is_current(attempt, CallStatus.CONNECTING):
                logger.info("[CALL SESSION] Web call cancelled before session opened")
                return

            if not isinstance(data, dict):
                data = {}
            access_token = data.get("access_token")
            if not access_token:
                raise ProxyError("No access token returned for web call")
            logger.info(f"[CALL SESSION] Web call created: {data.get('call_id', 'unknown')}")

            voice = self.session_factory()
            self._claim_voice_session(voice)
            await voice.start_call(access_token)

        except Exception as e:
            logger.error(
                f"[CALL SESSION] Error starting call - {type(e).__name__}: {str(e)}",
                exc_info=True,
            )
            if attempt != self._attempt:
                return
            self._notify("Error", str(e) or "Failed to start call", "destructive")
            if voice is not None and voice is self._voice_session:
                self._release_voice_session()
            self._stop_timer()
            self._reset_to_idle()

    async def start_phone_call(self, phone_number: Optional[str] = None) -> bool:
        """
        Ask the vendor to phone ``phone_number`` (defaults to the stored input).

        Returns:
            False when the number is rejected before any network call
        """
        self._ensure_idle()
        if phone_number is not None:
            self.set_phone_number(phone_number)
        number = self.session.phone_number

        if not is_valid_phone_number(number):
            logger.info(f"[CALL SESSION] Rejected phone number: {number!r}")
            self._notify(
                "Invalid Phone Number",
                "Please enter a valid phone number with country code (e.g., +91 1234567890)",
                "destructive",
            )
            return False

        self.session.mode = CallMode.PHONE
        self.session.reset_for_new_call()
        transition(self.session, CallStatus.CALLING)
        attempt = self._next_attempt()

        try:
            logger.info(f"[CALL SESSION] Requesting phone call to {number}")
            data = await self.proxy.invoke(
                "create-phone-call",
                agent_id=self.agent_id,
                phone_number=number,
            )
            if not self._is_current(attempt, CallStatus.CALLING):
                logger.info("[CALL SESSION] Phone call cancelled before proxy answered")
                return True
            call_id = data.get("call_id", "unknown") if isinstance(data, dict) else "unknown"
            logger.info(f"[CALL SESSION] Phone call created: {call_id}")

            self._notify("Call Initiated", f"Calling {number}...")
            # Optimistic: no confirmation that the phone was answered
            transition(self.session, CallStatus.CONNECTED)
            self._start_timer()

        except Exception as e:
            logger.error(
                f"[CALL SESSION] Error starting phone call - {type(e).__name__}: {str(e)}",
                exc_info=True,
            )
            if attempt != self._attempt:
                return True
            self._notify("Error", str(e) or "Failed to start phone call", "destructive")
            self._stop_timer()
            self._reset_to_idle()
        return True

    async def end_call(self) -> None:
        """Hang up. Stops any vendor session and the timer, then ``ended`` -> ``idle``."""
        if self.session.status in (CallStatus.IDLE, CallStatus.ENDED):
            return

        # A start still waiting on the proxy must not report on this call
        self._next_attempt()
        voice = self._release_voice_session()
        if voice is not None:
            try:
                await voice.stop_call()
            except Exception as e:
                logger.error(
                    f"[CALL SESSION] Error ending call - {type(e).__name__}: {str(e)}",
                    exc_info=True,
                )

        self._stop_timer()
        transition(self.session, CallStatus.ENDED)
        self._schedule_idle_reset()

    def toggle_mute(self) -> bool:
        """Flip mute on the live vendor session. Returns the new mute flag."""
        voice = self._voice_session
        if voice is None:
            return self.session.is_muted

        if self.session.is_muted:
            voice.unmute()
        else:
            voice.mute()
        self.session.is_muted = not self.session.is_muted
        logger.info(f"[CALL SESSION] Muted: {self.session.is_muted}")
        return self.session.is_muted

    async def close(self) -> None:
        """Release everything; used when the widget goes away."""
        self._stop_timer()
        if self._reset_task is not None:
            self._reset_task.cancel()
            self._reset_task = None

        voice = self._release_voice_session()
        if voice is not None:
            try:
                await voice.stop_call()
            except Exception as e:
                logger.error(
                    f"[CALL SESSION] Error stopping call on close - {type(e).__name__}: {str(e)}",
                    exc_info=True,
                )

    # ----- vendor events -----

    async def handle_event(self, event: VendorEvent) -> None:
        """Apply one vendor event to the session."""
        status = self.session.status

        if event.type == CALL_STARTED:
            if status != CallStatus.CONNECTING:
                logger.warning(f"[CALL SESSION] Ignoring call_started in {status.value}")
                return
            transition(self.session, CallStatus.CONNECTED)
            self._start_timer()
            self._notify("Call Connected", f"You're now connected with {self.assistant_name}")

        elif event.type == CALL_ENDED:
            if status not in _RESETTABLE:
                return
            self._stop_timer()
            self._release_voice_session()
            transition(self.session, CallStatus.ENDED)
            self._notify(
                "Call Ended",
                f"Call duration: {format_duration(self.session.elapsed_seconds)}",
            )
            self._schedule_idle_reset()

        elif event.type == UPDATE:
            transcript = event.data.get("transcript")
            if transcript is not None:
                self.session.replace_transcript(
                    [TranscriptEntry.model_validate(entry) for entry in transcript]
                )

        elif event.type == ERROR:
            logger.error(f"[CALL SESSION] Vendor error: {event.data}")
            self._notify("Error", "Something went wrong with the call", "destructive")
            self._stop_timer()
            self._release_voice_session()
            self._reset_to_idle()

    async def _consume_events(self, voice: VoiceSession) -> None:
        while voice is self._voice_session:
            event = await voice.events.get()
            if voice is not self._voice_session:
                break
            try:
                await self.handle_event(event)
            except Exception as e:
                logger.error(
                    f"[CALL SESSION] Error handling {event.type} event - {type(e).__name__}: {str(e)}",
                    exc_info=True,
                )

    # ----- internals -----

    def _next_attempt(self) -> int:
        self._attempt += 1
        return self._attempt

    def _is_current(self, attempt: int, status: CallStatus) -> bool:
        return attempt == self._attempt and self.session.status == status

    def _ensure_idle(self) -> None:
        if self.session.status != CallStatus.IDLE:
            raise CallInProgressError(
                f"A call is already {self.session.status.value}"
            )

    def _claim_voice_session(self, voice: VoiceSession) -> None:
        self._release_voice_session()
        self._voice_session = voice
        self._events_task = asyncio.create_task(self._consume_events(voice))

    def _release_voice_session(self) -> Optional[VoiceSession]:
        voice = self._voice_session
        self._voice_session = None
        if self._events_task is not None:
            # The consumer exits on its own when it is the one releasing
            if self._events_task is not asyncio.current_task():
                self._events_task.cancel()
            self._events_task = None
        return voice

    def _reset_to_idle(self) -> None:
        if self.session.status in _RESETTABLE:
            transition(self.session, CallStatus.IDLE)

    def _start_timer(self) -> None:
        self._stop_timer()
        self._timer_task = asyncio.create_task(self._tick())

    def _stop_timer(self) -> None:
        if self._timer_task is not None:
            self._timer_task.cancel()
            self._timer_task = None

    async def _tick(self) -> None:
        while True:
            await asyncio.sleep(self.timer_interval)
            self.session.elapsed_seconds += 1

    def _schedule_idle_reset(self) -> None:
        if self._reset_task is not None:
            self._reset_task.cancel()
        self._reset_task = asyncio.create_task(self._idle_after_delay())

    async def _idle_after_delay(self) -> None:
        await asyncio.sleep(self.reset_delay)
        if self.session.status == CallStatus.ENDED:
            transition(self.session, CallStatus.IDLE)
        self._reset_task = None

    def _notify(self, title: str, description: str = "", variant: str = "default") -> None:
        notification = Notification(title=title, description=description, variant=variant)
        self.notifications.append(notification)
        if self._notify_callback is not None:
            self._notify_callback(notification)
