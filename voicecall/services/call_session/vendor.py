"""Vendor realtime session and microphone abstractions.

The realtime transport belongs to the vendor SDK. The widget only needs a
session object it can start, stop and mute, and a channel of lifecycle
events to consume.
"""
import asyncio
from abc import ABC, abstractmethod
from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel

from voicecall.services.call_session.exceptions import MicrophonePermissionError

CALL_STARTED = "call_started"
CALL_ENDED = "call_ended"
UPDATE = "update"
ERROR = "error"

VendorEventType = Literal["call_started", "call_ended", "update", "error"]


class VendorEvent(BaseModel):
    """Lifecycle or transcript event emitted by a vendor session."""

    type: VendorEventType
    data: Dict[str, Any] = {}


class VoiceSession(ABC):
    """Abstract vendor session: an event channel plus call controls.

    Subclasses wire ``start_call``/``stop_call``/``mute``/``unmute`` to a real
    transport and push what it reports through ``emit``.
    """

    def __init__(self):
        self.events: "asyncio.Queue[VendorEvent]" = asyncio.Queue()

    def emit(self, event_type: str, data: Optional[Dict[str, Any]] = None) -> None:
        """Push an event onto the channel."""
        self.events.put_nowait(VendorEvent(type=event_type, data=data or {}))

    @abstractmethod
    async def start_call(self, access_token: str) -> None:
        """Open the realtime call with an access token from create-web-call."""
        pass

    @abstractmethod
    async def stop_call(self) -> None:
        """Hang up the realtime call."""
        pass

    @abstractmethod
    def mute(self) -> None:
        """Stop sending microphone audio."""
        pass

    @abstractmethod
    def unmute(self) -> None:
        """Resume sending microphone audio."""
        pass


class MicrophoneAccess:
    """Permission prompt for the local microphone. Grants by default."""

    async def request(self) -> None:
        """
        Ask for microphone access.

        Raises:
            MicrophonePermissionError: access was denied
        """
        return None


class DeniedMicrophone(MicrophoneAccess):
    """Microphone that always refuses access."""

    async def request(self) -> None:
        raise MicrophonePermissionError("Microphone access was denied")
