"""Call status and mode enumerations."""
from enum import Enum


class CallStatus(str, Enum):
    """Lifecycle states of the call widget."""

    IDLE = "idle"  # Nothing happening, ready to start
    CONNECTING = "connecting"  # Web call pending vendor call_started
    CALLING = "calling"  # Phone call pending proxy answer
    CONNECTED = "connected"  # Call live, timer running
    ENDED = "ended"  # Call over, reverts to idle after a short delay

    def __str__(self) -> str:
        """Return the string value of the status."""
        return self.value


class CallMode(str, Enum):
    """How the widget reaches the agent."""

    WEB = "web"  # Browser microphone through the vendor realtime session
    PHONE = "phone"  # Outbound phone call placed by the vendor

    def __str__(self) -> str:
        return self.value
