"""Call widget exceptions."""


class CallSessionError(Exception):
    """Base exception for call widget failures."""


class InvalidTransitionError(CallSessionError):
    """Raised when a status change is not in the transition table."""

    def __init__(self, current, target):
        self.current = current
        self.target = target
        super().__init__(f"Cannot move call from {current} to {target}")


class CallInProgressError(CallSessionError):
    """Raised when a call is started while another one is pending or live."""


class MicrophonePermissionError(CallSessionError):
    """Raised when microphone access is denied."""


class ProxyError(CallSessionError):
    """Raised when the proxy answers with an error envelope or a failed status."""

    def __init__(self, message: str, status_code: int = 500):
        self.status_code = status_code
        super().__init__(message)
