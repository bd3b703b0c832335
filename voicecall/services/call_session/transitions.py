"""Status transition table for the call widget."""
import logging
from typing import Dict, FrozenSet

from voicecall.services.call_session.exceptions import InvalidTransitionError
from voicecall.services.call_session.models import CallSession
from voicecall.services.call_session.status import CallStatus

logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS: Dict[CallStatus, FrozenSet[CallStatus]] = {
    CallStatus.IDLE: frozenset({CallStatus.CONNECTING, CallStatus.CALLING}),
    CallStatus.CONNECTING: frozenset(
        {CallStatus.CONNECTED, CallStatus.ENDED, CallStatus.IDLE}
    ),
    CallStatus.CALLING: frozenset(
        {CallStatus.CONNECTED, CallStatus.ENDED, CallStatus.IDLE}
    ),
    CallStatus.CONNECTED: frozenset({CallStatus.ENDED, CallStatus.IDLE}),
    CallStatus.ENDED: frozenset({CallStatus.IDLE}),
}


def can_transition(current: CallStatus, target: CallStatus) -> bool:
    """Check whether ``current -> target`` is in the table."""
    return target in ALLOWED_TRANSITIONS.get(current, frozenset())


def transition(session: CallSession, target: CallStatus) -> None:
    """
    Move the session to ``target``.

    Raises:
        InvalidTransitionError: the move is not in the table; status is unchanged
    """
    old_status = session.status
    if not can_transition(old_status, target):
        raise InvalidTransitionError(old_status, target)

    session.status = target
    logger.info(f"[CALL SESSION] Status changed: {old_status.value} -> {target.value}")
