"""Election state machine and tally engine."""

from votecore.election import Election
from votecore.errors import (
    Conflict,
    ElectionError,
    InvalidArgument,
    InvalidState,
    NotAuthorized,
    NotFound,
)
from votecore.events import Event, EventKind, NotificationLatch, Subscription
from votecore.models import ElectionResult, ElectionState, Party, Placement, ResultKind

__all__ = [
    "Election",
    "ElectionError", "InvalidArgument", "NotAuthorized", "InvalidState", "NotFound", "Conflict",
    "Event", "EventKind", "NotificationLatch", "Subscription",
    "ElectionResult", "ElectionState", "Party", "Placement", "ResultKind",
]
