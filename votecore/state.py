"""Election lifecycle: NotStarted -> Active -> Ended."""

import logging
from datetime import datetime, timedelta, timezone
from typing import Callable

from votecore.errors import InvalidArgument, InvalidState
from votecore.events import EventBus, EventKind
from votecore.models import ElectionState

logger = logging.getLogger(__name__)

MIN_DURATION_MINUTES = 1
MAX_DURATION_MINUTES = 1440


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def check_duration_bounds(min_duration: int, max_duration: int) -> None:
    """Raise ValueError unless 1 <= min_duration <= max_duration <= 1440."""
    if not MIN_DURATION_MINUTES <= min_duration <= max_duration <= MAX_DURATION_MINUTES:
        raise ValueError(
            f"duration bounds must satisfy {MIN_DURATION_MINUTES} <= min <= max <= "
            f"{MAX_DURATION_MINUTES}, got {min_duration}..{max_duration}"
        )


class ElectionStateMachine:
    """Owns the election phase and the voting deadline.

    The nominal state only changes through ``start`` and ``end``. The
    deadline is enforced lazily: ``current_state`` reports ENDED as soon as
    the clock passes the deadline, even before ``end`` is called, and every
    state-dependent check goes through it. ``end`` still has to be called
    to finalize the election.
    """

    def __init__(
        self,
        events: EventBus | None = None,
        clock: Callable[[], datetime] = utc_now,
        min_duration: int = MIN_DURATION_MINUTES,
        max_duration: int = MAX_DURATION_MINUTES,
    ):
        check_duration_bounds(min_duration, max_duration)
        self.events = events
        self.clock = clock
        self.min_duration = min_duration
        self.max_duration = max_duration
        self._state = ElectionState.NOT_STARTED
        self.deadline: datetime | None = None
        self.started_at: datetime | None = None
        self.ended_at: datetime | None = None

    @property
    def nominal_state(self) -> ElectionState:
        """The state as last set by start/end, ignoring the deadline."""
        return self._state

    def current_state(self) -> ElectionState:
        if self._state is ElectionState.ACTIVE and self.clock() >= self.deadline:
            return ElectionState.ENDED
        return self._state

    @property
    def expired(self) -> bool:
        """True while the deadline has passed but end() has not been called."""
        return self._state is ElectionState.ACTIVE and self.current_state() is ElectionState.ENDED

    def time_remaining(self) -> timedelta | None:
        """Time left before the deadline, or None if voting is not open."""
        if self.current_state() is not ElectionState.ACTIVE:
            return None
        return self.deadline - self.clock()

    def require(self, *states: ElectionState, message: str) -> None:
        """Raise InvalidState unless the current state is one of ``states``."""
        if self.current_state() not in states:
            raise InvalidState(message)

    def start(self, duration_minutes: int) -> datetime:
        """Open voting for ``duration_minutes`` and return the deadline."""
        if self._state is not ElectionState.NOT_STARTED:
            raise InvalidState("election already started")
        # bool is an int subclass, but True minutes is not a duration
        if isinstance(duration_minutes, bool) or not isinstance(duration_minutes, int):
            raise InvalidArgument(f"duration must be whole minutes, got {duration_minutes!r}")
        if not self.min_duration <= duration_minutes <= self.max_duration:
            raise InvalidArgument(
                f"duration must be between {self.min_duration} and "
                f"{self.max_duration} minutes, got {duration_minutes}"
            )

        now = self.clock()
        self.started_at = now
        self.deadline = now + timedelta(minutes=duration_minutes)
        self._state = ElectionState.ACTIVE
        logger.info("voting started, deadline %s", self.deadline.isoformat())

        if self.events is not None:
            self.events.publish(EventKind.VOTING_STARTED, deadline=self.deadline.isoformat())
        return self.deadline

    def end(self) -> None:
        # Nominal check: an expired election still needs finalizing
        if self._state is not ElectionState.ACTIVE:
            raise InvalidState(
                "election not started" if self._state is ElectionState.NOT_STARTED
                else "election already ended"
            )

        self.ended_at = self.clock()
        self._state = ElectionState.ENDED
        logger.info("voting ended at %s", self.ended_at.isoformat())

        if self.events is not None:
            self.events.publish(EventKind.VOTING_ENDED)
