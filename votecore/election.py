"""The Election aggregate: command and query surface for one election."""

import logging
import threading
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Callable, Iterable

from votecore.addresses import try_canonicalize
from votecore.ballot import BallotBox
from votecore.config import Config
from votecore.errors import Conflict, ElectionError, InvalidState, NotAuthorized
from votecore.events import EventBus, EventKind, Subscription
from votecore.models import ElectionResult, ElectionState, Party
from votecore.registry import PartyRegistry, VoterRegistry
from votecore.state import ElectionStateMachine, utc_now
from votecore.tally import TallyEngine

logger = logging.getLogger(__name__)


class Election:
    """One election: its registries, ballot box, lifecycle and events.

    Every command runs under a single write lock, so the check-then-act
    steps inside a command can't interleave with another command. Queries
    take the same lock and see a consistent snapshot.

    Administrative commands (adding parties, registering voters, starting,
    ending and publishing) take the caller's address first and fail with
    NotAuthorized unless it is the administrator. ``cast_vote`` takes the
    voting caller's own address.

    Example:
        >>> election = Election(admin="0x" + "a" * 40,
        ...                     parties=[("Democrats", "A"), ("Republicans", "B")])
        >>> election.register_voter("0x" + "a" * 40, "0x" + "1" * 40)
        True
        >>> deadline = election.start("0x" + "a" * 40, 60)
        >>> election.cast_vote("0x" + "1" * 40, 0)
    """

    def __init__(
        self,
        admin: str,
        parties: Iterable[tuple[str, str]] = (),
        *,
        clock: Callable[[], datetime] = utc_now,
        config: Config | None = None,
    ):
        config = config or Config()
        self.config = config
        self.address_pattern = config.ADDRESS_PATTERN

        admin_address = try_canonicalize(admin, self.address_pattern)
        if admin_address is None:
            raise ValueError(f"invalid administrator address: {admin!r}")
        self.owner = admin_address

        self._lock = threading.RLock()
        self.events = EventBus(maxsize=config.EVENT_QUEUE_SIZE)
        self.state = ElectionStateMachine(
            self.events, clock,
            min_duration=config.MIN_DURATION_MINUTES,
            max_duration=config.MAX_DURATION_MINUTES,
        )
        self.parties = PartyRegistry(self.state)
        self.voters = VoterRegistry(self.state, self.events, self.address_pattern)
        self.ballots = BallotBox(self.state, self.voters, self.parties, self.events)
        self.tally = TallyEngine(self.state, self.parties, self.ballots)

        self._published: ElectionResult | None = None

        for name, candidate_name in parties:
            self.parties.add(name, candidate_name)

    @classmethod
    def from_config(cls, config: Config, **kwargs) -> "Election":
        """Create an election administered by the configured admin address."""
        return cls(config.ADMIN_ADDRESS, config=config, **kwargs)

    # --- commands ---

    def add_party(self, caller: str, name: str, candidate_name: str) -> int:
        with self._command("add_party", caller, admin=True):
            return self.parties.add(name, candidate_name)

    def register_voter(self, caller: str, address: str) -> bool:
        """Register a voter. Repeating it is harmless; returns True if new."""
        with self._command("register_voter", caller, admin=True):
            return self.voters.register(address)

    def register_many(self, caller: str, addresses: Iterable[str]) -> int:
        """Register a batch of voters; returns the number newly registered."""
        with self._command("register_many", caller, admin=True):
            return self.voters.register_many(addresses)

    def start(self, caller: str, duration_minutes: int) -> datetime:
        """Open voting; returns the deadline."""
        with self._command("start", caller, admin=True):
            return self.state.start(duration_minutes)

    def cast_vote(self, voter: str, party_index: int) -> None:
        with self._command("cast_vote", voter):
            self.ballots.cast(voter, party_index)

    def end(self, caller: str) -> None:
        with self._command("end", caller, admin=True):
            self.state.end()

    def publish_results(self, caller: str) -> ElectionResult:
        """Finalize the result of an ended election and announce it."""
        with self._command("publish_results", caller, admin=True):
            if self.state.nominal_state is not ElectionState.ENDED:
                raise InvalidState("election must be ended before publishing results")
            if self._published is not None:
                raise Conflict("results already published")

            result = self.tally.compute_result()
            self.events.publish(EventKind.RESULTS_PUBLISHED, result=result.kind.value)
            self._published = result
            return result

    # --- queries ---

    def get_party(self, index: int) -> Party:
        with self._lock:
            return self.parties.get(index)

    def get_party_count(self) -> int:
        with self._lock:
            return self.parties.count()

    def get_parties(self) -> list[Party]:
        with self._lock:
            return self.parties.all()

    def is_registered(self, address: str) -> bool:
        with self._lock:
            return self.voters.is_registered(address)

    def has_voted(self, address: str) -> bool:
        with self._lock:
            return self.ballots.has_voted(address)

    def get_vote_count(self, party_index: int) -> int:
        with self._lock:
            return self.ballots.vote_count(party_index)

    def get_total_votes(self) -> int:
        with self._lock:
            return self.ballots.total_votes()

    def get_registered_count(self) -> int:
        with self._lock:
            return self.voters.count()

    def get_state(self) -> ElectionState:
        with self._lock:
            return self.state.current_state()

    def get_deadline(self) -> datetime | None:
        with self._lock:
            return self.state.deadline

    def compute_result(self) -> ElectionResult:
        with self._lock:
            return self.tally.compute_result()

    @property
    def results_published(self) -> bool:
        return self._published is not None

    @property
    def published_result(self) -> ElectionResult | None:
        return self._published

    def is_admin(self, caller: str | None) -> bool:
        return try_canonicalize(caller, self.address_pattern) == self.owner

    def snapshot(self, viewer: str | None = None) -> dict[str, Any]:
        """A consistent, JSON-serializable view of the election for dashboards.

        Args:
            viewer: Optional address whose registration and voting status
                    is included under "viewer"
        """
        with self._lock:
            state = self.state.current_state()
            remaining = self.state.time_remaining()
            view = {
                "state": state.name,
                "state_code": state.value,
                "deadline": self.state.deadline.isoformat() if self.state.deadline else None,
                "seconds_remaining": int(remaining.total_seconds()) if remaining else None,
                "parties": [p.to_dict() for p in self.parties.all()],
                "total_votes": self.ballots.total_votes(),
                "registered_voters": self.voters.count(),
                "results_published": self.results_published,
                "result": (
                    self.tally.compute_result().to_dict()
                    if state is ElectionState.ENDED else None
                ),
            }
            if viewer is not None:
                view["viewer"] = {
                    "registered": self.voters.is_registered(viewer),
                    "voted": self.ballots.has_voted(viewer),
                    "is_admin": self.is_admin(viewer),
                }
            return view

    # --- subscriptions ---

    def subscribe(self, *kinds: EventKind | str, maxsize: int | None = None) -> Subscription:
        return self.events.subscribe(*kinds, maxsize=maxsize)

    def unsubscribe(self, handle: Subscription | int) -> bool:
        return self.events.unsubscribe(handle)

    # --- internals ---

    @contextmanager
    def _command(self, name: str, caller: str | None, admin: bool = False):
        """Run one command under the write lock, authorizing admin commands.

        Rejections are logged and re-raised unchanged.
        """
        with self._lock:
            try:
                if admin:
                    if not caller:
                        raise NotAuthorized("caller identity required")
                    if not self.is_admin(caller):
                        raise NotAuthorized("caller is not the administrator")
                yield
            except ElectionError as e:
                logger.info("%s rejected for %s: %s (%s)", name, caller, e, e.kind)
                raise
