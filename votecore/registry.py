"""Party and voter registries."""

import logging

from votecore.addresses import canonicalize_address, try_canonicalize
from votecore.errors import InvalidArgument, InvalidState, NotFound
from votecore.events import EventBus, EventKind
from votecore.models import MAX_COUNT, ElectionState, Party, Voter
from votecore.state import ElectionStateMachine

logger = logging.getLogger(__name__)


class PartyRegistry:
    """Append-only list of parties.

    Parties can only be added before voting opens, so the set of parties
    a tally runs over never changes once a vote could have been cast.
    Indices are dense and never reused.
    """

    def __init__(self, state: ElectionStateMachine):
        self.state = state
        self._parties: list[Party] = []

    def add(self, name: str, candidate_name: str) -> int:
        self.state.require(
            ElectionState.NOT_STARTED,
            message="parties can only be added before voting starts",
        )
        name = _required_text(name, "party name")
        candidate_name = _required_text(candidate_name, "candidate name")
        if len(self._parties) >= MAX_COUNT:
            raise InvalidState("party registry is full")

        index = len(self._parties)
        self._parties.append(Party(index=index, name=name, candidate_name=candidate_name))
        logger.info("party %d added: %s - %s", index, name, candidate_name)
        return index

    def get(self, index: int) -> Party:
        return self.entry(index).snapshot()

    def entry(self, index: int) -> Party:
        """The stored party itself (for in-package tally updates)."""
        if isinstance(index, bool) or not isinstance(index, int):
            raise NotFound(f"invalid party: {index!r}")
        if not 0 <= index < len(self._parties):
            raise NotFound(f"invalid party: {index}")
        return self._parties[index]

    def all(self) -> list[Party]:
        return [p.snapshot() for p in self._parties]

    def count(self) -> int:
        return len(self._parties)

    def __len__(self) -> int:
        return len(self._parties)


class VoterRegistry:
    """Set of addresses eligible to vote.

    Registration is idempotent and never revoked. Addresses are stored in
    canonical form, so differently-cased spellings are the same voter.
    """

    def __init__(
        self,
        state: ElectionStateMachine,
        events: EventBus | None = None,
        address_pattern: str | None = None,
    ):
        self.state = state
        self.events = events
        self.address_pattern = address_pattern
        self._voters: dict[str, Voter] = {}

    def canonical(self, address) -> str:
        return canonicalize_address(address, self.address_pattern)

    def register(self, address) -> bool:
        """Register one address. Returns False if it was already registered."""
        self._require_open()
        return self._add(self.canonical(address))

    def register_many(self, addresses) -> int:
        """Register a batch of addresses and return how many were new.

        The whole batch is validated before anything is registered: an
        empty batch or a single malformed address rejects all of it.
        Already-registered addresses are skipped.
        """
        self._require_open()
        if isinstance(addresses, str):
            raise InvalidArgument("expected a list of addresses, got a single string")
        try:
            addresses = list(addresses)
        except TypeError:
            raise InvalidArgument(
                f"expected a list of addresses, got {type(addresses).__name__}"
            ) from None
        if not addresses:
            raise InvalidArgument("voter address list is empty")

        canonical = []
        malformed = []
        for address in addresses:
            value = try_canonicalize(address, self.address_pattern)
            if value is None:
                malformed.append(address)
            else:
                canonical.append(value)
        if malformed:
            raise InvalidArgument(
                f"{len(malformed)} malformed address(es): "
                + ", ".join(repr(a) for a in malformed[:5])
                + (", ..." if len(malformed) > 5 else "")
            )

        registered = sum(1 for address in canonical if self._add(address))
        logger.info("batch registration: %d submitted, %d new", len(canonical), registered)
        return registered

    def is_registered(self, address) -> bool:
        return self.lookup(address) is not None

    def lookup(self, address) -> Voter | None:
        """The voter record for an address, or None if not registered."""
        canonical = try_canonicalize(address, self.address_pattern)
        if canonical is None:
            return None
        return self._voters.get(canonical)

    def voters(self) -> list[Voter]:
        return list(self._voters.values())

    def count(self) -> int:
        return len(self._voters)

    def __len__(self) -> int:
        return len(self._voters)

    def _require_open(self) -> None:
        self.state.require(
            ElectionState.NOT_STARTED, ElectionState.ACTIVE,
            message="election has ended",
        )

    def _add(self, address: str) -> bool:
        if address in self._voters:
            return False
        if len(self._voters) >= MAX_COUNT:
            raise InvalidState("voter registry is full")

        self._voters[address] = Voter(address=address)
        logger.debug("voter registered: %s", address)
        if self.events is not None:
            self.events.publish(EventKind.VOTER_REGISTERED, address=address)
        return True


def _required_text(value, what: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise InvalidArgument(f"{what} must not be empty")
    return value.strip()
