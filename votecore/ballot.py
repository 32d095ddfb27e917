"""Ballot box: one vote per registered voter."""

import logging

from votecore.errors import Conflict, NotAuthorized
from votecore.events import EventBus, EventKind
from votecore.models import ElectionState
from votecore.registry import PartyRegistry, VoterRegistry
from votecore.state import ElectionStateMachine

logger = logging.getLogger(__name__)


class BallotBox:
    """Records who has voted and adds each accepted vote to the party's tally.

    ``cast`` is a check-then-act sequence; callers must serialize it with
    every other mutation (the Election aggregate holds its write lock).
    """

    def __init__(
        self,
        state: ElectionStateMachine,
        voters: VoterRegistry,
        parties: PartyRegistry,
        events: EventBus | None = None,
    ):
        self.state = state
        self.voters = voters
        self.parties = parties
        self.events = events

    def cast(self, address, party_index: int) -> None:
        """Accept one vote.

        Checks run in a fixed order so the reported failure is predictable:
        a repeat vote after the election has ended reports InvalidState,
        not Conflict.

        Raises:
            InvalidState: Voting is not open (including after the deadline)
            NotAuthorized: The address is not registered
            Conflict: The voter has already voted
            NotFound: The party index is out of range
        """
        self.state.require(ElectionState.ACTIVE, message="election not active")

        voter = self.voters.lookup(address)
        if voter is None:
            raise NotAuthorized("voter not registered")
        if voter.has_voted:
            raise Conflict("already voted")
        party = self.parties.entry(party_index)

        voter.has_voted = True
        voter.voted_party_index = party.index
        party.vote_count += 1

        if self.events is not None:
            self.events.publish(EventKind.VOTE_CAST, partyIndex=party.index)

    def has_voted(self, address) -> bool:
        voter = self.voters.lookup(address)
        return voter is not None and voter.has_voted

    def vote_count(self, party_index: int) -> int:
        return self.parties.entry(party_index).vote_count

    def total_votes(self) -> int:
        return sum(p.vote_count for p in self.parties.all())

    def voted_count(self) -> int:
        """Number of voters who have voted; always equals total_votes()."""
        return sum(1 for v in self.voters.voters() if v.has_voted)
