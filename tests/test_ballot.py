"""Tests for the ballot box."""

import pytest

from tests.conftest import FakeClock, make_address

from votecore.ballot import BallotBox
from votecore.errors import Conflict, InvalidState, NotAuthorized, NotFound
from votecore.events import EventBus, EventKind
from votecore.registry import PartyRegistry, VoterRegistry
from votecore.state import ElectionStateMachine

V1, V2, V3 = make_address(1), make_address(2), make_address(3)


class TestBallotBox:
    def setup_method(self):
        self.clock = FakeClock()
        self.events = EventBus()
        self.state = ElectionStateMachine(self.events, self.clock)
        self.parties = PartyRegistry(self.state)
        self.voters = VoterRegistry(self.state, self.events)
        self.box = BallotBox(self.state, self.voters, self.parties, self.events)
        self.parties.add("Democrats", "A")
        self.parties.add("Republicans", "B")
        self.voters.register_many([V1, V2])
        self.stream = self.events.subscribe(EventKind.VOTE_CAST)

    def open(self):
        self.state.start(60)

    def test_cast_records_vote(self):
        self.open()
        self.box.cast(V1, 1)
        assert self.box.has_voted(V1)
        assert self.box.vote_count(1) == 1
        assert self.box.vote_count(0) == 0
        assert self.box.total_votes() == 1
        voter = self.voters.lookup(V1)
        assert voter.voted_party_index == 1

    def test_cast_publishes_party_only(self):
        self.open()
        self.box.cast(V1, 0)
        (event,) = self.stream.drain()
        assert event.payload == {"partyIndex": 0}

    def test_cast_before_start(self):
        with pytest.raises(InvalidState, match="not active"):
            self.box.cast(V1, 0)

    def test_cast_unregistered(self):
        self.open()
        with pytest.raises(NotAuthorized, match="not registered"):
            self.box.cast(V3, 0)

    def test_cast_twice(self):
        self.open()
        self.box.cast(V1, 0)
        with pytest.raises(Conflict, match="already voted"):
            self.box.cast(V1, 1)
        assert [self.box.vote_count(i) for i in (0, 1)] == [1, 0]

    def test_cast_twice_with_different_case(self):
        self.open()
        self.box.cast(V1, 0)
        with pytest.raises(Conflict):
            self.box.cast(V1.upper().replace("0X", "0x"), 0)

    @pytest.mark.parametrize("index", [-1, 2, "0", None])
    def test_cast_invalid_party(self, index):
        self.open()
        with pytest.raises(NotFound):
            self.box.cast(V1, index)
        assert not self.box.has_voted(V1)
        assert self.box.total_votes() == 0

    def test_failed_cast_publishes_nothing(self):
        self.open()
        with pytest.raises(NotFound):
            self.box.cast(V1, 9)
        assert self.stream.drain() == []

    # --- error precedence ---

    def test_state_checked_before_registration(self):
        with pytest.raises(InvalidState):
            self.box.cast(V3, 0)

    def test_registration_checked_before_party(self):
        self.open()
        with pytest.raises(NotAuthorized):
            self.box.cast(V3, 9)

    def test_double_vote_checked_before_party(self):
        self.open()
        self.box.cast(V1, 0)
        with pytest.raises(Conflict):
            self.box.cast(V1, 9)

    def test_double_vote_after_end_reports_state(self):
        self.open()
        self.box.cast(V1, 0)
        self.state.end()
        with pytest.raises(InvalidState):
            self.box.cast(V1, 0)

    def test_vote_after_deadline(self):
        self.open()
        self.clock.advance(minutes=60)
        with pytest.raises(InvalidState):
            self.box.cast(V1, 0)
        assert self.box.total_votes() == 0

    # --- invariants ---

    def test_total_matches_voters_who_voted(self):
        self.open()
        self.box.cast(V1, 0)
        self.box.cast(V2, 1)
        assert self.box.total_votes() == self.box.voted_count() == 2

    def test_has_voted_for_unknown_address(self):
        assert not self.box.has_voted(V3)
        assert not self.box.has_voted("garbage")

    def test_vote_count_invalid_party(self):
        with pytest.raises(NotFound):
            self.box.vote_count(5)
