"""Tests for core data models."""

from votecore.models import ElectionResult, ElectionState, Party, Placement, ResultKind


def parties(*counts: int) -> list[Party]:
    return [Party(index=i, name=f"P{i}", candidate_name=f"C{i}", vote_count=c)
            for i, c in enumerate(counts)]


class TestBuildRanking:
    def test_no_ties(self):
        a, b, c = parties(5, 3, 1)
        result = Placement.build_ranking([a, b, c])
        assert [(p.index, p.rank, p.tied) for p in result] == [
            (0, 1, False),
            (1, 2, False),
            (2, 3, False),
        ]

    def test_tie_in_middle(self):
        a, b, c, d = parties(5, 3, 3, 1)
        result = Placement.build_ranking([a, [b, c], d])
        assert [(p.index, p.rank, p.tied) for p in result] == [
            (0, 1, False),
            (1, 2, True),
            (2, 2, True),
            (3, 4, False),
        ]

    def test_tie_at_start(self):
        a, b, c = parties(2, 2, 1)
        result = Placement.build_ranking([[a, b], c])
        assert [(p.index, p.rank, p.tied) for p in result] == [
            (0, 1, True),
            (1, 1, True),
            (2, 3, False),
        ]

    def test_all_tied(self):
        a, b, c = parties(0, 0, 0)
        result = Placement.build_ranking([[a, b, c]])
        assert [(p.rank, p.tied) for p in result] == [(1, True)] * 3

    def test_empty(self):
        assert Placement.build_ranking([]) == []

    def test_uses_party_label_and_votes(self):
        (a,) = parties(7)
        (placement,) = Placement.build_ranking([a])
        assert placement.name == "P0 (C0)"
        assert placement.votes == 7

    def test_to_dict(self):
        a, b = parties(1, 1)
        result = Placement.build_ranking([[a, b]])
        assert [p.to_dict() for p in result] == [
            {"index": 0, "name": "P0 (C0)", "votes": 1, "rank": 1, "tied": True},
            {"index": 1, "name": "P1 (C1)", "votes": 1, "rank": 1, "tied": True},
        ]


class TestParty:
    def test_snapshot_is_detached(self):
        (party,) = parties(1)
        copy = party.snapshot()
        copy.vote_count = 99
        assert party.vote_count == 1

    def test_label(self):
        party = Party(index=0, name="Democrats", candidate_name="A")
        assert party.label == "Democrats (A)"
        assert party.vote_count == 0


class TestElectionResult:
    def test_winner_property(self):
        a, b = parties(2, 1)
        result = ElectionResult(kind=ResultKind.WINNER, winners=(a,), max_votes=2, total_votes=3)
        assert result.winner is a
        assert not result.is_tie

    def test_tie_has_no_single_winner(self):
        a, b = parties(1, 1)
        result = ElectionResult(kind=ResultKind.TIE, winners=(a, b), max_votes=1, total_votes=2)
        assert result.winner is None
        assert result.is_tie

    def test_no_votes_to_dict(self):
        result = ElectionResult(kind=ResultKind.NO_VOTES)
        assert result.to_dict() == {
            "status": "no-votes",
            "winners": [],
            "max_votes": 0,
            "total_votes": 0,
            "standings": [],
        }


class TestElectionState:
    def test_codes_match_voting_state_numbers(self):
        assert ElectionState.NOT_STARTED == 0
        assert ElectionState.ACTIVE == 1
        assert ElectionState.ENDED == 2

    def test_label(self):
        assert ElectionState.NOT_STARTED.label == "Not Started"
