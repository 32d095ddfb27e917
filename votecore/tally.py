"""Tally engine: classify the outcome of a finished election."""

from votecore.ballot import BallotBox
from votecore.models import ElectionResult, ElectionState, Party, Placement, ResultKind
from votecore.registry import PartyRegistry
from votecore.state import ElectionStateMachine


class TallyEngine:
    """Derives standings and the result from the parties' vote counts.

    Plurality: the party with the most votes wins. When two or more parties
    share the maximum the result is a tie; no tiebreaker is applied. An
    election in which nobody voted has no winner at all.
    """

    def __init__(self, state: ElectionStateMachine, parties: PartyRegistry, ballots: BallotBox):
        self.state = state
        self.parties = parties
        self.ballots = ballots

    def compute_result(self) -> ElectionResult:
        """Classify the result of an ended election.

        Recomputing from the same tallies always gives the same result.

        Raises:
            InvalidState: If voting has not ended (by end() or the deadline)
        """
        self.state.require(ElectionState.ENDED, message="election has not ended")

        parties = self.parties.all()
        total = self.ballots.total_votes()
        standings = tuple(self.standings(parties))

        if total == 0:
            return ElectionResult(kind=ResultKind.NO_VOTES, standings=standings)

        max_votes = max(p.vote_count for p in parties)
        winners = tuple(p for p in parties if p.vote_count == max_votes)
        kind = ResultKind.WINNER if len(winners) == 1 else ResultKind.TIE

        return ElectionResult(
            kind=kind,
            winners=winners,
            max_votes=max_votes,
            total_votes=total,
            standings=standings,
        )

    def standings(self, parties: list[Party] | None = None) -> list[Placement]:
        """Rank parties by vote count; equal counts share a rank.

        Tied parties are listed in index order.
        """
        if parties is None:
            parties = self.parties.all()

        # Group by vote count
        vote_groups: dict[int, list[Party]] = {}
        for party in parties:
            if party.vote_count not in vote_groups:
                vote_groups[party.vote_count] = []
            vote_groups[party.vote_count].append(party)

        ordered: list[Party | list[Party]] = []
        for votes in sorted(vote_groups.keys(), reverse=True):
            group = vote_groups[votes]
            ordered.append(group[0] if len(group) == 1 else group)

        return Placement.build_ranking(ordered)
