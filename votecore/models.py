"""Core data models for parties, voters and election results."""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Self

# Counts are fixed-width unsigned 32-bit values. Registries refuse to grow
# past this, so no tally can exceed it either.
MAX_COUNT = 2**32 - 1


class ElectionState(int, Enum):
    NOT_STARTED = 0
    ACTIVE = 1
    ENDED = 2

    @property
    def label(self) -> str:
        return self.name.replace("_", " ").title()


@dataclass
class Party:
    """A candidate slate that can receive votes.

    Attributes:
        index: Dense zero-based position, assigned when the party is added
        name: Party name
        candidate_name: The party's candidate
        vote_count: Number of accepted votes for this party
    """
    index: int
    name: str
    candidate_name: str
    vote_count: int = 0

    @property
    def label(self) -> str:
        return f"{self.name} ({self.candidate_name})"

    def snapshot(self) -> Self:
        """Return a detached copy that callers may keep or mutate freely."""
        return replace(self)

    def to_dict(self) -> dict[str, Any]:
        return {
            "index": self.index,
            "name": self.name,
            "candidate_name": self.candidate_name,
            "vote_count": self.vote_count,
        }


@dataclass
class Voter:
    """Registration and ballot status for one canonical address.

    ``voted_party_index`` is set if and only if ``has_voted`` is true.
    """
    address: str
    registered: bool = True
    has_voted: bool = False
    voted_party_index: int | None = None


@dataclass
class Placement:
    """A party's placement in the final standings.

    Attributes:
        index: Party index
        name: Party label ("Name (Candidate)")
        votes: Vote count
        rank: 1-indexed placement (tied parties share the same rank)
        tied: Whether this party is tied with others at this rank
    """
    index: int
    name: str
    votes: int
    rank: int
    tied: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "index": self.index,
            "name": self.name,
            "votes": self.votes,
            "rank": self.rank,
            "tied": self.tied,
        }

    @classmethod
    def build_ranking(
        cls, ordered: list[Party | list[Party]]
    ) -> list[Self]:
        """Build a list of Placements from an ordered list.

        Args:
            ordered: Parties in order from 1st to last place.
                Each element is either a single Party or a list of
                Parties for tied entries.

        Returns:
            List of Placement objects with correct ranks and tied flags.
        """
        placements = []
        rank = 1
        for entry in ordered:
            if isinstance(entry, list):
                for party in entry:
                    placements.append(cls(
                        index=party.index, name=party.label,
                        votes=party.vote_count, rank=rank, tied=True,
                    ))
                rank += len(entry)
            else:
                placements.append(cls(
                    index=entry.index, name=entry.label,
                    votes=entry.vote_count, rank=rank, tied=False,
                ))
                rank += 1

        return placements


class ResultKind(str, Enum):
    NO_VOTES = "no-votes"
    WINNER = "winner"
    TIE = "tie"


@dataclass(frozen=True)
class ElectionResult:
    """Classification of a finished election.

    Attributes:
        kind: no-votes, winner or tie
        winners: Parties sharing the maximum count, in index order
                 (empty for no-votes)
        max_votes: The maximum count (0 for no-votes)
        total_votes: Number of accepted votes
        standings: Every party ranked by vote count
    """
    kind: ResultKind
    winners: tuple[Party, ...] = ()
    max_votes: int = 0
    total_votes: int = 0
    standings: tuple[Placement, ...] = field(default=())

    @property
    def winner(self) -> Party | None:
        """The single winning party, or None for ties and no-votes."""
        if self.kind is ResultKind.WINNER:
            return self.winners[0]
        return None

    @property
    def is_tie(self) -> bool:
        return self.kind is ResultKind.TIE

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.kind.value,
            "winners": [p.to_dict() for p in self.winners],
            "max_votes": self.max_votes,
            "total_votes": self.total_votes,
            "standings": [p.to_dict() for p in self.standings],
        }
