"""Shared test helpers."""

from datetime import datetime, timedelta, timezone

import pytest

from votecore.election import Election

ADMIN = "0x" + "a" * 40


def make_address(n: int) -> str:
    """Build a distinct, valid voter address from a number."""
    return "0x" + f"{n:040x}"


class FakeClock:
    """Clock that only moves when told to."""

    def __init__(self, start: datetime = datetime(2028, 11, 7, 12, 0, tzinfo=timezone.utc)):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


def make_election(clock, parties=(("Democrats", "A"), ("Republicans", "B"))) -> Election:
    return Election(ADMIN, parties=list(parties), clock=clock)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def election(clock):
    """Election with two parties: 0 = Democrats (A), 1 = Republicans (B)."""
    return make_election(clock)


@pytest.fixture
def voters(election):
    """Three registered voters v1, v2, v3."""
    addresses = [make_address(i) for i in (1, 2, 3)]
    election.register_many(ADMIN, addresses)
    return addresses
