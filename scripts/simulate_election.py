"""Run a synthetic election end to end and print the result.

Generates parties and voter addresses using faker with a fixed seed,
registers the voters, opens voting, casts a random vote for a share of the
voters, ends the election, publishes and prints the result as JSON.

Usage:
    python scripts/simulate_election.py
    python scripts/simulate_election.py --parties 4 --voters 500 --turnout 0.6
    python scripts/simulate_election.py --roll voters.csv
"""

import argparse
import json
import logging
import random
import sys
from pathlib import Path

from faker import Faker

sys.path.insert(0, str(Path(__file__).parent.parent))

from votecore.election import Election
from votecore.roll_import import import_voter_roll

SEED = 20281107

ADMIN = "0x" + "ad" * 20

DEFAULT_PARTIES = [
    ("Democrats", "Candidate A"),
    ("Republicans", "Candidate B"),
    ("American Party", "Candidate C"),
]


def fake_address(fake: Faker) -> str:
    return fake.hexify(text="0x" + "^" * 40)


def make_parties(fake: Faker, count: int) -> list[tuple[str, str]]:
    parties = DEFAULT_PARTIES[:count]
    while len(parties) < count:
        parties.append((f"{fake.last_name()} Party", fake.name()))
    return parties


def main():
    parser = argparse.ArgumentParser(description="Simulate an election")
    parser.add_argument("--parties", type=int, default=2, help="number of parties")
    parser.add_argument("--voters", type=int, default=100, help="number of generated voters")
    parser.add_argument("--turnout", type=float, default=0.75, help="share of voters who vote")
    parser.add_argument("--duration", type=int, default=60, help="voting window in minutes")
    parser.add_argument("--roll", type=Path, help="register voters from this roll file instead")
    parser.add_argument("--seed", type=int, default=SEED)
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args()

    logging.basicConfig(format='{asctime} | {name:^20} | [{levelname}] {message}', style='{',
                        level=logging.INFO if args.verbose else logging.WARNING)

    Faker.seed(args.seed)
    fake = Faker()
    rng = random.Random(args.seed)

    election = Election(ADMIN, parties=make_parties(fake, args.parties))
    for party in election.get_parties():
        print(f"Party {party.index}: {party.name} - {party.candidate_name}")

    if args.roll:
        result = import_voter_roll(election, ADMIN, args.roll.name, args.roll.read_bytes())
        print(f"Imported {result.registered} voters from {args.roll} ({result.format})")
        voters = [v.address for v in election.voters.voters()]
    else:
        voters = [fake_address(fake) for _ in range(args.voters)]
        election.register_many(ADMIN, voters)
        print(f"Registered {election.get_registered_count()} voters")

    election.start(ADMIN, args.duration)
    for voter in voters:
        if rng.random() < args.turnout:
            election.cast_vote(voter, rng.randrange(election.get_party_count()))
    election.end(ADMIN)

    result = election.publish_results(ADMIN)
    print(json.dumps(result.to_dict(), indent=2))


if __name__ == "__main__":
    main()
