"""Orchestrator: parse a voter roll and register its addresses."""

import logging
from dataclasses import dataclass
from typing import Any

from votecore.election import Election
from votecore.rolls import detect_roll_parser, detect_roll_parser_by_content

# Import parsers to register them
from votecore.rolls import pdf  # noqa: F401
from votecore.rolls import webpage  # noqa: F401
from votecore.rolls import plaintext  # noqa: F401

logger = logging.getLogger(__name__)


@dataclass
class RollImportResult:
    """Outcome of importing one voter roll."""
    source: str
    format: str
    submitted: int
    registered: int

    @property
    def already_registered(self) -> int:
        return self.submitted - self.registered

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serializable dictionary."""
        return {
            "source": self.source,
            "format": self.format,
            "submitted": self.submitted,
            "registered": self.registered,
            "already_registered": self.already_registered,
        }


class RollImportError(Exception):
    """Error reading a voter roll."""
    pass


def import_voter_roll(
    election: Election, caller: str, source: str, content: bytes
) -> RollImportResult:
    """Parse a voter roll and register every address in it.

    Args:
        election: Election to register the voters in
        caller: Address of the caller (must be the administrator)
        source: URL or filename (used to detect the appropriate parser)
        content: Raw bytes of the roll file/page

    Returns:
        RollImportResult with the number of addresses read and registered

    Raises:
        RollImportError: If no parser is found, parsing fails or the roll
            contains no addresses
        ElectionError: If registration is refused (not authorized, election
            ended, malformed address); nothing is registered in that case
    """
    # Find appropriate parser: try source matching first, then content detection
    parser = detect_roll_parser(source)
    if parser is None:
        parser = detect_roll_parser_by_content(content, source)
    if parser is None:
        raise RollImportError(
            "We couldn't determine the voter roll format.\n\n"
            "We currently support plain text or CSV address lists, "
            "HTML pages and PDF documents."
        )

    try:
        roll = parser.parse(source, content)
    except Exception as e:
        raise RollImportError(f"Failed to parse voter roll: {e}") from e

    if not roll.entries:
        raise RollImportError(f"No voter addresses found in {source}")

    registered = election.register_many(caller, roll.entries)
    logger.info("imported %s roll %s: %d entries, %d new voters",
                roll.format, source, len(roll), registered)

    return RollImportResult(
        source=source,
        format=roll.format,
        submitted=len(roll),
        registered=registered,
    )
