"""Abstract base class for voter roll parsers."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field


@dataclass
class VoterRoll:
    """Addresses read from a voter roll.

    Attributes:
        source: URL or filename the roll came from
        entries: Address strings in the order they appeared, without
                 duplicates. Entries are not validated here; registration
                 rejects the roll if any entry is malformed.
        format: Name of the parser that read the roll
    """
    source: str
    entries: list[str] = field(default_factory=list)
    format: str = ""

    def __len__(self) -> int:
        return len(self.entries)


class RollParser(ABC):
    """Abstract base class for reading voter rolls.

    Each parser implementation handles one file format. Parsers are
    registered via the @register_roll_parser decorator in
    votecore/rolls/__init__.py.
    """

    # Short format name reported with import results
    FORMAT = ""

    @abstractmethod
    def can_parse(self, source: str) -> bool:
        """Check if this parser can handle the given source.

        Args:
            source: URL or filename to check

        Returns:
            True if this parser can handle the source, False otherwise
        """
        pass

    def can_parse_content(self, content: bytes, filename: str) -> bool:
        """Check if this parser can handle the given file content.

        Used for uploads where the filename says nothing useful. Subclasses
        should override this to look for signs of their format.
        """
        return False

    @abstractmethod
    def parse(self, source: str, content: bytes) -> VoterRoll:
        """Parse the content into a VoterRoll.

        Args:
            source: Original URL or filename (for context)
            content: Raw bytes of the file/page content

        Returns:
            Parsed VoterRoll

        Raises:
            ValueError: If the content cannot be parsed
        """
        pass
