"""Voter roll parsers for bulk registration from files and web pages."""

from .base import RollParser

# Roll parser registry - import parsers here to register them
_parsers: list[type[RollParser]] = []


def register_roll_parser(parser_class: type[RollParser]) -> type[RollParser]:
    """Decorator to register a roll parser class."""
    _parsers.append(parser_class)
    return parser_class


def get_all_roll_parsers() -> list[type[RollParser]]:
    """Return all registered roll parser classes."""
    return _parsers.copy()


def detect_roll_parser(source: str) -> RollParser | None:
    """Auto-detect and return an appropriate parser instance for the given source."""
    for parser_class in _parsers:
        parser = parser_class()
        if parser.can_parse(source):
            return parser
    return None


def detect_roll_parser_by_content(content: bytes, filename: str) -> RollParser | None:
    """Auto-detect a parser by inspecting file content.

    Used for uploads whose filename doesn't identify the format.
    """
    for parser_class in _parsers:
        parser = parser_class()
        if parser.can_parse_content(content, filename):
            return parser
    return None
