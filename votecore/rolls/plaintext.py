"""Parser for plain-text and CSV voter rolls."""

import csv
import re

from votecore.rolls import register_roll_parser
from votecore.rolls.base import RollParser, VoterRoll


@register_roll_parser
class PlainTextRollParser(RollParser):
    """Parser for address lists typed or exported as text.

    Two shapes are accepted:
    - a bare list, with addresses separated by newlines, commas, semicolons
      or whitespace
    - a CSV/TSV export whose header row names an address column
      ("address", "wallet", "voter" or "account"); only that column is read

    ``#`` starts a comment and blank entries are dropped. A first line with
    no ``0x`` in it is a header and is never read as an entry.

    In a bare list every token is an entry, so a stray word makes
    registration reject the roll instead of silently skipping it.
    """

    FORMAT = "text"

    FILE_SUFFIXES = (".txt", ".csv", ".tsv", ".lst")

    ADDRESS_COLUMNS = ("address", "wallet", "voter", "account")

    SEPARATORS = re.compile(r"[,;\s]+")

    def can_parse(self, source: str) -> bool:
        return source.split("?", 1)[0].lower().endswith(self.FILE_SUFFIXES)

    def can_parse_content(self, content: bytes, filename: str) -> bool:
        if not content or content.startswith(b"%PDF") or b"\x00" in content[:2048]:
            return False
        try:
            text = content.decode("utf-8-sig")
        except UnicodeDecodeError:
            return False
        # Markup belongs to the HTML parser
        head = text[:2048].lower()
        if text.lstrip().startswith("<") or "<html" in head or "<table" in head:
            return False
        return "0x" in text.lower()

    def parse(self, source: str, content: bytes) -> VoterRoll:
        try:
            text = content.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise ValueError(f"voter roll is not UTF-8 text: {e}") from e

        lines = [line.split("#", 1)[0] for line in text.splitlines()]
        header = None
        if lines and "0x" not in lines[0].lower():
            header, lines = lines[0], lines[1:]

        column = self._address_column(header)
        entries: list[str] = []
        if column is not None:
            delimiter, index = column
            for cells in csv.reader(lines, delimiter=delimiter):
                if len(cells) > index and cells[index].strip():
                    entries.append(cells[index].strip())
        else:
            for line in lines:
                entries.extend(token for token in self.SEPARATORS.split(line) if token)

        return VoterRoll(
            source=source,
            entries=list(dict.fromkeys(entries)),
            format=self.FORMAT,
        )

    def _address_column(self, header: str | None) -> tuple[str, int] | None:
        """Find the address column named in a CSV header as (delimiter, index)."""
        if not header:
            return None
        delimiter = "\t" if "\t" in header else ","
        names = [name.strip().lower() for name in next(csv.reader([header], delimiter=delimiter))]
        for index, name in enumerate(names):
            if name in self.ADDRESS_COLUMNS:
                return delimiter, index
        return None
