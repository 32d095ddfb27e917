"""Parser for voter rolls published as HTML pages."""

import re

from bs4 import BeautifulSoup

from votecore.addresses import find_addresses
from votecore.rolls import register_roll_parser
from votecore.rolls.base import RollParser, VoterRoll
from votecore.rolls.plaintext import PlainTextRollParser


@register_roll_parser
class WebpageRollParser(RollParser):
    """Parser for HTML pages listing voter addresses.

    Typical sources are exported spreadsheets saved as HTML and block
    explorer pages. Addresses are taken from, in order of preference:
    - table cells
    - link targets such as ``/address/0x...``
    - the whole page text, when neither of the above yields any
    """

    FORMAT = "html"

    URL_PATTERN = re.compile(r"^https?://", re.IGNORECASE)

    FILE_SUFFIXES = (".html", ".htm", ".xhtml")

    def can_parse(self, source: str) -> bool:
        path = source.split("?", 1)[0].lower()
        if path.endswith(self.FILE_SUFFIXES):
            return True
        # Any other web page, unless it names a format of its own
        return bool(self.URL_PATTERN.match(source)) and not path.endswith(
            (".pdf",) + PlainTextRollParser.FILE_SUFFIXES
        )

    def can_parse_content(self, content: bytes, filename: str) -> bool:
        head = content[:2048].decode("utf-8", errors="replace").lower()
        return "<html" in head or "<!doctype html" in head or "<table" in head

    def parse(self, source: str, content: bytes) -> VoterRoll:
        html = content.decode("utf-8", errors="replace")
        soup = BeautifulSoup(html, "lxml")

        cells = [cell.get_text(" ", strip=True) for cell in soup.find_all(["td", "th"])]
        links = [a["href"] for a in soup.find_all("a", href=True)]
        entries = find_addresses("\n".join(cells + links))

        if not entries:
            entries = find_addresses(soup.get_text(" "))

        return VoterRoll(source=source, entries=entries, format=self.FORMAT)
