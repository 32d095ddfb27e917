"""Parser for voter rolls published as PDF documents."""

from io import BytesIO

import pdfplumber

from votecore.addresses import find_addresses
from votecore.rolls import register_roll_parser
from votecore.rolls.base import RollParser, VoterRoll


@register_roll_parser
class PdfRollParser(RollParser):
    """Parser for PDF voter rolls.

    Addresses are collected from the text of every page and from the cells
    of any tables pdfplumber finds, in page order.
    """

    FORMAT = "pdf"

    def can_parse(self, source: str) -> bool:
        return source.split("?", 1)[0].lower().endswith(".pdf")

    def can_parse_content(self, content: bytes, filename: str) -> bool:
        return content.startswith(b"%PDF")

    def parse(self, source: str, content: bytes) -> VoterRoll:
        pdf_file = BytesIO(content)

        with pdfplumber.open(pdf_file) as pdf:
            if not pdf.pages:
                raise ValueError("PDF has no pages")

            chunks = []
            for page in pdf.pages:
                chunks.append(page.extract_text() or "")
                for table in page.extract_tables() or []:
                    for row in table:
                        chunks.extend(cell for cell in row if cell)

        return VoterRoll(
            source=source,
            entries=find_addresses("\n".join(chunks)),
            format=self.FORMAT,
        )
