"""Tests for roll parser detection."""

import pytest

from votecore.rolls import detect_roll_parser, detect_roll_parser_by_content, get_all_roll_parsers
from votecore.rolls.pdf import PdfRollParser
from votecore.rolls.plaintext import PlainTextRollParser
from votecore.rolls.webpage import WebpageRollParser


class TestDetectRollParser:

    def test_all_parsers_registered(self):
        registered = get_all_roll_parsers()
        for parser_class in (PdfRollParser, WebpageRollParser, PlainTextRollParser):
            assert parser_class in registered

    def test_detects_pdf_url(self):
        parser = detect_roll_parser("https://example.org/rolls/district-7.pdf")
        assert isinstance(parser, PdfRollParser)

    def test_detects_csv_file(self):
        assert isinstance(detect_roll_parser("voters.csv"), PlainTextRollParser)

    def test_detects_web_page(self):
        parser = detect_roll_parser("https://example.org/rolls/district-7")
        assert isinstance(parser, WebpageRollParser)

    @pytest.mark.parametrize("url", [
        "https://example.org/rolls/voters.lst",
        "https://example.org/rolls/voters.tsv?download=1",
    ])
    def test_text_url_is_not_a_web_page(self, url):
        assert isinstance(detect_roll_parser(url), PlainTextRollParser)

    def test_unknown_filename(self):
        assert detect_roll_parser("upload") is None


class TestDetectRollParserByContent:

    def test_detects_pdf(self, pdf_bytes):
        assert isinstance(detect_roll_parser_by_content(pdf_bytes, "upload"), PdfRollParser)

    def test_detects_html(self, html_roll):
        assert isinstance(detect_roll_parser_by_content(html_roll, "upload"), WebpageRollParser)

    def test_detects_text(self, text_roll):
        assert isinstance(detect_roll_parser_by_content(text_roll, "upload"), PlainTextRollParser)

    def test_returns_none_for_plain_html_without_addresses_marker(self):
        parser = detect_roll_parser_by_content(b"Hello world", "page")
        assert parser is None

    def test_returns_none_for_empty_content(self):
        assert detect_roll_parser_by_content(b"", "empty") is None
