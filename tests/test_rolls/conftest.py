"""Shared fixtures for voter roll parser tests."""

from pathlib import Path
from unittest.mock import MagicMock

import pytest

FIXTURES_DIR = Path(__file__).parent / "fixtures"

A1 = "0x" + "1" * 40
A2 = "0x" + "2" * 40
A3 = "0x" + "3" * 40
A4 = "0x" + "4" * 40


@pytest.fixture
def csv_roll():
    return (FIXTURES_DIR / "voters.csv").read_bytes()


@pytest.fixture
def text_roll():
    return (FIXTURES_DIR / "voters.txt").read_bytes()


@pytest.fixture
def html_roll():
    return (FIXTURES_DIR / "voters.html").read_bytes()


@pytest.fixture
def pdf_bytes():
    """Trivial PDF-like bytes; parsing goes through a mocked pdfplumber."""
    return b"%PDF-1.4 fake"


def _make_mock_pdf(pages_data: list[dict]) -> MagicMock:
    """Create a mock pdfplumber PDF object from extracted page data."""
    mock_pages = []
    for page_data in pages_data:
        mock_page = MagicMock()
        mock_page.extract_text.return_value = page_data["text"]
        mock_page.extract_tables.return_value = page_data["tables"]
        mock_pages.append(mock_page)

    mock_pdf = MagicMock()
    mock_pdf.pages = mock_pages
    mock_pdf.__enter__ = MagicMock(return_value=mock_pdf)
    mock_pdf.__exit__ = MagicMock(return_value=False)
    return mock_pdf


ROLL_PAGES = [
    {
        "text": f"District 7 voter roll\nPage 1\n{A1}\n{A2}",
        "tables": [],
    },
    {
        "text": "Page 2",
        "tables": [[["#", "Address"], ["3", A3], ["4", None], ["5", A1]]],
    },
]


@pytest.fixture
def mock_pdfplumber_roll(monkeypatch):
    """Monkeypatch pdfplumber.open to return a two-page voter roll."""
    import pdfplumber

    mock_pdf = _make_mock_pdf(ROLL_PAGES)
    monkeypatch.setattr(pdfplumber, "open", lambda *args, **kwargs: mock_pdf)
    return mock_pdf


@pytest.fixture
def mock_pdfplumber_empty(monkeypatch):
    """Monkeypatch pdfplumber.open to return a PDF without pages."""
    import pdfplumber

    mock_pdf = _make_mock_pdf([])
    monkeypatch.setattr(pdfplumber, "open", lambda *args, **kwargs: mock_pdf)
    return mock_pdf
