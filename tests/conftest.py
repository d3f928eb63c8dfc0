import io
from collections.abc import Callable
from pathlib import Path

import pymupdf
import pytest
from reportlab.lib.pagesizes import letter
from reportlab.pdfgen import canvas


def build_pdf_bytes(page_texts: list[str]) -> bytes:
    """Generate a PDF with one page per entry, each showing its text."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    for text in page_texts:
        c.drawString(72, 720, text)
        c.showPage()
    c.save()
    return buf.getvalue()


def encrypt_pdf(source: Path, target: Path, user_password: str) -> Path:
    """Write an AES-256 encrypted copy of ``source`` that needs ``user_password``."""
    with pymupdf.open(source) as doc:
        doc.save(
            str(target),
            encryption=pymupdf.PDF_ENCRYPT_AES_256,
            user_pw=user_password,
            owner_pw="owner-secret-not-guessable",
        )
    return target


@pytest.fixture()
def sample_pdf_bytes() -> bytes:
    """Generate a minimal single-page PDF with known text content."""
    return build_pdf_bytes(["Balance sheet 2024"])


@pytest.fixture()
def multi_page_pdf_bytes() -> bytes:
    """Generate a three-page PDF with known text on each page."""
    return build_pdf_bytes(["Page one content", "Page two content", "Page three content"])


@pytest.fixture()
def write_pdf(tmp_path: Path) -> Callable[[str, int], Path]:
    """Factory writing an n-page PDF named ``name`` under tmp_path."""

    def _write(name: str, pages: int) -> Path:
        path = tmp_path / name
        path.write_bytes(build_pdf_bytes([f"{name} page {n}" for n in range(1, pages + 1)]))
        return path

    return _write


@pytest.fixture()
def encrypted_pdf(tmp_path: Path, sample_pdf_bytes: bytes) -> Callable[[str], Path]:
    """Factory writing a single-page PDF protected by the given user password."""

    def _write(password: str) -> Path:
        plain = tmp_path / "plain.pdf"
        plain.write_bytes(sample_pdf_bytes)
        return encrypt_pdf(plain, tmp_path / f"locked-{password or 'empty'}.pdf", password)

    return _write
