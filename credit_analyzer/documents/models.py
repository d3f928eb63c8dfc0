from dataclasses import dataclass
from enum import Enum
from pathlib import Path

PDF_MIME_TYPE = "application/pdf"

ACCEPTED_MIME_TYPES = frozenset({
    PDF_MIME_TYPE,
    "application/vnd.ms-excel",
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "text/csv",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
})


class DocumentType(str, Enum):
    """Caller-declared classification of an uploaded document."""

    LEGAL = "legal"
    PROFIT_LOSS = "profit-loss"
    BALANCE_SHEET = "balance-sheet"
    BANK_STATEMENT = "bank-statement"
    OTHER = "other"

    @classmethod
    def parse(cls, value: str | None) -> "DocumentType":
        """Map a free-form hint to a known type, defaulting to OTHER."""
        try:
            return cls((value or "").strip().lower())
        except ValueError:
            return cls.OTHER


def is_safe_document_id(document_id: str) -> bool:
    """Whether ``document_id`` can name exactly one entry directly below the temp root."""
    if document_id in ("", ".", ".."):
        return False
    return not any(sep in document_id for sep in ("/", "\\", "\x00"))


CORE_FINANCIAL_TYPES = frozenset({
    DocumentType.PROFIT_LOSS,
    DocumentType.BALANCE_SHEET,
    DocumentType.BANK_STATEMENT,
})


@dataclass(frozen=True)
class UploadedFile:
    """A file stored by the upload endpoint and referenced by an analysis request."""

    id: str
    original_name: str
    filename: str
    path: str
    size: int
    mime_type: str
    type: DocumentType = DocumentType.OTHER


@dataclass(frozen=True)
class ProcessedDocument:
    """Normalized form of one uploaded file, ready for analysis.

    PDFs carry one rendered image per page in physical page order; every
    other accepted type carries a short descriptive text instead.
    """

    id: str
    original_name: str
    type: DocumentType
    mime_type: str
    size: int
    images: tuple[Path, ...] = ()
    text: str = ""
    page_count: int | None = None

    @property
    def has_images(self) -> bool:
        return len(self.images) > 0
