class PdfError(Exception):
    """Base exception for PDF adapter failures."""


class PdfRenderError(PdfError):
    """Raised when pages cannot be rendered to images."""


class PdfDecryptionError(PdfError):
    """Raised when none of the candidate passwords unlocks the PDF."""
