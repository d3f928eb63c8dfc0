class DocumentError(Exception):
    """Base exception for failures scoped to a single document."""


class DecryptionFailure(DocumentError):
    """Raised when an encrypted PDF cannot be opened with any known password."""


class ProcessingFailure(DocumentError):
    """Raised when a document cannot be converted into pages or a descriptor."""
