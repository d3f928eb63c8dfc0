class ProcessorError(Exception):
    """Base exception for batch-level failures of an analysis request."""


class NoDocumentsProcessedError(ProcessorError):
    """Raised when not a single uploaded file could be normalized."""
