class ProgressStreamClosedError(Exception):
    """Raised when an event is emitted after the terminal event."""
