import logging
import sys

_NOISY_LOGGERS = ("httpx", "httpcore", "pdfminer")


class Log:
    """Centralized logging for the analyzer service.

    All modules log through this facade so that one request's stage
    boundaries, skipped documents and fallbacks end up in a single stream.
    """

    _logger: logging.Logger = logging.getLogger("credit_analyzer")

    @classmethod
    def configure(cls, log_level: str) -> None:
        """Attach a stdout handler and quiet per-request library loggers."""
        cls._logger.setLevel(log_level.upper())
        if not cls._logger.handlers:
            handler = logging.StreamHandler(sys.stdout)
            handler.setFormatter(
                logging.Formatter("%(asctime)s [%(levelname)s] %(message)s")
            )
            cls._logger.addHandler(handler)
        for name in _NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)

    @classmethod
    def info(cls, message: str, **kwargs: object) -> None:
        cls._logger.info(message, extra=kwargs)

    @classmethod
    def error(cls, message: str, **kwargs: object) -> None:
        cls._logger.error(message, extra=kwargs)

    @classmethod
    def exception(cls, message: str, **kwargs: object) -> None:
        """Log an error together with the active traceback."""
        cls._logger.exception(message, extra=kwargs)

    @classmethod
    def warning(cls, message: str, **kwargs: object) -> None:
        cls._logger.warning(message, extra=kwargs)

    @classmethod
    def debug(cls, message: str, **kwargs: object) -> None:
        cls._logger.debug(message, extra=kwargs)
