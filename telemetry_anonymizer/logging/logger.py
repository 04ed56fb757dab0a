import logging
import sys
from typing import TextIO

_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


class Log:
    """Centralized logging with structured format.

    Messages carry counts, rule types and timings only, never the
    original values being anonymized.
    """

    _logger: logging.Logger = logging.getLogger("telemetry_anonymizer")

    @classmethod
    def configure(cls, log_level: str, stream: TextIO | None = None) -> None:
        """Set the level and send records to *stream* (stderr by default).

        Standard output is left to the anonymized data. Calling this again
        replaces the previous handler.
        """
        cls._logger.setLevel(log_level.upper())
        for handler in list(cls._logger.handlers):
            cls._logger.removeHandler(handler)
        handler = logging.StreamHandler(stream or sys.stderr)
        handler.setFormatter(logging.Formatter(_FORMAT))
        cls._logger.addHandler(handler)

    @classmethod
    def info(cls, message: str, **kwargs: object) -> None:
        """Log an info message."""
        cls._logger.info(message, extra=kwargs)

    @classmethod
    def error(cls, message: str, **kwargs: object) -> None:
        """Log an error message."""
        cls._logger.error(message, extra=kwargs)

    @classmethod
    def warning(cls, message: str, **kwargs: object) -> None:
        cls._logger.warning(message, extra=kwargs)

    @classmethod
    def debug(cls, message: str, **kwargs: object) -> None:
        cls._logger.debug(message, extra=kwargs)
