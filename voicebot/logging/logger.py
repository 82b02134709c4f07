import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"


class Log:
    """Centralized logging with structured format."""

    _logger: logging.Logger = logging.getLogger("voicebot")

    @classmethod
    def configure(
        cls,
        log_level: str,
        log_file: Path | None = None,
        max_bytes: int = 1024 * 1024,
        backup_count: int = 3,
    ) -> None:
        """Configure the logger with a stdout handler and an optional rotating file.

        The telethon library logger shares the file handler so that reconnects
        and flood waits land in the same file.
        """
        cls._logger.setLevel(log_level.upper())
        if not cls._logger.handlers:
            handler = logging.StreamHandler(sys.stdout)
            handler.setFormatter(logging.Formatter(_FORMAT))
            cls._logger.addHandler(handler)
        if log_file is not None and not any(
            isinstance(h, RotatingFileHandler) for h in cls._logger.handlers
        ):
            log_file.parent.mkdir(parents=True, exist_ok=True)
            file_handler = RotatingFileHandler(
                log_file,
                maxBytes=max_bytes,
                backupCount=backup_count,
                encoding="utf-8",
            )
            file_handler.setFormatter(logging.Formatter(f"%(name)s {_FORMAT}"))
            cls._logger.addHandler(file_handler)

            library_logger = logging.getLogger("telethon")
            library_logger.setLevel(logging.INFO)
            library_logger.addHandler(file_handler)

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
        """Log a warning message."""
        cls._logger.warning(message, extra=kwargs)

    @classmethod
    def debug(cls, message: str, **kwargs: object) -> None:
        """Log a debug message."""
        cls._logger.debug(message, extra=kwargs)

    @classmethod
    def exception(cls, message: str, **kwargs: object) -> None:
        """Log an error message with the active traceback."""
        cls._logger.exception(message, extra=kwargs)
