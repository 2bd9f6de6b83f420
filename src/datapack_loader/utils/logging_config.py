"""
Logging configuration for datapack-loader.

Records about a single pack document carry its id (``namespace:category/path``)
in the ``document`` attribute, set with ``extra=document_extra(source)``. Both
formatters report it next to the message.
"""

import logging
import logging.handlers
from pathlib import Path
from typing import TYPE_CHECKING, Dict

if TYPE_CHECKING:
    from ..settings import LoggingSettings

CONSOLE_FORMAT = "%(asctime)s : %(levelname)-8s : %(message)s"
DOCUMENT_ATTRIBUTE = "document"


def document_extra(source: str) -> Dict[str, str]:
    """``extra`` mapping tagging a record with the document it is about."""
    return {DOCUMENT_ATTRIBUTE: source}


def document_of(record: logging.LogRecord) -> str:
    return getattr(record, DOCUMENT_ATTRIBUTE, "") or ""


class ColoredFormatter(logging.Formatter):
    """Console formatter: colored level name, dimmed document id suffix."""

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
        "DOCUMENT": "\033[2m",
        "RESET": "\033[0m",
    }

    def format(self, record: logging.LogRecord) -> str:
        reset = self.COLORS["RESET"]
        formatted = super().format(record)

        level = record.levelname
        if level in formatted:
            color = self.COLORS.get(level, reset)
            formatted = formatted.replace(level, f"{color}{level}{reset}", 1)

        document = document_of(record)
        if document:
            formatted = f"{formatted} {self.COLORS['DOCUMENT']}[{document}]{reset}"
        return formatted


class CSVFormatter(logging.Formatter):
    """Semicolon-separated file log; one column holds the document id."""

    @staticmethod
    def quote(text: str) -> str:
        return '"' + text.replace('"', '""') + '"'

    def format(self, record: logging.LogRecord) -> str:
        fields = (
            self.quote(self.formatTime(record, self.datefmt)),
            record.levelname.ljust(8),
            self.quote(f"{int(record.relativeCreated)} ms"),
            self.quote(record.name),
            self.quote(str(record.lineno)),
            self.quote(document_of(record)),
            self.quote(record.getMessage()),
        )
        return ";".join(fields)


def setup_logging(settings: "LoggingSettings") -> None:
    """
    Setup logging with console and file handlers.

    Args:
        settings: LoggingSettings instance for all logging configuration
    """
    console_enabled = settings.console_logging
    console_level = settings.console_log_level
    use_colors = settings.console_use_colors
    file_enabled = settings.file_logging
    log_file = settings.log_file_path

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)

    package_logger = logging.getLogger("datapack_loader")
    package_logger.setLevel(logging.DEBUG)

    root_logger.handlers.clear()

    if console_enabled:
        if use_colors:
            console_formatter: logging.Formatter = ColoredFormatter(
                fmt=CONSOLE_FORMAT, datefmt="%H:%M:%S"
            )
        else:
            console_formatter = logging.Formatter(fmt=CONSOLE_FORMAT, datefmt="%H:%M:%S")

        console_handler = logging.StreamHandler()
        console_handler.setLevel(getattr(logging, console_level.upper(), logging.INFO))
        console_handler.setFormatter(console_formatter)
        root_logger.addHandler(console_handler)

    log_path = None
    if file_enabled:
        try:
            log_path = Path(log_file)
            log_path.parent.mkdir(parents=True, exist_ok=True)

            file_handler = logging.handlers.RotatingFileHandler(
                log_file,
                maxBytes=10 * 1024 * 1024,  # 10MB
                backupCount=5,
                encoding="utf-8",
            )
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(CSVFormatter(datefmt="%Y-%m-%d %H:%M:%S"))
            root_logger.addHandler(file_handler)
        except OSError as e:
            # Keep console logging when the log file cannot be opened
            root_logger.warning(f"Could not setup file logging: {e}")
            log_path = None

    logger = logging.getLogger(__name__)
    logger.debug("Logging initialized")
    if console_enabled:
        logger.debug(f"Console logging: {console_level} (colors: {use_colors})")
    if log_path:
        logger.debug(f"File logging: DEBUG at {log_path.absolute()}")
