"""
Logging for the roomodes validator.

Provides structured logging with:
- Console output (colorized if supported) on stderr, so stdout stays
  reserved for the validation transcript or JSON report
- File output (JSON lines for parsing)
- Context tracking (record index, field, file being validated)

Usage:
    from roomodes.core.logger import setup_logger

    logger = setup_logger(log_file=Path("validate.log"))
    logger.info("Validating", extra={"file_path": ".roomodes"})

Modules log through ``logging.getLogger(__name__)``; everything below the
``roomodes`` package propagates to the handlers installed here.
"""

import json
import logging
import sys
from dataclasses import asdict, dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

LOGGER_NAME = 'roomodes'

CONTEXT_FIELDS = ('file_path', 'record_index', 'field', 'error_code')

# Error codes used in log records
ERROR_CODES = {
    "IO-01": "Input file not found",
    "IO-02": "Input file unreadable",
    "IO-03": "Fixed file not written",
    "DOC-01": "Malformed JSON",
    "DOC-02": "Records container missing or malformed",
    "CFG-01": "Invalid rules file",
}


@dataclass
class LogContext:
    """Context information for log entries."""
    file_path: Optional[str] = None
    record_index: Optional[int] = None
    field: Optional[str] = None
    error_code: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict, excluding None values."""
        return {k: v for k, v in asdict(self).items() if v is not None}


class ContextFilter(logging.Filter):
    """Add context information to log records."""

    def __init__(self, default_context: Optional[LogContext] = None):
        super().__init__()
        self.context = default_context or LogContext()

    def filter(self, record: logging.LogRecord) -> bool:
        for key, value in self.context.to_dict().items():
            if not hasattr(record, key):
                setattr(record, key, value)

        for name in CONTEXT_FIELDS:
            if not hasattr(record, name):
                setattr(record, name, None)

        return True


class ColoredFormatter(logging.Formatter):
    """Colorized console formatter."""

    COLORS = {
        'DEBUG': '\033[36m',     # Cyan
        'INFO': '\033[32m',      # Green
        'WARNING': '\033[33m',   # Yellow
        'ERROR': '\033[31m',     # Red
        'CRITICAL': '\033[35m',  # Magenta
        'RESET': '\033[0m',
    }

    ICONS = {
        'DEBUG': '🔍',
        'INFO': '✅',
        'WARNING': '⚠️ ',
        'ERROR': '❌',
        'CRITICAL': '🚨',
    }

    def __init__(self, use_colors: bool = True, use_icons: bool = True):
        super().__init__()
        self.use_colors = use_colors and sys.stderr.isatty()
        self.use_icons = use_icons

    def format(self, record: logging.LogRecord) -> str:
        level = record.levelname
        parts = []

        if self.use_icons:
            parts.append(self.ICONS.get(level, ''))

        if self.use_colors:
            parts.append(f"{self.COLORS.get(level, '')}{level}{self.COLORS['RESET']}")
        else:
            parts.append(level)

        context_parts = []
        if getattr(record, 'file_path', None):
            context_parts.append(f"({record.file_path})")
        if getattr(record, 'record_index', None) is not None:
            location = f"[mode #{record.record_index + 1}"
            if getattr(record, 'field', None):
                location += f".{record.field}"
            context_parts.append(location + "]")

        if context_parts:
            parts.append(' '.join(context_parts))

        parts.append(record.getMessage())

        if getattr(record, 'error_code', None):
            error_desc = ERROR_CODES.get(record.error_code, "Unknown error")
            parts.append(f"[{record.error_code}: {error_desc}]")

        return ' '.join(p for p in parts if p)


class JSONFormatter(logging.Formatter):
    """JSON formatter for file logging."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            'timestamp': datetime.now().isoformat(),
            'level': record.levelname,
            'message': record.getMessage(),
            'logger': record.name,
        }

        for name in CONTEXT_FIELDS:
            value = getattr(record, name, None)
            if value is not None:
                log_entry[name] = value

        if record.exc_info:
            log_entry['exception'] = self.formatException(record.exc_info)

        return json.dumps(log_entry)


def setup_logger(
    name: str = LOGGER_NAME,
    log_file: Optional[Path] = None,
    level: int = logging.WARNING,
    console: bool = True,
    use_colors: bool = True,
    use_icons: bool = True,
    context: Optional[LogContext] = None
) -> logging.Logger:
    """
    Setup logger with console and optional file output.

    Args:
        name: Logger name
        log_file: Path to log file (JSON lines)
        level: Logging level
        console: Enable console output (stderr)
        use_colors: Use ANSI colors in console
        use_icons: Use emoji icons in console
        context: Defaults stamped on every record that lacks them
            (e.g. the file being validated)

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)

    # Remove existing handlers
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.filters.clear()

    context_filter = ContextFilter(context)

    if console:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(level)
        console_handler.addFilter(context_filter)
        console_handler.setFormatter(ColoredFormatter(use_colors, use_icons))
        logger.addHandler(console_handler)

    if log_file:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setLevel(level)
        file_handler.addFilter(context_filter)
        file_handler.setFormatter(JSONFormatter())
        logger.addHandler(file_handler)

    return logger