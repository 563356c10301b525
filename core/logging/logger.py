"""
Centralized logging configuration for the kiosk rotator.

Uses a rotating file handler with logs stored in the logs/ directory.
Includes colored, duplicate-suppressing console output for debug mode.
"""
import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path


_VERBOSE: bool = False
# Base directory for logs. Defaults to the project root; KIOSK_ROTATOR_LOG_DIR
# overrides the final log directory directly.
_BASE_DIR: Path = Path(__file__).parent.parent.parent

LOG_FORMAT = '%(asctime)s - %(name)-28s - %(levelname)-8s - %(message)s'


class ColoredFormatter(logging.Formatter):
    """Formatter that adds colors to console output."""

    # ANSI color codes
    COLORS = {
        'DEBUG': '\033[36m',       # Cyan
        'INFO': '\033[32m',        # Green
        'WARNING': '\033[33m',     # Yellow
        'ERROR': '\033[31m',       # Red
        'CRITICAL': '\033[35m',    # Magenta
    }
    WATCHDOG_COLOR = '\033[38;5;208m'
    RESET = '\033[0m'
    BOLD = '\033[1m'

    def format(self, record):
        original_levelname = record.levelname

        if '[WATCHDOG]' in str(record.msg):
            color = self.WATCHDOG_COLOR
        else:
            color = self.COLORS.get(record.levelname)

        if color is None:
            return super().format(record)

        record.levelname = f"{self.BOLD}{color}{record.levelname}{self.RESET}"
        try:
            message = super().format(record)
        finally:
            record.levelname = original_levelname
        return f"{color}{message}{self.RESET}"


class SuppressingStreamHandler(logging.StreamHandler):
    """Stream handler that suppresses consecutive duplicate sources.

    The clock ticker and watchdog log at a high rate in debug mode. Repeated
    DEBUG/INFO lines from the same logger/level are collapsed into a single
    "[N Suppressed: CHECK LOG]" line while file logs keep every record.
    """

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._last_name: str | None = None
        self._last_level: int | None = None
        self._suppress_count: int = 0
        self._last_record: logging.LogRecord | None = None

    def emit(self, record: logging.LogRecord) -> None:
        try:
            self._emit_with_suppression(record)
        except Exception:
            self.handleError(record)

    def _remember(self, record: logging.LogRecord | None) -> None:
        self._last_name = record.name if record is not None else None
        self._last_level = record.levelno if record is not None else None
        self._suppress_count = 0
        self._last_record = record

    def _emit_with_suppression(self, record: logging.LogRecord) -> None:
        if record.levelno >= logging.WARNING:
            self._flush_summary()
            self._emit_record(record)
            self._remember(None)
            return

        if record.name == self._last_name and record.levelno == self._last_level:
            self._suppress_count += 1
            return

        self._flush_summary()
        self._emit_record(record)
        self._remember(record)

    def _emit_record(self, record: logging.LogRecord) -> None:
        """Write one record, degrading characters the console cannot encode."""
        try:
            stream = self.stream
            if stream is None:
                return
            text = self.format(record) + self.terminator
            try:
                stream.write(text)
            except UnicodeEncodeError:
                encoding = getattr(stream, "encoding", None) or "ascii"
                stream.write(
                    text.encode(encoding, errors="replace").decode(encoding, errors="replace")
                )
            self.flush()
        except Exception:
            self.handleError(record)

    def _flush_summary(self) -> None:
        last = self._last_record
        if self._suppress_count <= 0 or last is None:
            self._suppress_count = 0
            return

        summary = logging.LogRecord(
            last.name,
            last.levelno,
            last.pathname,
            last.lineno,
            f"[{self._suppress_count} Suppressed: CHECK LOG]",
            args=None,
            exc_info=None,
        )
        summary.created = last.created
        summary.msecs = last.msecs
        self._emit_record(summary)
        self._suppress_count = 0

    def close(self) -> None:
        try:
            self._flush_summary()
        finally:
            super().close()


def get_log_dir() -> Path:
    """Return the directory used for log files."""
    override = os.getenv("KIOSK_ROTATOR_LOG_DIR")
    if override:
        return Path(override)
    return _BASE_DIR / "logs"


def setup_logging(debug: bool = False, verbose: bool = False) -> None:
    """
    Configure application logging with file rotation.

    Args:
        debug: If True, set log level to DEBUG and enable console output.
        verbose: Enables high-volume debug logs (per-tick countdown and
            watchdog checks). Verbose mode implies debug-level logging.
    """
    global _VERBOSE

    debug_enabled = debug or verbose

    log_dir = get_log_dir()
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / "rotator.log"

    level = logging.DEBUG if debug_enabled else logging.INFO

    # File handler with rotation (1MB max, keep 5 backups)
    file_handler = RotatingFileHandler(
        log_file,
        maxBytes=1 * 1024 * 1024,
        backupCount=5,
        encoding='utf-8'
    )
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt='%Y-%m-%d %H:%M:%S'))
    file_handler.setLevel(level)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.addHandler(file_handler)

    if debug_enabled:
        console_handler = SuppressingStreamHandler(sys.stdout)
        formatter_cls = ColoredFormatter if sys.stdout.isatty() else logging.Formatter
        console_handler.setFormatter(formatter_cls(LOG_FORMAT, datefmt='%H:%M:%S'))
        console_handler.setLevel(level)
        root_logger.addHandler(console_handler)

    _VERBOSE = bool(verbose)

    root_logger.info("=" * 60)
    root_logger.info(
        "Rotator logging initialized (debug=%s, verbose=%s, file=%s)",
        debug_enabled,
        _VERBOSE,
        log_file,
    )
    root_logger.info("=" * 60)


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance."""
    return logging.getLogger(name)


def is_verbose_logging() -> bool:
    """Return True when verbose debug logging is enabled globally."""
    return _VERBOSE
