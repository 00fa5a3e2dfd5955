import datetime
import logging
import re
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path
from typing import List, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .settings import settings


APP_LOGGER_NAME = "llmwatch"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s - %(message)s"
LOG_BACKUP_DAYS = 7

_LOGGING_CONFIGURED = False


def resolve_tzinfo(timezone_name: Optional[str]) -> datetime.tzinfo:
    """Named zone when valid, otherwise the host's local zone."""
    if timezone_name:
        try:
            return ZoneInfo(timezone_name)
        except ZoneInfoNotFoundError:
            pass
    return datetime.datetime.now().astimezone().tzinfo or datetime.timezone.utc


def resolve_level(level_name: Optional[str]) -> int:
    level = logging.getLevelName((level_name or "INFO").upper())
    return level if isinstance(level, int) else logging.INFO


class ZonedFormatter(logging.Formatter):
    """Render %(asctime)s as ISO-8601 in a fixed timezone."""

    def __init__(self, fmt: str = LOG_FORMAT, *, tzinfo: Optional[datetime.tzinfo] = None):
        super().__init__(fmt)
        self.tzinfo = tzinfo or resolve_tzinfo(None)

    def formatTime(self, record: logging.LogRecord, datefmt: Optional[str] = None) -> str:
        stamp = datetime.datetime.fromtimestamp(record.created, tz=self.tzinfo)
        if datefmt:
            return stamp.strftime(datefmt)
        return stamp.isoformat(timespec="milliseconds")


class DailyFileHandler(TimedRotatingFileHandler):
    """
    Midnight rotation of <dir>/app.log into <dir>/app-YYYY-MM-DD.log.

    The stdlib handler only prunes files named app.log.<date>, so both the
    rotated name and the pruning are handled here; at most `backupCount`
    dated files are kept.
    """

    def __init__(self, filename: Path, backup_count: int = LOG_BACKUP_DAYS) -> None:
        super().__init__(
            filename, when="midnight", backupCount=backup_count, encoding="utf-8"
        )
        base = Path(self.baseFilename)
        self._rotated_pattern = re.compile(
            rf"^{re.escape(base.stem)}-\d{{4}}-\d{{2}}-\d{{2}}{re.escape(base.suffix)}$"
        )
        self.namer = self._dated_name

    def _dated_name(self, default_name: str) -> str:
        # default_name is "<base>.YYYY-MM-DD" for midnight rotation.
        base = Path(self.baseFilename)
        day = default_name.rsplit(".", 1)[-1]
        return str(base.with_name(f"{base.stem}-{day}{base.suffix}"))

    def rotated_files(self) -> List[str]:
        directory = Path(self.baseFilename).parent
        if not directory.is_dir():
            return []
        # ISO dates sort chronologically by name.
        return sorted(
            str(p)
            for p in directory.iterdir()
            if p.is_file() and self._rotated_pattern.match(p.name)
        )

    def getFilesToDelete(self) -> List[str]:
        if self.backupCount <= 0:
            return []
        rotated = self.rotated_files()
        return rotated[: max(0, len(rotated) - self.backupCount)]


def _has_console_handler(target: logging.Logger) -> bool:
    return any(
        isinstance(h, logging.StreamHandler) and not isinstance(h, logging.FileHandler)
        for h in target.handlers
    )


def setup_logging(log_dir: Optional[Path] = None) -> None:
    """
    Configure process-wide logging once.

    The "llmwatch" logger writes to a daily file under LOG_DIR and also
    propagates to the root logger, whose console handler shows uvicorn
    and llmwatch output together.
    """
    global _LOGGING_CONFIGURED
    if _LOGGING_CONFIGURED:
        return

    directory = Path(log_dir or settings.log_dir)
    directory.mkdir(parents=True, exist_ok=True)
    level = resolve_level(settings.log_level)
    formatter = ZonedFormatter(tzinfo=resolve_tzinfo(settings.log_timezone))

    file_handler = DailyFileHandler(directory / "app.log")
    file_handler.setFormatter(formatter)
    file_handler.addFilter(lambda record: record.name.startswith(APP_LOGGER_NAME))

    app_logger = logging.getLogger(APP_LOGGER_NAME)
    app_logger.setLevel(level)
    app_logger.propagate = True
    app_logger.addHandler(file_handler)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    if not _has_console_handler(root_logger):
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

    _LOGGING_CONFIGURED = True


logger = logging.getLogger(APP_LOGGER_NAME)
