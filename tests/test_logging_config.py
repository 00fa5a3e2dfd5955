import datetime
import logging
from pathlib import Path

from llmwatch.logging_config import DailyFileHandler, ZonedFormatter, resolve_level


def _touch_days(directory: Path, count: int) -> list[Path]:
    start = datetime.date(2020, 1, 1)
    paths = []
    for offset in range(count):
        day = start + datetime.timedelta(days=offset)
        path = directory / f"app-{day.isoformat()}.log"
        path.write_text("old\n", encoding="utf-8")
        paths.append(path)
    return paths


def test_rotated_files_use_dated_names(tmp_path):
    handler = DailyFileHandler(tmp_path / "app.log")
    try:
        rotated = handler.rotation_filename(str(tmp_path / "app.log") + ".2026-10-15")
    finally:
        handler.close()

    assert Path(rotated).name == "app-2026-10-15.log"


def test_oldest_rotated_files_are_selected_for_deletion(tmp_path):
    days = _touch_days(tmp_path, 14)
    (tmp_path / "other-2020-01-01.log").write_text("", encoding="utf-8")
    handler = DailyFileHandler(tmp_path / "app.log", backup_count=7)
    try:
        to_delete = handler.getFilesToDelete()
    finally:
        handler.close()

    assert to_delete == [str(p) for p in days[:7]]


def test_rollover_keeps_backup_count_files(tmp_path):
    _touch_days(tmp_path, 9)
    handler = DailyFileHandler(tmp_path / "app.log", backup_count=7)
    try:
        handler.emit(logging.LogRecord("llmwatch", logging.INFO, __file__, 1, "hi", None, None))
        handler.doRollover()
        remaining = handler.rotated_files()
    finally:
        handler.close()

    assert len(remaining) == 7
    assert not (tmp_path / "app-2020-01-01.log").exists()
    assert (tmp_path / "app.log").exists()


def test_zero_backup_count_deletes_nothing(tmp_path):
    _touch_days(tmp_path, 3)
    handler = DailyFileHandler(tmp_path / "app.log", backup_count=0)
    try:
        assert handler.getFilesToDelete() == []
    finally:
        handler.close()


def test_formatter_uses_configured_timezone():
    formatter = ZonedFormatter(tzinfo=datetime.timezone.utc)
    record = logging.LogRecord("llmwatch", logging.INFO, __file__, 1, "msg", None, None)
    record.created = 0.0

    assert formatter.formatTime(record) == "1970-01-01T00:00:00.000+00:00"


def test_resolve_level_falls_back_to_info():
    assert resolve_level("debug") == logging.DEBUG
    assert resolve_level("nonsense") == logging.INFO
    assert resolve_level(None) == logging.INFO
