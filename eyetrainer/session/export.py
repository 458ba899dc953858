from __future__ import annotations
import csv
import io
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterable, Optional, Union

from ..motion.config import cfg
from .telemetry import CSV_HEADER, LogEntry, SessionLog, utc_now


def _csv_value(value: Any) -> Any:
    """Render integral floats without the trailing '.0' (1.5 stays 1.5, 3.0 -> 3)."""
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def format_csv(entries: Iterable[LogEntry]) -> str:
    """Header plus one row per entry; strings double-quoted, numbers bare."""
    buffer = io.StringIO()
    buffer.write(",".join(CSV_HEADER) + "\n")
    writer = csv.writer(buffer, quoting=csv.QUOTE_NONNUMERIC, lineterminator="\n")
    for entry in entries:
        writer.writerow([_csv_value(v) for v in entry.to_row()])
    return buffer.getvalue()


def export_filename(moment: Optional[datetime] = None) -> str:
    """eye-coordination-log-<YYYY-MM-DD>.csv for the (UTC) date of `moment`."""
    moment = moment or utc_now()
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc)
    return f"{cfg.CSV_FILENAME_PREFIX}{moment.date().isoformat()}.csv"


def export_csv(
    log: SessionLog,
    directory: Union[str, Path] = ".",
    *,
    moment: Optional[datetime] = None,
) -> Optional[Path]:
    """Write the session log as CSV into `directory`.

    Returns the written path, or None when there is nothing to export.
    """
    logger = logging.getLogger(__name__)
    if not log.entries:
        logger.info("Session log is empty; nothing exported")
        return None

    out_dir = Path(directory)
    out_dir.mkdir(parents=True, exist_ok=True)
    path = out_dir / export_filename(moment or log.wall_clock())
    path.write_text(format_csv(log.entries), encoding="utf-8")
    logger.info("Exported %d diplopia marks to %s", len(log.entries), path)
    return path
