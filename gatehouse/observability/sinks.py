"""
Daily Log Sinks

Append-only newline-delimited JSON files, one per calendar day (UTC) per
stream: ``<directory>/<stream>-YYYY-MM-DD.log``. Files are never rewritten.

Writes are best-effort: an I/O failure is reported through the structured
logger and does not propagate into the request that triggered it.
"""

import json
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any, Callable, Optional

import aiofiles

from gatehouse.observability.logging import get_logger


logger = get_logger(__name__)


class DailyLogSink:
    """
    Append JSON records to a per-day file.

    Args:
        directory: Directory holding the log files (created on first write)
        stream: File name prefix, e.g. "access" or "error"
        today: Returns the current UTC date (injectable for tests)
    """

    def __init__(
        self,
        directory: str | Path,
        stream: str,
        today: Optional[Callable[[], date]] = None,
    ) -> None:
        self.directory = Path(directory)
        self.stream = stream
        self._today = today or (lambda: datetime.now(timezone.utc).date())

    def path_for(self, day: date) -> Path:
        """File receiving records for ``day``."""
        return self.directory / f"{self.stream}-{day.isoformat()}.log"

    def current_path(self) -> Path:
        return self.path_for(self._today())

    async def write(self, record: dict[str, Any]) -> bool:
        """
        Append one record as a JSON line.

        Args:
            record: JSON-serializable record (non-JSON values are str()'d)

        Returns:
            True if the line was appended, False if the write failed
        """
        path = self.current_path()
        line = json.dumps(record, ensure_ascii=False, default=str) + "\n"
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(path, mode="a", encoding="utf-8") as fh:
                await fh.write(line)
        except OSError as e:
            logger.warning("log_sink.write_failed", path=str(path), error=str(e))
            return False
        return True
