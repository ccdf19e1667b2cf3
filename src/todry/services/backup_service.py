"""Backup export and import.

A backup is a JSON document::

    {
      "tasks": [{"id": "...", "text": "...", "category": "...", ...}],
      "categories": ["Work", "Home"],
      "exportedAt": "2025-03-01T09:30:00+00:00"
    }

Either collection may be missing on import; a missing one leaves the
current collection alone, a present one replaces it.
"""

from __future__ import annotations

import json
import logging
from datetime import date, datetime
from pathlib import Path

from pydantic import ValidationError as PydanticValidationError

from todry.models import Backup, MalformedBackupError, Task
from todry.utils.dates import now_utc

logger = logging.getLogger(__name__)


def backup_filename(day: date | None = None) -> str:
    """Default file name, e.g. ``todry-backup-2025-03-01.json``."""
    day = day or now_utc().date()
    return f"todry-backup-{day.isoformat()}.json"


class BackupCodec:
    """Serialises active tasks and spaces to and from backup documents."""

    def export(
        self,
        tasks: list[Task],
        categories: list[str],
        now: datetime | None = None,
    ) -> str:
        """Render a backup document stamped with the export time."""
        document = {
            "tasks": [t.model_dump(mode="json", by_alias=True, exclude_none=True) for t in tasks],
            "categories": list(categories),
            "exportedAt": (now or now_utc()).isoformat(),
        }
        return json.dumps(document, indent=2, ensure_ascii=False)

    def import_(self, blob: str | bytes) -> Backup:
        """Parse a backup document.

        Raises:
            MalformedBackupError: If the document is not JSON, not an
                object, or has fields of the wrong shape
        """
        try:
            data = json.loads(blob)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise MalformedBackupError(f"Invalid backup file: {e}") from e
        if not isinstance(data, dict):
            raise MalformedBackupError("Invalid backup file: expected a JSON object")

        try:
            backup = Backup.model_validate(data)
        except PydanticValidationError as e:
            first = e.errors()[0]
            where = ".".join(str(part) for part in first["loc"])
            raise MalformedBackupError(
                f"Invalid backup file: {e.error_count()} invalid field(s), "
                f"first at {where}: {first['msg']}"
            ) from e

        logger.debug(
            "parsed backup: %s tasks, %s spaces",
            "no" if backup.tasks is None else len(backup.tasks),
            "no" if backup.categories is None else len(backup.categories),
        )
        return backup

    def write_backup(self, path: Path, tasks: list[Task], categories: list[str]) -> Path:
        path.write_text(self.export(tasks, categories), encoding="utf-8")
        logger.info("wrote backup %s (%d tasks, %d spaces)", path, len(tasks), len(categories))
        return path

    def read_backup(self, path: Path) -> Backup:
        """Read and parse a backup file.

        Raises:
            MalformedBackupError: If the file cannot be read or parsed
        """
        try:
            blob = path.read_bytes()
        except OSError as e:
            raise MalformedBackupError(f"Cannot read backup file {path}: {e.strerror}") from e
        return self.import_(blob)
