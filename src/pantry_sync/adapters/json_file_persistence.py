"""JSON file storage for the local inventory."""

import json
import logging
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path

from pantry_sync.domain.errors import PersistenceUnavailable
from pantry_sync.domain.inventory import (
    InventoryRecord,
    record_from_payload,
    record_to_payload,
)
from pantry_sync.services.store import RecordPersistence

_logger = logging.getLogger(__name__)


@dataclass
class JsonFilePersistence(RecordPersistence):
    """Stores records as a JSON array, replacing the file atomically."""

    path: Path

    def load_records(self) -> list[InventoryRecord] | None:
        """Read records from disk; None when the file does not exist."""
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as exc:
            raise PersistenceUnavailable(f"Cannot read {self.path}: {exc}") from exc
        try:
            payload = json.loads(raw)
            if not isinstance(payload, list):
                raise ValueError("expected a JSON array")
            return [record_from_payload(item) for item in payload]
        except (KeyError, TypeError, ValueError) as exc:
            raise PersistenceUnavailable(
                f"Corrupt inventory file {self.path}: {exc}"
            ) from exc

    def save_records(self, records: list[InventoryRecord]) -> None:
        """Write records to a temp file and move it over the old one."""
        data = json.dumps(
            [record_to_payload(record) for record in records],
            ensure_ascii=False,
            indent=2,
        )
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    handle.write(data)
                os.replace(tmp_name, self.path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            raise PersistenceUnavailable(f"Cannot write {self.path}: {exc}") from exc
        _logger.debug("Saved %s items to %s", len(records), self.path)
