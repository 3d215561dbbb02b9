"""
JSON File Storage Implementation

Each blob is one file, `<data_dir>/<name>.json`. The audit trail is a
JSON-lines file next to them.

Writes go to a temporary file first and are moved into place with
os.replace, so a single blob is never half-written. There is no
transaction across the two tracker blobs.
"""

import os
import tempfile
from collections import deque
from pathlib import Path
from typing import Optional, Union

from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from habit_tracker.models.audit import AuditEvent
from habit_tracker.services.storage.interface import (
    AuditStorageInterface,
    BlobStoreInterface,
    StorageError,
    StorageWriteError,
)


class JsonFileBlobStore(BlobStoreInterface):
    """
    Blob store backed by one file per blob.

    The data directory is created on first write.
    """

    def __init__(self, data_dir: Union[str, Path]):
        self._data_dir = Path(data_dir)

    @property
    def data_dir(self) -> Path:
        return self._data_dir

    def path_for(self, name: str) -> Path:
        """File path of a blob."""
        return self._data_dir / f"{name}.json"

    def load_blob(self, name: str) -> Optional[str]:
        path = self.path_for(name)
        if not path.exists():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except OSError as e:
            raise StorageError(f"Failed to read blob {name}: {e}")

    def save_blob(self, name: str, payload: str) -> None:
        try:
            self._write_atomic(self.path_for(name), payload)
        except OSError as e:
            raise StorageWriteError(f"Failed to save blob {name}: {e}")

    @retry(
        retry=retry_if_exception_type(OSError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.1, min=0.1, max=1),
        reraise=True,
    )
    def _write_atomic(self, path: Path, payload: str) -> None:
        """Write via a temp file in the same directory, then replace."""
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{path.name}.", suffix=".tmp", dir=str(path.parent)
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
            os.replace(tmp_name, path)
        except OSError:
            # Leave no stray temp files behind before retrying
            try:
                os.unlink(tmp_name)
            except FileNotFoundError:
                pass
            raise


class JsonLinesAuditStorage(AuditStorageInterface):
    """
    Append-only audit log, one JSON object per line.
    """

    def __init__(self, path: Union[str, Path]):
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def append_event(self, event: AuditEvent) -> bool:
        """Append an audit event as one line."""
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with open(self._path, "a", encoding="utf-8") as f:
                f.write(event.to_json_line() + "\n")
            return True
        except OSError as e:
            raise StorageError(f"Failed to append audit event: {e}")

    def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        """Get recent events, newest first. Unreadable lines are skipped."""
        if not self._path.exists():
            return []

        try:
            with open(self._path, "r", encoding="utf-8") as f:
                tail = deque((line for line in f if line.strip()), maxlen=limit)
        except OSError as e:
            raise StorageError(f"Failed to read audit log: {e}")

        events = []
        for line in reversed(tail):
            try:
                events.append(AuditEvent.from_json_line(line))
            except (ValueError, KeyError):
                continue
        return events
