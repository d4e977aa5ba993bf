"""
Filesystem storage backend implementation.

Stores files in a local directory structure:
- {owner}/{file_id}/{filename} - file contents
- {owner}/{file_id}/record.json - FileRecord sidecar
"""

import json
import shutil
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from src.storage.adapter import FileNotFoundInStore, FileRecord, FileStore, StorageError

RECORD_FILENAME = "record.json"


def _sanitize_segment(value: str, what: str) -> str:
    """Make a user supplied name safe to use as a single path segment."""
    cleaned = "".join(c if c.isalnum() or c in "-_." else "_" for c in value.strip())
    if not cleaned or cleaned.startswith("."):
        raise StorageError(f"Invalid {what}: {value!r}")
    return cleaned


class FilesystemFileStore(FileStore):
    """
    Filesystem-based storage implementation.

    One directory per owner, one sub-directory per file.
    """

    def __init__(
        self,
        base_path: str = "./storage",
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """
        Initialize filesystem storage.

        Args:
            base_path: Root directory for all storage
            clock: Returns the upload time (defaults to UTC now)
        """
        self.base_path = Path(base_path).resolve()
        self.base_path.mkdir(parents=True, exist_ok=True)
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    def _owner_dir(self, owner: str) -> Path:
        return self.base_path / _sanitize_segment(owner, "owner")

    def _file_dir(self, owner: str, file_id: str) -> Path:
        if not file_id.isalnum():
            raise FileNotFoundInStore(f"File not found: {file_id}")
        file_dir = self._owner_dir(owner) / file_id
        record_path = file_dir / RECORD_FILENAME
        # Distinct owners can share a sanitized directory name
        if not record_path.is_file() or self._load_record(record_path).owner != owner:
            raise FileNotFoundInStore(f"File not found: {file_id}")
        return file_dir

    def store(
        self,
        owner: str,
        blob: bytes,
        filename: str,
        category: str,
        metadata: Optional[Dict[str, Any]] = None,
        content_type: str = "application/json",
    ) -> str:
        """Store a blob for an owner."""
        file_id = uuid.uuid4().hex
        safe_name = _sanitize_segment(Path(filename).name or "blob", "filename")
        if safe_name == RECORD_FILENAME:
            safe_name = f"_{safe_name}"

        target_dir = self._owner_dir(owner) / file_id
        try:
            target_dir.mkdir(parents=True, exist_ok=False)
            (target_dir / safe_name).write_bytes(blob)

            record = FileRecord(
                file_id=file_id,
                owner=owner,
                filename=safe_name,
                category=category,
                size_bytes=len(blob),
                content_type=content_type,
                uploaded_at=self.clock().isoformat(),
                metadata=metadata or {},
            )
            (target_dir / RECORD_FILENAME).write_text(
                json.dumps(record.to_dict()), encoding="utf-8")
        except (OSError, TypeError, ValueError) as e:
            shutil.rmtree(target_dir, ignore_errors=True)
            raise StorageError(f"Failed to store file: {e}") from e

        return file_id

    def list_files(self, owner: str) -> List[FileRecord]:
        """List an owner's files, newest first."""
        owner_dir = self._owner_dir(owner)
        if not owner_dir.is_dir():
            return []

        records = []
        for record_path in owner_dir.glob(f"*/{RECORD_FILENAME}"):
            record = self._load_record(record_path)
            if record.owner == owner:
                records.append(record)

        records.sort(key=lambda r: (r.uploaded_at, r.file_id), reverse=True)
        return records

    def get_file(self, owner: str, file_id: str) -> FileRecord:
        """Get the record of one file."""
        return self._load_record(self._file_dir(owner, file_id) / RECORD_FILENAME)

    def read_file(self, owner: str, file_id: str) -> bytes:
        """Read the contents of one file."""
        file_dir = self._file_dir(owner, file_id)
        record = self._load_record(file_dir / RECORD_FILENAME)
        try:
            return (file_dir / record.filename).read_bytes()
        except OSError as e:
            raise StorageError(f"Failed to read file: {e}") from e

    def delete_file(self, owner: str, file_id: str) -> None:
        """Delete one file and its directory."""
        file_dir = self._file_dir(owner, file_id)
        try:
            shutil.rmtree(file_dir)
        except OSError as e:
            raise StorageError(f"Failed to delete file: {e}") from e

        owner_dir = file_dir.parent
        if owner_dir.is_dir() and not any(owner_dir.iterdir()):
            owner_dir.rmdir()

    def _load_record(self, record_path: Path) -> FileRecord:
        try:
            return FileRecord.from_dict(
                json.loads(record_path.read_text(encoding="utf-8")))
        except (OSError, ValueError, KeyError) as e:
            raise StorageError(f"Corrupt file record {record_path}: {e}") from e
