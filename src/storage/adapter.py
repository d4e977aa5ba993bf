"""
Abstract base class for per-user file storage.

Defines the interface that storage implementations must follow plus the
search and statistics helpers built on top of it.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


class StorageError(Exception):
    """Exception raised for storage-related errors."""
    pass


class FileNotFoundInStore(StorageError):
    """Raised when a file does not exist or belongs to another owner."""
    pass


@dataclass
class FileRecord:
    """Metadata describing one stored file."""
    file_id: str
    owner: str
    filename: str
    category: str
    size_bytes: int
    content_type: str
    uploaded_at: str
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "file_id": self.file_id,
            "owner": self.owner,
            "filename": self.filename,
            "category": self.category,
            "size_bytes": self.size_bytes,
            "content_type": self.content_type,
            "uploaded_at": self.uploaded_at,
            "metadata": dict(self.metadata),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FileRecord":
        return cls(
            file_id=data["file_id"],
            owner=data["owner"],
            filename=data["filename"],
            category=data["category"],
            size_bytes=data["size_bytes"],
            content_type=data["content_type"],
            uploaded_at=data["uploaded_at"],
            metadata=data.get("metadata") or {},
        )


def format_file_size(size_bytes: int) -> str:
    """
    Human readable file size.

    Examples: 0 -> '0 Bytes', 1536 -> '1.5 KB', 1048576 -> '1 MB'
    """
    if size_bytes <= 0:
        return "0 Bytes"
    units = ["Bytes", "KB", "MB", "GB"]
    exponent = 0
    while size_bytes >= 1024 ** (exponent + 1) and exponent < len(units) - 1:
        exponent += 1
    value = f"{size_bytes / 1024 ** exponent:.2f}".rstrip("0").rstrip(".")
    return f"{value} {units[exponent]}"


class FileStore(ABC):
    """
    Abstract base class for blob storage keyed by owner and file ID.

    Conversion results are stored as opaque blobs with a category and
    free-form metadata.
    """

    @abstractmethod
    def store(
        self,
        owner: str,
        blob: bytes,
        filename: str,
        category: str,
        metadata: Optional[Dict[str, Any]] = None,
        content_type: str = "application/json",
    ) -> str:
        """
        Store a blob for an owner.

        Args:
            owner: Username of the owner
            blob: File contents
            filename: Name to store the file under
            category: Category label (e.g. 'conversion')
            metadata: Free-form metadata kept alongside the file
            content_type: MIME type of the contents

        Returns:
            File ID

        Raises:
            StorageError: If storage operation fails
        """
        pass

    @abstractmethod
    def list_files(self, owner: str) -> List[FileRecord]:
        """List an owner's files, newest first."""
        pass

    @abstractmethod
    def get_file(self, owner: str, file_id: str) -> FileRecord:
        """
        Get the record of one file.

        Raises:
            FileNotFoundInStore: If the owner has no such file
        """
        pass

    @abstractmethod
    def read_file(self, owner: str, file_id: str) -> bytes:
        """
        Read the contents of one file.

        Raises:
            FileNotFoundInStore: If the owner has no such file
        """
        pass

    @abstractmethod
    def delete_file(self, owner: str, file_id: str) -> None:
        """
        Delete one file.

        Raises:
            FileNotFoundInStore: If the owner has no such file
        """
        pass

    def search_files(self, owner: str, query: str) -> List[FileRecord]:
        """Case-insensitive match on filename, category and metadata values."""
        needle = query.strip().lower()
        if not needle:
            return self.list_files(owner)

        def matches(record: FileRecord) -> bool:
            haystack = [record.filename, record.category]
            haystack.extend(str(value) for value in record.metadata.values())
            return any(needle in text.lower() for text in haystack)

        return [record for record in self.list_files(owner) if matches(record)]

    def get_storage_stats(self, owner: str) -> Dict[str, Any]:
        """File count and size totals, overall and per category."""
        records = self.list_files(owner)
        categories: Dict[str, Dict[str, int]] = {}
        for record in records:
            bucket = categories.setdefault(record.category, {"count": 0, "size": 0})
            bucket["count"] += 1
            bucket["size"] += record.size_bytes

        total_size = sum(record.size_bytes for record in records)
        return {
            "total_files": len(records),
            "total_size": total_size,
            "total_size_human": format_file_size(total_size),
            "categories": categories,
        }
