"""
Download domain models for ghdir.

This module contains data classes and enums representing per-file download
outcomes, batch results and progress.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import List, Optional

from .github import FileDescriptor, RepositoryReference


class DownloadStatus(Enum):
    """Status enumeration for download operations."""

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


@dataclass
class FileDownloadResult:
    """Outcome of downloading a single file."""

    file: FileDescriptor
    status: DownloadStatus
    content: Optional[bytes] = None
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.status == DownloadStatus.COMPLETED

    @property
    def size(self) -> int:
        return len(self.content) if self.content is not None else 0

    @classmethod
    def completed(cls, file: FileDescriptor, content: bytes) -> "FileDownloadResult":
        return cls(file=file, status=DownloadStatus.COMPLETED, content=content)

    @classmethod
    def failed(cls, file: FileDescriptor, error: BaseException) -> "FileDownloadResult":
        return cls(file=file, status=DownloadStatus.FAILED, error=error)

    @classmethod
    def cancelled(cls, file: FileDescriptor, error: Optional[BaseException] = None) -> "FileDownloadResult":
        return cls(file=file, status=DownloadStatus.CANCELLED, error=error)


@dataclass
class BatchResult:
    """Aggregated outcome of a batch of file downloads."""

    results: List[FileDownloadResult] = field(default_factory=list)
    was_cancelled: bool = False

    @property
    def total(self) -> int:
        return len(self.results)

    @property
    def succeeded(self) -> int:
        return sum(1 for r in self.results if r.status == DownloadStatus.COMPLETED)

    @property
    def failed(self) -> int:
        return sum(1 for r in self.results if r.status == DownloadStatus.FAILED)

    @property
    def cancelled(self) -> int:
        return sum(1 for r in self.results if r.status == DownloadStatus.CANCELLED)

    @property
    def successful_results(self) -> List[FileDownloadResult]:
        return [r for r in self.results if r.ok]

    @property
    def failed_results(self) -> List[FileDownloadResult]:
        return [r for r in self.results if r.status == DownloadStatus.FAILED]

    @property
    def status(self) -> DownloadStatus:
        if self.was_cancelled:
            return DownloadStatus.CANCELLED
        if self.failed:
            return DownloadStatus.FAILED
        return DownloadStatus.COMPLETED

    @property
    def is_successful(self) -> bool:
        return self.status == DownloadStatus.COMPLETED

    @property
    def total_bytes(self) -> int:
        return sum(r.size for r in self.results)


@dataclass
class ProgressInfo:
    """Real-time progress tracking information."""

    total_files: int
    completed_files: int = 0
    downloaded_bytes: int = 0
    current_file: Optional[str] = None
    started_at: datetime = field(default_factory=datetime.now)

    @property
    def files_percentage(self) -> float:
        if self.total_files == 0:
            return 0.0
        return (self.completed_files / self.total_files) * 100.0

    @property
    def elapsed_time(self) -> float:
        return (datetime.now() - self.started_at).total_seconds()

    def complete_file(self, path: str, bytes_downloaded: int = 0) -> None:
        self.completed_files += 1
        self.downloaded_bytes += bytes_downloaded
        self.current_file = path


@dataclass
class DownloadSummary:
    """What a complete download run produced."""

    reference: RepositoryReference
    batch: BatchResult
    output_path: Optional[Path] = None
    written_files: List[Path] = field(default_factory=list)
    started_at: datetime = field(default_factory=datetime.now)
    completed_at: Optional[datetime] = None

    @property
    def nothing_to_do(self) -> bool:
        return self.batch.total == 0

    @property
    def duration_seconds(self) -> float:
        if self.completed_at:
            return (self.completed_at - self.started_at).total_seconds()
        return 0.0

    def mark_completed(self) -> None:
        self.completed_at = datetime.now()


__all__ = [
    "DownloadStatus",
    "FileDownloadResult",
    "BatchResult",
    "ProgressInfo",
    "DownloadSummary",
]
