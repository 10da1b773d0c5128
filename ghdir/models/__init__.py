"""
Core data models API surface for ghdir.

This file re-exports model classes from domain-specific modules so that
`from ghdir.models import X` works for every model.
"""

from .github import (
    ResolutionErrorCode,
    RepositoryReference,
    FileDescriptor,
    TreeListing,
)
from .download import (
    DownloadStatus,
    FileDownloadResult,
    BatchResult,
    ProgressInfo,
    DownloadSummary,
)
from .config import DownloadConfig

__all__ = [
    # GitHub models
    "ResolutionErrorCode",
    "RepositoryReference",
    "FileDescriptor",
    "TreeListing",
    # Download models
    "DownloadStatus",
    "FileDownloadResult",
    "BatchResult",
    "ProgressInfo",
    "DownloadSummary",
    # Config models
    "DownloadConfig",
]
