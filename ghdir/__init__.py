"""
ghdir: download a single directory of a GitHub repository without cloning it.
"""

__version__ = "1.0.0"

from .interfaces.api import GitHubDirectoryDownloader
from .models import (
    BatchResult,
    DownloadConfig,
    DownloadSummary,
    FileDescriptor,
    RepositoryReference,
)

__all__ = [
    "__version__",
    "GitHubDirectoryDownloader",
    "BatchResult",
    "DownloadConfig",
    "DownloadSummary",
    "FileDescriptor",
    "RepositoryReference",
]
