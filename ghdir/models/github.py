"""
GitHub domain models for ghdir.

This module contains strongly typed data classes and enums representing
GitHub-specific entities: resolved repository references and the file
descriptors produced by directory listings.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


class ResolutionErrorCode(Enum):
    """Reasons a GitHub URL cannot be resolved to a directory."""

    NOT_A_REPOSITORY = "NOT_A_REPOSITORY"
    NOT_A_DIRECTORY = "NOT_A_DIRECTORY"
    REPOSITORY_NOT_FOUND = "REPOSITORY_NOT_FOUND"
    BRANCH_NOT_FOUND = "BRANCH_NOT_FOUND"

    @property
    def description(self) -> str:
        return _RESOLUTION_DESCRIPTIONS[self]


_RESOLUTION_DESCRIPTIONS = {
    ResolutionErrorCode.NOT_A_REPOSITORY: "Not a valid GitHub repository URL",
    ResolutionErrorCode.NOT_A_DIRECTORY: "URL does not point to a directory",
    ResolutionErrorCode.REPOSITORY_NOT_FOUND: (
        "Repository not found. If it's private, you need to provide a token with --token"
    ),
    ResolutionErrorCode.BRANCH_NOT_FOUND: "Branch or reference not found",
}


@dataclass(frozen=True)
class RepositoryReference:
    """Immutable result of resolving a GitHub directory URL."""

    owner: str
    repository: str
    git_reference: str = ""  # empty means the default branch
    directory: str = ""  # empty means the repository root
    is_private: bool = False
    download_url: Optional[str] = None  # zipball, whole-repository URLs only

    def __post_init__(self) -> None:
        if not self.owner or not self.repository:
            raise ValueError("Repository owner and name are required")

    @property
    def display_name(self) -> str:
        return f'{self.owner}/{self.repository}'

    @property
    def is_whole_repository(self) -> bool:
        return self.download_url is not None

    @property
    def directory_prefix(self) -> str:
        """Prefix stripped from file paths to make them directory-relative."""

        return f'{self.directory}/' if self.directory else ''


@dataclass(frozen=True)
class FileDescriptor:
    """A single file reported by a directory listing."""

    path: str
    url: str  # API URL used for authenticated content fetches
    size: Optional[int] = None
    sha: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.path:
            raise ValueError("File path is required")


@dataclass
class TreeListing:
    """Files returned by a tree listing, flagged when GitHub capped it."""

    files: List[FileDescriptor] = field(default_factory=list)
    truncated: bool = False


__all__ = [
    "ResolutionErrorCode",
    "RepositoryReference",
    "FileDescriptor",
    "TreeListing",
]
