"""
Services talking to GitHub and to the local filesystem.
"""

from .github_api import GitHubGateway
from .download import FileDownloader
from .directory_lister import DirectoryLister, PyGithubDirectoryLister
from .storage import DiskWriter, ZipPackager

__all__ = [
    "GitHubGateway",
    "FileDownloader",
    "DirectoryLister",
    "PyGithubDirectoryLister",
    "DiskWriter",
    "ZipPackager",
]
