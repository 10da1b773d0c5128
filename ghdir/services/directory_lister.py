"""
Directory enumeration for resolved repository references.
"""

import asyncio
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Callable, Iterator, List, Optional

from github import Auth, Github
from github.Repository import Repository

from ..infrastructure.error_handler import handle_api_error
from ..infrastructure.logger import logger
from ..models import DownloadConfig, FileDescriptor, RepositoryReference, TreeListing


class DirectoryLister(ABC):
    """
    Lists the files under a directory of a repository at a reference.

    Subclasses provide a fast listing that may come back truncated and a
    slower complete one; ``list_files`` picks between them.
    """

    @abstractmethod
    async def list_tree(
        self,
        owner: str,
        repo: str,
        ref: str,
        directory: str,
        token: Optional[str] = None
    ) -> TreeListing:
        """Single-call listing, possibly truncated by GitHub."""

    @abstractmethod
    async def list_contents_recursive(
        self,
        owner: str,
        repo: str,
        ref: str,
        directory: str,
        token: Optional[str] = None
    ) -> List[FileDescriptor]:
        """Complete listing, one request per directory."""

    async def list_files(
        self,
        reference: RepositoryReference,
        token: Optional[str] = None
    ) -> List[FileDescriptor]:
        """List every file under ``reference.directory``."""

        args = (
            reference.owner,
            reference.repository,
            reference.git_reference,
            reference.directory,
            token,
        )
        listing = await self.list_tree(*args)

        if not listing.truncated:
            logger.debug(f"Found {len(listing.files)} files")
            return listing.files

        logger.warning(
            "It's a large repo and this may take a long while just to "
            "download the list of files."
        )
        files = await self.list_contents_recursive(*args)
        logger.debug(f"Found {len(files)} files")
        return files


def _make_github(token: Optional[str], timeout: float) -> Github:
    if token:
        return Github(auth=Auth.Token(token), timeout=int(timeout))
    return Github(timeout=int(timeout))


class PyGithubDirectoryLister(DirectoryLister):
    """
    Lister backed by PyGithub: the Git Trees API first, the Contents API when
    the tree is truncated. PyGithub is blocking, so calls run in a worker
    thread.
    """

    def __init__(
        self,
        config: Optional[DownloadConfig] = None,
        github_factory: Optional[Callable[[Optional[str], float], Github]] = None
    ):
        self.config = config or DownloadConfig()
        self._github_factory = github_factory or _make_github

    @contextmanager
    def _repository(self, owner: str, repo: str, token: Optional[str]) -> Iterator[Repository]:
        token = token if token is not None else self.config.token
        client = self._github_factory(token, self.config.timeout)
        try:
            yield client.get_repo(f"{owner}/{repo}")
        finally:
            client.close()

    async def list_tree(
        self,
        owner: str,
        repo: str,
        ref: str,
        directory: str,
        token: Optional[str] = None
    ) -> TreeListing:
        return await asyncio.to_thread(
            self._list_tree_sync, owner, repo, ref, directory, token
        )

    async def list_contents_recursive(
        self,
        owner: str,
        repo: str,
        ref: str,
        directory: str,
        token: Optional[str] = None
    ) -> List[FileDescriptor]:
        return await asyncio.to_thread(
            self._list_contents_sync, owner, repo, ref, directory, token
        )

    @handle_api_error
    def _list_tree_sync(
        self,
        owner: str,
        repo: str,
        ref: str,
        directory: str,
        token: Optional[str]
    ) -> TreeListing:
        prefix = f"{directory}/" if directory else ""

        with self._repository(owner, repo, token) as repository:
            tree = repository.get_git_tree(ref or repository.default_branch, recursive=True)
            files = [
                FileDescriptor(path=element.path, url=element.url, size=element.size, sha=element.sha)
                for element in tree.tree
                if element.type == "blob" and element.path.startswith(prefix)
            ]
            truncated = bool(tree.raw_data.get("truncated", False))
        return TreeListing(files=files, truncated=truncated)

    @handle_api_error
    def _list_contents_sync(
        self,
        owner: str,
        repo: str,
        ref: str,
        directory: str,
        token: Optional[str]
    ) -> List[FileDescriptor]:
        files: List[FileDescriptor] = []
        pending = [directory]

        with self._repository(owner, repo, token) as repository:
            while pending:
                path = pending.pop(0)
                if ref:
                    contents = repository.get_contents(path, ref=ref)
                else:
                    contents = repository.get_contents(path)
                if not isinstance(contents, list):
                    contents = [contents]

                for item in contents:
                    if item.type == "dir":
                        pending.append(item.path)
                    elif item.type == "file":
                        files.append(
                            FileDescriptor(path=item.path, url=item.url, size=item.size, sha=item.sha)
                        )

        return files


__all__ = [
    "DirectoryLister",
    "PyGithubDirectoryLister",
]
