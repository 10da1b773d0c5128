"""
Resolution of GitHub directory URLs into repository references.
"""

import re
from typing import List, Optional, Tuple
from urllib.parse import unquote, urlsplit

from ..infrastructure.error_handler import (
    AuthenticationError,
    DownloadError,
    HttpStatusError,
    RateLimitError,
    ResolutionError,
)
from ..infrastructure.logger import logger
from ..models import DownloadConfig, RepositoryReference, ResolutionErrorCode
from ..services.github_api import (
    GitHubGateway,
    commit_lookup_url,
    repository_url,
    zipball_url,
)


DIRECTORY_MARKER = "tree"

_GITHUB_HOST_PREFIX = re.compile(r"^(?:https?://)?(?:www\.)?github\.com", re.IGNORECASE)
_REPEATED_SLASHES = re.compile(r"/{2,}")


def _normalize_path(path: str) -> str:
    path = _REPEATED_SLASHES.sub("/", path.strip())
    return path[:-1] if path.endswith("/") else path


def clean_url_path(url: str) -> str:
    """
    Reduce a GitHub URL to its normalised, percent-decoded path.

    Anything that is not an absolute URL gets a literal ``github.com`` host
    prefix stripped instead; this never raises.
    """
    try:
        parts = urlsplit(url.strip())
        if parts.scheme and parts.netloc:
            return _normalize_path(unquote(parts.path))
    except ValueError:
        pass

    return _normalize_path(unquote(_GITHUB_HOST_PREFIX.sub("", url.strip())))


def split_segments(url: str) -> List[str]:
    return [segment for segment in clean_url_path(url).split("/") if segment]


class ReferenceResolver:
    """
    Turns a GitHub URL into a ``RepositoryReference``.

    Path segments after ``tree`` are ambiguous: branch names may contain
    slashes. The split point is found by querying the commits endpoint with
    successively longer prefixes, one request at a time; the shortest prefix
    GitHub accepts is the reference.
    """

    def __init__(self, gateway: GitHubGateway, config: Optional[DownloadConfig] = None):
        self.gateway = gateway
        self.config = config or gateway.config

    async def resolve(self, url: str, token: Optional[str] = None) -> RepositoryReference:
        """
        Resolve ``url``.

        Raises:
            ResolutionError: With the reason resolution stopped
        """
        token = token if token is not None else self.config.token
        segments = split_segments(url)

        owner = segments[0] if len(segments) > 0 else ""
        repository = segments[1] if len(segments) > 1 else ""
        marker = segments[2] if len(segments) > 2 else None
        parts = segments[3:]

        if not owner or not repository:
            raise ResolutionError(ResolutionErrorCode.NOT_A_REPOSITORY)

        if marker is not None and marker != DIRECTORY_MARKER:
            raise ResolutionError(ResolutionErrorCode.NOT_A_DIRECTORY)

        is_private = await self._fetch_visibility(owner, repository, token)

        if not parts:
            return RepositoryReference(
                owner=owner,
                repository=repository,
                is_private=is_private,
                download_url=zipball_url(owner, repository),
            )

        if len(parts) == 1:
            return RepositoryReference(
                owner=owner,
                repository=repository,
                git_reference=parts[0],
                is_private=is_private,
                download_url=zipball_url(owner, repository, parts[0]),
            )

        split = await self._split_reference(owner, repository, parts, token)
        if split is None:
            raise ResolutionError(ResolutionErrorCode.BRANCH_NOT_FOUND)

        git_reference, directory = split
        logger.debug(f"Resolved {owner}/{repository}@{git_reference}:/{directory}")
        return RepositoryReference(
            owner=owner,
            repository=repository,
            git_reference=git_reference,
            directory=directory,
            is_private=is_private,
        )

    async def _fetch_visibility(self, owner: str, repository: str, token: Optional[str]) -> bool:
        response = await self.gateway.request(repository_url(owner, repository), token)

        if response.status_code == 404:
            raise ResolutionError(ResolutionErrorCode.REPOSITORY_NOT_FOUND)
        if not response.is_success:
            raise HttpStatusError(
                f"{owner}/{repository}", response.status_code, response.reason_phrase
            )

        return bool(response.json().get("private", False))

    async def _split_reference(
        self,
        owner: str,
        repository: str,
        parts: List[str],
        token: Optional[str]
    ) -> Optional[Tuple[str, str]]:
        for i in range(1, len(parts) + 1):
            candidate = "/".join(parts[:i])
            if await self.reference_exists(owner, repository, candidate, token):
                return candidate, "/".join(parts[i:])
        return None

    async def reference_exists(
        self,
        owner: str,
        repository: str,
        git_reference: str,
        token: Optional[str] = None
    ) -> bool:
        url = commit_lookup_url(owner, repository, git_reference)
        logger.debug(f"Checking branch existence: {url}")
        try:
            response = await self.gateway.request(url, token, method="HEAD")
        except (AuthenticationError, RateLimitError):
            raise
        except DownloadError as e:
            logger.debug(f"Error checking branch existence: {e}")
            return False
        return response.is_success


__all__ = [
    "ReferenceResolver",
    "clean_url_path",
    "split_segments",
    "DIRECTORY_MARKER",
]
