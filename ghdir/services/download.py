"""
Single-file downloads from GitHub, public or private.
"""

import base64
from typing import Awaitable, Callable, Optional

import httpx

from ..core.cancellation import CancellationToken
from ..infrastructure.error_handler import DownloadError, HttpStatusError
from ..infrastructure.logger import logger
from ..infrastructure.retry_manager import FailedAttemptObserver, RetryManager
from ..models import DownloadConfig, FileDescriptor, RepositoryReference
from .github_api import GitHubGateway, lfs_media_url, raw_content_url


LFS_POINTER_SIGNATURE = "version https://git-lfs.github.com/spec/v1"

# Pointer files are ~130 bytes; only bodies in this window are inspected
LFS_POINTER_MIN_LENGTH = 128
LFS_POINTER_MAX_LENGTH = 140

RetryStrategy = Callable[..., Awaitable[bytes]]


def is_lfs_pointer(response: httpx.Response) -> bool:
    """True when ``response`` carries a Git LFS pointer instead of content."""

    try:
        length = int(response.headers.get("content-length", ""))
    except ValueError:
        return False

    if LFS_POINTER_MIN_LENGTH < length < LFS_POINTER_MAX_LENGTH:
        return response.text.startswith(LFS_POINTER_SIGNATURE)
    return False


def _ensure_ok(response: httpx.Response, path: str) -> None:
    if not response.is_success:
        raise HttpStatusError(path, response.status_code, response.reason_phrase)


class FileDownloader:
    """
    Fetches the bytes of one file.

    Public repositories are read from raw.githubusercontent.com, following
    Git LFS pointers to the media host. Private repositories are read through
    the API URL the listing supplied, whose JSON body carries the content
    base64-encoded. Each attempt runs through ``retry_strategy``: any callable
    accepting ``(operation, on_failed_attempt=observer)``.
    """

    def __init__(
        self,
        gateway: GitHubGateway,
        config: Optional[DownloadConfig] = None,
        retry_strategy: Optional[RetryStrategy] = None
    ):
        self.gateway = gateway
        self.config = config or gateway.config
        self.retry_strategy = retry_strategy or RetryManager(
            max_retries=self.config.max_retries,
            base_delay=self.config.base_delay,
            max_delay=self.config.max_delay,
        )

    async def download(
        self,
        reference: RepositoryReference,
        file: FileDescriptor,
        signal: Optional[CancellationToken] = None,
        token: Optional[str] = None
    ) -> bytes:
        """
        Download ``file`` with retries.

        Raises:
            RetryExhaustedError: When every attempt failed
            DownloadCancelledError: When ``signal`` is set
        """
        token = token if token is not None else self.config.token

        async def attempt() -> bytes:
            if reference.is_private:
                return await self.fetch_private_file(file, signal, token)
            return await self.fetch_public_file(reference, file, signal, token)

        return await self.retry_strategy(
            attempt, on_failed_attempt=self._failed_attempt_observer(file)
        )

    @staticmethod
    def _failed_attempt_observer(file: FileDescriptor) -> FailedAttemptObserver:
        def on_failed_attempt(error: BaseException, attempt_number: int, retries_left: int) -> None:
            logger.warning(
                f"Error downloading {file.path}. Attempt {attempt_number}. "
                f"{retries_left} retries left."
            )
        return on_failed_attempt

    async def fetch_public_file(
        self,
        reference: RepositoryReference,
        file: FileDescriptor,
        signal: Optional[CancellationToken] = None,
        token: Optional[str] = None
    ) -> bytes:
        args = (reference.owner, reference.repository, reference.git_reference, file.path)

        response = await self.gateway.request(raw_content_url(*args), token, signal=signal)
        _ensure_ok(response, file.path)

        if is_lfs_pointer(response):
            logger.debug(f"Git LFS pointer found for {file.path}, fetching media")
            response = await self.gateway.request(lfs_media_url(*args), token, signal=signal)
            _ensure_ok(response, file.path)

        return response.content

    async def fetch_private_file(
        self,
        file: FileDescriptor,
        signal: Optional[CancellationToken] = None,
        token: Optional[str] = None
    ) -> bytes:
        response = await self.gateway.request(file.url, token, signal=signal)
        _ensure_ok(response, file.path)

        payload = response.json()
        content = payload.get("content") if isinstance(payload, dict) else None
        if content is None:
            raise DownloadError(f"No content in API response for {file.path}")

        return base64.b64decode(content)


__all__ = [
    "FileDownloader",
    "is_lfs_pointer",
    "LFS_POINTER_SIGNATURE",
    "RetryStrategy",
]
