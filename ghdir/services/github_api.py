"""
HTTP gateway to the GitHub REST API and raw-content hosts.
"""

import asyncio
from typing import Optional
from urllib.parse import quote

import httpx

from ..core.cancellation import CancellationToken
from ..infrastructure.error_handler import (
    AccessForbiddenError,
    AuthenticationError,
    DownloadCancelledError,
    FetchError,
    RateLimitError,
)
from ..infrastructure.logger import logger
from ..infrastructure.rate_limiter import RateLimitInfo
from ..models import DownloadConfig


API_ROOT = "https://api.github.com"
RAW_ROOT = "https://raw.githubusercontent.com"
MEDIA_ROOT = "https://media.githubusercontent.com/media"
USER_AGENT = "GitHub-Directory-Downloader"


####
##      URL BUILDERS
#####
def escape_filepath(path: str) -> str:
    """Escape ``#`` so it is not read as a fragment marker."""

    return path.replace("#", "%23")


def repository_url(owner: str, repo: str) -> str:
    return f"{API_ROOT}/repos/{owner}/{repo}"


def commit_lookup_url(owner: str, repo: str, git_reference: str) -> str:
    return f"{API_ROOT}/repos/{owner}/{repo}/commits/{quote(git_reference, safe='/')}?per_page=1"


def zipball_url(owner: str, repo: str, git_reference: str = "") -> str:
    url = f"{API_ROOT}/repos/{owner}/{repo}/zipball"
    return f"{url}/{git_reference}" if git_reference else url


def raw_content_url(owner: str, repo: str, git_reference: str, path: str) -> str:
    return f"{RAW_ROOT}/{owner}/{repo}/{git_reference}/{escape_filepath(path)}"


def lfs_media_url(owner: str, repo: str, git_reference: str, path: str) -> str:
    return f"{MEDIA_ROOT}/{owner}/{repo}/{git_reference}/{escape_filepath(path)}"


####
##      GATEWAY
#####
class GitHubGateway:
    """
    Performs outbound HTTP calls with authentication, a fixed user agent and
    GitHub-specific status handling.

    401, exhausted rate limits and plain 403s raise; every other status,
    404 included, is returned for the caller to interpret.
    """

    def __init__(
        self,
        config: Optional[DownloadConfig] = None,
        client: Optional[httpx.AsyncClient] = None
    ):
        self.config = config or DownloadConfig()
        self._client = client
        self._owns_client = client is None
        self.rate_limit_info = RateLimitInfo()

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self.config.timeout,
                follow_redirects=True,
            )
        return self._client

    async def request(
        self,
        url: str,
        token: Optional[str] = None,
        *,
        method: str = "GET",
        signal: Optional[CancellationToken] = None
    ) -> httpx.Response:
        """
        Issue a request.

        Args:
            url: Absolute URL
            token: GitHub token sent as a bearer credential
            method: HTTP method
            signal: Batch cancellation token; aborts the call when set

        Returns:
            The response, for any status not turned into an exception

        Raises:
            AuthenticationError: On 401
            RateLimitError: On 403/429 with an exhausted rate limit
            AccessForbiddenError: On any other 403
            FetchError: On transport failures
            DownloadCancelledError: When ``signal`` is set
        """
        if signal is not None:
            signal.raise_if_cancelled()

        headers = {"User-Agent": USER_AGENT}
        if token:
            headers["Authorization"] = f"Bearer {token}"

        logger.debug(f"Fetching URL: {url}")
        try:
            response = await self._send(method, url, headers, signal)
        except httpx.HTTPError as e:
            logger.error(f"Fetch error for {url}: {e}")
            raise FetchError(f"Fetch failed: {e}", e) from e

        logger.debug(f"Response status for {url}: {response.status_code}")
        self._check_status(method, url, response)
        return response

    async def _send(
        self,
        method: str,
        url: str,
        headers: dict,
        signal: Optional[CancellationToken]
    ) -> httpx.Response:
        if signal is None:
            return await self.client.request(method, url, headers=headers)

        request_task = asyncio.ensure_future(
            self.client.request(method, url, headers=headers)
        )
        cancel_task = asyncio.ensure_future(signal.wait())
        try:
            await asyncio.wait(
                {request_task, cancel_task},
                return_when=asyncio.FIRST_COMPLETED
            )
        finally:
            for task in (request_task, cancel_task):
                if not task.done():
                    task.cancel()

        if request_task.done() and not request_task.cancelled():
            return request_task.result()

        logger.debug(f"Request aborted: {url}")
        raise DownloadCancelledError(signal.reason or "Download cancelled")

    def _check_status(self, method: str, url: str, response: httpx.Response) -> None:
        status = response.status_code
        info = RateLimitInfo.from_headers(response.headers)
        if info.remaining is not None:
            self.rate_limit_info = info

        if status == 401:
            raise AuthenticationError("Invalid token")

        if status in (403, 429):
            # See https://docs.github.com/rest/overview/rate-limits-for-the-rest-api
            if info.is_exhausted:
                reset_message = info.describe_reset()
                message = f"GitHub API rate limit exceeded. {reset_message}".strip()
                logger.error(
                    f"{message} Try using a personal access token with --token option."
                )
                raise RateLimitError(message, reset_in_minutes=info.reset_in_minutes)

            if status == 403:
                body = response.text
                logger.error(f"GitHub API returned 403 Forbidden: {body}")
                raise AccessForbiddenError(f"GitHub API access forbidden: {body}", body=body)

            return

        # Unknown references answer HEAD with 404 or 422 ("No commit found")
        if status == 404 or (status == 422 and method == "HEAD"):
            logger.debug(f"Resource not found: {url}")
        elif not response.is_success:
            logger.error(f"Unexpected response status: {status} for URL: {url}")

    async def close(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "GitHubGateway":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()


__all__ = [
    "GitHubGateway",
    "escape_filepath",
    "repository_url",
    "commit_lookup_url",
    "zipball_url",
    "raw_content_url",
    "lfs_media_url",
    "API_ROOT",
    "RAW_ROOT",
    "MEDIA_ROOT",
    "USER_AGENT",
]
