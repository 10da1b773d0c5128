"""
Exception taxonomy for ghdir and translation of third-party API errors.
"""

import functools
from typing import Any, Callable, Optional, TypeVar

import httpx
import requests
from github import GithubException, RateLimitExceededException

from ..models import RepositoryReference, ResolutionErrorCode


F = TypeVar("F", bound=Callable[..., Any])


class DownloadError(Exception):
    """Base exception for every ghdir failure."""

    def __init__(self, message: str, original_error: Optional[BaseException] = None):
        self.message = message
        self.original_error = original_error
        super().__init__(message)

    def __str__(self) -> str:
        if self.original_error is not None:
            return f"{self.message} (Original: {self.original_error})"
        return self.message


class AuthenticationError(DownloadError):
    """GitHub rejected the supplied token."""


class RateLimitError(DownloadError):
    """GitHub API rate limit exhausted."""

    def __init__(
        self,
        message: str,
        reset_in_minutes: Optional[int] = None,
        original_error: Optional[BaseException] = None
    ):
        super().__init__(message, original_error)
        self.reset_in_minutes = reset_in_minutes


class AccessForbiddenError(DownloadError):
    """GitHub answered 403 for a reason other than rate limiting."""

    def __init__(
        self,
        message: str,
        body: str = "",
        original_error: Optional[BaseException] = None
    ):
        super().__init__(message, original_error)
        self.body = body


class ResolutionError(DownloadError):
    """A GitHub URL could not be resolved to a repository directory."""

    def __init__(self, code: ResolutionErrorCode):
        super().__init__(code.description)
        self.code = code


class HttpStatusError(DownloadError):
    """A file request came back with a non-2xx status."""

    def __init__(self, path: str, status_code: int, reason: str = ""):
        reason = f" {reason}" if reason else ""
        super().__init__(f"HTTP {status_code}{reason} for {path}")
        self.path = path
        self.status_code = status_code


class FetchError(DownloadError):
    """Network-level failure (DNS, TLS, connection reset, timeout)."""


TransportError = FetchError


class RetryExhaustedError(DownloadError):
    """Every attempt of a retried operation failed."""

    def __init__(self, last_error: BaseException, attempts: int):
        super().__init__(f"All {attempts} attempts failed: {last_error}")
        self.last_error = last_error
        self.attempts = attempts


class DownloadCancelledError(DownloadError):
    """The batch was cancelled before or during this operation."""

    def __init__(self, message: str = "Download cancelled"):
        super().__init__(message)


class ListingError(DownloadError):
    """Directory enumeration failed."""


class DestinationError(DownloadError):
    """The local destination cannot receive the download."""


class WholeRepositoryError(DownloadError):
    """The URL names a whole repository instead of a directory."""

    def __init__(self, reference: RepositoryReference):
        super().__init__(
            "The URL points to an entire repository, not a specific directory"
        )
        self.reference = reference


def _github_message(error: GithubException) -> str:
    data = getattr(error, "data", None)
    if isinstance(data, dict) and data.get("message"):
        return str(data["message"])
    return str(error)


def handle_api_error(func: F) -> F:
    """
    Translate PyGithub, requests and httpx exceptions raised by ``func`` into the
    ghdir exception taxonomy. ghdir exceptions pass through untouched.
    """

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)

        except DownloadError:
            raise

        except GithubException as e:
            message = _github_message(e)
            status = getattr(e, "status", None)

            if status == 401:
                raise AuthenticationError("Invalid token", e) from e

            if isinstance(e, RateLimitExceededException) or (
                status in (403, 429) and "rate limit" in str(e).lower()
            ):
                raise RateLimitError("GitHub API rate limit exceeded", original_error=e) from e

            if status == 403:
                raise AccessForbiddenError(
                    f"GitHub API access forbidden: {message}", body=message, original_error=e
                ) from e

            if status == 404:
                raise ListingError(f"Not found: {message}", e) from e

            raise ListingError(f"GitHub API error ({status}): {message}", e) from e

        except httpx.HTTPError as e:
            raise FetchError(f"Fetch failed: {e}", e) from e

        # PyGithub talks to the API through requests
        except requests.RequestException as e:
            raise FetchError(f"Fetch failed: {e}", e) from e

    return wrapper  # type: ignore[return-value]


__all__ = [
    "DownloadError",
    "AuthenticationError",
    "RateLimitError",
    "AccessForbiddenError",
    "ResolutionError",
    "HttpStatusError",
    "FetchError",
    "TransportError",
    "RetryExhaustedError",
    "DownloadCancelledError",
    "ListingError",
    "DestinationError",
    "WholeRepositoryError",
    "handle_api_error",
]
