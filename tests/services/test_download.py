# tests/services/test_download.py

import base64

import httpx
import pytest

from ghdir.core.cancellation import CancellationToken
from ghdir.infrastructure.error_handler import (
    DownloadCancelledError,
    DownloadError,
    HttpStatusError,
    RetryExhaustedError,
)
from ghdir.infrastructure.retry_manager import RetryManager
from ghdir.models import DownloadConfig, FileDescriptor, RepositoryReference
from ghdir.services.download import FileDownloader, is_lfs_pointer
from ghdir.services.github_api import GitHubGateway

pytestmark = pytest.mark.asyncio


LFS_POINTER = (
    b"version https://git-lfs.github.com/spec/v1\n"
    b"oid sha256:" + b"a" * 64 + b"\n"
    b"size 12345\n"
)

PUBLIC = RepositoryReference(owner="octo", repository="proj", git_reference="main", directory="src")
PRIVATE = RepositoryReference(
    owner="octo", repository="secret", git_reference="main", directory="src", is_private=True
)


# ---- Helpers ---------------------------------------------------------------

class Routes:
    """Maps request URLs to canned responses and records every request."""

    def __init__(self, routes):
        self.routes = routes
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get(str(request.url), httpx.Response(404))
        if isinstance(route, list):
            return route.pop(0)
        return route

    @property
    def urls(self):
        return [str(r.url) for r in self.requests]


async def single_attempt(operation, on_failed_attempt=None):
    """Retry strategy that never retries."""
    return await operation()


def make_downloader(routes, retry_strategy=single_attempt, token=None):
    config = DownloadConfig(token=token)
    client = httpx.AsyncClient(transport=httpx.MockTransport(routes))
    gateway = GitHubGateway(config, client=client)
    return FileDownloader(gateway, config, retry_strategy=retry_strategy)


def raw(path):
    return f"https://raw.githubusercontent.com/octo/proj/main/{path}"


def media(path):
    return f"https://media.githubusercontent.com/media/octo/proj/main/{path}"


# ---- LFS detection ---------------------------------------------------------

async def test_lfs_pointer_fixture_is_in_detection_window():
    assert len(LFS_POINTER) == 130


async def test_is_lfs_pointer():
    assert is_lfs_pointer(httpx.Response(200, content=LFS_POINTER))
    assert not is_lfs_pointer(httpx.Response(200, content=b"x" * 130))
    assert not is_lfs_pointer(httpx.Response(200, content=LFS_POINTER + b"x" * 20))
    assert not is_lfs_pointer(httpx.Response(200, content=b"tiny"))


async def test_lfs_pointer_triggers_media_fetch():
    routes = Routes({
        raw("src/model.bin"): httpx.Response(200, content=LFS_POINTER),
        media("src/model.bin"): httpx.Response(200, content=b"\x00real-bytes"),
    })
    downloader = make_downloader(routes)

    content = await downloader.download(PUBLIC, FileDescriptor("src/model.bin", "unused"))

    assert content == b"\x00real-bytes"
    assert routes.urls == [raw("src/model.bin"), media("src/model.bin")]


async def test_non_pointer_of_same_length_is_not_refetched():
    body = b"y" * 130
    routes = Routes({raw("src/data.txt"): httpx.Response(200, content=body)})
    downloader = make_downloader(routes)

    content = await downloader.download(PUBLIC, FileDescriptor("src/data.txt", "unused"))

    assert content == body
    assert routes.urls == [raw("src/data.txt")]


async def test_failed_media_fetch_raises_status_error():
    routes = Routes({
        raw("src/model.bin"): httpx.Response(200, content=LFS_POINTER),
        media("src/model.bin"): httpx.Response(404),
    })
    downloader = make_downloader(routes)

    with pytest.raises(HttpStatusError, match="404"):
        await downloader.download(PUBLIC, FileDescriptor("src/model.bin", "unused"))


# ---- Public files ----------------------------------------------------------

async def test_public_file_path_escapes_hash():
    routes = Routes({raw("src/c%23/notes.md"): httpx.Response(200, content=b"# notes")})
    downloader = make_downloader(routes)

    content = await downloader.download(PUBLIC, FileDescriptor("src/c#/notes.md", "unused"))

    assert content == b"# notes"
    assert "%23" in routes.urls[0]


async def test_public_file_error_status():
    routes = Routes({raw("src/gone.txt"): httpx.Response(404)})
    downloader = make_downloader(routes)

    with pytest.raises(HttpStatusError) as exc_info:
        await downloader.download(PUBLIC, FileDescriptor("src/gone.txt", "unused"))

    assert exc_info.value.path == "src/gone.txt"
    assert "Not Found" in str(exc_info.value)


# ---- Private files ---------------------------------------------------------

async def test_private_file_decodes_base64_content():
    payload = b"\x89PNG binary \x00 data"
    encoded = base64.encodebytes(payload).decode()  # GitHub wraps lines
    api_url = "https://api.github.com/repos/octo/secret/git/blobs/abc"
    routes = Routes({api_url: httpx.Response(200, json={"content": encoded, "encoding": "base64"})})
    downloader = make_downloader(routes, token="tok")

    content = await downloader.download(PRIVATE, FileDescriptor("src/logo.png", api_url))

    assert content == payload
    assert routes.requests[0].headers["Authorization"] == "Bearer tok"


async def test_private_file_without_content_field():
    api_url = "https://api.github.com/repos/octo/secret/contents/src/big.bin"
    routes = Routes({api_url: httpx.Response(200, json={"encoding": "none"})})
    downloader = make_downloader(routes)

    with pytest.raises(DownloadError, match="No content"):
        await downloader.download(PRIVATE, FileDescriptor("src/big.bin", api_url))


async def test_private_file_error_status():
    api_url = "https://api.github.com/repos/octo/secret/git/blobs/missing"
    routes = Routes({api_url: httpx.Response(404)})
    downloader = make_downloader(routes)

    with pytest.raises(HttpStatusError):
        await downloader.download(PRIVATE, FileDescriptor("src/x", api_url))


# ---- Retry policy ----------------------------------------------------------

async def test_retries_until_success(caplog):
    routes = Routes({raw("src/flaky.txt"): [
        httpx.Response(502),
        httpx.Response(503),
        httpx.Response(200, content=b"finally"),
    ]})
    downloader = make_downloader(routes, retry_strategy=RetryManager(max_retries=3, base_delay=0.0, jitter=False))

    with caplog.at_level("WARNING", logger="ghdir"):
        content = await downloader.download(PUBLIC, FileDescriptor("src/flaky.txt", "unused"))

    assert content == b"finally"
    assert len(routes.requests) == 3
    assert "Error downloading src/flaky.txt. Attempt 1. 3 retries left." in caplog.text
    assert "Attempt 2. 2 retries left." in caplog.text


async def test_exhausted_retries_surface_last_error():
    routes = Routes({raw("src/broken.txt"): httpx.Response(500)})
    downloader = make_downloader(routes, retry_strategy=RetryManager(max_retries=2, base_delay=0.0, jitter=False))

    with pytest.raises(RetryExhaustedError) as exc_info:
        await downloader.download(PUBLIC, FileDescriptor("src/broken.txt", "unused"))

    assert len(routes.requests) == 3
    assert isinstance(exc_info.value.last_error, HttpStatusError)


async def test_cancelled_download_is_not_retried():
    routes = Routes({raw("src/a.txt"): httpx.Response(200, content=b"a")})
    downloader = make_downloader(routes, retry_strategy=RetryManager(max_retries=3, base_delay=0.0))
    signal = CancellationToken()
    signal.cancel()

    with pytest.raises(DownloadCancelledError):
        await downloader.download(PUBLIC, FileDescriptor("src/a.txt", "unused"), signal)

    assert routes.requests == []


async def test_default_retry_strategy_follows_config():
    config = DownloadConfig(max_retries=7, base_delay=0.5, max_delay=4.0)
    gateway = GitHubGateway(config, client=httpx.AsyncClient(transport=httpx.MockTransport(Routes({}))))

    downloader = FileDownloader(gateway)

    assert isinstance(downloader.retry_strategy, RetryManager)
    assert downloader.retry_strategy.max_retries == 7
    assert downloader.retry_strategy.base_delay == 0.5
    assert downloader.retry_strategy.max_delay == 4.0
