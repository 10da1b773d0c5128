"""
Python API for downloading GitHub directories.

Typical use::

    async with GitHubDirectoryDownloader(DownloadConfig(token="...")) as gh:
        summary = await gh.download("https://github.com/octo/proj/tree/main/src")
"""

import dataclasses
from pathlib import Path
from typing import List, Optional, Union

from ..core.orchestrator import DownloadOrchestrator, ProgressCallback
from ..core.resolver import ReferenceResolver
from ..infrastructure.error_handler import WholeRepositoryError
from ..infrastructure.logger import level_for, logger
from ..infrastructure.rate_limiter import RateLimitInfo
from ..models import (
    BatchResult,
    DownloadConfig,
    DownloadSummary,
    FileDescriptor,
    ProgressInfo,
    RepositoryReference,
)
from ..services.directory_lister import DirectoryLister, PyGithubDirectoryLister
from ..services.download import FileDownloader
from ..services.github_api import GitHubGateway
from ..services.storage import DiskWriter, ZipPackager, prepare_destination


PathLike = Union[str, Path]


class GitHubDirectoryDownloader:
    """
    High-level entry point tying resolution, listing, downloading and
    persistence together.
    """

    def __init__(
        self,
        config: Optional[DownloadConfig] = None,
        *,
        gateway: Optional[GitHubGateway] = None,
        lister: Optional[DirectoryLister] = None,
        auth_token: Optional[str] = None,
        verbose: Optional[bool] = None
    ):
        self.config = dataclasses.replace(config) if config is not None else DownloadConfig.from_env()
        if auth_token:
            self.config.token = auth_token
        if verbose is not None:
            self.config.verbose = verbose
        self.set_verbose(self.config.verbose)

        self.gateway = gateway or GitHubGateway(self.config)
        self.resolver = ReferenceResolver(self.gateway, self.config)
        self.lister = lister or PyGithubDirectoryLister(self.config)
        self.downloader = FileDownloader(self.gateway, self.config)
        self.orchestrator = DownloadOrchestrator(self.downloader, self.config)

    @property
    def auth_token(self) -> Optional[str]:
        return self.config.token

    def set_verbose(self, verbose: bool) -> None:
        self.verbose = verbose
        self.config.verbose = verbose
        logger.setLevel(level_for(verbose))

    async def resolve(self, url: str) -> RepositoryReference:
        return await self.resolver.resolve(url, self.config.token)

    async def list_files(self, reference: RepositoryReference) -> List[FileDescriptor]:
        return await self.lister.list_files(reference, self.config.token)

    async def download(
        self,
        url: str,
        destination: Optional[PathLike] = None,
        *,
        as_zip: Optional[bool] = None,
        force: Optional[bool] = None,
        on_progress: Optional[ProgressCallback] = None
    ) -> DownloadSummary:
        """
        Resolve ``url`` and download the directory it names.

        Raises:
            ResolutionError: When the URL cannot be resolved
            WholeRepositoryError: When the URL names a whole repository
            DestinationError: When the destination cannot be written
        """
        reference = await self.resolve(url)
        return await self.download_reference(
            reference, destination, as_zip=as_zip, force=force, on_progress=on_progress
        )

    async def download_reference(
        self,
        reference: RepositoryReference,
        destination: Optional[PathLike] = None,
        *,
        as_zip: Optional[bool] = None,
        force: Optional[bool] = None,
        on_progress: Optional[ProgressCallback] = None
    ) -> DownloadSummary:
        """
        Download an already resolved directory.

        ``on_progress`` receives (0, total) once the files are listed and
        (completed, total) after every file.
        """
        if reference.is_whole_repository:
            raise WholeRepositoryError(reference)

        as_zip = self.config.as_zip if as_zip is None else as_zip
        force = self.config.overwrite_existing if force is None else force

        if as_zip:
            packager = ZipPackager(Path(destination) if destination else Path.cwd(), reference)
            output_path = packager.prepare(force)
        else:
            output_path = prepare_destination(
                self._default_destination(reference, destination), force
            )

        summary = DownloadSummary(
            reference=reference, batch=BatchResult(), output_path=output_path
        )

        files = await self.list_files(reference)
        if not files:
            logger.info("No files to download")
            summary.mark_completed()
            return summary

        if on_progress is not None:
            on_progress(0, len(files))

        summary.batch = await self.orchestrator.download_all(
            reference, files, token=self.config.token, on_progress=on_progress
        )

        if summary.batch.was_cancelled:
            logger.warning("Download cancelled, nothing was written")
        elif as_zip:
            await packager.save(summary.batch.results)
            summary.written_files = [output_path]
        else:
            writer = DiskWriter(output_path, reference.directory_prefix)
            summary.written_files = await writer.save(summary.batch.results)

        summary.mark_completed()
        logger.debug(
            f"Downloaded {summary.batch.succeeded}/{summary.batch.total} files "
            f"in {summary.duration_seconds:.2f}s"
        )
        return summary

    @staticmethod
    def _default_destination(
        reference: RepositoryReference,
        destination: Optional[PathLike]
    ) -> Path:
        if destination:
            return Path(destination)
        name = reference.directory.split("/")[-1] or reference.repository
        return Path(".") / name

    def cancel_current_download(self) -> bool:
        return self.orchestrator.cancel()

    def get_download_progress(self) -> Optional[ProgressInfo]:
        return self.orchestrator.get_current_progress()

    def get_rate_limit_info(self) -> RateLimitInfo:
        """Rate limit state from the most recent API response."""

        return self.gateway.rate_limit_info

    async def close(self) -> None:
        await self.gateway.close()

    async def __aenter__(self) -> "GitHubDirectoryDownloader":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()


__all__ = [
    "GitHubDirectoryDownloader",
    "DownloadConfig",
]
