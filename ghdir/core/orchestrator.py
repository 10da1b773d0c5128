"""
Orchestrator for downloading a list of files with bounded concurrency,
per-file error isolation and cooperative cancellation.
"""

import asyncio
from typing import Callable, Iterable, List, Optional

from ..infrastructure.error_handler import DownloadCancelledError
from ..infrastructure.logger import logger
from ..models import (
    BatchResult,
    DownloadConfig,
    FileDescriptor,
    FileDownloadResult,
    ProgressInfo,
    RepositoryReference,
)
from ..services.download import FileDownloader
from .cancellation import CancellationToken
from .pool import TaskPool


ProgressCallback = Callable[[int, int], None]


####
##      DOWNLOAD ORCHESTRATOR
#####
class DownloadOrchestrator:
    """
    Fans a file list out to the ``FileDownloader``.

    A failing file never stops its siblings; it is recorded as failed once
    its retries are exhausted. Only ``cancel`` (or setting the batch's
    cancellation token) stops the batch: in-flight downloads are aborted
    and downloads that have not started are skipped.
    """

    def __init__(
        self,
        downloader: FileDownloader,
        config: Optional[DownloadConfig] = None,
        pool_factory: Callable[[int], TaskPool] = TaskPool
    ):
        self.downloader = downloader
        self.config = config or downloader.config
        self.max_concurrent_downloads = self.config.concurrency
        self._pool_factory = pool_factory

        # State of the running batch
        self._pool: Optional[TaskPool] = None
        self._cancellation: Optional[CancellationToken] = None
        self._progress: Optional[ProgressInfo] = None

    @property
    def is_running(self) -> bool:
        return self._pool is not None

    async def download_all(
        self,
        reference: RepositoryReference,
        files: Iterable[FileDescriptor],
        *,
        token: Optional[str] = None,
        concurrency: Optional[int] = None,
        signal: Optional[CancellationToken] = None,
        on_progress: Optional[ProgressCallback] = None
    ) -> BatchResult:
        """
        Download every file.

        Args:
            reference: Resolved repository reference
            files: Files to download, scheduled in this order
            token: GitHub token (config token when None)
            concurrency: Maximum simultaneous downloads (config value when None)
            signal: Cancellation token for the batch; a fresh one when None
            on_progress: Called with (completed, total) after each file
                succeeds or exhausts its retries

        Returns:
            BatchResult with one result per file, in input order
        """
        if self.is_running:
            raise RuntimeError("A download batch is already running")

        files = list(files)
        concurrency = concurrency or self.max_concurrent_downloads
        token = token if token is not None else self.config.token

        self._cancellation = signal or CancellationToken()
        self._progress = ProgressInfo(total_files=len(files))
        self._pool = self._pool_factory(concurrency)

        logger.debug(
            f"Downloading {len(files)} files from "
            f"{reference.display_name}@{reference.git_reference or 'default'} "
            f"with concurrency {concurrency}"
        )

        async def worker(file: FileDescriptor) -> FileDownloadResult:
            return await self._download_single_file(reference, file, token, on_progress)

        watcher = asyncio.create_task(self._cancel_on_signal())
        try:
            outcomes = await self._pool.map(worker, files)
            results = [
                self._to_result(file, outcome)
                for file, outcome in zip(files, outcomes)
            ]
            batch = BatchResult(
                results=results,
                was_cancelled=self._cancellation.is_cancelled
            )
            logger.debug(
                f"Download completed: {batch.succeeded} successful, "
                f"{batch.failed} failed, {batch.cancelled} cancelled"
            )
            return batch

        finally:
            watcher.cancel()
            self.reset_state()

    async def _cancel_on_signal(self) -> None:
        signal = self._cancellation
        pool = self._pool
        await signal.wait()
        pool.cancel()

    async def _download_single_file(
        self,
        reference: RepositoryReference,
        file: FileDescriptor,
        token: Optional[str],
        on_progress: Optional[ProgressCallback]
    ) -> FileDownloadResult:
        signal = self._cancellation
        if signal.is_cancelled:
            return FileDownloadResult.cancelled(file, DownloadCancelledError(signal.reason))

        try:
            content = await self.downloader.download(reference, file, signal, token)
        except DownloadCancelledError as e:
            return FileDownloadResult.cancelled(file, e)
        except Exception as e:
            logger.error(f"Error downloading {file.path}: {e}")
            result = FileDownloadResult.failed(file, e)
        else:
            logger.debug(f"Downloaded {file.path} ({len(content)} bytes)")
            result = FileDownloadResult.completed(file, content)

        self._progress.complete_file(file.path, result.size)
        if on_progress is not None:
            on_progress(self._progress.completed_files, self._progress.total_files)
        return result

    @staticmethod
    def _to_result(file: FileDescriptor, outcome) -> FileDownloadResult:
        if isinstance(outcome, FileDownloadResult):
            return outcome
        if isinstance(outcome, asyncio.CancelledError):
            return FileDownloadResult.cancelled(file, DownloadCancelledError())
        return FileDownloadResult.failed(file, outcome)

    def cancel(self, reason: str = "Download cancelled by user") -> bool:
        """
        Cancel the running batch.

        Returns:
            True when a running batch was cancelled by this call
        """
        if not self.is_running:
            logger.warning("No active download to cancel")
            return False

        if not self._cancellation.cancel(reason):
            return False

        self._pool.cancel()
        logger.info(reason)
        return True

    def get_current_progress(self) -> Optional[ProgressInfo]:
        """Snapshot of the running batch's progress, or None when idle."""

        if self._progress is None:
            return None

        progress = self._progress
        return ProgressInfo(
            total_files=progress.total_files,
            completed_files=progress.completed_files,
            downloaded_bytes=progress.downloaded_bytes,
            current_file=progress.current_file,
            started_at=progress.started_at,
        )

    def reset_state(self) -> None:
        self._pool = None
        self._cancellation = None
        self._progress = None


__all__ = [
    "DownloadOrchestrator",
    "ProgressCallback",
]
