"""
Persistence of downloaded files: loose files on disk or a zip archive.
"""

import asyncio
import zipfile
from pathlib import Path
from typing import Iterable, List

from ..infrastructure.error_handler import DestinationError
from ..infrastructure.logger import logger
from ..models import FileDownloadResult, RepositoryReference


def strip_prefix(path: str, prefix: str) -> str:
    """Path of a file relative to the downloaded directory."""

    if prefix and path.startswith(prefix):
        return path[len(prefix):]
    return path


def prepare_destination(destination: Path, force: bool = False) -> Path:
    """
    Make sure ``destination`` can receive files.

    Raises:
        DestinationError: When it is a file, or a non-empty directory and
            ``force`` is not set
    """
    if destination.exists():
        if not destination.is_dir():
            raise DestinationError(f"Destination {destination} exists and is not a directory")
        if not force and any(destination.iterdir()):
            raise DestinationError(
                f"Destination directory {destination} is not empty. Use --force to overwrite."
            )
    else:
        destination.mkdir(parents=True, exist_ok=True)
    return destination


def default_archive_name(reference: RepositoryReference) -> str:
    name = f"{reference.owner}-{reference.repository}-{reference.git_reference}"
    if reference.directory:
        name += "-" + reference.directory.replace("/", "-")
    return f"{name}.zip"


class DiskWriter:
    """Writes downloaded files under a destination directory."""

    def __init__(self, destination: Path, directory_prefix: str = ""):
        self.destination = Path(destination)
        self.directory_prefix = directory_prefix

    def target_path(self, path: str) -> Path:
        return self.destination / strip_prefix(path, self.directory_prefix)

    def write(self, result: FileDownloadResult) -> Path:
        target = self.target_path(result.file.path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(result.content or b"")
        return target

    async def save(self, results: Iterable[FileDownloadResult]) -> List[Path]:
        results = [r for r in results if r.ok]
        written = await asyncio.to_thread(lambda: [self.write(r) for r in results])
        logger.debug(f"Wrote {len(written)} files to {self.destination}")
        return written


class ZipPackager:
    """Packs downloaded files into a single zip archive."""

    def __init__(self, output: Path, reference: RepositoryReference):
        output = Path(output)
        if output.suffix.lower() == ".zip":
            self.archive_path = output
        else:
            self.archive_path = output / default_archive_name(reference)
        self.directory_prefix = reference.directory_prefix

    def prepare(self, force: bool = False) -> Path:
        if self.archive_path.exists() and not force:
            raise DestinationError(
                f"Archive {self.archive_path} already exists. Use --force to overwrite."
            )
        self.archive_path.parent.mkdir(parents=True, exist_ok=True)
        return self.archive_path

    def _write_archive(self, results: List[FileDownloadResult]) -> Path:
        with zipfile.ZipFile(self.archive_path, "w", compression=zipfile.ZIP_DEFLATED) as archive:
            for result in results:
                archive.writestr(
                    strip_prefix(result.file.path, self.directory_prefix),
                    result.content or b""
                )
        return self.archive_path

    async def save(self, results: Iterable[FileDownloadResult]) -> Path:
        results = [r for r in results if r.ok]
        path = await asyncio.to_thread(self._write_archive, results)
        logger.debug(f"Packed {len(results)} files into {path}")
        return path


__all__ = [
    "DiskWriter",
    "ZipPackager",
    "prepare_destination",
    "default_archive_name",
    "strip_prefix",
]
