"""
Command line interface: ``ghdir [download] URL`` and ``ghdir clone URL [DEST]``.
"""

import argparse
import asyncio
import sys
from pathlib import Path
from typing import List, Optional

from rich.logging import RichHandler

from .. import __version__
from ..infrastructure.error_handler import DownloadError, ResolutionError, WholeRepositoryError
from ..infrastructure.logger import configure_logging
from ..models import DownloadConfig, DownloadSummary, RepositoryReference
from .api import GitHubDirectoryDownloader
from .console import ConsoleReporter


COMMANDS = ("download", "clone")


def _add_common_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("-t", "--token", help="GitHub personal access token for private repos (default: $GITHUB_TOKEN)")
    parser.add_argument("-c", "--concurrency", type=int, default=10, help="Number of concurrent downloads")
    parser.add_argument("-f", "--force", action="store_true", help="Overwrite existing files")
    parser.add_argument("-d", "--debug", action="store_true", help="Enable debug output")
    parser.add_argument("-p", "--plain", action="store_true", help="Display plain output without boxes")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ghdir",
        description="Download GitHub directories directly from terminal",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    subparsers = parser.add_subparsers(dest="command")

    download = subparsers.add_parser("download", help="Download a GitHub directory (default command)")
    download.add_argument("url", help="GitHub URL of the directory to download")
    download.add_argument("-o", "--output", help="Output directory or zip file")
    download.add_argument("-z", "--zip", action="store_true", help="Download as zip file instead of extracting files")
    _add_common_options(download)

    clone = subparsers.add_parser("clone", help="Clone a GitHub directory to a specific folder")
    clone.add_argument("url", help="GitHub URL of the directory to clone")
    clone.add_argument("destination", nargs="?", help="Destination folder (defaults to the directory name)")
    _add_common_options(clone)

    return parser


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    argv = list(sys.argv[1:] if argv is None else argv)
    # "download" is the default command
    if argv and argv[0] not in COMMANDS and argv[0] not in ("-h", "--help", "--version"):
        argv = ["download", *argv]
    args = build_parser().parse_args(argv)
    if args.command is None:
        build_parser().error("a GitHub URL is required")
    return args


def build_config(args: argparse.Namespace) -> DownloadConfig:
    return DownloadConfig.from_env(
        token=args.token,
        concurrency=args.concurrency,
        as_zip=getattr(args, "zip", False),
        overwrite_existing=args.force,
        verbose=args.debug,
    )


def _describe_reference(console: ConsoleReporter, reference: RepositoryReference) -> None:
    console.summary([
        f"Repository: {reference.display_name}",
        f"Branch: {reference.git_reference or 'default'}",
        f"Directory: /{reference.directory}",
    ])


def _report(console: ConsoleReporter, summary: DownloadSummary, as_zip: bool) -> int:
    batch = summary.batch
    for result in batch.failed_results:
        console.error(f"Error downloading {result.file.path}: {result.error}")

    if batch.was_cancelled:
        console.error("Download cancelled", boxed=True)
        return 1

    action = "created ZIP archive" if as_zip else "downloaded GitHub directory"
    console.summary([
        f"Successfully {action}!" if batch.is_successful else f"Finished with {batch.failed} failed files",
        f"Downloaded {batch.succeeded}/{batch.total} files",
        f"Location: {Path(summary.output_path).resolve()}",
    ])
    return 0 if batch.is_successful else 1


async def run(args: argparse.Namespace, console: Optional[ConsoleReporter] = None) -> int:
    """Execute a parsed command; returns the process exit code."""

    console = console or ConsoleReporter(plain=args.plain)
    configure_logging(args.debug, RichHandler(console=console.console, show_path=False))

    if "github.com" not in args.url:
        console.error("URL must be a GitHub URL", boxed=True)
        return 1

    config = build_config(args)
    destination = args.output if args.command == "download" else args.destination

    async with GitHubDirectoryDownloader(config) as downloader:
        try:
            with console.console.status("Analyzing repository..."):
                reference = await downloader.resolve(args.url)
            if reference.is_whole_repository:
                raise WholeRepositoryError(reference)

            _describe_reference(console, reference)

            with console.progress() as progress:
                task = progress.add_task("Fetching file list...", total=None)

                def on_progress(completed: int, total: int) -> None:
                    progress.update(task, description="Downloading", completed=completed, total=total)

                summary = await downloader.download_reference(
                    reference, destination, on_progress=on_progress
                )

        except ResolutionError as e:
            console.error(f"Error: {e.code.value}", boxed=True)
            console.error(e.code.description)
            return 1

        except WholeRepositoryError as e:
            console.info(str(e), boxed=True)
            console.warning(
                "This tool is designed to download specific directories. "
                "Please specify a directory within the repository.",
                boxed=True,
            )
            console.info(f"Repository archive: {e.reference.download_url}")
            return 1

        except DownloadError as e:
            console.error(f"Error: {e}", boxed=True)
            return 1

    if summary.nothing_to_do:
        console.info("No files to download", boxed=True)
        return 0

    return _report(console, summary, config.as_zip)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    try:
        return asyncio.run(run(args))
    except KeyboardInterrupt:
        return 130


if __name__ == "__main__":
    sys.exit(main())
