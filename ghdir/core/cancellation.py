"""
Cooperative cancellation shared by every download of a batch.
"""

import asyncio
from typing import Optional

from ..infrastructure.error_handler import DownloadCancelledError


class CancellationToken:
    """
    One-shot cancellation signal. The first ``cancel`` wins; later calls are
    ignored. Must be used from a single event loop.
    """

    def __init__(self) -> None:
        self._event = asyncio.Event()
        self.reason: Optional[str] = None

    @property
    def is_cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self, reason: str = "Download cancelled") -> bool:
        """Set the token. Returns False when it was already set."""

        if self._event.is_set():
            return False
        self.reason = reason
        self._event.set()
        return True

    async def wait(self) -> None:
        await self._event.wait()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise DownloadCancelledError(self.reason or "Download cancelled")


__all__ = [
    "CancellationToken",
]
