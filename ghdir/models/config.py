"""
Configuration models for ghdir downloads.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional


TOKEN_ENV_VAR = "GITHUB_TOKEN"


@dataclass
class DownloadConfig:
    """
    Unified configuration for directory downloads.

    A single instance is created per run and handed to every component
    (gateway, resolver, downloader, orchestrator) at construction.
    """

    # Authentication
    token: Optional[str] = None

    # Concurrency and retry settings
    concurrency: int = 10
    max_retries: int = 3
    base_delay: float = 1.0
    max_delay: float = 30.0
    timeout: float = 300.0

    # Output settings
    as_zip: bool = False
    overwrite_existing: bool = False

    # Diagnostics
    verbose: bool = False

    def __post_init__(self) -> None:
        if self.concurrency <= 0:
            raise ValueError("concurrency must be positive")
        if self.max_retries < 0:
            raise ValueError("max_retries cannot be negative")
        if self.timeout <= 0:
            raise ValueError("timeout must be positive")

    @classmethod
    def from_env(cls, **overrides) -> "DownloadConfig":
        """Build a config, falling back to GITHUB_TOKEN for the token."""

        if not overrides.get("token"):
            overrides["token"] = os.environ.get(TOKEN_ENV_VAR) or None
        return cls(**overrides)


__all__ = [
    "DownloadConfig",
    "TOKEN_ENV_VAR",
]
