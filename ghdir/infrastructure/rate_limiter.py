"""
GitHub rate-limit header parsing.
"""

import math
import time
from dataclasses import dataclass
from typing import Mapping, Optional


@dataclass
class RateLimitInfo:
    """Rate limit state as reported by GitHub response headers."""

    limit: Optional[int] = None
    remaining: Optional[int] = None
    used: Optional[int] = None
    reset_timestamp: Optional[float] = None  # epoch seconds

    @classmethod
    def from_headers(cls, headers: Mapping[str, str]) -> "RateLimitInfo":
        lowered = {key.lower(): value for key, value in headers.items()}

        def _int(name: str) -> Optional[int]:
            value = lowered.get(name)
            try:
                return int(value) if value is not None else None
            except ValueError:
                return None

        reset = _int("x-ratelimit-reset")
        return cls(
            limit=_int("x-ratelimit-limit"),
            remaining=_int("x-ratelimit-remaining"),
            used=_int("x-ratelimit-used"),
            reset_timestamp=float(reset) if reset is not None else None,
        )

    @property
    def is_exhausted(self) -> bool:
        return self.remaining == 0

    @property
    def reset_in_seconds(self) -> float:
        if self.reset_timestamp is None:
            return 0.0
        return max(0.0, self.reset_timestamp - time.time())

    @property
    def reset_in_minutes(self) -> Optional[int]:
        if self.reset_timestamp is None:
            return None
        return math.ceil(self.reset_in_seconds / 60)

    def describe_reset(self) -> str:
        minutes = self.reset_in_minutes
        if minutes is None:
            return ""
        unit = "minute" if minutes == 1 else "minutes"
        return f"Rate limit will reset in approximately {minutes} {unit}."


__all__ = [
    "RateLimitInfo",
]
