"""Core configuration dataclasses.

We keep config parsing outside the core, but these dataclasses define the
shape the core expects so adapters and app layers can build safely.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

DEFAULT_API_URL = "https://api.tumblr.com/v2/blog/{source}.tumblr.com/posts?api_key={api_key}"


@dataclass(frozen=True)
class DedupConfig:
    """Lifetime of dedup entries and how often expired ones are purged."""

    ttl_hours: float = 24.0
    purge_hours: float = 1.0

    @property
    def ttl_seconds(self) -> float:
        return self.ttl_hours * 3600

    @property
    def purge_seconds(self) -> float:
        return self.purge_hours * 3600


@dataclass(frozen=True)
class FetcherConfig:
    """Settings consumed by the timeline fetcher."""

    api_key: str
    api_url: str = DEFAULT_API_URL


@dataclass(frozen=True)
class DeliveryConfig:
    """Limits applied by the delivery dispatcher."""

    caption_max_chars: int = 191
    max_album_size: int = 10


@dataclass(frozen=True)
class Subscription:
    """A chat and the sources it follows."""

    subscriber: str
    follows: Tuple[str, ...]
    alias: Optional[str] = None
