"""Core domain models.

These dataclasses are shared across the core and adapters to avoid tight
coupling to any integration-specific types.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Tuple, Union


class ResourceKind(str, Enum):
    """Media kinds the dispatcher knows how to send."""

    IMAGE = "image"
    VIDEO = "video"


@dataclass(frozen=True)
class Resource:
    """One deliverable media asset."""

    url: str
    kind: ResourceKind
    caption_source_url: str


@dataclass(frozen=True)
class ReplyMessage:
    """A composed message ready for delivery.

    A message with no resources is a plain-text reply. A message carrying an
    error is terminal: the dispatcher reports the error instead of sending.
    """

    resources: Tuple[Resource, ...] = ()
    caption: str = ""
    error: Optional[Exception] = None

    @classmethod
    def text(cls, caption: str) -> "ReplyMessage":
        return cls(resources=(), caption=caption)

    @classmethod
    def failure(cls, error: Exception) -> "ReplyMessage":
        return cls(resources=(), caption="", error=error)


@dataclass(frozen=True)
class StringId:
    value: str

    @property
    def key(self) -> str:
        return self.value


@dataclass(frozen=True)
class IntegerId:
    value: int

    @property
    def key(self) -> str:
        return str(self.value)


ItemId = Union[StringId, IntegerId]


def resolve_item_id(raw: Any, raw_string: Any = None) -> Optional[ItemId]:
    """Resolve a raw id field into an ItemId, or None when unusable.

    The string form wins when both the string and the numeric form are
    populated. Zero and empty values count as absent.
    """

    if isinstance(raw_string, str) and raw_string:
        return StringId(raw_string)
    if isinstance(raw, str) and raw:
        return StringId(raw)
    # bool is an int subclass; a JSON true/false is never a post id.
    if isinstance(raw, int) and not isinstance(raw, bool) and raw != 0:
        return IntegerId(raw)
    if isinstance(raw, float) and raw.is_integer() and raw != 0:
        return IntegerId(int(raw))
    return None


@dataclass(frozen=True)
class TrailEntry:
    """One hop of a reblog trail."""

    post_id: Optional[ItemId]


@dataclass(frozen=True)
class Post:
    """Source-side post, already decoded from the remote payload."""

    type: str
    id: ItemId
    timestamp: int
    short_url: str
    trail: Tuple[TrailEntry, ...] = ()
    photo_urls: Tuple[str, ...] = ()
    video_url: Optional[str] = None

    @property
    def canonical_id(self) -> str:
        """Identity used for dedup, preferring a reblog's original post."""

        if self.trail and self.trail[0].post_id is not None:
            return self.trail[0].post_id.key
        return self.id.key


@dataclass
class DeliveryOutcome:
    """Result of delivering one message from a fan-out."""

    message: ReplyMessage
    error: Optional[BaseException] = field(default=None)

    @property
    def ok(self) -> bool:
        return self.error is None
