"""Core data models for QasaWatcher."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Generic, List, TypeVar


@dataclass(frozen=True)
class Listing:
    """Represents a rental ad returned by the Qasa search API."""

    listing_id: str
    title: str
    description: str
    rent: int
    image_url: str
    link: str
    location: str
    room_count: float
    start_date: str
    square_meters: int
    currency: str = "NOK"


TAdded = TypeVar("TAdded")


@dataclass
class DiffResult(Generic[TAdded]):
    """Holds the result of comparing a batch against the seen identifiers."""

    added: List[TAdded]
    unchanged: List[TAdded]


@dataclass(frozen=True)
class Embed:
    """Rich card attached to a chat message."""

    title: str
    url: str
    description: str
    color: int
    image_url: str
    timestamp: str

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "title": self.title,
            "url": self.url,
            "description": self.description,
            "color": self.color,
            "timestamp": self.timestamp,
        }
        if self.image_url:
            payload["image"] = {"url": self.image_url}
        return payload


@dataclass(frozen=True)
class NotificationMessage:
    """Plain-text prefix plus a single embed."""

    content: str
    embed: Embed

    def to_payload(self) -> Dict[str, Any]:
        return {"content": self.content, "embeds": [self.embed.to_payload()]}


@dataclass
class CycleSummary:
    """Aggregated result returned by a bootstrap or polling cycle."""

    executed_at: str
    phase: str
    status: str
    fetched: int = 0
    announced: List[Listing] = field(default_factory=list)
    delivered: int = 0
    failed: int = 0
    skipped: int = 0
