from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


class Classification(str, Enum):
    ANNOUNCEMENT = "announcement"
    GENERIC = "generic"
    IRRELEVANT = "irrelevant"


class RunMode(str, Enum):
    REAL = "real"
    TEST = "test"


class RunStatus(str, Enum):
    SKIPPED_DUPLICATE = "skipped_duplicate"
    NOTIFIED = "notified"
    LOGGED_ONLY = "logged_only"
    FAILED = "failed"


@dataclass(frozen=True)
class FeedItem:
    """
    The newest entry of the feed, reduced to what the pipeline needs.

    `id` is the entry guid (or its link when the feed carries no guid) and is
    what the dedup store remembers between runs.
    """
    id: str
    title: str
    summary: str
    link: str
    published: Optional[str] = None


@dataclass(frozen=True)
class NotificationRequest:
    title: str
    link: str
    severity: RunMode = RunMode.REAL

    @classmethod
    def from_item(cls, item: FeedItem, mode: RunMode) -> "NotificationRequest":
        return cls(title=item.title, link=item.link, severity=mode)


@dataclass
class RunResult:
    """Outcome of one pipeline run."""
    status: RunStatus
    item: Optional[FeedItem] = None
    classification: Optional[Classification] = None
    notified: bool = False
    persisted: bool = False
    warnings: List[str] = field(default_factory=list)
    error: Optional[str] = None
