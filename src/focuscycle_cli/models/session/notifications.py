"""Notification and activity-log contracts used by the session controller."""

from __future__ import annotations

import hashlib
from dataclasses import dataclass, field
from typing import Any, Protocol

from .constants import LOG_SOURCE


@dataclass(frozen=True)
class SessionEvent:
    """User-visible event emitted on a phase transition or audio cue."""

    name: str
    payload: dict[str, Any] = field(default_factory=dict)


class NotificationPort(Protocol):
    """Fire-and-forget channel for alerts and audio cues."""

    def notify(self, event: SessionEvent) -> None: ...


@dataclass
class ActivityEntry:
    """One record in the activity log."""

    label: str
    description: str
    timestamp: int  # epoch ms
    source: str = LOG_SOURCE
    tags: list[str] = field(default_factory=list)
    id: int | None = None

    @property
    def fingerprint(self) -> str:
        return entry_fingerprint(self.label, self.description, self.timestamp)


class ActivityLog(Protocol):
    """Append-only sink for logged work and break entries."""

    def append(self, entry: ActivityEntry) -> None: ...

    def recent(self, source: str, limit: int) -> list[ActivityEntry]: ...


def entry_fingerprint(label: str, description: str, timestamp_ms: int) -> str:
    """Stable hash of label, description and the timestamp's minute."""
    minute = timestamp_ms // 60_000
    raw = "\x1f".join((label, description, str(minute)))
    return hashlib.sha256(raw.encode("utf-8")).hexdigest()
