"""In-memory scrape event log with session reports and JSON export.

The log is a ring buffer: once ``max_logs`` entries are held, the oldest is
dropped for each new one. A session starts at the most recent
``("system", "start")`` entry. Each entry is also mirrored to the
``acquisition.scrape`` logger.
"""

from __future__ import annotations

import json
import logging
from collections import deque
from collections.abc import Callable
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any

scrape_logger = logging.getLogger("acquisition.scrape")

SYSTEM_CATEGORY = "system"
MAX_LOGS = 500
# Entries returned when no session marker is present
_FALLBACK_RECENT = 50


class ScrapeEvent(str, Enum):
    START = "start"
    SUCCESS = "success"
    RETRY = "retry"
    FAILED = "failed"
    CACHED = "cached"


@dataclass
class ScrapeLogEntry:
    timestamp: str
    category: str
    event: str
    details: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ScrapeEventLog:
    """Bounded log of scrape transitions."""

    def __init__(
        self,
        max_logs: int = MAX_LOGS,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._entries: deque[ScrapeLogEntry] = deque(maxlen=max_logs)
        self._clock = clock

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def max_logs(self) -> int:
        return self._entries.maxlen or MAX_LOGS

    def log(
        self,
        category: str,
        event: ScrapeEvent | str,
        details: dict[str, Any] | None = None,
    ) -> ScrapeLogEntry:
        event = ScrapeEvent(event)
        entry = ScrapeLogEntry(
            timestamp=self._clock().isoformat(),
            category=category,
            event=event.value,
            details=dict(details or {}),
        )
        self._entries.append(entry)

        level = logging.WARNING if event is ScrapeEvent.FAILED else logging.INFO
        scrape_logger.log(
            level,
            "%s:%s %s",
            category,
            event.value,
            entry.details,
            extra={"category": category, "event": event.value},
        )
        return entry

    def get_logs(self) -> list[ScrapeLogEntry]:
        return list(self._entries)

    def get_recent_logs(self) -> list[ScrapeLogEntry]:
        """Entries of the current session, or the last 50 if none was started."""
        entries = list(self._entries)
        for position in range(len(entries) - 1, -1, -1):
            entry = entries[position]
            if entry.category == SYSTEM_CATEGORY and entry.event == ScrapeEvent.START.value:
                return entries[position:]
        return entries[-_FALLBACK_RECENT:]

    def get_report(self) -> dict[str, Any]:
        recent = self.get_recent_logs()
        by_event = {event.value: 0 for event in ScrapeEvent}
        by_category: dict[str, dict[str, Any]] = {}
        errors: list[dict[str, str]] = []

        for entry in recent:
            by_event[entry.event] = by_event.get(entry.event, 0) + 1

            summary = by_category.setdefault(entry.category, {"events": [], "last_status": None})
            summary["events"].append(entry.event)
            summary["last_status"] = entry.event

            if entry.event == ScrapeEvent.FAILED.value or entry.details.get("error"):
                errors.append({
                    "category": entry.category,
                    "error": str(
                        entry.details.get("error")
                        or entry.details.get("message")
                        or "Unknown error"
                    ),
                    "timestamp": entry.timestamp,
                })

        return {
            "total_logs": len(recent),
            "by_category": by_category,
            "by_event": by_event,
            "errors": errors,
        }

    def export_logs(self) -> str:
        """Serialize every entry plus the session report as indented JSON."""
        return json.dumps(
            {
                "exported_at": self._clock().isoformat(),
                "logs": [entry.to_dict() for entry in self._entries],
                "report": self.get_report(),
            },
            indent=2,
            default=str,
        )

    def download_logs(self, directory: str | Path) -> Path:
        """Write the export to ``scrape-logs-YYYY-MM-DD.json`` under *directory*."""
        target_dir = Path(directory)
        target_dir.mkdir(parents=True, exist_ok=True)
        path = target_dir / f"scrape-logs-{self._clock().date().isoformat()}.json"
        path.write_text(self.export_logs(), encoding="utf-8")
        return path

    def clear(self) -> None:
        self._entries.clear()
