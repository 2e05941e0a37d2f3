"""Event log — bounded, thread-safe store of build events.

Keeps a ring buffer of ``StackEvent`` objects so a build (or a long watch
session) can be inspected after the fact.  Supports querying by event type,
time range, and resource name/path.

Thread Safety:
    All methods are protected by a ``threading.Lock``.  Conversion workers
    append from the thread pool while the cycle owner reads.

"""

import threading
from collections import deque
from typing import Any

from tabby.observability.events import StackEvent

# Event attributes searched (in order) by ``EventLog.query(path=...)``
_PATH_FIELDS = ("path", "source", "target", "name")


class EventLog:
    """Bounded event store with query support.

    Events live in a ``deque`` with ``maxlen``; once full, the oldest events
    are discarded automatically.

    Args:
        max_events: Maximum number of events to retain.

    """

    __slots__ = ("_events", "_lock", "_max_events")

    def __init__(self, max_events: int = 10_000) -> None:
        self._max_events = max_events
        self._events: deque[StackEvent] = deque(maxlen=max_events)
        self._lock = threading.Lock()

    def append(self, event: StackEvent) -> None:
        """Record an event in the log."""
        with self._lock:
            self._events.append(event)

    def query(
        self,
        *,
        event_type: type | None = None,
        since_ns: int = 0,
        path: str | None = None,
        limit: int = 100,
    ) -> list[StackEvent]:
        """Query events with optional filters.

        Args:
            event_type: Only return events of this type.
            since_ns: Only return events recorded at or after this timestamp.
            path: Substring matched against the event's path, source,
                target or name (first one present).
            limit: Maximum number of events to return.

        Returns:
            List of matching events, most recent first.

        """
        with self._lock:
            snapshot = list(self._events)

        results: list[StackEvent] = []
        for event in reversed(snapshot):
            if len(results) >= limit:
                break
            if event_type is not None and not isinstance(event, event_type):
                continue
            if since_ns and event.timestamp_ns < since_ns:
                continue
            if path is not None and path not in _event_path(event):
                continue
            results.append(event)
        return results

    def recent(self, n: int = 20) -> list[StackEvent]:
        """Return the N most recent events, oldest first."""
        with self._lock:
            items = list(self._events)
        return items[-n:]

    def clear(self) -> int:
        """Clear all events and return the count that was cleared."""
        with self._lock:
            count = len(self._events)
            self._events.clear()
            return count

    def __len__(self) -> int:
        with self._lock:
            return len(self._events)

    def stats(self) -> dict[str, Any]:
        """Return summary statistics about stored events."""
        with self._lock:
            events = list(self._events)

        type_counts: dict[str, int] = {}
        for event in events:
            name = type(event).__name__
            type_counts[name] = type_counts.get(name, 0) + 1

        return {
            "total": len(events),
            "max_events": self._max_events,
            "by_type": type_counts,
        }


def _event_path(event: StackEvent) -> str:
    for attr in _PATH_FIELDS:
        value = getattr(event, attr, None)
        if value:
            return str(value)
    return ""
