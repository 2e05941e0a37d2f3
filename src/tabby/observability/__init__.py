"""Build observability — one event model for scan, build and watch.

Aggregates events from:
- **Scan**: entries skipped by the classifier
- **Build**: converted resources, failed units, aggregate pages, cycles
- **Watch**: ignored events, rebuilds, persistence and watcher failures

All events are frozen dataclasses with nanosecond timestamps, safe for
concurrent production from conversion worker threads.

Quick Start:
    >>> from tabby.observability import StackCollector, EventLog
    >>> log = EventLog()
    >>> collector = StackCollector(log)
    >>> # Pass collector to Registry.scan / BuildDispatcher / WatchLoop

"""

from tabby.observability.collector import StackCollector
from tabby.observability.events import (
    CycleCompleted,
    ManifestWritten,
    PageWritten,
    ResourceBuilt,
    ResourceFailed,
    ResourceSkipped,
    StackEvent,
    WatchNotice,
    now_ns,
)
from tabby.observability.log import EventLog

__all__ = [
    "CycleCompleted",
    "EventLog",
    "ManifestWritten",
    "PageWritten",
    "ResourceBuilt",
    "ResourceFailed",
    "ResourceSkipped",
    "StackCollector",
    "StackEvent",
    "WatchNotice",
    "now_ns",
]
