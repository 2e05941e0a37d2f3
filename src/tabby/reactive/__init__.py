"""Reactive layer — rebuild on filesystem changes.

The watch loop consumes debounced events from the source watcher and runs
one incremental build cycle per event.
"""

from tabby.reactive.loop import WatchLoop, WatchState

__all__ = ["WatchLoop", "WatchState"]
