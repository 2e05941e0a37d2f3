"""Content layer — resources, timings and change detection.

Classifies source files into typed resources, tracks their timings across
runs in the manifest, and watches the source directory for changes.
"""

from tabby.content.classifier import Article, Icon, Photo, Resource, Script, Style, classify
from tabby.content.manifest import Manifest
from tabby.content.registry import Registry
from tabby.content.timing import Timing
from tabby.content.watcher import SourceWatcher, WatchEvent

__all__ = [
    "Article",
    "Icon",
    "Manifest",
    "Photo",
    "Registry",
    "Resource",
    "Script",
    "SourceWatcher",
    "Style",
    "Timing",
    "WatchEvent",
    "classify",
]
