"""Export layer — published output generation.

Selects the resources that need rebuilding, converts them in parallel and
writes the index, gallery and static pages.
"""

from tabby.export.converters import Converters, default_converters
from tabby.export.dispatcher import BuildDispatcher, BuildReport, ResourceFailure

__all__ = [
    "BuildDispatcher",
    "BuildReport",
    "Converters",
    "ResourceFailure",
    "default_converters",
]
