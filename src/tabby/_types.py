"""Shared type definitions for tabby."""

from typing import Any, Literal

# Mode of operation
type TabbyMode = Literal["build", "serve"]

# File stem of a source resource (extension stripped)
type ResourceName = str

# Rendered HTML, before minification
type Html = str

# Decoded image handed between the image codec callables
type DecodedImage = Any
