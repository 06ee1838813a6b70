"""
Exception hierarchy shared by the atlas pipeline.

Callers that batch many fonts catch `FontAtlasError` per font / family so a
single failure does not stop sibling jobs.
"""

from __future__ import annotations


class FontAtlasError(Exception):
    """Base class for all pipeline failures."""


class ConfigError(FontAtlasError):
    """Missing source font, invalid field type or unreadable config file."""


class DocumentError(FontAtlasError):
    """Glyph metadata JSON failed validation."""


class RasterizationError(FontAtlasError):
    """The external rasterizer is missing, failed, or produced unusable output."""


class CompositionError(FontAtlasError):
    """A raster page cannot be placed on the planned canvas."""


class IntrospectionError(FontAtlasError):
    """Font file could not be read or lacks required tables."""
