"""
SDF Font Atlas Package

Turns font files into MSDF/SDF atlases plus BMFont-style JSON for GPU text
rendering.

Modules
-------
- layout.py     : canvas planning for multi-page rasterizer output
- compose.py    : RasterPage + pasting pages onto the planned canvas
- remap.py      : glyph rectangle / page rewriting for the merged canvas
- family.py     : per-family multi-page atlas with style page ranges
- adjust.py     : baseline bias correction + typographic metrics
- document.py   : typed, validated view of the JSON document
- rasterize.py  : msdf-bmfont adapter (external rasterizer)
- introspect.py : fontTools font names + OS/2 metrics
- config.py     : GeneratorConfig, overrides
- charset.py    : charset config + presets
- generate.py   : single-font pipeline and batch driver
- cli.py        : `python -m fontatlas`
"""

from .compose import RasterPage, compose_pages  # noqa: F401
from .config import FieldOptions, GeneratorConfig  # noqa: F401
from .document import FontDocument, FontMetrics, GlyphRecord  # noqa: F401
from .layout import LayoutPlan, Placement, plan_layout  # noqa: F401
from .remap import remap_glyphs  # noqa: F401

__all__ = [
    "FieldOptions",
    "FontDocument",
    "FontMetrics",
    "GeneratorConfig",
    "GlyphRecord",
    "LayoutPlan",
    "Placement",
    "RasterPage",
    "compose_pages",
    "get_version",
    "plan_layout",
    "remap_glyphs",
]

_PROJECT_VERSION = "0.1.0"


def get_version() -> str:
    return _PROJECT_VERSION
