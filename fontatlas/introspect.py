"""
introspect.py
=============

Font file introspection via fontTools: family / style names and the OS/2
typographic metrics attached to the generated metadata.

Name Resolution
---------------
family : name ID 1
style  : name ID 2 (subfamily). If absent or "Regular", the full name
         (ID 4) with the family prefix removed is used when non-empty, so
         "Ubuntu Condensed" with subfamily "Regular" yields "Condensed".
         Falls back to "Regular".

Only `.ttf` / `.otf` files are opened; other formats return an empty
`FontInfo` and the caller derives the family from the file name.

Metrics
-------
ascender   : OS/2.sTypoAscender
descender  : OS/2.sTypoDescender
lineGap    : OS/2.sTypoLineGap
unitsPerEm : head.unitsPerEm
"""

from __future__ import annotations

import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from fontTools.ttLib import TTFont

from .document import FontMetrics
from .errors import IntrospectionError

INTROSPECTABLE_EXTS = (".ttf", ".otf")
DEFAULT_STYLE = "Regular"
UNKNOWN_FAMILY = "Unknown"


@dataclass(frozen=True)
class FontInfo:
    family: Optional[str] = None
    style: Optional[str] = None
    full_name: Optional[str] = None


def safe_get(table, attr, default=None):
    if table is None:
        return default
    return getattr(table, attr, default)


def _name(font: TTFont, name_id: int) -> Optional[str]:
    if "name" not in font:
        return None
    value = font["name"].getDebugName(name_id)
    return value.strip() if value else None


def resolve_style(family: Optional[str], subfamily: Optional[str], full_name: Optional[str]) -> str:
    style = subfamily
    if not style or style == DEFAULT_STYLE:
        if full_name and family:
            remainder = full_name.replace(family, "").strip()
            if remainder:
                style = remainder
    if not style or style == family:
        style = DEFAULT_STYLE
    return style


def family_from_filename(file_name: Union[str, Path]) -> str:
    """`Ubuntu-BoldItalic.ttf` -> `Ubuntu`; empty stem -> `Unknown`."""
    stem = Path(file_name).stem
    token = stem.split("-")[0]
    return token or UNKNOWN_FAMILY


class FontIntrospector:
    """
    fontTools-backed implementation of the font introspection service.

    Kept as a class so tests and alternative backends can substitute an object
    with the same two methods.
    """

    def font_info(self, font_path: Union[str, Path]) -> FontInfo:
        p = Path(font_path)
        if p.suffix.lower() not in INTROSPECTABLE_EXTS:
            return FontInfo()
        try:
            with TTFont(str(p), lazy=True) as font:
                family = _name(font, 1)
                subfamily = _name(font, 2)
                full_name = _name(font, 4)
        except Exception as e:  # fontTools raises TTLibError / struct.error / OSError
            print(f"[WARN] Could not read font info from {p.name}: {e}", file=sys.stderr)
            return FontInfo()
        return FontInfo(
            family=family,
            style=resolve_style(family, subfamily, full_name),
            full_name=full_name,
        )

    def metrics(self, font_path: Union[str, Path]) -> FontMetrics:
        p = Path(font_path)
        try:
            with TTFont(str(p), lazy=True) as font:
                head = font["head"] if "head" in font else None
                os2 = font["OS/2"] if "OS/2" in font else None
                values = (
                    safe_get(os2, "sTypoAscender"),
                    safe_get(os2, "sTypoDescender"),
                    safe_get(os2, "sTypoLineGap"),
                    safe_get(head, "unitsPerEm"),
                )
        except Exception as e:  # see font_info
            raise IntrospectionError(f"Cannot read {p.name}: {e}") from e
        if head is None or os2 is None:
            raise IntrospectionError(f"{p.name} lacks a head or OS/2 table")
        if any(v is None for v in values):
            raise IntrospectionError(f"{p.name} has incomplete OS/2 / head metrics")
        ascender, descender, line_gap, units_per_em = values
        return FontMetrics(
            ascender=int(ascender),
            descender=int(descender),
            line_gap=int(line_gap),
            units_per_em=int(units_per_em),
        )
