"""
remap.py
========

Rewrites glyph rectangles after the pages of a job were merged onto one
canvas (see `compose.py`).

For every glyph the placement of its original page is looked up and the
rectangle is translated by the placement offset; the glyph then points at the
single merged page. Glyphs whose page has no placement are a degraded case:
they keep their coordinates, are forced onto the merged page, and are reported
both on stderr and in the returned stats so callers can detect the loss.

Stats
-----
{
  "glyphs": int,             # total glyph records
  "remapped_glyphs": int,    # translated via a placement
  "unplaced_glyphs": [int],  # glyph ids whose page had no placement
  "out_of_bounds": [int],    # glyph ids whose rectangle leaves the canvas
  "canvas": (w, h),
}
"""

from __future__ import annotations

import sys
from typing import Any, Dict, List, Tuple

from .document import FontDocument
from .layout import LayoutPlan


def remap_glyphs(
    document: FontDocument,
    plan: LayoutPlan,
    page_name: str,
    target_page: int = 0,
) -> Tuple[FontDocument, Dict[str, Any]]:
    """
    Return a copy of `document` whose glyphs reference the merged canvas.

    Parameters
    ----------
    document : FontDocument
        Raw rasterizer output (not modified).
    plan : LayoutPlan
        The plan the pages were composited with.
    page_name : str
        File name of the merged atlas; becomes the only entry of `pages`.
    target_page : int
        Page index written into every glyph (0 for a single merged atlas).
    """
    out = document.copy()
    unplaced: List[int] = []
    out_of_bounds: List[int] = []
    remapped = 0

    for glyph in out.chars:
        placement = plan.placement_for(glyph.page)
        if placement is None:
            unplaced.append(glyph.id)
            glyph.page = target_page
            continue
        glyph.x += placement.x
        glyph.y += placement.y
        glyph.page = target_page
        remapped += 1
        if glyph.x + glyph.width > plan.width or glyph.y + glyph.height > plan.height:
            out_of_bounds.append(glyph.id)

    if unplaced:
        print(
            f"[WARN] {len(unplaced)} glyph(s) reference pages without a placement "
            f"(plan has {plan.page_count}); forced to page {target_page} with "
            f"unchanged coordinates: ids={unplaced[:10]}{'...' if len(unplaced) > 10 else ''}",
            file=sys.stderr,
        )
    if out_of_bounds:
        print(
            f"[WARN] {len(out_of_bounds)} glyph(s) fall outside the "
            f"{plan.width}x{plan.height} canvas after remapping",
            file=sys.stderr,
        )

    out.common.pages = 1
    out.common.scale_w = plan.width
    out.common.scale_h = plan.height
    out.pages = [page_name]

    stats = {
        "glyphs": len(out.chars),
        "remapped_glyphs": remapped,
        "unplaced_glyphs": unplaced,
        "out_of_bounds": out_of_bounds,
        "canvas": (plan.width, plan.height),
    }
    return out, stats
