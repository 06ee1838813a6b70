"""
layout.py
=========

Canvas planning for merging the raw texture pages of one rasterization job
into a single atlas image.

Placement is translation only: pages are never scaled or cropped. A fixed
gutter separates neighbouring pages so bilinear sampling at a page edge does
not bleed into the next page.

Strategies
----------
horizontal (default)
    Pages left to right. Canvas width = sum(widths) + (n - 1) * gutter,
    canvas height = tallest page.
vertical
    Pages top to bottom, mirror image of `horizontal`.
grid
    ceil(sqrt(n)) columns, every cell sized to the largest page.
auto
    Whichever of the three yields the smallest canvas area; ties keep the
    earlier strategy in the order above.

Example
-------
    >>> plan = plan_layout([(256, 256), (256, 256)])
    >>> plan.width, plan.height
    (514, 256)
    >>> plan.placements[1]
    Placement(x=258, y=0, width=256, height=256)
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

DEFAULT_GUTTER = 2
STRATEGIES = ("horizontal", "vertical", "grid", "auto")


@dataclass(frozen=True)
class Placement:
    x: int
    y: int
    width: int
    height: int

    @property
    def right(self) -> int:
        return self.x + self.width

    @property
    def bottom(self) -> int:
        return self.y + self.height

    def overlaps(self, other: "Placement") -> bool:
        return not (
            self.right <= other.x
            or other.right <= self.x
            or self.bottom <= other.y
            or other.bottom <= self.y
        )


@dataclass(frozen=True)
class LayoutPlan:
    width: int
    height: int
    placements: Tuple[Placement, ...]
    strategy: str = "horizontal"
    gutter: int = DEFAULT_GUTTER
    # (width, height) per input page, kept for consistency checks at compose time
    source_sizes: Tuple[Tuple[int, int], ...] = field(default=())

    @property
    def page_count(self) -> int:
        return len(self.placements)

    @property
    def area(self) -> int:
        return self.width * self.height

    @property
    def is_identity(self) -> bool:
        return (
            len(self.placements) == 1
            and self.placements[0] == Placement(0, 0, self.width, self.height)
        )

    def placement_for(self, page_index: int) -> Optional[Placement]:
        """Placement of the input page with `page_index`, or None when out of range."""
        if 0 <= page_index < len(self.placements):
            return self.placements[page_index]
        return None


# ---------------------------------------------------------------------------
# Strategy implementations
# ---------------------------------------------------------------------------


def _horizontal(sizes: Sequence[Tuple[int, int]], gutter: int) -> LayoutPlan:
    placements: List[Placement] = []
    x = 0
    for w, h in sizes:
        placements.append(Placement(x, 0, w, h))
        x += w + gutter
    width = x - gutter
    height = max(h for _, h in sizes)
    return LayoutPlan(width, height, tuple(placements), "horizontal", gutter)


def _vertical(sizes: Sequence[Tuple[int, int]], gutter: int) -> LayoutPlan:
    placements: List[Placement] = []
    y = 0
    for w, h in sizes:
        placements.append(Placement(0, y, w, h))
        y += h + gutter
    width = max(w for w, _ in sizes)
    height = y - gutter
    return LayoutPlan(width, height, tuple(placements), "vertical", gutter)


def _grid(sizes: Sequence[Tuple[int, int]], gutter: int) -> LayoutPlan:
    n = len(sizes)
    cols = int(math.ceil(math.sqrt(n)))
    rows = int(math.ceil(n / cols))
    cell_w = max(w for w, _ in sizes)
    cell_h = max(h for _, h in sizes)
    placements = tuple(
        Placement((i % cols) * (cell_w + gutter), (i // cols) * (cell_h + gutter), w, h)
        for i, (w, h) in enumerate(sizes)
    )
    width = cols * cell_w + (cols - 1) * gutter
    height = rows * cell_h + (rows - 1) * gutter
    return LayoutPlan(width, height, placements, "grid", gutter)


_BUILDERS = {
    "horizontal": _horizontal,
    "vertical": _vertical,
    "grid": _grid,
}


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def plan_layout(
    sizes: Sequence[Tuple[int, int]],
    gutter: int = DEFAULT_GUTTER,
    strategy: str = "horizontal",
) -> LayoutPlan:
    """
    Compute the merged canvas and one placement per input page.

    Parameters
    ----------
    sizes : sequence of (width, height)
        Page sizes in page-index order.
    gutter : int
        Transparent pixels between adjacent pages.
    strategy : str
        One of `STRATEGIES`.

    Returns
    -------
    LayoutPlan
        Placements in the same order as `sizes`.
    """
    if strategy not in STRATEGIES:
        raise ValueError(f"Unknown layout strategy {strategy!r} (expected one of {STRATEGIES})")
    if gutter < 0:
        raise ValueError(f"gutter must be >= 0, got {gutter}")
    norm: List[Tuple[int, int]] = []
    for i, (w, h) in enumerate(sizes):
        if int(w) <= 0 or int(h) <= 0:
            raise ValueError(f"page {i} has non-positive size {w}x{h}")
        norm.append((int(w), int(h)))
    if not norm:
        raise ValueError("Cannot plan a layout for zero pages")

    if len(norm) == 1:
        w, h = norm[0]
        plan = LayoutPlan(w, h, (Placement(0, 0, w, h),), strategy, gutter)
    elif strategy == "auto":
        candidates = [_BUILDERS[name](norm, gutter) for name in ("horizontal", "vertical", "grid")]
        # min() keeps the first of equal-area candidates
        plan = min(candidates, key=lambda p: p.area)
    else:
        plan = _BUILDERS[strategy](norm, gutter)

    return LayoutPlan(
        plan.width,
        plan.height,
        plan.placements,
        plan.strategy,
        plan.gutter,
        source_sizes=tuple(norm),
    )


def plan_pages(pages, gutter: int = DEFAULT_GUTTER, strategy: str = "horizontal") -> LayoutPlan:
    """Convenience wrapper taking RasterPage-like objects (anything with width/height)."""
    ordered = sorted(pages, key=lambda p: p.index)
    return plan_layout([(p.width, p.height) for p in ordered], gutter=gutter, strategy=strategy)
