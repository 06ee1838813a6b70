"""
compose.py
==========

Draws the raw texture pages of one rasterization job onto a single canvas
following a `LayoutPlan`.

Pages are copied pixel for pixel (no scaling, no alpha blending): the canvas
starts fully transparent and each page replaces the pixels of its placement
rectangle, alpha channel included. Distance-field textures encode data in
every channel, so blending would corrupt them.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Sequence, Union

import numpy as np
from PIL import Image

from .errors import CompositionError
from .layout import LayoutPlan

_CHANNELS_TO_MODE = {1: "L", 3: "RGB", 4: "RGBA"}


@dataclass
class RasterPage:
    index: int
    image: Image.Image

    @property
    def width(self) -> int:
        return self.image.width

    @property
    def height(self) -> int:
        return self.image.height

    @property
    def size(self):
        return self.image.size

    @classmethod
    def from_buffer(
        cls,
        index: int,
        width: int,
        height: int,
        buffer: Union[bytes, bytearray, memoryview, np.ndarray],
        channels: int = 4,
    ) -> "RasterPage":
        """
        Wrap a raw 8-bit pixel buffer (row-major, interleaved channels).

        The resulting page image is always RGBA.
        """
        if channels not in _CHANNELS_TO_MODE:
            raise ValueError(f"Unsupported channel count {channels}")
        if isinstance(buffer, np.ndarray):
            arr = buffer.astype(np.uint8, copy=False).reshape(-1)
        else:
            arr = np.frombuffer(bytes(buffer), dtype=np.uint8)
        expected = width * height * channels
        if arr.size != expected:
            raise ValueError(
                f"page {index}: buffer holds {arr.size} bytes, expected {expected} "
                f"({width}x{height}x{channels})"
            )
        shape = (height, width) if channels == 1 else (height, width, channels)
        img = Image.fromarray(arr.reshape(shape))
        if img.mode != "RGBA":
            img = img.convert("RGBA")
        return cls(index=index, image=img)

    def to_array(self) -> np.ndarray:
        return np.asarray(self.image.convert("RGBA"))


def compose_pages(pages: Sequence[RasterPage], plan: LayoutPlan) -> Image.Image:
    """
    Paste every page at its planned offset on a transparent RGBA canvas.

    Parameters
    ----------
    pages : sequence of RasterPage
        Pages of one job; `page.index` selects the plan placement.
    plan : LayoutPlan
        Plan computed from the same page sizes.

    Raises
    ------
    CompositionError
        Page count differs from the plan, a placement has no page, or a page's
        size differs from what the plan was computed from.
    """
    by_index: Dict[int, RasterPage] = {}
    for page in pages:
        if page.index in by_index:
            raise CompositionError(f"duplicate page index {page.index}")
        by_index[page.index] = page

    if len(by_index) != plan.page_count:
        raise CompositionError(
            f"plan has {plan.page_count} placements but {len(by_index)} pages were given"
        )

    canvas = Image.new("RGBA", (plan.width, plan.height), (0, 0, 0, 0))
    for i, placement in enumerate(plan.placements):
        page = by_index.get(i)
        if page is None:
            raise CompositionError(f"placement {i} has no corresponding page")
        if (page.width, page.height) != (placement.width, placement.height):
            raise CompositionError(
                f"page {i} is {page.width}x{page.height} but was planned as "
                f"{placement.width}x{placement.height}"
            )
        if plan.source_sizes and plan.source_sizes[i] != (page.width, page.height):
            raise CompositionError(
                f"page {i} size {page.width}x{page.height} differs from planned source size "
                f"{plan.source_sizes[i][0]}x{plan.source_sizes[i][1]}"
            )
        if placement.right > plan.width or placement.bottom > plan.height:
            raise CompositionError(f"placement {i} exceeds canvas {plan.width}x{plan.height}")
        img = page.image if page.image.mode == "RGBA" else page.image.convert("RGBA")
        canvas.paste(img, (placement.x, placement.y))
    return canvas
