from __future__ import annotations

import numpy as np
import pytest
from PIL import Image

from fontatlas.compose import RasterPage, compose_pages
from fontatlas.errors import CompositionError
from fontatlas.layout import plan_layout, plan_pages


def _page(index, size, color):
    return RasterPage(index=index, image=Image.new("RGBA", size, color))


def test_pages_land_at_planned_offsets():
    pages = [_page(0, (256, 256), (255, 0, 0, 255)), _page(1, (256, 256), (0, 0, 255, 128))]
    plan = plan_pages(pages)
    atlas = compose_pages(pages, plan)

    assert atlas.mode == "RGBA"
    assert atlas.size == (514, 256)
    assert atlas.getpixel((0, 0)) == (255, 0, 0, 255)
    assert atlas.getpixel((255, 255)) == (255, 0, 0, 255)
    # gutter stays fully transparent
    assert atlas.getpixel((256, 10)) == (0, 0, 0, 0)
    assert atlas.getpixel((257, 10)) == (0, 0, 0, 0)
    # alpha is copied, not blended
    assert atlas.getpixel((258, 0)) == (0, 0, 255, 128)
    assert atlas.getpixel((513, 255)) == (0, 0, 255, 128)


def test_canvas_outside_short_pages_is_transparent():
    pages = [_page(0, (32, 64), (9, 9, 9, 255)), _page(1, (32, 16), (7, 7, 7, 255))]
    atlas = compose_pages(pages, plan_pages(pages))
    assert atlas.size == (66, 64)
    assert atlas.getpixel((40, 15)) == (7, 7, 7, 255)
    assert atlas.getpixel((40, 20)) == (0, 0, 0, 0)


def test_page_order_follows_index_not_sequence():
    pages = [_page(1, (8, 8), (0, 255, 0, 255)), _page(0, (8, 8), (255, 0, 0, 255))]
    atlas = compose_pages(pages, plan_pages(pages))
    assert atlas.getpixel((0, 0)) == (255, 0, 0, 255)
    assert atlas.getpixel((10, 0)) == (0, 255, 0, 255)


def test_single_page_is_copied_unchanged():
    page = _page(0, (16, 16), (1, 2, 3, 4))
    atlas = compose_pages([page], plan_pages([page]))
    assert np.array_equal(np.asarray(atlas), page.to_array())


def test_size_mismatch_raises():
    pages = [_page(0, (16, 16), (0, 0, 0, 255)), _page(1, (16, 16), (0, 0, 0, 255))]
    plan = plan_layout([(16, 16), (32, 16)])
    with pytest.raises(CompositionError):
        compose_pages(pages, plan)


def test_page_count_mismatch_raises():
    pages = [_page(0, (16, 16), (0, 0, 0, 255))]
    with pytest.raises(CompositionError):
        compose_pages(pages, plan_layout([(16, 16), (16, 16)]))


def test_missing_page_index_raises():
    pages = [_page(0, (16, 16), (0, 0, 0, 255)), _page(5, (16, 16), (0, 0, 0, 255))]
    with pytest.raises(CompositionError):
        compose_pages(pages, plan_layout([(16, 16), (16, 16)]))


def test_duplicate_page_index_raises():
    pages = [_page(0, (16, 16), (0, 0, 0, 255)), _page(0, (16, 16), (0, 0, 0, 255))]
    with pytest.raises(CompositionError):
        compose_pages(pages, plan_layout([(16, 16), (16, 16)]))


def test_from_buffer_rgba_and_gray():
    rgba = bytes([10, 20, 30, 40] * 6)
    page = RasterPage.from_buffer(0, 3, 2, rgba)
    assert page.size == (3, 2)
    assert page.image.getpixel((2, 1)) == (10, 20, 30, 40)

    gray = np.full((2, 3), 77, dtype=np.uint8)
    page = RasterPage.from_buffer(1, 3, 2, gray, channels=1)
    assert page.image.mode == "RGBA"
    assert page.image.getpixel((0, 0)) == (77, 77, 77, 255)


def test_from_buffer_rejects_wrong_length():
    with pytest.raises(ValueError):
        RasterPage.from_buffer(0, 4, 4, b"\x00" * 10)
    with pytest.raises(ValueError):
        RasterPage.from_buffer(0, 1, 1, b"\x00\x00", channels=2)
