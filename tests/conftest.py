from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

import pytest
from fontTools.fontBuilder import FontBuilder
from fontTools.pens.ttGlyphPen import TTGlyphPen
from PIL import Image

from fontatlas.compose import RasterPage
from fontatlas.config import GeneratorConfig
from fontatlas.document import FontDocument
from fontatlas.errors import RasterizationError
from fontatlas.rasterize import RasterJob


def page_color(i: int) -> Tuple[int, int, int, int]:
    return (40 * (i + 1) % 256, 10 + i, 200, 255)


def make_document_dict(
    page_count: int = 1,
    base: int = 40,
    distance_range: Optional[int] = 4,
    chars: Optional[List[dict]] = None,
    scale: Tuple[int, int] = (256, 256),
) -> dict:
    if chars is None:
        chars = [
            {
                "id": 65 + i,
                "index": 3 + i,
                "char": chr(65 + i),
                "width": 8,
                "height": 8,
                "xoffset": 1,
                "yoffset": 10,
                "xadvance": 12,
                "chnl": 15,
                "x": 10,
                "y": 10,
                "page": i,
            }
            for i in range(page_count)
        ]
    doc = {
        "pages": [f"page_{i}.png" for i in range(page_count)],
        "chars": chars,
        "info": {"face": "Test", "size": 42, "padding": [2, 2, 2, 2]},
        "common": {
            "lineHeight": 48,
            "base": base,
            "scaleW": scale[0],
            "scaleH": scale[1],
            "pages": page_count,
            "packed": 0,
        },
        "kernings": [{"first": 65, "second": 86, "amount": -2}],
    }
    if distance_range is not None:
        doc["distanceField"] = {"fieldType": "msdf", "distanceRange": distance_range}
    return doc


class FakeRasterizer:
    """In-process stand-in for msdf-bmfont: solid colored pages, one glyph per page."""

    def __init__(
        self,
        page_sizes: Sequence[Tuple[int, int]] = ((64, 64),),
        per_font: Optional[Dict[str, Sequence[Tuple[int, int]]]] = None,
        fail_for: Sequence[str] = (),
    ):
        self.page_sizes = list(page_sizes)
        self.per_font = per_font or {}
        self.fail_for = set(fail_for)
        self.calls: List[Tuple[str, object]] = []

    def rasterize(self, font_path, options):
        name = Path(font_path).name
        self.calls.append((name, options))
        if name in self.fail_for:
            raise RasterizationError(f"fake failure for {name}")
        sizes = list(self.per_font.get(name, self.page_sizes))
        pages = [
            RasterPage(index=i, image=Image.new("RGBA", size, page_color(i)))
            for i, size in enumerate(sizes)
        ]
        doc = make_document_dict(
            page_count=len(sizes),
            distance_range=options.distance_range,
            scale=sizes[0] if sizes else (0, 0),
        )
        doc["info"]["face"] = Path(font_path).stem
        return RasterJob(document=FontDocument.from_dict(doc), pages=pages)


def build_font(
    path: Path,
    family: str,
    style: str,
    ascender: int = 1900,
    descender: int = -500,
    line_gap: int = 100,
    units_per_em: int = 2048,
) -> Path:
    fb = FontBuilder(units_per_em, isTTF=True)
    fb.setupGlyphOrder([".notdef", "A"])
    fb.setupCharacterMap({0x41: "A"})
    pen = TTGlyphPen(None)
    pen.moveTo((100, 0))
    pen.lineTo((100, 700))
    pen.lineTo((500, 700))
    pen.lineTo((500, 0))
    pen.closePath()
    fb.setupGlyf({".notdef": TTGlyphPen(None).glyph(), "A": pen.glyph()})
    fb.setupHorizontalMetrics({".notdef": (600, 0), "A": (600, 100)})
    fb.setupHorizontalHeader(ascent=ascender, descent=descender, lineGap=line_gap)
    fb.setupMaxp()
    fb.setupNameTable({"familyName": family, "styleName": style})
    fb.setupOS2(
        sTypoAscender=ascender,
        sTypoDescender=descender,
        sTypoLineGap=line_gap,
        usWinAscent=ascender,
        usWinDescent=-descender,
    )
    fb.setupPost()
    fb.save(str(path))
    return path


@pytest.fixture
def src_dir(tmp_path) -> Path:
    d = tmp_path / "font-src"
    d.mkdir()
    return d


@pytest.fixture
def dst_dir(tmp_path) -> Path:
    return tmp_path / "font-dst"


@pytest.fixture
def make_font(src_dir):
    def _make(file_name: str, family: str, style: str, **metrics) -> Path:
        return build_font(src_dir / file_name, family, style, **metrics)

    return _make


@pytest.fixture
def family_config(src_dir, dst_dir) -> GeneratorConfig:
    return GeneratorConfig.from_dirs(src_dir, dst_dir, mode="family")


@pytest.fixture
def individual_config(src_dir, dst_dir) -> GeneratorConfig:
    return GeneratorConfig.from_dirs(src_dir, dst_dir, mode="individual")
