"""
document.py
===========

Typed view of the BMFont-style JSON written by the rasterizer.

The rasterizer emits a loosely structured JSON document::

    {
      "pages": ["Ubuntu-Regular.msdf.png"],
      "chars": [{"id": 65, "x": 10, "y": 10, "width": 20, "height": 24,
                 "xoffset": 1, "yoffset": 8, "xadvance": 22, "page": 0, ...}],
      "info": {"face": "Ubuntu-Regular", "size": 42, ...},
      "common": {"lineHeight": 48, "base": 40, "scaleW": 512, "scaleH": 512,
                 "pages": 1, ...},
      "distanceField": {"fieldType": "msdf", "distanceRange": 4},
      "kernings": [...]
    }

Downstream steps (remapping, family merge, bias correction) work on the checked
dataclasses below instead of raw dicts. Fields the pipeline does not touch are
kept in `extra` so a load / save cycle does not drop anything.

Pipeline additions written back into the JSON:
- `lightningMetrics`  : FontMetrics of the source font
- `styles`            : family page-range index (family mode only)
- `baselineAdjusted`  : marker set once the rasterizer bias was corrected
"""

from __future__ import annotations

import copy
import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from .errors import DocumentError

ADJUSTED_KEY = "baselineAdjusted"
METRICS_KEY = "lightningMetrics"

_CHAR_KEYS = ("id", "x", "y", "width", "height", "xoffset", "yoffset", "xadvance", "page")
_COMMON_KEYS = ("lineHeight", "base", "scaleW", "scaleH")
_TOP_LEVEL_KEYS = (
    "pages",
    "chars",
    "info",
    "common",
    "distanceField",
    "kernings",
    METRICS_KEY,
    "styles",
    ADJUSTED_KEY,
)

Number = Union[int, float]


def _number(value: Any, where: str) -> Number:
    # bool is an int subclass; reject it explicitly
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise DocumentError(f"{where}: expected a number, got {value!r}")
    return value


def _int(value: Any, where: str) -> int:
    num = _number(value, where)
    if isinstance(num, float):
        if not num.is_integer():
            raise DocumentError(f"{where}: expected an integer, got {value!r}")
        return int(num)
    return num


# ---------------------------------------------------------------------------
# Data Structures
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class FontMetrics:
    ascender: int
    descender: int
    line_gap: int
    units_per_em: int

    def to_dict(self) -> Dict[str, int]:
        return {
            "ascender": self.ascender,
            "descender": self.descender,
            "lineGap": self.line_gap,
            "unitsPerEm": self.units_per_em,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FontMetrics":
        if not isinstance(data, dict):
            raise DocumentError(f"{METRICS_KEY}: expected an object, got {data!r}")
        try:
            return cls(
                ascender=_int(data["ascender"], f"{METRICS_KEY}.ascender"),
                descender=_int(data["descender"], f"{METRICS_KEY}.descender"),
                line_gap=_int(data["lineGap"], f"{METRICS_KEY}.lineGap"),
                units_per_em=_int(data["unitsPerEm"], f"{METRICS_KEY}.unitsPerEm"),
            )
        except KeyError as e:
            raise DocumentError(f"{METRICS_KEY}: missing field {e.args[0]!r}") from e


@dataclass
class GlyphRecord:
    id: int
    x: int
    y: int
    width: int
    height: int
    xoffset: Number
    yoffset: Number
    xadvance: Number
    page: int
    # index / char / chnl and anything else the rasterizer emits
    extra: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any], position: int) -> "GlyphRecord":
        where = f"chars[{position}]"
        if not isinstance(data, dict):
            raise DocumentError(f"{where}: expected an object, got {type(data).__name__}")
        missing = [k for k in _CHAR_KEYS if k not in data]
        if missing:
            raise DocumentError(f"{where}: missing fields {missing}")
        glyph = cls(
            id=_int(data["id"], f"{where}.id"),
            x=_int(data["x"], f"{where}.x"),
            y=_int(data["y"], f"{where}.y"),
            width=_int(data["width"], f"{where}.width"),
            height=_int(data["height"], f"{where}.height"),
            xoffset=_number(data["xoffset"], f"{where}.xoffset"),
            yoffset=_number(data["yoffset"], f"{where}.yoffset"),
            xadvance=_number(data["xadvance"], f"{where}.xadvance"),
            page=_int(data["page"], f"{where}.page"),
            extra={k: v for k, v in data.items() if k not in _CHAR_KEYS},
        )
        if glyph.page < 0:
            raise DocumentError(f"{where}.page: negative page index {glyph.page}")
        return glyph

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = dict(self.extra)
        out.update(
            id=self.id,
            x=self.x,
            y=self.y,
            width=self.width,
            height=self.height,
            xoffset=self.xoffset,
            yoffset=self.yoffset,
            xadvance=self.xadvance,
            page=self.page,
        )
        return out


@dataclass
class CommonBlock:
    line_height: Number
    base: Number
    scale_w: int
    scale_h: int
    pages: int
    extra: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Any, page_count: int) -> "CommonBlock":
        if not isinstance(data, dict):
            raise DocumentError("common: expected an object")
        missing = [k for k in _COMMON_KEYS if k not in data]
        if missing:
            raise DocumentError(f"common: missing fields {missing}")
        return cls(
            line_height=_number(data["lineHeight"], "common.lineHeight"),
            base=_number(data["base"], "common.base"),
            scale_w=_int(data["scaleW"], "common.scaleW"),
            scale_h=_int(data["scaleH"], "common.scaleH"),
            pages=_int(data.get("pages", page_count), "common.pages"),
            extra={
                k: v for k, v in data.items() if k not in _COMMON_KEYS and k != "pages"
            },
        )

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "lineHeight": self.line_height,
            "base": self.base,
            "scaleW": self.scale_w,
            "scaleH": self.scale_h,
            "pages": self.pages,
        }
        out.update(self.extra)
        return out


@dataclass
class DistanceField:
    field_type: str
    distance_range: int

    @classmethod
    def from_dict(cls, data: Any) -> "DistanceField":
        if not isinstance(data, dict):
            raise DocumentError("distanceField: expected an object")
        field_type = data.get("fieldType", "")
        if not isinstance(field_type, str):
            raise DocumentError(f"distanceField.fieldType: expected a string, got {field_type!r}")
        if "distanceRange" not in data:
            raise DocumentError("distanceField: missing field 'distanceRange'")
        return cls(
            field_type=field_type,
            distance_range=_int(data["distanceRange"], "distanceField.distanceRange"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"fieldType": self.field_type, "distanceRange": self.distance_range}


@dataclass
class FontDocument:
    pages: List[str]
    chars: List[GlyphRecord]
    common: CommonBlock
    info: Dict[str, Any] = field(default_factory=dict)
    distance_field: Optional[DistanceField] = None
    kernings: List[Dict[str, Any]] = field(default_factory=list)
    metrics: Optional[FontMetrics] = None
    styles: Optional[List[Dict[str, Any]]] = None
    adjusted: bool = False
    extra: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Any) -> "FontDocument":
        """
        Validate a raw JSON object and build a document.

        Raises
        ------
        DocumentError
            On any missing required block or wrongly typed field.
        """
        if not isinstance(data, dict):
            raise DocumentError("document root must be a JSON object")
        if "chars" not in data:
            raise DocumentError("document has no 'chars' table")
        if "common" not in data:
            raise DocumentError("document has no 'common' block")

        pages = data.get("pages", [])
        if not isinstance(pages, list) or not all(isinstance(p, str) for p in pages):
            raise DocumentError("pages: expected a list of file names")
        raw_chars = data["chars"]
        if not isinstance(raw_chars, list):
            raise DocumentError("chars: expected a list")
        info = data.get("info", {})
        if not isinstance(info, dict):
            raise DocumentError("info: expected an object")
        kernings = data.get("kernings", [])
        if not isinstance(kernings, list):
            raise DocumentError("kernings: expected a list")
        styles = data.get("styles")
        if styles is not None and not isinstance(styles, list):
            raise DocumentError("styles: expected a list")

        return cls(
            pages=list(pages),
            chars=[GlyphRecord.from_dict(c, i) for i, c in enumerate(raw_chars)],
            common=CommonBlock.from_dict(data["common"], len(pages)),
            info=dict(info),
            distance_field=(
                DistanceField.from_dict(data["distanceField"])
                if data.get("distanceField") is not None
                else None
            ),
            kernings=list(kernings),
            metrics=(
                FontMetrics.from_dict(data[METRICS_KEY])
                if data.get(METRICS_KEY) is not None
                else None
            ),
            styles=[dict(s) for s in styles] if styles is not None else None,
            adjusted=bool(data.get(ADJUSTED_KEY, False)),
            extra={k: v for k, v in data.items() if k not in _TOP_LEVEL_KEYS},
        )

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "pages": list(self.pages),
            "chars": [c.to_dict() for c in self.chars],
            "info": dict(self.info),
            "common": self.common.to_dict(),
        }
        if self.distance_field is not None:
            out["distanceField"] = self.distance_field.to_dict()
        out["kernings"] = list(self.kernings)
        out.update(self.extra)
        if self.metrics is not None:
            out[METRICS_KEY] = self.metrics.to_dict()
        if self.styles is not None:
            out["styles"] = [dict(s) for s in self.styles]
        if self.adjusted:
            out[ADJUSTED_KEY] = True
        return out

    def copy(self) -> "FontDocument":
        return copy.deepcopy(self)


# ---------------------------------------------------------------------------
# File I/O
# ---------------------------------------------------------------------------


def parse_document(text: str, source: str = "<string>") -> FontDocument:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise DocumentError(f"{source}: invalid JSON ({e})") from e
    try:
        return FontDocument.from_dict(data)
    except DocumentError as e:
        raise DocumentError(f"{source}: {e}") from e


def load_document(path: Union[str, Path]) -> FontDocument:
    p = Path(path)
    try:
        text = p.read_text(encoding="utf-8")
    except OSError as e:
        raise DocumentError(f"cannot read {p}: {e}") from e
    return parse_document(text, source=p.name)


def save_document(document: FontDocument, path: Union[str, Path]) -> Path:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(json.dumps(document.to_dict(), indent=2), encoding="utf-8")
    return p


def write_metrics_file(metrics: FontMetrics, path: Union[str, Path]) -> Path:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(json.dumps(metrics.to_dict(), indent=2), encoding="utf-8")
    return p
