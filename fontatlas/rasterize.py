"""
rasterize.py
============

Adapter around the external distance-field rasterizer.

The rasterizer turns one font file into zero or more texture pages plus one
BMFont-style JSON document. The default backend drives the `msdf-bmfont`
command line tool (npm package `msdf-bmfont-xml`) inside a scratch directory
and loads whatever it wrote back into memory:

    job = MsdfBmfontRasterizer().rasterize("font-src/Ubuntu-Regular.ttf", options)
    job.pages     # [RasterPage(index=0, image=<RGBA>), ...]
    job.document  # FontDocument

Any object with a matching `rasterize(font_path, options)` method can stand in
for the default backend (tests use an in-process fake).

Intermediate Files
------------------
`write_job()` persists a job with the naming scheme the family aggregator
expects:

    <base>.<fieldType>.png        (single page)
    <base>.<fieldType>_<i>.png    (multi page)
    <base>.<fieldType>.json
"""

from __future__ import annotations

import re
import shutil
import subprocess
import sys
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol, Tuple, Union

from PIL import Image

from .compose import RasterPage
from .config import FieldOptions, GeneratorConfig, validate_field_type
from .document import FontDocument, load_document, save_document
from .errors import DocumentError, RasterizationError

# ssdf is our name for the single channel variant; the tool calls it sdf
_TOOL_FIELD_TYPES = {"msdf": "msdf", "ssdf": "sdf"}
_PAGE_NUMBER = re.compile(r"(\d+)$")


def sort_page_files(paths) -> List[Path]:
    """Order page images by their trailing page number (`x_2.png` before `x_10.png`)."""

    def key(p: Path):
        m = _PAGE_NUMBER.search(p.stem)
        return (p.stem[: m.start()] if m else p.stem, int(m.group(1)) if m else -1, p.name)

    return sorted((Path(p) for p in paths), key=key)


@dataclass(frozen=True)
class RasterOptions:
    field_type: str
    font_size: int = 42
    distance_range: int = 4
    texture_size: Optional[Tuple[int, int]] = None
    charset: Optional[str] = None
    output_type: str = "json"
    round_decimal: int = 6
    smart_size: bool = False
    pot: bool = True

    @property
    def tool_field_type(self) -> str:
        return _TOOL_FIELD_TYPES[self.field_type]

    @classmethod
    def build(
        cls,
        field_type: str,
        field_options: FieldOptions,
        config: GeneratorConfig,
        charset: Optional[str] = None,
    ) -> "RasterOptions":
        validate_field_type(field_type)
        return cls(
            field_type=field_type,
            font_size=field_options.font_size,
            distance_range=field_options.distance_range,
            texture_size=field_options.texture_size,
            charset=charset or None,
            round_decimal=config.round_decimal,
            smart_size=config.smart_size,
            pot=config.pot,
        )

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "fieldType": self.tool_field_type,
            "outputType": self.output_type,
            "roundDecimal": self.round_decimal,
            "smartSize": self.smart_size,
            "pot": self.pot,
            "fontSize": self.font_size,
            "distanceRange": self.distance_range,
        }
        if self.texture_size is not None:
            out["textureSize"] = list(self.texture_size)
        if self.charset is not None:
            out["charset"] = self.charset
        return out


@dataclass
class RasterJob:
    document: FontDocument
    pages: List[RasterPage] = field(default_factory=list)

    @property
    def page_count(self) -> int:
        return len(self.pages)


class Rasterizer(Protocol):
    def rasterize(self, font_path: Union[str, Path], options: RasterOptions) -> RasterJob:
        ...


# ---------------------------------------------------------------------------
# msdf-bmfont backend
# ---------------------------------------------------------------------------


class MsdfBmfontRasterizer:
    def __init__(self, binary: str = "msdf-bmfont", extra_args: Tuple[str, ...] = ()):
        self.binary = binary
        self.extra_args = tuple(extra_args)

    def build_command(self, font_file: str, options: RasterOptions, charset_file: Optional[str]) -> List[str]:
        cmd = [
            self.binary,
            "--field-type",
            options.tool_field_type,
            "--output-type",
            options.output_type,
            "--round-decimal",
            str(options.round_decimal),
            "--font-size",
            str(options.font_size),
            "--distance-range",
            str(options.distance_range),
        ]
        if options.texture_size is not None:
            cmd += ["--texture-size", f"{options.texture_size[0]},{options.texture_size[1]}"]
        if options.smart_size:
            cmd.append("--smart-size")
        if options.pot:
            cmd.append("--pot")
        if charset_file:
            cmd += ["--charset-file", charset_file]
        cmd += list(self.extra_args)
        cmd.append(font_file)
        return cmd

    def rasterize(self, font_path: Union[str, Path], options: RasterOptions) -> RasterJob:
        src = Path(font_path)
        if not src.is_file():
            raise RasterizationError(f"font file not found: {src}")
        if shutil.which(self.binary) is None:
            raise RasterizationError(
                f"'{self.binary}' not found on PATH (install with: npm install -g msdf-bmfont-xml)"
            )

        with tempfile.TemporaryDirectory(prefix="fontatlas-") as tmp:
            work = Path(tmp)
            font_copy = work / src.name
            shutil.copyfile(src, font_copy)
            charset_file = None
            if options.charset:
                charset_file = work / "charset.txt"
                charset_file.write_text(options.charset, encoding="utf-8")

            cmd = self.build_command(
                font_copy.name, options, charset_file.name if charset_file else None
            )
            try:
                subprocess.run(cmd, cwd=str(work), check=True, capture_output=True, text=True)
            except FileNotFoundError as e:
                raise RasterizationError(f"cannot execute {self.binary}: {e}") from e
            except subprocess.CalledProcessError as e:
                tail = (e.stderr or e.stdout or "").strip().splitlines()[-5:]
                raise RasterizationError(
                    f"{self.binary} failed for {src.name} (exit {e.returncode}): {' | '.join(tail)}"
                ) from e

            return self._collect(work, src)

    def _collect(self, work: Path, src: Path) -> RasterJob:
        json_files = sorted(work.glob(f"{src.stem}*.json")) or sorted(work.glob("*.json"))
        if not json_files:
            raise RasterizationError(f"no JSON document produced for {src.name}")
        try:
            document = load_document(json_files[0])
        except DocumentError as e:
            raise RasterizationError(f"unusable rasterizer output for {src.name}: {e}") from e

        page_files = [work / name for name in document.pages]
        if not page_files or not all(p.is_file() for p in page_files):
            page_files = sort_page_files(work.glob("*.png"))
            if document.pages and len(page_files) != len(document.pages):
                raise RasterizationError(
                    f"{src.name}: document lists {len(document.pages)} pages, "
                    f"found {len(page_files)} PNG files"
                )

        pages: List[RasterPage] = []
        for i, p in enumerate(page_files):
            with Image.open(p) as im:
                pages.append(RasterPage(index=i, image=im.convert("RGBA")))
        return RasterJob(document=document, pages=pages)


# ---------------------------------------------------------------------------
# Persistence of intermediate job output
# ---------------------------------------------------------------------------


def page_file_names(base_name: str, field_type: str, page_count: int) -> List[str]:
    if page_count == 1:
        return [f"{base_name}.{field_type}.png"]
    return [f"{base_name}.{field_type}_{i}.png" for i in range(page_count)]


def write_job(
    job: RasterJob,
    dst_dir: Union[str, Path],
    base_name: str,
    field_type: str,
) -> Tuple[Path, List[Path]]:
    """
    Write a job's pages and document to `dst_dir`.

    Returns
    -------
    (json_path, png_paths)
    """
    out_dir = Path(dst_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    ordered = sorted(job.pages, key=lambda p: p.index)
    names = page_file_names(base_name, field_type, len(ordered))
    png_paths: List[Path] = []
    for page, name in zip(ordered, names):
        path = out_dir / name
        page.image.save(path)
        png_paths.append(path)

    document = job.document.copy()
    document.pages = list(names) if ordered else list(document.pages)
    json_path = save_document(document, out_dir / f"{base_name}.{field_type}.json")
    if not ordered:
        print(f"[WARN] {base_name}: rasterizer produced no pages", file=sys.stderr)
    return json_path, png_paths
