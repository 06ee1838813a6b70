"""
generate.py
===========

Single-font pipeline and the batch driver for both generation modes.

Single font (individual mode)
-----------------------------
    rasterize -> plan_pages -> compose_pages -> remap_glyphs -> write
    <dst>/<name>.<fieldType>.png   (one merged atlas)
    <dst>/<name>.<fieldType>.json

Batch
-----
`generate_all()` walks every font file and field type, runs either the
single-font pipeline or the family aggregator (`family.py`), then the metrics
adjuster (`adjust.py`) on each result. A failure for one font / family is
logged and the batch moves on.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

from PIL import Image

from .charset import load_charset
from .compose import compose_pages
from .config import GeneratorConfig, validate_field_type
from .document import FontDocument, save_document
from .errors import ConfigError, FontAtlasError
from .layout import plan_pages
from .rasterize import MsdfBmfontRasterizer, RasterJob, RasterOptions, Rasterizer
from .remap import remap_glyphs

FONT_EXTS = (".ttf", ".otf", ".woff", ".woff2")
FAMILY_FONT_EXTS = (".ttf", ".otf")


@dataclass
class SdfFontInfo:
    font_name: str
    field_type: str
    font_path: Path
    json_path: Path
    png_path: Optional[Path]
    png_paths: List[Path] = field(default_factory=list)
    dst_dir: Path = Path(".")


def font_base_name(font_file: str) -> str:
    """`Ubuntu-Regular.ttf` -> `Ubuntu-Regular` (everything before the first dot)."""
    return Path(font_file).name.split(".")[0]


def default_rasterizer(config: GeneratorConfig) -> Rasterizer:
    return MsdfBmfontRasterizer(config.bmfont_binary, config.extra_args)


def merge_job(
    job: RasterJob,
    page_name: str,
    strategy: str = "horizontal",
    gutter: int = 2,
) -> Tuple[FontDocument, Optional[Image.Image], Dict[str, Any]]:
    """
    Merge all pages of a job into one atlas and remap the glyph table onto it.

    Returns (document, image, stats); image is None when the job has no pages.
    """
    if not job.pages:
        doc = job.document.copy()
        doc.pages = []
        doc.common.pages = 0
        stats = {
            "glyphs": len(doc.chars),
            "remapped_glyphs": 0,
            "unplaced_glyphs": [c.id for c in doc.chars],
            "out_of_bounds": [],
            "canvas": None,
        }
        return doc, None, stats
    ordered = sorted(job.pages, key=lambda p: p.index)
    plan = plan_pages(ordered, gutter=gutter, strategy=strategy)
    image = compose_pages(ordered, plan)
    document, stats = remap_glyphs(job.document, plan, page_name)
    return document, image, stats


def generate_font(
    config: GeneratorConfig,
    font_file: str,
    field_type: str,
    rasterizer: Optional[Rasterizer] = None,
) -> Optional[SdfFontInfo]:
    """
    Generate one merged atlas + JSON for `font_file` (relative to `config.src_dir`).

    Returns None on configuration errors (bad field type, missing font).
    Rasterization and composition failures propagate.
    """
    print(f"[INFO] Generating {field_type} font from {font_file}...")
    try:
        validate_field_type(field_type)
    except ConfigError as e:
        print(f"[ERROR] {e}", file=sys.stderr)
        return None
    font_path = config.src_dir / font_file
    if not font_path.is_file():
        print(f"[ERROR] Font {font_file} does not exist", file=sys.stderr)
        return None

    font_name = font_base_name(font_file)
    options = RasterOptions.build(
        field_type,
        config.field_options(font_name, field_type),
        config,
        charset=load_charset(config.charset_path),
    )
    rasterizer = rasterizer or default_rasterizer(config)
    job = rasterizer.rasterize(font_path, options)

    atlas_name = f"{font_name}.{field_type}.png"
    document, image, stats = merge_job(
        job, atlas_name, strategy=config.layout_strategy, gutter=config.gutter
    )

    config.dst_dir.mkdir(parents=True, exist_ok=True)
    png_paths: List[Path] = []
    if image is not None:
        png_path = config.dst_dir / atlas_name
        image.save(png_path)
        png_paths.append(png_path)
        if job.page_count > 1:
            print(
                f"[INFO] Merged {job.page_count} pages of {font_file} into "
                f"{image.width}x{image.height} atlas ({stats['remapped_glyphs']} glyphs remapped)"
            )
    else:
        print(f"[WARN] {font_file}: rasterizer produced no pages", file=sys.stderr)
    json_path = save_document(document, config.dst_dir / f"{font_name}.{field_type}.json")

    return SdfFontInfo(
        font_name=font_name,
        field_type=field_type,
        font_path=font_path,
        json_path=json_path,
        png_path=png_paths[0] if png_paths else None,
        png_paths=png_paths,
        dst_dir=config.dst_dir,
    )


# ---------------------------------------------------------------------------
# Batch driver
# ---------------------------------------------------------------------------


def list_font_files(src_dir: Path, exts: Sequence[str] = FONT_EXTS) -> List[str]:
    return sorted(
        p.name for p in Path(src_dir).iterdir() if p.is_file() and p.suffix.lower() in exts
    )


def generate_all(
    config: GeneratorConfig,
    font_files: Sequence[str],
    rasterizer: Optional[Rasterizer] = None,
    introspector=None,
) -> Dict[str, Any]:
    """
    Run the configured mode over `font_files` for every field type in the config.

    Returns a summary dict: {"generated": [...], "failed": [...]}.
    """
    # adjust.py imports SdfFontInfo from this module
    from .adjust import adjust
    from .family import generate_families
    from .introspect import FontIntrospector

    rasterizer = rasterizer or default_rasterizer(config)
    introspector = introspector or FontIntrospector()
    generated: List[Any] = []
    failed: List[str] = []

    for field_type in config.field_types:
        if config.mode == "family":
            families, failed_families = generate_families(
                config, font_files, field_type, rasterizer, introspector
            )
            failed.extend(f"{name}:{field_type}" for name in failed_families)
            for family in families:
                print(
                    f"[INFO] Generated {field_type.upper()} family: {family.family} "
                    f"with {len(family.styles)} styles"
                )
                try:
                    adjust(family, introspector)
                except FontAtlasError as e:
                    print(f"[ERROR] adjust {family.json_path.name}: {e}", file=sys.stderr)
                    failed.append(f"{family.family}:{field_type}")
                    continue
                generated.append(family)
            continue

        for font_file in font_files:
            try:
                info = generate_font(config, font_file, field_type, rasterizer)
                if info is not None:
                    adjust(info, introspector)
            except FontAtlasError as e:
                print(f"[ERROR] {field_type} {font_file}: {e}", file=sys.stderr)
                failed.append(f"{font_file}:{field_type}")
                continue
            if info is None:
                failed.append(f"{font_file}:{field_type}")
                continue
            generated.append(info)

    print(f"[SUMMARY] mode={config.mode} generated={len(generated)} failed={len(failed)}")
    return {"generated": generated, "failed": failed}
