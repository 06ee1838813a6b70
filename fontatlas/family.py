"""
family.py
=========

Family mode: all styles of a type family (Regular, Bold, Italic, ...) share
one multi-page atlas and one JSON document.

Steps per family
----------------
1. Group font files by family name (font introspection; fallback to the file
   name token before "-", then "Unknown").
2. Order styles: "Regular" (case-insensitive) first, the rest alphabetical.
   Page 0 is therefore a Regular page whenever the family has one, and the
   metrics adjuster treats the first style as the reference. Repeated style
   names are labelled Regular, Regular-2, ... so page ranges and metrics
   files stay distinct.
3. Rasterize every style (sequentially, or on a bounded thread pool when
   `config.workers > 1`). Each job is written as intermediate files
   `<Family>-<Style>.<ft>[_<i>].png` + `<Family>-<Style>.<ft>.json`.
4. Only after every job returned: assign contiguous global page ranges and
   copy each intermediate page to `<Family>.<ft>_<globalIndex>.png`. Pages are
   copied, not recomposited; each style already has complete pages.
5. Use style 0's JSON as template: `info.face` = family, `pages` = family
   file names, plus a `styles` index with page ranges.
6. Remove every intermediate file.

A family whose template JSON cannot be read yields None; sibling families
are unaffected.

Output
------
    <dst>/<Family>.<ft>_0.png ... <Family>.<ft>_<N-1>.png
    <dst>/<Family>.<ft>.json
"""

from __future__ import annotations

import shutil
import sys
from collections import OrderedDict
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

from .charset import load_charset
from .config import GeneratorConfig, resolve_field_options, validate_field_type
from .document import load_document, save_document
from .errors import ConfigError, DocumentError, FontAtlasError
from .introspect import DEFAULT_STYLE, family_from_filename
from .rasterize import RasterJob, RasterOptions, Rasterizer, page_file_names, write_job


# ---------------------------------------------------------------------------
# Data Structures
# ---------------------------------------------------------------------------


@dataclass
class FontSource:
    path: Path
    style: str
    file_name: str


@dataclass
class StyleEntry:
    style: str
    font_path: Path
    page_index: int = 0
    page_count: int = 1

    @property
    def page_range(self) -> str:
        if self.page_count == 0:
            return ""
        if self.page_count > 1:
            return f"{self.page_index}-{self.page_index + self.page_count - 1}"
        return f"{self.page_index}"

    def to_index_dict(self) -> Dict[str, object]:
        return {
            "style": self.style,
            "pageIndex": self.page_index,
            "pageCount": self.page_count,
            "pageRange": self.page_range,
        }


@dataclass
class FontFamilyDescriptor:
    family: str
    field_type: str
    styles: List[StyleEntry]
    json_path: Path
    png_paths: List[Path] = field(default_factory=list)
    dst_dir: Path = Path(".")


# ---------------------------------------------------------------------------
# Grouping / ordering
# ---------------------------------------------------------------------------


def group_fonts_by_family(
    config: GeneratorConfig,
    font_files: Sequence[str],
    introspector,
) -> "OrderedDict[str, List[FontSource]]":
    """Map family name -> font sources, in first-seen order."""
    families: "OrderedDict[str, List[FontSource]]" = OrderedDict()
    for font_file in font_files:
        font_path = config.src_dir / font_file
        if not font_path.is_file():
            print(f"[WARN] Font {font_file} does not exist, skipping...", file=sys.stderr)
            continue
        info = introspector.font_info(font_path)
        family = info.family or family_from_filename(font_file)
        style = info.style or DEFAULT_STYLE
        families.setdefault(family, []).append(
            FontSource(path=font_path, style=style, file_name=font_file)
        )
    return families


def _style_key(style: str) -> Tuple[int, str, str]:
    if style.lower() == "regular":
        return (0, "", "")
    return (1, style.casefold(), style)


def order_styles(fonts: Sequence[FontSource]) -> List[FontSource]:
    """Regular first, then the remaining styles alphabetically (stable for duplicates)."""
    return sorted(fonts, key=lambda f: _style_key(f.style))


def unique_style_labels(styles: Sequence[str]) -> List[str]:
    """Repeated style names get a numeric suffix: Regular, Regular-2, Regular-3."""
    labels: List[str] = []
    used = set()
    for style in styles:
        label, n = style, 1
        while label in used:
            n += 1
            label = f"{style}-{n}"
        used.add(label)
        labels.append(label)
    return labels


def assign_page_ranges(page_counts: Sequence[int]) -> List[Tuple[int, int]]:
    """Contiguous (start, count) ranges, one per style, in the given order."""
    ranges: List[Tuple[int, int]] = []
    start = 0
    for count in page_counts:
        ranges.append((start, count))
        start += count
    return ranges


# ---------------------------------------------------------------------------
# Rasterization
# ---------------------------------------------------------------------------


def _rasterize_styles(
    fonts: Sequence[FontSource],
    options: RasterOptions,
    rasterizer: Rasterizer,
    workers: int,
) -> List[RasterJob]:
    """Run one job per style; returns only once every job finished (in style order)."""
    if workers <= 1 or len(fonts) <= 1:
        jobs = []
        for i, font in enumerate(fonts):
            print(f"[INFO] Generating style: {font.style} (style {i})")
            jobs.append(rasterizer.rasterize(font.path, options))
        return jobs

    results: List[Optional[RasterJob]] = [None] * len(fonts)
    with ThreadPoolExecutor(max_workers=workers) as ex:
        futures = {ex.submit(rasterizer.rasterize, f.path, options): i for i, f in enumerate(fonts)}
        for fut in as_completed(futures):
            i = futures[fut]
            results[i] = fut.result()
            print(f"[INFO] Rasterized style: {fonts[i].style}")
    return [job for job in results if job is not None]


# ---------------------------------------------------------------------------
# Family aggregation
# ---------------------------------------------------------------------------


def generate_family(
    config: GeneratorConfig,
    family: str,
    fonts: Sequence[FontSource],
    field_type: str,
    rasterizer: Rasterizer,
) -> Optional[FontFamilyDescriptor]:
    """
    Build one atlas + JSON for every style of `family`.

    Returns
    -------
    FontFamilyDescriptor or None
        None when there are no styles, the field type is invalid, or the
        template JSON (style 0) cannot be read. Rasterization failures
        propagate as `RasterizationError`.
    """
    if not fonts:
        print(f"[WARN] No fonts provided for family {family}; skipping", file=sys.stderr)
        return None
    try:
        validate_field_type(field_type)
    except ConfigError as e:
        print(f"[ERROR] {family}: {e}", file=sys.stderr)
        return None

    fonts = order_styles(fonts)
    dst = config.dst_dir
    dst.mkdir(parents=True, exist_ok=True)

    # family-level overrides only, so every style shares size and range
    field_options = resolve_field_options(config.overrides(), family, field_type, "family")
    options = RasterOptions.build(
        field_type, field_options, config, charset=load_charset(config.charset_path)
    )

    jobs = _rasterize_styles(fonts, options, rasterizer, config.workers)

    labels = unique_style_labels([f.style for f in fonts])
    for font, label in zip(fonts, labels):
        if label != font.style:
            print(
                f"[WARN] {font.file_name}: style {font.style} already used in {family}; "
                f"labelled {label}",
                file=sys.stderr,
            )

    intermediates: List[Path] = []
    style_pages: List[List[Path]] = []
    template_json: Optional[Path] = None
    styles: List[StyleEntry] = []
    family_pngs: List[Path] = []
    try:
        for i, (label, job) in enumerate(zip(labels, jobs)):
            base = f"{family}-{label}"
            # cleanup list also covers files a failing write never produced
            intermediates.extend(dst / n for n in page_file_names(base, field_type, job.page_count))
            intermediates.append(dst / f"{base}.{field_type}.json")
            json_path, png_paths = write_job(job, dst, base, field_type)
            style_pages.append(png_paths)
            if i == 0:
                template_json = json_path

        ranges = assign_page_ranges([len(p) for p in style_pages])
        for font, label, pages, (start, count) in zip(fonts, labels, style_pages, ranges):
            if count == 0:
                print(f"[WARN] Style {label} of {family} produced no pages", file=sys.stderr)
            elif count > 1:
                print(f"[INFO] Style {label} has {count} pages")
            for local_index, page_path in enumerate(pages):
                global_index = start + local_index
                family_page = dst / f"{family}.{field_type}_{global_index}.png"
                shutil.copyfile(page_path, family_page)
                family_pngs.append(family_page)
                print(
                    f"[INFO] Created family page {global_index}: {family_page.name} "
                    f"({label} page {local_index})"
                )
            styles.append(
                StyleEntry(style=label, font_path=font.path, page_index=start, page_count=count)
            )

        try:
            document = load_document(template_json)
        except DocumentError as e:
            print(f"[ERROR] {family}: cannot read template document: {e}", file=sys.stderr)
            return None
    finally:
        for path in intermediates:
            path.unlink(missing_ok=True)
        print(f"[INFO] Cleaned up {len(intermediates)} intermediate file(s) for {family}")

    document.info["face"] = family
    document.pages = [p.name for p in family_pngs]
    document.common.pages = len(family_pngs)
    document.styles = [s.to_index_dict() for s in styles]
    json_path = save_document(document, dst / f"{family}.{field_type}.json")
    print(f"[INFO] Created family descriptor: {json_path.name}")

    return FontFamilyDescriptor(
        family=family,
        field_type=field_type,
        styles=styles,
        json_path=json_path,
        png_paths=family_pngs,
        dst_dir=dst,
    )


def generate_families(
    config: GeneratorConfig,
    font_files: Sequence[str],
    field_type: str,
    rasterizer: Rasterizer,
    introspector,
) -> Tuple[List[FontFamilyDescriptor], List[str]]:
    """
    Aggregate every family found in `font_files`.

    Returns (descriptors, failed family names). A failed family is logged and
    its siblings still run.
    """
    print(f"[INFO] Generating {field_type} fonts grouped by family...")
    results: List[FontFamilyDescriptor] = []
    failed: List[str] = []
    for family, fonts in group_fonts_by_family(config, font_files, introspector).items():
        print(f"[INFO] Processing family: {family} with {len(fonts)} styles")
        try:
            descriptor = generate_family(config, family, fonts, field_type, rasterizer)
        except FontAtlasError as e:
            print(f"[ERROR] family {family} ({field_type}): {e}", file=sys.stderr)
            failed.append(family)
            continue
        if descriptor is None:
            failed.append(family)
            continue
        results.append(descriptor)
    return results, failed
