"""
adjust.py
=========

Post-processing of generated JSON documents.

Bias Correction
---------------
msdf-bmfont-xml pads every glyph by half the distance range and bakes that
padding into both the baseline and the per-glyph vertical offsets
(see https://github.com/soimy/msdf-bmfont-xml/pull/93). With
`pad = distanceRange >> 1`:

    common.base     -= pad
    chars[].yoffset -= 2 * pad

`apply_bias_correction()` is the raw transform and shifts again on every call.
`correct_bias()` is what the pipeline uses: it applies the transform once and
marks the document (`baselineAdjusted`), so later calls are no-ops.

Metrics
-------
OS/2 typographic metrics of the source font are embedded as
`lightningMetrics` and also written to `<dst>/metrics/` so consumers that only
need line-height data can skip the glyph table:

    single font : metrics/<fontName>.metrics.json
    family      : metrics/<Family>.metrics.json            (all styles identical)
                  metrics/<Family>-<Style>.metrics.json    (styles diverge)

For families the first style (Regular when present) is the reference whose
metrics are embedded in the shared document in both cases.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import List, Optional, Sequence, Tuple, Union

from .config import DEFAULT_DISTANCE_RANGE, METRICS_SUBDIR
from .document import FontDocument, FontMetrics, load_document, save_document, write_metrics_file
from .errors import IntrospectionError
from .family import FontFamilyDescriptor
from .generate import SdfFontInfo


def distance_range_of(document: FontDocument) -> int:
    df = document.distance_field
    if df is not None and df.distance_range > 0:
        return df.distance_range
    return DEFAULT_DISTANCE_RANGE


def apply_bias_correction(document: FontDocument, distance_range: Optional[int] = None) -> FontDocument:
    """Unguarded correction; mutates and returns `document`."""
    dr = distance_range if distance_range is not None else distance_range_of(document)
    pad = dr >> 1
    document.common.base = document.common.base - pad
    for glyph in document.chars:
        glyph.yoffset = glyph.yoffset - pad - pad
    return document


def correct_bias(document: FontDocument) -> bool:
    """Apply the correction unless the document is already marked; True if applied."""
    if document.adjusted:
        return False
    apply_bias_correction(document)
    document.adjusted = True
    return True


def reconcile_metrics(
    style_metrics: Sequence[Tuple[str, FontMetrics]],
) -> Tuple[Optional[FontMetrics], List[Tuple[str, FontMetrics]]]:
    """
    Decide between one shared metrics set and per-style sets.

    Returns (shared, []) when every style reports identical metrics,
    otherwise (None, style_metrics).
    """
    if not style_metrics:
        return None, []
    first = style_metrics[0][1]
    if all(m == first for _, m in style_metrics):
        return first, []
    return None, list(style_metrics)


def _read_metrics(introspector, font_path: Path) -> Optional[FontMetrics]:
    try:
        return introspector.metrics(font_path)
    except IntrospectionError as e:
        print(f"[WARN] metrics unavailable for {Path(font_path).name}: {e}", file=sys.stderr)
        return None


def adjust_font(info: SdfFontInfo, introspector) -> FontDocument:
    print(f"[INFO] Adjusting {info.json_path.name}...")
    document = load_document(info.json_path)
    if not correct_bias(document):
        print(f"[WARN] {info.json_path.name} was already adjusted; bias left unchanged", file=sys.stderr)

    metrics = _read_metrics(introspector, info.font_path)
    if metrics is not None:
        document.metrics = metrics
        write_metrics_file(
            metrics, Path(info.dst_dir) / METRICS_SUBDIR / f"{info.font_name}.metrics.json"
        )
    save_document(document, info.json_path)
    return document


def adjust_family(family: FontFamilyDescriptor, introspector) -> Optional[FontDocument]:
    print(f"[INFO] Adjusting {family.json_path.name}...")
    if not family.styles:
        print(f"[WARN] No styles found in font family {family.family}", file=sys.stderr)
        return None
    document = load_document(family.json_path)
    if not correct_bias(document):
        print(f"[WARN] {family.json_path.name} was already adjusted; bias left unchanged", file=sys.stderr)

    style_metrics: List[Tuple[str, FontMetrics]] = []
    reference: Optional[FontMetrics] = None
    for i, style in enumerate(family.styles):
        m = _read_metrics(introspector, style.font_path)
        if m is None:
            continue
        style_metrics.append((style.style, m))
        if i == 0:
            reference = m

    metrics_dir = Path(family.dst_dir) / METRICS_SUBDIR
    if reference is not None:
        document.metrics = reference

    complete = len(style_metrics) == len(family.styles)
    shared, per_style = reconcile_metrics(style_metrics)
    if shared is not None and complete:
        write_metrics_file(shared, metrics_dir / f"{family.family}.metrics.json")
        print("[INFO] All styles have identical metrics - created shared family metrics file")
    elif style_metrics:
        for style_name, m in per_style or style_metrics:
            write_metrics_file(m, metrics_dir / f"{family.family}-{style_name}.metrics.json")
        print("[INFO] Styles have different metrics - created individual metrics files")

    save_document(document, family.json_path)
    print(f"[INFO] Adjusted family {family.family} with {len(family.styles)} styles")
    return document


def adjust(target: Union[SdfFontInfo, FontFamilyDescriptor], introspector) -> Optional[FontDocument]:
    if isinstance(target, FontFamilyDescriptor):
        return adjust_family(target, introspector)
    return adjust_font(target, introspector)
