"""
cli.py
======

Command line front end.

    python -m fontatlas                       # individual mode, font-src -> font-dst
    python -m fontatlas --family              # group styles of a family into one atlas
    python -m fontatlas --src fonts --dst out --field-type msdf --workers 4

Family mode only accepts .ttf / .otf (styles are read from the name table);
individual mode also accepts .woff / .woff2.

Exit Codes
----------
  0 on success (individual font failures are reported in the summary),
  1 when the source directory or font files are missing, or on a config error.
"""

from __future__ import annotations

import argparse
import sys
from typing import List, Optional, Sequence

from . import get_version
from .config import FIELD_TYPES, GeneratorConfig
from .errors import ConfigError
from .generate import FAMILY_FONT_EXTS, FONT_EXTS, generate_all, list_font_files
from .layout import STRATEGIES


def _build_argparser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="fontatlas",
        description="Generate MSDF/SDF font atlases and BMFont JSON metadata from font files.",
    )
    ap.add_argument("--src", default="font-src", help="Directory containing source fonts")
    ap.add_argument("--dst", default="font-dst", help="Output directory")
    mode = ap.add_mutually_exclusive_group()
    mode.add_argument(
        "--family",
        "-f",
        action="store_true",
        help="Group fonts by family (styles as separate pages of one atlas; ttf/otf only)",
    )
    mode.add_argument(
        "--individual",
        "-i",
        action="store_true",
        help="Generate one atlas per font file (default)",
    )
    ap.add_argument(
        "--charset",
        default=None,
        help="Charset config JSON (default: <src>/charset.config.json)",
    )
    ap.add_argument(
        "--field-type",
        action="append",
        choices=FIELD_TYPES,
        default=None,
        help="Field type to generate; repeat for several (default: msdf and ssdf)",
    )
    ap.add_argument(
        "--workers",
        type=int,
        default=0,
        help="Rasterize the styles of a family on N threads (0/1 = sequential)",
    )
    ap.add_argument(
        "--layout",
        choices=STRATEGIES,
        default="horizontal",
        help="Page layout when merging multi-page output in individual mode",
    )
    ap.add_argument("--bmfont", default="msdf-bmfont", help="msdf-bmfont executable")
    ap.add_argument("--version", action="version", version=f"%(prog)s {get_version()}")
    return ap


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = _build_argparser().parse_args(argv)
    print(f"[INFO] SDF font atlas generator v{get_version()}")

    mode = "family" if args.family else "individual"
    try:
        config = GeneratorConfig.from_dirs(
            args.src,
            args.dst,
            charset_path=args.charset,
            mode=mode,
            field_types=tuple(args.field_type or FIELD_TYPES),
            workers=args.workers,
            layout_strategy=args.layout,
            bmfont_binary=args.bmfont,
        )
    except ConfigError as e:
        print(f"[ERROR] {e}", file=sys.stderr)
        return 1

    if not config.src_dir.is_dir():
        print(f"[ERROR] `{config.src_dir}` directory not found. Exiting...", file=sys.stderr)
        return 1
    config.dst_dir.mkdir(parents=True, exist_ok=True)

    exts = FAMILY_FONT_EXTS if mode == "family" else FONT_EXTS
    font_files: List[str] = list_font_files(config.src_dir, exts)
    if not font_files:
        print(f"[ERROR] No font files found in `{config.src_dir}`. Exiting...", file=sys.stderr)
        return 1

    print(f"[INFO] Generation mode: {'Family grouping' if mode == 'family' else 'Individual fonts'}")
    try:
        generate_all(config, font_files)
    except ConfigError as e:
        print(f"[ERROR] {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
