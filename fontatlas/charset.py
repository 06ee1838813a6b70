"""
charset.py
==========

Charset configuration: a base string plus named presets.

`charset.config.json`:

    {"charset": " !\"#$%&'()*+,-./0123456789", "presets": ["latin", "greek"]}

Each preset key resolves through the static `PRESETS` table and its characters
are appended in the order listed. Unknown keys are skipped with a warning.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Dict, Iterable, Optional, Tuple, Union

from .errors import ConfigError


def _span(*ranges: Tuple[int, int]) -> str:
    return "".join(chr(cp) for lo, hi in ranges for cp in range(lo, hi + 1))


PRESETS: Dict[str, str] = {
    "ascii": _span((0x20, 0x7E)),
    "latin": _span((0x20, 0x7E), (0xA0, 0xFF)),
    "latin-extended": _span((0x100, 0x17F), (0x180, 0x24F)),
    "greek": _span((0x370, 0x377), (0x37A, 0x37F), (0x384, 0x38A), (0x38C, 0x38C), (0x38E, 0x3A1), (0x3A3, 0x3FF)),
    "cyrillic": _span((0x400, 0x4FF)),
    "punctuation": _span((0x2010, 0x2027), (0x2030, 0x205E)),
    "currency": _span((0x20A0, 0x20C0)),
    "arrows": _span((0x2190, 0x21FF)),
    "math": _span((0x2200, 0x22FF)),
    "box-drawing": _span((0x2500, 0x257F)),
    "vietnamese": _span((0x1EA0, 0x1EF9)),
}


def apply_presets(charset: str, preset_keys: Iterable[str]) -> str:
    out = charset
    for key in preset_keys:
        if isinstance(key, str) and key in PRESETS:
            out += PRESETS[key]
        else:
            print(f"[WARN] preset '{key}' is not available; skipping", file=sys.stderr)
    return out


def load_charset(path: Optional[Union[str, Path]]) -> Optional[str]:
    """
    Resolve the charset file into a single string.

    Returns None when no charset file exists (rasterizer default charset).
    """
    if path is None:
        return None
    p = Path(path)
    if not p.is_file():
        return None
    try:
        data = json.loads(p.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigError(f"Cannot read charset config {p}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"Charset config {p} must contain a JSON object")
    charset = data.get("charset", "")
    if not isinstance(charset, str):
        raise ConfigError(f"Charset config {p}: 'charset' must be a string")
    presets = data.get("presets") or []
    if not isinstance(presets, list):
        raise ConfigError(f"Charset config {p}: 'presets' must be a list")
    return apply_presets(charset, presets)
