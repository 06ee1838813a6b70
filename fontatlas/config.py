"""
config.py
=========

Explicit configuration for a generation run.

A single `GeneratorConfig` instance carries every path and tunable and is
passed into each operation that needs it; nothing is stored at module level.

Overrides File
--------------
`<src>/overrides.json` maps a font base name (individual mode) or a family
name (family mode) to per-field-type options:

    {
      "Ubuntu-Regular": {
        "msdf": {"fontSize": 56, "distanceRange": 6, "textureSize": [1024, 1024]},
        "ssdf": {"fontSize": 48, "textureWidth": 1024, "textureHeight": 512}
      }
    }

Missing, zero or malformed values fall back to the defaults:
fontSize=42, distanceRange=4, textureSize=[512, 512] (individual mode) or
[2048, 2048] (family mode).
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union

from .errors import ConfigError

FIELD_TYPES = ("msdf", "ssdf")
MODES = ("individual", "family")

DEFAULT_FONT_SIZE = 42
DEFAULT_DISTANCE_RANGE = 4
DEFAULT_TEXTURE_SIZE: Dict[str, Tuple[int, int]] = {
    "individual": (512, 512),
    "family": (2048, 2048),
}

OVERRIDES_FILE = "overrides.json"
CHARSET_FILE = "charset.config.json"
METRICS_SUBDIR = "metrics"


@dataclass(frozen=True)
class FieldOptions:
    font_size: int = DEFAULT_FONT_SIZE
    distance_range: int = DEFAULT_DISTANCE_RANGE
    texture_size: Tuple[int, int] = DEFAULT_TEXTURE_SIZE["individual"]


@dataclass
class GeneratorConfig:
    src_dir: Path
    dst_dir: Path
    overrides_path: Optional[Path] = None
    charset_path: Optional[Path] = None
    mode: str = "individual"
    field_types: Tuple[str, ...] = FIELD_TYPES
    # 0 / 1 -> styles of a family are rasterized one after another
    workers: int = 0
    layout_strategy: str = "horizontal"
    gutter: int = 2
    bmfont_binary: str = "msdf-bmfont"
    round_decimal: int = 6
    pot: bool = True
    smart_size: bool = False
    extra_args: Tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self):
        self.src_dir = Path(self.src_dir)
        self.dst_dir = Path(self.dst_dir)
        if self.overrides_path is not None:
            self.overrides_path = Path(self.overrides_path)
        if self.charset_path is not None:
            self.charset_path = Path(self.charset_path)
        if self.mode not in MODES:
            raise ConfigError(f"Invalid mode {self.mode!r} (expected one of {MODES})")
        for ft in self.field_types:
            validate_field_type(ft)

    @classmethod
    def from_dirs(
        cls,
        src_dir: Union[str, Path],
        dst_dir: Union[str, Path],
        charset_path: Optional[Union[str, Path]] = None,
        **kwargs: Any,
    ) -> "GeneratorConfig":
        """Build a config with the conventional overrides / charset locations under `src_dir`."""
        src = Path(src_dir)
        return cls(
            src_dir=src,
            dst_dir=Path(dst_dir),
            overrides_path=src / OVERRIDES_FILE,
            charset_path=Path(charset_path) if charset_path else src / CHARSET_FILE,
            **kwargs,
        )

    @property
    def metrics_dir(self) -> Path:
        return self.dst_dir / METRICS_SUBDIR

    def overrides(self) -> Dict[str, Any]:
        return load_overrides(self.overrides_path)

    def field_options(self, key: str, field_type: str) -> FieldOptions:
        return resolve_field_options(self.overrides(), key, field_type, self.mode)


def validate_field_type(field_type: str) -> str:
    if field_type not in FIELD_TYPES:
        raise ConfigError(f"Invalid field type {field_type!r} (expected one of {FIELD_TYPES})")
    return field_type


# ---------------------------------------------------------------------------
# Overrides
# ---------------------------------------------------------------------------


def load_overrides(path: Optional[Union[str, Path]]) -> Dict[str, Any]:
    if path is None:
        return {}
    p = Path(path)
    if not p.is_file():
        return {}
    try:
        data = json.loads(p.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigError(f"Cannot read overrides file {p}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"Overrides file {p} must contain a JSON object")
    return data


def _positive_int(value: Any, default: int) -> int:
    if isinstance(value, bool):
        return default
    if isinstance(value, (int, float)) and value > 0:
        return int(value)
    return default


def resolve_field_options(
    overrides: Dict[str, Any],
    key: str,
    field_type: str,
    mode: str = "individual",
) -> FieldOptions:
    """
    Options for one font (or family) and field type.

    `textureSize` takes precedence over `textureWidth` / `textureHeight`.
    """
    validate_field_type(field_type)
    if mode not in MODES:
        raise ConfigError(f"Invalid mode {mode!r}")
    default_w, default_h = DEFAULT_TEXTURE_SIZE[mode]

    entry = overrides.get(key)
    entry = entry.get(field_type) if isinstance(entry, dict) else None
    if not isinstance(entry, dict):
        return FieldOptions(texture_size=(default_w, default_h))

    tex = entry.get("textureSize")
    if isinstance(tex, (list, tuple)) and len(tex) == 2:
        tex_w = _positive_int(tex[0], default_w)
        tex_h = _positive_int(tex[1], default_h)
    else:
        tex_w = _positive_int(entry.get("textureWidth"), default_w)
        tex_h = _positive_int(entry.get("textureHeight"), default_h)

    return FieldOptions(
        font_size=_positive_int(entry.get("fontSize"), DEFAULT_FONT_SIZE),
        distance_range=_positive_int(entry.get("distanceRange"), DEFAULT_DISTANCE_RANGE),
        texture_size=(tex_w, tex_h),
    )
