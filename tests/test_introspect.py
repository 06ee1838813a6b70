from __future__ import annotations

import pytest

from fontatlas.document import FontMetrics
from fontatlas.errors import IntrospectionError
from fontatlas.introspect import FontInfo, FontIntrospector, family_from_filename, resolve_style


def test_font_info_from_name_table(make_font):
    path = make_font("Ubuntu-Bold.ttf", "Ubuntu", "Bold")
    info = FontIntrospector().font_info(path)
    assert info.family == "Ubuntu"
    assert info.style == "Bold"


def test_metrics_from_os2_and_head(make_font):
    path = make_font("Ubuntu-Regular.ttf", "Ubuntu", "Regular", ascender=800, descender=-200, line_gap=50, units_per_em=1000)
    assert FontIntrospector().metrics(path) == FontMetrics(800, -200, 50, 1000)


def test_unreadable_font(src_dir, capsys):
    path = src_dir / "Broken-Regular.ttf"
    path.write_bytes(b"\x00\x01")
    introspector = FontIntrospector()
    assert introspector.font_info(path) == FontInfo()
    assert "[WARN]" in capsys.readouterr().err
    with pytest.raises(IntrospectionError):
        introspector.metrics(path)


def test_woff_is_not_introspected(src_dir):
    path = src_dir / "Ubuntu-Regular.woff2"
    path.write_bytes(b"wOF2")
    assert FontIntrospector().font_info(path) == FontInfo()


@pytest.mark.parametrize(
    "family, subfamily, full_name, expected",
    [
        ("Ubuntu", "Bold", "Ubuntu Bold", "Bold"),
        ("Ubuntu", "Regular", "Ubuntu Condensed", "Condensed"),
        ("Ubuntu", "Regular", "Ubuntu", "Regular"),
        ("Ubuntu", None, None, "Regular"),
        ("Ubuntu", "Ubuntu", None, "Regular"),
    ],
)
def test_resolve_style(family, subfamily, full_name, expected):
    assert resolve_style(family, subfamily, full_name) == expected


@pytest.mark.parametrize(
    "name, expected",
    [("Ubuntu-BoldItalic.ttf", "Ubuntu"), ("Inter.otf", "Inter"), ("-Bold.ttf", "Unknown")],
)
def test_family_from_filename(name, expected):
    assert family_from_filename(name) == expected
