from __future__ import annotations

import json

import pytest

from conftest import FakeRasterizer
from fontatlas import get_version
from fontatlas.cli import _build_argparser, main


def test_missing_source_directory(tmp_path, capsys):
    code = main(["--src", str(tmp_path / "nope"), "--dst", str(tmp_path / "out")])
    assert code == 1
    assert "not found" in capsys.readouterr().err


def test_no_font_files(src_dir, dst_dir, capsys):
    (src_dir / "readme.txt").write_text("no fonts", encoding="utf-8")
    assert main(["--src", str(src_dir), "--dst", str(dst_dir)]) == 1
    assert "No font files" in capsys.readouterr().err


def test_family_mode_ignores_woff(src_dir, dst_dir):
    (src_dir / "Ubuntu-Regular.woff2").write_bytes(b"wOF2")
    assert main(["--src", str(src_dir), "--dst", str(dst_dir), "--family"]) == 1


def test_mode_flags_are_exclusive():
    with pytest.raises(SystemExit):
        _build_argparser().parse_args(["--family", "--individual"])


def test_end_to_end(make_font, src_dir, dst_dir, monkeypatch, capsys):
    make_font("Ubuntu-Regular.ttf", "Ubuntu", "Regular")
    monkeypatch.setattr(
        "fontatlas.generate.default_rasterizer",
        lambda config: FakeRasterizer(page_sizes=[(64, 64), (64, 64)]),
    )

    code = main(["--src", str(src_dir), "--dst", str(dst_dir), "--field-type", "msdf"])

    assert code == 0
    doc = json.loads((dst_dir / "Ubuntu-Regular.msdf.json").read_text(encoding="utf-8"))
    assert doc["common"]["scaleW"] == 130
    assert not (dst_dir / "Ubuntu-Regular.ssdf.json").exists()
    assert "[SUMMARY] mode=individual generated=1 failed=0" in capsys.readouterr().out


def test_version_flag(capsys):
    with pytest.raises(SystemExit) as exc:
        main(["--version"])
    assert exc.value.code == 0
    assert capsys.readouterr().out.strip() == f"fontatlas {get_version()}"


def test_banner_carries_version(tmp_path, capsys):
    main(["--src", str(tmp_path / "nope")])
    assert f"v{get_version()}" in capsys.readouterr().out
