from __future__ import annotations

import importlib
import json
from pathlib import Path

import pytest

from perch.core import Table
from perch.io import WriteError
from perch.viz import facet_wrap, geom_line, geom_point, new_plot, resolve, save
from perch.viz.save import to_pixels

save_module = importlib.import_module("perch.viz.save")


def _spec(ebird: Table):
    return new_plot(ebird, {"x": "year", "y": "samplesize"}) + geom_point()


def test_to_pixels_units() -> None:
    assert to_pixels(1, "in") == 72.0
    assert to_pixels(25.4, "mm") == pytest.approx(72.0)
    assert to_pixels(4, "cm") == pytest.approx(113.3858, rel=1e-4)
    assert to_pixels(300, "px") == 300.0
    with pytest.raises(ValueError):
        to_pixels(1, "pt")  # type: ignore[arg-type]


def test_save_html(tmp_path: Path, ebird: Table) -> None:
    out = save(_spec(ebird), tmp_path / "plot.html", width=4, height=3)
    assert out == tmp_path / "plot.html"
    text = out.read_text(encoding="utf-8")
    assert "vega" in text.lower()


def test_save_json_sizes_in_pixels(tmp_path: Path, ebird: Table) -> None:
    out = save(_spec(ebird), tmp_path / "plot.json", width=2, height=1, unit="in")
    spec = json.loads(out.read_text(encoding="utf-8"))
    assert spec["width"] == 144.0
    assert spec["height"] == 72.0


def test_save_splits_size_across_facets(tmp_path: Path, ebird: Table) -> None:
    plan = resolve(new_plot(ebird, {"x": "year", "y": "samplesize"}) + geom_line() + facet_wrap("state", ncol=2))
    out = save(plan, tmp_path / "facets.json", width=4, height=4, unit="in")
    spec = json.loads(out.read_text(encoding="utf-8"))
    assert [p["width"] for p in spec["concat"]] == [144.0, 144.0, 144.0]
    assert [p["height"] for p in spec["concat"]] == [144.0, 144.0, 144.0]


def test_save_rejects_unknown_suffix(tmp_path: Path, ebird: Table) -> None:
    with pytest.raises(WriteError):
        save(_spec(ebird), tmp_path / "plot.bmp")
    assert not (tmp_path / "plot.bmp").exists()
    with pytest.raises(ValueError):
        save(_spec(ebird), tmp_path / "plot.html", dpi=0)


def test_image_export_without_converter(tmp_path: Path, ebird: Table, monkeypatch) -> None:
    real_import = importlib.import_module

    def fake_import(name: str, *args, **kwargs):
        if name == "vl_convert":
            raise ImportError("No module named 'vl_convert'")
        return real_import(name, *args, **kwargs)

    monkeypatch.setattr(save_module.importlib, "import_module", fake_import)
    with pytest.raises(WriteError) as ei:
        save(_spec(ebird), tmp_path / "plot.png")
    assert "vl-convert-python" in str(ei.value)
    assert not (tmp_path / "plot.png").exists()


def test_png_export_uses_dpi(tmp_path: Path, ebird: Table, monkeypatch) -> None:
    calls: dict = {}

    class FakeConverter:
        @staticmethod
        def vegalite_to_png(spec, scale=1.0, ppi=72):
            calls["scale"] = scale
            calls["ppi"] = ppi
            return b"\x89PNG"

    monkeypatch.setattr(save_module, "_converter", lambda: FakeConverter)
    out = save(_spec(ebird), tmp_path / "plot.png", width=4, height=4, unit="cm", dpi=600)
    assert out.read_bytes() == b"\x89PNG"
    assert calls == {"scale": pytest.approx(600 / 72), "ppi": 600}


@pytest.mark.parametrize("name", ["plot.jpeg", "plot.JPG"])
def test_jpeg_export_accepts_both_suffixes(tmp_path: Path, ebird: Table, monkeypatch, name: str) -> None:
    calls: dict = {}

    class FakeConverter:
        @staticmethod
        def vegalite_to_jpeg(spec, scale=1.0):
            calls["scale"] = scale
            return b"\xff\xd8\xff"

    monkeypatch.setattr(save_module, "_converter", lambda: FakeConverter)
    out = save(_spec(ebird), tmp_path / name, width=10, height=8, unit="cm", dpi=144)
    assert out.read_bytes() == b"\xff\xd8\xff"
    assert calls == {"scale": pytest.approx(2.0)}
