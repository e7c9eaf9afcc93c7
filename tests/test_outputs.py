"""
Tests for the deviation validator and the SVG / DXF writers.
"""

from pathlib import Path

import ezdxf
import pytest

from flatcubic.dsl.curve_parser import CurveSpec
from flatcubic.dsl.to_svg import curves_to_svg
from flatcubic.geometry.cubic import CubicBez
from flatcubic.geometry.flatten import Tolerance, flatten_to_polyline
from flatcubic.packaging.dxf_exporter import export_dxf
from flatcubic.validators.deviation import check_flattening, max_deviation

ARC = CubicBez((0.0, 50.0), (27.615, 50.0), (50.0, 27.615), (50.0, 0.0))
LINE = CubicBez((0.0, 0.0), (10.0, 0.0), (20.0, 0.0), (30.0, 0.0))
COLLAPSED = CubicBez((0.0, 0.0), (0.0, 0.0), (100.0, 0.0), (100.0, 0.0))


def _rows(tol: float = 0.25):
    specs = [CurveSpec("arc", ARC), CurveSpec("line", LINE), CurveSpec("collapsed", COLLAPSED)]
    return [(s, flatten_to_polyline(s.curve, Tolerance(tol))) for s in specs]


def test_max_deviation_of_straight_curve_is_zero() -> None:
    dev, _ = max_deviation(LINE, [LINE.p0, LINE.p3])
    assert dev == pytest.approx(0.0, abs=1e-12)


def test_max_deviation_finds_worst_sample() -> None:
    """Chord of a symmetric arch: worst sample sits at t=0.5, 3/4 of the height."""
    arch = CubicBez((0.0, 0.0), (0.0, 4.0), (4.0, 4.0), (4.0, 0.0))
    dev, t = max_deviation(arch, [arch.p0, arch.p3], samples=100)
    assert t == pytest.approx(0.5)
    assert dev == pytest.approx(3.0)


def test_max_deviation_rejects_zero_samples() -> None:
    with pytest.raises(ValueError):
        max_deviation(LINE, [LINE.p0, LINE.p3], samples=0)


def test_check_flattening_reports_within_tolerance() -> None:
    rep = check_flattening(ARC, Tolerance(0.25), samples=512, name="arc")
    assert rep.name == "arc"
    assert rep.segments >= 2
    assert rep.max_deviation <= 0.25
    assert rep.within_tolerance


def test_check_flattening_flags_collapsed_curve() -> None:
    """A curve the degeneracy test swallows has no segments and is measured
    against p0, so the report shows how far the real curve reaches."""
    rep = check_flattening(COLLAPSED, Tolerance(0.01), samples=64)
    assert rep.segments == 0
    assert rep.max_deviation == pytest.approx(100.0)
    assert not rep.within_tolerance


def test_curves_to_svg_writes_paths_and_labels(tmp_path: Path) -> None:
    out = tmp_path / "curves.svg"
    curves_to_svg(_rows(), str(out))
    text = out.read_text()
    assert "<svg" in text
    assert "polyline" in text
    assert "arc (" in text
    assert "collapsed (0 segments)" in text


def test_export_dxf_writes_one_polyline_per_flattened_curve(tmp_path: Path) -> None:
    out = tmp_path / "curves.dxf"
    rows = _rows()
    assert export_dxf(rows, str(out), units="mm") == str(out)

    doc = ezdxf.readfile(str(out))
    assert doc.header["$INSUNITS"] == 4
    msp = doc.modelspace()
    polys = msp.query("LWPOLYLINE")
    # the collapsed curve has no polyline
    assert len(polys) == 2
    arc_xy = [c for p in polys[0].get_points("xy") for c in p]
    assert arc_xy == pytest.approx([c for p in rows[0][1] for c in p])
    assert all(p.dxf.layer == "FLAT" for p in polys)
    assert len(msp.query("SPLINE")) == 0
    assert len(msp.query("TEXT")) == 3


def test_export_dxf_splines_and_units(tmp_path: Path) -> None:
    out = tmp_path / "curves.dxf"
    export_dxf(_rows(), str(out), units="in", splines=True, layer_map={"CURVE": "TRUE_CURVE"})
    doc = ezdxf.readfile(str(out))
    assert doc.header["$INSUNITS"] == 1
    splines = doc.modelspace().query("SPLINE")
    assert len(splines) == 3
    assert all(s.dxf.layer == "TRUE_CURVE" for s in splines)


@pytest.mark.parametrize("units,code", [("mm", 4), ("MM", 4), ("in", 1), ("unitless", 0), ("furlong", 0)])
def test_export_dxf_insunits_codes(tmp_path: Path, units: str, code: int) -> None:
    out = tmp_path / "curves.dxf"
    export_dxf(_rows(), str(out), units=units)
    assert ezdxf.readfile(str(out)).header["$INSUNITS"] == code
