"""
End-to-end tests for the command-line front-end using typer's CliRunner.
"""

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from flatcubic.cli.main import app

runner = CliRunner()

CURVES_YML = """\
tolerance: 0.5
params:
  r: 50
  k: "0.5523 * r"
curves:
  - name: quarter
    points: [[0, r], [k, r], [r, k], [r, 0]]
  - name: fine
    points: [[0, 0], [30, 60], [60, -60], [90, 0]]
    tolerance: 0.05
"""


@pytest.fixture
def curves_file(tmp_path: Path) -> Path:
    p = tmp_path / "curves.yml"
    p.write_text(CURVES_YML)
    return p


def test_flatten_writes_polylines(curves_file: Path, tmp_path: Path) -> None:
    out = tmp_path / "out" / "flat.json"
    result = runner.invoke(app, ["flatten", "--curves", str(curves_file), "--out", str(out)])
    assert result.exit_code == 0, result.output
    data = json.loads(out.read_text())
    assert data["tolerance_default"] == 0.5
    quarter, fine = data["curves"]
    assert quarter["tolerance"] == 0.5
    assert fine["tolerance"] == 0.05
    assert quarter["points"][0] == [0.0, 50.0]
    assert quarter["points"][-1] == [50.0, 0.0]
    assert fine["control_points"][1] == [30.0, 60.0]
    assert len(fine["points"]) > len(quarter["points"])


def test_tolerance_precedence_flag_then_options_then_document(curves_file: Path, tmp_path: Path) -> None:
    opts = tmp_path / "options.yml"
    opts.write_text("tolerance: 0.2\nsamples: 64\n")
    out = tmp_path / "flat.json"

    runner.invoke(app, ["flatten", "--curves", str(curves_file), "--out", str(out), "--options", str(opts)])
    assert json.loads(out.read_text())["tolerance_default"] == 0.2

    runner.invoke(
        app,
        ["flatten", "--curves", str(curves_file), "--out", str(out), "--options", str(opts), "--tolerance", "0.1"],
    )
    data = json.loads(out.read_text())
    assert data["tolerance_default"] == 0.1
    # a curve's own tolerance is never overridden
    assert data["curves"][1]["tolerance"] == 0.05


def test_check_passes_on_well_behaved_curves(curves_file: Path) -> None:
    result = runner.invoke(app, ["check", "--curves", str(curves_file), "--samples", "500"])
    assert result.exit_code == 0, result.output
    assert "quarter:" in result.output
    assert "FAIL" not in result.output


def test_check_fails_for_collapsed_curve(tmp_path: Path) -> None:
    dsl = tmp_path / "curves.txt"
    dsl.write_text("CURVE collapsed\nPOINTS 0,0 -> 0,0 -> 100,0 -> 100,0\nTOL 0.01\nEND\n")
    result = runner.invoke(app, ["check", "--curves", str(dsl)])
    assert result.exit_code == 1
    assert "collapsed: 0 segment(s)" in result.output
    assert "FAIL" in result.output


def test_preview_and_export_dxf(curves_file: Path, tmp_path: Path) -> None:
    out_dir = tmp_path / "preview"
    result = runner.invoke(app, ["preview", "--curves", str(curves_file), "--out", str(out_dir)])
    assert result.exit_code == 0, result.output
    assert (out_dir / "curves.svg").exists()

    dxf = tmp_path / "dxf" / "curves.dxf"
    result = runner.invoke(
        app, ["export-dxf", "--curves", str(curves_file), "--out", str(dxf), "--splines"]
    )
    assert result.exit_code == 0, result.output
    assert dxf.exists()


def test_bad_input_is_a_usage_error(tmp_path: Path) -> None:
    bad = tmp_path / "bad.txt"
    bad.write_text("CURVE a\nPOINTS 0,0 -> 1,1\nEND\n")
    result = runner.invoke(app, ["flatten", "--curves", str(bad), "--out", str(tmp_path / "o.json")])
    assert result.exit_code == 2

    neg = tmp_path / "neg.yml"
    neg.write_text("curves:\n  - name: a\n    points: [[0, 0], [1, 1], [2, 1], [3, 0]]\n")
    result = runner.invoke(
        app, ["flatten", "--curves", str(neg), "--out", str(tmp_path / "o.json"), "--tolerance", "-1"]
    )
    assert result.exit_code == 2

    opts = tmp_path / "options.yml"
    opts.write_text("tolerance: fine\n")
    result = runner.invoke(
        app, ["flatten", "--curves", str(neg), "--out", str(tmp_path / "o.json"), "--options", str(opts)]
    )
    assert result.exit_code == 2

    opts.write_text("samples: many\n")
    result = runner.invoke(app, ["check", "--curves", str(neg), "--options", str(opts)])
    assert result.exit_code == 2
