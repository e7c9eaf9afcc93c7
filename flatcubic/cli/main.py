import json
import logging
from pathlib import Path
from typing import Optional, List, Dict, Any, Tuple

import typer

# Core imports
from ..dsl.curve_parser import CurveSpec                          # curve model
from ..dsl.document import load_curves                            # DSL / YAML / JSON input
from ..dsl.to_svg import curves_to_svg                            # SVG preview
from ..geometry.flatten import DEFAULT_TOLERANCE, Tolerance, flatten_to_polyline
from ..validators.deviation import check_flattening
# DXF exporter is imported inside the command to avoid hard dependency at import-time

app = typer.Typer(help="Cubic Bezier flattening CLI")

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


# ---------------------------
# Helpers
# ---------------------------

def _load_options(options: Optional[Path]) -> Dict[str, Any]:
    """Read the options YAML (tolerance, samples); missing file means no options."""
    if options is None:
        return {}
    import yaml

    try:
        opts = yaml.safe_load(Path(options).read_text()) or {}
    except yaml.YAMLError as e:
        raise typer.BadParameter(f"{options}: {e}", param_hint="--options")
    if not isinstance(opts, dict):
        raise typer.BadParameter(f"{options}: expected a mapping", param_hint="--options")
    return opts


def _resolve(
    curves: Path, tolerance: Optional[float], options: Optional[Path]
) -> Tuple[List[CurveSpec], float, Dict[str, Any]]:
    """
    Load curves and work out the run-wide default tolerance.
    Precedence: --tolerance, then options file, then the document, then 0.25.
    A curve's own tolerance still wins over all of these.
    """
    import yaml

    opts = _load_options(options)
    try:
        doc = load_curves(curves)
    except (ValueError, yaml.YAMLError) as e:
        raise typer.BadParameter(f"{curves}: {e}", param_hint="--curves")

    for value, hint in ((tolerance, "--tolerance"), (opts.get("tolerance"), "--options"), (doc.tolerance, "--curves")):
        if value is not None:
            try:
                default = float(value)
            except (TypeError, ValueError):
                raise typer.BadParameter(f"tolerance must be a number, got {value!r}", param_hint=hint)
            break
    else:
        default = DEFAULT_TOLERANCE
    return doc.curves, default, opts


def _tolerance_for(spec: CurveSpec, default: float) -> Tolerance:
    value = spec.tolerance if spec.tolerance is not None else default
    try:
        return Tolerance(value)
    except ValueError as e:
        raise typer.BadParameter(f"curve {spec.name}: {e}")


def _flatten_all(specs: List[CurveSpec], default: float):
    out = []
    for spec in specs:
        tol = _tolerance_for(spec, default)
        poly = flatten_to_polyline(spec.curve, tol)
        logger.debug("%s: %d segment(s) at tolerance %g", spec.name, max(len(poly) - 1, 0), tol.value)
        out.append((spec, tol, poly))
    return out


# ---------------------------
# Commands
# ---------------------------

@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging")):
    """Flatten cubic Bezier curves into polylines."""
    logging.basicConfig(level=logging.DEBUG if verbose else logging.WARNING, format=LOG_FORMAT)


@app.command()
def flatten(
    curves: Path = typer.Option(..., exists=True, dir_okay=False, help="Curve DSL, YAML or JSON file"),
    out: Path = typer.Option(..., help="Output polyline JSON"),
    tolerance: Optional[float] = typer.Option(None, help="Default tolerance for curves without their own"),
    options: Optional[Path] = typer.Option(None, exists=True, dir_okay=False, help="Options YAML"),
):
    """
    Flatten every curve and write the polylines as JSON.
    Each entry keeps its control points so the output can be re-checked later.
    """
    specs, default, _ = _resolve(curves, tolerance, options)
    out.parent.mkdir(parents=True, exist_ok=True)

    payload = {
        "tolerance_default": default,
        "curves": [
            {
                "name": spec.name,
                "tolerance": tol.value,
                "control_points": [list(p) for p in spec.curve.points],
                "points": [list(p) for p in poly],
            }
            for spec, tol, poly in _flatten_all(specs, default)
        ],
    }
    out.write_text(json.dumps(payload, indent=2))
    typer.echo(f"Wrote {len(specs)} flattened curve(s) to {out}")


@app.command()
def preview(
    curves: Path = typer.Option(..., exists=True, dir_okay=False, help="Curve DSL, YAML or JSON file"),
    out: Path = typer.Option(..., help="Output directory for SVG preview"),
    tolerance: Optional[float] = typer.Option(None, help="Default tolerance for curves without their own"),
    options: Optional[Path] = typer.Option(None, exists=True, dir_okay=False, help="Options YAML"),
    scale: float = typer.Option(1.0, help="Drawing scale (SVG px per curve unit)"),
):
    """
    Render curves with their flattened polylines to one SVG for visual checks.
    """
    specs, default, _ = _resolve(curves, tolerance, options)
    out.mkdir(parents=True, exist_ok=True)

    rows = [(spec, poly) for spec, _, poly in _flatten_all(specs, default)]
    svg_path = out / "curves.svg"
    curves_to_svg(rows, str(svg_path), scale=scale)
    typer.echo(f"Wrote {svg_path}")


@app.command("export-dxf")
def export_dxf_cmd(
    curves: Path = typer.Option(..., exists=True, dir_okay=False, help="Curve DSL, YAML or JSON file"),
    out: Path = typer.Option(..., help="Output DXF path"),
    units: str = typer.Option("mm", help="Units for $INSUNITS (mm|in|unitless)"),
    splines: bool = typer.Option(False, help="Also emit the true cubic as a SPLINE entity"),
    tolerance: Optional[float] = typer.Option(None, help="Default tolerance for curves without their own"),
    options: Optional[Path] = typer.Option(None, exists=True, dir_okay=False, help="Options YAML"),
):
    """
    Export flattened curves to DXF (AC1018) with layers FLAT / CURVE / TEXT.
    """
    from ..packaging.dxf_exporter import export_dxf  # import here to keep CLI import light

    specs, default, _ = _resolve(curves, tolerance, options)
    out.parent.mkdir(parents=True, exist_ok=True)

    rows = [(spec, poly) for spec, _, poly in _flatten_all(specs, default)]
    path = export_dxf(rows, str(out), units=units, splines=splines)
    typer.echo(f"Wrote DXF: {path}")


@app.command()
def check(
    curves: Path = typer.Option(..., exists=True, dir_okay=False, help="Curve DSL, YAML or JSON file"),
    tolerance: Optional[float] = typer.Option(None, help="Default tolerance for curves without their own"),
    samples: Optional[int] = typer.Option(None, min=1, help="Curve samples per deviation check (default 256)"),
    options: Optional[Path] = typer.Option(None, exists=True, dir_okay=False, help="Options YAML"),
):
    """
    Measure how far each true curve strays from its polyline.
    Exits with code 1 when any curve exceeds its tolerance.
    """
    specs, default, opts = _resolve(curves, tolerance, options)
    n = samples
    if n is None:
        try:
            n = int(opts.get("samples", 256))
        except (TypeError, ValueError):
            raise typer.BadParameter(f"samples must be an integer, got {opts.get('samples')!r}", param_hint="--options")
    if n < 1:
        raise typer.BadParameter("samples must be >= 1", param_hint="--samples")

    failed = 0
    for spec in specs:
        rep = check_flattening(spec.curve, _tolerance_for(spec, default), samples=n, name=spec.name)
        status = "ok" if rep.within_tolerance else "FAIL"
        typer.echo(
            f"{rep.name}: {rep.segments} segment(s), max deviation {rep.max_deviation:.6g} "
            f"at t={rep.worst_t:.4f} (tol {rep.tolerance:g}) {status}"
        )
        if not rep.within_tolerance:
            failed += 1
    if failed:
        logger.warning("%d curve(s) exceed their tolerance", failed)
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
