"""
Write flattened curves to an AC1018 DXF file with ezdxf.

Every curve with at least one segment becomes an open LWPOLYLINE on FLAT.
With ``splines=True`` the exact cubic goes alongside as a degree-3 SPLINE on
CURVE, and each curve is labelled at its start point on TEXT.
"""
from __future__ import annotations
from typing import Dict, List, Optional, Sequence, Tuple
import logging

try:
    import ezdxf  # type: ignore
except ImportError:
    ezdxf = None

from ..dsl.curve_parser import CurveSpec

logger = logging.getLogger(__name__)

Polyline = Sequence[Tuple[float, float]]

# $INSUNITS codes; anything unrecognised is written as unitless (0)
_INSUNITS = {"mm": 4, "in": 1}

DEFAULT_LAYERS = {
    "FLAT": {"color": 1},
    "CURVE": {"color": 7},
    "TEXT": {"color": 8},
}


def export_dxf(
    curves: List[Tuple[CurveSpec, Polyline]],
    out_path: str,
    units: str = "mm",
    splines: bool = False,
    layer_map: Optional[Dict[str, str]] = None,
    text_height: float = 2.5,
):
    if ezdxf is None:
        raise RuntimeError("DXF export needs the ezdxf package")

    doc = ezdxf.new(dxfversion="AC1018")
    msp = doc.modelspace()

    doc.header["$INSUNITS"] = _INSUNITS.get(units.lower(), 0)

    # Layers
    layer_map = layer_map or {}
    names = {k: layer_map.get(k, k) for k in DEFAULT_LAYERS}
    for key, opts in DEFAULT_LAYERS.items():
        if names[key] not in doc.layers:
            doc.layers.add(names[key], color=opts["color"])

    for spec, poly in curves:
        if len(poly) >= 2:
            msp.add_lwpolyline(list(poly), format="xy", dxfattribs={"layer": names["FLAT"]})
        if splines:
            msp.add_open_spline(list(spec.curve.points), degree=3, dxfattribs={"layer": names["CURVE"]})
        x, y = spec.curve.p0
        msp.add_text(spec.name, height=text_height, dxfattribs={"layer": names["TEXT"], "insert": (x, y)})

    doc.saveas(out_path)
    logger.debug("wrote %d curve(s) to %s", len(curves), out_path)
    return out_path
