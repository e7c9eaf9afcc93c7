from __future__ import annotations
from dataclasses import dataclass
from typing import Optional, Sequence

from shapely.geometry import LineString, Point as ShapelyPoint

from ..geometry.cubic import CubicBez, Point
from ..geometry.flatten import Tolerance, flatten_to_polyline


@dataclass
class DeviationReport:
    segments: int
    max_deviation: float
    worst_t: float
    tolerance: float
    name: Optional[str] = None

    @property
    def within_tolerance(self) -> bool:
        # relative slack for float noise in the distance computation
        return self.max_deviation <= self.tolerance * (1 + 1e-9) + 1e-12


def max_deviation(curve: CubicBez, polyline: Sequence[Point], samples: int = 256):
    """Largest distance from ``samples + 1`` uniform curve samples to the polyline.

    Returns ``(distance, t)`` for the worst sample.  An empty polyline is
    measured against p0, where a degenerate curve collapses.
    """
    if samples < 1:
        raise ValueError("samples must be >= 1")
    pts = list(polyline) or [curve.p0]
    geom = LineString(pts) if len(pts) >= 2 else ShapelyPoint(pts[0])
    worst, worst_t = 0.0, 0.0
    for i in range(samples + 1):
        t = i / samples
        d = geom.distance(ShapelyPoint(curve.point_at(t)))
        if d > worst:
            worst, worst_t = d, t
    return worst, worst_t


def check_flattening(curve: CubicBez, tolerance: Tolerance, samples: int = 256,
                     name: Optional[str] = None) -> DeviationReport:
    poly = flatten_to_polyline(curve, tolerance)
    dev, t = max_deviation(curve, poly, samples)
    return DeviationReport(
        segments=max(len(poly) - 1, 0),
        max_deviation=dev,
        worst_t=t,
        tolerance=tolerance.value,
        name=name,
    )
