"""
Cubic Bezier primitive and the predicates used by the adaptive flattener.

Points are plain ``(x, y)`` float tuples.  The split helpers use the
``a + (b - a) * t`` blend so results match reference renderers bit for bit.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Sequence, Tuple

Point = Tuple[float, float]


def _sub(a: Point, b: Point) -> Point:
    return (a[0] - b[0], a[1] - b[1])

def _lerp(a: Point, b: Point, t: float) -> Point:
    return (a[0] + (b[0] - a[0]) * t, a[1] + (b[1] - a[1]) * t)

def _cross(a: Point, b: Point) -> float:
    return a[0] * b[1] - a[1] * b[0]

def _dot(a: Point, b: Point) -> float:
    return a[0] * b[0] + a[1] * b[1]

def _hypot2(v: Point) -> float:
    return v[0] * v[0] + v[1] * v[1]


@dataclass(frozen=True)
class CubicBez:
    p0: Point
    p1: Point
    p2: Point
    p3: Point

    @classmethod
    def from_coords(cls, coords: Sequence[Sequence[float]]) -> "CubicBez":
        """Build a curve from four ``[x, y]`` pairs (lists, tuples, ...)."""
        if len(coords) != 4:
            raise ValueError(f"cubic needs 4 points, got {len(coords)}")
        pts = []
        for c in coords:
            if len(c) != 2:
                raise ValueError(f"point must have 2 coordinates: {c!r}")
            pts.append((float(c[0]), float(c[1])))
        return cls(*pts)

    @property
    def points(self) -> Tuple[Point, Point, Point, Point]:
        return (self.p0, self.p1, self.p2, self.p3)

    def point_at(self, t: float) -> Point:
        """Evaluate the curve at t in [0,1]."""
        u = 1 - t
        p0, p1, p2, p3 = self.p0, self.p1, self.p2, self.p3
        return (
            u**3 * p0[0] + 3*u*u*t * p1[0] + 3*u*t*t * p2[0] + t**3 * p3[0],
            u**3 * p0[1] + 3*u*u*t * p1[1] + 3*u*t*t * p2[1] + t**3 * p3[1],
        )


def is_point(curve: CubicBez, tol_squared: float) -> bool:
    """True when the curve can't be told apart from its start point.

    The p0-p1 distance is tested twice and p0-p2 is never tested, so a
    curve with p1 on p0 and p2 on p3 counts as a point whatever its length.
    ``<=`` keeps a zero tolerance usable.
    """
    return (
        _hypot2(_sub(curve.p0, curve.p1)) <= tol_squared
        and _hypot2(_sub(curve.p0, curve.p1)) <= tol_squared
        and _hypot2(_sub(curve.p3, curve.p2)) <= tol_squared
    )


def is_flat(curve: CubicBez, tol: float, tol_squared: float | None = None) -> bool:
    """True if the chord p0->p3 stays within ``tol`` of the curve.

    Fat-line bound: the signed offsets c1, c2 of the control points from the
    baseline are kept so that control points on the same side get the looser
    3/4 factor and opposite sides the tighter 4/9.  The threshold is scaled by
    the baseline length instead of dividing the offsets, which keeps a
    zero-length baseline well defined.  The two dot products reject control
    points reaching back past p0 or beyond p3 along the baseline.
    """
    if tol_squared is None:
        tol_squared = tol * tol
    baseline = _sub(curve.p3, curve.p0)
    v1 = _sub(curve.p1, curve.p0)
    v2 = _sub(curve.p2, curve.p0)
    v3 = _sub(curve.p2, curve.p3)

    c1 = _cross(baseline, v1)
    c2 = _cross(baseline, v2)
    baseline_len2 = _hypot2(baseline)
    d1 = c1 * c1
    d2 = c2 * c2

    factor = 3.0 / 4.0 if (c1 * c2) > 0.0 else 4.0 / 9.0
    f2 = factor * factor
    threshold = baseline_len2 * tol_squared

    return (
        d1 * f2 <= threshold
        and d2 * f2 <= threshold
        and _dot(baseline, v1) > -tol
        and _dot(baseline, v3) < tol
    )


def _casteljau(curve: CubicBez, t: float):
    # three blend passes; returns every intermediate point
    p1a = _lerp(curve.p0, curve.p1, t)
    p2a = _lerp(curve.p1, curve.p2, t)
    ctrl3a = _lerp(curve.p2, curve.p3, t)
    p1aa = _lerp(p1a, p2a, t)
    p2aa = _lerp(p2a, ctrl3a, t)
    p1aaa = _lerp(p1aa, p2aa, t)
    return p1a, p2a, ctrl3a, p1aa, p2aa, p1aaa


def split_before(curve: CubicBez, t: float) -> CubicBez:
    """Sub-curve over [0, t]."""
    p1a, _, _, p1aa, _, p1aaa = _casteljau(curve, t)
    return CubicBez(curve.p0, p1a, p1aa, p1aaa)


def split_after(curve: CubicBez, t: float) -> CubicBez:
    """Sub-curve over [t, 1]."""
    _, _, ctrl3a, _, p2aa, p1aaa = _casteljau(curve, t)
    return CubicBez(p1aaa, p2aa, ctrl3a, curve.p3)


def split(curve: CubicBez, t: float) -> Tuple[CubicBez, CubicBez]:
    """Both halves at t; the shared point is the same float pair in each."""
    p1a, _, ctrl3a, p1aa, p2aa, p1aaa = _casteljau(curve, t)
    return (
        CubicBez(curve.p0, p1a, p1aa, p1aaa),
        CubicBez(p1aaa, p2aa, ctrl3a, curve.p3),
    )
