"""
Very small curve DSL -> CurveSpec list.

CURVE <name>
POINTS x0,y0 -> x1,y1 -> x2,y2 -> x3,y3
TOL <tolerance>        # optional, overrides the run-wide default
END
"""
from dataclasses import dataclass
from typing import List, Optional, Tuple

from ..geometry.cubic import CubicBez


@dataclass
class CurveSpec:
    name: str
    curve: CubicBez
    tolerance: Optional[float] = None


def _xy(tok: str, line: str) -> Tuple[float, float]:
    try:
        x, y = map(float, tok.strip().split(","))
    except ValueError as e:
        raise ValueError(f"Bad point {tok.strip()!r} in line: {line}") from e
    return (x, y)


def parse_curves(text: str) -> List[CurveSpec]:
    specs: List[CurveSpec] = []
    name: Optional[str] = None
    points = None
    tol: Optional[float] = None
    for raw in text.splitlines():
        line = raw.split("#", 1)[0].strip()
        if not line:
            continue
        if line.startswith("CURVE "):
            if name is not None:
                raise ValueError(f"CURVE {name} is missing END")
            name = line.split(" ", 1)[1].strip()
            points, tol = None, None
            continue
        if name is None:
            raise ValueError(f"Command outside of CURVE/END block: {line}")
        if line == "END":
            if points is None:
                raise ValueError(f"CURVE {name} has no POINTS")
            specs.append(CurveSpec(name, CubicBez(*points), tol))
            name = None
        elif line.startswith("POINTS "):
            segs = line.split(" ", 1)[1].split("->")
            if len(segs) != 4:
                raise ValueError(f"POINTS needs 4 points: {line}")
            points = [_xy(s, line) for s in segs]
        elif line.startswith("TOL "):
            try:
                tol = float(line.split(" ", 1)[1])
            except ValueError as e:
                raise ValueError(f"Bad tolerance in line: {line}") from e
        else:
            raise ValueError(f"Unknown line: {line}")
    if name is not None:
        raise ValueError(f"CURVE {name} is missing END")
    return specs
