from __future__ import annotations
from dataclasses import dataclass, field
from typing import Callable, Iterator, List
import logging
import math

from .cubic import CubicBez, Point, is_flat, is_point, split_after, split_before

logger = logging.getLogger(__name__)

DEFAULT_TOLERANCE = 0.25


@dataclass(frozen=True)
class Tolerance:
    """Maximum allowed deviation between the curve and its polyline."""
    value: float = DEFAULT_TOLERANCE

    def __post_init__(self):
        if not math.isfinite(self.value) or self.value < 0:
            raise ValueError(f"tolerance must be a finite non-negative number, got {self.value!r}")

    @property
    def squared(self) -> float:
        return self.value * self.value


class PolylineSink:
    """Records every line-to point, in order."""

    def __init__(self):
        self.points: List[Point] = []

    def line_to(self, p: Point) -> None:
        self.points.append(p)


@dataclass
class CallbackSink:
    """Adapts a plain ``fn(point)`` callable to the ``line_to`` interface."""
    fn: Callable[[Point], None] = field(repr=False)

    def line_to(self, p: Point) -> None:
        self.fn(p)


def iter_flatten(curve: CubicBez, tolerance: Tolerance) -> Iterator[Point]:
    """Lazily yield the end point of each line segment approximating ``curve``.

    Adaptive step search: a flat prefix [0, step] is consumed and the next
    probe tries twice the fraction, a non-flat prefix halves the step.  The
    whole remaining curve is only tested while ``step >= 0.25``, so deep
    subdivision does not keep paying for full-curve checks.

    Calling again restarts from scratch; nothing is shared between calls.
    """
    tol = tolerance.value
    tol2 = tolerance.squared
    if is_point(curve, tol2):
        return

    rem = curve
    step = 0.5
    stalled = set()
    while True:
        if step >= 0.25 and is_flat(rem, tol, tol2):
            yield rem.p3
            return

        while True:
            sub = split_before(rem, step)
            if is_flat(sub, tol, tol2):
                yield sub.p3
                prev = rem
                rem = split_after(rem, step)
                next_step = step * 2.0
                if next_step < 1.0:
                    step = next_step
                if rem == prev:
                    # rem did not move; a repeated (rem, step) means the search cycles forever.
                    state = (rem, step)
                    if state in stalled:
                        logger.warning("flatten made no progress; closing curve ending at %r with one segment", rem.p3)
                        yield rem.p3
                        return
                    stalled.add(state)
                break
            step *= 0.5
            if step == 0.0:
                # Underflow: from here the search can never make progress.
                logger.warning("flatten step underflowed; closing curve ending at %r with one segment", rem.p3)
                yield rem.p3
                return


def flatten_cubic(curve: CubicBez, tolerance: Tolerance, sink) -> int:
    """Push line-to events for ``curve`` into ``sink.line_to``; returns the count."""
    n = 0
    for p in iter_flatten(curve, tolerance):
        sink.line_to(p)
        n += 1
    return n


def flatten_to_polyline(curve: CubicBez, tolerance: Tolerance) -> List[Point]:
    """Polyline ``[p0, ...emitted points]``; empty for degenerate curves."""
    sink = PolylineSink()
    if flatten_cubic(curve, tolerance, sink) == 0:
        return []
    return [curve.p0] + sink.points
