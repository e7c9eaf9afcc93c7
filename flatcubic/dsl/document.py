"""
Parametric curve documents (YAML / JSON).

    tolerance: 0.1                 # optional run default
    params:
      r: 50
      k: "0.5523 * r"
    curves:
      - name: quarter
        points: [[0, r], [k, r], [r, k], [r, 0]]
        tolerance: 0.05            # optional per-curve override

Coordinates and params are numbers or expression strings, optionally
wrapped in ``{...}``; params are evaluated in order so later ones can
refer to earlier ones.
"""
from __future__ import annotations
import json
import logging
from pathlib import Path
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..geometry.cubic import CubicBez
from ..geometry.eval import eval_expr
from .curve_parser import CurveSpec, parse_curves

logger = logging.getLogger(__name__)

DOCUMENT_SUFFIXES = {".yml", ".yaml", ".json"}


@dataclass
class CurveDocument:
    curves: List[CurveSpec] = field(default_factory=list)
    tolerance: Optional[float] = None   # document-level default, if any


def _coerce(value: Any, env: Dict[str, Any]) -> float:
    if isinstance(value, bool):
        raise ValueError(f"expected a number or expression, got {value!r}")
    if isinstance(value, (int, float)):
        return float(value)
    if not isinstance(value, str):
        raise ValueError(f"expected a number or expression, got {value!r}")
    s = value.strip()
    if s.startswith("{") and s.endswith("}"):
        s = s[1:-1]
    try:
        return eval_expr(s, env)
    except (ZeroDivisionError, TypeError, OverflowError) as e:
        raise ValueError(f"cannot evaluate {value!r}: {e}") from e


def curves_from_document(doc: Dict[str, Any]) -> CurveDocument:
    if not isinstance(doc, dict):
        raise ValueError("curve document must be a mapping")
    env: Dict[str, Any] = {}
    for k, ex in (doc.get("params") or {}).items():
        env[k] = _coerce(ex, env)

    default_tol: Optional[float] = None
    if doc.get("tolerance") is not None:
        default_tol = _coerce(doc["tolerance"], env)

    specs: List[CurveSpec] = []
    for i, c in enumerate(doc.get("curves") or []):
        if not isinstance(c, dict):
            raise ValueError(f"curve entry {i} must be a mapping")
        name = str(c.get("name") or f"curve_{i}")
        pts = c.get("points")
        if not isinstance(pts, list) or len(pts) != 4:
            raise ValueError(f"curve {name}: 'points' must list 4 points")
        coords = []
        for p in pts:
            if not isinstance(p, (list, tuple)) or len(p) != 2:
                raise ValueError(f"curve {name}: bad point {p!r}")
            coords.append([_coerce(p[0], env), _coerce(p[1], env)])
        tol = _coerce(c["tolerance"], env) if c.get("tolerance") is not None else None
        specs.append(CurveSpec(name, CubicBez.from_coords(coords), tol))
    return CurveDocument(specs, default_tol)


def load_curves(path: Path) -> CurveDocument:
    """Load curves from a YAML/JSON document or a curve DSL file, by suffix."""
    path = Path(path)
    text = path.read_text()
    if path.suffix.lower() in DOCUMENT_SUFFIXES:
        if path.suffix.lower() == ".json":
            doc = json.loads(text)
        else:
            import yaml
            doc = yaml.safe_load(text) or {}
        result = curves_from_document(doc)
    else:
        result = CurveDocument(parse_curves(text))
    logger.debug("loaded %d curve(s) from %s", len(result.curves), path)
    return result
