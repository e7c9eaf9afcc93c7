from typing import List, Sequence, Tuple
import svgwrite

from .curve_parser import CurveSpec

Polyline = Sequence[Tuple[float, float]]

def curves_to_svg(curves: List[Tuple[CurveSpec, Polyline]], filename: str,
                  page_size=(800, 600), margin=20, scale=1.0, row_gap=40):
    """Draw each true cubic with its flattened polyline overlaid.

    Curves are stacked vertically; each row is shifted so the control
    polygon's bounding box starts at the left margin.
    """
    dwg = svgwrite.Drawing(filename, size=(page_size[0], page_size[1]))
    y_off = margin
    for spec, poly in curves:
        c = spec.curve
        xs = [p[0] * scale for p in c.points]
        ys = [p[1] * scale for p in c.points]
        x_min, y_min = min(xs), min(ys)
        g = dwg.g(transform=f"translate({margin - x_min},{y_off - y_min + 16})")

        (x0, y0), (x1, y1), (x2, y2), (x3, y3) = zip(xs, ys)
        g.add(dwg.path(d=f"M {x0},{y0} C {x1},{y1} {x2},{y2} {x3},{y3}",
                       fill="none", stroke="black", stroke_width=1))
        if poly:
            pts = [(x * scale, y * scale) for x, y in poly]
            g.add(dwg.polyline(pts, fill="none", stroke="red", stroke_width=0.5))
            for x, y in pts:
                g.add(dwg.circle(center=(x, y), r=1.5, fill="red"))
        # labels
        segs = max(len(poly) - 1, 0)
        g.add(dwg.text(f"{spec.name} ({segs} segments)", insert=(x_min, y_min - 5), font_size="12px"))
        dwg.add(g)
        y_off += (max(ys) - y_min) + 16 + row_gap
    dwg.save()
