"""
SVG debug drawing of candidate primitives.

SvgDebugDrawer receives draw callbacks from the candidate search and
renders every drawn primitive, grouped by label, over the input samples.
Drawing is a pure notification and never feeds back into fitting.
"""

import threading

import numpy as np
import svgwrite

from sketchfit.io.save_artifacts import save_svg
from sketchfit.tracer import get_tracer


def _rgb(color):
    r, g, b = (int(round(255 * max(0.0, min(1.0, c)))) for c in color)
    return f"rgb({r},{g},{b})"


def _path_data(points):
    parts = [f"M {points[0][0]:.3f} {points[0][1]:.3f}"]
    parts.extend(f"L {x:.3f} {y:.3f}" for x, y in points[1:])
    return " ".join(parts)


class SvgDebugDrawer:
    """Collects draw_curve callbacks; safe to share between search threads."""

    def __init__(self, max_curves=2000, samples_per_curve=24):
        self.max_curves = max_curves
        self.samples_per_curve = samples_per_curve
        self._curves = []
        self._dropped = 0
        self._lock = threading.Lock()

    def draw_curve(self, curve, color, label):
        with self._lock:
            if len(self._curves) >= self.max_curves:
                self._dropped += 1
                return
            self._curves.append((curve.sample(self.samples_per_curve), tuple(color), label))

    def __len__(self):
        return len(self._curves)

    @property
    def dropped(self):
        return self._dropped

    def labels(self):
        return sorted({label for _, _, label in self._curves})

    def render(self, samples=None, stroke_width=0.5, margin=5.0):
        """
        Build an svgwrite Drawing of the recorded curves.

        Args:
            samples: optional (N, 2) polyline samples drawn as dots
            stroke_width: line width for curves
            margin: padding around the content bounds

        Returns:
            svgwrite.Drawing object
        """
        tracer = get_tracer()

        all_points = [pts for pts, _, _ in self._curves]
        if samples is not None and len(samples):
            all_points.append(np.asarray(samples, dtype=float))
        if all_points:
            stacked = np.vstack(all_points)
            min_xy = stacked.min(axis=0) - margin
            max_xy = stacked.max(axis=0) + margin
        else:
            min_xy = np.zeros(2)
            max_xy = np.ones(2)
        width, height = np.maximum(max_xy - min_xy, 1.0)

        dwg = svgwrite.Drawing(size=(f"{width:.0f}px", f"{height:.0f}px"))
        dwg.viewbox(float(min_xy[0]), float(min_xy[1]), float(width), float(height))

        groups = {}
        for pts, color, label in self._curves:
            group = groups.get(label)
            if group is None:
                group = dwg.g(id=label, fill="none", stroke_width=stroke_width, stroke_opacity=0.4)
                groups[label] = group
            group.add(dwg.path(d=_path_data(pts), stroke=_rgb(color)))
        for label in sorted(groups):
            dwg.add(groups[label])

        if samples is not None and len(samples):
            sample_group = dwg.g(id="samples", fill="black")
            for x, y in np.asarray(samples, dtype=float):
                sample_group.add(dwg.circle(center=(float(x), float(y)), r=stroke_width))
            dwg.add(sample_group)

        tracer.event(f"Rendered {len(self._curves)} curves to SVG ({self._dropped} dropped)")

        return dwg

    def save(self, path, samples=None, stroke_width=0.5):
        save_svg(self.render(samples, stroke_width), path)
