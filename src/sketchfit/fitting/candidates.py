"""
Candidate primitive generation.

For every start sample and every primitive type the span is grown one
sample at a time, and each span long enough for the type becomes a
candidate fit. Growth for a (start, type) pair stops for good once the
length-normalized error passes the threshold, or when the span reaches a
corner. The output is every viable candidate; choosing among them is the
job of a later assembly stage.
"""

import math
from concurrent.futures import ThreadPoolExecutor

import numpy as np

from sketchfit.fitting.error import ErrorComputer
from sketchfit.fitting.refiner import adjust_primitive
from sketchfit.models import CandidateFit, count_by_type
from sketchfit.primitives.curves import PrimitiveType
from sketchfit.primitives.fitters import make_fitter, supports_zero_curvature
from sketchfit.tracer import get_tracer, trace

TYPE_LABELS = {
    PrimitiveType.LINE: "Lines",
    PrimitiveType.ARC: "Arcs",
    PrimitiveType.CLOTHOID: "Clothoids",
}


def type_color(primitive_type):
    """RGB color for debug drawing: red lines, green arcs, blue clothoids."""
    color = [0.0, 0.0, 0.0]
    color[int(primitive_type)] = 1.0
    return tuple(color)


def curvature_sign(curvature):
    return 1 if curvature >= 0.0 else -1


def _strict_sign(curvature):
    return 1 if curvature > 0.0 else -1


def normalized_error(error, length):
    """Squared error per unit length; degenerate spans only pass when exact."""
    if not math.isfinite(error):
        return math.inf
    if length <= 0.0:
        return 0.0 if error == 0.0 else math.inf
    return error / length


class _StartSearch:
    """Candidate search from a single start index; owns its fitters."""

    def __init__(self, start_idx, polyline, corners, error_computer, config, adjust, drawer):
        self.start_idx = start_idx
        self.polyline = polyline
        self.corners = corners
        self.error_computer = error_computer
        self.config = config
        self.adjust = adjust
        self.drawer = drawer
        self.threshold_sq = config.error_threshold * config.error_threshold
        self.inflection = config.inflection_accounting
        self.out = []

    def run(self):
        sequence = self.polyline.sequence
        for primitive_type in PrimitiveType:
            fitter = make_fitter(primitive_type)
            need_type = self.config.type_needed(primitive_type)
            fit_so_far = 0

            for idx, pt in sequence.circulator(self.start_idx):
                fit_so_far += 1

                # an unneeded type only runs long enough to seed the next one
                if not need_type and (primitive_type == PrimitiveType.CLOTHOID
                                      or fit_so_far >= int(primitive_type) + 3):
                    break

                fitter.add_point(pt)
                if fit_so_far >= primitive_type.min_points:
                    if not self._materialize(fitter, primitive_type, idx, fit_so_far):
                        break

                if fit_so_far > 1 and self.corners[idx]:
                    break

        return self.out

    def _refine(self, curve, end_idx, start_sign, end_sign):
        if self.adjust:
            adjust_primitive(
                curve, self.start_idx, end_idx, start_sign, end_sign,
                self.error_computer, self.config.curve_adjust_damping, self.inflection,
            )

    def _emit(self, candidate, primitive_type):
        self.out.append(candidate)
        if self.drawer is not None:
            self.drawer.draw_curve(candidate.curve, type_color(primitive_type), TYPE_LABELS[primitive_type])

    def _materialize(self, fitter, primitive_type, end_idx, num_pts):
        """Build, test and emit the candidate ending at end_idx; False stops growth."""
        curve = fitter.get_primitive()
        start_sign = curvature_sign(curve.start_curvature())
        end_sign = curvature_sign(curve.end_curvature())

        self._refine(curve, end_idx, start_sign, end_sign)

        error = self.error_computer.compute_error(curve, self.start_idx, end_idx)
        length = self.polyline.length_from_to(self.start_idx, end_idx)
        if normalized_error(error, length) > self.threshold_sq:
            return False

        candidate = CandidateFit(
            curve=curve,
            start_idx=self.start_idx,
            end_idx=end_idx,
            num_pts=num_pts,
            start_curv_sign=start_sign,
            end_curv_sign=end_sign,
            error=error,
        )
        self._emit(candidate, primitive_type)

        # same curve with opposite signs; drawn once above
        if primitive_type == PrimitiveType.LINE and self.inflection:
            self.out.append(candidate.with_flipped_signs())

        if start_sign != end_sign and self.inflection and supports_zero_curvature(fitter):
            self._emit_inflection_splits(fitter, primitive_type, end_idx, num_pts, length)

        return True

    def _emit_inflection_splits(self, fitter, primitive_type, end_idx, num_pts, length):
        """Try the span as a curve with zero curvature at its start, then at its end."""
        zero_at_start = fitter.get_curve_with_zero_curvature(0.0)
        zero_at_end = fitter.get_curve_with_zero_curvature(length)

        splits = (
            (zero_at_start, _strict_sign(zero_at_start.end_curvature())),
            (zero_at_end, _strict_sign(zero_at_end.start_curvature())),
        )
        for curve, sign in splits:
            self._refine(curve, end_idx, sign, sign)
            error = self.error_computer.compute_error(curve, self.start_idx, end_idx)
            if normalized_error(error, length) < self.threshold_sq:
                self._emit(CandidateFit(
                    curve=curve,
                    start_idx=self.start_idx,
                    end_idx=end_idx,
                    num_pts=num_pts,
                    start_curv_sign=sign,
                    end_curv_sign=sign,
                    error=error,
                ), primitive_type)


def check_corners(polyline, corners):
    """Corner flags as a bool array matching the polyline samples."""
    if corners is None:
        return np.zeros(polyline.size(), dtype=bool)
    corners = np.asarray(corners, dtype=bool).ravel()
    if len(corners) != polyline.size():
        raise ValueError(
            f"Got {len(corners)} corner flags for a polyline of {polyline.size()} samples"
        )
    return corners


def candidates_from_start(start_idx, polyline, corners, config, error_computer=None,
                          adjust=False, drawer=None):
    """All viable candidates whose span begins at start_idx."""
    polyline.sequence.check_index(start_idx)
    corners = check_corners(polyline, corners)
    if error_computer is None:
        error_computer = ErrorComputer(polyline)
    search = _StartSearch(start_idx, polyline, corners, error_computer, config, adjust, drawer)
    return search.run()


@trace(label="generate_candidates")
def generate_candidates(polyline, corners, config, error_computer=None, adjust=False,
                        drawer=None, workers=None):
    """
    Generate every viable candidate over all start indices and types.

    Args:
        polyline: Polyline of uniformly resampled samples
        corners: per-sample corner flags (None means no corners)
        config: FittingConfig with threshold, costs and damping
        error_computer: ErrorComputer for the polyline (built if omitted)
        adjust: refine each fit with one constrained damped step
        drawer: optional object with draw_curve(curve, color, label)
        workers: threads for the start-index loop (defaults to config.workers)

    Returns:
        list of CandidateFit, ordered by start index, then type, then span
    """
    tracer = get_tracer()

    corners = check_corners(polyline, corners)
    if error_computer is None:
        error_computer = ErrorComputer(polyline)
    if workers is None:
        workers = config.workers

    def search(start_idx):
        return _StartSearch(
            start_idx, polyline, corners, error_computer, config, adjust, drawer,
        ).run()

    starts = range(polyline.size())
    if workers > 1:
        with ThreadPoolExecutor(max_workers=workers) as pool:
            per_start = list(pool.map(search, starts))
    else:
        per_start = [search(i) for i in starts]

    candidates = [c for batch in per_start for c in batch]

    counts = count_by_type(candidates)
    tracer.event(
        f"Generated {len(candidates)} candidates from {polyline.size()} start points",
        **counts,
    )

    return candidates
