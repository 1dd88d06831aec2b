"""
Main pipeline orchestrator for sketchfit.

Takes one raw stroke through cleanup, resampling, corner detection and
candidate generation, and packages the result as a FitReport.
"""

import os

import numpy as np

from sketchfit.config import load_config, validate_config
from sketchfit.fitting.error import ErrorComputer
from sketchfit.fitting.registry import get_primitive_fitter
from sketchfit.geometry.polyline import Polyline
from sketchfit.io.load_stroke import load_stroke
from sketchfit.io.save_artifacts import ensure_dir, save_json
from sketchfit.io.svg_debug import SvgDebugDrawer
from sketchfit.models import (
    FitReport, StrokeMeta, compute_bbox, count_by_type, generate_run_id,
)
from sketchfit.preprocess.corners import detect_corners
from sketchfit.preprocess.resample import remove_duplicate_points, resample_polyline
from sketchfit.tracer import get_tracer, trace


def prepare_polyline(points, closed, config):
    """
    Clean and resample raw points into a polyline with corner flags.

    Returns (polyline, corners).
    """
    resample_cfg = config.resample
    points = remove_duplicate_points(points, resample_cfg.dedupe_tolerance, closed)
    if resample_cfg.enabled:
        points = resample_polyline(points, resample_cfg.spacing, closed)
    if len(points) < 2:
        raise ValueError("Stroke collapses to a single point after cleanup")
    # a closed loop needs at least a triangle
    if closed and len(points) < 3:
        closed = False

    polyline = Polyline(points, closed)
    corners = detect_corners(points, closed, resample_cfg.corner_angle_deg)
    return polyline, corners


@trace(label="fit_stroke")
def fit_stroke(points, closed=False, config=None, drawer=None):
    """
    Generate candidate primitives for one stroke.

    Args:
        points: (N, 2) raw stroke points
        closed: whether the stroke is a closed loop
        config: PipelineConfig (defaults if omitted)
        drawer: optional debug drawer receiving accepted candidates

    Returns:
        tuple of (FitReport, list of CandidateFit, Polyline)
    """
    tracer = get_tracer()

    if config is None:
        config = load_config()
    validate_config(config)

    points = np.asarray(points, dtype=float).reshape(-1, 2)

    with tracer.span("prepare", module="pipeline"):
        polyline, corners = prepare_polyline(points, closed, config)

    strategy = get_primitive_fitter(config.fitting.algorithm)
    with tracer.span("candidates", module="pipeline", algorithm=strategy.name):
        candidates = strategy.run(
            polyline, corners, config.fitting,
            error_computer=ErrorComputer(polyline),
            drawer=drawer,
        )

    samples = polyline.pts()
    report = FitReport(
        run_id=generate_run_id(points, polyline.closed),
        algorithm=strategy.name,
        error_threshold=config.fitting.error_threshold,
        stroke=StrokeMeta(
            num_input_points=len(points),
            num_samples=polyline.size(),
            closed=polyline.closed,
            length=polyline.length(),
            corner_indices=[int(i) for i in np.flatnonzero(corners)],
            bbox=compute_bbox(samples),
        ),
        samples=samples.tolist(),
        candidates=[c.to_record() for c in candidates],
        counts=count_by_type(candidates),
    )

    return report, candidates, polyline


@trace(label="run_fitting")
def run_fitting(input_path, out_dir, config=None, config_path=None, debug=False):
    """
    Fit one stroke file and write the results.

    Writes candidates.json to out_dir and, with debug enabled,
    debug/candidates.svg showing every accepted candidate.

    Returns:
        FitReport
    """
    tracer = get_tracer()

    if config is None:
        config = load_config(config_path)
    if debug:
        config.debug.enabled = True

    points, closed = load_stroke(input_path)
    ensure_dir(out_dir)

    drawer = None
    if config.debug.enabled:
        drawer = SvgDebugDrawer(
            max_curves=config.debug.max_curves,
            samples_per_curve=config.debug.samples_per_curve,
        )

    report, _, polyline = fit_stroke(points, closed, config, drawer)

    save_json(report, os.path.join(out_dir, "candidates.json"))

    if drawer is not None:
        drawer.save(
            os.path.join(out_dir, "debug", "candidates.svg"),
            samples=polyline.pts(),
            stroke_width=config.debug.stroke_width,
        )

    tracer.event(f"Fitting complete: {len(report.candidates)} candidates", **report.counts)

    return report
