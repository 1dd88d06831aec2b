"""
Pydantic data models for sketchfit.

Candidate fits are immutable value objects; records and reports are the
JSON-friendly forms written to disk.
"""

import hashlib
from datetime import datetime
from typing import Dict, List, Literal

from pydantic import BaseModel, ConfigDict, Field

from sketchfit.primitives.curves import CurvePrimitive, PrimitiveType


class CandidateFit(BaseModel):
    """A primitive fit over the sample span start_idx..end_idx."""
    curve: CurvePrimitive
    start_idx: int = Field(..., ge=0)
    end_idx: int = Field(..., ge=0)
    num_pts: int = Field(..., ge=2)
    start_curv_sign: Literal[-1, 1]
    end_curv_sign: Literal[-1, 1]
    error: float = Field(..., ge=0.0)  # total squared error, not length-normalized

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    @property
    def primitive_type(self):
        return PrimitiveType(self.curve.get_type())

    def with_flipped_signs(self):
        """Same geometry and error, opposite curvature orientation at both ends."""
        return self.model_copy(update={
            "start_curv_sign": -self.start_curv_sign,
            "end_curv_sign": -self.end_curv_sign,
        })

    def to_record(self):
        return CandidateRecord(
            primitive_type=self.primitive_type.name.lower(),
            params=[float(p) for p in self.curve.params()],
            start_idx=self.start_idx,
            end_idx=self.end_idx,
            num_pts=self.num_pts,
            start_curv_sign=self.start_curv_sign,
            end_curv_sign=self.end_curv_sign,
            error=self.error,
        )


class CandidateRecord(BaseModel):
    """Serializable form of a CandidateFit."""
    primitive_type: Literal["line", "arc", "clothoid"]
    params: List[float]
    start_idx: int
    end_idx: int
    num_pts: int
    start_curv_sign: int
    end_curv_sign: int
    error: float

    model_config = ConfigDict(extra="forbid")


class StrokeMeta(BaseModel):
    """Summary of the polyline the candidates were generated from."""
    num_input_points: int
    num_samples: int
    closed: bool = False
    length: float = 0.0
    corner_indices: List[int] = Field(default_factory=list)
    bbox: List[float] = Field(default_factory=lambda: [0.0, 0.0, 0.0, 0.0])

    model_config = ConfigDict(extra="forbid")


class FitReport(BaseModel):
    """Everything one fitting run produced."""
    run_id: str
    created_at: str = Field(default_factory=lambda: datetime.now().isoformat())
    algorithm: str
    error_threshold: float
    stroke: StrokeMeta
    samples: List[List[float]] = Field(default_factory=list)
    candidates: List[CandidateRecord] = Field(default_factory=list)
    counts: Dict[str, int] = Field(default_factory=dict)

    model_config = ConfigDict(extra="forbid")


def generate_run_id(points, closed, round_digits=3):
    """
    Deterministic run ID from the input samples.

    Rounds coordinates to avoid floating point instability.
    """
    rounded = [[round(float(p[0]), round_digits), round(float(p[1]), round_digits)] for p in points]
    data = f"{bool(closed)}:{rounded}"
    h = hashlib.sha256(data.encode()).hexdigest()[:12]
    return f"fit_{h}"


def compute_bbox(points):
    """
    Compute bounding box from a list of [x, y] points.

    Returns [min_x, min_y, max_x, max_y].
    """
    if len(points) == 0:
        return [0.0, 0.0, 0.0, 0.0]

    xs = [float(p[0]) for p in points]
    ys = [float(p[1]) for p in points]
    return [min(xs), min(ys), max(xs), max(ys)]


def count_by_type(candidates):
    """Number of candidates per primitive type name."""
    counts = {t.name.lower(): 0 for t in PrimitiveType}
    for candidate in candidates:
        counts[candidate.primitive_type.name.lower()] += 1
    return counts
