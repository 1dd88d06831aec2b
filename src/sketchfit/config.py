"""
Configuration management for sketchfit.

Loads YAML configuration with sensible defaults for every fitting stage.
"""

import math
import os
from dataclasses import dataclass, field

import yaml


ALGORITHM_NAMES = ("Default", "Adjust")


@dataclass
class ResampleConfig:
    """Configuration for uniform arc-length resampling and corner flags."""
    enabled: bool = True
    spacing: float = 2.0
    dedupe_tolerance: float = 1e-9
    corner_angle_deg: float = 60.0


@dataclass
class FittingConfig:
    """Configuration for candidate primitive generation."""
    error_threshold: float = 1.0  # length-normalized, in input units
    line_cost: float = 5.0
    arc_cost: float = 5.0
    clothoid_cost: float = 10.0
    inflection_cost: float = 5.0  # > 0 turns on inflection accounting
    curve_adjust_damping: float = 0.5
    algorithm: str = "Adjust"  # "Default" or "Adjust"
    workers: int = 1

    def type_cost(self, primitive_type):
        """Cost for a primitive type index (0 line, 1 arc, 2 clothoid)."""
        return (self.line_cost, self.arc_cost, self.clothoid_cost)[int(primitive_type)]

    def type_needed(self, primitive_type):
        """A type is needed when its cost is finite."""
        return math.isfinite(self.type_cost(primitive_type))

    @property
    def inflection_accounting(self):
        return self.inflection_cost > 0.0


@dataclass
class TracingConfig:
    """Configuration for runtime tracing."""
    enabled: bool = False
    level: str = "INFO"
    file_path: str = None
    json_output: bool = False


@dataclass
class DebugConfig:
    """Configuration for debug artifact generation."""
    enabled: bool = False
    max_curves: int = 2000
    stroke_width: float = 0.5
    samples_per_curve: int = 24


@dataclass
class PipelineConfig:
    """Complete pipeline configuration."""
    resample: ResampleConfig = field(default_factory=ResampleConfig)
    fitting: FittingConfig = field(default_factory=FittingConfig)
    tracing: TracingConfig = field(default_factory=TracingConfig)
    debug: DebugConfig = field(default_factory=DebugConfig)


_SECTIONS = ("resample", "fitting", "tracing", "debug")
_COST_KEYS = ("line_cost", "arc_cost", "clothoid_cost", "inflection_cost")


def load_config(config_path=None):
    """
    Load configuration from YAML file.

    Falls back to defaults for any missing values.
    """
    config = PipelineConfig()

    if config_path and os.path.exists(config_path):
        with open(config_path, "r", encoding="utf-8") as f:
            yaml_data = yaml.safe_load(f) or {}

        config = _merge_config(config, yaml_data)

    validate_config(config)
    return config


def _merge_config(config, yaml_data):
    """Merge YAML data into config dataclass."""
    for section in _SECTIONS:
        if section not in yaml_data:
            continue
        target = getattr(config, section)
        for key, value in (yaml_data[section] or {}).items():
            if hasattr(target, key):
                setattr(target, key, value)

    # YAML writes infinity as .inf, but hand-edited files often say "inf"
    for key in _COST_KEYS:
        setattr(config.fitting, key, float(getattr(config.fitting, key)))

    return config


def validate_config(config):
    """Raise ValueError on settings the fitter cannot run with."""
    fitting = config.fitting
    if fitting.error_threshold <= 0:
        raise ValueError(f"error_threshold must be positive, got {fitting.error_threshold}")
    if fitting.algorithm not in ALGORITHM_NAMES:
        raise ValueError(f"Unknown algorithm {fitting.algorithm!r}, expected one of {ALGORITHM_NAMES}")
    if fitting.curve_adjust_damping < 0:
        raise ValueError("curve_adjust_damping must be non-negative")
    if fitting.workers < 1:
        raise ValueError("workers must be at least 1")
    if config.resample.spacing <= 0:
        raise ValueError("resample spacing must be positive")


def save_default_config(path):
    """Save default configuration to YAML file for reference."""
    config = PipelineConfig()

    yaml_data = {
        "resample": {
            "enabled": config.resample.enabled,
            "spacing": config.resample.spacing,
            "dedupe_tolerance": config.resample.dedupe_tolerance,
            "corner_angle_deg": config.resample.corner_angle_deg,
        },
        "fitting": {
            "error_threshold": config.fitting.error_threshold,
            "line_cost": config.fitting.line_cost,
            "arc_cost": config.fitting.arc_cost,
            "clothoid_cost": config.fitting.clothoid_cost,
            "inflection_cost": config.fitting.inflection_cost,
            "curve_adjust_damping": config.fitting.curve_adjust_damping,
            "algorithm": config.fitting.algorithm,
            "workers": config.fitting.workers,
        },
        "tracing": {
            "enabled": config.tracing.enabled,
            "level": config.tracing.level,
        },
        "debug": {
            "enabled": config.debug.enabled,
            "max_curves": config.debug.max_curves,
            "stroke_width": config.debug.stroke_width,
            "samples_per_curve": config.debug.samples_per_curve,
        },
    }

    with open(path, "w", encoding="utf-8") as f:
        yaml.dump(yaml_data, f, default_flow_style=False, sort_keys=False)
