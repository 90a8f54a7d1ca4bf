"""Harmonic analysis orchestration."""

from midi_scale_detector.analysis.detector import (
    DetectorConfig,
    HarmonicAnalysis,
    ScaleDetector,
    analyze_file,
    load_config,
)

__all__ = [
    "DetectorConfig",
    "HarmonicAnalysis",
    "ScaleDetector",
    "analyze_file",
    "load_config",
]
