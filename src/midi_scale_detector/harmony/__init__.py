"""Harmony: scales, key detection, chords and key changes."""

from midi_scale_detector.harmony.chords import (
    active_pitch_classes,
    detect_chord_progression,
    label_chord,
)
from midi_scale_detector.harmony.keys import (
    MAJOR_PROFILE,
    MINOR_PROFILE,
    build_pitch_class_histogram,
    correlate,
    detect_scale,
    find_alternative_scales,
    find_best_scale,
    rotate,
)
from midi_scale_detector.harmony.modulation import KeyChange, detect_key_changes
from midi_scale_detector.harmony.scales import (
    NOTE_NAMES,
    SCALE_TEMPLATES,
    NoteName,
    Scale,
    ScaleType,
    scale_type_from_name,
    scales_containing,
)

__all__ = [
    # Chords
    "active_pitch_classes",
    "detect_chord_progression",
    "label_chord",
    # Keys
    "MAJOR_PROFILE",
    "MINOR_PROFILE",
    "build_pitch_class_histogram",
    "correlate",
    "detect_scale",
    "find_alternative_scales",
    "find_best_scale",
    "rotate",
    # Key changes
    "KeyChange",
    "detect_key_changes",
    # Scales
    "NOTE_NAMES",
    "SCALE_TEMPLATES",
    "NoteName",
    "Scale",
    "ScaleType",
    "scale_type_from_name",
    "scales_containing",
]
