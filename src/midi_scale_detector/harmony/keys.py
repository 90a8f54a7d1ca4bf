"""Key and scale detection using pitch-class histogram analysis."""

from __future__ import annotations

from typing import TYPE_CHECKING

from midi_scale_detector.harmony.scales import SCALE_TEMPLATES, Scale, ScaleType

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from midi_scale_detector.models.core import MidiEvent


# Krumhansl-Schmuckler key profiles
# Based on empirical studies of Western tonal music
MAJOR_PROFILE = (6.35, 2.23, 3.48, 2.33, 4.38, 4.09, 2.52, 5.19, 2.39, 3.66, 2.29, 2.88)
MINOR_PROFILE = (6.33, 2.68, 3.52, 5.38, 2.60, 3.53, 2.54, 4.75, 3.98, 2.69, 3.34, 3.17)

# Profile used for each mode, in enumeration order (major before minor)
MODE_PROFILES: tuple[tuple[ScaleType, tuple[float, ...]], ...] = (
    (ScaleType.IONIAN, MAJOR_PROFILE),
    (ScaleType.AEOLIAN, MINOR_PROFILE),
)

DEFAULT_MIN_CONFIDENCE = 0.6
MAX_ALTERNATIVES = 3

EMPTY_HISTOGRAM: tuple[float, ...] = (0.0,) * 12

# Variances at or below this are treated as zero (flat histogram)
VARIANCE_EPSILON = 1e-12


def build_pitch_class_histogram(
    events: Iterable[MidiEvent],
    weight_by_duration: bool = True,
    weight_by_velocity: bool = True,
) -> tuple[float, ...]:
    """Build a normalized pitch-class histogram from time-ordered note events.

    Each note-on is paired with the next note-off for the same note number.
    A later note-on for a note that is still sounding replaces the earlier
    one. Notes left sounding at the end count once, scaled by velocity only.

    Args:
        events: Note events sorted by timestamp.
        weight_by_duration: Multiply each note's weight by its length in seconds.
        weight_by_velocity: Multiply each note's weight by velocity / 127.

    Returns:
        Tuple of 12 values summing to 1.0, or all zeros for silent input.
    """
    histogram = [0.0] * 12
    active_notes: dict[int, MidiEvent] = {}

    for event in events:
        if event.is_note_on:
            active_notes[event.note] = event
        elif event.is_note_off:
            note_on = active_notes.pop(event.note, None)
            if note_on is None:
                continue

            weight = 1.0
            if weight_by_duration:
                weight *= event.timestamp - note_on.timestamp
            if weight_by_velocity:
                weight *= note_on.velocity / 127.0
            histogram[event.pitch_class] += weight

    for note_on in active_notes.values():
        weight = note_on.velocity / 127.0 if weight_by_velocity else 1.0
        histogram[note_on.pitch_class] += weight

    return normalize_histogram(histogram)


def normalize_histogram(histogram: Sequence[float]) -> tuple[float, ...]:
    """Scale a histogram to sum to 1.0; an all-zero histogram stays zero."""
    total = sum(histogram)
    if total <= 0:
        return EMPTY_HISTOGRAM
    return tuple(v / total for v in histogram)


def rotate(histogram: Sequence[float], root: int) -> tuple[float, ...]:
    """Rotate a histogram so that ``root`` lands on bin 0."""
    return tuple(histogram[(i + root) % 12] for i in range(12))


def correlate(histogram: Sequence[float], profile: Sequence[float]) -> float | None:
    """Calculate Pearson correlation between a histogram and a profile.

    Args:
        histogram: Pitch-class histogram.
        profile: Key profile to match against.

    Returns:
        Correlation coefficient (-1 to 1), or None when either input has
        zero variance and the correlation is undefined.
    """
    hist_mean = sum(histogram) / 12
    prof_mean = sum(profile) / 12

    numerator = sum((h - hist_mean) * (p - prof_mean) for h, p in zip(histogram, profile))
    hist_var = sum((h - hist_mean) ** 2 for h in histogram)
    prof_var = sum((p - prof_mean) ** 2 for p in profile)

    if hist_var <= VARIANCE_EPSILON or prof_var <= VARIANCE_EPSILON:
        return None

    return numerator / (hist_var * prof_var) ** 0.5


def correlation_to_confidence(correlation: float | None) -> float:
    """Map a correlation in [-1, 1] onto [0, 1]; undefined maps to 0."""
    if correlation is None:
        return 0.0
    return max(0.0, min(1.0, (correlation + 1.0) / 2.0))


def mode_confidences(histogram: Sequence[float]) -> list[tuple[int, ScaleType, float | None]]:
    """Correlate every (root, mode) pair against the key profiles.

    Returns:
        ``(root, scale_type, correlation)`` for roots 0-11, major before
        minor at each root.
    """
    results: list[tuple[int, ScaleType, float | None]] = []
    for root in range(12):
        rotated = rotate(histogram, root)
        for scale_type, profile in MODE_PROFILES:
            results.append((root, scale_type, correlate(rotated, profile)))
    return results


def template_match_score(histogram: Sequence[float], root: int, intervals: Sequence[int]) -> float:
    """Mean histogram weight over the pitch classes of a rooted template."""
    if not intervals:
        return 0.0
    return sum(histogram[(root + interval) % 12] for interval in intervals) / len(intervals)


def find_best_scale(histogram: Sequence[float]) -> Scale:
    """Find the best-fitting scale for a normalized histogram.

    Uses the Krumhansl-Schmuckler algorithm over all 24 major/minor keys,
    then tries every other catalog template on the winning root. A template
    replaces the key when its mean histogram weight beats the key's
    confidence; the root never changes during that pass.

    Args:
        histogram: Normalized 12-bin pitch-class histogram.

    Returns:
        Best scale, or an unknown scale with confidence 0 when no
        correlation is defined.
    """
    best: Scale | None = None
    best_correlation: float | None = None

    for root, scale_type, correlation in mode_confidences(histogram):
        if correlation is None:
            continue
        if best_correlation is None or correlation > best_correlation:
            best_correlation = correlation
            best = Scale.from_template(
                root, scale_type, correlation_to_confidence(correlation)
            )

    if best is None:
        return Scale.unknown()

    for scale_type, intervals in SCALE_TEMPLATES.items():
        if scale_type in (ScaleType.IONIAN, ScaleType.AEOLIAN):
            continue
        score = template_match_score(histogram, best.root, intervals)
        if score > best.confidence:
            best = Scale.from_template(best.root, scale_type, score)

    return best


def find_alternative_scales(
    histogram: Sequence[float],
    primary: Scale,
    min_confidence: float = DEFAULT_MIN_CONFIDENCE,
    limit: int = MAX_ALTERNATIVES,
) -> list[Scale]:
    """Rank other major/minor readings of the same histogram.

    Args:
        histogram: Normalized 12-bin pitch-class histogram.
        primary: The detected primary scale, excluded from the result.
        min_confidence: Minimum confidence for a candidate to be kept.
        limit: Maximum number of alternatives.

    Returns:
        Up to ``limit`` scales sorted by descending confidence.
    """
    alternatives: list[Scale] = []

    for root, scale_type, correlation in mode_confidences(histogram):
        if correlation is None:
            continue
        confidence = correlation_to_confidence(correlation)
        if confidence < min_confidence:
            continue
        candidate = Scale.from_template(root, scale_type, confidence)
        if candidate.same_key_as(primary):
            continue
        alternatives.append(candidate)

    alternatives.sort(key=lambda s: s.confidence, reverse=True)
    return alternatives[:limit]


def detect_scale(
    events: Iterable[MidiEvent],
    weight_by_duration: bool = True,
    weight_by_velocity: bool = True,
) -> Scale:
    """Detect the scale of a time-ordered sequence of note events.

    Args:
        events: Note events sorted by timestamp.
        weight_by_duration: Whether to weight by note duration.
        weight_by_velocity: Whether to weight by note velocity.

    Returns:
        Detected scale.
    """
    histogram = build_pitch_class_histogram(events, weight_by_duration, weight_by_velocity)
    return find_best_scale(histogram)
