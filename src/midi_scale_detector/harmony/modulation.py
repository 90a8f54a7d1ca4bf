"""Key-change detection over a sliding window."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable, NamedTuple

from midi_scale_detector.harmony.scales import Scale, ScaleType

if TYPE_CHECKING:
    from midi_scale_detector.models.core import MidiFile

logger = logging.getLogger(__name__)

DEFAULT_WINDOW_SECONDS = 4.0
DEFAULT_HOP_SECONDS = 2.0


class KeyChange(NamedTuple):
    """A point where the locally dominant key changes.

    Attributes:
        time: Start of the window where the new key was detected, in seconds.
        scale: The new key.
    """

    time: float
    scale: Scale


def detect_key_changes(
    midi_file: MidiFile,
    analyze_window: Callable[[float, float], Scale],
    *,
    window_seconds: float = DEFAULT_WINDOW_SECONDS,
    hop_seconds: float = DEFAULT_HOP_SECONDS,
    min_confidence: float = 0.6,
) -> list[KeyChange]:
    """Slide a window across the file and report where the key changes.

    A change is reported at a window's start when its scale differs in root
    or type from the previous window's and its confidence reaches
    ``min_confidence``. Nothing is reported relative to a window whose
    scale is unknown, so the first window never reports.

    Args:
        midi_file: Decoded file.
        analyze_window: Detects the primary scale for ``(start, end)`` seconds.
        window_seconds: Window length.
        hop_seconds: Distance between window starts.
        min_confidence: Minimum confidence for a change to be reported.

    Returns:
        Key changes in time order.
    """
    if window_seconds <= 0 or hop_seconds <= 0:
        raise ValueError("window_seconds and hop_seconds must be positive")

    duration = midi_file.duration
    changes: list[KeyChange] = []
    previous = Scale.unknown()
    index = 0

    while index * hop_seconds < duration:
        start = index * hop_seconds
        end = min(start + window_seconds, duration)
        index += 1

        scale = analyze_window(start, end)

        if (
            previous.scale_type is not ScaleType.UNKNOWN
            and not scale.same_key_as(previous)
            and scale.confidence >= min_confidence
        ):
            logger.debug(f"Key change at {start:.2f}s: {previous.name} -> {scale.name}")
            changes.append(KeyChange(time=start, scale=scale))

        previous = scale

    return changes
