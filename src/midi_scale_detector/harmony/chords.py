"""Windowed chord segmentation."""

from __future__ import annotations

from typing import TYPE_CHECKING

from midi_scale_detector.harmony.scales import NOTE_NAMES

if TYPE_CHECKING:
    from collections.abc import Sequence

    from midi_scale_detector.harmony.scales import Scale
    from midi_scale_detector.models.core import MidiEvent

DEFAULT_CHORD_WINDOW = 1.0
MIN_CHORD_PITCH_CLASSES = 2


def active_pitch_classes(
    events: Sequence[MidiEvent],
    window_start: float,
    window_end: float,
) -> set[int]:
    """Pitch classes sounding at any point in ``[window_start, window_end]``.

    Replays the events from the beginning, tracking sounding notes by pitch
    class. A note-off releases its pitch class regardless of octave. Events
    at exactly ``window_start`` are applied before the window opens, so a
    note released there does not count.

    Args:
        events: Note events sorted by timestamp.
        window_start: Window start time in seconds.
        window_end: Window end time in seconds.

    Returns:
        Set of pitch classes (0-11).
    """
    sounding: set[int] = set()
    collected: set[int] = set()
    carried_in = False

    for event in events:
        if event.timestamp > window_end:
            break

        # Notes held across the window start
        if event.timestamp > window_start and not carried_in:
            collected |= sounding
            carried_in = True

        if event.is_note_on:
            sounding.add(event.pitch_class)
        elif event.is_note_off:
            sounding.discard(event.pitch_class)

        if event.timestamp > window_start:
            collected |= sounding

    if not carried_in:
        collected |= sounding

    return collected


def label_chord(pitch_classes: set[int]) -> str | None:
    """Name a chord by its lowest pitch class.

    Args:
        pitch_classes: Sounding pitch classes.

    Returns:
        Root name, or None with fewer than two pitch classes.
    """
    if len(pitch_classes) < MIN_CHORD_PITCH_CLASSES:
        return None
    return NOTE_NAMES[min(pitch_classes)]


def detect_chord_progression(
    events: Sequence[MidiEvent],
    duration: float,
    scale: Scale | None = None,
    *,
    window_seconds: float = DEFAULT_CHORD_WINDOW,
) -> list[str]:
    """Segment a piece into fixed windows and label each window's chord.

    Args:
        events: Note events for the whole file, sorted by timestamp.
        duration: Length of the piece in seconds.
        scale: Key context for the progression; labels do not depend on it.
        window_seconds: Window length in seconds.

    Returns:
        Chord labels with consecutive duplicates removed.
    """
    if window_seconds <= 0:
        raise ValueError(f"window_seconds must be positive, got {window_seconds}")

    progression: list[str] = []
    index = 0

    while index * window_seconds < duration:
        window_start = index * window_seconds
        window_end = window_start + window_seconds
        index += 1

        label = label_chord(active_pitch_classes(events, window_start, window_end))
        if label is None:
            continue
        if not progression or progression[-1] != label:
            progression.append(label)

    return progression
