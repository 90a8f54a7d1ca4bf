"""Note names, scale types and the scale template catalog."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum

# Display names, flat spelling
NOTE_NAMES = ("C", "Db", "D", "Eb", "E", "F", "Gb", "G", "Ab", "A", "Bb", "B")

_SHARP_NAMES = ("C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B")


class NoteName(IntEnum):
    """Pitch class of a note (C=0 ... B=11)."""

    C = 0
    D_FLAT = 1
    D = 2
    E_FLAT = 3
    E = 4
    F = 5
    G_FLAT = 6
    G = 7
    A_FLAT = 8
    A = 9
    B_FLAT = 10
    B = 11

    @property
    def label(self) -> str:
        """Display name (e.g. 'Db')."""
        return NOTE_NAMES[self.value]

    def __str__(self) -> str:
        return self.label

    @classmethod
    def from_pitch(cls, pitch: int) -> NoteName:
        """Pitch class of a MIDI note number or pitch class."""
        return cls(pitch % 12)

    @classmethod
    def from_label(cls, text: str) -> NoteName:
        """Parse a note name such as 'Eb', 'D#' or 'c'.

        Raises:
            ValueError: If the name is not recognized.
        """
        name = text.strip()
        if not name:
            raise ValueError(f"Invalid note name: {text!r}")
        name = name[0].upper() + name[1:].lower()
        if name in NOTE_NAMES:
            return cls(NOTE_NAMES.index(name))
        if name in _SHARP_NAMES:
            return cls(_SHARP_NAMES.index(name))
        raise ValueError(f"Invalid note name: {text!r}")


class ScaleType(Enum):
    """Scale and mode catalog. The value is the display name."""

    # Major modes
    IONIAN = "Major"
    DORIAN = "Dorian"
    PHRYGIAN = "Phrygian"
    LYDIAN = "Lydian"
    MIXOLYDIAN = "Mixolydian"
    AEOLIAN = "Minor"
    LOCRIAN = "Locrian"

    # Minor variants
    HARMONIC_MINOR = "Harmonic Minor"
    MELODIC_MINOR = "Melodic Minor"

    # Melodic minor modes
    DORIAN_FLAT_2 = "Dorian b2"
    LYDIAN_AUGMENTED = "Lydian Augmented"
    LYDIAN_DOMINANT = "Lydian Dominant"
    MIXOLYDIAN_FLAT_6 = "Mixolydian b6"
    LOCRIAN_SHARP_2 = "Locrian #2"
    ALTERED = "Altered"

    # Harmonic minor modes
    LOCRIAN_SHARP_6 = "Locrian #6"
    IONIAN_SHARP_5 = "Ionian #5"
    DORIAN_SHARP_4 = "Dorian #4"
    PHRYGIAN_DOMINANT = "Phrygian Dominant"
    LYDIAN_SHARP_2 = "Lydian #2"
    SUPER_LOCRIAN_DOUBLE_FLAT_7 = "Super Locrian bb7"

    # Harmonic major modes
    HARMONIC_MAJOR = "Harmonic Major"
    DORIAN_FLAT_5 = "Dorian b5"
    PHRYGIAN_FLAT_4 = "Phrygian b4"
    LYDIAN_FLAT_3 = "Lydian b3"
    MIXOLYDIAN_FLAT_2 = "Mixolydian b2"
    LYDIAN_AUGMENTED_SHARP_2 = "Lydian Augmented #2"
    LOCRIAN_DOUBLE_FLAT_7 = "Locrian bb7"

    # Double harmonic (Byzantine) modes
    DOUBLE_HARMONIC_MAJOR = "Double Harmonic Major"
    LYDIAN_SHARP_2_SHARP_6 = "Lydian #2 #6"
    ULTRAPHRYGIAN = "Ultraphrygian"
    HUNGARIAN_MINOR = "Hungarian Minor"
    ORIENTAL = "Oriental"
    IONIAN_SHARP_2_SHARP_5 = "Ionian #2 #5"
    LOCRIAN_DOUBLE_FLAT_3_DOUBLE_FLAT_7 = "Locrian bb3 bb7"

    # Pentatonic
    MAJOR_PENTATONIC = "Major Pentatonic"
    MINOR_PENTATONIC = "Minor Pentatonic"
    EGYPTIAN = "Egyptian"
    BLUES_MAJOR_PENTATONIC = "Blues Major Pentatonic"
    BLUES_MINOR_PENTATONIC = "Blues Minor Pentatonic"

    # Blues
    BLUES = "Blues"
    MAJOR_BLUES = "Major Blues"

    # Bebop
    BEBOP_DOMINANT = "Bebop Dominant"
    BEBOP_MAJOR = "Bebop Major"
    BEBOP_MINOR = "Bebop Minor"
    BEBOP_DORIAN = "Bebop Dorian"
    BEBOP_MELODIC_MINOR = "Bebop Melodic Minor"

    # Symmetric
    CHROMATIC = "Chromatic"
    WHOLE_TONE = "Whole Tone"
    DIMINISHED = "Diminished"
    DIMINISHED_HALF_WHOLE = "Diminished Half-Whole"
    AUGMENTED = "Augmented"
    TRITONE = "Tritone"

    # World / ethnic
    HIRAJOSHI = "Hirajoshi"
    IN_SEN = "In Sen"
    IWATO = "Iwato"
    KUMOI = "Kumoi"
    PELOG = "Pelog"
    RYUKYU = "Ryukyu"
    CHINESE = "Chinese"
    PERSIAN = "Persian"
    ARABIAN = "Arabian"
    ENIGMATIC = "Enigmatic"
    NEAPOLITAN_MAJOR = "Neapolitan Major"
    NEAPOLITAN_MINOR = "Neapolitan Minor"
    HUNGARIAN_MAJOR = "Hungarian Major"
    SPANISH_EIGHT_TONE = "Spanish 8-Tone"
    GYPSY = "Gypsy"
    PROMETHEUS = "Prometheus"
    LEADING_WHOLE_TONE = "Leading Whole Tone"

    # Jazz
    DOMINANT_PENTATONIC = "Dominant Pentatonic"
    MINOR_SIXTH_PENTATONIC = "Minor 6 Pentatonic"
    MAJOR_FLAT_6_PENTATONIC = "Major b6 Pentatonic"
    MINOR_FLAT_6_PENTATONIC = "Minor b6 Pentatonic"
    LYDIAN_MINOR = "Lydian Minor"
    SIX_TONE_SYMMETRIC = "Six Tone Symmetric"

    # Modal variations
    IONIAN_FLAT_2 = "Ionian b2"
    MAJOR_HEXATONIC = "Major Hexatonic"
    MINOR_HEXATONIC = "Minor Hexatonic"
    DORIAN_HEXATONIC = "Dorian Hexatonic"
    PHRYGIAN_HEXATONIC = "Phrygian Hexatonic"
    LYDIAN_HEXATONIC = "Lydian Hexatonic"
    MIXOLYDIAN_HEXATONIC = "Mixolydian Hexatonic"

    UNKNOWN = "Unknown"


# Semitone offsets from the root, in ScaleType declaration order.
# Iteration order decides ties during scale refinement.
SCALE_TEMPLATES: dict[ScaleType, tuple[int, ...]] = {
    ScaleType.IONIAN: (0, 2, 4, 5, 7, 9, 11),
    ScaleType.DORIAN: (0, 2, 3, 5, 7, 9, 10),
    ScaleType.PHRYGIAN: (0, 1, 3, 5, 7, 8, 10),
    ScaleType.LYDIAN: (0, 2, 4, 6, 7, 9, 11),
    ScaleType.MIXOLYDIAN: (0, 2, 4, 5, 7, 9, 10),
    ScaleType.AEOLIAN: (0, 2, 3, 5, 7, 8, 10),
    ScaleType.LOCRIAN: (0, 1, 3, 5, 6, 8, 10),
    ScaleType.HARMONIC_MINOR: (0, 2, 3, 5, 7, 8, 11),
    ScaleType.MELODIC_MINOR: (0, 2, 3, 5, 7, 9, 11),
    ScaleType.DORIAN_FLAT_2: (0, 1, 3, 5, 7, 9, 10),
    ScaleType.LYDIAN_AUGMENTED: (0, 2, 4, 6, 8, 9, 11),
    ScaleType.LYDIAN_DOMINANT: (0, 2, 4, 6, 7, 9, 10),
    ScaleType.MIXOLYDIAN_FLAT_6: (0, 2, 4, 5, 7, 8, 10),
    ScaleType.LOCRIAN_SHARP_2: (0, 2, 3, 5, 6, 8, 10),
    ScaleType.ALTERED: (0, 1, 3, 4, 6, 8, 10),
    ScaleType.LOCRIAN_SHARP_6: (0, 1, 3, 5, 6, 9, 10),
    ScaleType.IONIAN_SHARP_5: (0, 2, 4, 5, 8, 9, 11),
    ScaleType.DORIAN_SHARP_4: (0, 2, 3, 6, 7, 9, 10),
    ScaleType.PHRYGIAN_DOMINANT: (0, 1, 4, 5, 7, 8, 10),
    ScaleType.LYDIAN_SHARP_2: (0, 3, 4, 6, 7, 9, 11),
    ScaleType.SUPER_LOCRIAN_DOUBLE_FLAT_7: (0, 1, 3, 4, 6, 8, 9),
    ScaleType.HARMONIC_MAJOR: (0, 2, 4, 5, 7, 8, 11),
    ScaleType.DORIAN_FLAT_5: (0, 2, 3, 5, 6, 9, 10),
    ScaleType.PHRYGIAN_FLAT_4: (0, 1, 3, 4, 7, 8, 10),
    ScaleType.LYDIAN_FLAT_3: (0, 2, 3, 6, 7, 9, 11),
    ScaleType.MIXOLYDIAN_FLAT_2: (0, 1, 4, 5, 7, 9, 10),
    ScaleType.LYDIAN_AUGMENTED_SHARP_2: (0, 3, 4, 6, 8, 9, 11),
    ScaleType.LOCRIAN_DOUBLE_FLAT_7: (0, 1, 3, 5, 6, 8, 9),
    ScaleType.DOUBLE_HARMONIC_MAJOR: (0, 1, 4, 5, 7, 8, 11),
    ScaleType.LYDIAN_SHARP_2_SHARP_6: (0, 3, 4, 6, 7, 10, 11),
    ScaleType.ULTRAPHRYGIAN: (0, 1, 3, 4, 7, 8, 9),
    ScaleType.HUNGARIAN_MINOR: (0, 2, 3, 6, 7, 8, 11),
    ScaleType.ORIENTAL: (0, 1, 4, 5, 6, 9, 10),
    ScaleType.IONIAN_SHARP_2_SHARP_5: (0, 3, 4, 5, 8, 9, 11),
    ScaleType.LOCRIAN_DOUBLE_FLAT_3_DOUBLE_FLAT_7: (0, 1, 2, 5, 6, 8, 9),
    ScaleType.MAJOR_PENTATONIC: (0, 2, 4, 7, 9),
    ScaleType.MINOR_PENTATONIC: (0, 3, 5, 7, 10),
    ScaleType.EGYPTIAN: (0, 2, 5, 7, 10),
    ScaleType.BLUES_MAJOR_PENTATONIC: (0, 2, 5, 7, 9),
    ScaleType.BLUES_MINOR_PENTATONIC: (0, 3, 5, 8, 10),
    ScaleType.BLUES: (0, 3, 5, 6, 7, 10),
    ScaleType.MAJOR_BLUES: (0, 2, 3, 4, 7, 9),
    ScaleType.BEBOP_DOMINANT: (0, 2, 4, 5, 7, 9, 10, 11),
    ScaleType.BEBOP_MAJOR: (0, 2, 4, 5, 7, 8, 9, 11),
    ScaleType.BEBOP_MINOR: (0, 2, 3, 4, 5, 7, 9, 10),
    ScaleType.BEBOP_DORIAN: (0, 2, 3, 5, 7, 9, 10, 11),
    ScaleType.BEBOP_MELODIC_MINOR: (0, 2, 3, 5, 7, 8, 9, 11),
    ScaleType.CHROMATIC: (0, 1, 2, 3, 4, 5, 6, 7, 8, 9, 10, 11),
    ScaleType.WHOLE_TONE: (0, 2, 4, 6, 8, 10),
    ScaleType.DIMINISHED: (0, 2, 3, 5, 6, 8, 9, 11),
    ScaleType.DIMINISHED_HALF_WHOLE: (0, 1, 3, 4, 6, 7, 9, 10),
    ScaleType.AUGMENTED: (0, 3, 4, 7, 8, 11),
    ScaleType.TRITONE: (0, 1, 4, 6, 7, 10),
    ScaleType.HIRAJOSHI: (0, 2, 3, 7, 8),
    ScaleType.IN_SEN: (0, 1, 5, 7, 10),
    ScaleType.IWATO: (0, 1, 5, 6, 10),
    ScaleType.KUMOI: (0, 2, 3, 7, 9),
    ScaleType.PELOG: (0, 1, 3, 7, 8),
    ScaleType.RYUKYU: (0, 4, 5, 7, 11),
    ScaleType.CHINESE: (0, 4, 6, 7, 11),
    ScaleType.PERSIAN: (0, 1, 4, 5, 6, 8, 11),
    ScaleType.ARABIAN: (0, 2, 4, 5, 6, 8, 10),
    ScaleType.ENIGMATIC: (0, 1, 4, 6, 8, 10, 11),
    ScaleType.NEAPOLITAN_MAJOR: (0, 1, 3, 5, 7, 9, 11),
    ScaleType.NEAPOLITAN_MINOR: (0, 1, 3, 5, 7, 8, 11),
    ScaleType.HUNGARIAN_MAJOR: (0, 3, 4, 6, 7, 9, 10),
    ScaleType.SPANISH_EIGHT_TONE: (0, 1, 3, 4, 5, 6, 8, 10),
    ScaleType.GYPSY: (0, 2, 3, 6, 7, 8, 10),
    ScaleType.PROMETHEUS: (0, 2, 4, 6, 9, 10),
    ScaleType.LEADING_WHOLE_TONE: (0, 2, 4, 6, 8, 10, 11),
    ScaleType.DOMINANT_PENTATONIC: (0, 2, 4, 7, 10),
    ScaleType.MINOR_SIXTH_PENTATONIC: (0, 3, 5, 7, 9),
    ScaleType.MAJOR_FLAT_6_PENTATONIC: (0, 2, 4, 7, 8),
    ScaleType.MINOR_FLAT_6_PENTATONIC: (0, 3, 5, 7, 8),
    ScaleType.LYDIAN_MINOR: (0, 2, 4, 6, 7, 8, 10),
    ScaleType.SIX_TONE_SYMMETRIC: (0, 1, 4, 5, 8, 9),
    ScaleType.IONIAN_FLAT_2: (0, 1, 4, 5, 7, 9, 11),
    ScaleType.MAJOR_HEXATONIC: (0, 2, 4, 5, 7, 9),
    ScaleType.MINOR_HEXATONIC: (0, 2, 3, 5, 7, 10),
    ScaleType.DORIAN_HEXATONIC: (0, 2, 3, 5, 7, 9),
    ScaleType.PHRYGIAN_HEXATONIC: (0, 3, 5, 7, 8, 10),
    ScaleType.LYDIAN_HEXATONIC: (0, 2, 4, 7, 9, 11),
    ScaleType.MIXOLYDIAN_HEXATONIC: (0, 2, 4, 5, 7, 10),
}


@dataclass(frozen=True)
class Scale:
    """A scale anchored on a root, with a detection confidence.

    Attributes:
        root: Root pitch class.
        scale_type: Scale or mode.
        intervals: Semitone offsets from the root (sorted, unique, contains 0).
        confidence: Detection confidence (0-1).
    """

    root: NoteName = NoteName.C
    scale_type: ScaleType = ScaleType.UNKNOWN
    intervals: tuple[int, ...] = ()
    confidence: float = 0.0

    @classmethod
    def from_template(
        cls, root: int, scale_type: ScaleType, confidence: float = 0.0
    ) -> Scale:
        """Build a scale from the template catalog.

        Args:
            root: Root pitch class (0-11).
            scale_type: Catalog entry to use.
            confidence: Detection confidence (0-1).

        Returns:
            Scale carrying the template's intervals.
        """
        return cls(
            root=NoteName.from_pitch(root),
            scale_type=scale_type,
            intervals=SCALE_TEMPLATES.get(scale_type, ()),
            confidence=confidence,
        )

    @classmethod
    def unknown(cls) -> Scale:
        """The neutral result for silent or undecidable input."""
        return cls()

    @property
    def root_name(self) -> str:
        """Root note display name."""
        return self.root.label

    @property
    def type_name(self) -> str:
        """Scale display name (e.g. 'Harmonic Minor')."""
        return self.scale_type.value

    @property
    def name(self) -> str:
        """Full scale name (e.g. 'C Major')."""
        return f"{self.root_name} {self.type_name}"

    def pitch_classes(self) -> frozenset[int]:
        """Absolute pitch classes belonging to the scale."""
        return frozenset((self.root + interval) % 12 for interval in self.intervals)

    def contains_note(self, midi_note: int) -> bool:
        """Whether a MIDI note belongs to the scale, in any octave."""
        return (midi_note - self.root) % 12 in self.intervals

    def same_key_as(self, other: Scale) -> bool:
        """Whether both scales share root and type."""
        return self.root == other.root and self.scale_type == other.scale_type

    def __str__(self) -> str:
        """String representation."""
        return f"{self.name} ({self.confidence:.0%})"


def scale_type_from_name(name: str) -> ScaleType:
    """Look up a scale type by display name or enum name.

    Args:
        name: Display name ("Dorian b2") or member name ("DORIAN_FLAT_2"),
            matched case-insensitively.

    Returns:
        Matching scale type.

    Raises:
        ValueError: If no scale type matches.
    """
    wanted = name.strip().lower()
    for scale_type in ScaleType:
        if wanted in (scale_type.value.lower(), scale_type.name.lower()):
            return scale_type
    raise ValueError(f"Unknown scale type: {name}")


def scales_containing(pitch_class: int) -> list[ScaleType]:
    """Scale types whose template (rooted on C) contains a pitch class."""
    return [
        scale_type
        for scale_type, intervals in SCALE_TEMPLATES.items()
        if pitch_class % 12 in intervals
    ]
