"""Tests for pitch-class histograms and key/scale correlation."""

import pytest

from midi_scale_detector.harmony.keys import (
    MAJOR_PROFILE,
    MINOR_PROFILE,
    build_pitch_class_histogram,
    correlate,
    correlation_to_confidence,
    detect_scale,
    find_alternative_scales,
    find_best_scale,
    rotate,
    template_match_score,
)
from midi_scale_detector.harmony.scales import NoteName, Scale, ScaleType
from midi_scale_detector.models.core import EventKind, MidiEvent

C_MAJOR_PITCHES = [60, 62, 64, 65, 67, 69, 71]


def note_on(timestamp: float, note: int, velocity: int = 100) -> MidiEvent:
    """Helper to create a note-on event."""
    return MidiEvent(tick=0, timestamp=timestamp, kind=EventKind.NOTE_ON, note=note, velocity=velocity)


def note_off(timestamp: float, note: int) -> MidiEvent:
    """Helper to create a note-off event."""
    return MidiEvent(tick=0, timestamp=timestamp, kind=EventKind.NOTE_OFF, note=note)


def melody(pitches: list[int], length: float = 0.5, velocity: int = 100) -> list[MidiEvent]:
    """Helper to create back-to-back notes."""
    events = []
    for i, pitch in enumerate(pitches):
        events.append(note_on(i * length, pitch, velocity))
        events.append(note_off((i + 1) * length, pitch))
    events.sort(key=lambda e: e.timestamp)
    return events


def indicator(pitch_classes: list[int], value: float = 1.0) -> tuple[float, ...]:
    """Helper to create a histogram with equal weight on some pitch classes."""
    return tuple(value if pc in pitch_classes else 0.0 for pc in range(12))


class TestPitchClassHistogram:
    """Tests for pitch-class histogram building."""

    def test_empty_events(self):
        """Test histogram for no events."""
        assert build_pitch_class_histogram([]) == (0.0,) * 12

    def test_single_note(self):
        """Test histogram for a single note."""
        histogram = build_pitch_class_histogram(melody([60]))
        assert histogram[0] == pytest.approx(1.0)
        assert sum(histogram[1:]) == 0.0

    def test_c_major_scale(self):
        """Test equal weight on the seven scale tones."""
        histogram = build_pitch_class_histogram(melody(C_MAJOR_PITCHES))

        for pc in [0, 2, 4, 5, 7, 9, 11]:
            assert histogram[pc] == pytest.approx(1 / 7)
        for pc in [1, 3, 6, 8, 10]:
            assert histogram[pc] == 0.0
        assert sum(histogram) == pytest.approx(1.0)

    def test_duration_weighting(self):
        """Test that duration weighting works."""
        events = [note_on(0.0, 60), note_off(3.0, 60), note_on(3.0, 64), note_off(4.0, 64)]
        histogram = build_pitch_class_histogram(events, weight_by_velocity=False)

        assert histogram[0] == pytest.approx(0.75)
        assert histogram[4] == pytest.approx(0.25)

    def test_velocity_weighting(self):
        """Test that velocity weighting works."""
        events = [note_on(0.0, 60, 100), note_off(1.0, 60), note_on(1.0, 64, 50), note_off(2.0, 64)]
        histogram = build_pitch_class_histogram(events, weight_by_duration=False)

        assert histogram[0] == pytest.approx(2 / 3)
        assert histogram[4] == pytest.approx(1 / 3)

    def test_no_weighting(self):
        """Test counting notes when both weightings are off."""
        events = [note_on(0.0, 60, 127), note_off(3.0, 60), note_on(3.0, 64, 10), note_off(4.0, 64)]
        histogram = build_pitch_class_histogram(
            events, weight_by_duration=False, weight_by_velocity=False
        )

        assert histogram[0] == pytest.approx(0.5)
        assert histogram[4] == pytest.approx(0.5)

    def test_octaves_fold_together(self):
        """Test that notes an octave apart share a bin."""
        histogram = build_pitch_class_histogram(melody([48, 60, 72, 67]))
        assert histogram[0] == pytest.approx(0.75)
        assert histogram[7] == pytest.approx(0.25)

    def test_unmatched_note_off_ignored(self):
        """Test note-offs without a note-on contribute nothing."""
        events = [note_off(0.5, 62), note_on(1.0, 60), note_off(2.0, 60)]
        histogram = build_pitch_class_histogram(events)
        assert histogram[2] == 0.0
        assert histogram[0] == pytest.approx(1.0)

    def test_zero_velocity_note_on_ends_note(self):
        """Test a note-on with velocity 0 closes the note."""
        events = [note_on(0.0, 60), note_on(2.0, 60, velocity=0), note_on(2.0, 64), note_off(3.0, 64)]
        histogram = build_pitch_class_histogram(events, weight_by_velocity=False)
        assert histogram[0] == pytest.approx(2 / 3)
        assert histogram[4] == pytest.approx(1 / 3)

    def test_dangling_note_counted_once(self):
        """Test notes without a note-off count with velocity-only weight."""
        events = [note_on(0.0, 60), note_on(1.0, 64), note_off(2.0, 60)]
        histogram = build_pitch_class_histogram(events, weight_by_velocity=False)

        # C: 2 seconds, E: unmatched so weight 1
        assert histogram[0] == pytest.approx(2 / 3)
        assert histogram[4] == pytest.approx(1 / 3)

    def test_retriggered_note_last_wins(self):
        """Test a second note-on replaces a still-sounding one."""
        events = [
            note_on(0.0, 60),
            note_on(0.0, 67),
            note_on(1.0, 60),
            note_off(1.0, 67),
            note_off(2.0, 60),
        ]
        histogram = build_pitch_class_histogram(events, weight_by_velocity=False)
        assert histogram[0] == pytest.approx(0.5)
        assert histogram[7] == pytest.approx(0.5)

    def test_zero_length_notes_are_silent(self):
        """Test that a histogram of zero-length notes stays all zero."""
        events = [note_on(1.0, 60), note_off(1.0, 60)]
        assert build_pitch_class_histogram(events) == (0.0,) * 12


class TestCorrelation:
    """Tests for Pearson correlation."""

    def test_identical(self):
        """Test a profile correlates perfectly with itself."""
        assert correlate(MAJOR_PROFILE, MAJOR_PROFILE) == pytest.approx(1.0)

    def test_negated(self):
        """Test an inverted profile correlates at -1."""
        inverted = tuple(-v for v in MINOR_PROFILE)
        assert correlate(inverted, MINOR_PROFILE) == pytest.approx(-1.0)

    def test_flat_histogram_undefined(self):
        """Test zero variance gives no correlation."""
        assert correlate((1 / 12,) * 12, MAJOR_PROFILE) is None
        assert correlate((0.0,) * 12, MAJOR_PROFILE) is None

    def test_confidence_mapping(self):
        """Test correlation to confidence mapping."""
        assert correlation_to_confidence(1.0) == 1.0
        assert correlation_to_confidence(-1.0) == 0.0
        assert correlation_to_confidence(0.0) == 0.5
        assert correlation_to_confidence(None) == 0.0

    def test_rotate(self):
        """Test rotation brings the root to bin 0."""
        histogram = indicator([7])
        assert rotate(histogram, 7)[0] == 1.0
        assert rotate(histogram, 0)[7] == 1.0


class TestFindBestScale:
    """Tests for primary scale detection."""

    def test_c_major(self):
        """Test uniform C major pitch classes give C major."""
        scale = find_best_scale(indicator([0, 2, 4, 5, 7, 9, 11], 1 / 7))

        assert scale.root is NoteName.C
        assert scale.scale_type is ScaleType.IONIAN
        assert scale.type_name == "Major"
        assert scale.confidence > 0.6
        assert scale.intervals == (0, 2, 4, 5, 7, 9, 11)

    def test_transposed_major(self):
        """Test the same shape on G gives G major."""
        scale = find_best_scale(indicator([7, 9, 11, 0, 2, 4, 6], 1 / 7))
        assert scale.root is NoteName.G
        assert scale.scale_type is ScaleType.IONIAN

    def test_minor_triad(self):
        """Test a weighted A minor triad gives A minor."""
        histogram = (0.25, 0, 0, 0, 0.25, 0, 0, 0, 0, 0.5, 0, 0)
        scale = find_best_scale(histogram)
        assert scale.root is NoteName.A
        assert scale.scale_type is ScaleType.AEOLIAN

    def test_silent_histogram(self):
        """Test all-zero input gives the unknown scale."""
        scale = find_best_scale((0.0,) * 12)
        assert scale.scale_type is ScaleType.UNKNOWN
        assert scale.confidence == 0.0

    def test_flat_histogram(self):
        """Test a chromatic cluster gives the unknown scale."""
        scale = find_best_scale((1 / 12,) * 12)
        assert scale == Scale.unknown()

    def test_refinement_relabels_type_keeping_root(self):
        """Test a template whose mean weight beats the key confidence wins.

        Mean template weight cannot exceed 0.2 on a normalized histogram, so
        this uses raw weights.
        """
        whole_tone = indicator([0, 2, 4, 6, 8, 10], 1.0)
        scale = find_best_scale(whole_tone)

        assert scale.root is NoteName.C
        assert scale.scale_type is ScaleType.WHOLE_TONE
        assert scale.confidence == pytest.approx(1.0)

    def test_normalized_histogram_keeps_major_minor(self):
        """Test the same whole-tone shape normalized stays major/minor."""
        scale = find_best_scale(indicator([0, 2, 4, 6, 8, 10], 1 / 6))
        assert scale.scale_type in (ScaleType.IONIAN, ScaleType.AEOLIAN)

    def test_template_match_score(self):
        """Test mean weight over a rooted template."""
        histogram = indicator([0, 4, 7], 1 / 3)
        assert template_match_score(histogram, 0, (0, 4, 7)) == pytest.approx(1 / 3)
        assert template_match_score(histogram, 0, (0, 3, 7)) == pytest.approx(2 / 9)
        assert template_match_score(histogram, 5, (0, 2, 7)) == pytest.approx(2 / 9)
        assert template_match_score(histogram, 0, ()) == 0.0

    def test_confidence_in_range(self):
        """Test confidence stays within [0, 1] for many shapes."""
        shapes = [[0], [0, 1], [0, 6], [0, 3, 6, 9], [1, 5, 8], [0, 2, 4, 5, 7, 9, 11]]
        for shape in shapes:
            for value in (1.0, 1 / len(shape)):
                scale = find_best_scale(indicator(shape, value))
                assert 0.0 <= scale.confidence <= 1.0


class TestAlternativeScales:
    """Tests for alternative scale ranking."""

    @pytest.fixture
    def c_major(self) -> tuple[float, ...]:
        """Uniform C major histogram."""
        return indicator([0, 2, 4, 5, 7, 9, 11], 1 / 7)

    def test_alternatives_ranked(self, c_major: tuple[float, ...]):
        """Test alternatives are sorted, capped and exclude the primary."""
        primary = find_best_scale(c_major)
        alternatives = find_alternative_scales(c_major, primary)

        assert 0 < len(alternatives) <= 3
        confidences = [s.confidence for s in alternatives]
        assert confidences == sorted(confidences, reverse=True)
        assert not any(s.same_key_as(primary) for s in alternatives)
        assert all(s.confidence >= 0.6 for s in alternatives)

    def test_relative_minor_first(self, c_major: tuple[float, ...]):
        """Test the relative minor is the strongest alternative to C major."""
        primary = find_best_scale(c_major)
        alternatives = find_alternative_scales(c_major, primary)

        assert alternatives[0].root is NoteName.A
        assert alternatives[0].scale_type is ScaleType.AEOLIAN

    def test_only_major_minor(self, c_major: tuple[float, ...]):
        """Test alternatives come from the major/minor family only."""
        primary = find_best_scale(c_major)
        alternatives = find_alternative_scales(c_major, primary, min_confidence=0.0, limit=24)

        assert {s.scale_type for s in alternatives} <= {ScaleType.IONIAN, ScaleType.AEOLIAN}
        assert len(alternatives) == 23

    def test_threshold(self, c_major: tuple[float, ...]):
        """Test a high threshold removes every alternative."""
        primary = find_best_scale(c_major)
        assert find_alternative_scales(c_major, primary, min_confidence=0.99) == []

    def test_limit(self, c_major: tuple[float, ...]):
        """Test the result is truncated to the limit."""
        primary = find_best_scale(c_major)
        assert len(find_alternative_scales(c_major, primary, limit=1)) == 1

    def test_flat_histogram_has_no_alternatives(self):
        """Test undefined correlations never become alternatives."""
        flat = (1 / 12,) * 12
        assert find_alternative_scales(flat, Scale.unknown(), min_confidence=0.0) == []


class TestDetectScale:
    """Tests for the detect_scale convenience function."""

    def test_c_major_melody(self):
        """Test detection from note events."""
        scale = detect_scale(melody(C_MAJOR_PITCHES))
        assert scale.name == "C Major"

    def test_empty(self):
        """Test no events give the unknown scale."""
        assert detect_scale([]).scale_type is ScaleType.UNKNOWN
