"""Core data models for decoded MIDI files."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

DEFAULT_TEMPO_BPM = 120.0
DEFAULT_DIVISION = 480


class EventKind(str, Enum):
    """Semantic type of a decoded MIDI event."""

    NOTE_ON = "note_on"
    NOTE_OFF = "note_off"
    CONTROL_CHANGE = "control_change"
    PROGRAM_CHANGE = "program_change"
    TEMPO = "tempo"
    TRACK_NAME = "track_name"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class MidiEvent:
    """A single decoded event with absolute tick and seconds timing.

    Attributes:
        tick: Cumulative ticks since the start of the track
        timestamp: Seconds since the start of the track
        kind: Event type
        channel: MIDI channel (0-15)
        note: MIDI note number (0-127), note events only
        velocity: Note velocity (0-127), note events only
        controller: Controller number, control change only
        value: Controller value or program number
        tempo_bpm: Tempo in beats per minute, tempo events only
        text: Verbatim track name, track-name events only
    """

    tick: int
    timestamp: float
    kind: EventKind
    channel: int = 0
    note: int = 0
    velocity: int = 0
    controller: int = 0
    value: int = 0
    tempo_bpm: float | None = None
    text: str = ""

    @property
    def is_note_on(self) -> bool:
        """True for a sounding note-on (velocity above zero)."""
        return self.kind is EventKind.NOTE_ON and self.velocity > 0

    @property
    def is_note_off(self) -> bool:
        """True for a note-off, including note-on with velocity zero."""
        return self.kind is EventKind.NOTE_OFF or (
            self.kind is EventKind.NOTE_ON and self.velocity == 0
        )

    @property
    def is_note(self) -> bool:
        """True for any note-on or note-off event."""
        return self.kind in (EventKind.NOTE_ON, EventKind.NOTE_OFF)

    @property
    def pitch_class(self) -> int:
        """Note number reduced to a pitch class (0-11)."""
        return self.note % 12


@dataclass(frozen=True)
class MidiHeader:
    """The MThd chunk.

    Attributes:
        format: SMF format (0, 1 or 2)
        track_count: Number of MTrk chunks declared
        division: Ticks per quarter note
    """

    format: int = 0
    track_count: int = 0
    division: int = DEFAULT_DIVISION


@dataclass(frozen=True)
class MidiTrack:
    """A decoded track.

    Attributes:
        name: Track name from the track-name meta event
        events: Events in decode order (non-decreasing ticks)
        channel: Most common channel among note events, -1 if there are none
    """

    name: str = ""
    events: tuple[MidiEvent, ...] = ()
    channel: int = -1

    @property
    def note_events(self) -> list[MidiEvent]:
        """Note-on and note-off events of this track."""
        return [e for e in self.events if e.is_note]


@dataclass(frozen=True)
class MidiFile:
    """A fully decoded Standard MIDI File.

    Attributes:
        header: Decoded MThd chunk
        tracks: Decoded tracks, one per declared MTrk chunk
        tempo_bpm: First tempo found in track 0, else 120 BPM
        source_path: Path the bytes were read from ("" for in-memory data)
    """

    header: MidiHeader
    tracks: tuple[MidiTrack, ...] = field(default_factory=tuple)
    tempo_bpm: float = DEFAULT_TEMPO_BPM
    source_path: str = ""

    def note_events(self) -> list[MidiEvent]:
        """All note events across every track, sorted by timestamp.

        The sort is stable, so simultaneous events keep track order.
        """
        events = [e for track in self.tracks for e in track.events if e.is_note]
        events.sort(key=lambda e: e.timestamp)
        return events

    def note_events_in_range(self, start: float, end: float) -> list[MidiEvent]:
        """Note events with ``start <= timestamp <= end``."""
        return [e for e in self.note_events() if start <= e.timestamp <= end]

    @property
    def duration(self) -> float:
        """Latest event timestamp across all tracks, in seconds."""
        return max(
            (e.timestamp for track in self.tracks for e in track.events),
            default=0.0,
        )

    @property
    def note_count(self) -> int:
        """Number of sounding note-on events in the file."""
        return sum(1 for track in self.tracks for e in track.events if e.is_note_on)


def ticks_to_seconds(ticks: int, division: int, tempo_bpm: float) -> float:
    """Convert a tick count to seconds at a fixed tempo.

    Args:
        ticks: Number of ticks.
        division: Ticks per quarter note.
        tempo_bpm: Tempo in beats per minute.

    Returns:
        Elapsed seconds.
    """
    seconds_per_tick = (60.0 / tempo_bpm) / division
    return ticks * seconds_per_tick
