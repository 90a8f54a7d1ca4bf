"""Standard MIDI File decoder with running-status and tempo tracking."""

from __future__ import annotations

import logging
from collections import Counter
from pathlib import Path

import mido

from midi_scale_detector.ingest.reader import ByteReader, MidiFormatError
from midi_scale_detector.models.core import (
    DEFAULT_TEMPO_BPM,
    EventKind,
    MidiEvent,
    MidiFile,
    MidiHeader,
    MidiTrack,
    ticks_to_seconds,
)

logger = logging.getLogger(__name__)

HEADER_MAGIC = b"MThd"
TRACK_MAGIC = b"MTrk"
HEADER_LENGTH = 6
HEADER_CHUNK_SIZE = 14

META_STATUS = 0xFF
META_TRACK_NAME = 0x03
META_TEMPO = 0x51

# Channel messages that carry a single data byte
SINGLE_DATA_BYTE_STATUSES = (0xC0, 0xD0)


class MidiParser:
    """Decoder for format 0, 1 and 2 Standard MIDI Files.

    Each track keeps its own running tempo, seeded at 120 BPM, and every
    event gets a timestamp in seconds computed from that tempo. The file's
    reported tempo is the first tempo event found in track 0.
    """

    def parse_file(self, file_path: Path | str) -> MidiFile:
        """Read and decode a MIDI file from disk.

        Args:
            file_path: Path to the MIDI file.

        Returns:
            Decoded MidiFile.

        Raises:
            FileNotFoundError: If the file doesn't exist.
            MidiFormatError: If the file is not a valid MIDI file.
        """
        file_path = Path(file_path)

        if not file_path.exists():
            raise FileNotFoundError(f"MIDI file not found: {file_path}")

        return self.parse_bytes(file_path.read_bytes(), source_path=str(file_path))

    def parse_bytes(self, data: bytes, source_path: str = "") -> MidiFile:
        """Decode a complete SMF byte buffer.

        Args:
            data: Entire file contents.
            source_path: Path recorded on the result.

        Returns:
            Decoded MidiFile.

        Raises:
            MidiFormatError: If any chunk fails validation. No partial
                result is produced.
        """
        reader = ByteReader(data)
        header = self._parse_header(reader)

        tracks: list[MidiTrack] = []
        for index in range(header.track_count):
            try:
                tracks.append(self._parse_track(reader, header.division))
            except MidiFormatError as e:
                raise MidiFormatError(f"Failed to parse track {index}: {e}") from e

        tempo_bpm = self._first_tempo(tracks[0]) if tracks else DEFAULT_TEMPO_BPM

        logger.debug(
            f"Decoded {source_path or '<bytes>'}: format {header.format}, "
            f"{len(tracks)} track(s), division {header.division}, {tempo_bpm:.2f} BPM"
        )

        return MidiFile(
            header=header,
            tracks=tuple(tracks),
            tempo_bpm=tempo_bpm,
            source_path=source_path,
        )

    def _parse_header(self, reader: ByteReader) -> MidiHeader:
        """Read and validate the 14-byte MThd chunk."""
        if len(reader) < HEADER_CHUNK_SIZE:
            raise MidiFormatError("File too small to contain MIDI header")

        reader.expect(HEADER_MAGIC)

        header_length = reader.read_u32()
        if header_length != HEADER_LENGTH:
            raise MidiFormatError(f"Invalid MIDI header length: {header_length}")

        midi_format = reader.read_u16()
        if midi_format > 2:
            raise MidiFormatError(f"Unsupported MIDI format: {midi_format}")

        track_count = reader.read_u16()
        division = reader.read_u16()
        if division == 0:
            raise MidiFormatError("Invalid time division: 0 ticks per quarter note")

        return MidiHeader(format=midi_format, track_count=track_count, division=division)

    def _parse_track(self, reader: ByteReader, division: int) -> MidiTrack:
        """Read one MTrk chunk and decode its events."""
        if reader.remaining < 8:
            raise MidiFormatError("Unexpected end of file while parsing track")

        reader.expect(TRACK_MAGIC)
        track_length = reader.read_u32()
        if track_length > reader.remaining:
            raise MidiFormatError(
                f"Track length {track_length} exceeds file size "
                f"({reader.remaining} bytes left)"
            )

        # Reads past the chunk boundary surface as truncation errors
        chunk = ByteReader(reader.read_bytes(track_length))

        events: list[MidiEvent] = []
        name = ""
        current_tick = 0
        current_time = 0.0
        tempo_bpm = DEFAULT_TEMPO_BPM
        running_status: int | None = None

        while not chunk.at_end:
            delta_ticks = chunk.read_variable_length()
            current_tick += delta_ticks
            current_time += ticks_to_seconds(delta_ticks, division, tempo_bpm)

            status = chunk.read_u8()
            if not status & 0x80:
                if running_status is None:
                    raise MidiFormatError(
                        f"Data byte 0x{status:02X} without running status "
                        f"at offset {chunk.offset - 1}"
                    )
                chunk.rewind(1)
                status = running_status
            elif status < 0xF0:
                running_status = status

            if status == META_STATUS:
                event = self._parse_meta(chunk, current_tick, current_time)
                if event is None:
                    continue
                if event.kind is EventKind.TEMPO:
                    tempo_bpm = event.tempo_bpm  # type: ignore[assignment]
                elif event.kind is EventKind.TRACK_NAME:
                    name = event.text
                events.append(event)
            elif status >= 0xF0:
                # SysEx and escape sequences: length-prefixed, skipped
                length = chunk.read_variable_length()
                chunk.skip(length)
                logger.debug(
                    f"Skipped system event 0x{status:02X} ({length} bytes) at tick {current_tick}"
                )
            else:
                events.append(
                    self._parse_channel_message(chunk, status, current_tick, current_time)
                )

        return MidiTrack(
            name=name,
            events=tuple(events),
            channel=self._get_primary_channel(events),
        )

    def _parse_meta(
        self, chunk: ByteReader, tick: int, timestamp: float
    ) -> MidiEvent | None:
        """Decode a meta event; returns None for meta types that are not kept."""
        meta_type = chunk.read_u8()
        length = chunk.read_variable_length()
        payload = chunk.read_bytes(length)

        if meta_type == META_TEMPO and length == 3:
            microseconds_per_beat = (payload[0] << 16) | (payload[1] << 8) | payload[2]
            if microseconds_per_beat == 0:
                raise MidiFormatError("Tempo event with zero microseconds per quarter note")
            tempo_bpm = mido.tempo2bpm(microseconds_per_beat)
            logger.debug(f"Tempo change at tick {tick}: {tempo_bpm:.2f} BPM")
            return MidiEvent(
                tick=tick,
                timestamp=timestamp,
                kind=EventKind.TEMPO,
                tempo_bpm=tempo_bpm,
            )

        if meta_type == META_TRACK_NAME:
            return MidiEvent(
                tick=tick,
                timestamp=timestamp,
                kind=EventKind.TRACK_NAME,
                text=payload.decode("latin-1"),
            )

        logger.debug(f"Skipped meta event 0x{meta_type:02X} ({length} bytes) at tick {tick}")
        return None

    def _parse_channel_message(
        self, chunk: ByteReader, status: int, tick: int, timestamp: float
    ) -> MidiEvent:
        """Decode a channel voice message (status 0x80-0xEF)."""
        event_type = status & 0xF0
        channel = status & 0x0F

        if event_type in (0x80, 0x90):
            note = chunk.read_u8()
            velocity = chunk.read_u8()
            kind = EventKind.NOTE_ON if event_type == 0x90 else EventKind.NOTE_OFF
            if kind is EventKind.NOTE_ON and velocity == 0:
                kind = EventKind.NOTE_OFF
            return MidiEvent(
                tick=tick,
                timestamp=timestamp,
                kind=kind,
                channel=channel,
                note=note,
                velocity=velocity,
            )

        if event_type == 0xB0:
            controller = chunk.read_u8()
            value = chunk.read_u8()
            return MidiEvent(
                tick=tick,
                timestamp=timestamp,
                kind=EventKind.CONTROL_CHANGE,
                channel=channel,
                controller=controller,
                value=value,
            )

        if event_type == 0xC0:
            return MidiEvent(
                tick=tick,
                timestamp=timestamp,
                kind=EventKind.PROGRAM_CHANGE,
                channel=channel,
                value=chunk.read_u8(),
            )

        # Aftertouch, channel pressure, pitch bend
        chunk.skip(1 if event_type in SINGLE_DATA_BYTE_STATUSES else 2)
        return MidiEvent(tick=tick, timestamp=timestamp, kind=EventKind.UNKNOWN, channel=channel)

    def _first_tempo(self, track: MidiTrack) -> float:
        """Tempo of the first tempo event in a track, else the default."""
        for event in track.events:
            if event.kind is EventKind.TEMPO and event.tempo_bpm is not None:
                return event.tempo_bpm
        return DEFAULT_TEMPO_BPM

    def _get_primary_channel(self, events: list[MidiEvent]) -> int:
        """Determine the most common MIDI channel among note events."""
        channel_counts = Counter(e.channel for e in events if e.is_note)
        if not channel_counts:
            return -1
        return channel_counts.most_common(1)[0][0]


def parse_midi_bytes(data: bytes, source_path: str = "") -> MidiFile:
    """Convenience function to decode an in-memory MIDI file.

    Args:
        data: Entire file contents.
        source_path: Path recorded on the result.

    Returns:
        Decoded MidiFile.
    """
    return MidiParser().parse_bytes(data, source_path=source_path)


def parse_midi_file(file_path: Path | str) -> MidiFile:
    """Convenience function to read and decode a MIDI file.

    Args:
        file_path: Path to the MIDI file.

    Returns:
        Decoded MidiFile.
    """
    return MidiParser().parse_file(file_path)
