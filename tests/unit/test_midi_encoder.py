"""Unit tests for Standard MIDI File export."""

import io
import random
import re
import struct

import mido
import pytest

from composition.generation_params import GenerationParameters, Note, NoteSequence
from composition.sequence_generator import SequenceGenerator
from server.exceptions import ExportError
from server.midi_encoder import (
    STUB_SIZE,
    TICKS_PER_BEAT,
    default_filename,
    encode,
    write_midi_file,
)


@pytest.fixture
def sequence() -> NoteSequence:
    generator = SequenceGenerator(rng=random.Random(21), delay_range_ms=(0, 0))
    return generator.compose(
        GenerationParameters(genre="jazz", creativity=0.8, tempo=100, key="Dm", duration=4)
    )


@pytest.fixture
def empty_sequence() -> NoteSequence:
    return NoteSequence(notes=(), tempo=120, key="C", genre="classical")


class TestStubEncoding:
    """The default output is a fixed 32-byte container."""

    def test_stub_is_32_bytes_for_any_sequence(self, sequence, empty_sequence):
        assert STUB_SIZE == 32
        assert len(encode(sequence)) == 32
        assert len(encode(empty_sequence)) == 32

    def test_stub_is_independent_of_note_content(self, sequence, empty_sequence):
        assert encode(sequence) == encode(empty_sequence)

    def test_header_chunk(self, sequence):
        data = encode(sequence)

        assert data[:4] == b"MThd"
        length, fmt, tracks, division = struct.unpack(">IHHH", data[4:14])
        assert length == 6
        assert fmt == 0
        assert tracks == 1
        assert division == TICKS_PER_BEAT == 96

    def test_track_chunk(self, sequence):
        data = encode(sequence)

        assert data[14:18] == b"MTrk"
        (declared,) = struct.unpack(">I", data[18:22])
        assert declared == len(data) - 22
        assert data[-4:] == bytes([0x00, 0xFF, 0x2F, 0x00])

    def test_stub_parses_as_midi(self, sequence):
        midi_file = mido.MidiFile(file=io.BytesIO(encode(sequence)))

        assert midi_file.type == 0
        assert len(midi_file.tracks) == 1
        assert not [m for m in midi_file.tracks[0] if m.type == "note_on"]


class TestNoteEventEncoding:
    """Full note track behind include_note_events."""

    def test_note_events_written(self, sequence):
        data = encode(sequence, include_note_events=True)
        midi_file = mido.MidiFile(file=io.BytesIO(data))
        messages = list(midi_file.tracks[0])

        note_ons = [m for m in messages if m.type == "note_on"]
        note_offs = [m for m in messages if m.type == "note_off"]
        tempos = [m for m in messages if m.type == "set_tempo"]

        assert len(note_ons) == len(sequence.notes)
        assert len(note_offs) == len(sequence.notes)
        assert [m.note for m in note_ons] == [n.pitch for n in sequence.notes]
        assert tempos[0].tempo == mido.bpm2tempo(100)

    def test_onsets_match_note_times(self):
        notes = (
            Note(pitch=60, duration=0.5, velocity=70, time=0.0),
            Note(pitch=62, duration=0.25, velocity=70, time=0.5),
        )
        data = encode(NoteSequence(notes=notes, tempo=120, key="C", genre="classical"), True)
        track = mido.MidiFile(file=io.BytesIO(data)).tracks[0]

        tick = 0
        onsets = []
        for message in track:
            tick += message.time
            if message.type == "note_on":
                onsets.append(tick)

        assert onsets == [0, 48]


class TestWriteFile:
    """Writing exports to disk."""

    def test_write_to_path(self, sequence, tmp_path):
        target = tmp_path / "nested" / "song.mid"

        path = write_midi_file(sequence, path=target)

        assert path == target
        assert target.read_bytes() == encode(sequence)

    def test_default_filename_in_export_dir(self, sequence, tmp_path):
        path = write_midi_file(sequence, export_dir=tmp_path)

        assert path.parent == tmp_path
        assert re.fullmatch(r"neural-composition-\d+\.mid", path.name)
        assert re.fullmatch(r"neural-composition-\d+\.mid", default_filename())

    def test_unwritable_path_raises_export_error(self, sequence, tmp_path):
        blocker = tmp_path / "file"
        blocker.write_text("not a directory")

        with pytest.raises(ExportError):
            write_midi_file(sequence, path=blocker / "song.mid")
