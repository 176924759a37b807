"""Standard MIDI File export for generated sequences.

By default encode() writes a fixed 32-byte stub: a format-0 header and a
single track holding a C major key signature and the end-of-track
marker. Note content is not written. The full note track is an
incomplete feature kept behind include_note_events=True and written with
mido.
"""

import io
import logging
import struct
import time
from pathlib import Path
from typing import Optional

import mido

from composition.generation_params import NoteSequence
from server.exceptions import ExportError

logger = logging.getLogger(__name__)

TICKS_PER_BEAT = 96
DEFAULT_TEMPO_BPM = 120

HEADER_CHUNK = b"MThd" + struct.pack(">IHHH", 6, 0, 1, TICKS_PER_BEAT)

# Delta 0, key signature C major; delta 0, end of track
_STUB_TRACK_BODY = bytes([0x00, 0xFF, 0x59, 0x02, 0x00, 0x00, 0x00, 0xFF, 0x2F, 0x00])
STUB_TRACK_CHUNK = b"MTrk" + struct.pack(">I", len(_STUB_TRACK_BODY)) + _STUB_TRACK_BODY

STUB_SIZE = len(HEADER_CHUNK) + len(STUB_TRACK_CHUNK)  # 14 + 18


def encode(sequence: NoteSequence, include_note_events: bool = False) -> bytes:
    """Encode a sequence as a Standard MIDI File.

    Args:
        sequence: Generated sequence
        include_note_events: Write note on/off events and tempo instead of
            the fixed stub track (incomplete feature, off by default)

    Returns:
        SMF bytes; exactly STUB_SIZE bytes when include_note_events is False
    """
    if not include_note_events:
        return HEADER_CHUNK + STUB_TRACK_CHUNK

    return _encode_note_track(sequence)


def _encode_note_track(sequence: NoteSequence) -> bytes:
    midi_file = mido.MidiFile(type=0, ticks_per_beat=TICKS_PER_BEAT)
    track = mido.MidiTrack()
    midi_file.tracks.append(track)

    bpm = sequence.tempo if sequence.tempo > 0 else DEFAULT_TEMPO_BPM
    track.append(mido.MetaMessage("set_tempo", tempo=mido.bpm2tempo(bpm), time=0))

    # (tick, order, message); note_off sorts before note_on on the same tick
    events: list[tuple[int, int, mido.Message]] = []
    for note in sequence.notes:
        pitch = max(0, min(127, note.pitch))
        velocity = max(1, min(127, note.velocity))
        on_tick = int(round(note.time * TICKS_PER_BEAT))
        off_tick = max(on_tick + 1, int(round(note.end * TICKS_PER_BEAT)))
        events.append((on_tick, 1, mido.Message("note_on", note=pitch, velocity=velocity)))
        events.append((off_tick, 0, mido.Message("note_off", note=pitch, velocity=0)))

    events.sort(key=lambda e: (e[0], e[1]))

    last_tick = 0
    for tick, _, message in events:
        track.append(message.copy(time=tick - last_tick))
        last_tick = tick

    track.append(mido.MetaMessage("end_of_track", time=0))

    buffer = io.BytesIO()
    midi_file.save(file=buffer)
    data = buffer.getvalue()

    logger.debug(
        f"Encoded {len(sequence.notes)} notes as SMF ({len(data)} bytes, {bpm} BPM)"
    )
    return data


def default_filename() -> str:
    """Export filename in the form neural-composition-<epoch ms>.mid."""
    return f"neural-composition-{int(time.time() * 1000)}.mid"


def write_midi_file(
    sequence: NoteSequence,
    path: Optional[Path | str] = None,
    export_dir: Path | str = "exports",
    include_note_events: bool = False,
) -> Path:
    """Encode a sequence and write it to disk.

    Args:
        sequence: Generated sequence
        path: Target file path (default: export_dir/default_filename())
        export_dir: Directory used when path is omitted
        include_note_events: Passed through to encode()

    Returns:
        Path of the written file

    Raises:
        ExportError: If the file cannot be written
    """
    target = Path(path) if path is not None else Path(export_dir) / default_filename()
    data = encode(sequence, include_note_events=include_note_events)

    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(data)
    except OSError as e:
        raise ExportError(f"Failed to write MIDI file {target}: {e}") from e

    logger.info(f"Exported MIDI file: {target} ({len(data)} bytes)")
    return target
