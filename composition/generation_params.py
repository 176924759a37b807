"""Generation parameters and note sequence data structures."""

from dataclasses import asdict, dataclass
from typing import Any, Iterator, Tuple

# Control ranges exposed by the composer UI (advisory, not enforced here)
CREATIVITY_RANGE = (0.1, 1.0, 0.1)  # min, max, step
TEMPO_RANGE = (60, 180, 5)
DURATION_RANGE = (8, 64, 4)

NOTE_NAMES = ["C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B"]


@dataclass(frozen=True)
class GenerationParameters:
    """Input record for the sequence generator.

    Attributes:
        genre: Genre tag (unknown values resolve to "classical" at lookup)
        creativity: Randomness multiplier, intended range 0.1-1.0
        tempo: Beats per minute (metadata only)
        key: Key tag selecting the scale (unknown values resolve to "C")
        duration: Number of bars; four notes are generated per bar
    """

    genre: str
    creativity: float
    tempo: int
    key: str
    duration: int

    @classmethod
    def default(cls) -> "GenerationParameters":
        """Create default parameters.

        Returns:
            Classical in C, creativity 0.7, 120 BPM, 32 bars
        """
        return cls(
            genre="classical",
            creativity=0.7,
            tempo=120,
            key="C",
            duration=32,
        )

    @property
    def note_count(self) -> int:
        """Number of notes a generation run will emit."""
        return max(0, self.duration * 4)


@dataclass(frozen=True)
class Note:
    """Single note event in a generated sequence."""

    pitch: int  # MIDI note number
    duration: float  # Length in beats (>= 0.125)
    velocity: int  # Note velocity (0-127)
    time: float  # Onset in beats from sequence start

    @property
    def end(self) -> float:
        return self.time + self.duration

    @property
    def frequency(self) -> float:
        """Equal-tempered frequency in Hz (A4 = 69 = 440Hz)."""
        return 440.0 * 2 ** ((self.pitch - 69) / 12)

    @property
    def name(self) -> str:
        """Note name with octave number, e.g. "A5" for pitch 69."""
        return f"{NOTE_NAMES[self.pitch % 12]}{self.pitch // 12}"


@dataclass(frozen=True)
class NoteSequence:
    """Generated melodic line with the metadata it was generated for."""

    notes: Tuple[Note, ...]
    tempo: int
    key: str
    genre: str

    def __len__(self) -> int:
        return len(self.notes)

    def __iter__(self) -> Iterator[Note]:
        return iter(self.notes)

    @property
    def total_beats(self) -> float:
        """End time of the last note in beats (0.0 for an empty sequence)."""
        if not self.notes:
            return 0.0
        return self.notes[-1].end

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dictionary.

        Returns:
            Dictionary with notes and tempo/key/genre metadata
        """
        return {
            "notes": [asdict(note) for note in self.notes],
            "tempo": self.tempo,
            "key": self.key,
            "genre": self.genre,
        }

