"""Request and response models for the Neusicgen HTTP API."""

from typing import List, Optional

from pydantic import BaseModel, Field

from composition.generation_params import (
    CREATIVITY_RANGE,
    DURATION_RANGE,
    TEMPO_RANGE,
    GenerationParameters,
    Note,
    NoteSequence,
)


class GenerateRequest(BaseModel):
    # Free-form tags: unknown genres/keys fall back instead of failing
    genre: str = "classical"
    creativity: float = Field(default=0.7, ge=CREATIVITY_RANGE[0], le=CREATIVITY_RANGE[1])
    tempo: int = Field(default=120, ge=TEMPO_RANGE[0], le=TEMPO_RANGE[1])
    key: str = "C"
    duration: int = Field(default=32, ge=DURATION_RANGE[0], le=DURATION_RANGE[1])

    def to_parameters(self) -> GenerationParameters:
        return GenerationParameters(
            genre=self.genre,
            creativity=self.creativity,
            tempo=self.tempo,
            key=self.key,
            duration=self.duration,
        )


class NoteModel(BaseModel):
    pitch: int = Field(ge=0, le=127)
    duration: float = Field(gt=0.0)
    velocity: int = Field(ge=0, le=127)
    time: float = Field(ge=0.0)


class SequenceModel(BaseModel):
    notes: List[NoteModel] = Field(default_factory=list)
    tempo: int = Field(gt=0)
    key: str
    genre: str
    key_signature: Optional[str] = None
    total_beats: Optional[float] = None

    def to_sequence(self) -> NoteSequence:
        return NoteSequence(
            notes=tuple(
                Note(pitch=n.pitch, duration=n.duration, velocity=n.velocity, time=n.time)
                for n in self.notes
            ),
            tempo=self.tempo,
            key=self.key,
            genre=self.genre,
        )


class ExportRequest(BaseModel):
    # Export an existing sequence, or generate one from parameters first
    sequence: Optional[SequenceModel] = None
    parameters: Optional[GenerateRequest] = None
    include_note_events: bool = False
