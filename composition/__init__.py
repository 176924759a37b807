"""Neusicgen Composition - Procedural melody generation.

This module contains the scale/genre tables and the random-walk sequence
generator that turns generation parameters into note sequences.
"""

from composition.generation_params import GenerationParameters, Note, NoteSequence
from composition.musical_tables import (
    GenreSettings,
    key_label,
    resolve_genre_settings,
    resolve_scale,
)
from composition.sequence_generator import SequenceGenerator, generate

__version__ = "1.0.0"

__all__ = [
    "GenerationParameters",
    "GenreSettings",
    "Note",
    "NoteSequence",
    "SequenceGenerator",
    "generate",
    "key_label",
    "resolve_genre_settings",
    "resolve_scale",
]
