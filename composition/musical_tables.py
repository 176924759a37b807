"""Static scale and genre lookup tables.

Both tables are read-only mappings. Lookups go through the resolve_*
accessors, which fall back to the default entry for unrecognized tags
instead of raising.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Tuple

DEFAULT_KEY = "C"
DEFAULT_GENRE = "classical"


@dataclass(frozen=True)
class GenreSettings:
    """Generation variance for a genre."""

    jump_range: int  # Max scale-degree jump at creativity 1.0
    rhythm_variety: float  # Duration spread (0-1)


# One octave of scale degrees per key (MIDI note numbers)
SCALES: Mapping[str, Tuple[int, ...]] = MappingProxyType(
    {
        "C": (60, 62, 64, 65, 67, 69, 71, 72),  # C major
        "G": (67, 69, 71, 72, 74, 76, 78, 79),  # G major
        "D": (62, 64, 66, 67, 69, 71, 73, 74),  # D major
        "A": (69, 71, 73, 74, 76, 78, 80, 81),  # A major
        "Am": (69, 71, 72, 74, 76, 77, 79, 81),  # A natural minor
        "Em": (64, 66, 67, 69, 71, 72, 74, 76),  # E natural minor
        "Dm": (62, 64, 65, 67, 69, 70, 72, 74),  # D natural minor
    }
)

KEY_LABELS: Mapping[str, str] = MappingProxyType(
    {
        "C": "C Major",
        "G": "G Major",
        "D": "D Major",
        "A": "A Major",
        "Am": "A Minor",
        "Em": "E Minor",
        "Dm": "D Minor",
    }
)

GENRE_SETTINGS: Mapping[str, GenreSettings] = MappingProxyType(
    {
        "classical": GenreSettings(jump_range=3, rhythm_variety=0.3),
        "jazz": GenreSettings(jump_range=5, rhythm_variety=0.7),
        "electronic": GenreSettings(jump_range=6, rhythm_variety=0.8),
        "ambient": GenreSettings(jump_range=2, rhythm_variety=0.2),
        "minimalist": GenreSettings(jump_range=1, rhythm_variety=0.1),
        "baroque": GenreSettings(jump_range=4, rhythm_variety=0.4),
    }
)


def resolve_scale(key: str) -> Tuple[int, ...]:
    """Get the scale for a key tag.

    Args:
        key: Key tag ("C", "G", "D", "A", "Am", "Em", "Dm")

    Returns:
        Eight ascending MIDI pitches; the C major scale for unknown keys
    """
    return SCALES.get(key, SCALES[DEFAULT_KEY])


def resolve_genre_settings(genre: str) -> GenreSettings:
    """Get generation settings for a genre tag.

    Args:
        genre: Genre tag

    Returns:
        GenreSettings; the classical settings for unknown genres
    """
    return GENRE_SETTINGS.get(genre, GENRE_SETTINGS[DEFAULT_GENRE])


def key_label(key: str) -> str:
    """Human-readable key name, e.g. "A Minor" for "Am"."""
    return KEY_LABELS.get(key, KEY_LABELS[DEFAULT_KEY])
