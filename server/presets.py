"""Generation presets for Neusicgen.

Predefined parameter combinations, starting with the composer's default
settings.
"""

import logging
from typing import Any, Dict

from composition.generation_params import GenerationParameters
from composition.musical_tables import key_label

logger = logging.getLogger(__name__)


PRESETS: Dict[str, Dict[str, Any]] = {
    "default": {
        "name": "Default",
        "description": "Classical line in C major with moderate variation",
        "genre": "classical",
        "creativity": 0.7,
        "tempo": 120,
        "key": "C",
        "duration": 32,
    },
    "ambient_drift": {
        "name": "Ambient Drift",
        "description": "Narrow, slow-moving line in A minor",
        "genre": "ambient",
        "creativity": 0.5,
        "tempo": 90,
        "key": "Am",
        "duration": 8,
    },
    "jazz_sketch": {
        "name": "Jazz Sketch",
        "description": "Wide leaps and loose rhythm in D minor",
        "genre": "jazz",
        "creativity": 0.9,
        "tempo": 140,
        "key": "Dm",
        "duration": 16,
    },
    "baroque_study": {
        "name": "Baroque Study",
        "description": "Busy stepwise figures in D major",
        "genre": "baroque",
        "creativity": 0.6,
        "tempo": 110,
        "key": "D",
        "duration": 24,
    },
    "electronic_pulse": {
        "name": "Electronic Pulse",
        "description": "Square-wave arpeggios in E minor",
        "genre": "electronic",
        "creativity": 1.0,
        "tempo": 128,
        "key": "Em",
        "duration": 16,
    },
    "minimal_loop": {
        "name": "Minimal Loop",
        "description": "Near-repetitive pattern in G major",
        "genre": "minimalist",
        "creativity": 0.3,
        "tempo": 100,
        "key": "G",
        "duration": 8,
    },
}


def get_preset(preset_name: str) -> GenerationParameters:
    """Get preset by name.

    Args:
        preset_name: Preset identifier (e.g. "default", "ambient_drift")

    Returns:
        GenerationParameters configured for the preset

    Raises:
        KeyError: If preset name not found
    """
    preset_name_lower = preset_name.lower()

    if preset_name_lower not in PRESETS:
        available = ", ".join(PRESETS.keys())
        raise KeyError(
            f"Unknown preset: {preset_name}. Available presets: {available}"
        )

    preset = PRESETS[preset_name_lower]

    logger.info(f"Loading preset: {preset['name']} - {preset['description']}")

    return GenerationParameters(
        genre=preset["genre"],
        creativity=preset["creativity"],
        tempo=preset["tempo"],
        key=preset["key"],
        duration=preset["duration"],
    )


def list_presets() -> list[Dict[str, Any]]:
    """List all available presets.

    Returns:
        List of preset metadata dictionaries
    """
    return [
        {
            "id": preset_id,
            "name": preset["name"],
            "description": preset["description"],
            "genre": preset["genre"],
            "creativity": preset["creativity"],
            "tempo": preset["tempo"],
            "key": preset["key"],
            "key_signature": key_label(preset["key"]),
            "duration": preset["duration"],
        }
        for preset_id, preset in PRESETS.items()
    ]
