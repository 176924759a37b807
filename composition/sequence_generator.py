"""Constrained random-walk melody generator.

Walks a fixed eight-note scale: each step moves by a random number of
scale degrees bounded by the genre's jump range and the creativity
setting, with occasional octave jumps and slightly varied note lengths.
"""

import asyncio
import logging
import math
import random
from typing import List, Optional, Tuple

from composition.generation_params import GenerationParameters, Note, NoteSequence
from composition.musical_tables import (
    GENRE_SETTINGS,
    SCALES,
    resolve_genre_settings,
    resolve_scale,
)

logger = logging.getLogger(__name__)

NOTES_PER_BAR = 4
BASE_DURATION = 0.25  # Quarter of a beat unit
MIN_DURATION = 0.125
OCTAVE_JUMP_THRESHOLD = 0.8  # Draws above this add an octave (20% chance)
BASE_VELOCITY = 60
VELOCITY_SPREAD = 40

# Simulated model latency
DEFAULT_DELAY_RANGE_MS: Tuple[float, float] = (2000.0, 4000.0)


class SequenceGenerator:
    """Generates note sequences from GenerationParameters."""

    def __init__(
        self,
        rng: Optional[random.Random] = None,
        delay_range_ms: Tuple[float, float] = DEFAULT_DELAY_RANGE_MS,
    ):
        """Initialize sequence generator.

        Args:
            rng: Random source for note generation (seeded from system
                entropy when omitted). Pass random.Random(seed) for
                reproducible sequences.
            delay_range_ms: Bounds of the artificial delay applied by
                generate(), in milliseconds. (0, 0) disables it.
        """
        low, high = delay_range_ms
        if low < 0 or high < low:
            raise ValueError(
                f"Invalid delay range: {delay_range_ms} (need 0 <= min <= max)"
            )

        self.rng = rng if rng is not None else random.Random()
        self.delay_range_ms = (float(low), float(high))
        # Separate source so the delay never shifts a seeded note stream
        self._delay_rng = random.Random()

        logger.info(
            f"Sequence generator initialized (delay={low:.0f}-{high:.0f}ms)"
        )

    async def generate(self, params: GenerationParameters) -> NoteSequence:
        """Generate a note sequence after the simulated processing delay.

        Args:
            params: Generation parameters

        Returns:
            NoteSequence with duration * 4 notes
        """
        delay_sec = self._draw_delay_ms() / 1000.0
        if delay_sec > 0:
            logger.debug(f"Simulating generation latency: {delay_sec * 1000:.0f}ms")
            await asyncio.sleep(delay_sec)

        return self.compose(params)

    def compose(self, params: GenerationParameters) -> NoteSequence:
        """Run the random walk without any delay.

        Args:
            params: Generation parameters

        Returns:
            NoteSequence with tempo, key and genre copied from params
        """
        scale = resolve_scale(params.key)
        settings = resolve_genre_settings(params.genre)
        scale_length = len(scale)

        notes: List[Note] = []
        current_time = 0.0
        last_pitch = scale[scale_length // 2]  # Start mid-scale

        for _ in range(params.duration * NOTES_PER_BAR):
            pitch_variation = math.floor(
                (self.rng.random() - 0.5) * 2 * settings.jump_range * params.creativity
            )

            # An octave-jumped pitch is not in the scale and restarts from the root
            try:
                scale_index = scale.index(last_pitch)
            except ValueError:
                scale_index = 0

            scale_index = max(0, min(scale_length - 1, scale_index + pitch_variation))
            pitch = scale[scale_index]
            if self.rng.random() > OCTAVE_JUMP_THRESHOLD:
                pitch += 12

            rhythm_factor = 1 + (self.rng.random() - 0.5) * settings.rhythm_variety * params.creativity
            duration = max(MIN_DURATION, BASE_DURATION * rhythm_factor)

            velocity = math.floor(
                BASE_VELOCITY + self.rng.random() * VELOCITY_SPREAD * params.creativity
            )

            notes.append(
                Note(pitch=pitch, duration=duration, velocity=velocity, time=current_time)
            )

            current_time += duration
            last_pitch = pitch

        logger.debug(
            f"Generated {len(notes)} notes "
            f"(genre={params.genre}{'' if params.genre in GENRE_SETTINGS else ' -> classical'}, "
            f"key={params.key}{'' if params.key in SCALES else ' -> C'}, "
            f"creativity={params.creativity:.2f}, beats={current_time:.3f})"
        )

        return NoteSequence(
            notes=tuple(notes),
            tempo=params.tempo,
            key=params.key,
            genre=params.genre,
        )

    def _draw_delay_ms(self) -> float:
        low, high = self.delay_range_ms
        if high <= 0:
            return 0.0
        return self._delay_rng.uniform(low, high)


async def generate(
    params: GenerationParameters,
    rng: Optional[random.Random] = None,
    delay_range_ms: Tuple[float, float] = DEFAULT_DELAY_RANGE_MS,
) -> NoteSequence:
    """Generate a note sequence with a one-off generator.

    Args:
        params: Generation parameters
        rng: Optional seeded random source
        delay_range_ms: Artificial delay bounds in milliseconds

    Returns:
        Generated NoteSequence
    """
    return await SequenceGenerator(rng=rng, delay_range_ms=delay_range_ms).generate(params)
