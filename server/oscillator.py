"""Periodic oscillators and the fixed note envelope.

Voices are rendered as mono float32 NumPy arrays: a single waveform at
the note's equal-tempered frequency, shaped by a linear attack, a hold
at the velocity-scaled peak and an exponential decay to near-silence.
"""

from types import MappingProxyType
from typing import Literal, Mapping

import numpy as np

WaveformType = Literal["sine", "triangle", "square", "sawtooth"]

WAVEFORMS: tuple[str, ...] = ("sine", "triangle", "square", "sawtooth")

# Timbre per genre (smooth -> buzzy)
GENRE_WAVEFORMS: Mapping[str, WaveformType] = MappingProxyType(
    {
        "classical": "sine",
        "jazz": "triangle",
        "electronic": "square",
        "ambient": "sine",
        "minimalist": "sine",
        "baroque": "triangle",
    }
)
DEFAULT_WAVEFORM: WaveformType = "sine"

DECAY_FLOOR = 0.001  # Gain at the end of every note


def waveform_for_genre(genre: str) -> WaveformType:
    """Get the oscillator shape for a genre, sine for unknown genres."""
    return GENRE_WAVEFORMS.get(genre, DEFAULT_WAVEFORM)


def midi_to_frequency(pitch: int) -> float:
    """Convert MIDI note number to frequency in Hz (69 = A4 = 440Hz)."""
    return 440.0 * 2 ** ((pitch - 69) / 12)


def oscillate(
    waveform: str, frequency: float, num_samples: int, sample_rate: int
) -> np.ndarray:
    """Generate a unit-amplitude periodic waveform.

    Args:
        waveform: "sine", "triangle", "square" or "sawtooth"
        frequency: Frequency in Hz
        num_samples: Number of samples to generate
        sample_rate: Sample rate in Hz

    Returns:
        NumPy array, shape (num_samples,), dtype float32, range [-1.0, 1.0]

    Raises:
        ValueError: If the waveform is unknown
    """
    t = np.arange(num_samples, dtype=np.float64) / sample_rate
    phase = (frequency * t) % 1.0

    if waveform == "sine":
        wave = np.sin(2 * np.pi * phase)
    elif waveform == "square":
        wave = np.where(phase < 0.5, 1.0, -1.0)
    elif waveform == "sawtooth":
        wave = 2.0 * phase - 1.0
    elif waveform == "triangle":
        wave = 1.0 - 4.0 * np.abs(phase - 0.5)
    else:
        raise ValueError(f"Unknown waveform: {waveform} (must be one of {WAVEFORMS})")

    return wave.astype(np.float32)


def note_envelope(
    num_samples: int,
    sample_rate: int,
    peak: float,
    attack_sec: float = 0.01,
    hold_fraction: float = 0.5,
) -> np.ndarray:
    """Build the attack-hold-decay gain curve for one note.

    The curve starts at silence, ramps linearly to peak over the attack
    window, holds for hold_fraction of the remaining time and decays
    exponentially to DECAY_FLOOR on the last sample.

    Args:
        num_samples: Envelope length in samples
        sample_rate: Sample rate in Hz
        peak: Peak gain (velocity-scaled)
        attack_sec: Attack window in seconds
        hold_fraction: Share of the post-attack time spent at peak (0-1)

    Returns:
        NumPy array, shape (num_samples,), dtype float32
    """
    if num_samples <= 0:
        return np.zeros(0, dtype=np.float32)

    attack = min(num_samples, int(round(attack_sec * sample_rate)))
    remaining = num_samples - attack
    hold = int(remaining * hold_fraction)
    decay = remaining - hold

    ramp = peak * np.arange(attack, dtype=np.float64) / max(attack, 1)
    sustain = np.full(hold, peak, dtype=np.float64)

    if peak > DECAY_FLOOR:
        steps = np.arange(1, decay + 1, dtype=np.float64) / max(decay, 1)
        tail = peak * (DECAY_FLOOR / peak) ** steps
    else:
        tail = np.linspace(peak, 0.0, decay)

    return np.concatenate([ramp, sustain, tail]).astype(np.float32)


def render_voice(
    pitch: int,
    velocity: int,
    duration_sec: float,
    waveform: str,
    sample_rate: int = 44100,
    peak_gain: float = 0.1,
    attack_sec: float = 0.01,
    hold_fraction: float = 0.5,
) -> np.ndarray:
    """Render a single enveloped oscillator voice.

    Args:
        pitch: MIDI note number
        velocity: Note velocity (0-127), scales the envelope peak
        duration_sec: Voice length in seconds
        waveform: Oscillator shape
        sample_rate: Sample rate in Hz
        peak_gain: Gain at velocity 127
        attack_sec: Attack window in seconds
        hold_fraction: Share of the post-attack time held at peak

    Returns:
        NumPy array, shape (num_samples,), dtype float32
    """
    num_samples = max(1, int(round(duration_sec * sample_rate)))
    peak = (max(0, min(127, velocity)) / 127.0) * peak_gain

    wave = oscillate(waveform, midi_to_frequency(pitch), num_samples, sample_rate)
    env = note_envelope(num_samples, sample_rate, peak, attack_sec, hold_fraction)
    return wave * env
