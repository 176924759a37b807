"""Neusicgen Server - Playback, export and HTTP API.

This module contains the oscillator renderer, audio output buses, MIDI
export, configuration and the FastAPI application.
"""

from server.audio_output import RecordingOutput, SoundDeviceOutput
from server.config import NeusicgenConfig, get_config
from server.midi_encoder import encode, write_midi_file
from server.oscillator_renderer import OscillatorRenderer
from server.playback_session import PlaybackSession
from server.presets import get_preset, list_presets

__version__ = "1.0.0"

__all__ = [
    # Playback
    "OscillatorRenderer",
    "PlaybackSession",
    "SoundDeviceOutput",
    "RecordingOutput",
    # Export
    "encode",
    "write_midi_file",
    # Configuration
    "NeusicgenConfig",
    "get_config",
    # Presets
    "get_preset",
    "list_presets",
]
