"""Internal interfaces for Neusicgen server components.

Abstract Base Classes (ABCs) defining contracts for audio output and
sequence rendering.
"""

from server.interfaces.audio_output import IAudioOutput
from server.interfaces.renderer import ISequenceRenderer

__all__ = [
    "IAudioOutput",
    "ISequenceRenderer",
]
