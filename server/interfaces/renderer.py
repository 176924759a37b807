"""Renderer interface definitions for Neusicgen playback."""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from composition.generation_params import NoteSequence
    from server.interfaces.audio_output import IAudioOutput
    from server.playback_session import PlaybackSession


class ISequenceRenderer(ABC):
    """Schedules a note sequence as audible voices."""

    @abstractmethod
    async def play(
        self, sequence: Optional["NoteSequence"], output: Optional["IAudioOutput"]
    ) -> Optional["PlaybackSession"]:
        """Schedule every note of the sequence on the output.

        Args:
            sequence: Generated sequence (None is a no-op)
            output: Output bus (None is a no-op)

        Returns:
            PlaybackSession handle, or None if nothing was scheduled

        Raises:
            RenderError: If the output cannot be opened
        """
        pass

    @abstractmethod
    async def stop(self) -> None:
        """Cancel the active playback session, if any. Idempotent."""
        pass
