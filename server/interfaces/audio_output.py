"""Audio output interface definitions for Neusicgen playback."""

from abc import ABC, abstractmethod

import numpy as np


class IAudioOutput(ABC):
    """Output bus that rendered voices are written to.

    A bus is opened once per playback session, receives any number of
    overlapping voices, and is closed when the session ends.
    """

    @abstractmethod
    def open(self, sample_rate: int) -> None:
        """Acquire the underlying device or buffer.

        Args:
            sample_rate: Sample rate of the voices that will be written

        Raises:
            OutputDeviceError: If the output cannot be opened
        """
        pass

    @abstractmethod
    def write(self, samples: np.ndarray) -> None:
        """Start a voice on the bus immediately.

        Args:
            samples: Mono voice, shape (num_samples,), dtype float32,
                range [-1.0, 1.0]. Mixed with any voices still playing.
        """
        pass

    @abstractmethod
    def close(self) -> None:
        """Stop all processing and release the output. Idempotent."""
        pass

    @property
    @abstractmethod
    def is_open(self) -> bool:
        """Whether the bus is currently accepting voices."""
        pass
