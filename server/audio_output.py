"""Audio output buses for oscillator playback.

SoundDeviceOutput streams to a live device through a PortAudio callback
that mixes every active voice. RecordingOutput keeps written voices in
memory with their bus-relative start offsets, for offline mixdown.
"""

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional

import numpy as np

from server.exceptions import OutputDeviceError
from server.interfaces.audio_output import IAudioOutput

logger = logging.getLogger(__name__)


class SoundDeviceOutput(IAudioOutput):
    """Realtime mono output through a sounddevice OutputStream.

    The stream callback runs on a PortAudio thread, so the voice list is
    guarded with a lock.
    """

    def __init__(
        self,
        device: Optional[int | str] = None,
        blocksize: int = 1024,
        latency: str | float = "low",
    ):
        """Initialize device output.

        Args:
            device: sounddevice device index or name (None = system default)
            blocksize: Frames per callback
            latency: sounddevice latency setting
        """
        self.device = device
        self.blocksize = blocksize
        self.latency = latency
        self.sample_rate = 0

        self._stream = None
        self._voices: list[list] = []  # [samples, cursor] pairs
        self._lock = threading.Lock()

    def open(self, sample_rate: int) -> None:
        """Open and start the output stream.

        Args:
            sample_rate: Stream sample rate in Hz

        Raises:
            OutputDeviceError: If the device cannot be opened
        """
        if self._stream is not None:
            return

        # Loading sounddevice needs the PortAudio shared library
        import sounddevice as sd

        try:
            stream = sd.OutputStream(
                samplerate=sample_rate,
                channels=1,
                dtype="float32",
                device=self.device,
                blocksize=self.blocksize,
                latency=self.latency,
                callback=self._callback,
            )
            stream.start()
        except (sd.PortAudioError, OSError, ValueError) as e:
            raise OutputDeviceError(f"Failed to open audio device {self.device!r}: {e}") from e

        self._stream = stream
        self.sample_rate = sample_rate
        logger.info(
            f"Audio output opened at {sample_rate}Hz "
            f"(device={self.device!r}, blocksize={self.blocksize})"
        )

    def write(self, samples: np.ndarray) -> None:
        """Start a voice on the device bus.

        Raises:
            OutputDeviceError: If the stream is not open
        """
        if self._stream is None:
            raise OutputDeviceError("Audio output is not open")

        with self._lock:
            self._voices.append([np.asarray(samples, dtype=np.float32), 0])

    def _callback(self, outdata: np.ndarray, frames: int, time_info, status) -> None:
        """Mix active voices into the device buffer."""
        if status:
            logger.debug(f"Output stream status: {status}")

        mix = np.zeros(frames, dtype=np.float32)

        with self._lock:
            active = []
            for voice in self._voices:
                samples, cursor = voice
                chunk = samples[cursor:cursor + frames]
                mix[: len(chunk)] += chunk
                voice[1] = cursor + len(chunk)
                if voice[1] < len(samples):
                    active.append(voice)
            self._voices = active

        outdata[:, 0] = np.clip(mix, -1.0, 1.0)

    def close(self) -> None:
        """Stop the stream and drop any voices still playing."""
        stream = self._stream
        if stream is None:
            return

        self._stream = None
        with self._lock:
            dropped = len(self._voices)
            self._voices = []

        try:
            stream.stop()
            stream.close()
        except Exception as e:
            logger.error(f"Error closing audio output: {e}")

        logger.info(f"Audio output closed ({dropped} voices dropped)")

    @property
    def is_open(self) -> bool:
        return self._stream is not None


@dataclass
class RecordedVoice:
    """Voice captured by RecordingOutput."""

    offset_sec: float  # Seconds after open() the voice was written
    samples: np.ndarray


class RecordingOutput(IAudioOutput):
    """In-memory output bus that records every voice written to it."""

    def __init__(self, clock: Callable[[], float] = time.perf_counter):
        """Initialize recording output.

        Args:
            clock: Monotonic clock used to timestamp voices
        """
        self.clock = clock
        self.sample_rate = 0
        self.voices: list[RecordedVoice] = []
        self.open_count = 0
        self.close_count = 0

        self._opened_at: float | None = None

    def open(self, sample_rate: int) -> None:
        self.sample_rate = sample_rate
        self.voices = []
        self._opened_at = self.clock()
        self.open_count += 1

    def write(self, samples: np.ndarray) -> None:
        if self._opened_at is None:
            raise OutputDeviceError("Recording output is not open")

        self.voices.append(
            RecordedVoice(
                offset_sec=self.clock() - self._opened_at,
                samples=np.array(samples, dtype=np.float32),
            )
        )

    def close(self) -> None:
        if self._opened_at is None:
            return
        self._opened_at = None
        self.close_count += 1

    @property
    def is_open(self) -> bool:
        return self._opened_at is not None

    def mixdown(self) -> np.ndarray:
        """Sum recorded voices at their offsets.

        Returns:
            Mono mix, shape (num_samples,), dtype float32
        """
        if not self.voices:
            return np.zeros(0, dtype=np.float32)

        starts = [int(round(v.offset_sec * self.sample_rate)) for v in self.voices]
        length = max(start + len(v.samples) for start, v in zip(starts, self.voices))

        mix = np.zeros(length, dtype=np.float32)
        for start, voice in zip(starts, self.voices):
            mix[start:start + len(voice.samples)] += voice.samples
        return mix
