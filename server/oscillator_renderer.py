"""Oscillator renderer for generated note sequences.

Schedules one enveloped oscillator voice per note against the event-loop
clock. Note times are in beat units and are stretched by time_scale
(2.0 = half speed) so generated material stays legible when played.
"""

import asyncio
import logging
import time
from typing import Optional

import numpy as np

from composition.generation_params import Note, NoteSequence
from server.exceptions import RenderError
from server.interfaces.audio_output import IAudioOutput
from server.interfaces.renderer import ISequenceRenderer
from server.oscillator import render_voice, waveform_for_genre
from server.playback_session import PlaybackSession

logger = logging.getLogger(__name__)


class OscillatorRenderer(ISequenceRenderer):
    """Plays note sequences with simple periodic oscillators."""

    def __init__(
        self,
        sample_rate: int = 44100,
        time_scale: float = 2.0,
        attack_sec: float = 0.01,
        hold_fraction: float = 0.5,
        peak_gain: float = 0.1,
    ):
        """Initialize oscillator renderer.

        Args:
            sample_rate: Audio sample rate in Hz
            time_scale: Seconds of playback per beat unit
            attack_sec: Envelope attack window in seconds
            hold_fraction: Share of post-attack time held at peak gain
            peak_gain: Envelope peak at velocity 127
        """
        if time_scale <= 0:
            raise ValueError(f"Invalid time scale: {time_scale} (must be > 0)")

        self.sample_rate = sample_rate
        self.time_scale = time_scale
        self.attack_sec = attack_sec
        self.hold_fraction = hold_fraction
        self.peak_gain = peak_gain

        self._session: Optional[PlaybackSession] = None
        self._next_session_id = 0

        logger.info(
            f"Oscillator renderer initialized at {sample_rate}Hz "
            f"(time_scale={time_scale}, attack={attack_sec * 1000:.0f}ms, "
            f"peak_gain={peak_gain})"
        )

    async def play(
        self, sequence: Optional[NoteSequence], output: Optional[IAudioOutput]
    ) -> Optional[PlaybackSession]:
        """Schedule every note of the sequence on the output bus.

        Returns as soon as the voices are scheduled. Any session already
        playing on this renderer is cancelled first.

        Args:
            sequence: Generated sequence (None is a no-op)
            output: Output bus (None is a no-op)

        Returns:
            PlaybackSession handle, or None if nothing was scheduled

        Raises:
            RenderError: If the output bus cannot be opened
        """
        if sequence is None or output is None:
            logger.debug("Playback skipped: no sequence or no output target")
            return None

        await self.stop()

        session_id = f"playback_{self._next_session_id}"
        self._next_session_id += 1

        try:
            output.open(self.sample_rate)
        except Exception as e:
            logger.error(
                f"Failed to open audio output: {e}",
                extra={"session_id": session_id},
            )
            raise RenderError(f"Failed to open audio output: {e}") from e

        loop = asyncio.get_running_loop()
        start_time = loop.time()
        end_time = start_time + sequence.total_beats * self.time_scale
        waveform = waveform_for_genre(sequence.genre)

        session = PlaybackSession(session_id, output, end_time)
        for index, note in enumerate(sequence.notes):
            session.add_voice(
                asyncio.create_task(
                    self._play_voice(session, index, note, waveform, start_time)
                )
            )
        session.start()
        self._session = session

        logger.info(
            f"Scheduled {len(sequence.notes)} voices "
            f"({waveform}, {sequence.total_beats * self.time_scale:.2f}s)",
            extra={"session_id": session_id, "note_count": len(sequence.notes)},
        )

        return session

    async def stop(self) -> None:
        """Cancel the active playback session, if any."""
        session = self._session
        if session is None:
            return

        self._session = None
        session.cancel()
        await session.wait(raise_on_failure=False)

    async def _play_voice(
        self,
        session: PlaybackSession,
        index: int,
        note: Note,
        waveform: str,
        start_time: float,
    ) -> None:
        """Wait for the note's onset, then render and start its voice."""
        loop = asyncio.get_running_loop()
        delay = start_time + note.time * self.time_scale - loop.time()
        if delay > 0:
            await asyncio.sleep(delay)

        try:
            started = time.perf_counter()
            samples = self._render_note(note, waveform)
            session.output.write(samples)
            latency_ms = (time.perf_counter() - started) * 1000.0
            if latency_ms > 10.0:
                logger.warning(
                    f"Voice {index} took {latency_ms:.1f}ms to start",
                    extra={"session_id": session.session_id, "latency_ms": latency_ms},
                )
        except Exception as e:
            logger.error(
                f"Failed to play note {index} (pitch={note.pitch}): {e}",
                extra={"session_id": session.session_id, "note_index": index},
            )
            session.record_failure(index, e)

    def _render_note(self, note: Note, waveform: str) -> np.ndarray:
        return render_voice(
            pitch=note.pitch,
            velocity=note.velocity,
            duration_sec=note.duration * self.time_scale,
            waveform=waveform,
            sample_rate=self.sample_rate,
            peak_gain=self.peak_gain,
            attack_sec=self.attack_sec,
            hold_fraction=self.hold_fraction,
        )

    def render_mixdown(self, sequence: NoteSequence) -> np.ndarray:
        """Render the whole sequence offline at its scheduled offsets.

        Args:
            sequence: Generated sequence

        Returns:
            Mono mix, shape (num_samples,), dtype float32
        """
        waveform = waveform_for_genre(sequence.genre)
        voices = []
        for note in sequence.notes:
            start = int(round(note.time * self.time_scale * self.sample_rate))
            voices.append((start, self._render_note(note, waveform)))

        if not voices:
            return np.zeros(0, dtype=np.float32)

        length = max(start + len(samples) for start, samples in voices)
        mix = np.zeros(length, dtype=np.float32)
        for start, samples in voices:
            mix[start:start + len(samples)] += samples

        logger.debug(
            f"Rendered {len(voices)} voices offline "
            f"({length} samples, peak={float(np.max(np.abs(mix))):.4f})"
        )
        return mix

    @property
    def session(self) -> Optional[PlaybackSession]:
        """The most recently started session (None after stop())."""
        return self._session

    def is_playing(self) -> bool:
        return self._session is not None and not self._session.done
