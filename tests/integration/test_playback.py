"""Integration tests for scheduled oscillator playback.

Plays generated sequences onto an in-memory RecordingOutput with a short
time scale so each session finishes in well under a second.
"""

import asyncio
import random

import numpy as np
import pytest

from composition.generation_params import GenerationParameters, NoteSequence
from composition.sequence_generator import SequenceGenerator
from server.audio_output import RecordingOutput
from server.exceptions import OutputDeviceError, RenderError
from server.oscillator_renderer import OscillatorRenderer

SAMPLE_RATE = 8000


class FailingOutput(RecordingOutput):
    """Recording output that rejects selected voices."""

    def __init__(self, fail_on: set[int]):
        super().__init__()
        self.fail_on = fail_on
        self.writes = 0

    def write(self, samples: np.ndarray) -> None:
        index = self.writes
        self.writes += 1
        if index in self.fail_on:
            raise OutputDeviceError(f"Simulated device error on voice {index}")
        super().write(samples)


class UnavailableOutput(RecordingOutput):
    """Output whose device can never be opened."""

    def open(self, sample_rate: int) -> None:
        raise OutputDeviceError("No audio device")


def make_sequence(bars: int = 2, genre: str = "electronic", seed: int = 4) -> NoteSequence:
    generator = SequenceGenerator(rng=random.Random(seed), delay_range_ms=(0, 0))
    return generator.compose(
        GenerationParameters(genre=genre, creativity=0.6, tempo=120, key="G", duration=bars)
    )


def make_renderer(time_scale: float = 0.05) -> OscillatorRenderer:
    return OscillatorRenderer(sample_rate=SAMPLE_RATE, time_scale=time_scale)


class TestPlaybackLifecycle:
    """Test scheduling, completion and teardown."""

    @pytest.mark.asyncio
    async def test_plays_every_note_then_closes_output(self):
        sequence = make_sequence()
        output = RecordingOutput()
        renderer = make_renderer()

        session = await renderer.play(sequence, output)
        await session.wait()

        assert session.voice_count == len(sequence.notes)
        assert len(output.voices) == len(sequence.notes)
        assert session.done
        assert not output.is_open
        assert output.open_count == 1
        assert output.close_count == 1
        assert output.sample_rate == SAMPLE_RATE

        offsets = [voice.offset_sec for voice in output.voices]
        assert offsets == sorted(offsets)

    @pytest.mark.asyncio
    async def test_play_returns_before_voices_start(self):
        output = RecordingOutput()
        renderer = make_renderer()

        session = await renderer.play(make_sequence(), output)

        assert session is not None
        assert not session.done
        assert output.is_open
        assert len(output.voices) == 0

        await session.wait()

    @pytest.mark.asyncio
    async def test_session_lasts_until_last_note_ends(self):
        sequence = make_sequence(bars=1)
        renderer = make_renderer(time_scale=0.1)
        loop = asyncio.get_running_loop()

        started = loop.time()
        session = await renderer.play(sequence, RecordingOutput())
        await session.wait()

        assert loop.time() - started >= sequence.total_beats * 0.1 - 0.01

    @pytest.mark.asyncio
    async def test_voices_use_genre_waveform_and_scaled_length(self):
        sequence = make_sequence(bars=1, genre="electronic")
        output = RecordingOutput()
        renderer = make_renderer(time_scale=0.1)

        session = await renderer.play(sequence, output)
        await session.wait()

        first = output.voices[0].samples
        expected_len = int(round(sequence.notes[0].duration * 0.1 * SAMPLE_RATE))
        assert len(first) == expected_len
        # Square wave: the hold section sits at +/- peak
        peak = sequence.notes[0].velocity / 127 * 0.1
        assert np.max(np.abs(first)) == pytest.approx(peak, rel=1e-3)

    @pytest.mark.asyncio
    async def test_empty_sequence_opens_and_closes(self):
        output = RecordingOutput()
        empty = NoteSequence(notes=(), tempo=120, key="C", genre="ambient")

        session = await make_renderer().play(empty, output)
        await session.wait()

        assert session.voice_count == 0
        assert output.close_count == 1


class TestMissingPrerequisites:
    """No-op behavior for absent sequences or outputs."""

    @pytest.mark.asyncio
    async def test_no_output_target_is_noop(self):
        renderer = make_renderer()

        assert await renderer.play(make_sequence(), None) is None
        assert renderer.session is None
        assert not renderer.is_playing()

    @pytest.mark.asyncio
    async def test_no_sequence_is_noop(self):
        output = RecordingOutput()

        assert await make_renderer().play(None, output) is None
        assert output.open_count == 0

    @pytest.mark.asyncio
    async def test_stop_without_session_is_noop(self):
        renderer = make_renderer()

        await renderer.stop()
        await renderer.stop()


class TestCancellation:
    """Batch cancellation of pending voices."""

    @pytest.mark.asyncio
    async def test_cancel_mid_playback(self):
        sequence = make_sequence(bars=4)
        output = RecordingOutput()
        session = await make_renderer(time_scale=0.5).play(sequence, output)

        await asyncio.sleep(0.2)
        session.cancel()
        session.cancel()
        await session.wait()

        assert session.cancelled
        assert session.done
        assert 0 < len(output.voices) < len(sequence.notes)
        assert output.close_count == 1

        # Nothing is written once the session is cancelled
        written = len(output.voices)
        await asyncio.sleep(0.3)
        assert len(output.voices) == written

    @pytest.mark.asyncio
    async def test_cancel_before_first_voice(self):
        output = RecordingOutput()
        session = await make_renderer().play(make_sequence(), output)

        session.cancel()
        await session.wait()

        assert len(output.voices) == 0
        assert output.close_count == 1

    @pytest.mark.asyncio
    async def test_cancel_after_finish_is_noop(self):
        output = RecordingOutput()
        session = await make_renderer().play(make_sequence(bars=1), output)
        await session.wait()

        session.cancel()

        assert not session.cancelled
        assert output.close_count == 1

    @pytest.mark.asyncio
    async def test_new_play_cancels_previous_session(self):
        renderer = make_renderer(time_scale=0.5)
        first_output = RecordingOutput()
        second_output = RecordingOutput()

        first = await renderer.play(make_sequence(bars=4), first_output)
        second = await renderer.play(make_sequence(bars=1), second_output)

        assert first.cancelled
        assert first_output.close_count == 1
        assert renderer.session is second

        await renderer.stop()
        assert second.done


class TestFailures:
    """Failure isolation and aggregate reporting."""

    @pytest.mark.asyncio
    async def test_failed_voices_do_not_abort_schedule(self):
        sequence = make_sequence()
        output = FailingOutput(fail_on={1, 3})

        session = await make_renderer().play(sequence, output)

        with pytest.raises(RenderError) as exc_info:
            await session.wait()

        assert len(output.voices) == len(sequence.notes) - 2
        assert [index for index, _ in exc_info.value.failures] == [1, 3]
        assert all(isinstance(e, OutputDeviceError) for _, e in exc_info.value.failures)
        assert output.close_count == 1

    @pytest.mark.asyncio
    async def test_unavailable_device_raises_render_error(self):
        renderer = make_renderer()

        with pytest.raises(RenderError):
            await renderer.play(make_sequence(), UnavailableOutput())

        assert renderer.session is None


class TestOfflineMixdown:
    """Offline rendering at the scheduled offsets."""

    def test_mixdown_length_matches_sequence(self):
        sequence = make_sequence(bars=2, genre="ambient")
        renderer = make_renderer(time_scale=1.0)

        mix = renderer.render_mixdown(sequence)

        expected = sequence.total_beats * SAMPLE_RATE
        assert abs(len(mix) - expected) <= 2
        assert mix.dtype == np.float32
        assert 0.0 < np.max(np.abs(mix)) <= 0.1

    def test_mixdown_of_empty_sequence(self):
        empty = NoteSequence(notes=(), tempo=120, key="C", genre="ambient")

        assert len(make_renderer().render_mixdown(empty)) == 0
