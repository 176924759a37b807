"""Unit tests for oscillator waveforms and the note envelope."""

import numpy as np
import pytest

from server.oscillator import (
    DECAY_FLOOR,
    WAVEFORMS,
    midi_to_frequency,
    note_envelope,
    oscillate,
    render_voice,
    waveform_for_genre,
)

SAMPLE_RATE = 8000


class TestWaveforms:
    """Test oscillator shapes and genre mapping."""

    @pytest.mark.parametrize(
        "pitch,expected",
        [(69, 440.0), (81, 880.0), (57, 220.0), (60, 261.6256)],
    )
    def test_equal_tempered_frequency(self, pitch, expected):
        assert midi_to_frequency(pitch) == pytest.approx(expected, rel=1e-5)

    def test_genre_waveforms(self):
        assert waveform_for_genre("classical") == "sine"
        assert waveform_for_genre("jazz") == "triangle"
        assert waveform_for_genre("electronic") == "square"
        assert waveform_for_genre("baroque") == "triangle"
        assert waveform_for_genre("unknown") == "sine"

    @pytest.mark.parametrize("waveform", WAVEFORMS)
    def test_waveforms_are_unit_amplitude(self, waveform):
        wave = oscillate(waveform, 440.0, SAMPLE_RATE, SAMPLE_RATE)

        assert wave.shape == (SAMPLE_RATE,)
        assert wave.dtype == np.float32
        assert np.max(wave) <= 1.0 + 1e-6
        assert np.min(wave) >= -1.0 - 1e-6
        assert np.max(wave) > 0.9

    def test_square_wave_only_has_two_levels(self):
        wave = oscillate("square", 100.0, 800, SAMPLE_RATE)

        assert set(np.unique(wave)) == {-1.0, 1.0}

    def test_unknown_waveform_rejected(self):
        with pytest.raises(ValueError):
            oscillate("noise", 440.0, 100, SAMPLE_RATE)


class TestEnvelope:
    """Test the attack-hold-decay gain curve."""

    def test_envelope_shape(self):
        peak = 0.08
        env = note_envelope(SAMPLE_RATE, SAMPLE_RATE, peak, attack_sec=0.01, hold_fraction=0.5)
        attack = int(0.01 * SAMPLE_RATE)

        assert len(env) == SAMPLE_RATE
        assert env[0] == 0.0
        # Linear attack
        assert np.all(np.diff(env[:attack]) > 0)
        # Hold at peak
        assert env[attack] == pytest.approx(peak)
        assert env[attack + 100] == pytest.approx(peak)
        # Exponential decay to the floor
        assert np.all(np.diff(env[-1000:]) < 0)
        assert env[-1] == pytest.approx(DECAY_FLOOR, rel=1e-3)
        assert np.max(env) == pytest.approx(peak)

    def test_envelope_shorter_than_attack(self):
        env = note_envelope(40, SAMPLE_RATE, 0.1, attack_sec=0.01)

        assert len(env) == 40
        assert np.max(env) < 0.1

    def test_empty_envelope(self):
        assert len(note_envelope(0, SAMPLE_RATE, 0.1)) == 0

    def test_silent_velocity(self):
        env = note_envelope(800, SAMPLE_RATE, 0.0)

        assert np.all(env == 0.0)


class TestRenderVoice:
    """Test complete voice rendering."""

    def test_voice_length_and_peak(self):
        voice = render_voice(
            pitch=69,
            velocity=127,
            duration_sec=0.5,
            waveform="sine",
            sample_rate=SAMPLE_RATE,
            peak_gain=0.1,
        )

        assert len(voice) == SAMPLE_RATE // 2
        assert np.max(np.abs(voice)) == pytest.approx(0.1, abs=0.005)

    def test_velocity_scales_peak(self):
        loud = render_voice(69, 127, 0.25, "square", sample_rate=SAMPLE_RATE)
        quiet = render_voice(69, 64, 0.25, "square", sample_rate=SAMPLE_RATE)

        ratio = np.max(np.abs(quiet)) / np.max(np.abs(loud))
        assert ratio == pytest.approx(64 / 127, rel=1e-3)

    def test_minimum_one_sample(self):
        assert len(render_voice(60, 80, 0.0, "sine", sample_rate=SAMPLE_RATE)) == 1
