"""Tests for framing, windowing and magnitude spectra."""

import numpy as np
import pytest

N_FFT = 2048
HOP = 512


class TestFraming:
    """Test cases for frame slicing."""

    @pytest.mark.parametrize("length, expected", [
        (0, 1),
        (100, 1),
        (N_FFT - 1, 1),
        (N_FFT, 1),
        (N_FFT + HOP - 1, 1),
        (N_FFT + HOP, 2),
        (N_FFT + 2 * HOP - 1, 2),
        (22050, 40),
    ])
    def test_frame_count(self, length, expected):
        """Frame count is max(1, (L - N) // hop + 1)."""
        from scream_detection.audio.framing import frame_count

        assert frame_count(length, N_FFT, HOP) == expected

    def test_short_signal_zero_padded(self):
        """A signal shorter than one frame yields one zero-padded frame."""
        from scream_detection.audio.framing import frame_signal

        audio = np.ones(1000, dtype=np.float32)
        frames = frame_signal(audio, N_FFT, HOP)

        assert frames.shape == (1, N_FFT)
        assert frames[0, :1000].sum() == 1000
        assert not frames[0, 1000:].any()

    def test_frames_start_at_hop_multiples(self):
        """Frame j starts at sample j * hop."""
        from scream_detection.audio.framing import frame_signal

        audio = np.arange(N_FFT + 3 * HOP, dtype=np.float64)
        frames = frame_signal(audio, N_FFT, HOP)

        assert frames.shape == (4, N_FFT)
        for j in range(4):
            assert frames[j, 0] == j * HOP
            assert frames[j, -1] == j * HOP + N_FFT - 1

    def test_hann_window(self):
        """Symmetric Hann: zero at both ends, one in the middle."""
        from scream_detection.audio.framing import hann_window

        window = hann_window(N_FFT)
        n = np.arange(N_FFT)
        expected = 0.5 * (1 - np.cos(2 * np.pi * n / (N_FFT - 1)))

        np.testing.assert_allclose(window, expected, atol=1e-12)
        assert window[0] == pytest.approx(0.0)
        assert window[-1] == pytest.approx(0.0)

    def test_windowed_frames_apply_window(self):
        """Every frame is multiplied by the window."""
        from scream_detection.audio.framing import hann_window, windowed_frames

        audio = np.ones(N_FFT + HOP, dtype=np.float32)
        frames = windowed_frames(audio, N_FFT, HOP)

        np.testing.assert_allclose(frames[0], hann_window(N_FFT))
        np.testing.assert_allclose(frames[1], hann_window(N_FFT))


class TestSpectrum:
    """Test cases for the spectral analyzer."""

    def test_fast_transform_matches_direct_dft(self):
        """rfft magnitudes equal the direct DFT within tolerance."""
        from scream_detection.audio.spectral import dft_magnitude, magnitude_spectrum

        rng = np.random.default_rng(1)
        frame = rng.standard_normal(256)

        np.testing.assert_allclose(
            magnitude_spectrum(frame), dft_magnitude(frame), rtol=1e-9, atol=1e-9
        )

    def test_spectrum_size(self):
        """N // 2 + 1 bins per frame, also for frame stacks."""
        from scream_detection.audio.spectral import magnitude_spectrum

        spectra = magnitude_spectrum(np.zeros((3, N_FFT)))

        assert spectra.shape == (3, N_FFT // 2 + 1)

    def test_non_negative(self):
        from scream_detection.audio.spectral import magnitude_spectrum

        rng = np.random.default_rng(2)
        assert np.all(magnitude_spectrum(rng.standard_normal(N_FFT)) >= 0)

    def test_peak_at_tone_bin(self):
        """A tone centred on bin k peaks at bin k."""
        from scream_detection.audio.spectral import magnitude_spectrum

        k = 37
        n = np.arange(N_FFT)
        frame = np.cos(2 * np.pi * k * n / N_FFT)

        assert int(np.argmax(magnitude_spectrum(frame))) == k

    def test_bin_frequencies(self):
        from scream_detection.audio.spectral import bin_frequencies

        freqs = bin_frequencies(22050, N_FFT)

        assert len(freqs) == N_FFT // 2 + 1
        assert freqs[0] == 0
        assert freqs[-1] == pytest.approx(11025.0)
