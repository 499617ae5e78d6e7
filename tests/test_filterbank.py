"""Tests for the mel filter bank."""

import threading

import numpy as np
import pytest

SAMPLE_RATE = 22050
N_FFT = 2048


@pytest.fixture(scope="module")
def bank():
    from scream_detection.audio import MelFilterBank
    return MelFilterBank(SAMPLE_RATE, N_FFT, n_filters=40)


class TestMelScale:
    """Test cases for Hz/mel conversion."""

    def test_known_values(self):
        from scream_detection.audio.filterbank import hz_to_mel

        assert hz_to_mel(0.0) == pytest.approx(0.0)
        assert hz_to_mel(700.0) == pytest.approx(2595 * np.log10(2))

    def test_round_trip(self):
        from scream_detection.audio.filterbank import hz_to_mel, mel_to_hz

        freqs = np.array([0.0, 100.0, 1000.0, 11025.0])
        np.testing.assert_allclose(mel_to_hz(hz_to_mel(freqs)), freqs, atol=1e-9)


class TestMelFilterBank:
    """Test cases for MelFilterBank class."""

    def test_shape(self, bank):
        assert bank.weights.shape == (40, N_FFT // 2 + 1)
        assert bank.n_filters == 40
        assert bank.n_bins == N_FFT // 2 + 1

    def test_weights_non_negative_and_peak_at_most_one(self, bank):
        assert np.all(bank.weights >= 0)
        assert np.all(bank.weights.max(axis=1) <= 1.0)

    def test_every_filter_covers_some_bin(self, bank):
        assert np.all(bank.weights.sum(axis=1) > 0)

    def test_zero_outside_triangle(self, bank):
        """Weights vanish below the left and above the right breakpoint."""
        from scream_detection.audio.filterbank import hz_to_mel
        from scream_detection.audio.spectral import bin_frequencies

        mel = hz_to_mel(bin_frequencies(SAMPLE_RATE, N_FFT))
        points = bank.mel_points

        for i in range(bank.n_filters):
            outside = (mel < points[i]) | (mel > points[i + 2])
            assert not bank.weights[i, outside].any(), f"filter {i} leaks outside its support"

    def test_column_sums_at_most_one(self, bank):
        """Overlapping triangles never sum past one for any bin."""
        assert np.all(bank.weights.sum(axis=0) <= 1.0 + 1e-9)

    def test_centers_monotonic(self, bank):
        centers = bank.center_frequencies

        assert np.all(np.diff(centers) >= 0)
        assert centers[0] > 0
        assert centers[-1] < SAMPLE_RATE / 2

    def test_weights_read_only(self, bank):
        """The bank cannot be mutated after construction."""
        with pytest.raises(ValueError):
            bank.weights[0, 0] = 1.0

    def test_apply_is_matrix_vector_product(self, bank):
        rng = np.random.default_rng(3)
        spectrum = rng.random(bank.n_bins)

        energies = bank.apply(spectrum)

        assert energies.shape == (40,)
        np.testing.assert_allclose(
            energies,
            [np.sum(bank.weights[i] * spectrum) for i in range(40)],
        )

    def test_apply_frame_stack(self, bank):
        rng = np.random.default_rng(4)
        spectra = rng.random((5, bank.n_bins))

        energies = bank.apply(spectra)

        assert energies.shape == (5, 40)
        np.testing.assert_allclose(energies[2], bank.apply(spectra[2]))

    def test_apply_rejects_wrong_size(self, bank):
        with pytest.raises(ValueError):
            bank.apply(np.ones(100))

    def test_invalid_parameters(self):
        from scream_detection.audio import MelFilterBank

        with pytest.raises(ValueError):
            MelFilterBank(SAMPLE_RATE, N_FFT, n_filters=0)
        with pytest.raises(ValueError):
            MelFilterBank(SAMPLE_RATE, N_FFT, fmin=5000.0, fmax=1000.0)

    def test_default_is_shared(self):
        """Concurrent first use of the default bank builds one instance."""
        from scream_detection.audio import MelFilterBank

        seen = []

        def grab():
            seen.append(MelFilterBank.default())

        threads = [threading.Thread(target=grab) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len({id(b) for b in seen}) == 1
        assert MelFilterBank.default() is seen[0]
