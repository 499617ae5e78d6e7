"""Magnitude spectra of windowed frames."""

import numpy as np


def magnitude_spectrum(frames: np.ndarray) -> np.ndarray:
    """Half-spectrum magnitudes (DC to Nyquist) along the last axis.

    Accepts a single frame of length N or a ``(num_frames, N)`` stack and
    returns ``N // 2 + 1`` bins per frame.
    """
    return np.abs(np.fft.rfft(frames, axis=-1))


def dft_magnitude(frame: np.ndarray) -> np.ndarray:
    """Direct O(N^2) evaluation of the half-spectrum magnitudes.

    Reference form of :func:`magnitude_spectrum`, used to check the fast
    transform. Not meant for production frame sizes.
    """
    frame = np.asarray(frame, dtype=np.float64)
    n_fft = len(frame)
    k = np.arange(n_fft // 2 + 1)[:, np.newaxis]
    n = np.arange(n_fft)[np.newaxis, :]
    angle = -2.0 * np.pi * k * n / n_fft

    real = np.sum(frame * np.cos(angle), axis=1)
    imag = np.sum(frame * np.sin(angle), axis=1)
    return np.sqrt(real * real + imag * imag)


def bin_frequencies(sample_rate: int, n_fft: int) -> np.ndarray:
    """Centre frequency in Hz of every half-spectrum bin."""
    return np.arange(n_fft // 2 + 1) * sample_rate / n_fft
