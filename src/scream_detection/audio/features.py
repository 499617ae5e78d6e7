"""Per-frame feature transforms and frame aggregation.

- MFCC: log-compressed mel energies through a DCT-II, energy term dropped
- Chroma: spectral magnitude folded onto 12 equal-tempered pitch classes
- Aggregation: element-wise mean of per-frame vectors
"""

from typing import Sequence, Union

import numpy as np
from scipy.fftpack import dct

from .spectral import bin_frequencies

N_PITCH_CLASSES = 12
A4_HZ = 440.0
A4_MIDI = 69


def log_mel(mel_energies: np.ndarray, log_floor: float = 1e-10) -> np.ndarray:
    """Natural log of mel energies floored at ``log_floor``."""
    return np.log(np.maximum(log_floor, mel_energies))


def mfcc_from_mel(
    mel_energies: np.ndarray,
    n_mfcc: int = 13,
    log_floor: float = 1e-10,
) -> np.ndarray:
    """Cepstral coefficients 1..n_mfcc of one or more mel energy vectors.

    The DCT-II is scaled by ``sqrt(2 / n)``; for every coefficient past the
    0th this is exactly scipy's orthonormal DCT-II.

    Args:
        mel_energies: Mel energies, bands on the last axis
        n_mfcc: Number of coefficients to keep after dropping coefficient 0
        log_floor: Lower bound applied before the logarithm

    Returns:
        Array with ``n_mfcc`` values on the last axis
    """
    n_bands = np.shape(mel_energies)[-1]
    if not 0 < n_mfcc < n_bands:
        raise ValueError(f"n_mfcc must be in [1, {n_bands}), got {n_mfcc}")

    cepstrum = dct(log_mel(mel_energies, log_floor), type=2, axis=-1, norm="ortho")
    return cepstrum[..., 1:n_mfcc + 1]


def chroma_map(sample_rate: int, n_fft: int) -> np.ndarray:
    """Pitch class (0 = C) of every spectral bin, -1 for the DC bin."""
    freqs = bin_frequencies(sample_rate, n_fft)
    classes = np.full(len(freqs), -1, dtype=np.int64)

    audible = freqs > 0
    pitch = np.rint(12.0 * np.log2(freqs[audible] / A4_HZ) + A4_MIDI).astype(np.int64)
    classes[audible] = ((pitch % N_PITCH_CLASSES) + N_PITCH_CLASSES) % N_PITCH_CLASSES
    return classes


def chroma_from_spectrum(spectrum: np.ndarray, bin_classes: np.ndarray) -> np.ndarray:
    """Fold magnitudes onto pitch classes and scale each frame to max 1.

    Args:
        spectrum: One spectrum or a ``(num_frames, n_bins)`` stack
        bin_classes: Output of :func:`chroma_map`

    Returns:
        Chroma with 12 values on the last axis; all-zero frames stay zero
    """
    spectrum = np.asarray(spectrum, dtype=np.float64)
    if spectrum.shape[-1] != len(bin_classes):
        raise ValueError(
            f"Spectrum has {spectrum.shape[-1]} bins, chroma map covers {len(bin_classes)}"
        )

    valid = (bin_classes >= 0) & (bin_classes < N_PITCH_CLASSES)
    folding = np.zeros((len(bin_classes), N_PITCH_CLASSES), dtype=np.float64)
    folding[np.flatnonzero(valid), bin_classes[valid]] = 1.0

    chroma = spectrum @ folding
    peak = np.max(chroma, axis=-1, keepdims=True)
    return np.divide(chroma, peak, out=chroma.copy(), where=peak > 0)


def average_frames(frames: Union[np.ndarray, Sequence[np.ndarray]]) -> np.ndarray:
    """Element-wise mean over frames; empty input gives an empty vector."""
    if len(frames) == 0:
        return np.zeros(0, dtype=np.float64)
    return np.mean(np.asarray(frames, dtype=np.float64), axis=0)
