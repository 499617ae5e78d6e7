"""Slice a signal into overlapping Hann-windowed frames."""

from typing import Optional

import numpy as np


def frame_count(length: int, n_fft: int, hop_length: int) -> int:
    """Number of analysis frames for a signal of ``length`` samples.

    The tail that does not fill a whole hop is dropped; a signal shorter
    than one frame still yields a single zero-padded frame.
    """
    if hop_length <= 0:
        raise ValueError(f"hop_length must be positive, got {hop_length}")
    return max(1, (length - n_fft) // hop_length + 1)


def hann_window(size: int) -> np.ndarray:
    """Symmetric Hann window, ``0.5 * (1 - cos(2*pi*n / (size - 1)))``."""
    return np.hanning(size)


def frame_signal(samples: np.ndarray, n_fft: int, hop_length: int) -> np.ndarray:
    """Cut ``samples`` into a ``(num_frames, n_fft)`` matrix.

    Frame j starts at ``j * hop_length``; frames running past the end of
    the signal are zero-padded.
    """
    samples = np.asarray(samples, dtype=np.float64)
    num_frames = frame_count(len(samples), n_fft, hop_length)
    frames = np.zeros((num_frames, n_fft), dtype=np.float64)

    for i in range(num_frames):
        start = i * hop_length
        chunk = samples[start:start + n_fft]
        frames[i, :len(chunk)] = chunk

    return frames


def windowed_frames(
    samples: np.ndarray,
    n_fft: int,
    hop_length: int,
    window: Optional[np.ndarray] = None,
) -> np.ndarray:
    """Frame ``samples`` and multiply every frame by a Hann window."""
    if window is None:
        window = hann_window(n_fft)
    return frame_signal(samples, n_fft, hop_length) * window
