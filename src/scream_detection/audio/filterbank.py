"""Triangular mel filter bank."""

import logging
import threading
from typing import Optional

import numpy as np

from ..constants import AudioProcessingConfig, get_audio_processing_config
from .spectral import bin_frequencies

logger = logging.getLogger(__name__)


def hz_to_mel(hz):
    """Convert Hz to mel, ``2595 * log10(1 + f / 700)``."""
    return 2595.0 * np.log10(1.0 + np.asarray(hz, dtype=np.float64) / 700.0)


def mel_to_hz(mel):
    """Inverse of :func:`hz_to_mel`."""
    return 700.0 * (10.0 ** (np.asarray(mel, dtype=np.float64) / 2595.0) - 1.0)


class MelFilterBank:
    """Immutable bank of triangular filters over linear-frequency bins.

    Filter i rises from 0 at mel breakpoint ``m[i]`` to 1 at ``m[i+1]`` and
    falls back to 0 at ``m[i+2]``; breakpoints are equally spaced on the mel
    scale between ``fmin`` and ``fmax``. The weight matrix is read-only so a
    single bank can be shared between threads.
    """

    _default: Optional["MelFilterBank"] = None
    _default_config: Optional[AudioProcessingConfig] = None
    _default_lock = threading.Lock()

    def __init__(
        self,
        sample_rate: int,
        n_fft: int,
        n_filters: int = 40,
        fmin: float = 0.0,
        fmax: Optional[float] = None,
    ):
        """Build the filter bank.

        Args:
            sample_rate: Sample rate the spectra are computed at
            n_fft: FFT size; the bank covers ``n_fft // 2 + 1`` bins
            n_filters: Number of triangular filters
            fmin: Lowest breakpoint in Hz
            fmax: Highest breakpoint in Hz (Nyquist if None)
        """
        fmax = sample_rate / 2.0 if fmax is None else fmax
        if n_filters < 1:
            raise ValueError(f"n_filters must be positive, got {n_filters}")
        if not 0.0 <= fmin < fmax:
            raise ValueError(f"Invalid frequency range [{fmin}, {fmax}]")

        self.sample_rate = sample_rate
        self.n_fft = n_fft
        self.fmin = fmin
        self.fmax = fmax

        self._mel_points = np.linspace(hz_to_mel(fmin), hz_to_mel(fmax), n_filters + 2)
        self._weights = self._build(bin_frequencies(sample_rate, n_fft), self._mel_points)
        self._weights.flags.writeable = False

    @staticmethod
    def _build(freqs: np.ndarray, mel_points: np.ndarray) -> np.ndarray:
        mel = hz_to_mel(freqs)[np.newaxis, :]
        left = mel_points[:-2, np.newaxis]
        center = mel_points[1:-1, np.newaxis]
        right = mel_points[2:, np.newaxis]

        with np.errstate(divide="ignore", invalid="ignore"):
            rising = (mel - left) / (center - left)
            falling = (right - mel) / (right - center)

        weights = np.where(
            mel < left,
            0.0,
            np.where(mel <= center, rising, np.where(mel <= right, falling, 0.0)),
        )
        # Float rounding at the breakpoints must not leave negative weights
        return np.clip(np.nan_to_num(weights, nan=0.0), 0.0, 1.0)

    @classmethod
    def from_config(cls, config: AudioProcessingConfig) -> "MelFilterBank":
        """Build a bank for the configured working parameters."""
        return cls(
            sample_rate=config.sample_rate,
            n_fft=config.n_fft,
            n_filters=config.n_mels,
            fmin=config.fmin,
            fmax=config.fmax,
        )

    @classmethod
    def default(cls) -> "MelFilterBank":
        """Process-wide bank for the global configuration, built on first use.

        Rebuilt only if the global configuration was reloaded since.
        """
        config = get_audio_processing_config()
        if cls._default is None or cls._default_config is not config:
            with cls._default_lock:
                if cls._default is None or cls._default_config is not config:
                    cls._default = cls.from_config(config)
                    cls._default_config = config
                    logger.info(
                        f"Built mel filter bank: {config.n_mels} filters, "
                        f"{config.n_bins} bins at {config.sample_rate} Hz"
                    )
        return cls._default

    @property
    def weights(self) -> np.ndarray:
        """``(n_filters, n_bins)`` read-only weight matrix."""
        return self._weights

    @property
    def n_filters(self) -> int:
        return self._weights.shape[0]

    @property
    def n_bins(self) -> int:
        return self._weights.shape[1]

    @property
    def mel_points(self) -> np.ndarray:
        """The ``n_filters + 2`` mel breakpoints."""
        return self._mel_points.copy()

    @property
    def center_frequencies(self) -> np.ndarray:
        """Peak frequency of each filter in Hz."""
        return mel_to_hz(self._mel_points[1:-1])

    def apply(self, spectrum: np.ndarray) -> np.ndarray:
        """Mel-band energies for one spectrum or a ``(num_frames, n_bins)`` stack."""
        spectrum = np.asarray(spectrum)
        if spectrum.shape[-1] != self.n_bins:
            raise ValueError(
                f"Spectrum has {spectrum.shape[-1]} bins, filter bank expects {self.n_bins}"
            )
        return spectrum @ self._weights.T

    def __repr__(self) -> str:
        return (
            f"MelFilterBank(sample_rate={self.sample_rate}, n_fft={self.n_fft}, "
            f"n_filters={self.n_filters})"
        )
