"""Audio preprocessing: validation and resampling to the working rate."""

import logging
from typing import Optional

import numpy as np

from ..constants import AudioProcessingConfig, get_audio_processing_config
from ..errors import EmptyAudio, InvalidInput, SilentAudio
from .types import SampleBuffer

logger = logging.getLogger(__name__)


def resample(
    samples: np.ndarray,
    source_rate: int,
    target_rate: int,
) -> np.ndarray:
    """Resample by linear interpolation between neighbouring samples.

    Target index i reads source position ``i * source_rate / target_rate``.
    When only the lower neighbour exists it is returned as is; past the end
    of the input the result is 0.

    Args:
        samples: Input samples
        source_rate: Rate of ``samples`` in Hz
        target_rate: Desired rate in Hz

    Returns:
        Resampled samples (the input object itself when the rates match)
    """
    if source_rate <= 0 or target_rate <= 0:
        raise ValueError(
            f"Sample rates must be positive, got {source_rate} -> {target_rate}"
        )
    if source_rate == target_rate:
        return samples

    samples = np.asarray(samples, dtype=np.float32)
    ratio = source_rate / target_rate
    new_length = int(len(samples) / ratio)

    positions = np.arange(new_length, dtype=np.float64) * ratio
    lower = np.floor(positions).astype(np.int64)
    alpha = positions - lower

    n = len(samples)
    padded = np.concatenate([samples, np.zeros(2, dtype=np.float32)])
    lower_clipped = np.minimum(lower, n)
    upper_clipped = np.minimum(lower + 1, n)

    interpolated = padded[lower_clipped] * (1.0 - alpha) + padded[upper_clipped] * alpha
    # Only the lower neighbour in range: take it verbatim
    edge = (lower < n) & (lower + 1 >= n)
    interpolated[edge] = padded[lower_clipped[edge]]
    interpolated[lower >= n] = 0.0

    return interpolated.astype(np.float32)


class AudioPreprocessor:
    """Validate decoded audio and bring it to the working sample rate."""

    def __init__(self, config: Optional[AudioProcessingConfig] = None):
        """Initialize audio preprocessor.

        Args:
            config: Audio configuration (uses global config if None)
        """
        self.config = config or get_audio_processing_config()

    @property
    def sample_rate(self) -> int:
        return self.config.sample_rate

    def is_silent(self, samples: np.ndarray) -> bool:
        """True when every sample is below the silence threshold."""
        return bool(np.all(np.abs(samples) < self.config.silence_threshold))

    def validate(self, samples: np.ndarray, sample_rate: Optional[int] = None) -> None:
        """Reject buffers that cannot produce meaningful features.

        Args:
            samples: Decoded samples
            sample_rate: Rate of ``samples`` in Hz (not checked if None)

        Raises:
            InvalidInput: Samples are not mono or the rate is not positive
            EmptyAudio: No samples at all
            SilentAudio: All samples below the silence threshold
        """
        if np.ndim(samples) != 1:
            raise InvalidInput(f"Expected mono samples, got shape {np.shape(samples)}")
        if sample_rate is not None and sample_rate <= 0:
            raise InvalidInput(f"Sample rate must be positive, got {sample_rate}")
        if len(samples) == 0:
            raise EmptyAudio("No audio data found")
        if self.is_silent(samples):
            raise SilentAudio(
                f"Audio is silent or too quiet (all |x| < {self.config.silence_threshold})"
            )

    def resample(self, buffer: SampleBuffer, target_rate: Optional[int] = None) -> SampleBuffer:
        """Resample a buffer to ``target_rate`` (working rate by default)."""
        target_rate = target_rate or self.config.sample_rate
        if buffer.sample_rate == target_rate:
            return buffer

        logger.debug(f"Resampling {len(buffer)} samples {buffer.sample_rate} Hz -> {target_rate} Hz")
        return SampleBuffer(
            samples=resample(buffer.samples, buffer.sample_rate, target_rate),
            sample_rate=target_rate,
        )

    def preprocess(self, buffer: SampleBuffer) -> SampleBuffer:
        """Validate a buffer and conform it to the working rate."""
        self.validate(buffer.samples, buffer.sample_rate)
        return self.resample(buffer)
