"""Feature-extraction pipeline.

Turns a mono sample buffer into one fixed-length feature vector:

    MFCC (13) | Chroma (12) | Mel spectrogram (40)

Each family is computed per frame from a shared magnitude spectrum and
averaged over all frames of the clip.
"""

import logging
from pathlib import Path
from typing import Optional, Union

import numpy as np

from ..constants import AudioProcessingConfig, get_audio_processing_config
from ..errors import (
    ExtractionError,
    ExtractionFailure,
    ExtractionResult,
    InvalidFeatureVector,
)
from .features import average_frames, chroma_from_spectrum, chroma_map, mfcc_from_mel
from .filterbank import MelFilterBank
from .framing import hann_window, windowed_frames
from .loader import AudioLoader
from .preprocessing import AudioPreprocessor
from .spectral import magnitude_spectrum
from .types import AudioFeatures, FeatureLayout, SampleBuffer

logger = logging.getLogger(__name__)


class FeaturePipeline:
    """Extract the classifier feature vector from audio.

    The filter bank, window and chroma map are built once and only read
    afterwards, so one pipeline can serve concurrent ``extract`` calls.
    """

    def __init__(
        self,
        config: Optional[AudioProcessingConfig] = None,
        filter_bank: Optional[MelFilterBank] = None,
    ):
        """Initialize the pipeline.

        Args:
            config: Processing configuration (uses global config if None)
            filter_bank: Prebuilt mel filter bank; built from ``config`` if None
        """
        self.config = config or get_audio_processing_config()

        if filter_bank is None:
            if config is None:
                filter_bank = MelFilterBank.default()
            else:
                filter_bank = MelFilterBank.from_config(self.config)
        if filter_bank.n_bins != self.config.n_bins:
            raise ValueError(
                f"Filter bank covers {filter_bank.n_bins} bins, n_fft={self.config.n_fft} "
                f"needs {self.config.n_bins}"
            )
        if filter_bank.n_filters <= self.config.n_mfcc:
            raise ValueError(
                f"Filter bank has {filter_bank.n_filters} filters, "
                f"need more than n_mfcc={self.config.n_mfcc}"
            )

        self.filter_bank = filter_bank
        self.preprocessor = AudioPreprocessor(self.config)
        self._window = hann_window(self.config.n_fft)
        self._window.flags.writeable = False
        self._chroma_map = chroma_map(self.config.sample_rate, self.config.n_fft)
        self._chroma_map.flags.writeable = False

    @property
    def layout(self) -> FeatureLayout:
        """Where each feature family sits in the output vector."""
        return FeatureLayout(
            n_mfcc=self.config.n_mfcc,
            n_chroma=self.config.n_chroma,
            n_mels=self.filter_bank.n_filters,
        )

    @property
    def feature_size(self) -> int:
        return self.layout.size

    def extract_features(self, samples: np.ndarray, sample_rate: int) -> AudioFeatures:
        """Compute the three clip-level feature families.

        Args:
            samples: Mono samples in [-1, 1]
            sample_rate: Rate of ``samples`` in Hz

        Returns:
            AudioFeatures with frame-averaged MFCC, chroma and mel energies

        Raises:
            InvalidInput: Samples are not mono or the rate is not positive
            EmptyAudio: No samples
            SilentAudio: All samples below the silence threshold
            ExtractionFailure: Any fault while computing the features
        """
        samples = np.asarray(samples, dtype=np.float32)
        # Validation runs before any spectral work
        self.preprocessor.validate(samples, sample_rate)

        try:
            buffer = self.preprocessor.resample(SampleBuffer(samples, sample_rate))
            frames = windowed_frames(
                buffer.samples,
                self.config.n_fft,
                self.config.hop_length,
                window=self._window,
            )
            spectra = magnitude_spectrum(frames)

            mel_energies = self.filter_bank.apply(spectra)
            mfccs = mfcc_from_mel(mel_energies, self.config.n_mfcc, self.config.log_floor)
            chroma = chroma_from_spectrum(spectra, self._chroma_map)

            features = AudioFeatures(
                mfcc=average_frames(mfccs),
                chroma=average_frames(chroma),
                mel_spectrogram=average_frames(mel_energies),
                n_frames=len(frames),
            )
        except ExtractionError:
            raise
        except Exception as e:
            raise ExtractionFailure(f"Feature extraction failed: {e}", cause=e) from e

        logger.debug(
            f"Extracted features from {len(buffer)} samples ({features.n_frames} frames)"
        )
        return features

    def extract(self, samples: np.ndarray, sample_rate: int) -> np.ndarray:
        """Extract the concatenated feature vector.

        Raises:
            EmptyAudio: No samples
            SilentAudio: All samples below the silence threshold
            ExtractionFailure: Any fault while computing the features
            InvalidFeatureVector: Result contains NaN or infinite values
        """
        vector = self.extract_features(samples, sample_rate).to_vector()
        self.validate_vector(vector)
        return vector

    def extract_buffer(self, buffer: SampleBuffer) -> np.ndarray:
        """Extract the feature vector of a :class:`SampleBuffer`."""
        return self.extract(buffer.samples, buffer.sample_rate)

    def extract_file(self, path: Union[str, Path]) -> np.ndarray:
        """Load an audio file and extract its feature vector."""
        buffer = AudioLoader(self.config).load(path)
        return self.extract_buffer(buffer)

    def extract_result(self, samples: np.ndarray, sample_rate: int) -> ExtractionResult:
        """Like :meth:`extract` but returns the failure instead of raising it."""
        try:
            return ExtractionResult(vector=self.extract(samples, sample_rate))
        except ExtractionError as e:
            logger.debug(f"Extraction failed ({e.kind.value}): {e}")
            return ExtractionResult(failure=e)

    def extract_file_result(self, path: Union[str, Path]) -> ExtractionResult:
        """Like :meth:`extract_file` but returns the failure instead of raising it."""
        try:
            return ExtractionResult(vector=self.extract_file(path))
        except ExtractionError as e:
            logger.debug(f"Extraction of {path} failed ({e.kind.value}): {e}")
            return ExtractionResult(failure=e)

    def validate_vector(self, vector: np.ndarray) -> None:
        """Fail fast on a malformed feature vector."""
        if len(vector) != self.feature_size:
            raise InvalidFeatureVector(
                f"Expected {self.feature_size} features, got {len(vector)}"
            )
        if not np.all(np.isfinite(vector)):
            bad = int(np.count_nonzero(~np.isfinite(vector)))
            raise InvalidFeatureVector(f"Feature vector has {bad} NaN or infinite values")
