"""Failure kinds raised by the feature-extraction pipeline.

Every failure is terminal for a single extraction call. Callers can match on
the exception class or on its ``kind`` instead of parsing messages.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

import numpy as np


class FailureKind(str, Enum):
    """Named reasons an extraction can fail."""
    UNREADABLE_INPUT = "unreadable_input"
    UNSUPPORTED_FORMAT = "unsupported_format"
    INVALID_INPUT = "invalid_input"
    EMPTY_AUDIO = "empty_audio"
    SILENT_AUDIO = "silent_audio"
    NO_AUDIO_TRACK = "no_audio_track"
    NO_SAMPLES_DECODED = "no_samples_decoded"
    EXTRACTION_FAILURE = "extraction_failure"
    INVALID_FEATURE_VECTOR = "invalid_feature_vector"


class ExtractionError(Exception):
    """Base class for all pipeline failures."""
    kind: FailureKind = FailureKind.EXTRACTION_FAILURE


class UnreadableInput(ExtractionError):
    """File missing, empty, or too small to hold its declared header."""
    kind = FailureKind.UNREADABLE_INPUT


class UnsupportedFormat(ExtractionError):
    """Container or extension not handled by any decoder."""
    kind = FailureKind.UNSUPPORTED_FORMAT


class InvalidInput(ExtractionError):
    """Sample buffer cannot be analysed."""
    kind = FailureKind.INVALID_INPUT


class EmptyAudio(InvalidInput):
    """Sample buffer holds no samples."""
    kind = FailureKind.EMPTY_AUDIO


class SilentAudio(InvalidInput):
    """Every sample is below the silence threshold."""
    kind = FailureKind.SILENT_AUDIO


class NoAudioTrack(ExtractionError):
    """Decoder found no audio stream in the container."""
    kind = FailureKind.NO_AUDIO_TRACK


class NoSamplesDecoded(ExtractionError):
    """Decoder produced zero samples."""
    kind = FailureKind.NO_SAMPLES_DECODED


class ExtractionFailure(ExtractionError):
    """Arithmetic or indexing fault during feature computation."""
    kind = FailureKind.EXTRACTION_FAILURE

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause


class InvalidFeatureVector(ExtractionError):
    """Feature vector contains NaN or infinite values."""
    kind = FailureKind.INVALID_FEATURE_VECTOR


@dataclass(frozen=True)
class ExtractionResult:
    """Outcome of one extraction: a feature vector or the failure that stopped it."""
    vector: Optional[np.ndarray] = None
    failure: Optional[ExtractionError] = None

    def __post_init__(self):
        if (self.vector is None) == (self.failure is None):
            raise ValueError("ExtractionResult holds exactly one of vector or failure")

    @property
    def ok(self) -> bool:
        """True when extraction succeeded."""
        return self.failure is None

    @property
    def kind(self) -> Optional[FailureKind]:
        """Failure kind, or None on success."""
        return self.failure.kind if self.failure is not None else None

    def unwrap(self) -> np.ndarray:
        """Return the vector or re-raise the failure."""
        if self.failure is not None:
            raise self.failure
        return self.vector
