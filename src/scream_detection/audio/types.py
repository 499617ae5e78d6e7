"""Value types shared across the audio pipeline."""

from dataclasses import dataclass
from typing import Dict

import numpy as np


@dataclass(frozen=True)
class SampleBuffer:
    """Mono PCM samples normalized to [-1, 1] at a known sample rate."""
    samples: np.ndarray
    sample_rate: int

    def __post_init__(self):
        samples = np.asarray(self.samples, dtype=np.float32)
        if samples.ndim != 1:
            raise ValueError(f"SampleBuffer expects mono samples, got shape {samples.shape}")
        if self.sample_rate <= 0:
            raise ValueError(f"sample_rate must be positive, got {self.sample_rate}")
        object.__setattr__(self, "samples", samples)

    def __len__(self) -> int:
        return len(self.samples)

    @property
    def duration(self) -> float:
        """Length in seconds."""
        return len(self.samples) / self.sample_rate


@dataclass(frozen=True)
class FeatureLayout:
    """Position of each feature family inside the concatenated vector."""
    n_mfcc: int
    n_chroma: int
    n_mels: int

    @property
    def size(self) -> int:
        return self.n_mfcc + self.n_chroma + self.n_mels

    @property
    def mfcc(self) -> slice:
        return slice(0, self.n_mfcc)

    @property
    def chroma(self) -> slice:
        return slice(self.n_mfcc, self.n_mfcc + self.n_chroma)

    @property
    def mel(self) -> slice:
        return slice(self.n_mfcc + self.n_chroma, self.size)

    def split(self, vector: np.ndarray) -> Dict[str, np.ndarray]:
        """Split a feature vector back into its families."""
        if len(vector) != self.size:
            raise ValueError(f"Expected {self.size} features, got {len(vector)}")
        return {
            "mfcc": vector[self.mfcc],
            "chroma": vector[self.chroma],
            "mel": vector[self.mel],
        }


@dataclass
class AudioFeatures:
    """Container for the clip-level feature families."""

    mfcc: np.ndarray
    chroma: np.ndarray
    mel_spectrogram: np.ndarray
    n_frames: int = 0

    def to_vector(self) -> np.ndarray:
        """Concatenate MFCC, chroma and mel families in that order."""
        return np.concatenate(
            [self.mfcc, self.chroma, self.mel_spectrogram]
        ).astype(np.float32)
