"""Audio feature extraction.

Contains:
- AudioLoader: File reading and decoding to the working sample rate
- AudioPreprocessor: Validation and resampling
- MelFilterBank: Triangular mel filter bank
- FeaturePipeline: MFCC, chroma and mel feature vector extraction
- ScreamClassifier: Model adapter over feature vectors
"""

from .classifier import DetectionResult, ScreamClassifier
from .filterbank import MelFilterBank
from .loader import AudioLoader, LibrosaDecoder, MediaDecoder
from .pipeline import FeaturePipeline
from .preprocessing import AudioPreprocessor, resample
from .types import AudioFeatures, FeatureLayout, SampleBuffer

__all__ = [
    "AudioFeatures",
    "AudioLoader",
    "AudioPreprocessor",
    "DetectionResult",
    "FeatureLayout",
    "FeaturePipeline",
    "LibrosaDecoder",
    "MediaDecoder",
    "MelFilterBank",
    "SampleBuffer",
    "ScreamClassifier",
    "resample",
]
