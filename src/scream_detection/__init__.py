"""Scream Detection - Main Package.

This package turns recorded audio clips into fixed-length feature vectors
(MFCC, chroma and mel energies) for a scream classifier.
"""

__version__ = "0.1.0"

from . import audio
from .errors import ExtractionError, ExtractionResult, FailureKind

__all__ = ["audio", "ExtractionError", "ExtractionResult", "FailureKind"]
