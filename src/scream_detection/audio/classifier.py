"""Scream classification over extracted feature vectors."""

import logging
import pickle
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Sequence, Union

import numpy as np

from ..constants import AudioProcessingConfig, get_audio_processing_config
from ..errors import InvalidFeatureVector
from .pipeline import FeaturePipeline

logger = logging.getLogger(__name__)


@dataclass
class DetectionResult:
    """Result of scream classification."""
    label: str
    confidence: float
    probabilities: Dict[str, float] = field(default_factory=dict)
    threshold: float = 0.7

    @property
    def scream_probability(self) -> float:
        return self.probabilities.get(ScreamClassifier.SCREAM_LABEL, 0.0)

    @property
    def is_scream(self) -> bool:
        """Scream probability above the alert threshold."""
        return self.scream_probability > self.threshold


class ScreamClassifier:
    """Apply a pretrained model to pipeline feature vectors.

    The model is any object with a scikit-learn style ``predict_proba`` or a
    plain callable mapping a ``(1, n_features)`` batch to class
    probabilities.
    """

    SCREAM_LABEL = "scream"
    DEFAULT_CLASSES = ("normal", "scream")

    def __init__(
        self,
        model: Any = None,
        model_path: Optional[Union[str, Path]] = None,
        input_size: Optional[int] = None,
        threshold: Optional[float] = None,
        classes: Sequence[str] = DEFAULT_CLASSES,
        pipeline: Optional[FeaturePipeline] = None,
        config: Optional[AudioProcessingConfig] = None,
    ):
        """Initialize scream classifier.

        Args:
            model: Loaded model object
            model_path: Path to a pickled model (used when ``model`` is None)
            input_size: Feature count the model expects (pipeline size if None)
            threshold: Scream probability threshold (config value if None)
            classes: Class names in model output order
            pipeline: Feature pipeline for file and sample input
            config: Audio configuration (uses global config if None)
        """
        self.config = config or get_audio_processing_config()
        self.classes = list(classes)
        if self.SCREAM_LABEL not in self.classes:
            raise ValueError(f"classes must include '{self.SCREAM_LABEL}', got {self.classes}")

        self.threshold = self.config.scream_threshold if threshold is None else threshold
        self.pipeline = pipeline or FeaturePipeline(config)
        self.input_size = input_size or self.pipeline.feature_size

        self._model = model
        if self._model is None and model_path is not None:
            self._model = self._load_model(model_path)

    @staticmethod
    def _load_model(model_path: Union[str, Path]) -> Any:
        """Load a pickled model."""
        path = Path(model_path)
        if not path.exists():
            raise FileNotFoundError(f"Model file not found: {model_path}")

        with open(path, "rb") as f:
            model = pickle.load(f)
        logger.info(f"Loaded model from {model_path}")
        return model

    @property
    def is_loaded(self) -> bool:
        """Check if a model is available."""
        return self._model is not None

    def fit_features(self, vector: np.ndarray) -> np.ndarray:
        """Zero-pad or truncate ``vector`` to the model input size."""
        vector = np.asarray(vector, dtype=np.float32).ravel()
        if len(vector) == self.input_size:
            return vector

        logger.warning(
            f"Feature count mismatch: got {len(vector)}, model expects {self.input_size}"
        )
        fitted = np.zeros(self.input_size, dtype=np.float32)
        n = min(len(vector), self.input_size)
        fitted[:n] = vector[:n]
        return fitted

    def predict(self, vector: np.ndarray) -> np.ndarray:
        """Class probabilities for one feature vector."""
        if self._model is None:
            raise RuntimeError("No model loaded")

        vector = np.asarray(vector, dtype=np.float32)
        if vector.size == 0:
            raise InvalidFeatureVector("No features extracted")
        if not np.all(np.isfinite(vector)):
            raise InvalidFeatureVector("Invalid features: found NaN or infinite values")

        batch = self.fit_features(vector)[np.newaxis, :]
        if hasattr(self._model, "predict_proba"):
            probs = self._model.predict_proba(batch)
        else:
            probs = self._model(batch)

        probs = np.asarray(probs, dtype=np.float64).reshape(-1)
        if len(probs) < len(self.classes):
            raise ValueError(
                f"Model returned {len(probs)} scores for {len(self.classes)} classes"
            )
        return probs[:len(self.classes)]

    def classify(self, vector: np.ndarray) -> DetectionResult:
        """Classify one feature vector."""
        probs = self.predict(vector)
        pred_idx = int(np.argmax(probs))

        return DetectionResult(
            label=self.classes[pred_idx],
            confidence=float(probs[pred_idx]),
            probabilities={name: float(p) for name, p in zip(self.classes, probs)},
            threshold=self.threshold,
        )

    def classify_samples(self, samples: np.ndarray, sample_rate: int) -> DetectionResult:
        """Extract features from samples and classify them."""
        return self.classify(self.pipeline.extract(samples, sample_rate))

    def detect_file(self, audio_path: Union[str, Path]) -> DetectionResult:
        """Extract features from an audio file and classify them."""
        result = self.classify(self.pipeline.extract_file(audio_path))
        logger.info(
            f"{Path(audio_path).name}: {result.label} "
            f"(scream {result.scream_probability:.0%})"
        )
        return result
