"""Centralized constants and configuration loader.

This module provides access to configuration values and sensible defaults
for the feature-extraction and classification constants. Values are loaded
from config/config.yaml when available, otherwise defaults are used.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

logger = logging.getLogger(__name__)

# Path to the default configuration file
DEFAULT_CONFIG_PATH = Path(__file__).resolve().parents[2] / "config" / "config.yaml"


def load_config(config_path: Optional[Path] = None) -> Dict[str, Any]:
    """Load configuration from YAML file.

    Args:
        config_path: Path to config file. Uses default if None.

    Returns:
        Configuration dictionary.
    """
    path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH

    try:
        if path.exists():
            with open(path, "r") as f:
                return yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        logger.warning(f"Failed to load config from {path}: {e}")

    return {}


def _get_nested(config: Dict, *keys: str, default: Any = None) -> Any:
    """Get nested config value with default fallback."""
    value = config
    for key in keys:
        if isinstance(value, dict):
            value = value.get(key)
        else:
            return default
        if value is None:
            return default
    return value


# ============================================================
# Audio Processing Constants
# ============================================================

@dataclass(frozen=True)
class AudioProcessingConfig:
    """Audio processing constants."""
    # Working sample rate of the pipeline
    sample_rate: int = 22050
    # Absolute amplitude below which every sample counts as silence
    silence_threshold: float = 0.001

    # Feature extraction
    n_fft: int = 2048
    hop_length: int = 512
    n_mfcc: int = 13
    n_chroma: int = 12
    n_mels: int = 40
    fmin: float = 0.0
    fmax: Optional[float] = None
    log_floor: float = 1e-10

    # Raw PCM container
    wav_header_bytes: int = 44

    # Classifier
    scream_threshold: float = 0.7

    # Standard numeric constants (not configurable)
    int16_max: float = 32768.0

    def __post_init__(self):
        """Reject parameter combinations the pipeline cannot honour."""
        if self.sample_rate <= 0:
            raise ValueError(f"sample_rate must be positive, got {self.sample_rate}")
        if self.n_fft < 2:
            raise ValueError(f"n_fft must be at least 2, got {self.n_fft}")
        if self.hop_length <= 0:
            raise ValueError(f"hop_length must be positive, got {self.hop_length}")
        if self.n_mels < 1:
            raise ValueError(f"n_mels must be positive, got {self.n_mels}")
        if not 0 < self.n_mfcc < self.n_mels:
            raise ValueError(
                f"n_mfcc must be in [1, n_mels), got {self.n_mfcc} with n_mels={self.n_mels}"
            )
        if self.n_chroma != 12:
            raise ValueError("Chroma is defined over 12 pitch classes")
        if self.wav_header_bytes < 0:
            raise ValueError("wav_header_bytes cannot be negative")

    @property
    def n_bins(self) -> int:
        """Number of non-negative frequency bins per spectrum."""
        return self.n_fft // 2 + 1

    @property
    def nyquist(self) -> float:
        """Highest representable frequency."""
        return self.sample_rate / 2.0

    @property
    def feature_size(self) -> int:
        """Length of the concatenated feature vector."""
        return self.n_mfcc + self.n_chroma + self.n_mels

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "AudioProcessingConfig":
        """Create from config dictionary."""
        ap = _get_nested(config, "audio_processing") or {}
        features = ap.get("features") or {}
        wav = ap.get("wav") or {}
        classifier = _get_nested(config, "classifier") or {}

        return cls(
            sample_rate=ap.get("sample_rate", 22050),
            silence_threshold=ap.get("silence_threshold", 0.001),
            n_fft=features.get("n_fft", 2048),
            hop_length=features.get("hop_length", 512),
            n_mfcc=features.get("n_mfcc", 13),
            n_chroma=features.get("n_chroma", 12),
            n_mels=features.get("n_mels", 40),
            fmin=features.get("fmin", 0.0),
            fmax=features.get("fmax"),
            log_floor=features.get("log_floor", 1e-10),
            wav_header_bytes=wav.get("header_bytes", 44),
            scream_threshold=classifier.get("scream_threshold", 0.7),
        )


# ============================================================
# Global Config Instance (lazy loaded)
# ============================================================

class Config:
    """Global configuration singleton."""

    _instance: Optional["Config"] = None
    _config: Dict[str, Any] = {}

    def __new__(cls) -> "Config":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._load()
        return cls._instance

    def _load(self) -> None:
        """Load configuration from file."""
        self._config = load_config()
        self._audio_processing: Optional[AudioProcessingConfig] = None

    def reload(self, config_path: Optional[Path] = None) -> None:
        """Reload configuration from file."""
        self._config = load_config(config_path)
        # Reset cached configs
        self._audio_processing = None

    @property
    def audio_processing(self) -> AudioProcessingConfig:
        """Get audio processing config."""
        if self._audio_processing is None:
            self._audio_processing = AudioProcessingConfig.from_config(self._config)
        return self._audio_processing

    def get(self, *keys: str, default: Any = None) -> Any:
        """Get a config value by key path."""
        return _get_nested(self._config, *keys, default=default)


def get_config() -> Config:
    """Get the global configuration instance."""
    return Config()


def get_audio_processing_config() -> AudioProcessingConfig:
    """Get audio processing configuration."""
    return get_config().audio_processing
