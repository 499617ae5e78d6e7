"""Pytest configuration and fixtures."""

import struct
import sys
from pathlib import Path

import numpy as np
import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

SAMPLE_RATE = 22050
N_FFT = 2048


def make_sine(frequency: float, duration: float = 1.0, sample_rate: int = SAMPLE_RATE,
              amplitude: float = 0.5) -> np.ndarray:
    """Pure sine wave as float32 samples."""
    t = np.arange(int(duration * sample_rate)) / sample_rate
    return (amplitude * np.sin(2 * np.pi * frequency * t)).astype(np.float32)


def write_pcm_wav(path: Path, samples: np.ndarray, sample_rate: int = SAMPLE_RATE) -> Path:
    """Write mono float samples as a canonical 44-byte-header 16-bit WAV."""
    pcm = np.clip(np.round(np.asarray(samples) * 32767), -32768, 32767).astype("<i2")
    data = pcm.tobytes()
    header = b"RIFF" + struct.pack("<I", 36 + len(data)) + b"WAVE"
    header += b"fmt " + struct.pack("<IHHIIHH", 16, 1, 1, sample_rate, sample_rate * 2, 2, 16)
    header += b"data" + struct.pack("<I", len(data))
    path.write_bytes(header + data)
    return path


@pytest.fixture
def config():
    """Default audio processing configuration."""
    from scream_detection.constants import AudioProcessingConfig
    return AudioProcessingConfig()


@pytest.fixture(scope="session")
def pipeline():
    """Feature pipeline with default parameters, shared across tests."""
    from scream_detection.audio import FeaturePipeline
    from scream_detection.constants import AudioProcessingConfig
    return FeaturePipeline(AudioProcessingConfig())


@pytest.fixture
def sample_audio():
    """Create a sample audio signal (1 second at 22050 Hz)."""
    rng = np.random.default_rng(0)
    return (0.1 * rng.standard_normal(SAMPLE_RATE)).astype(np.float32)


@pytest.fixture
def sine_440():
    """One second of A4 at the working sample rate."""
    return make_sine(440.0)


@pytest.fixture
def wav_file(tmp_path):
    """Factory writing samples to a WAV file under tmp_path."""
    def _write(samples, name="clip.wav", sample_rate=SAMPLE_RATE):
        return write_pcm_wav(tmp_path / name, samples, sample_rate)
    return _write
