"""Audio file loading.

Raw PCM WAV files are read directly: a fixed-size header is skipped and the
payload is taken as 16-bit little-endian samples. Compressed containers are
handed to a :class:`MediaDecoder`; decoded audio at another rate is
resampled to the working rate.
"""

import logging
import struct
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional, Tuple, Union

import numpy as np

from ..constants import AudioProcessingConfig, get_audio_processing_config
from ..errors import (
    NoAudioTrack,
    NoSamplesDecoded,
    UnreadableInput,
    UnsupportedFormat,
)
from .preprocessing import AudioPreprocessor
from .types import SampleBuffer

logger = logging.getLogger(__name__)

PCM_EXTENSIONS = frozenset({".wav"})
MEDIA_EXTENSIONS = frozenset({".mp3", ".3gp", ".aac", ".m4a", ".ogg", ".flac"})


def read_pcm_wav(
    data: bytes,
    header_bytes: int = 44,
    scale: float = 32768.0,
) -> np.ndarray:
    """Decode a raw 16-bit PCM container.

    Args:
        data: Whole file contents
        header_bytes: Fixed header size to skip
        scale: Divisor mapping int16 to [-1, 1]

    Returns:
        float32 samples

    Raises:
        UnreadableInput: File no larger than its header
    """
    if len(data) <= header_bytes:
        raise UnreadableInput(
            f"WAV file is too small or corrupted ({len(data)} bytes, header is {header_bytes})"
        )

    payload = data[header_bytes:]
    # A trailing odd byte cannot form a sample
    usable = len(payload) - (len(payload) % 2)
    pcm = np.frombuffer(payload[:usable], dtype="<i2")
    return pcm.astype(np.float32) / np.float32(scale)


def wav_sample_rate(data: bytes) -> Optional[int]:
    """Sample rate from a canonical RIFF/WAVE header, or None."""
    if len(data) < 28 or data[:4] != b"RIFF" or data[8:12] != b"WAVE":
        return None
    rate = struct.unpack_from("<I", data, 24)[0]
    return rate or None


class MediaDecoder(ABC):
    """Decodes compressed audio containers to mono float samples."""

    @abstractmethod
    def decode(self, path: Path) -> Tuple[np.ndarray, int]:
        """Decode ``path`` at its native sample rate.

        Args:
            path: Audio file

        Returns:
            Tuple of (mono float samples, sample rate)

        Raises:
            NoAudioTrack: No backend found a decodable audio stream
            UnreadableInput: A backend opened the file but decoding failed
        """
        pass


class LibrosaDecoder(MediaDecoder):
    """Media decoder backed by librosa (soundfile / audioread).

    audioread reports a container without an audio stream and a file no
    backend recognises with the same ``NoBackendError``, so a corrupt
    non-audio file surfaces as :class:`NoAudioTrack` rather than
    :class:`UnreadableInput`.
    """

    def decode(self, path: Path) -> Tuple[np.ndarray, int]:
        import librosa
        from audioread.exceptions import NoBackendError

        try:
            audio, sample_rate = librosa.load(str(path), sr=None, mono=True)
        except NoBackendError as e:
            raise NoAudioTrack(f"No audio tracks found in {path.name}") from e
        except (OSError, RuntimeError, ValueError, EOFError) as e:
            raise UnreadableInput(f"Failed to decode {path.name}: {e}") from e

        return audio, int(sample_rate)


class AudioLoader:
    """Load audio files into :class:`SampleBuffer` objects at the working rate."""

    def __init__(
        self,
        config: Optional[AudioProcessingConfig] = None,
        decoder: Optional[MediaDecoder] = None,
    ):
        """Initialize audio loader.

        Args:
            config: Audio configuration (uses global config if None)
            decoder: Decoder for compressed formats (librosa if None)
        """
        self.config = config or get_audio_processing_config()
        self.decoder = decoder or LibrosaDecoder()
        self._preprocessor = AudioPreprocessor(self.config)

    @staticmethod
    def is_supported(path: Union[str, Path]) -> bool:
        """Whether the file extension has a reader."""
        suffix = Path(path).suffix.lower()
        return suffix in PCM_EXTENSIONS or suffix in MEDIA_EXTENSIONS

    def load(self, audio_path: Union[str, Path]) -> SampleBuffer:
        """Load an audio file.

        Args:
            audio_path: Path to audio file

        Returns:
            Mono samples at the working sample rate

        Raises:
            UnreadableInput: Missing, empty or truncated file
            UnsupportedFormat: Unknown extension
            NoAudioTrack: Container without an audio stream
            NoSamplesDecoded: Decoder returned no samples
        """
        path = Path(audio_path)
        if not path.is_file() or path.stat().st_size == 0:
            raise UnreadableInput(f"Audio file is empty or doesn't exist: {path}")

        suffix = path.suffix.lower()
        if suffix in PCM_EXTENSIONS:
            buffer = self._load_pcm(path)
        elif suffix in MEDIA_EXTENSIONS:
            buffer = self._load_media(path)
        else:
            raise UnsupportedFormat(f"Unsupported format: {suffix or path.name}")

        logger.debug(f"Loaded {path.name}: {len(buffer)} samples at {buffer.sample_rate} Hz")
        return buffer

    def _load_pcm(self, path: Path) -> SampleBuffer:
        """Read a raw PCM WAV file and resample it to the working rate.

        The rate comes from a canonical RIFF header when present; headerless
        or non-canonical files are taken to be at the working rate already.
        """
        try:
            data = path.read_bytes()
        except OSError as e:
            raise UnreadableInput(f"Failed to read {path}: {e}") from e

        samples = read_pcm_wav(data, self.config.wav_header_bytes, self.config.int16_max)
        sample_rate = wav_sample_rate(data) or self.config.sample_rate
        return self._preprocessor.resample(SampleBuffer(samples, sample_rate))

    def _load_media(self, path: Path) -> SampleBuffer:
        """Decode a compressed file and resample it to the working rate."""
        samples, sample_rate = self.decoder.decode(path)
        samples = np.asarray(samples, dtype=np.float32)
        if samples.size == 0:
            raise NoSamplesDecoded(f"No audio samples could be read from {path.name}")
        if samples.ndim > 1:
            samples = np.mean(samples, axis=0)

        return self._preprocessor.resample(SampleBuffer(samples, sample_rate))
