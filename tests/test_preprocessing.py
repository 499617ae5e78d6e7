"""Tests for resampling and input validation."""

import numpy as np
import pytest


class TestResample:
    """Test cases for linear-interpolation resampling."""

    @pytest.mark.parametrize("rate", [8000, 22050, 44100])
    def test_identity_when_rates_match(self, rate, sample_audio):
        """Same source and target rate returns the input untouched."""
        from scream_detection.audio import resample

        result = resample(sample_audio, rate, rate)

        assert result is sample_audio

    def test_downsample_by_two_picks_every_other_sample(self):
        """Integer ratio lands exactly on source samples."""
        from scream_detection.audio import resample

        audio = np.arange(10, dtype=np.float32)
        result = resample(audio, 2, 1)

        np.testing.assert_allclose(result, [0, 2, 4, 6, 8])

    def test_upsample_interpolates_and_holds_last_sample(self):
        """Between samples values are interpolated; past the last pair the last sample is kept."""
        from scream_detection.audio import resample

        audio = np.array([0, 1, 2, 3], dtype=np.float32)
        result = resample(audio, 1, 2)

        np.testing.assert_allclose(result, [0, 0.5, 1, 1.5, 2, 2.5, 3, 3])

    def test_fractional_ratio(self):
        """Non-integer ratio interpolates between bracketing samples."""
        from scream_detection.audio import resample

        audio = np.array([0, 3, 6, 9, 12, 15], dtype=np.float32)
        result = resample(audio, 3, 2)

        np.testing.assert_allclose(result, [0, 4.5, 9, 13.5])

    def test_output_length(self, sample_audio):
        """Length scales by target / source rate."""
        from scream_detection.audio import resample

        result = resample(sample_audio, 22050, 16000)

        assert len(result) == int(len(sample_audio) / (22050 / 16000))
        assert result.dtype == np.float32

    def test_empty_input(self):
        """Empty input gives empty output."""
        from scream_detection.audio import resample

        assert len(resample(np.zeros(0, dtype=np.float32), 44100, 22050)) == 0

    def test_invalid_rate(self):
        """Non-positive rates are rejected."""
        from scream_detection.audio import resample

        with pytest.raises(ValueError):
            resample(np.ones(4), 0, 22050)


class TestAudioPreprocessor:
    """Test cases for AudioPreprocessor class."""

    def test_validate_empty(self, config):
        """Empty buffers are rejected as EmptyAudio."""
        from scream_detection.audio import AudioPreprocessor
        from scream_detection.errors import EmptyAudio, InvalidInput

        preprocessor = AudioPreprocessor(config)

        with pytest.raises(EmptyAudio) as exc_info:
            preprocessor.validate(np.zeros(0, dtype=np.float32))
        assert isinstance(exc_info.value, InvalidInput)

    @pytest.mark.parametrize("level", [0.0, 0.0005, -0.00099])
    def test_validate_silent(self, config, level):
        """Buffers with every sample under the threshold are rejected as SilentAudio."""
        from scream_detection.audio import AudioPreprocessor
        from scream_detection.errors import SilentAudio

        preprocessor = AudioPreprocessor(config)
        audio = np.full(4096, level, dtype=np.float32)

        with pytest.raises(SilentAudio):
            preprocessor.validate(audio)

    def test_validate_rate_and_shape(self, config):
        """Non-mono buffers and non-positive rates are rejected as InvalidInput."""
        from scream_detection.audio import AudioPreprocessor
        from scream_detection.errors import InvalidInput

        preprocessor = AudioPreprocessor(config)
        audio = np.full(4096, 0.1, dtype=np.float32)

        with pytest.raises(InvalidInput):
            preprocessor.validate(audio, 0)
        with pytest.raises(InvalidInput):
            preprocessor.validate(np.stack([audio, audio]), 22050)
        preprocessor.validate(audio, 22050)

    def test_single_loud_sample_is_not_silent(self, config):
        """One sample above the threshold is enough."""
        from scream_detection.audio import AudioPreprocessor

        audio = np.zeros(4096, dtype=np.float32)
        audio[100] = 0.01

        assert AudioPreprocessor(config).is_silent(audio) is False

    def test_resample_buffer(self, config, sample_audio):
        """Buffers at another rate come back at the working rate."""
        from scream_detection.audio import AudioPreprocessor, SampleBuffer

        buffer = SampleBuffer(sample_audio, 44100)
        result = AudioPreprocessor(config).resample(buffer)

        assert result.sample_rate == config.sample_rate
        assert len(result) == len(sample_audio) // 2
        assert len(buffer) == len(sample_audio)

    def test_resample_buffer_at_working_rate_is_unchanged(self, config, sample_audio):
        """No copy is made when the buffer is already at the working rate."""
        from scream_detection.audio import AudioPreprocessor, SampleBuffer

        buffer = SampleBuffer(sample_audio, config.sample_rate)

        assert AudioPreprocessor(config).resample(buffer) is buffer


class TestSampleBuffer:
    """Test cases for SampleBuffer."""

    def test_duration(self):
        from scream_detection.audio import SampleBuffer

        buffer = SampleBuffer(np.zeros(11025), 22050)

        assert buffer.duration == 0.5
        assert buffer.samples.dtype == np.float32

    def test_rejects_multichannel(self):
        from scream_detection.audio import SampleBuffer

        with pytest.raises(ValueError):
            SampleBuffer(np.zeros((2, 100)), 22050)
