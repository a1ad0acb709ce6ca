"""
Tests for AudioDecoder.
"""
import io
import pytest
import numpy as np
import soundfile as sf

from src.core.decoder import AudioDecoder
from src.core.errors import DecodeError


def wav_bytes(data, samplerate):
    buf = io.BytesIO()
    sf.write(buf, data, samplerate, format="WAV", subtype="FLOAT")
    return buf.getvalue()


@pytest.fixture
def decoder():
    return AudioDecoder()


class TestAudioDecoder:
    """Tests for AudioDecoder functionality."""
    
    def test_decode_bytes_mono(self, decoder, sample_mono_audio):
        track = decoder.decode(wav_bytes(sample_mono_audio, 44100))
        assert track.samplerate == 44100
        assert track.channels == 1
        assert np.isclose(track.duration_seconds, 1.0)
        assert np.allclose(track.sample_data, sample_mono_audio, atol=1e-6)
    
    def test_decode_bytes_stereo(self, decoder, sample_stereo_audio):
        track = decoder.decode(wav_bytes(sample_stereo_audio, 22050), name="duet.wav")
        assert track.name == "duet.wav"
        assert track.channels == 2
        assert track.data.shape == sample_stereo_audio.shape
        assert np.isclose(track.duration_seconds, 2.0)
    
    def test_decode_path(self, decoder, tmp_path, sample_stereo_audio):
        path = tmp_path / "song.wav"
        sf.write(path, sample_stereo_audio, 44100)
        track = decoder.decode(path)
        assert track.name == "song.wav"
        assert track.samplerate == 44100
        assert track.data.shape == sample_stereo_audio.shape
    
    def test_garbage_bytes(self, decoder):
        with pytest.raises(DecodeError):
            decoder.decode(b"definitely not audio" * 10)
    
    def test_empty_bytes(self, decoder):
        with pytest.raises(DecodeError):
            decoder.decode(b"")
    
    def test_missing_file(self, decoder, tmp_path):
        with pytest.raises(DecodeError):
            decoder.decode(tmp_path / "missing.wav")
    
    def test_file_without_samples(self, decoder):
        with pytest.raises(DecodeError):
            decoder.decode(wav_bytes(np.zeros(0, dtype=np.float32), 44100))
