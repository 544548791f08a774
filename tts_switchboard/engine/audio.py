"""
Audio helpers for adapters that render samples themselves.

Cloud adapters hand back whatever bytes their SDK produced; the in-process
engines synthesize float32 samples and encode them here.
"""

from __future__ import annotations

import io

import numpy as np
import soundfile as sf


# soundfile container names for the formats we can encode locally
_SF_FORMATS = {
    "wav": ("WAV", "PCM_16"),
    "flac": ("FLAC", "PCM_16"),
    "ogg": ("OGG", "VORBIS"),
}


def encode_audio(samples: np.ndarray, sample_rate: int, fmt: str = "wav") -> bytes:
    """Encode mono float samples in [-1, 1].

    ``pcm`` returns bare 16-bit little-endian samples. Anything soundfile
    cannot write raises ValueError.
    """
    fmt = (fmt or "wav").lower()
    samples = np.clip(np.asarray(samples, dtype=np.float32), -1.0, 1.0)

    if fmt == "pcm":
        return (samples * 32767).astype("<i2").tobytes()

    if fmt not in _SF_FORMATS:
        raise ValueError(f"Unsupported output format: {fmt}")

    container, subtype = _SF_FORMATS[fmt]
    buffer = io.BytesIO()
    sf.write(buffer, samples, sample_rate, format=container, subtype=subtype)
    return buffer.getvalue()


def decode_audio(data: bytes) -> tuple[np.ndarray, int]:
    """Decode any container soundfile understands to float32 samples."""
    samples, sample_rate = sf.read(io.BytesIO(data), dtype="float32")
    if samples.ndim > 1:
        samples = samples.mean(axis=1)
    return samples, sample_rate


def detect_format(data: bytes) -> str:
    """Best-effort container sniffing from the first bytes."""
    if data[:4] == b"RIFF" and data[8:12] == b"WAVE":
        return "wav"
    if data[:3] == b"ID3" or (len(data) > 1 and data[0] == 0xFF and (data[1] & 0xE0) == 0xE0):
        return "mp3"
    if data[:4] == b"OggS":
        return "ogg"
    if data[:4] == b"fLaC":
        return "flac"
    return "pcm"


def sine_wave(
    duration: float,
    sample_rate: int,
    frequency: float = 440.0,
    amplitude: float = 0.3,
) -> np.ndarray:
    num_samples = max(1, int(duration * sample_rate))
    t = np.arange(num_samples, dtype=np.float32) / sample_rate
    return (amplitude * np.sin(2 * np.pi * frequency * t)).astype(np.float32)
