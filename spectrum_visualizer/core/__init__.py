"""
Core DSP module - fully testable without GUI dependencies.

This module contains the real-time analysis pipeline:
- Audio source loading (WAV, FLAC, OGG, AIFF, MP3)
- Frame assembly and windowing
- In-place radix-2 FFT
- Band mapping
- Latest-wins snapshot channel
- Pipeline driver with playback sinks
"""

from .errors import (
    SpectrumError,
    InvalidBlockSizeError,
    UnsupportedFormatError,
    SourceUnavailableError,
    DeviceError,
)
from .audio_io import AudioFile, AudioSource, load_audio, open_source
from .frames import FrameAssembler, SampleBlock
from .fft import FFTEngine, Spectrum, compute_spectrum, fft, ifft, is_power_of_two
from .bands import (
    DEFAULT_BAND_CENTERS,
    BandMapper,
    FrequencyBands,
    LinearBands,
    map_to_bands,
)
from .channel import BandSnapshot, SpectrumChannel
from .playback import NullSink, SoundDeviceSink
from .pipeline import PipelineConfig, PipelineState, SpectrumPipeline

__all__ = [
    "SpectrumError",
    "InvalidBlockSizeError",
    "UnsupportedFormatError",
    "SourceUnavailableError",
    "DeviceError",
    "AudioFile",
    "AudioSource",
    "load_audio",
    "open_source",
    "FrameAssembler",
    "SampleBlock",
    "FFTEngine",
    "Spectrum",
    "compute_spectrum",
    "fft",
    "ifft",
    "is_power_of_two",
    "DEFAULT_BAND_CENTERS",
    "BandMapper",
    "FrequencyBands",
    "LinearBands",
    "map_to_bands",
    "BandSnapshot",
    "SpectrumChannel",
    "NullSink",
    "SoundDeviceSink",
    "PipelineConfig",
    "PipelineState",
    "SpectrumPipeline",
]
