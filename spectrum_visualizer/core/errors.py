"""
Error taxonomy of the analysis core.

Every error derives from SpectrumError and additionally from the builtin
exception that describes it best, so callers can catch either.

End-of-stream is NOT an error: FrameAssembler.next_block() returns None.
"""


class SpectrumError(Exception):
    """Base class for all errors raised by spectrum_visualizer."""


class InvalidBlockSizeError(SpectrumError, ValueError):
    """Block length is not a power of two (or real/imag lengths differ)."""


class UnsupportedFormatError(SpectrumError, ValueError):
    """Audio file format cannot be decoded."""


class SourceUnavailableError(SpectrumError, FileNotFoundError):
    """Audio source does not exist or cannot be read."""


class DeviceError(SpectrumError, RuntimeError):
    """Fatal error of the audio output device. Never retried."""
