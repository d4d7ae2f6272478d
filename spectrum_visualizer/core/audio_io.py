"""
Audio I/O Module

Loads audio files and prepares the mono sample source for the pipeline.

Technical assumptions:
- WAV/FLAC/OGG/AIFF files are loaded with soundfile (no implicit conversion)
- MP3 files are decoded with pydub (requires ffmpeg)
- All audio data is returned as float64 numpy arrays (range -1.0 to 1.0)
- Channel order for stereo: [left, right] as (samples, 2) array
- Downmix to mono happens only in open_source(), with an explicit method
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional
import logging
import numpy as np
import soundfile as sf

from .errors import SourceUnavailableError, UnsupportedFormatError
from .signal_processing import DownmixMethod, downmix_to_mono


logger = logging.getLogger(__name__)

SOUNDFILE_SUFFIXES = (".wav", ".flac", ".ogg", ".aiff", ".aif")
SUPPORTED_SUFFIXES = SOUNDFILE_SUFFIXES + (".mp3",)


@dataclass
class AudioFile:
    """
    A loaded audio file with its metadata.

    Attributes:
        data: Audio data, Shape: (samples,) or (samples, channels)
        sample_rate: Original sample rate of the file
        channels: Number of channels
        num_samples: Number of samples per channel
        file_path: Path to source file
        format_info: Format information (format, subtype)
    """
    data: np.ndarray
    sample_rate: int
    channels: int
    num_samples: int
    file_path: Path
    format_info: dict = field(default_factory=dict)

    def __post_init__(self):
        """Validate data integrity."""
        if self.data.ndim == 1:
            if self.channels != 1:
                raise ValueError("1D array must be mono")
        elif self.data.ndim == 2:
            if self.data.shape[1] != self.channels:
                raise ValueError("Channel count mismatch")
        else:
            raise ValueError("Audio array must be 1D or 2D")

    @property
    def duration_seconds(self) -> float:
        return self.num_samples / self.sample_rate


@dataclass
class AudioSource:
    """
    Mono sample source handed to the pipeline.

    Attributes:
        samples: Mono float64 samples in [-1.0, 1.0]
        sample_rate: Sample rate in Hz
        channels: Channel count of the original file (before downmix)
        file_path: Origin of the samples, None for synthetic sources
    """
    samples: np.ndarray
    sample_rate: int
    channels: int = 1
    file_path: Optional[Path] = None

    def __post_init__(self):
        self.samples = np.asarray(self.samples, dtype=np.float64)
        if self.samples.ndim != 1:
            raise ValueError("AudioSource requires mono samples")
        if self.sample_rate <= 0:
            raise ValueError("Sample rate must be positive")

    @property
    def num_samples(self) -> int:
        return len(self.samples)

    @property
    def duration_seconds(self) -> float:
        return self.num_samples / self.sample_rate


def load_audio(file_path: str | Path) -> AudioFile:
    """
    Load an audio file without implicit conversion.

    Args:
        file_path: Path to audio file

    Returns:
        AudioFile with all channels

    Raises:
        SourceUnavailableError: File does not exist or cannot be read
        UnsupportedFormatError: Unknown suffix or undecodable content
    """
    path = Path(file_path)

    if not path.is_file():
        raise SourceUnavailableError(f"Audio file not found: {path}")

    suffix = path.suffix.lower()

    if suffix in SOUNDFILE_SUFFIXES:
        return _load_soundfile(path)
    elif suffix == ".mp3":
        return _load_mp3(path)
    else:
        raise UnsupportedFormatError(f"Unsupported format: {suffix}")


def open_source(file_path: str | Path, downmix: DownmixMethod = "average") -> AudioSource:
    """
    Open an audio file as mono pipeline source.

    Args:
        file_path: Path to audio file
        downmix: Explicit stereo-to-mono method

    Returns:
        AudioSource with mono samples
    """
    audio = load_audio(file_path)
    samples = audio.data if audio.channels == 1 else downmix_to_mono(audio.data, downmix)
    logger.info(
        "Opened %s: %d Hz, %d channel(s), %.1f s",
        audio.file_path.name, audio.sample_rate, audio.channels, audio.duration_seconds,
    )
    return AudioSource(
        samples=samples,
        sample_rate=audio.sample_rate,
        channels=audio.channels,
        file_path=audio.file_path,
    )


def _load_soundfile(path: Path) -> AudioFile:
    """Load a libsndfile-supported file with soundfile."""
    try:
        data, sample_rate = sf.read(path, dtype='float64', always_2d=False)
        info = sf.info(path)
    except PermissionError as e:
        raise SourceUnavailableError(f"Audio file not readable: {path}") from e
    except RuntimeError as e:
        # soundfile reports decoding problems as LibsndfileError (RuntimeError)
        raise UnsupportedFormatError(f"Could not decode {path.name}: {e}") from e

    if data.ndim == 1:
        channels = 1
        num_samples = len(data)
    else:
        num_samples, channels = data.shape

    return AudioFile(
        data=data,
        sample_rate=sample_rate,
        channels=channels,
        num_samples=num_samples,
        file_path=path,
        format_info={"format": info.format, "subtype": info.subtype},
    )


def _load_mp3(path: Path) -> AudioFile:
    """
    Load MP3 file with pydub.

    Requires ffmpeg in system PATH for decoding.
    """
    try:
        from pydub import AudioSegment
    except ImportError:
        raise ImportError("pydub is not installed. Please install with 'pip install pydub'.")

    try:
        audio = AudioSegment.from_mp3(path)
    except Exception as e:
        raise UnsupportedFormatError(
            f"MP3 could not be loaded: {e}\n"
            "Please ensure ffmpeg is installed."
        ) from e

    channels = audio.channels
    samples = np.array(audio.get_array_of_samples())

    # pydub returns signed integers of sample_width bytes
    full_scale = float(2 ** (8 * audio.sample_width - 1))
    samples = samples.astype(np.float64) / full_scale

    if channels > 1:
        samples = samples.reshape(-1, channels)

    return AudioFile(
        data=samples,
        sample_rate=audio.frame_rate,
        channels=channels,
        num_samples=samples.shape[0],
        file_path=path,
        format_info={"format": "MP3", "subtype": "MPEG Layer 3"},
    )
