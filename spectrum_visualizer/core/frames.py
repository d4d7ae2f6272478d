"""
Frame Assembler

Cuts a mono sample stream into fixed-size analysis blocks.

Technical assumptions:
- Samples are float64 in range [-1.0, 1.0] (see audio_io)
- Block size must be a power of two
- A trailing partial block is zero-padded; End-of-Stream (None) follows
  on the NEXT call
- Window coefficients are computed once per (window, size) and cached
- Playback always receives the raw, unwindowed and unpadded samples
"""

from dataclasses import dataclass
from functools import lru_cache
from typing import Iterator, Literal, Optional
import numpy as np
from scipy import signal

from .errors import InvalidBlockSizeError
from .fft import is_power_of_two


WindowType = Literal["none", "hann"]

WINDOW_TYPES: tuple[str, ...] = ("none", "hann")


@dataclass(frozen=True)
class SampleBlock:
    """
    One analysis block.

    Attributes:
        data: Analysis samples, exactly block_size long (windowed, padded)
        raw: Source samples as read, at most block_size long
        offset: Sample index of the first sample in the source
    """
    data: np.ndarray
    raw: np.ndarray
    offset: int

    @property
    def is_partial(self) -> bool:
        """True for the zero-padded last block."""
        return len(self.raw) < len(self.data)


@lru_cache(maxsize=32)
def get_window(window_type: str, size: int) -> Optional[np.ndarray]:
    """
    Cached window coefficients.

    Uses the periodic (DFT-even) variant as scipy.signal.stft does.
    Returns None for "none"; the returned array is read-only.
    """
    if window_type == "none":
        return None
    if window_type == "hann":
        window = signal.get_window("hann", size)
    else:
        raise ValueError(f"Unknown window function: {window_type}")
    window.setflags(write=False)
    return window


class FrameAssembler:
    """
    Sequential block reader over a mono sample array.

    Usage:
        assembler = FrameAssembler(samples, block_size=1024, window="hann")
        while (block := assembler.next_block()) is not None:
            ...

    The read cursor is private to the producer thread.
    """

    def __init__(
        self,
        samples: np.ndarray,
        block_size: int = 1024,
        window: WindowType = "none",
    ):
        if not is_power_of_two(block_size):
            raise InvalidBlockSizeError(
                f"Block size must be a power of two, got: {block_size}"
            )
        samples = np.asarray(samples, dtype=np.float64)
        if samples.ndim != 1:
            raise ValueError("FrameAssembler requires 1D signal (mono)")

        self._samples = samples
        self._block_size = block_size
        self._window = get_window(window, block_size)
        self._window_type = window
        self._position = 0
        self._exhausted = False

    @property
    def block_size(self) -> int:
        return self._block_size

    @property
    def window(self) -> str:
        return self._window_type

    @property
    def position(self) -> int:
        """Current read offset in samples."""
        return self._position

    @property
    def remaining(self) -> int:
        """Samples not yet emitted."""
        return len(self._samples) - self._position

    def seek(self, offset: int) -> None:
        """Move the read cursor (clamped to the source length)."""
        self._position = max(0, min(int(offset), len(self._samples)))
        self._exhausted = False

    def reset(self) -> None:
        """Rewind to the start of the source."""
        self.seek(0)

    def next_block(self) -> Optional[SampleBlock]:
        """
        Read the next block.

        Returns:
            SampleBlock, or None at End-of-Stream
        """
        if self._exhausted or self._position >= len(self._samples):
            self._exhausted = True
            return None

        start = self._position
        raw = self._samples[start:start + self._block_size]
        self._position = start + len(raw)

        if len(raw) < self._block_size:
            data = np.zeros(self._block_size)
            data[:len(raw)] = raw
            # Signal End-of-Stream on the following call
            self._exhausted = True
        else:
            data = raw.copy()

        if self._window is not None:
            data *= self._window

        return SampleBlock(data=data, raw=raw.copy(), offset=start)

    def __iter__(self) -> Iterator[SampleBlock]:
        while (block := self.next_block()) is not None:
            yield block
