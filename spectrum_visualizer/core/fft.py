"""
FFT Engine

In-place iterative radix-2 Cooley-Tukey transform for power-of-two blocks.

Technical assumptions:
- Block length N must be an exact power of two, checked before any computation
- Bit-reversal indices and per-stage twiddle factors are cached per N
- Twiddles use the angle-addition recurrence (one trig call per stage)
- Butterflies of a stage are evaluated vectorized with numpy
- No windowing here; the only window is applied by the FrameAssembler

The inverse transform (conjugate twiddles, 1/N scaling) exists for
round-trip verification; the pipeline itself only runs the forward direction.
"""

from dataclasses import dataclass
from functools import lru_cache
from typing import MutableSequence, Union
import numpy as np

from .errors import InvalidBlockSizeError


ArrayLike = Union[np.ndarray, MutableSequence[float]]


def is_power_of_two(n: int) -> bool:
    """True for 1, 2, 4, 8, ..."""
    return n > 0 and (n & (n - 1)) == 0


@dataclass
class Spectrum:
    """
    Complex spectrum of one block.

    Attributes:
        real: Real parts, length N
        imag: Imaginary parts, length N

    Bin k corresponds to k * sample_rate / N Hz. Only bins 0..N/2
    carry information for real-valued input.
    """
    real: np.ndarray
    imag: np.ndarray

    @property
    def size(self) -> int:
        return len(self.real)

    @property
    def num_bins(self) -> int:
        """Number of meaningful bins (0..N/2 inclusive)."""
        return self.size // 2 + 1

    def bin_frequency(self, k: int, sample_rate: float) -> float:
        """Center frequency of bin k in Hz."""
        return k * sample_rate / self.size


@lru_cache(maxsize=16)
def _bit_reversal_indices(n: int) -> np.ndarray:
    """Permutation index: position i receives element reverse(i)."""
    bits = n.bit_length() - 1
    indices = np.arange(n)
    reversed_indices = np.zeros(n, dtype=np.int64)
    for _ in range(bits):
        reversed_indices = (reversed_indices << 1) | (indices & 1)
        indices = indices >> 1
    reversed_indices.setflags(write=False)
    return reversed_indices


@lru_cache(maxsize=16)
def _stage_twiddles(n: int, inverse: bool) -> tuple[np.ndarray, ...]:
    """
    Twiddle factors for every stage m = 2, 4, ..., n.

    Each stage starts at w = 1 and multiplies by the primitive root
    w_m = exp(-+2j*pi/m) per step, so only one cos/sin pair is evaluated
    per stage.
    """
    sign = 1.0 if inverse else -1.0
    stages = []
    m = 2
    while m <= n:
        half = m // 2
        angle = sign * 2.0 * np.pi / m
        w_m = complex(np.cos(angle), np.sin(angle))
        twiddles = np.empty(half, dtype=np.complex128)
        w = 1.0 + 0.0j
        for j in range(half):
            twiddles[j] = w
            w *= w_m
        twiddles.setflags(write=False)
        stages.append(twiddles)
        m *= 2
    return tuple(stages)


class FFTEngine:
    """
    Reusable in-place FFT.

    Usage:
        engine = FFTEngine()
        engine.transform(real, imag)    # forward, in place
        engine.inverse(real, imag)      # back again

    The complex work buffer and the butterfly temporary are allocated once
    per block size and reused across calls. Plain sequences are converted
    to arrays on entry. The engine is not thread-safe and belongs to one
    producer.
    """

    def __init__(self):
        self._scratch: dict[int, tuple[np.ndarray, np.ndarray]] = {}

    def transform(self, real: ArrayLike, imag: ArrayLike) -> None:
        """
        Forward transform in place.

        Args:
            real: Real parts (numpy array or mutable sequence), length N
            imag: Imaginary parts, same length

        Raises:
            InvalidBlockSizeError: N is not a power of two or lengths differ.
                Inputs are left untouched.
        """
        self._run(real, imag, inverse=False)

    def inverse(self, real: ArrayLike, imag: ArrayLike) -> None:
        """Inverse transform in place (conjugate twiddles, scaled by 1/N)."""
        self._run(real, imag, inverse=True)

    def _run(self, real: ArrayLike, imag: ArrayLike, inverse: bool) -> None:
        n = _validate(real, imag)
        work, temp = self._buffers(n)

        # Bit-reversal permutation
        order = _bit_reversal_indices(n)
        np.take(np.asarray(real, dtype=np.float64), order, out=work.real, mode="clip")
        np.take(np.asarray(imag, dtype=np.float64), order, out=work.imag, mode="clip")

        # Butterfly stages
        for twiddles in _stage_twiddles(n, inverse):
            half = len(twiddles)
            groups = work.reshape(-1, 2 * half)
            top = groups[:, :half]
            bottom = groups[:, half:]
            t = temp.reshape(-1, half)
            np.multiply(bottom, twiddles, out=t)
            np.subtract(top, t, out=bottom)
            np.add(top, t, out=top)

        if inverse:
            work /= n

        real[:] = work.real
        imag[:] = work.imag

    def _buffers(self, n: int) -> tuple[np.ndarray, np.ndarray]:
        """Work buffer (N) and butterfly temporary (N/2), allocated once per N."""
        buffers = self._scratch.get(n)
        if buffers is None:
            buffers = (
                np.empty(n, dtype=np.complex128),
                np.empty(max(n // 2, 1), dtype=np.complex128),
            )
            self._scratch[n] = buffers
        return buffers


def _validate(real: ArrayLike, imag: ArrayLike) -> int:
    """Check block length before touching any data."""
    n = len(real)
    if len(imag) != n:
        raise InvalidBlockSizeError(
            f"Real and imaginary parts differ in length: {n} != {len(imag)}"
        )
    if not is_power_of_two(n):
        raise InvalidBlockSizeError(f"Block size must be a power of two, got: {n}")
    return n


_default_engine = FFTEngine()


def fft(real: ArrayLike, imag: ArrayLike) -> None:
    """Forward FFT in place using a shared engine (single-threaded use)."""
    _default_engine.transform(real, imag)


def ifft(real: ArrayLike, imag: ArrayLike) -> None:
    """Inverse FFT in place using a shared engine (single-threaded use)."""
    _default_engine.inverse(real, imag)


def compute_spectrum(block: np.ndarray, engine: FFTEngine | None = None) -> Spectrum:
    """
    Transform a real-valued block into a new Spectrum.

    The block itself is not modified.
    """
    real = np.array(block, dtype=np.float64)
    imag = np.zeros_like(real)
    (engine or _default_engine).transform(real, imag)
    return Spectrum(real=real, imag=imag)
