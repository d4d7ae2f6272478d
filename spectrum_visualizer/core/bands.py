"""
Band Mapper

Reduces a complex spectrum to a fixed, ordered set of band magnitudes.

Two band definitions are supported:
- FrequencyBands: explicit center frequencies, each band is the magnitude
  of the single nearest bin (no averaging)
- LinearBands: bins 0..N/2 are split into B contiguous buckets of equal
  size, each band is the arithmetic mean of its bucket; the last bucket
  absorbs the remainder

Scaling policy:
- Input samples are float64 in [-1.0, 1.0]
- Output = raw bin magnitude (input units) / scaling_divisor
- No clamping; the renderer owns display normalization

With scaling_divisor = N/2 (the pipeline default) an unwindowed full-scale
sine exactly on a bin gives a band value of ~1.0. A Hann window halves it.
"""

from dataclasses import dataclass
from typing import Union
import math
import numpy as np

from .fft import Spectrum
from ..utils.formatting import format_frequency


# Classic ten-band equalizer layout
DEFAULT_BAND_CENTERS: tuple[float, ...] = (
    60, 170, 310, 600, 1000, 3000, 6000, 12000, 14000, 16000,
)


@dataclass(frozen=True)
class FrequencyBands:
    """
    Bands at explicit center frequencies (Hz).

    Centers beyond Nyquist map to bin N/2.
    """
    centers: tuple[float, ...] = DEFAULT_BAND_CENTERS

    def __post_init__(self):
        object.__setattr__(self, "centers", tuple(float(f) for f in self.centers))
        if not self.centers:
            raise ValueError("At least one center frequency is required")
        if not all(math.isfinite(f) for f in self.centers):
            raise ValueError("Center frequencies must be finite")
        if any(f < 0 for f in self.centers):
            raise ValueError("Center frequencies must not be negative")

    @property
    def count(self) -> int:
        return len(self.centers)


@dataclass(frozen=True)
class LinearBands:
    """B equal-width buckets over bins 0..N/2."""
    count: int = 32

    def __post_init__(self):
        if self.count < 1:
            raise ValueError("Band count must be at least 1")


BandDefinition = Union[FrequencyBands, LinearBands]


def bin_magnitudes(spectrum: Spectrum) -> np.ndarray:
    """
    Magnitude sqrt(re^2 + im^2) of bins 0..N/2.

    Bins above N/2 are mirror images for real input and are discarded.
    """
    nb = spectrum.num_bins
    return np.hypot(spectrum.real[:nb], spectrum.imag[:nb])


def band_bin_indices(
    definition: FrequencyBands,
    block_size: int,
    sample_rate: float,
) -> np.ndarray:
    """
    Nearest bin per center frequency.

    index = min(round(f * N / sample_rate), N/2)
    """
    nyquist_bin = block_size // 2
    return np.array(
        [min(int(round(f * block_size / sample_rate)), nyquist_bin) for f in definition.centers],
        dtype=np.int64,
    )


def band_ranges(definition: LinearBands, block_size: int) -> list[tuple[int, int]]:
    """
    Half-open bin ranges [start, stop) for linear buckets.

    Technical details:
    - N/2 + 1 bins are partitioned into `count` buckets
    - Bucket size = (N/2 + 1) // count, last bucket takes the remainder
    - If count exceeds the bin count, bucket i is the single bin min(i, N/2)
    """
    num_bins = block_size // 2 + 1
    count = definition.count

    if count > num_bins:
        return [(min(i, num_bins - 1), min(i, num_bins - 1) + 1) for i in range(count)]

    size = num_bins // count
    ranges = [(i * size, (i + 1) * size) for i in range(count)]
    last_start = ranges[-1][0]
    ranges[-1] = (last_start, num_bins)
    return ranges


def band_labels(definition: BandDefinition, block_size: int, sample_rate: float) -> list[str]:
    """Human-readable band labels for the renderer."""
    if isinstance(definition, FrequencyBands):
        return [format_frequency(f) for f in definition.centers]
    resolution = sample_rate / block_size
    return [
        format_frequency((start + stop - 1) / 2 * resolution)
        for start, stop in band_ranges(definition, block_size)
    ]


class BandMapper:
    """
    Band mapping with the bin layout precomputed for one configuration.

    Usage:
        mapper = BandMapper(FrequencyBands(), block_size=1024, sample_rate=44100)
        values = mapper.map(spectrum)
    """

    def __init__(
        self,
        definition: BandDefinition,
        block_size: int,
        sample_rate: float,
        scaling_divisor: float = 1.0,
    ):
        if scaling_divisor <= 0:
            raise ValueError("Scaling divisor must be positive")
        if sample_rate <= 0:
            raise ValueError("Sample rate must be positive")

        self.definition = definition
        self.block_size = block_size
        self.sample_rate = sample_rate
        self.scaling_divisor = float(scaling_divisor)

        if isinstance(definition, FrequencyBands):
            self._indices = band_bin_indices(definition, block_size, sample_rate)
            self._ranges = None
        elif isinstance(definition, LinearBands):
            self._indices = None
            self._ranges = band_ranges(definition, block_size)
        else:
            raise TypeError(f"Unknown band definition: {definition!r}")

    @property
    def num_bands(self) -> int:
        return self.definition.count

    def map(self, spectrum: Spectrum) -> np.ndarray:
        """
        Band magnitudes of one spectrum.

        Returns:
            Read-only float64 array of length num_bands
        """
        if spectrum.size != self.block_size:
            raise ValueError(
                f"Spectrum size {spectrum.size} does not match block size {self.block_size}"
            )
        magnitudes = bin_magnitudes(spectrum)

        if self._indices is not None:
            values = magnitudes[self._indices]
        else:
            values = np.array([magnitudes[start:stop].mean() for start, stop in self._ranges])

        values = values / self.scaling_divisor
        values.setflags(write=False)
        return values


def map_to_bands(
    spectrum: Spectrum,
    definition: BandDefinition,
    sample_rate: float,
    scaling_divisor: float = 1.0,
) -> np.ndarray:
    """
    Map a spectrum to band magnitudes in one call.

    Args:
        spectrum: Complex spectrum of length N
        definition: FrequencyBands or LinearBands
        sample_rate: Sample rate in Hz
        scaling_divisor: Values are divided by this constant

    Returns:
        Read-only array of band magnitudes (unclamped)
    """
    mapper = BandMapper(definition, spectrum.size, sample_rate, scaling_divisor)
    return mapper.map(spectrum)
