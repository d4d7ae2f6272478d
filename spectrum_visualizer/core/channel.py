"""
Spectrum Channel

Single-slot, latest-wins hand-off of band magnitudes from the analysis
thread to the render thread.

- publish() swaps in a new immutable snapshot; an unconsumed older one is
  dropped
- latest() never waits for data and returns the same object until the
  next publish
- Snapshots are never mutated after publication, so a reader sees either
  the old or the new snapshot as a whole
"""

from dataclasses import dataclass, field
from typing import Optional
import threading
import time
import numpy as np


@dataclass(frozen=True)
class BandSnapshot:
    """
    Immutable band magnitudes of one block.

    Attributes:
        magnitudes: Read-only band values
        sequence: 1 for the first publish, increasing by one per publish
        offset: Sample offset of the block in the source
        timestamp: time.monotonic() at publication
    """
    magnitudes: np.ndarray
    sequence: int
    offset: int = 0
    timestamp: float = field(default_factory=time.monotonic)

    @property
    def num_bands(self) -> int:
        return len(self.magnitudes)

    @property
    def peak_band(self) -> int:
        """Index of the strongest band."""
        return int(np.argmax(self.magnitudes))


class SpectrumChannel:
    """Latest-wins snapshot cell shared by one producer and any consumers."""

    def __init__(self):
        self._lock = threading.Lock()
        self._snapshot: Optional[BandSnapshot] = None
        self._sequence = 0

    @property
    def sequence(self) -> int:
        """Number of publishes since creation or the last clear()."""
        with self._lock:
            return self._sequence

    def publish(self, magnitudes: np.ndarray, offset: int = 0) -> BandSnapshot:
        """
        Replace the current snapshot.

        The values are copied so the caller may reuse its buffer.
        """
        values = np.array(magnitudes, dtype=np.float64)
        values.setflags(write=False)

        with self._lock:
            self._sequence += 1
            snapshot = BandSnapshot(magnitudes=values, sequence=self._sequence, offset=offset)
            self._snapshot = snapshot
        return snapshot

    def latest(self) -> Optional[BandSnapshot]:
        """Most recent snapshot, or None if nothing was published yet."""
        with self._lock:
            return self._snapshot

    def clear(self) -> None:
        """Drop the current snapshot and reset the sequence counter."""
        with self._lock:
            self._snapshot = None
            self._sequence = 0
