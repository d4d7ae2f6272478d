"""
Tests für Spectrum Channel.
"""

import threading

import pytest
import numpy as np

from spectrum_visualizer.core.channel import BandSnapshot, SpectrumChannel


class TestSpectrumChannel:
    """Tests für Latest-wins-Übergabe."""

    def test_empty(self):
        channel = SpectrumChannel()
        assert channel.latest() is None
        assert channel.sequence == 0

    def test_idempotent_read(self):
        """Zwei Lesezugriffe ohne publish liefern denselben Snapshot."""
        channel = SpectrumChannel()
        channel.publish(np.array([1.0, 2.0]))

        first = channel.latest()
        second = channel.latest()

        assert first is second
        np.testing.assert_array_equal(first.magnitudes, second.magnitudes)

    def test_latest_wins(self):
        """Nach S1, S2 liefert latest() S2."""
        channel = SpectrumChannel()
        channel.publish(np.array([1.0, 1.0, 1.0]), offset=0)
        channel.publish(np.array([2.0, 2.0, 2.0]), offset=1024)

        snapshot = channel.latest()
        np.testing.assert_array_equal(snapshot.magnitudes, [2.0, 2.0, 2.0])
        assert snapshot.sequence == 2
        assert snapshot.offset == 1024

    def test_publish_copies(self):
        """Späteres Ändern des Eingabepuffers ändert den Snapshot nicht."""
        channel = SpectrumChannel()
        buffer = np.array([1.0, 2.0])
        channel.publish(buffer)
        buffer[:] = 9.0

        np.testing.assert_array_equal(channel.latest().magnitudes, [1.0, 2.0])

    def test_snapshot_immutable(self):
        channel = SpectrumChannel()
        snapshot = channel.publish(np.array([1.0]))
        with pytest.raises(ValueError):
            snapshot.magnitudes[0] = 2.0

    def test_clear(self):
        channel = SpectrumChannel()
        channel.publish(np.array([1.0]))
        channel.clear()
        assert channel.latest() is None
        assert channel.sequence == 0

    def test_no_torn_reads(self):
        """Ein Leser sieht nie eine Mischung zweier Snapshots."""
        channel = SpectrumChannel()
        done = threading.Event()
        torn = []

        def producer():
            for i in range(2000):
                channel.publish(np.full(64, float(i)))
            done.set()

        def consumer():
            while not done.is_set():
                snapshot = channel.latest()
                if snapshot is not None and not np.all(snapshot.magnitudes == snapshot.magnitudes[0]):
                    torn.append(snapshot.sequence)

        threads = [threading.Thread(target=producer), threading.Thread(target=consumer)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=10)

        assert torn == []
        assert channel.sequence == 2000


class TestBandSnapshot:
    """Tests für Snapshot-Datenklasse."""

    def test_peak_band(self):
        snapshot = BandSnapshot(magnitudes=np.array([0.1, 0.7, 0.3]), sequence=1)
        assert snapshot.peak_band == 1
        assert snapshot.num_bands == 3
