"""
Tests für Frame Assembler.
"""

import pytest
import numpy as np

from spectrum_visualizer.core.errors import InvalidBlockSizeError
from spectrum_visualizer.core.frames import FrameAssembler, get_window


class TestBlocks:
    """Tests für Blockbildung."""

    def test_exact_multiple(self):
        """Zwei volle Blöcke, danach End-of-Stream."""
        samples = np.arange(2048, dtype=np.float64)
        assembler = FrameAssembler(samples, block_size=1024)

        first = assembler.next_block()
        second = assembler.next_block()

        assert first.offset == 0
        assert second.offset == 1024
        np.testing.assert_array_equal(second.data, samples[1024:])
        assert assembler.next_block() is None
        assert assembler.next_block() is None

    def test_partial_block_padded(self):
        """Restblock wird mit Nullen aufgefüllt, End-of-Stream folgt beim nächsten Aufruf."""
        samples = np.ones(1500)
        assembler = FrameAssembler(samples, block_size=1024)

        assert not assembler.next_block().is_partial

        last = assembler.next_block()
        assert last is not None
        assert last.is_partial
        assert len(last.data) == 1024
        assert len(last.raw) == 476
        np.testing.assert_array_equal(last.data[:476], 1.0)
        np.testing.assert_array_equal(last.data[476:], 0.0)

        assert assembler.next_block() is None

    def test_short_source(self):
        """Quelle kürzer als ein Block."""
        assembler = FrameAssembler(np.ones(10), block_size=64)
        block = assembler.next_block()
        assert len(block.data) == 64
        assert assembler.next_block() is None

    def test_empty_source(self):
        assembler = FrameAssembler(np.zeros(0), block_size=64)
        assert assembler.next_block() is None

    def test_iteration(self):
        assembler = FrameAssembler(np.zeros(1000), block_size=256)
        blocks = list(assembler)
        assert len(blocks) == 4
        assert [b.offset for b in blocks] == [0, 256, 512, 768]

    def test_raw_is_copy(self):
        """Blöcke teilen keinen Speicher mit der Quelle."""
        samples = np.zeros(128)
        block = FrameAssembler(samples, block_size=64).next_block()
        block.raw[0] = 5.0
        block.data[0] = 5.0
        assert samples[0] == 0.0


class TestCursor:
    """Tests für Lesezeiger."""

    def test_position_and_remaining(self):
        assembler = FrameAssembler(np.zeros(1000), block_size=256)
        assembler.next_block()
        assert assembler.position == 256
        assert assembler.remaining == 744

    def test_seek(self):
        samples = np.arange(1024, dtype=np.float64)
        assembler = FrameAssembler(samples, block_size=256)

        assembler.seek(512)
        assert assembler.next_block().offset == 512

        assembler.seek(5000)
        assert assembler.position == 1024
        assert assembler.next_block() is None

    def test_reset_after_end(self):
        """Nach reset() liefert der Assembler wieder Blöcke."""
        assembler = FrameAssembler(np.zeros(100), block_size=64)
        list(assembler)
        assembler.reset()
        assert assembler.next_block().offset == 0


class TestWindowing:
    """Tests für Fensterfunktion."""

    def test_hann_applied(self):
        """Analysedaten sind gefenstert, Rohdaten nicht."""
        samples = np.ones(256)
        block = FrameAssembler(samples, block_size=256, window="hann").next_block()

        np.testing.assert_allclose(block.data, get_window("hann", 256))
        np.testing.assert_array_equal(block.raw, samples)
        assert block.data[0] == pytest.approx(0.0)

    def test_window_cached(self):
        """Koeffizienten werden pro Größe nur einmal berechnet."""
        assert get_window("hann", 1024) is get_window("hann", 1024)

    def test_window_read_only(self):
        with pytest.raises(ValueError):
            get_window("hann", 32)[0] = 1.0

    def test_no_window(self):
        assert get_window("none", 1024) is None

    def test_unknown_window(self):
        with pytest.raises(ValueError):
            FrameAssembler(np.zeros(64), block_size=64, window="blackman")


class TestValidation:
    """Tests für Parameterprüfung."""

    def test_invalid_block_size(self):
        with pytest.raises(InvalidBlockSizeError):
            FrameAssembler(np.zeros(1000), block_size=1000)

    def test_stereo_rejected(self):
        with pytest.raises(ValueError):
            FrameAssembler(np.zeros((100, 2)), block_size=64)
