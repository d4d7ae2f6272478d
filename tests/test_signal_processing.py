"""
Tests für Signalverarbeitungs-Modul.
"""

import pytest
import numpy as np

from spectrum_visualizer.core.signal_processing import (
    downmix_to_mono,
    to_float32_block,
)


class TestDownmix:
    """Tests für Downmix-Funktionen."""

    def test_downmix_average(self):
        data = np.column_stack([np.ones(100), np.zeros(100)])
        mono = downmix_to_mono(data, method="average")
        np.testing.assert_allclose(mono, 0.5)

    def test_downmix_left_right(self):
        data = np.column_stack([np.ones(10), -np.ones(10)])
        np.testing.assert_array_equal(downmix_to_mono(data, "left"), 1.0)
        np.testing.assert_array_equal(downmix_to_mono(data, "right"), -1.0)

    def test_downmix_multichannel_average(self):
        data = np.column_stack([np.ones(10), np.ones(10), np.full(10, 4.0)])
        np.testing.assert_allclose(downmix_to_mono(data), 2.0)

    def test_mono_passthrough(self):
        """Mono-Daten werden als Kopie zurückgegeben."""
        data = np.random.randn(100)
        result = downmix_to_mono(data)
        np.testing.assert_array_equal(result, data)
        assert result is not data

    def test_unknown_method(self):
        with pytest.raises(ValueError):
            downmix_to_mono(np.zeros((10, 2)), method="side")

    def test_right_from_single_column(self):
        with pytest.raises(ValueError):
            downmix_to_mono(np.zeros((10, 1)), method="right")


class TestOutputBlock:
    """Tests für Ausgabeblöcke."""

    def test_float32_and_clipped(self):
        block = to_float32_block(np.array([0.5, 1.5, -2.0]))
        assert block.dtype == np.float32
        assert block.flags.c_contiguous
        np.testing.assert_allclose(block, [0.5, 1.0, -1.0])
