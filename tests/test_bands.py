"""
Tests für Band-Mapper.
"""

import pytest
import numpy as np

from spectrum_visualizer.core.bands import (
    DEFAULT_BAND_CENTERS,
    BandMapper,
    FrequencyBands,
    LinearBands,
    band_bin_indices,
    band_labels,
    band_ranges,
    bin_magnitudes,
    map_to_bands,
)
from spectrum_visualizer.core.fft import Spectrum, compute_spectrum


def sine_block(freq: float, sr: int = 44100, n: int = 1024, amplitude: float = 1.0) -> np.ndarray:
    t = np.arange(n) / sr
    return amplitude * np.sin(2 * np.pi * freq * t)


class TestBandDefinitions:
    """Tests für Banddefinitionen."""

    def test_default_centers(self):
        bands = FrequencyBands()
        assert bands.count == 10
        assert bands.centers == tuple(float(f) for f in DEFAULT_BAND_CENTERS)

    def test_empty_centers_rejected(self):
        with pytest.raises(ValueError):
            FrequencyBands(())

    def test_negative_center_rejected(self):
        with pytest.raises(ValueError):
            FrequencyBands((-10.0, 100.0))

    @pytest.mark.parametrize("center", [float("inf"), float("nan")])
    def test_non_finite_center_rejected(self, center):
        """Unendliche oder NaN-Mittenfrequenz wird bei der Definition abgelehnt."""
        with pytest.raises(ValueError):
            FrequencyBands((100.0, center))

    def test_invalid_count(self):
        with pytest.raises(ValueError):
            LinearBands(0)

    def test_definitions_are_hashable(self):
        """Banddefinitionen sind unveränderlich."""
        assert FrequencyBands((100, 200)) == FrequencyBands((100.0, 200.0))
        assert hash(LinearBands(8)) == hash(LinearBands(8))


class TestBinMapping:
    """Tests für Frequenz-zu-Bin-Zuordnung."""

    def test_nearest_bin(self):
        """index = round(f · N / sr)."""
        indices = band_bin_indices(FrequencyBands((1000, 60)), 1024, 44100)
        assert list(indices) == [23, 1]

    def test_beyond_nyquist_clamped(self):
        """Zentren über Nyquist landen auf Bin N/2."""
        indices = band_bin_indices(FrequencyBands((30000,)), 1024, 44100)
        assert list(indices) == [512]

    def test_linear_ranges(self):
        """9 Bins in 4 Buckets: letzter Bucket nimmt den Rest."""
        ranges = band_ranges(LinearBands(4), 16)
        assert ranges == [(0, 2), (2, 4), (4, 6), (6, 9)]

    def test_linear_ranges_cover_all_bins(self):
        ranges = band_ranges(LinearBands(10), 1024)
        assert ranges[0][0] == 0
        assert ranges[-1][1] == 513
        for (_, stop), (start, _) in zip(ranges[:-1], ranges[1:]):
            assert stop == start

    def test_degenerate_linear_ranges(self):
        """Mehr Bänder als Bins: Einzel-Bin-Buckets, begrenzt auf N/2."""
        ranges = band_ranges(LinearBands(12), 16)
        assert len(ranges) == 12
        assert ranges[0] == (0, 1)
        assert ranges[8] == (8, 9)
        assert ranges[11] == (8, 9)


class TestMapToBands:
    """Tests für Band-Magnituden."""

    def test_zero_input(self):
        """Nullsignal ergibt Null-Bänder."""
        spectrum = compute_spectrum(np.zeros(1024))
        values = map_to_bands(spectrum, FrequencyBands(), 44100)
        np.testing.assert_array_equal(values, np.zeros(10))

        values = map_to_bands(spectrum, LinearBands(16), 44100)
        np.testing.assert_array_equal(values, np.zeros(16))

    def test_bin_magnitudes_length(self):
        spectrum = compute_spectrum(np.random.randn(256))
        assert len(bin_magnitudes(spectrum)) == 129

    @pytest.mark.parametrize("k", [1, 40, 100, 300, 511])
    def test_sine_peak_linear(self, k):
        """Sinus auf Bin k erzeugt das Maximum im Bucket, der k enthält."""
        sr, n = 44100, 1024
        spectrum = compute_spectrum(sine_block(k * sr / n, sr, n))
        definition = LinearBands(16)

        values = map_to_bands(spectrum, definition, sr)
        expected = next(i for i, (a, b) in enumerate(band_ranges(definition, n)) if a <= k < b)

        assert np.argmax(values) == expected
        others = np.delete(values, expected)
        assert np.all(values[expected] > others)

    def test_sine_peak_frequency_bands(self):
        """1000 Hz Sinus: Band 4 der Standard-Zentren ist maximal."""
        spectrum = compute_spectrum(sine_block(1000))
        values = map_to_bands(spectrum, FrequencyBands(), 44100)

        assert np.argmax(values) == 4
        assert np.all(values[4] > np.delete(values, 4))

    def test_scaling_divisor(self):
        """Full-Scale-Sinus auf einem Bin ergibt ~1.0 bei Divisor N/2."""
        sr, n = 44100, 1024
        spectrum = compute_spectrum(sine_block(100 * sr / n, sr, n))
        definition = FrequencyBands((100 * sr / n,))

        raw = map_to_bands(spectrum, definition, sr)
        scaled = map_to_bands(spectrum, definition, sr, scaling_divisor=n / 2)

        assert raw[0] == pytest.approx(n / 2)
        assert scaled[0] == pytest.approx(1.0)

    def test_values_not_clamped(self):
        """Werte über 1 werden nicht begrenzt."""
        spectrum = compute_spectrum(np.full(64, 10.0))
        values = map_to_bands(spectrum, FrequencyBands((0,)), 44100, scaling_divisor=1.0)
        assert values[0] == pytest.approx(640.0)

    def test_linear_mean(self):
        """Linearer Bucket ist der Mittelwert seiner Bins."""
        n = 16
        spectrum = compute_spectrum(np.random.default_rng(1).standard_normal(n))
        magnitudes = bin_magnitudes(spectrum)

        values = map_to_bands(spectrum, LinearBands(4), 44100)
        assert values[0] == pytest.approx(magnitudes[0:2].mean())
        assert values[3] == pytest.approx(magnitudes[6:9].mean())

    def test_result_read_only(self):
        spectrum = compute_spectrum(np.ones(64))
        values = map_to_bands(spectrum, LinearBands(4), 44100)
        with pytest.raises(ValueError):
            values[0] = 1.0

    def test_invalid_divisor(self):
        spectrum = compute_spectrum(np.ones(64))
        with pytest.raises(ValueError):
            map_to_bands(spectrum, LinearBands(4), 44100, scaling_divisor=0)

    def test_size_mismatch(self):
        mapper = BandMapper(LinearBands(4), 64, 44100)
        with pytest.raises(ValueError):
            mapper.map(Spectrum(real=np.zeros(128), imag=np.zeros(128)))

    def test_unknown_definition(self):
        with pytest.raises(TypeError):
            BandMapper("bass", 64, 44100)


class TestBandLabels:
    """Tests für Bandbeschriftungen."""

    def test_frequency_labels(self):
        labels = band_labels(FrequencyBands((60, 1000)), 1024, 44100)
        assert labels == ["60 Hz", "1.0 kHz"]

    def test_linear_labels(self):
        labels = band_labels(LinearBands(4), 1024, 44100)
        assert len(labels) == 4
        assert labels[0].endswith("Hz")
