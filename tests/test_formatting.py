"""
Tests für Formatierungsfunktionen.
"""

from spectrum_visualizer.utils.formatting import (
    format_block_info,
    format_channels,
    format_frequency,
    format_sample_rate,
    format_time,
)


class TestFormatting:
    """Tests für Anzeigeformate."""

    def test_format_time(self):
        assert format_time(83.5) == "1:23"
        assert format_time(83.456, show_ms=True) == "1:23.456"
        assert format_time(-5) == "-0:05"

    def test_format_frequency(self):
        assert format_frequency(250) == "250 Hz"
        assert format_frequency(1500) == "1.5 kHz"
        assert format_frequency(12000) == "12 kHz"

    def test_format_sample_rate(self):
        assert format_sample_rate(48000) == "48 kHz"
        assert format_sample_rate(44100) == "44.1 kHz"

    def test_format_channels(self):
        assert format_channels(1) == "Mono"
        assert format_channels(2) == "Stereo"
        assert format_channels(6) == "6 Kanäle"

    def test_format_block_info(self):
        assert format_block_info(1024, 44100) == "1024 Samples | 43.1 Hz/Bin | 23.2 ms"
