"""
Utility module for Spectrum Visualizer.

Contains helper functions used by both Core and GUI.
"""

from .formatting import (
    format_time,
    format_frequency,
    format_sample_rate,
    format_channels,
    format_block_info,
)

__all__ = [
    "format_time",
    "format_frequency",
    "format_sample_rate",
    "format_channels",
    "format_block_info",
]
