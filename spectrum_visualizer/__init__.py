"""
Spectrum Visualizer

Real-time spectral analysis of audio playback for bar visualizers.
"""

__version__ = "1.0.0"
