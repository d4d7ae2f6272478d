"""
GUI module for Spectrum Visualizer.

Uses PySide6 and pyqtgraph for the bar display.
Strict separation from DSP logic - this module only contains presentation.
"""

from .main_window import MainWindow
from .spectrum_widget import SpectrumWidget

__all__ = ["MainWindow", "SpectrumWidget"]
