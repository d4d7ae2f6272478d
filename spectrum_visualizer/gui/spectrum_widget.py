"""
Spektrum-Widget

Balkenanzeige der Band-Magnituden.

Der Renderer kennt nur die Fähigkeit "neuesten Snapshot annehmen und
zeichnen". Die Analyse-Pipeline referenziert keine Zeichenprimitive.
Clamping auf den Anzeigebereich passiert ausschließlich hier.
"""

from typing import Optional
import numpy as np
from PySide6.QtWidgets import QWidget, QVBoxLayout
import pyqtgraph as pg

from ..core.channel import BandSnapshot


class SpectrumWidget(QWidget):
    """
    Widget zur Darstellung von Band-Magnituden als Balken.

    Features:
    - Ein Balken pro Band, Beschriftung über set_labels()
    - Werte werden auf [0, display_max] begrenzt
    - Wiederholtes Zeichnen desselben Snapshots wird übersprungen
    """

    def __init__(self, parent: Optional[QWidget] = None, display_max: float = 1.0):
        super().__init__(parent)

        self._display_max = display_max
        self._last_sequence: Optional[int] = None
        self._num_bands = 0

        self._init_ui()

    def _init_ui(self):
        """Initialize UI components."""
        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)

        self.plot = pg.PlotWidget()
        self.plot.setBackground('#1e1e2e')
        self.plot.setMouseEnabled(x=False, y=False)
        self.plot.getPlotItem().setMenuEnabled(False)
        self.plot.hideButtons()
        self.plot.setYRange(0, self._display_max, padding=0)
        self.plot.setLabel('left', 'Magnitude')
        self.plot.getAxis('left').setWidth(60)

        self.bars = pg.BarGraphItem(
            x=np.zeros(1), height=np.zeros(1), width=0.8,
            brush=pg.mkBrush('#89b4fa'), pen=pg.mkPen(None),
        )
        self.plot.addItem(self.bars)

        layout.addWidget(self.plot)

    @property
    def display_max(self) -> float:
        return self._display_max

    def set_display_max(self, value: float):
        """Obere Grenze der Y-Achse."""
        self._display_max = max(value, 1e-9)
        self.plot.setYRange(0, self._display_max, padding=0)

    def set_labels(self, labels: list[str]):
        """Band-Beschriftungen setzen (bestimmt auch die Balkenanzahl)."""
        self._num_bands = len(labels)
        ticks = [(i, label) for i, label in enumerate(labels)]
        self.plot.getAxis('bottom').setTicks([ticks])
        self.plot.setXRange(-0.5, max(self._num_bands, 1) - 0.5, padding=0.02)
        self._draw(np.zeros(self._num_bands))

    def show_snapshot(self, snapshot: Optional[BandSnapshot]):
        """Neuesten Snapshot zeichnen; None oder unveränderter Snapshot wird ignoriert."""
        if snapshot is None or snapshot.sequence == self._last_sequence:
            return
        self._last_sequence = snapshot.sequence
        self._draw(snapshot.magnitudes)

    def clear(self):
        """Alle Balken auf 0 setzen."""
        self._last_sequence = None
        self._draw(np.zeros(self._num_bands))

    def _draw(self, magnitudes: np.ndarray):
        if len(magnitudes) == 0:
            magnitudes = np.zeros(1)
        heights = np.clip(magnitudes, 0.0, self._display_max)
        self.bars.setOpts(x=np.arange(len(heights)), height=heights, width=0.8)
