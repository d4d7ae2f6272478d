"""
Hauptfenster des Spectrum Visualizers

Struktur:
- Toolbar: Import, Wiedergabe-Steuerung, Dateiinfo
- Einstellungen: Blockgröße, Fenster, Bänder, Anzeigebereich
- Balkenanzeige der Band-Magnituden

Die Anzeige zieht den neuesten Snapshot per QTimer aus dem SpectrumChannel;
die Pipeline schiebt nie in den Zeichencode.
"""

from typing import Optional
from pathlib import Path
import logging
from PySide6.QtWidgets import (
    QMainWindow, QWidget, QVBoxLayout, QHBoxLayout,
    QFileDialog, QMessageBox, QLabel, QPushButton,
    QFrame, QComboBox, QDoubleSpinBox,
)
from PySide6.QtCore import Signal, Slot, QTimer

from ..core.audio_io import AudioSource, SUPPORTED_SUFFIXES, open_source
from ..core.bands import DEFAULT_BAND_CENTERS, FrequencyBands, LinearBands, band_labels
from ..core.errors import SpectrumError
from ..core.pipeline import PipelineConfig, PipelineState, SpectrumPipeline
from ..core.playback import SoundDeviceSink
from ..utils.formatting import (
    format_time, format_sample_rate, format_channels, format_block_info,
)
from .spectrum_widget import SpectrumWidget


logger = logging.getLogger(__name__)

BAND_PRESETS = {
    "10 Bänder (EQ)": FrequencyBands(DEFAULT_BAND_CENTERS),
    "16 Bänder (linear)": LinearBands(16),
    "32 Bänder (linear)": LinearBands(32),
    "64 Bänder (linear)": LinearBands(64),
}

RENDER_INTERVAL_MS = 30


class MainWindow(QMainWindow):
    """
    Hauptfenster mit Import/Play/Pause/Stop und Balkenanzeige.

    Signals:
        pipelineFinished: Emittiert (aus dem Analyse-Thread) wenn eine
            Wiedergabe endet; Argument ist der Fehler oder None
    """

    pipelineFinished = Signal(object)

    def __init__(self, sink_factory=SoundDeviceSink, config: Optional[PipelineConfig] = None):
        super().__init__()

        self._source: Optional[AudioSource] = None
        self._initial_config = config or PipelineConfig(window="hann")
        self._pipeline = SpectrumPipeline(
            sink_factory=sink_factory,
            on_finished=self.pipelineFinished.emit,
        )
        self.pipelineFinished.connect(self._on_pipeline_finished)

        self._render_timer = QTimer(self)
        self._render_timer.setInterval(RENDER_INTERVAL_MS)
        self._render_timer.timeout.connect(self._render)

        self.setAcceptDrops(True)
        self._init_ui()
        self._apply_theme()
        self._apply_config(self._initial_config)
        self._update_buttons()

    def _init_ui(self):
        """UI aufbauen."""
        self.setWindowTitle("Spectrum Visualizer")
        self.setMinimumSize(800, 600)

        central = QWidget()
        self.setCentralWidget(central)
        layout = QVBoxLayout(central)
        layout.setContentsMargins(8, 8, 8, 8)

        # Toolbar oben
        toolbar = QFrame()
        toolbar_layout = QHBoxLayout(toolbar)
        toolbar_layout.setContentsMargins(0, 0, 0, 8)

        self.btn_open = QPushButton("Import")
        self.btn_open.clicked.connect(self._open_file)
        toolbar_layout.addWidget(self.btn_open)

        self.btn_play = QPushButton("▶ Abspielen")
        self.btn_play.clicked.connect(self._play)
        toolbar_layout.addWidget(self.btn_play)

        self.btn_pause = QPushButton("❚❚ Pause")
        self.btn_pause.clicked.connect(self._pause)
        toolbar_layout.addWidget(self.btn_pause)

        self.btn_stop = QPushButton("■ Stop")
        self.btn_stop.clicked.connect(self._stop)
        toolbar_layout.addWidget(self.btn_stop)

        toolbar_layout.addStretch()

        self.file_label = QLabel("Keine Datei geladen")
        self.file_label.setStyleSheet("color: #888;")
        toolbar_layout.addWidget(self.file_label)

        layout.addWidget(toolbar)

        # Einstellungen
        settings_frame = QFrame()
        settings_frame.setFrameStyle(QFrame.Shape.StyledPanel)
        settings_layout = QHBoxLayout(settings_frame)
        settings_layout.setContentsMargins(8, 4, 8, 4)

        settings_layout.addWidget(QLabel("Block:"))
        self.block_combo = QComboBox()
        self.block_combo.addItems(["256", "512", "1024", "2048", "4096", "8192"])
        settings_layout.addWidget(self.block_combo)

        settings_layout.addWidget(QLabel("Fenster:"))
        self.window_combo = QComboBox()
        self.window_combo.addItems(["hann", "none"])
        settings_layout.addWidget(self.window_combo)

        settings_layout.addWidget(QLabel("Bänder:"))
        self.bands_combo = QComboBox()
        self.bands_combo.addItems(list(BAND_PRESETS))
        settings_layout.addWidget(self.bands_combo)

        settings_layout.addStretch()

        settings_layout.addWidget(QLabel("Anzeige max:"))
        self.display_spin = QDoubleSpinBox()
        self.display_spin.setRange(0.01, 100.0)
        self.display_spin.setSingleStep(0.05)
        self.display_spin.setValue(0.5)
        self.display_spin.valueChanged.connect(self._on_display_max_changed)
        settings_layout.addWidget(self.display_spin)

        layout.addWidget(settings_frame)

        # Balkenanzeige
        self.spectrum_widget = SpectrumWidget(display_max=self.display_spin.value())
        layout.addWidget(self.spectrum_widget, stretch=1)

        # Statuszeile
        self.status_label = QLabel("")
        self.status_label.setStyleSheet("padding: 4px 8px; font-family: monospace;")
        layout.addWidget(self.status_label)

    def _apply_theme(self):
        """Dark theme."""
        self.setStyleSheet("""
            QMainWindow, QWidget {
                background-color: #1e1e2e;
                color: #cdd6f4;
                font-family: 'SF Pro Display', 'Segoe UI', sans-serif;
            }
            QPushButton {
                background-color: #313244;
                color: #cdd6f4;
                border: 1px solid #45475a;
                padding: 8px 16px;
                border-radius: 6px;
            }
            QPushButton:hover {
                background-color: #45475a;
                border-color: #89b4fa;
            }
            QPushButton:disabled {
                background-color: #181825;
                color: #585b70;
            }
            QComboBox, QDoubleSpinBox {
                background-color: #313244;
                color: #cdd6f4;
                border: 1px solid #45475a;
                padding: 6px 12px;
                border-radius: 4px;
            }
        """)

    def _apply_config(self, config: PipelineConfig):
        """Einstellungs-Widgets aus einer Konfiguration setzen."""
        if self.block_combo.findText(str(config.block_size)) < 0:
            self.block_combo.addItem(str(config.block_size))
        self.block_combo.setCurrentText(str(config.block_size))
        self.window_combo.setCurrentText(config.window)
        for name, preset in BAND_PRESETS.items():
            if preset == config.bands:
                self.bands_combo.setCurrentText(name)
                break
        else:
            self.bands_combo.addItem("Benutzerdefiniert")
            self.bands_combo.setCurrentText("Benutzerdefiniert")

    def _current_config(self) -> PipelineConfig:
        """Konfiguration aus den Einstellungs-Widgets."""
        bands = BAND_PRESETS.get(self.bands_combo.currentText(), self._initial_config.bands)
        return PipelineConfig(
            block_size=int(self.block_combo.currentText()),
            bands=bands,
            window=self.window_combo.currentText(),
            scaling_divisor=self._initial_config.scaling_divisor,
        )

    def _update_buttons(self):
        state = self._pipeline.state
        running = state == PipelineState.RUNNING
        self.btn_play.setEnabled(self._source is not None and not running)
        self.btn_pause.setEnabled(running)
        self.btn_stop.setEnabled(running or state == PipelineState.PAUSED)
        for widget in (self.block_combo, self.window_combo, self.bands_combo):
            widget.setEnabled(not running and state != PipelineState.PAUSED)

    # ── Datei ────────────────────────────────────────────────────

    def _open_file(self):
        """Datei öffnen Dialog."""
        patterns = " ".join(f"*{suffix}" for suffix in SUPPORTED_SUFFIXES)
        filename, _ = QFileDialog.getOpenFileName(
            self, "Audiodatei öffnen", "",
            f"Audio ({patterns});;Alle Dateien (*)"
        )
        if filename:
            self.load_file(filename)

    def load_file(self, filepath: str):
        """Audiodatei laden (stoppt laufende Wiedergabe)."""
        self._stop()
        self._pipeline.wait()

        try:
            self._source = open_source(filepath)
        except (SpectrumError, ImportError) as e:
            logger.warning("Could not load %s: %s", filepath, e)
            QMessageBox.critical(self, "Fehler", f"Konnte Datei nicht laden:\n{e}")
            return

        self.file_label.setText(
            f"{Path(filepath).name} | "
            f"{format_sample_rate(self._source.sample_rate)} | "
            f"{format_channels(self._source.channels)} | "
            f"{format_time(self._source.duration_seconds)}"
        )
        self.status_label.setText("")
        self.spectrum_widget.clear()
        self._update_buttons()

    # ── Wiedergabe ───────────────────────────────────────────────

    def _play(self):
        """Wiedergabe starten oder fortsetzen."""
        if self._source is None:
            QMessageBox.information(self, "Hinweis", "Bitte zuerst eine Audiodatei wählen.")
            return

        try:
            if self._pipeline.state == PipelineState.PAUSED:
                self._pipeline.resume()
            else:
                config = self._current_config()
                self.spectrum_widget.set_labels(
                    band_labels(config.bands, config.block_size, self._source.sample_rate)
                )
                self._pipeline.start(self._source, config)
        except (SpectrumError, ValueError, RuntimeError) as e:
            QMessageBox.warning(self, "Wiedergabe-Fehler", str(e))
            self._update_buttons()
            return

        self._render_timer.start()
        self._update_buttons()

    def _pause(self):
        """Wiedergabe pausieren (Position bleibt erhalten)."""
        self._pipeline.pause()
        self._pipeline.wait()
        self._render_timer.stop()
        self._render()
        self._update_buttons()

    def _stop(self):
        """Wiedergabe stoppen."""
        self._pipeline.stop()
        self._render_timer.stop()
        self.spectrum_widget.clear()
        self._update_buttons()

    def _render(self):
        """Neuesten Snapshot zeichnen (Pull, eigener Takt)."""
        self.spectrum_widget.show_snapshot(self._pipeline.channel.latest())
        config = self._pipeline.config
        if self._source is not None and config is not None:
            self.status_label.setText(
                f"{format_time(self._pipeline.position_seconds)} / "
                f"{format_time(self._source.duration_seconds)}"
                f"  |  {format_block_info(config.block_size, self._source.sample_rate)}"
            )

    @Slot(object)
    def _on_pipeline_finished(self, error):
        """Wiedergabe beendet (End-of-Stream, Stop oder Gerätefehler)."""
        self._render_timer.stop()
        self._update_buttons()
        if error is not None:
            self.spectrum_widget.clear()
            QMessageBox.critical(self, "Audiogerät", f"Wiedergabe abgebrochen:\n{error}")

    def _on_display_max_changed(self, value: float):
        self.spectrum_widget.set_display_max(value)

    # ── Events ───────────────────────────────────────────────────

    def dragEnterEvent(self, event):
        """Drag & Drop."""
        if event.mimeData().hasUrls():
            for url in event.mimeData().urls():
                if url.toLocalFile().lower().endswith(SUPPORTED_SUFFIXES):
                    event.acceptProposedAction()
                    return

    def dropEvent(self, event):
        """Datei gedroppt."""
        for url in event.mimeData().urls():
            filepath = url.toLocalFile()
            if filepath.lower().endswith(SUPPORTED_SUFFIXES):
                self.load_file(filepath)
                break

    def closeEvent(self, event):
        """Beim Schließen."""
        self._render_timer.stop()
        self._pipeline.stop()
        self._pipeline.wait()
        event.accept()
