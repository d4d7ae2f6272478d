#!/usr/bin/env python3
"""
Spectrum Visualizer - Einstiegspunkt

Spielt eine Audiodatei ab und zeigt die Band-Magnituden in Echtzeit.

Verwendung:
    python main.py [audio_file] [--block-size N] [--bands N | --centers f1,f2,...]
                   [--window none|hann] [--scaling-divisor X]
                   [--headless] [--no-audio] [--verbose]

Beispiel:
    python main.py song.wav --window hann
    python main.py song.wav --headless --no-audio --bands 16
"""

import argparse
import logging
import sys
from pathlib import Path


logger = logging.getLogger("spectrum_visualizer")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Real-time spectrum visualizer for audio files",
    )
    parser.add_argument("audio_file", nargs="?", help="Audio file (WAV, FLAC, OGG, AIFF, MP3)")
    parser.add_argument("--block-size", type=int, default=1024, help="Samples per block (power of two)")
    bands = parser.add_mutually_exclusive_group()
    bands.add_argument("--bands", type=int, help="Number of equal-width linear bands")
    bands.add_argument("--centers", help="Comma-separated band center frequencies in Hz")
    parser.add_argument("--window", choices=["none", "hann"], default="hann", help="Window function")
    parser.add_argument("--scaling-divisor", type=float, help="Band magnitude divisor (default: block size / 2)")
    parser.add_argument("--headless", action="store_true", help="Run without GUI and log snapshots")
    parser.add_argument("--no-audio", action="store_true", help="Do not open an audio device")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    return parser


def build_config(args):
    """PipelineConfig from command-line arguments."""
    from spectrum_visualizer.core import FrequencyBands, LinearBands, PipelineConfig

    if args.bands is not None:
        bands = LinearBands(args.bands)
    elif args.centers:
        bands = FrequencyBands(tuple(float(f) for f in args.centers.split(",")))
    else:
        bands = FrequencyBands()

    return PipelineConfig(
        block_size=args.block_size,
        bands=bands,
        window=args.window,
        scaling_divisor=args.scaling_divisor,
    )


def make_sink_factory(no_audio: bool):
    from spectrum_visualizer.core import NullSink, SoundDeviceSink

    if no_audio:
        return lambda: NullSink(realtime=True)
    return SoundDeviceSink


def run_headless(args, config) -> int:
    """Pipeline ohne GUI; pollt den Channel im eigenen Takt."""
    from spectrum_visualizer.core import SpectrumPipeline, SpectrumError, open_source
    from spectrum_visualizer.core.bands import band_labels

    if not args.audio_file:
        logger.error("Headless mode requires an audio file")
        return 2

    try:
        source = open_source(args.audio_file)
    except SpectrumError as e:
        logger.error("%s", e)
        return 1

    labels = band_labels(config.bands, config.block_size, source.sample_rate)
    pipeline = SpectrumPipeline(sink_factory=make_sink_factory(args.no_audio))

    try:
        pipeline.start(source, config)
    except SpectrumError as e:
        logger.error("%s", e)
        return 1

    last_sequence = 0
    try:
        while not pipeline.wait(timeout=0.1):
            snapshot = pipeline.channel.latest()
            if snapshot is None or snapshot.sequence == last_sequence:
                continue
            last_sequence = snapshot.sequence
            logger.info(
                "%6.2f s  peak %-9s %.3f",
                snapshot.offset / source.sample_rate,
                labels[snapshot.peak_band],
                snapshot.magnitudes[snapshot.peak_band],
            )
    except KeyboardInterrupt:
        pipeline.stop()
        pipeline.wait()

    if pipeline.error is not None:
        logger.error("Playback failed: %s", pipeline.error)
        return 1
    return 0


def run_gui(args, config) -> int:
    """Start the Qt application."""
    from PySide6.QtWidgets import QApplication
    from PySide6.QtCore import Qt

    from spectrum_visualizer import __version__
    from spectrum_visualizer.gui import MainWindow

    QApplication.setHighDpiScaleFactorRoundingPolicy(
        Qt.HighDpiScaleFactorRoundingPolicy.PassThrough
    )

    app = QApplication(sys.argv[:1])
    app.setApplicationName("Spectrum Visualizer")
    app.setApplicationVersion(__version__)

    window = MainWindow(sink_factory=make_sink_factory(args.no_audio), config=config)
    window.show()

    if args.audio_file:
        filepath = Path(args.audio_file)
        if filepath.exists():
            window.load_file(str(filepath))

    return app.exec()


def main(argv=None) -> int:
    """Start the Spectrum Visualizer."""
    if sys.version_info < (3, 10):
        print("Error: Python 3.10 or higher is required.")
        print(f"Current version: {sys.version}")
        return 1

    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)-7s %(name)s: %(message)s",
    )

    from spectrum_visualizer.core import SpectrumError

    try:
        config = build_config(args)
    except (SpectrumError, ValueError) as e:
        logger.error("Invalid configuration: %s", e)
        return 2

    if args.headless:
        return run_headless(args, config)
    return run_gui(args, config)


if __name__ == "__main__":
    sys.exit(main())
