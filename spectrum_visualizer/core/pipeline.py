"""
Pipeline Driver

Runs FrameAssembler -> FFTEngine -> BandMapper -> SpectrumChannel once per
block on a background thread and forwards the raw block to a playback sink.

State machine:
    IDLE -> RUNNING -> STOPPED        (End-of-Stream, stop() or failure)
            RUNNING -> PAUSED -> RUNNING (resume() keeps the read offset)
    STOPPED/PAUSED -> RUNNING via start() (restarts from offset 0)

Technical details:
- stop()/pause() are observed at block boundaries, never mid-transform
- The worker blocks only inside sink.write()
- A failing tick stores the exception in `error`, closes the sink and
  ends in STOPPED; nothing is retried
- A sink that fails to close counts as a failing tick
- Only complete snapshots are published to the channel
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional
import logging
import threading
import numpy as np

from .audio_io import AudioSource
from .bands import BandDefinition, BandMapper, FrequencyBands, LinearBands
from .channel import SpectrumChannel
from .errors import InvalidBlockSizeError
from .fft import FFTEngine, Spectrum, is_power_of_two
from .frames import WINDOW_TYPES, FrameAssembler, WindowType
from .playback import PlaybackSink, SoundDeviceSink


logger = logging.getLogger(__name__)


class PipelineState(Enum):
    """Lifecycle of a play session."""
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    STOPPED = "stopped"


@dataclass
class PipelineConfig:
    """
    Configuration of the analysis pipeline.

    All parameters are explicit; scaling_divisor=None means block_size / 2.

    Attributes:
        block_size: Samples per block (power of two)
        bands: FrequencyBands or LinearBands
        window: Window applied before the transform ("none" or "hann")
        scaling_divisor: Band magnitudes are divided by this constant
    """
    block_size: int = 1024
    bands: BandDefinition = field(default_factory=FrequencyBands)
    window: WindowType = "none"
    scaling_divisor: Optional[float] = None

    def __post_init__(self):
        """Validation."""
        if not is_power_of_two(self.block_size) or self.block_size < 2:
            raise InvalidBlockSizeError(
                f"Block size must be a power of two >= 2, got: {self.block_size}"
            )
        if not isinstance(self.bands, (FrequencyBands, LinearBands)):
            raise TypeError(f"Unknown band definition: {self.bands!r}")
        if self.window not in WINDOW_TYPES:
            raise ValueError(f"Unknown window function: {self.window}")
        if self.scaling_divisor is not None and self.scaling_divisor <= 0:
            raise ValueError("Scaling divisor must be positive")

    @property
    def effective_scaling_divisor(self) -> float:
        if self.scaling_divisor is None:
            return self.block_size / 2
        return float(self.scaling_divisor)

    def frequency_resolution(self, sample_rate: int) -> float:
        """Bin spacing in Hz."""
        return sample_rate / self.block_size

    def block_duration(self, sample_rate: int) -> float:
        """Duration of one block in seconds."""
        return self.block_size / sample_rate


class SpectrumPipeline:
    """
    Play/stop lifecycle around the analysis loop.

    Usage:
        pipeline = SpectrumPipeline()
        pipeline.start(open_source("song.wav"), PipelineConfig(window="hann"))
        ...
        snapshot = pipeline.channel.latest()   # from the render thread
        ...
        pipeline.stop()

    Args:
        channel: Snapshot channel shared with the renderer
        sink_factory: Creates a fresh sink per session
        on_finished: Called from the worker thread with the error (or None)
            when a session ends; not called on pause
    """

    def __init__(
        self,
        channel: Optional[SpectrumChannel] = None,
        sink_factory: Callable[[], PlaybackSink] = SoundDeviceSink,
        on_finished: Optional[Callable[[Optional[BaseException]], None]] = None,
    ):
        self.channel = channel if channel is not None else SpectrumChannel()
        self.sink_factory = sink_factory
        self.on_finished = on_finished

        self._lock = threading.Lock()
        self._state = PipelineState.IDLE
        self._halt = threading.Event()
        self._pause_requested = False
        self._thread: Optional[threading.Thread] = None
        self._assembler: Optional[FrameAssembler] = None
        self._mapper: Optional[BandMapper] = None
        self._source: Optional[AudioSource] = None
        self._config: Optional[PipelineConfig] = None
        self._error: Optional[BaseException] = None

    # ── Properties ───────────────────────────────────────────────

    @property
    def state(self) -> PipelineState:
        with self._lock:
            return self._state

    @property
    def error(self) -> Optional[BaseException]:
        """Exception that ended the last session, if any."""
        with self._lock:
            return self._error

    @property
    def config(self) -> Optional[PipelineConfig]:
        return self._config

    @property
    def source(self) -> Optional[AudioSource]:
        return self._source

    @property
    def position(self) -> int:
        """Read offset in samples."""
        assembler = self._assembler
        return assembler.position if assembler is not None else 0

    @property
    def position_seconds(self) -> float:
        if self._source is None:
            return 0.0
        return self.position / self._source.sample_rate

    # ── Lifecycle ────────────────────────────────────────────────

    def start(self, source: AudioSource, config: Optional[PipelineConfig] = None) -> None:
        """
        Start a new session from offset 0.

        Nothing is replaced until the output device is open: if opening
        fails, a paused session stays paused at its read offset.

        Raises:
            RuntimeError: A session is running and was not asked to stop
            InvalidBlockSizeError: Invalid block size in config
            DeviceError: Output device could not be opened
        """
        if config is None:
            config = PipelineConfig()

        self._join_finishing_worker()

        assembler = FrameAssembler(source.samples, config.block_size, config.window)
        mapper = BandMapper(
            config.bands,
            config.block_size,
            source.sample_rate,
            config.effective_scaling_divisor,
        )

        with self._lock:
            if self._state == PipelineState.RUNNING:
                raise RuntimeError("Pipeline is already running")

        # DeviceError propagates to the caller; state stays unchanged
        sink = self._open_sink(source.sample_rate)

        with self._lock:
            launched = self._state != PipelineState.RUNNING
            if launched:
                self._source = source
                self._config = config
                self._assembler = assembler
                self._mapper = mapper
                self._error = None
                self.channel.clear()
                self._start_worker(assembler, mapper, sink)

        if not launched:
            self._close_sink(sink)
            raise RuntimeError("Pipeline is already running")

        logger.info(
            "Started pipeline: block size %d, %d bands, window %s",
            config.block_size, mapper.num_bands, config.window,
        )

    def stop(self) -> None:
        """
        Request the session to end at the next block boundary.

        Idempotent; does not wait for the worker (see wait()).
        """
        notify = False
        with self._lock:
            if self._state == PipelineState.RUNNING:
                self._pause_requested = False
                self._halt.set()
            elif self._state == PipelineState.PAUSED:
                self._state = PipelineState.STOPPED
                notify = True

        if notify:
            logger.info("Pipeline stopped while paused")
            self._notify_finished(None)

    def pause(self) -> None:
        """Halt at the next block boundary and keep the read offset."""
        with self._lock:
            if self._state != PipelineState.RUNNING or self._halt.is_set():
                return
            self._pause_requested = True
            self._halt.set()

    def resume(self) -> None:
        """
        Continue a paused session from its read offset.

        Raises:
            RuntimeError: Pipeline is not paused
            DeviceError: Output device could not be opened
        """
        self._join_finishing_worker()
        with self._lock:
            if self._state != PipelineState.PAUSED:
                raise RuntimeError(f"Cannot resume from state {self._state.value}")
            sample_rate = self._source.sample_rate

        sink = self._open_sink(sample_rate)

        # stop() may have ended the session while the device was opening
        with self._lock:
            state = self._state
            launched = state == PipelineState.PAUSED
            if launched:
                self._start_worker(self._assembler, self._mapper, sink)

        if not launched:
            self._close_sink(sink)
            raise RuntimeError(f"Cannot resume from state {state.value}")

        logger.info("Resumed pipeline at sample %d", self.position)

    def wait(self, timeout: Optional[float] = None) -> bool:
        """
        Wait for the worker thread.

        Returns:
            True if no worker is running anymore
        """
        thread = self._thread
        if thread is None:
            return True
        thread.join(timeout)
        return not thread.is_alive()

    # ── Internal ─────────────────────────────────────────────────

    def _join_finishing_worker(self) -> None:
        """Wait for a worker that was already asked to halt."""
        thread = self._thread
        if thread is not None and thread.is_alive():
            if not self._halt.is_set():
                raise RuntimeError("Pipeline is already running")
            thread.join()

    def _open_sink(self, sample_rate: int) -> PlaybackSink:
        sink = self.sink_factory()
        sink.open(sample_rate, 1)
        return sink

    @staticmethod
    def _close_sink(sink: PlaybackSink) -> Optional[Exception]:
        """Close a sink; a failure is logged and returned, not raised."""
        try:
            sink.close()
        except Exception as e:
            logger.warning("Closing output device failed: %s", e)
            return e
        return None

    def _start_worker(self, assembler: FrameAssembler, mapper: BandMapper, sink: PlaybackSink) -> None:
        """Must be called with self._lock held."""
        self._halt.clear()
        self._pause_requested = False
        self._state = PipelineState.RUNNING
        self._thread = threading.Thread(
            target=self._run,
            args=(assembler, mapper, sink),
            name="spectrum-pipeline",
            daemon=True,
        )
        self._thread.start()

    def _run(self, assembler: FrameAssembler, mapper: BandMapper, sink: PlaybackSink) -> None:
        """Analysis loop: one tick per block."""
        engine = FFTEngine()
        real = np.zeros(assembler.block_size)
        imag = np.zeros(assembler.block_size)
        spectrum = Spectrum(real=real, imag=imag)
        error: Optional[BaseException] = None
        end_of_stream = False

        try:
            while not self._halt.is_set():
                block = assembler.next_block()
                if block is None:
                    end_of_stream = True
                    break

                real[:] = block.data
                imag.fill(0.0)
                engine.transform(real, imag)
                bands = mapper.map(spectrum)

                self.channel.publish(bands, offset=block.offset)
                logger.debug("Block at %d published (peak band %d)", block.offset, int(np.argmax(bands)))

                sink.write(block.raw)
        except Exception as e:
            error = e
            logger.exception("Pipeline aborted at sample %d", assembler.position)
        finally:
            close_error = self._close_sink(sink)
            # the first failure wins
            if error is None:
                error = close_error

        with self._lock:
            paused = self._pause_requested and error is None and not end_of_stream
            self._pause_requested = False
            self._error = error
            self._state = PipelineState.PAUSED if paused else PipelineState.STOPPED

        if paused:
            logger.info("Pipeline paused at sample %d", assembler.position)
            return

        if end_of_stream:
            logger.info("End of stream reached")
        elif error is None:
            logger.info("Pipeline stopped at sample %d", assembler.position)
        self._notify_finished(error)

    def _notify_finished(self, error: Optional[BaseException]) -> None:
        if self.on_finished is not None:
            self.on_finished(error)
