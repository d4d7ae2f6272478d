"""
Playback sinks.

The pipeline forwards every raw block to a sink. Writing may block; this
is the only intentional blocking point of the analysis thread and
provides natural backpressure from the device buffer.

- SoundDeviceSink: blocking writes to a sounddevice OutputStream
- NullSink: discards audio (headless runs and tests), optionally paced
  in real time
"""

from typing import Optional, Protocol
import logging
import time
import numpy as np

from .errors import DeviceError
from .signal_processing import to_float32_block


logger = logging.getLogger(__name__)


class PlaybackSink(Protocol):
    """Audio output used by the pipeline."""

    def open(self, sample_rate: int, channels: int = 1) -> None: ...

    def write(self, block: np.ndarray) -> None: ...

    def close(self) -> None: ...


class SoundDeviceSink:
    """
    Audio output via sounddevice (PortAudio).

    Any PortAudio failure is reported as DeviceError and is not retried.
    """

    def __init__(self, device: Optional[int | str] = None, latency: str = "low"):
        self.device = device
        self.latency = latency
        self._stream = None

    def open(self, sample_rate: int, channels: int = 1) -> None:
        import sounddevice as sd

        try:
            self._stream = sd.OutputStream(
                samplerate=sample_rate,
                channels=channels,
                dtype="float32",
                device=self.device,
                latency=self.latency,
            )
            self._stream.start()
        except sd.PortAudioError as e:
            self._stream = None
            raise DeviceError(f"Audio device could not be opened: {e}") from e
        logger.debug("Output stream opened (%d Hz, %d ch)", sample_rate, channels)

    def write(self, block: np.ndarray) -> None:
        import sounddevice as sd

        if self._stream is None:
            raise DeviceError("Output stream is not open")
        try:
            underflowed = self._stream.write(to_float32_block(block))
        except sd.PortAudioError as e:
            raise DeviceError(f"Audio device failed: {e}") from e
        if underflowed:
            logger.debug("Output underflow")

    def close(self) -> None:
        import sounddevice as sd

        stream, self._stream = self._stream, None
        if stream is None:
            return
        try:
            stream.stop()
        except sd.PortAudioError as e:
            logger.warning("Output stream did not stop cleanly: %s", e)
        try:
            stream.close()
        except sd.PortAudioError as e:
            raise DeviceError(f"Output stream could not be closed: {e}") from e


class NullSink:
    """
    Sink without audio output.

    Attributes:
        frames_written: Total number of frames received
        realtime: Sleep for the block duration on every write
    """

    def __init__(self, realtime: bool = False):
        self.realtime = realtime
        self.frames_written = 0
        self.sample_rate: Optional[int] = None
        self.is_open = False

    def open(self, sample_rate: int, channels: int = 1) -> None:
        self.sample_rate = sample_rate
        self.is_open = True

    def write(self, block: np.ndarray) -> None:
        if not self.is_open:
            raise DeviceError("Sink is not open")
        self.frames_written += len(block)
        if self.realtime and self.sample_rate:
            time.sleep(len(block) / self.sample_rate)

    def close(self) -> None:
        self.is_open = False
