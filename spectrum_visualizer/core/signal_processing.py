"""
General Signal Processing

Helpers that prepare samples for analysis and playback.
All functions are EXPLICIT - no automatic conversions.

Technical assumptions:
- Downmix is performed as arithmetic mean (no energy compensation)
- All operations work on copies, original data remains unchanged
"""

from typing import Literal
import numpy as np


DownmixMethod = Literal["average", "left", "right"]


def downmix_to_mono(
    data: np.ndarray,
    method: DownmixMethod = "average",
) -> np.ndarray:
    """
    Convert multi-channel audio to mono.

    Methods:
    - average: mean over all channels, no energy compensation
    - left: first channel only
    - right: second channel only

    Args:
        data: Audio data, Shape: (samples, channels)
        method: Downmix method

    Returns:
        Mono audio data, Shape: (samples,)
    """
    if data.ndim == 1:
        return data.copy()  # Already mono

    if method == "average":
        return data.mean(axis=1)
    elif method == "left":
        return data[:, 0].copy()
    elif method == "right":
        if data.shape[1] < 2:
            raise ValueError("Right channel requested from mono data")
        return data[:, 1].copy()
    else:
        raise ValueError(f"Unknown method: {method}")


def to_float32_block(data: np.ndarray) -> np.ndarray:
    """
    Contiguous float32 copy for the output device, clipped to [-1, 1].
    """
    return np.ascontiguousarray(np.clip(data, -1.0, 1.0), dtype=np.float32)
