from __future__ import annotations

from datetime import timedelta
from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    import numpy.typing as npt


def to_seconds(duration: float | timedelta) -> float:
    """Normalize a duration given as seconds or a timedelta to float seconds."""
    if isinstance(duration, timedelta):
        seconds = duration.total_seconds()
    else:
        seconds = float(duration)
    if seconds < 0.0:
        raise ValueError(f"Duration must not be negative, got {seconds} s.")
    return seconds

def grid_positions(node_count: int, node_spacing: float) -> npt.NDArray[np.float64]:
    """Coordinates of the grid nodes, x_i = i * h."""
    return np.arange(node_count, dtype=np.float64) * node_spacing
