from __future__ import annotations

from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import TYPE_CHECKING, Iterator

import numpy as np

from diffusionsim.config import MIN_NODE_COUNT
from diffusionsim.errors import ConstructionError
from diffusionsim.utils import grid_positions

if TYPE_CHECKING:
    import numpy.typing as npt


# ==========================================
# ABSTRACT CLASS FOR MODELS
# ==========================================
class Model(ABC):
    """
    Abstract base class for 1-D time-dependent field models.

    A model owns the node values of a uniform grid on [0, grid_length] and
    knows how to reset itself to t = 0 and to advance by one time step.
    Subclasses fill `self._nodes` in `reset()` and replace it in `step()`.
    """
    NAME: str = "Model"

    def __init__(
        self,
        grid_length: float,
        node_count: int,
        time_step: float,
    ) -> None:
        """
        Validate and store the grid parameters.

        Args:
            grid_length: Length of the domain.
            node_count: Number of grid nodes, boundaries included (>= 3).
            time_step: Duration of one step.

        Raises:
            ConstructionError: Invalid grid or time step.
        """
        if int(node_count) != node_count or node_count < MIN_NODE_COUNT:
            raise ConstructionError(f"node_count must be an integer >= {MIN_NODE_COUNT}, got {node_count}.")
        if not grid_length > 0.0:
            raise ConstructionError(f"grid_length must be positive, got {grid_length}.")
        if not time_step > 0.0:
            raise ConstructionError(f"time_step must be positive, got {time_step}.")

        self._grid_length = float(grid_length)
        self._node_count = int(node_count)
        self._time_step = float(time_step)
        self._node_spacing = self._grid_length / (self._node_count - 1)

        self._elapsed_ticks: int = 0
        self._nodes: npt.NDArray[np.float64] = np.zeros(self._node_count, dtype=np.float64)

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(length={self._grid_length}, nodes={self._node_count}, "
            f"dt={self._time_step}, t={self.elapsed_time})"
        )

    @abstractmethod
    def reset(self) -> None:
        """Return to t = 0 and restore the initial condition."""
        pass

    @abstractmethod
    def step(self) -> None:
        """Advance the field by one time step."""
        pass

    def current_nodes(self) -> npt.NDArray[np.float64]:
        """Copy of the current node values."""
        return self._nodes.copy()

    def positions(self) -> npt.NDArray[np.float64]:
        """Coordinates of the nodes."""
        return grid_positions(self._node_count, self._node_spacing)

    @property
    def grid_length(self) -> float:
        return self._grid_length

    @property
    def node_count(self) -> int:
        return self._node_count

    @property
    def node_spacing(self) -> float:
        return self._node_spacing

    @property
    def time_step(self) -> float:
        return self._time_step

    @property
    def elapsed_ticks(self) -> int:
        return self._elapsed_ticks

    @property
    def elapsed_time(self) -> float:
        """Simulated time, elapsed_ticks * time_step."""
        return self._elapsed_ticks * self._time_step

    def _time_at(self, ticks: int) -> float:
        return ticks * self._time_step

    @contextmanager
    def _construction_guard(self, what: str) -> Iterator[None]:
        """
        Re-raise evaluation failures during construction as ConstructionError.

        A formula can compile and still fail on the grid, e.g. divide by zero at
        t = 0 or return a complex value. The caller must never receive such a
        half-built model.
        """
        try:
            yield
        except ConstructionError:
            raise
        except (ArithmeticError, TypeError, ValueError) as e:
            raise ConstructionError(f"{self.NAME}: cannot evaluate the {what}: {e}") from e
