from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

from diffusionsim.model.base import Model
from diffusionsim.model.evaluator import Evaluator, check_arity

if TYPE_CHECKING:
    import numpy.typing as npt


class AnalyticModel(Model):
    """
    Closed-form model: every node is f(t, x) evaluated directly.

    There is no boundary/interior distinction and no dependency on the previous
    state, so stepping k times from a fresh instance gives the same array as
    evaluating f at t = k * dt.
    """
    NAME = "Analytic"

    def __init__(
        self,
        func: Evaluator,
        grid_length: float,
        node_count: int,
        time_step: float,
    ) -> None:
        """
        Initialize the model at t = 0.

        Args:
            func: Two-argument evaluator f(time, position).
            grid_length: Length of the domain.
            node_count: Number of grid nodes.
            time_step: Duration of one step.
        """
        super().__init__(grid_length=grid_length, node_count=node_count, time_step=time_step)
        check_arity(func, 2, "analytic solution f(t, x)")
        self.func = func

        with self._construction_guard("analytic solution"):
            self.reset()

    def _evaluate_at(self, ticks: int) -> npt.NDArray[np.float64]:
        time = self._time_at(ticks)
        return np.fromiter(
            (self.func.evaluate((time, x)) for x in self.positions()),
            dtype=np.float64,
            count=self.node_count,
        )

    def reset(self) -> None:
        self._nodes = self._evaluate_at(0)
        self._elapsed_ticks = 0

    def step(self) -> None:
        ticks = self._elapsed_ticks + 1
        self._nodes = self._evaluate_at(ticks)
        self._elapsed_ticks = ticks
