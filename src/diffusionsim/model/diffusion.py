"""
Finite-Difference Diffusion Models
==================================
Models of u_t = a(x)^2 u_xx with Dirichlet boundaries.

Classes:
    ExplicitDiffusionModel: Forward-time, centered-space stepping.
    ThetaDiffusionModel: Blend of the explicit estimate with an implicit one
        obtained from a tridiagonal solve.

Stability of the explicit part (r = a^2 dt / h^2 <= 1/2) is NOT checked; the
caller picks time_step, grid and diffusivity.
"""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import numpy as np

from diffusionsim.errors import ConstructionError
from diffusionsim.model.base import Model
from diffusionsim.model.evaluator import Evaluator, check_arity
from diffusionsim.solvers.solver import DiffusionSolver

if TYPE_CHECKING:
    import numpy.typing as npt

logger = logging.getLogger(__name__)


class DiffusionModel(Model):
    """
    Shared state of the finite-difference models.
    """
    NAME = "Diffusion"

    def __init__(
        self,
        start: Evaluator,
        left_boundary: Evaluator,
        right_boundary: Evaluator,
        diffusivity: Evaluator,
        grid_length: float,
        node_count: int,
        time_step: float,
    ) -> None:
        """
        Initialize the model at t = 0.

        Args:
            start: Initial condition u(0, x), one argument (position).
            left_boundary: u(t, 0), one argument (time).
            right_boundary: u(t, L), one argument (time).
            diffusivity: Coefficient a(x), one argument (position). The
                equation uses its square.
            grid_length: Length of the domain.
            node_count: Number of grid nodes.
            time_step: Duration of one step.
        """
        super().__init__(grid_length=grid_length, node_count=node_count, time_step=time_step)
        check_arity(start, 1, "initial condition")
        check_arity(left_boundary, 1, "left boundary condition")
        check_arity(right_boundary, 1, "right boundary condition")
        check_arity(diffusivity, 1, "diffusivity")

        self.start = start
        self.left_boundary = left_boundary
        self.right_boundary = right_boundary
        self.diffusivity = diffusivity

        # a(x) does not depend on time: evaluate it once for the interior nodes
        interior = self.positions()[1:-1]
        with self._construction_guard("diffusivity"):
            coefficients = np.fromiter(
                (diffusivity.evaluate((x,)) for x in interior),
                dtype=np.float64,
                count=interior.size,
            )
        self.solver = DiffusionSolver(
            coefficients_sq=coefficients * coefficients,
            time_step=self.time_step,
            node_spacing=self.node_spacing,
        )

        max_ratio = float(np.max(self.solver.ratios))
        if max_ratio > 0.5:
            logger.debug(f"{self.NAME}: mesh ratio {max_ratio:.3g} exceeds 0.5, explicit stepping may be unstable.")

        with self._construction_guard("initial or boundary condition"):
            self.reset()

    def _boundaries_at(self, ticks: int) -> tuple[float, float]:
        time = self._time_at(ticks)
        return self.left_boundary.evaluate((time,)), self.right_boundary.evaluate((time,))

    def reset(self) -> None:
        nodes = np.empty(self.node_count, dtype=np.float64)
        nodes[0], nodes[-1] = self._boundaries_at(0)
        nodes[1:-1] = [self.start.evaluate((x,)) for x in self.positions()[1:-1]]

        self._nodes = nodes
        self._elapsed_ticks = 0

    def _commit(
        self,
        ticks: int,
        interior: npt.NDArray[np.float64],
        left: float,
        right: float,
    ) -> None:
        nodes = np.empty(self.node_count, dtype=np.float64)
        nodes[0] = left
        nodes[1:-1] = interior
        nodes[-1] = right

        self._nodes = nodes
        self._elapsed_ticks = ticks


class ExplicitDiffusionModel(DiffusionModel):
    """
    Forward-time, centered-space (FTCS) diffusion model.

    u_i^{n+1} = u_i^n + r_i (u_{i-1}^n - 2 u_i^n + u_{i+1}^n),  r_i = a_i^2 dt / h^2
    """
    NAME = "Explicit"

    def step(self) -> None:
        ticks = self._elapsed_ticks + 1
        left, right = self._boundaries_at(ticks)
        interior = self.solver.explicit_estimate(self._nodes)
        self._commit(ticks, interior, left, right)


class ThetaDiffusionModel(DiffusionModel):
    """
    Weighted implicit/explicit diffusion model.

    The new interior is sigma * I + (1 - sigma) * E, where E is the FTCS
    estimate and I solves the implicit tridiagonal system. sigma = 1 is fully
    implicit, sigma = 0 reproduces ExplicitDiffusionModel.
    """
    NAME = "Theta"

    def __init__(
        self,
        start: Evaluator,
        left_boundary: Evaluator,
        right_boundary: Evaluator,
        diffusivity: Evaluator,
        sigma: float,
        grid_length: float,
        node_count: int,
        time_step: float,
    ) -> None:
        """
        Initialize the model at t = 0.

        Args:
            sigma: Weight of the implicit estimate, in [0, 1].

        See DiffusionModel for the remaining arguments.
        """
        if not 0.0 <= sigma <= 1.0:
            raise ConstructionError(f"sigma must lie in [0, 1], got {sigma}.")
        self.sigma = float(sigma)

        super().__init__(
            start=start,
            left_boundary=left_boundary,
            right_boundary=right_boundary,
            diffusivity=diffusivity,
            grid_length=grid_length,
            node_count=node_count,
            time_step=time_step,
        )

    def __repr__(self) -> str:
        return f"{super().__repr__()[:-1]}, sigma={self.sigma})"

    def step(self) -> None:
        """
        Advance one step.

        Raises:
            SingularSystemError: The implicit system could not be solved. The
                model keeps its previous nodes and tick count.
        """
        ticks = self._elapsed_ticks + 1
        left, right = self._boundaries_at(ticks)

        explicit = self.solver.explicit_estimate(self._nodes)
        implicit = self.solver.implicit_estimate(self._nodes, left, right)

        interior = self.sigma * implicit + (1.0 - self.sigma) * explicit
        self._commit(ticks, interior, left, right)
