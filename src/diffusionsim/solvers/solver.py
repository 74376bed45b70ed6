from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import numpy as np
import scipy as sp

from diffusionsim.errors import SingularSystemError

if TYPE_CHECKING:
    import numpy.typing as npt

logger = logging.getLogger(__name__)


class DiffusionSolver:
    """
    Finite-difference kernels for u_t = a(x)^2 u_xx on a uniform 1-D grid.

    All arrays handled here cover the full grid (boundaries included); the
    returned estimates cover the interior nodes only.
    """

    def __init__(
        self,
        coefficients_sq: npt.NDArray[np.float64],
        time_step: float,
        node_spacing: float,
    ) -> None:
        """
        Initialize the solver and precompute the implicit system matrix.

        Args:
            coefficients_sq: a(x_i)^2 for every interior node, length N-2.
            time_step: Time step in the model's time units.
            node_spacing: Distance between neighbouring nodes.
        """
        self.coefficients_sq = np.asarray(coefficients_sq, dtype=np.float64)
        self.time_step = time_step
        self.node_spacing = node_spacing

        th = time_step / (node_spacing * node_spacing)

        # Mesh ratio r_i = a_i^2 * dt / h^2 of every interior node
        self.ratios: npt.NDArray[np.float64] = self.coefficients_sq * th

        # The implicit matrix does not change between steps, keep it in banded form
        self._banded = self._precompute_banded_matrix(self.ratios)

    @property
    def size(self) -> int:
        """Number of interior unknowns."""
        return self.ratios.size

    @staticmethod
    def _precompute_banded_matrix(ratios: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
        """
        Build the (1, 1)-banded storage of the implicit system.

        Row i reads  -r_i * u_{i-1} + (1 + 2 r_i) * u_i - r_i * u_{i+1}.

        Returns:
            ab: array of shape (3, n) laid out as scipy.linalg.solve_banded expects:
                ab[0, 1:]  super-diagonal (row j-1, column j)
                ab[1, :]   diagonal
                ab[2, :-1] sub-diagonal (row j+1, column j)
        """
        n = ratios.size
        ab = np.zeros((3, n), dtype=np.float64)
        ab[0, 1:] = -ratios[:-1]
        ab[1, :] = 2.0 * ratios + 1.0
        ab[2, :-1] = -ratios[1:]
        return ab

    def explicit_estimate(self, nodes: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
        """
        Forward-time, centered-space update of the interior nodes.

        Every new value derives from the same snapshot of `nodes`; the input is
        never modified.

        Args:
            nodes: Current values of the full grid.

        Returns:
            New interior values, length N-2.
        """
        u = np.asarray(nodes, dtype=np.float64)
        laplacian = u[:-2] - 2.0 * u[1:-1] + u[2:]
        return u[1:-1] + self.ratios * laplacian

    def implicit_estimate(
        self,
        nodes: npt.NDArray[np.float64],
        left: float,
        right: float,
    ) -> npt.NDArray[np.float64]:
        """
        Solve the implicit tridiagonal system for the interior nodes.

        The right-hand side is the current interior state; its first and last
        entries are decremented by the boundary values at the new time.

        Args:
            nodes: Current values of the full grid.
            left: Left boundary value at the new time.
            right: Right boundary value at the new time.

        Returns:
            Implicit interior estimate, length N-2.

        Raises:
            SingularSystemError: The system could not be solved.
        """
        rhs = np.array(nodes[1:-1], dtype=np.float64)
        rhs[0] -= left
        rhs[-1] -= right

        try:
            solution = sp.linalg.solve_banded((1, 1), self._banded, rhs)
        except np.linalg.LinAlgError as e:
            raise SingularSystemError(str(e)) from e
        except ValueError as e:
            # check_finite rejects nan/inf in the matrix or right-hand side
            raise SingularSystemError(str(e)) from e

        if not np.all(np.isfinite(solution)):
            raise SingularSystemError("solution contains non-finite values")
        return solution


def divergence(
    first: npt.NDArray[np.float64],
    second: npt.NDArray[np.float64],
) -> float:
    """
    Root of the summed squared differences between two node arrays.

    Raises:
        ValueError: The arrays have different lengths.
    """
    a = np.asarray(first, dtype=np.float64)
    b = np.asarray(second, dtype=np.float64)
    if a.shape != b.shape:
        raise ValueError(f"Cannot compare grids of {a.size} and {b.size} nodes.")
    diff = a - b
    return float(np.sqrt(np.dot(diff, diff)))
