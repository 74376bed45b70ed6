"""
Numerical Kernels
=================
Vectorized finite-difference updates and the tridiagonal solve used by the
diffusion models.

Note: This package should be pure NumPy/SciPy and should NOT import threading.
"""
from diffusionsim.solvers.solver import DiffusionSolver, divergence

__all__ = ["DiffusionSolver", "divergence"]
