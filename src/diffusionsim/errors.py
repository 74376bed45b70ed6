"""
Error Taxonomy
==============
Exceptions raised by model construction, by the numerical kernels and by the
model manager.

Construction errors (bad formula, wrong arity, invalid grid) are raised to the
caller before a model exists. Manager errors are raised inside the worker,
contained to one model or comparison, and handed back with the next snapshot.
Only ChannelClosedError is fatal.
"""
from __future__ import annotations

from typing import Optional


class SimulationError(Exception):
    """Base class for every error raised by diffusionsim."""


# ==========================================
# CONSTRUCTION
# ==========================================

class ConstructionError(SimulationError, ValueError):
    """A model (or one of its evaluators) could not be created."""


class CompileError(ConstructionError):
    """A formula string is malformed or uses unexpected free variables."""

    def __init__(self, formula: str, reason: str) -> None:
        super().__init__(f"Cannot compile formula '{formula}': {reason}")
        self.formula = formula
        self.reason = reason


class ArityError(ConstructionError):
    """An evaluator received (or was declared with) the wrong number of arguments."""

    def __init__(self, expected: int, got: int, what: str = "evaluator") -> None:
        super().__init__(f"{what} expects {expected} argument(s), got {got}.")
        self.expected = expected
        self.got = got


# ==========================================
# RUNTIME (reported through snapshots)
# ==========================================

class ManagerError(SimulationError):
    """An error contained to a single model or comparison."""

    def __init__(self, message: str, names: tuple[str, ...] = ()) -> None:
        super().__init__(message)
        self.names = names


class SingularSystemError(ManagerError):
    """The implicit tridiagonal system of a theta step could not be solved."""

    def __init__(self, reason: str, name: Optional[str] = None) -> None:
        super().__init__(f"Tridiagonal solve failed: {reason}", (name,) if name else ())
        self.reason = reason

    def for_model(self, name: str) -> SingularSystemError:
        """Return a copy of this error attributed to a named model."""
        return SingularSystemError(self.reason, name)


class UnequalGridError(ManagerError):
    """Two models with different node counts cannot be compared."""

    def __init__(self, first: str, first_count: int, second: str, second_count: int) -> None:
        super().__init__(
            f"Cannot compare '{first}' ({first_count} nodes) with '{second}' ({second_count} nodes).",
            (first, second),
        )


class UnknownNameError(ManagerError):
    """An operation referenced a model name that is not registered."""

    def __init__(self, name: str, operation: str) -> None:
        super().__init__(f"{operation}: no model named '{name}'.", (name,))


# ==========================================
# LIFETIME
# ==========================================

class ChannelClosedError(SimulationError, RuntimeError):
    """The manager worker is gone while a caller still talks to it."""
