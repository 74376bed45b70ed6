"""
Formula Evaluators
==================
Turns user-authored formula strings into numeric callables of fixed arity.

Models never parse text themselves; they only depend on the Evaluator
protocol below. FormulaEvaluator is the sympy-backed implementation used by
the presets and the command-line runner, FunctionEvaluator wraps any Python
callable (handy for tests and for programmatic use).

Variable binding:
    arity 2 -> (t, x)
    arity 1 -> the formula's single free symbol, whatever it is called
"""
from __future__ import annotations

import logging
from typing import Callable, Optional, Protocol, Sequence, runtime_checkable

import numpy as np
import sympy as sp
from sympy.parsing.sympy_parser import (
    convert_xor,
    implicit_multiplication,
    parse_expr,
    standard_transformations,
)

from diffusionsim.errors import ArityError, CompileError

logger = logging.getLogger(__name__)

TRANSFORMATIONS = standard_transformations + (implicit_multiplication, convert_xor)

CONSTANTS: dict[str, sp.Expr] = {
    "PI": sp.pi,
    "pi": sp.pi,
    "E": sp.E,
    "e": sp.E,
}

DEFAULT_VARIABLES: dict[int, tuple[str, ...]] = {
    1: ("x",),
    2: ("t", "x"),
}


def _to_real(value: object, source: object, args: Sequence[float]) -> float:
    if np.iscomplexobj(value):
        raise ValueError(f"{source} is complex at {tuple(args)}: {value}")
    return float(value)


@runtime_checkable
class Evaluator(Protocol):
    """A compiled numeric function of a fixed number of arguments."""
    arity: int

    def evaluate(self, args: Sequence[float]) -> float: ...


class FunctionEvaluator:
    """
    Evaluator backed by a plain Python callable.
    """
    def __init__(self, func: Callable[..., float], arity: int) -> None:
        if arity < 1:
            raise ArityError(expected=1, got=arity, what="FunctionEvaluator")
        self.func = func
        self.arity = arity

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({getattr(self.func, '__name__', self.func)!r}, arity={self.arity})"

    def evaluate(self, args: Sequence[float]) -> float:
        if len(args) != self.arity:
            raise ArityError(expected=self.arity, got=len(args))
        return _to_real(self.func(*args), self, args)


class FormulaEvaluator:
    """
    Evaluator compiled from a formula string with sympy.
    """
    def __init__(
        self,
        formula: str,
        arity: int,
        variables: Optional[Sequence[str]] = None,
    ) -> None:
        """
        Parse and compile the formula.

        Args:
            formula: Expression text, e.g. "100*sin(PI*x/200)".
            arity: Number of arguments evaluate() will receive.
            variables: Names bound to the arguments, in order. Defaults to
                (t, x) for two arguments and to the formula's own symbol
                for one.

        Raises:
            CompileError: The text does not parse or uses unknown variables.
            ArityError: More or fewer variable names than the arity.
        """
        self.formula = formula
        self.arity = arity

        try:
            self.expression: sp.Expr = parse_expr(
                formula,
                local_dict=dict(CONSTANTS),
                transformations=TRANSFORMATIONS,
            )
        except Exception as e:
            raise CompileError(formula, str(e) or type(e).__name__) from e

        if not isinstance(self.expression, sp.Expr):
            raise CompileError(formula, "not a numeric expression")

        free = sorted(self.expression.free_symbols, key=lambda s: s.name)
        self.variables = self._resolve_variables(free, variables)

        unknown = {s.name for s in free} - set(self.variables)
        if unknown:
            raise CompileError(
                formula,
                f"unexpected variable(s) {', '.join(sorted(unknown))}; expected {', '.join(self.variables)}",
            )

        symbols = [sp.Symbol(name) for name in self.variables]
        self._func = sp.lambdify(symbols, self.expression, modules="numpy")
        logger.debug(f"Compiled '{formula}' as f({', '.join(self.variables)}) = {self.expression}")

    def _resolve_variables(
        self,
        free: list[sp.Symbol],
        variables: Optional[Sequence[str]],
    ) -> tuple[str, ...]:
        if variables is not None:
            if len(variables) != self.arity:
                raise ArityError(expected=self.arity, got=len(variables), what="variable list")
            return tuple(variables)

        if self.arity == 1:
            if len(free) > 1:
                names = ", ".join(s.name for s in free)
                raise CompileError(self.formula, f"expected one free variable, found {names}")
            return (free[0].name,) if free else DEFAULT_VARIABLES[1]

        if self.arity in DEFAULT_VARIABLES:
            return DEFAULT_VARIABLES[self.arity]
        raise ArityError(expected=2, got=self.arity, what="formula without explicit variables")

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.formula!r}, arity={self.arity})"

    def evaluate(self, args: Sequence[float]) -> float:
        if len(args) != self.arity:
            raise ArityError(expected=self.arity, got=len(args))
        return _to_real(self._func(*args), repr(self.formula), args)


def compile_formula(
    formula: str,
    arity: int,
    variables: Optional[Sequence[str]] = None,
) -> FormulaEvaluator:
    """Compile a formula string into an evaluator with the given arity."""
    return FormulaEvaluator(formula, arity, variables)


def check_arity(evaluator: Evaluator, expected: int, role: str) -> None:
    """Raise ArityError if an evaluator cannot serve in a role of given arity."""
    arity = getattr(evaluator, "arity", None)
    if arity != expected:
        raise ArityError(expected=expected, got=arity or 0, what=role)
