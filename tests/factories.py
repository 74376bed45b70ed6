"""Model factories shared by the tests."""
from __future__ import annotations

import math

from diffusionsim.model.analytic import AnalyticModel
from diffusionsim.model.diffusion import ExplicitDiffusionModel, ThetaDiffusionModel
from diffusionsim.model.evaluator import FunctionEvaluator


def sine_start(x: float) -> float:
    return 100.0 * math.sin(math.pi * x / 200.0)


def zero(_: float) -> float:
    return 0.0


def one(_: float) -> float:
    return 1.0


def make_explicit(node_count: int = 5, time_step: float = 1.0, start=sine_start, left=zero, right=zero, diffusivity=one):
    return ExplicitDiffusionModel(
        start=FunctionEvaluator(start, 1),
        left_boundary=FunctionEvaluator(left, 1),
        right_boundary=FunctionEvaluator(right, 1),
        diffusivity=FunctionEvaluator(diffusivity, 1),
        grid_length=200.0,
        node_count=node_count,
        time_step=time_step,
    )


def make_theta(sigma: float, node_count: int = 5, time_step: float = 1.0, start=sine_start, left=zero, right=zero, diffusivity=one):
    return ThetaDiffusionModel(
        start=FunctionEvaluator(start, 1),
        left_boundary=FunctionEvaluator(left, 1),
        right_boundary=FunctionEvaluator(right, 1),
        diffusivity=FunctionEvaluator(diffusivity, 1),
        sigma=sigma,
        grid_length=200.0,
        node_count=node_count,
        time_step=time_step,
    )


def make_analytic(func=lambda t, x: x, node_count: int = 5, time_step: float = 1.0):
    return AnalyticModel(
        func=FunctionEvaluator(func, 2),
        grid_length=200.0,
        node_count=node_count,
        time_step=time_step,
    )


class FakeClock:
    """Deterministic clock whose sleep() just advances the time."""

    def __init__(self, now: float = 0.0) -> None:
        self.now = now
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds

    def advance(self, seconds: float) -> None:
        self.now += seconds
