"""
Model Settings (Presets)
========================
Formula-level description of a model and the factory that compiles it.

Why is this file needed?
------------------------
1. Defaults: It carries the reference problem (a sine profile on [0, 200]
   with zero boundaries) together with its exact solution.
2. Construction: It is the single place where formula text turns into
   evaluators, so compile errors surface here and never reach the manager.

Classes:
    ModelKind: Which model variant to build.
    ModelSettings: The formulas and grid parameters.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from enum import StrEnum
import logging

from diffusionsim.model.analytic import AnalyticModel
from diffusionsim.model.base import Model
from diffusionsim.model.diffusion import ExplicitDiffusionModel, ThetaDiffusionModel
from diffusionsim.model.evaluator import compile_formula

logger = logging.getLogger(__name__)


class ModelKind(StrEnum):
    ANALYTIC = "analytic"
    EXPLICIT = "explicit"
    THETA = "theta"


@dataclass
class ModelSettings:
    """
    Formulas and grid of one simulation.

    Position formulas use x, boundary formulas take the time as their single
    variable, the exact solution uses t and x.
    """
    start: str = "100*sin(PI*x/200)"
    left_boundary: str = "0"
    right_boundary: str = "0"
    diffusivity: str = "1"
    exact: str = "100*exp(-(PI/200)^2*t)*sin(PI*x/200)"

    grid_length: float = 200.0
    node_count: int = 100
    time_step: float = 1.0
    sigma: float = 0.5

    def with_grid(self, node_count: int) -> ModelSettings:
        """Copy of these settings on a different number of nodes."""
        return replace(self, node_count=node_count)


def build_model(settings: ModelSettings, kind: ModelKind) -> Model:
    """
    Compile the settings' formulas and construct the requested model.

    Raises:
        ConstructionError: A formula does not compile or a parameter is invalid.
    """
    kind = ModelKind(kind)
    logger.debug(f"Building {kind} model on {settings.node_count} nodes.")

    if kind == ModelKind.ANALYTIC:
        return AnalyticModel(
            func=compile_formula(settings.exact, 2),
            grid_length=settings.grid_length,
            node_count=settings.node_count,
            time_step=settings.time_step,
        )

    start = compile_formula(settings.start, 1)
    left = compile_formula(settings.left_boundary, 1)
    right = compile_formula(settings.right_boundary, 1)
    diffusivity = compile_formula(settings.diffusivity, 1)

    if kind == ModelKind.EXPLICIT:
        return ExplicitDiffusionModel(
            start=start,
            left_boundary=left,
            right_boundary=right,
            diffusivity=diffusivity,
            grid_length=settings.grid_length,
            node_count=settings.node_count,
            time_step=settings.time_step,
        )

    return ThetaDiffusionModel(
        start=start,
        left_boundary=left,
        right_boundary=right,
        diffusivity=diffusivity,
        sigma=settings.sigma,
        grid_length=settings.grid_length,
        node_count=settings.node_count,
        time_step=settings.time_step,
    )
