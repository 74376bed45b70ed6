"""
diffusionsim
============
Side-by-side simulation of 1-D diffusion problems with interchangeable
numerical schemes, and live tracking of how far the simulations drift apart.
"""
from diffusionsim.controller.workers import ModelInfo, ModelManager, Snapshot
from diffusionsim.model import (
    AnalyticModel,
    ExplicitDiffusionModel,
    Model,
    ModelKind,
    ModelSettings,
    ThetaDiffusionModel,
    build_model,
    compile_formula,
)

__version__ = "0.1.0"

__all__ = [
    "AnalyticModel",
    "ExplicitDiffusionModel",
    "Model",
    "ModelInfo",
    "ModelKind",
    "ModelManager",
    "ModelSettings",
    "Snapshot",
    "ThetaDiffusionModel",
    "build_model",
    "compile_formula",
]
