"""
The MODEL layer contains the simulation models and their formula evaluators.
It has NO knowledge of threads or of the manager loop.
It deals with the numerics of a single 1-D field.
"""
from diffusionsim.model.analytic import AnalyticModel
from diffusionsim.model.base import Model
from diffusionsim.model.diffusion import ExplicitDiffusionModel, ThetaDiffusionModel
from diffusionsim.model.evaluator import Evaluator, FormulaEvaluator, FunctionEvaluator, compile_formula
from diffusionsim.model.state import ModelKind, ModelSettings, build_model

__all__ = [
    "AnalyticModel",
    "Evaluator",
    "ExplicitDiffusionModel",
    "FormulaEvaluator",
    "FunctionEvaluator",
    "Model",
    "ModelKind",
    "ModelSettings",
    "ThetaDiffusionModel",
    "build_model",
    "compile_formula",
]
