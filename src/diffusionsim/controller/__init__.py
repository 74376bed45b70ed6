"""
Simulation Controller
=====================
Owns the running models on a background worker thread.

Why is this package needed?
---------------------------
1. Responsiveness: Stepping the models must never wait for a consumer (GUI,
   logger, test). The manager runs its own loop and callers only exchange
   messages with it.
2. Comparisons: It keeps the divergence between selected model pairs up to
   date after every tick.

Note: The models themselves live in diffusionsim.model and know nothing about
threads.
"""
from diffusionsim.controller.comparison import ComparisonGraph
from diffusionsim.controller.ticker import TickGovernor
from diffusionsim.controller.workers import ModelInfo, ModelManager, Snapshot

__all__ = ["ComparisonGraph", "ModelInfo", "ModelManager", "Snapshot", "TickGovernor"]
