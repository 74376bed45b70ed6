"""
Background Worker (Threading)
=============================
This module runs every registered model on one dedicated thread.

Why is this file needed?
------------------------
1. Responsiveness: Stepping the models on the caller's thread would tie the
   simulation speed to the consumer (GUI frame rate, logging cadence). The
   worker loops on its own and is only paced by its TickGovernor.
2. Ownership: The worker is the only thread that ever touches a Model or the
   ComparisonGraph. Callers talk to it through a command queue and receive
   copies of the state in snapshots, so no locks guard the models.

Classes:
    ManagerWorker: The thread holding all model state.
    ModelManager: Caller-side handle; sends commands, waits for snapshots.
"""
from __future__ import annotations

from collections import deque
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import timedelta
import logging
import queue
import threading
from typing import Callable, Optional

from diffusionsim.config import (
    DEFAULT_MIN_TICK_TIME,
    JOIN_TIMEOUT,
    MAX_REPORTED_ERRORS,
    REFERENCE_SUFFIX,
    REPLY_POLL_INTERVAL,
)
from diffusionsim.controller.comparison import ComparisonGraph
from diffusionsim.controller.ticker import TickGovernor
from diffusionsim.errors import (
    ChannelClosedError,
    ManagerError,
    SingularSystemError,
    UnequalGridError,
    UnknownNameError,
)
from diffusionsim.model.base import Model
from diffusionsim.solvers.solver import divergence
from diffusionsim.utils import to_seconds

logger = logging.getLogger(__name__)


# ==========================================
# MESSAGES TO THE WORKER
# ==========================================

@dataclass(frozen=True)
class AddModel:
    name: str
    model: Model

@dataclass(frozen=True)
class RemoveModel:
    name: str

@dataclass(frozen=True)
class RestartModel:
    name: str

@dataclass(frozen=True)
class StartComparison:
    first: str
    second: str

@dataclass(frozen=True)
class StopComparison:
    first: str
    second: str

@dataclass(frozen=True)
class SetMinTickTime:
    seconds: float

@dataclass(frozen=True, eq=False)
class RequestSnapshot:
    # Single-slot rendezvous owned by the requesting caller
    reply: queue.Queue = field(default_factory=lambda: queue.Queue(maxsize=1))

@dataclass(frozen=True)
class Exit:
    pass

Command = AddModel | RemoveModel | RestartModel | StartComparison | StopComparison | SetMinTickTime | RequestSnapshot | Exit


# ==========================================
# MESSAGES FROM THE WORKER
# ==========================================

@dataclass
class ModelInfo:
    """Copy of one model's state taken at snapshot time."""
    name: str
    nodes: list[float]
    grid_length: float
    elapsed_time: float
    comparisons: dict[str, float] = field(default_factory=dict)


@dataclass
class Snapshot:
    """
    Reply to get_snapshot().

    Attributes:
        models: One entry per registered model, in registration order.
        tick_rate: Ticks completed during the last full second.
        errors: Errors contained by the worker since the previous snapshot.
    """
    models: list[ModelInfo]
    tick_rate: int
    errors: list[ManagerError] = field(default_factory=list)

    def model(self, name: str) -> Optional[ModelInfo]:
        """Entry of the named model, or None."""
        return next((info for info in self.models if info.name == name), None)

    @property
    def names(self) -> list[str]:
        return [info.name for info in self.models]


# ==========================================
# WORKER
# ==========================================

class ManagerWorker(threading.Thread):
    """
    Thread owning all models and the comparison graph.

    One iteration (tick):
        1. drain every pending command without blocking
        2. step every model once
        3. recompute every comparison edge
        4. answer snapshot requests received in step 1
        5. pace the loop with the TickGovernor
    """

    def __init__(
        self,
        commands: queue.Queue,
        min_tick_time: float = DEFAULT_MIN_TICK_TIME,
        parallel: bool = False,
        max_workers: Optional[int] = None,
        governor: Optional[TickGovernor] = None,
    ) -> None:
        super().__init__(name="model-manager", daemon=True)
        self.commands = commands
        self.parallel = parallel
        self.max_workers = max_workers

        self.governor = governor if governor is not None else TickGovernor(min_tick_time)
        self.models: dict[str, Model] = {}
        self.graph = ComparisonGraph()
        self.errors: deque[ManagerError] = deque(maxlen=MAX_REPORTED_ERRORS)
        self.tick_count: int = 0

        self._running = True
        self._pending_replies: list[queue.Queue] = []
        self._executor: Optional[ThreadPoolExecutor] = None

        self._handlers: dict[type, Callable] = {
            AddModel: self._add_model,
            RemoveModel: self._remove_model,
            RestartModel: self._restart_model,
            StartComparison: self._start_comparison,
            StopComparison: self._stop_comparison,
            SetMinTickTime: self._set_min_tick_time,
            RequestSnapshot: self._request_snapshot,
            Exit: self._exit,
        }

    def run(self) -> None:
        logger.info("Model manager started.")
        if self.parallel:
            self._executor = ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix="model-step")
        try:
            while self._running:
                self.tick()
        except Exception:
            logger.exception("Model manager loop crashed.")
            raise
        finally:
            if self._executor is not None:
                self._executor.shutdown(wait=True)
                self._executor = None
            logger.info(f"Model manager stopped after {self.tick_count} ticks.")

    def tick(self) -> None:
        self.governor.start()

        self.drain_commands()
        self.step_models()
        self.update_comparisons()

        if self._pending_replies:
            snapshot = self.build_snapshot()
            for reply in self._pending_replies:
                reply.put(snapshot)
            self._pending_replies.clear()

        self.tick_count += 1
        self.governor.end()

    def drain_commands(self) -> None:
        """Apply every command already queued, in arrival order."""
        while self._running:
            try:
                command = self.commands.get_nowait()
            except queue.Empty:
                break
            handler = self._handlers.get(type(command))
            if handler is None:
                raise TypeError(f"Unknown manager command: {command!r}")
            handler(command)

    def step_models(self) -> None:
        """Advance every model once. A failing model keeps its previous state."""
        if not self.models:
            return

        if self._executor is not None:
            futures = {name: self._executor.submit(model.step) for name, model in self.models.items()}
            for name, future in futures.items():
                error = future.exception()
                if error is not None:
                    self._contain(name, error)
            return

        for name, model in self.models.items():
            try:
                model.step()
            except Exception as e:
                self._contain(name, e)

    def update_comparisons(self) -> None:
        """Recompute the divergence of every compared pair from the current nodes."""
        for first, second in self.graph.edges():
            value = divergence(
                self.models[first].current_nodes(),
                self.models[second].current_nodes(),
            )
            self.graph.set_edge(first, second, value)

    def build_snapshot(self) -> Snapshot:
        models = [
            ModelInfo(
                name=name,
                nodes=self.models[name].current_nodes().tolist(),
                grid_length=self.models[name].grid_length,
                elapsed_time=self.models[name].elapsed_time,
                comparisons=dict(self.graph.edges_of(name)),
            )
            for name in self.graph.nodes
        ]
        errors = list(self.errors)
        self.errors.clear()
        return Snapshot(models=models, tick_rate=self.governor.get_rate(), errors=errors)

    def _contain(self, name: str, error: BaseException, action: str = "Step") -> None:
        if isinstance(error, SingularSystemError):
            reported: ManagerError = error.for_model(name)
        elif isinstance(error, ManagerError):
            reported = error
        else:
            reported = ManagerError(f"{action} of '{name}' failed: {error}", (name,))
        logger.warning(f"Model '{name}' kept its previous state: {reported}")
        self._report(reported)

    def _report(self, error: ManagerError) -> None:
        self.errors.append(error)

    def _reset(self, name: str, model: Model) -> bool:
        try:
            model.reset()
        except Exception as e:
            self._contain(name, e, action="Restart")
            return False
        return True

    # ---- command handlers ----

    def _add_model(self, command: AddModel) -> None:
        if not self.graph.add_node(command.name):
            logger.warning(f"Model '{command.name}' already exists, ignoring the new one.")
            return
        self.models[command.name] = command.model
        logger.debug(f"Added model '{command.name}': {command.model!r}")

    def _remove_model(self, command: RemoveModel) -> None:
        if self.graph.remove_node(command.name):
            del self.models[command.name]
            logger.debug(f"Removed model '{command.name}'.")

    def _restart_model(self, command: RestartModel) -> None:
        model = self.models.get(command.name)
        if model is not None:
            if self._reset(command.name, model):
                logger.debug(f"Restarted model '{command.name}'.")

    def _start_comparison(self, command: StartComparison) -> None:
        first, second = command.first, command.second
        for name in (first, second):
            if name not in self.models:
                logger.warning(f"Cannot compare '{first}' with '{second}': '{name}' is not registered.")
                self._report(UnknownNameError(name, "start_comparison"))
                return

        a, b = self.models[first], self.models[second]
        if a.node_count != b.node_count:
            error = UnequalGridError(first, a.node_count, second, b.node_count)
            logger.warning(str(error))
            self._report(error)
            return

        if not self._reset(first, a) or (b is not a and not self._reset(second, b)):
            return
        self.graph.set_edge(first, second, 0.0)
        logger.debug(f"Comparing '{first}' with '{second}'.")

    def _stop_comparison(self, command: StopComparison) -> None:
        if self.graph.remove_edge(command.first, command.second):
            logger.debug(f"Stopped comparing '{command.first}' with '{command.second}'.")

    def _set_min_tick_time(self, command: SetMinTickTime) -> None:
        self.governor.set_min_tick_time(command.seconds)

    def _request_snapshot(self, command: RequestSnapshot) -> None:
        self._pending_replies.append(command.reply)

    def _exit(self, command: Exit) -> None:
        self._running = False


# ==========================================
# CALLER-SIDE HANDLE
# ==========================================

class ModelManager:
    """
    Handle to a running ManagerWorker.

    Every method except get_snapshot() is fire-and-forget: the command is
    queued and applied at the start of the worker's next tick. A model passed
    to add_model() belongs to the worker from then on; do not touch it again.

    The worker keeps running until close() (or leaving the `with` block).
    Any call after that raises ChannelClosedError.
    """

    def __init__(
        self,
        min_tick_time: float | timedelta = DEFAULT_MIN_TICK_TIME,
        parallel: bool = False,
        max_workers: Optional[int] = None,
        governor: Optional[TickGovernor] = None,
    ) -> None:
        """
        Start the worker thread.

        Args:
            min_tick_time: Lower bound of one tick, seconds or timedelta.
            parallel: Step the models on a thread pool.
            max_workers: Size of that pool (default chosen by concurrent.futures).
            governor: Pre-built governor, mainly for tests.
        """
        self._commands: queue.Queue = queue.Queue()
        self._closed = False
        self._close_lock = threading.Lock()

        self._worker = ManagerWorker(
            commands=self._commands,
            min_tick_time=to_seconds(min_tick_time),
            parallel=parallel,
            max_workers=max_workers,
            governor=governor,
        )
        self._worker.start()

    def __enter__(self) -> ModelManager:
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()

    @property
    def is_running(self) -> bool:
        return not self._closed and self._worker.is_alive()

    def _send(self, command: Command) -> None:
        # Holding the lock keeps every accepted command ahead of Exit in the queue
        with self._close_lock:
            if not self.is_running:
                raise ChannelClosedError(f"Model manager is not running, cannot send {type(command).__name__}.")
            self._commands.put(command)

    def add_model(self, name: str, model: Model) -> None:
        if not isinstance(model, Model):
            raise TypeError(f"Expected a Model, got {type(model).__name__}.")
        self._send(AddModel(name, model))

    def remove_model(self, name: str) -> None:
        self._send(RemoveModel(name))

    def restart_model(self, name: str) -> None:
        self._send(RestartModel(name))

    def start_comparison(self, first: str, second: str) -> None:
        """
        Start tracking the divergence of two models. Both are restarted.

        Unknown names and grids of different size are reported in the errors
        of the next snapshot; no comparison is created then.
        """
        self._send(StartComparison(first, second))

    def stop_comparison(self, first: str, second: str) -> None:
        self._send(StopComparison(first, second))

    def set_min_tick_time(self, duration: float | timedelta) -> None:
        self._send(SetMinTickTime(to_seconds(duration)))

    def add_with_reference(self, name: str, model: Model, reference: Model) -> str:
        """
        Register a model together with a reference (e.g. exact) solution and
        compare the two.

        Returns:
            Name under which the reference was registered.
        """
        reference_name = f"{name}{REFERENCE_SUFFIX}"
        self.add_model(name, model)
        self.add_model(reference_name, reference)
        self.start_comparison(name, reference_name)
        return reference_name

    def get_snapshot(self) -> Snapshot:
        """
        Block until the worker's next tick and return a copy of its state.

        Raises:
            ChannelClosedError: The worker stopped before replying.
        """
        request = RequestSnapshot()
        self._send(request)
        while True:
            try:
                return request.reply.get(timeout=REPLY_POLL_INTERVAL)
            except queue.Empty:
                if not self._worker.is_alive():
                    raise ChannelClosedError("Model manager stopped before answering the snapshot request.")

    def close(self) -> None:
        """Stop the worker after its current tick and wait for it."""
        with self._close_lock:
            if self._closed:
                return
            if self._worker.is_alive():
                self._commands.put(Exit())
            self._closed = True

        self._worker.join(timeout=JOIN_TIMEOUT)
        if self._worker.is_alive():
            logger.error(f"Model manager did not stop within {JOIN_TIMEOUT} s.")
