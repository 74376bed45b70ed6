"""
Configuration & Defaults
========================
Central registry of the engine's global constants.

Exports:
    DEFAULT_MIN_TICK_TIME (float): Lower bound of one manager tick in seconds.
    RATE_WINDOW (float): Length of the throughput measurement window in seconds.
    REPLY_POLL_INTERVAL (float): How often a waiting caller re-checks the worker.
    JOIN_TIMEOUT (float): How long close() waits for the worker thread.
    REFERENCE_SUFFIX (str): Name suffix of an exact-solution companion model.
    MIN_NODE_COUNT (int): Smallest grid a model accepts (two boundaries + one interior).
    MAX_REPORTED_ERRORS (int): Capacity of the error backlog handed out with snapshots.
"""

DEFAULT_MIN_TICK_TIME: float = 0.01
RATE_WINDOW: float = 1.0

REPLY_POLL_INTERVAL: float = 0.1
JOIN_TIMEOUT: float = 5.0

REFERENCE_SUFFIX: str = " (exact)"

MIN_NODE_COUNT: int = 3

# Errors waiting for the next snapshot; older ones are dropped first
MAX_REPORTED_ERRORS: int = 100
