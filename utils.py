"""
Shared helpers for lazy collection envelopes.

Logging setup, the error taxonomy, the supplier adapter used by deferred
envelopes, the structural equality/hash folds and a small performance probe
for materialization.
"""

import gc
import logging
import sys
import time
import tracemalloc
from collections.abc import Collection, Mapping
from functools import reduce
from typing import Any, Callable, Dict, Iterable, TypeVar

from models import NegativeCountPolicy, get_settings

T = TypeVar("T")
A = TypeVar("A")

LOGGER_NAME = "envelope"
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - [%(funcName)s:%(lineno)d] - %(message)s'

logger = logging.getLogger(LOGGER_NAME)


def setup_logging(level=None) -> logging.Logger:
    """Attach a stdout handler to the envelope logger (idempotent)"""
    root = logging.getLogger(LOGGER_NAME)
    if not root.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)
    root.setLevel(level or get_settings().log_level)
    return root


# ---------- Errors ----------

class EnvelopeError(Exception):
    """Base class for envelope failures."""
    pass


class EvaluationError(EnvelopeError):
    """Raised when the deferred computation behind an envelope fails."""
    pass


class UnsupportedOperationError(EnvelopeError, TypeError):
    """Raised when mutating a collection that has no mutation API."""
    pass


# ---------- Scalars ----------

class Unchecked:
    """
    Evaluates a zero-argument supplier, turning any failure into an
    EvaluationError chained to the original exception.
    """

    def __init__(self, supplier: Callable[[], T]):
        self._supplier = supplier

    def value(self):
        try:
            return self._supplier()
        except EvaluationError:
            raise
        except Exception as exc:
            raise EvaluationError(f"Deferred computation failed: {exc!r}") from exc


def folded(seed: A, fn: Callable[[A, T], A], items: Iterable[T]) -> A:
    """Left fold of items into seed"""
    return reduce(fn, items, seed)


def resolve_count(num, operation: str) -> int:
    """Validate an element count against the negative-count policy"""
    count = int(num)
    if count < 0:
        if get_settings().negative_count is NegativeCountPolicy.CLAMP:
            logger.debug(f"{operation}: clamping negative count {count} to 0")
            return 0
        raise ValueError(f"{operation} count must be >= 0, got {count}")
    return count


# ---------- Structural equality and hash ----------

def _is_comparable_collection(other) -> bool:
    if isinstance(other, (str, bytes, bytearray, Mapping)):
        return False
    return isinstance(other, Collection)


def structural_equals(items: Collection, other: Any) -> bool:
    """
    Same size and pairwise-equal elements in iteration order.

    The other side is walked with its own iterator; running out of elements
    early, or any exception raised along the way, means "not equal".
    """
    if other is items:
        return True
    try:
        if not _is_comparable_collection(other):
            return False
        if len(items) != len(other):
            return False
        theirs = iter(other)
        for mine in items:
            if not mine == next(theirs):
                return False
        return True
    except Exception as exc:
        logger.debug(f"Equality against {type(other).__name__} failed: {exc!r}")
        return False


def _to_int32(value: int) -> int:
    value &= 0xFFFFFFFF
    return value - 0x100000000 if value & 0x80000000 else value


def _element_hash(element) -> int:
    # Nested collections compare structurally, so they must hash structurally
    if _is_comparable_collection(element):
        return structural_hash(element)
    return hash(element)


def structural_hash(items: Iterable) -> int:
    """
    Fold element hashes as hash = multiplier * hash + hash(element).

    Nested non-text collections are folded the same way; any other element
    must be hashable (a dict element raises TypeError).
    """
    settings = get_settings()
    multiplier = settings.hash_multiplier
    return folded(
        _to_int32(settings.hash_seed),
        lambda acc, element: _to_int32(multiplier * acc + _element_hash(element)),
        items,
    )


# ---------- Performance ----------

def measure_performance(operation_name: str, func, *args, **kwargs) -> Dict[str, Any]:
    """Run func under a timer and tracemalloc, returning the measurements"""
    tracemalloc.start()
    gc.collect()
    start_time = time.perf_counter()

    try:
        result = func(*args, **kwargs)
        execution_time_ms = (time.perf_counter() - start_time) * 1000
        _, peak = tracemalloc.get_traced_memory()
        info = {
            "operation": operation_name,
            "execution_time_ms": execution_time_ms,
            "memory_usage_mb": peak / 1024 / 1024,
            "success": True,
            "result": result,
            "result_size": len(result) if hasattr(result, "__len__") else None,
        }
        logger.debug(f"{operation_name}: {execution_time_ms:.2f} ms")
        return info

    except Exception as e:
        execution_time_ms = (time.perf_counter() - start_time) * 1000
        logger.warning(f"{operation_name} failed after {execution_time_ms:.2f} ms: {e}")
        raise

    finally:
        tracemalloc.stop()
