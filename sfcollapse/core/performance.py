"""
Performance monitoring utilities for the evolution engine.

Solver entry points are wrapped with ``monitor_performance`` so that each
call is timed, accumulated per operation, and reported through the
performance logger.
"""

import functools
import time
from collections import defaultdict
from collections.abc import Callable, Generator
from contextlib import contextmanager
from typing import Any

import numpy as np

from ..utils.logging_config import performance_logger


class OperationProfiler:
    """Accumulates wall-clock timings per named operation."""

    def __init__(self) -> None:
        self.operation_times: dict[str, list[float]] = defaultdict(list)
        self.operation_counts: dict[str, int] = defaultdict(int)

    @contextmanager
    def profile_operation(
        self, operation_name: str, metadata: dict[str, Any] | None = None
    ) -> Generator[None, None, None]:
        """
        Context manager timing one operation.

        Args:
            operation_name: Name of the operation to profile
            metadata: Optional metadata forwarded to the performance logger
        """
        start_time = time.perf_counter()
        try:
            yield
        finally:
            elapsed = time.perf_counter() - start_time
            self.operation_times[operation_name].append(elapsed)
            self.operation_counts[operation_name] += 1
            performance_logger.log_operation(operation_name, elapsed, **(metadata or {}))

    def get_report(self) -> dict[str, dict[str, float]]:
        """Summary statistics per operation, slowest first."""
        report = {}
        for name, times in sorted(
            self.operation_times.items(), key=lambda item: sum(item[1]), reverse=True
        ):
            report[name] = {
                "count": self.operation_counts[name],
                "total_time": float(np.sum(times)),
                "mean_time": float(np.mean(times)),
                "max_time": float(np.max(times)),
            }
        return report

    def reset(self) -> None:
        self.operation_times.clear()
        self.operation_counts.clear()


_profiler = OperationProfiler()


def monitor_performance(operation_name: str) -> Callable[[Callable], Callable]:
    """
    Decorator for timing solver operations.

    Args:
        operation_name: Name to use for tracking this operation

    Returns:
        Decorator function
    """
    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            with _profiler.profile_operation(operation_name):
                return func(*args, **kwargs)
        return wrapper
    return decorator


def profile_operation(operation_name: str, metadata: dict[str, Any] | None = None):
    """Context manager form of ``monitor_performance``."""
    return _profiler.profile_operation(operation_name, metadata)


def performance_report() -> dict[str, dict[str, float]]:
    """Get current timing statistics."""
    return _profiler.get_report()


def reset_performance_stats() -> None:
    """Clear accumulated timing statistics."""
    _profiler.reset()
