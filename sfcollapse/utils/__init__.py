"""
Utilities module for sfcollapse.

This module provides the logging setup shared by the solvers, the
diagnostics and the command-line driver.
"""

from .logging_config import (
    PerformanceLogger,
    PhysicsLogger,
    SFLoggerMixin,
    configure_logging,
    get_logger,
    performance_logger,
    physics_logger,
    setup_from_environment,
)

__all__ = [
    "PerformanceLogger",
    "PhysicsLogger",
    "SFLoggerMixin",
    "configure_logging",
    "get_logger",
    "performance_logger",
    "physics_logger",
    "setup_from_environment",
]
