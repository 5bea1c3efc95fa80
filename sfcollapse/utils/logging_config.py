"""
Centralized logging configuration for sfcollapse.

This module provides structured logging setup for evolution runs, with
dedicated channels for solver progress, physics diagnostics (Newton
convergence, lapse rescaling, mass function) and performance timing.
"""

import logging
import logging.config
import logging.handlers
import os
from pathlib import Path
from typing import Any

import structlog


class SFLoggerMixin:
    """Mixin class to add logger to any class."""

    @property
    def logger(self) -> logging.Logger:
        """Get logger for this class."""
        return get_logger(self.__class__.__name__)


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance with the given name.

    Args:
        name: Logger name (typically module or class name)

    Returns:
        Configured logger instance
    """
    return logging.getLogger(f"sfcollapse.{name}")


def configure_logging(
    level: str = "INFO",
    format_type: str = "console",
    log_file: str | Path | None = None,
    enable_performance: bool = False,
    enable_solver_logging: bool = False,
    enable_physics_validation: bool = False,
    enable_debug_mode: bool = False,
) -> None:
    """
    Configure logging for the sfcollapse package.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_type: Format type ("console", "json", "structured")
        log_file: Optional file path for file logging
        enable_performance: Enable timing of solver calls
        enable_solver_logging: Enable per-step solver logging
        enable_physics_validation: Enable convergence and mass diagnostics logging
        enable_debug_mode: Enable comprehensive debug logging
    """
    level = level.upper()
    if log_file is not None:
        log_file = Path(log_file)

    config: dict[str, Any] = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "console": {
                "format": "%(asctime)s | %(name)-24s | %(levelname)-8s | %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
            "detailed": {
                "format": (
                    "%(asctime)s | %(name)-24s | %(levelname)-8s | "
                    "%(filename)s:%(lineno)d | %(funcName)s | %(message)s"
                ),
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
            "json": {
                "format": (
                    '{"time": "%(asctime)s", "logger": "%(name)s", '
                    '"level": "%(levelname)s", "message": "%(message)s"}'
                ),
                "datefmt": "%Y-%m-%dT%H:%M:%S",
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": level,
                "formatter": format_type if format_type in ("console", "json") else "detailed",
                "stream": "ext://sys.stdout",
            },
        },
        "loggers": {
            "sfcollapse": {
                "level": level,
                "handlers": ["console"],
                "propagate": False,
            },
            # Silence noisy third-party loggers
            "scipy": {"level": "WARNING"},
        },
        "root": {
            "level": "WARNING",
            "handlers": ["console"],
        },
    }

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        config["handlers"]["file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "level": level,
            "formatter": "detailed",
            "filename": str(log_file),
            "maxBytes": 10 * 1024 * 1024,  # 10MB
            "backupCount": 5,
        }
        config["loggers"]["sfcollapse"]["handlers"].append("file")

    if enable_performance:
        config["loggers"]["sfcollapse.performance"] = {
            "level": "DEBUG",
            "handlers": config["loggers"]["sfcollapse"]["handlers"].copy(),
            "propagate": False,
        }

    if enable_solver_logging:
        solver_loggers = [
            "sfcollapse.solvers",
            "sfcollapse.solvers.finite_difference",
            "sfcollapse.solvers.boundary",
            "sfcollapse.solvers.evolution",
        ]
        for solver_logger in solver_loggers:
            config["loggers"][solver_logger] = {
                "level": "DEBUG" if enable_debug_mode else "INFO",
                "handlers": config["loggers"]["sfcollapse"]["handlers"].copy(),
                "propagate": False,
            }

    if enable_physics_validation:
        physics_loggers = [
            "sfcollapse.physics",
            "sfcollapse.equations",
            "sfcollapse.equations.constraints",
            "sfcollapse.equations.gauge",
        ]
        for physics_logger_name in physics_loggers:
            config["loggers"][physics_logger_name] = {
                "level": "DEBUG" if enable_debug_mode else "INFO",
                "handlers": config["loggers"]["sfcollapse"]["handlers"].copy(),
                "propagate": False,
            }

    if enable_debug_mode:
        config["loggers"]["sfcollapse"]["level"] = "DEBUG"
        for subsystem in ["core", "config", "cli"]:
            config["loggers"][f"sfcollapse.{subsystem}"] = {
                "level": "DEBUG",
                "handlers": config["loggers"]["sfcollapse"]["handlers"].copy(),
                "propagate": False,
            }

    logging.config.dictConfig(config)

    if format_type == "structured":
        _configure_structlog(level)


def _configure_structlog(level: str) -> None:
    """Configure structlog for structured logging."""
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer()
            if level == "DEBUG"
            else structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(getattr(logging, level)),
        logger_factory=structlog.PrintLoggerFactory(),
        context_class=dict,
        cache_logger_on_first_use=True,
    )


def setup_from_environment() -> None:
    """
    Setup logging configuration from environment variables.

    Environment Variables:
        SFCOLLAPSE_LOG_LEVEL: Log level (default: INFO)
        SFCOLLAPSE_LOG_FORMAT: Format type (default: console)
        SFCOLLAPSE_LOG_FILE: Optional log file path
        SFCOLLAPSE_LOG_PERFORMANCE: Enable performance logging (default: False)
        SFCOLLAPSE_LOG_SOLVERS: Enable solver logging (default: False)
        SFCOLLAPSE_LOG_PHYSICS: Enable physics diagnostics logging (default: False)
        SFCOLLAPSE_LOG_DEBUG: Enable comprehensive debug mode (default: False)
    """
    level = os.getenv("SFCOLLAPSE_LOG_LEVEL", "INFO")
    format_type = os.getenv("SFCOLLAPSE_LOG_FORMAT", "console")
    log_file_str = os.getenv("SFCOLLAPSE_LOG_FILE")
    enable_performance = os.getenv("SFCOLLAPSE_LOG_PERFORMANCE", "false").lower() == "true"
    enable_solver_logging = os.getenv("SFCOLLAPSE_LOG_SOLVERS", "false").lower() == "true"
    enable_physics_validation = os.getenv("SFCOLLAPSE_LOG_PHYSICS", "false").lower() == "true"
    enable_debug_mode = os.getenv("SFCOLLAPSE_LOG_DEBUG", "false").lower() == "true"

    log_file = Path(log_file_str) if log_file_str else None

    configure_logging(
        level=level,
        format_type=format_type,
        log_file=log_file,
        enable_performance=enable_performance,
        enable_solver_logging=enable_solver_logging,
        enable_physics_validation=enable_physics_validation,
        enable_debug_mode=enable_debug_mode,
    )


class PerformanceLogger:
    """Logger for performance metrics and timing."""

    def __init__(self, name: str = "performance"):
        self.logger = get_logger(name)

    def log_operation(self, operation: str, duration: float, **kwargs: Any) -> None:
        """Log a completed operation with timing."""
        self.logger.debug(
            f"Operation completed: {operation} ({duration:.3e} s)",
            extra={
                "operation": operation,
                "duration_seconds": duration,
                "performance_data": kwargs,
            },
        )


class PhysicsLogger:
    """Logger for numerical convergence and physical diagnostics."""

    def __init__(self, name: str = "physics"):
        self.logger = get_logger(name)

    def log_convergence(
        self, solver: str, iterations: int, residual: float, converged: bool, **kwargs: Any
    ) -> None:
        """Log numerical convergence information."""
        status = "CONVERGED" if converged else "FAILED"
        level = logging.DEBUG if converged else logging.WARNING
        location = "".join(f" | {key} = {value}" for key, value in kwargs.items())

        self.logger.log(
            level,
            f"Solver {status}: {solver}{location} | iter = {iterations} | |dA| = {residual:.3e}",
            extra={
                "solver": solver,
                "iterations": iterations,
                "residual": residual,
                "converged": converged,
            },
        )

    def log_lapse_rescaling(self, initial_kappa: float, final_kappa: float, inverted: bool) -> None:
        """Log the normalization factor applied to the lapse."""
        mode = "inverted" if inverted else "standard"
        self.logger.info(
            f"Lapse rescaled ({mode}): kappa {initial_kappa:.15e} -> {final_kappa:.15e}",
            extra={
                "initial_kappa": initial_kappa,
                "final_kappa": final_kappa,
                "inverted": inverted,
            },
        )

    def log_mass_diagnostics(
        self, step: int, time: float, mass: float, compactness: float, horizon: bool
    ) -> None:
        """Log mass function and compactness for the current slice."""
        level = logging.WARNING if horizon else logging.INFO
        self.logger.log(
            level,
            f"step {step} | t = {time:.6f} | M = {mass:.6e} | max 2m/r = {compactness:.6f}"
            + (" | apparent horizon forming" if horizon else ""),
            extra={
                "step": step,
                "time": time,
                "mass": mass,
                "compactness": compactness,
                "horizon_forming": horizon,
            },
        )


def set_log_level(level: str) -> None:
    """Adjust log level at runtime for all sfcollapse loggers."""
    level = level.upper()
    package_logger = logging.getLogger("sfcollapse")
    package_logger.setLevel(getattr(logging, level))

    for name in logging.getLogger().manager.loggerDict:
        if name.startswith("sfcollapse."):
            logger = logging.getLogger(name)
            if logger.handlers:
                logger.setLevel(getattr(logging, level))


def enable_performance_logging(enabled: bool = True) -> None:
    """Enable or disable performance logging at runtime."""
    perf_logger = logging.getLogger("sfcollapse.performance")
    if enabled:
        if not perf_logger.handlers:
            perf_logger.setLevel(logging.DEBUG)
            main_logger = logging.getLogger("sfcollapse")
            for handler in main_logger.handlers:
                perf_logger.addHandler(handler)
            perf_logger.propagate = False
        perf_logger.disabled = False
    else:
        perf_logger.disabled = True


def get_logging_status() -> dict[str, Any]:
    """Get current logging configuration status."""
    package_logger = logging.getLogger("sfcollapse")
    perf_logger = logging.getLogger("sfcollapse.performance")

    return {
        "main_level": logging.getLevelName(package_logger.level),
        "performance_enabled": not perf_logger.disabled and bool(perf_logger.handlers),
        "handlers_count": len(package_logger.handlers),
        "active_loggers": [
            name
            for name in logging.getLogger().manager.loggerDict
            if name.startswith("sfcollapse.")
            and logging.getLogger(name).handlers
            and not logging.getLogger(name).disabled
        ],
    }


# Global logger instances for convenience
performance_logger = PerformanceLogger()
physics_logger = PhysicsLogger()

if not logging.getLogger("sfcollapse").handlers:
    setup_from_environment()
