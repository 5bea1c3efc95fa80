"""
Command-line driver for scalar field collapse runs.

Usage:
    sfcollapse [--config run.json] [--num-points N] [--r-max R] ...
    python -m sfcollapse --help

Options given on the command line override the values read from
``--config``, which in turn override the SimulationConfig defaults.
"""

import argparse
import json
import sys
from dataclasses import replace
from typing import Any

from . import __version__
from .config import SimulationConfig
from .core.constants import COORDINATE_SYSTEMS, INITIAL_CONDITIONS, ConfigurationError
from .core.performance import performance_report, profile_operation
from .utils.logging_config import configure_logging, get_logger

logger = get_logger("cli")

# (flag, config field, type, help)
_OPTIONS: list[tuple[str, str, Any, str]] = [
    ("--num-points", "num_points", int, "number of radial grid points"),
    ("--dx", "dx", float, "computational grid spacing"),
    ("--r-max", "r_max", float, "outer radius of a spherical grid"),
    ("--sinh-width", "sinh_width", float, "compactification width W of the sinh grid"),
    ("--sinh-amplitude", "sinh_amplitude", float, "outer physical radius A of the sinh grid"),
    ("--dt", "dt", float, "time step (default: courant * min dr)"),
    ("--courant", "courant", float, "Courant factor used when --dt is omitted"),
    ("--amplitude", "amplitude", float, "pulse amplitude"),
    ("--width", "width", float, "pulse width"),
    ("--center", "center", float, "pulse center"),
    ("--second-amplitude", "second_amplitude", float, "amplitude of the second Gaussian"),
    ("--second-width", "second_width", float, "width of the second Gaussian"),
    ("--second-center", "second_center", float, "center of the second Gaussian"),
    ("--inner-edge", "inner_edge", float, "inner front of the tanh shell"),
    ("--outer-edge", "outer_edge", float, "outer front of the tanh shell"),
    ("--epsilon", "epsilon", int, "matter sign: 1 normal, -1 phantom"),
    ("--cosmological-constant", "cosmological_constant", float, "Lambda"),
    ("--rescale-every", "rescale_every", int, "rescale the lapse every this many steps (0 disables)"),
    ("--rescaling-log", "rescaling_log", str, "file receiving the lapse rescaling factors"),
    ("--newton-tolerance", "newton_tolerance", float, "Newton tolerance on |dA|"),
    ("--newton-max-iterations", "newton_max_iterations", int, "Newton iteration budget"),
    ("--steps", "num_steps", int, "number of time steps"),
    ("--diagnostics-every", "diagnostics_every", int, "log mass diagnostics every this many steps"),
]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sfcollapse",
        description="Evolve a self-gravitating massless scalar field in spherical symmetry.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--config", help="JSON file with SimulationConfig fields")
    parser.add_argument("--coordinate-system", dest="coordinate_system", choices=COORDINATE_SYSTEMS)
    parser.add_argument("--initial-condition", dest="initial_condition", choices=INITIAL_CONDITIONS)

    for flag, dest, kind, help_text in _OPTIONS:
        parser.add_argument(flag, dest=dest, type=kind, help=help_text)

    parser.add_argument(
        "--no-rescaling",
        dest="lapse_rescaling",
        action="store_false",
        default=None,
        help="disable lapse rescaling",
    )
    parser.add_argument(
        "--inverted-rescaling",
        dest="inverted_rescaling",
        action="store_true",
        default=None,
        help="use max(a/alpha) when rescaling (phantom fields only)",
    )
    parser.add_argument(
        "--stop-on-horizon",
        dest="stop_on_horizon",
        action="store_true",
        default=None,
        help="stop once 2m/r approaches 1",
    )

    parser.add_argument("--log-level", default="INFO", help="logging level")
    parser.add_argument(
        "--log-format", default="console", choices=["console", "detailed", "json", "structured"]
    )
    parser.add_argument("--log-file", help="also write logs to this file")
    parser.add_argument("--profile", action="store_true", help="report solver timings")
    parser.add_argument("--json", action="store_true", help="print the final summary as JSON")
    return parser


def config_from_args(args: argparse.Namespace) -> SimulationConfig:
    """Merge defaults, the optional JSON file and explicit command-line options."""
    config = SimulationConfig.from_json(args.config) if args.config else SimulationConfig()

    overrides = {
        name: getattr(args, name)
        for name in ["coordinate_system", "initial_condition", "lapse_rescaling",
                     "inverted_rescaling", "stop_on_horizon"]
        + [dest for _, dest, _, _ in _OPTIONS]
        if getattr(args, name) is not None
    }
    return replace(config, **overrides)


def format_summary(summary: dict[str, Any]) -> str:
    lines = ["Run summary:"]
    for key, value in summary.items():
        if isinstance(value, float):
            lines.append(f"  {key:<18} {value:.10e}")
        else:
            lines.append(f"  {key:<18} {value}")
    return "\n".join(lines)


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    configure_logging(
        level=args.log_level,
        format_type=args.log_format,
        log_file=args.log_file,
        enable_performance=args.profile,
    )

    try:
        config = config_from_args(args)
        engine = config.build_engine()
        logger.info(f"Starting run: {config.num_steps} steps on {engine.grid!r}")
        with profile_operation("simulation_run", {"num_steps": config.num_steps}):
            summary = engine.run(config.num_steps)
    except ConfigurationError as e:
        print(f"sfcollapse: configuration error: {e}", file=sys.stderr)
        return 1

    if args.json:
        print(json.dumps(summary, indent=2))
    else:
        print(format_summary(summary))

    if args.profile:
        print(json.dumps(performance_report(), indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
