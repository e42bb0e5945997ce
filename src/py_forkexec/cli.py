"""Command-line entry point for the trace simulator.

Usage::

    py-forkexec trace.txt vector_table.txt device_table.txt external_files.txt

The CLI is the thin I/O wrapper around ``Simulator``: it loads the
machine tables and the initial trace, runs the simulation, and writes
``execution.txt`` and ``system_status.txt``.  Program traces for EXEC
are read from ``<name>.txt`` in the ``--programs`` directory, which
defaults to the directory of the initial trace.

Exit status is 0 whenever the simulation ran, even if some branches
stopped with an error (those show up in the status log).  Only an
unreadable configuration or initial trace exits with 1.
"""

from __future__ import annotations

import argparse
import random
import sys
from pathlib import Path

from py_forkexec.config import MachineConfig, load_machine_config
from py_forkexec.errors import ConfigError, TraceLoadError
from py_forkexec.logging import LogLevel
from py_forkexec.output import write_results
from py_forkexec.simulator import Simulator
from py_forkexec.sources import DirectoryTraceSource, read_trace_file


def add_machine_arguments(parser: argparse.ArgumentParser) -> None:
    """Add the three machine-table arguments shared with the web app."""
    parser.add_argument("vector_table", type=Path, help="interrupt vector table")
    parser.add_argument("device_table", type=Path, help="ISR delay per device")
    parser.add_argument("external_files", type=Path, help="program names and sizes")


def load_config_from_args(args: argparse.Namespace) -> MachineConfig:
    """Load the machine configuration named on the command line."""
    return load_machine_config(
        vector_table=args.vector_table,
        device_table=args.device_table,
        external_files=args.external_files,
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for ``py-forkexec``."""
    parser = argparse.ArgumentParser(
        prog="py-forkexec",
        description="Simulate interrupt, fork, and exec handling for a trace.",
    )
    parser.add_argument("trace", type=Path, help="trace of the init process")
    add_machine_arguments(parser)
    parser.add_argument(
        "--programs",
        type=Path,
        default=None,
        help="directory holding <program>.txt traces (default: the trace's directory)",
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=Path(),
        help="where execution.txt and system_status.txt are written",
    )
    parser.add_argument("--seed", type=int, default=None, help="seed for the EXEC delays")
    parser.add_argument("--verbose", action="store_true", help="print the kernel log")
    return parser


def main(argv: list[str] | None = None) -> int:
    """Run a simulation from the command line.

    Args:
        argv: Arguments (defaults to ``sys.argv[1:]``).

    Returns:
        The process exit status.

    """
    args = build_parser().parse_args(argv)
    try:
        config = load_config_from_args(args)
        lines = read_trace_file(args.trace)
    except (ConfigError, TraceLoadError) as e:
        print(f"ERROR! {e}", file=sys.stderr)  # noqa: T201
        return 1

    print(config.describe_programs(), end="")  # noqa: T201

    programs = args.programs if args.programs is not None else args.trace.parent
    simulator = Simulator(
        config,
        trace_source=DirectoryTraceSource(programs),
        rng=random.Random(args.seed),  # noqa: S311
    )
    result = simulator.run(lines)
    execution, status = write_results(result, args.output_dir)

    for line in simulator.dmesg(min_level=LogLevel.ERROR):
        print(line, file=sys.stderr)  # noqa: T201
    if args.verbose:
        print("\n".join(simulator.dmesg()))  # noqa: T201

    print("\nSimulation complete!")  # noqa: T201
    print(f"Check {execution} and {status} for results.")  # noqa: T201
    return 0


if __name__ == "__main__":
    sys.exit(main())
