"""Command line entry point for solving series/parallel resistor trees."""

from __future__ import annotations

import argparse
from dataclasses import dataclass
import logging
from pathlib import Path
import sys
from typing import Optional

from spnet.circuits.checks import assert_conserved
from spnet.circuits.circuit import Circuit
from spnet.circuits.core import Component
from spnet.circuits.rows import read_rows_csv, write_rows_csv
from spnet.config import OutputPaths, load_config
from spnet.dsl import build_tree, format_tree
from spnet.editor import DEFAULT_SOURCE_VOLTAGE
from spnet.errors import (
    CircuitStructureError,
    CircuitValidationError,
    ConfigError,
    ConservationError,
    DSLParseError,
    DSLValidationError,
    StorageError,
)

logger = logging.getLogger(__name__)

_USER_ERRORS = (
    CircuitStructureError,
    CircuitValidationError,
    ConfigError,
    DSLParseError,
    DSLValidationError,
    StorageError,
    FileNotFoundError,
)

DEFAULT_TOLERANCE = 1e-9


@dataclass(frozen=True)
class SolveJob:
    root: Component
    source_voltage: float
    outputs: OutputPaths
    check: bool
    tolerance: float


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Solve series/parallel resistor networks.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    commands = parser.add_subparsers(dest="command", required=True)

    solve = commands.add_parser("solve", help="Solve a circuit and print its report and tutorial.")
    source = solve.add_mutually_exclusive_group(required=True)
    source.add_argument("--dsl", type=str, help="Circuit description, e.g. 'series(R(10),R(20))'.")
    source.add_argument("--csv", type=Path, help="Path to a row CSV file.")
    source.add_argument("--config", type=Path, help="Path to a YAML solve config.")
    solve.add_argument("--voltage", type=float, default=None, help="Source voltage in volts.")
    solve.add_argument("--report", type=Path, default=None, help="Write the report here instead of stdout.")
    solve.add_argument("--tutorial", type=Path, default=None, help="Write the tutorial here instead of stdout.")
    solve.add_argument("--export-csv", type=Path, default=None, help="Export the tree as row CSV.")
    solve.add_argument("--check", action="store_true", help="Verify conservation on the solved tree.")
    solve.add_argument("--tolerance", type=float, default=None, help="Tolerance for --check.")

    fmt = commands.add_parser("format", help="Print the DSL description of a row CSV file.")
    fmt.add_argument("--csv", type=Path, required=True, help="Path to a row CSV file.")
    return parser


def prepare_job(args: argparse.Namespace) -> SolveJob:
    """Merge command line options with an optional YAML config."""
    if args.config is not None:
        config = load_config(args.config)
        root = build_tree(config.circuit) if config.circuit is not None else read_rows_csv(config.rows)
        voltage = config.source_voltage
        outputs = config.outputs
        tolerance = config.check_tolerance
    else:
        root = build_tree(args.dsl) if args.dsl is not None else read_rows_csv(args.csv)
        voltage = DEFAULT_SOURCE_VOLTAGE
        outputs = OutputPaths()
        tolerance = None

    if args.voltage is not None:
        voltage = args.voltage
    outputs = OutputPaths(
        report=args.report or outputs.report,
        tutorial=args.tutorial or outputs.tutorial,
        rows=args.export_csv or outputs.rows,
    )
    check = args.check or tolerance is not None
    if args.tolerance is not None:
        tolerance = args.tolerance
    return SolveJob(
        root=root,
        source_voltage=voltage,
        outputs=outputs,
        check=check,
        tolerance=tolerance if tolerance is not None else DEFAULT_TOLERANCE,
    )


def run_solve(job: SolveJob) -> int:
    circuit = Circuit(source_voltage=job.source_voltage, root=job.root).solved()
    _emit(circuit.report(), job.outputs.report)
    _emit(circuit.tutorial(), job.outputs.tutorial)
    if job.outputs.rows is not None:
        write_rows_csv(job.outputs.rows, circuit.root)
        print(f"Rows: {job.outputs.rows}")
    if job.check:
        try:
            report = assert_conserved(circuit.root, tol=job.tolerance)
        except ConservationError as exc:
            print(f"conservation check failed: {exc}", file=sys.stderr)
            return 1
        logger.info("Conservation check passed for %d nodes", report.details["n_nodes"])
        print("Conservation check passed.")
    return 0


def _emit(text: str, path: Optional[Path]) -> None:
    if path is None:
        print(text)
        return
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
    except OSError as exc:
        logger.error("Failed to write %s: %s", path, exc)
        raise StorageError(f"Unable to write {path!s}") from exc
    print(f"Wrote {path}")


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    try:
        if args.command == "format":
            print(format_tree(read_rows_csv(args.csv)))
            return 0
        return run_solve(prepare_job(args))
    except _USER_ERRORS as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
