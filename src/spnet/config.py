"""YAML configuration for solve runs."""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from spnet.errors import ConfigError

logger = logging.getLogger(__name__)

TOP_LEVEL_KEYS = {"source_voltage", "circuit", "rows", "outputs", "check_tolerance"}
OUTPUT_KEYS = {"report", "tutorial", "rows"}


@dataclass(frozen=True)
class OutputPaths:
    report: Optional[Path] = None
    tutorial: Optional[Path] = None
    rows: Optional[Path] = None


@dataclass(frozen=True)
class SolveConfig:
    """Settings for a single solve run.

    Exactly one of ``circuit`` (DSL text) or ``rows`` (CSV path) is set.
    """

    source_voltage: float
    circuit: Optional[str] = None
    rows: Optional[Path] = None
    outputs: OutputPaths = field(default_factory=OutputPaths)
    check_tolerance: Optional[float] = None


def load_config(path: Path) -> SolveConfig:
    """Load and validate a solve configuration from YAML."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc
    logger.debug("Loaded config from %s", path)
    return parse_config(data or {}, base_dir=path.parent)


def parse_config(data: Dict[str, Any], base_dir: Path = Path(".")) -> SolveConfig:
    if not isinstance(data, dict):
        raise ConfigError("Config must be a mapping.")
    unknown = sorted(set(data) - TOP_LEVEL_KEYS)
    if unknown:
        raise ConfigError(f"Unknown config keys: {', '.join(unknown)}.")

    if "source_voltage" not in data:
        raise ConfigError("Config must define source_voltage.")
    source_voltage = _number(data["source_voltage"], "source_voltage")

    circuit = data.get("circuit")
    rows = data.get("rows")
    if (circuit is None) == (rows is None):
        raise ConfigError("Config must define exactly one of 'circuit' or 'rows'.")
    if circuit is not None and not isinstance(circuit, str):
        raise ConfigError("'circuit' must be DSL text.")

    outputs = data.get("outputs") or {}
    if not isinstance(outputs, dict):
        raise ConfigError("'outputs' must be a mapping.")
    unknown_outputs = sorted(set(outputs) - OUTPUT_KEYS)
    if unknown_outputs:
        raise ConfigError(f"Unknown output keys: {', '.join(unknown_outputs)}.")

    tolerance = data.get("check_tolerance")
    if tolerance is not None:
        tolerance = _number(tolerance, "check_tolerance")
        if tolerance <= 0:
            raise ConfigError("check_tolerance must be positive.")

    return SolveConfig(
        source_voltage=source_voltage,
        circuit=circuit,
        rows=_resolve(rows, base_dir),
        outputs=OutputPaths(**{key: _resolve(value, base_dir) for key, value in outputs.items()}),
        check_tolerance=tolerance,
    )


def _number(value: Any, name: str) -> float:
    if isinstance(value, bool):
        raise ConfigError(f"{name} must be a number, got {value!r}.")
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"{name} must be a number, got {value!r}.") from exc


def _resolve(value: Any, base_dir: Path) -> Optional[Path]:
    if value is None:
        return None
    path = Path(str(value))
    return path if path.is_absolute() else base_dir / path
