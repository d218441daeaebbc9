"""Conservation checks for solved component trees."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Tuple

import numpy as np

from spnet.circuits.core import Component
from spnet.circuits.tree import iter_nodes
from spnet.errors import ConservationError


@dataclass(frozen=True)
class ConservationReport:
    """Worst-case residuals of a solved tree.

    Attributes:
        ok: True when every residual is within tolerance.
        series_current: max |I_child - I_group| over series groups.
        parallel_voltage: max |V_child - V_group| over parallel groups.
        power_identity: max |P - V*I| over all nodes.
        energy_balance: |sum of leaf power - root power|.
        n_violations: number of individual comparisons outside tolerance.
        tol: tolerance used for the comparisons.
    """

    ok: bool
    series_current: float
    parallel_voltage: float
    power_identity: float
    energy_balance: float
    n_violations: int
    tol: float
    details: dict[str, Any] = field(default_factory=dict)


def _residual(actual: np.ndarray, expected: np.ndarray, tol: float) -> tuple[float, int]:
    if actual.size == 0:
        return 0.0, 0
    with np.errstate(invalid="ignore"):
        diff = np.abs(actual - expected)
        close = np.isclose(actual, expected, rtol=tol, atol=tol, equal_nan=False)
    worst = float(np.max(diff)) if np.all(np.isfinite(diff)) else float("inf")
    return worst, int(np.sum(~close))


def check_conservation(root: Component, tol: float = 1e-9) -> ConservationReport:
    """Compare the derived fields of a solved tree against the composition rules."""
    shared: Dict[str, Tuple[List[float], List[float]]] = {"current_a": ([], []), "voltage_v": ([], [])}
    nodes = list(iter_nodes(root))
    for node in nodes:
        if node.shared_field is None:
            continue
        child_values, group_values = shared[node.shared_field]
        for child in node.children:
            child_values.append(getattr(child, node.shared_field))
            group_values.append(getattr(node, node.shared_field))

    voltages = np.array([node.voltage_v for node in nodes], dtype=float)
    currents = np.array([node.current_a for node in nodes], dtype=float)
    powers = np.array([node.power_w for node in nodes], dtype=float)
    leaf_power = np.array([node.power_w for node in nodes if not node.holds_children], dtype=float)

    series_res, series_bad = _residual(*map(np.array, shared["current_a"]), tol)
    parallel_res, parallel_bad = _residual(*map(np.array, shared["voltage_v"]), tol)
    power_res, power_bad = _residual(powers, voltages * currents, tol)
    balance_res, balance_bad = _residual(np.array([leaf_power.sum()]), np.array([root.power_w]), tol)

    n_violations = series_bad + parallel_bad + power_bad + balance_bad
    return ConservationReport(
        ok=n_violations == 0,
        series_current=series_res,
        parallel_voltage=parallel_res,
        power_identity=power_res,
        energy_balance=balance_res,
        n_violations=n_violations,
        tol=float(tol),
        details={"n_nodes": len(nodes), "n_leaves": int(leaf_power.size)},
    )


def assert_conserved(root: Component, tol: float = 1e-9) -> ConservationReport:
    report = check_conservation(root, tol=tol)
    if not report.ok:
        raise ConservationError(
            f"Solved tree violates conservation ({report.n_violations} violation(s)): "
            f"series current {report.series_current:.3e}, parallel voltage {report.parallel_voltage:.3e}, "
            f"power {report.power_identity:.3e}, energy balance {report.energy_balance:.3e}."
        )
    return report
