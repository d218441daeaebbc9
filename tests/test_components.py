import math

import pytest

from spnet.circuits.core import COMPONENT_TYPES, ParallelGroup, Resistor, SeriesGroup
from spnet.errors import CircuitValidationError


@pytest.mark.parametrize("value", [0, 0.0, -1.0, -1e-12])
def test_resistor_rejects_non_positive_values(value) -> None:
    with pytest.raises(CircuitValidationError, match="positive"):
        Resistor("R1", value)


@pytest.mark.parametrize("value", [float("nan"), float("inf"), "ten", None])
def test_resistor_rejects_unusable_values(value) -> None:
    with pytest.raises(CircuitValidationError):
        Resistor("R1", value)


def test_component_ids_are_unique() -> None:
    ids = {Resistor(f"R{i}", 1.0).id for i in range(200)}
    ids.add(SeriesGroup("S").id)
    ids.add(ParallelGroup("P").id)
    assert len(ids) == 202


def test_explicit_id_is_kept() -> None:
    resistor = Resistor("R1", 5.0, node_id="custom")
    assert resistor.id == "custom"


def test_series_and_parallel_resistance() -> None:
    series = SeriesGroup("S", [Resistor("A", 10.0), Resistor("B", 15.0)])
    parallel = ParallelGroup("P", [Resistor("A", 10.0), Resistor("B", 15.0)])
    assert series.resistance() == pytest.approx(25.0)
    assert parallel.resistance() == pytest.approx(6.0)


def test_empty_groups_have_zero_resistance() -> None:
    assert SeriesGroup("S").resistance() == 0.0
    assert ParallelGroup("P").resistance() == 0.0


def test_parallel_skips_zero_resistance_branches() -> None:
    group = ParallelGroup("P", [Resistor("A", 30.0), SeriesGroup("empty"), ParallelGroup("also empty")])
    assert group.resistance() == pytest.approx(30.0)


def test_group_resistance_tracks_children() -> None:
    group = SeriesGroup("S", [Resistor("A", 1.0)])
    assert group.resistance() == pytest.approx(1.0)
    group.add(Resistor("B", 2.0))
    assert group.resistance() == pytest.approx(3.0)
    group.children.pop(0)
    assert group.resistance() == pytest.approx(2.0)


def test_assign_requires_exactly_one_quantity() -> None:
    resistor = Resistor("R", 10.0)
    with pytest.raises(ValueError, match="Exactly one"):
        resistor.assign()
    with pytest.raises(ValueError, match="Exactly one"):
        resistor.assign(voltage=1.0, current=1.0)


def test_resistor_assign_voltage_and_current() -> None:
    resistor = Resistor("R", 4.0)
    resistor.assign(voltage=8.0)
    assert resistor.current_a == pytest.approx(2.0)
    assert resistor.power_w == pytest.approx(16.0)

    resistor.assign(current=0.5)
    assert resistor.voltage_v == pytest.approx(2.0)
    assert resistor.power_w == pytest.approx(1.0)


def test_series_group_propagates_current() -> None:
    group = SeriesGroup("S", [Resistor("A", 10.0), Resistor("B", 30.0)])
    group.assign(voltage=8.0)
    assert group.current_a == pytest.approx(0.2)
    assert [child.current_a for child in group.children] == [group.current_a, group.current_a]
    assert [child.voltage_v for child in group.children] == pytest.approx([2.0, 6.0])


def test_parallel_group_propagates_voltage() -> None:
    group = ParallelGroup("P", [Resistor("A", 10.0), Resistor("B", 40.0)])
    group.assign(current=1.0)
    assert group.voltage_v == pytest.approx(8.0)
    assert [child.voltage_v for child in group.children] == [group.voltage_v, group.voltage_v]
    assert [child.current_a for child in group.children] == pytest.approx([0.8, 0.2])


def test_empty_parallel_group_draws_no_current() -> None:
    group = ParallelGroup("P")
    group.assign(voltage=12.0)
    assert group.resistance_ohms == 0.0
    assert group.current_a == 0.0
    assert group.power_w == 0.0
    assert math.isfinite(group.current_a)


def test_zero_voltage_solve_is_well_defined() -> None:
    group = SeriesGroup("S", [Resistor("A", 5.0), ParallelGroup("P")])
    group.assign(voltage=0.0)
    assert group.current_a == 0.0
    assert all(child.power_w == 0.0 for child in group.children)


def test_resistor_row_formatting() -> None:
    resistor = Resistor("R7", 3.0)
    resistor.assign(voltage=1.0)
    assert resistor.collect_rows() == [
        {
            "Component": "R7",
            "Resistance (Ω)": "3.00",
            "Voltage (V)": "1.00",
            "Current (A)": "0.333",
            "Power (W)": "0.33",
        }
    ]


def test_group_rows_are_depth_first_leaves_only(divider_tree) -> None:
    rows = divider_tree.collect_rows()
    assert [row["Component"] for row in rows] == ["R1", "R2", "R3"]


def test_resistor_narrative() -> None:
    narrative = Resistor("R1", 12.346).step_narrative()
    assert narrative.steps == []
    assert narrative.resistance == pytest.approx(12.346)
    assert narrative.description == "Resistor 'R1' (12.35 Ω)"


def test_series_narrative_text() -> None:
    group = SeriesGroup("S", [Resistor("A", 10.0), Resistor("B", 2.5)])
    narrative = group.step_narrative()
    assert narrative.steps == [
        "Resolve 'S' (Series).\n"
        "  Components: Resistor 'A' (10.00 Ω), Resistor 'B' (2.50 Ω).\n"
        "  Calculation: R_eq = 10.00 + 2.50 = 12.50 Ω."
    ]
    assert narrative.description == "'S' (now 12.50 Ω)"


def test_parallel_narrative_text(divider_tree) -> None:
    parallel = divider_tree.children[1]
    narrative = parallel.step_narrative()
    assert narrative.steps == [
        "Resolve 'P1' (Parallel).\n"
        "  Components: Resistor 'R2' (20.00 Ω), Resistor 'R3' (20.00 Ω).\n"
        "  Calculation: 1/R_eq = 1/20.00 + 1/20.00 = 0.1000 S.\n"
        "  Therefore: R_eq = 1 / 0.1000 = 10.00 Ω."
    ]
    assert narrative.description == "'P1' (now 10.00 Ω)"


def test_nested_narrative_orders_children_first(divider_tree) -> None:
    narrative = divider_tree.step_narrative()
    assert len(narrative.steps) == 2
    assert narrative.steps[0].startswith("Resolve 'P1' (Parallel).")
    assert narrative.steps[1].startswith("Resolve 'Main' (Series).")
    assert "'P1' (now 10.00 Ω)" in narrative.steps[1]
    assert narrative.resistance == pytest.approx(20.0)


def test_empty_group_narrative_has_no_steps() -> None:
    narrative = ParallelGroup("P").step_narrative()
    assert narrative.steps == []
    assert narrative.resistance == 0.0
    assert narrative.description == "'P' (now 0.00 Ω)"


def test_component_types_registry() -> None:
    assert set(COMPONENT_TYPES) == {"Resistor", "SeriesGroup", "ParallelGroup"}
