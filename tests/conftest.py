import pytest

from spnet.circuits.core import ParallelGroup, Resistor, SeriesGroup


@pytest.fixture
def divider_tree() -> SeriesGroup:
    """R1 (10 Ω) in series with R2 || R3 (20 Ω each)."""
    return SeriesGroup(
        "Main",
        [
            Resistor("R1", 10.0),
            ParallelGroup("P1", [Resistor("R2", 20.0), Resistor("R3", 20.0)]),
        ],
    )
