import pytest

from spnet.circuits.core import ParallelGroup, Resistor, SeriesGroup
from spnet.circuits.rows import export_rows, import_rows
from spnet.circuits.tree import find, insert_child, iter_nodes, remove_child, snapshot
from spnet.errors import CircuitStructureError


def _labels(root):
    return [node.label for node in iter_nodes(root)]


def test_iter_nodes_is_pre_order(divider_tree) -> None:
    assert _labels(divider_tree) == ["Main", "R1", "P1", "R2", "R3"]


def test_find_returns_node_and_parent(divider_tree) -> None:
    block = divider_tree.children[1]
    r3 = block.children[1]
    assert find(divider_tree, divider_tree.id) == (divider_tree, None)
    node, parent = find(divider_tree, r3.id)
    assert node is r3
    assert parent is block
    assert find(divider_tree, "missing") is None


def test_insert_child_returns_new_tree(divider_tree) -> None:
    block = divider_tree.children[1]
    extra = Resistor("R4", 40.0)
    updated = insert_child(divider_tree, block.id, extra)

    assert _labels(updated) == ["Main", "R1", "P1", "R2", "R3", "R4"]
    assert _labels(divider_tree) == ["Main", "R1", "P1", "R2", "R3"]
    assert updated is not divider_tree
    assert find(updated, extra.id) is not None
    assert [node.id for node in iter_nodes(updated)][:5] == [node.id for node in iter_nodes(divider_tree)]


def test_insert_child_does_not_alias_the_inserted_node(divider_tree) -> None:
    extra = SeriesGroup("S")
    updated = insert_child(divider_tree, divider_tree.id, extra)
    extra.add(Resistor("late", 1.0))
    inserted, _ = find(updated, extra.id)
    assert inserted.children == []


def test_insert_under_unknown_parent_fails(divider_tree) -> None:
    with pytest.raises(CircuitStructureError, match="Unknown parent"):
        insert_child(divider_tree, "nope", Resistor("R9", 1.0))


def test_insert_under_resistor_fails(divider_tree) -> None:
    r1 = divider_tree.children[0]
    with pytest.raises(CircuitStructureError, match="cannot hold children"):
        insert_child(divider_tree, r1.id, Resistor("R9", 1.0))
    assert r1.children == []


def test_insert_existing_node_fails(divider_tree) -> None:
    r1 = divider_tree.children[0]
    block = divider_tree.children[1]
    with pytest.raises(CircuitStructureError, match="already in the tree"):
        insert_child(divider_tree, block.id, r1)


def test_remove_child_returns_new_tree(divider_tree) -> None:
    block = divider_tree.children[1]
    updated = remove_child(divider_tree, block.id)
    assert _labels(updated) == ["Main", "R1"]
    assert _labels(divider_tree) == ["Main", "R1", "P1", "R2", "R3"]


def test_remove_root_fails(divider_tree) -> None:
    with pytest.raises(CircuitStructureError, match="root"):
        remove_child(divider_tree, divider_tree.id)
    assert len(divider_tree.children) == 2


def test_remove_unknown_fails(divider_tree) -> None:
    with pytest.raises(CircuitStructureError, match="Unknown node"):
        remove_child(divider_tree, "missing")


def test_edits_keep_solved_state_of_untouched_nodes(divider_tree) -> None:
    divider_tree.assign(voltage=12.0)
    updated = insert_child(divider_tree, divider_tree.id, ParallelGroup("P2"))
    r1 = updated.children[0]
    assert r1.current_a == pytest.approx(0.6)


def test_snapshot_is_independent_copy(divider_tree) -> None:
    copy = snapshot(divider_tree)
    copy.children[1].children.pop()
    assert len(divider_tree.children[1].children) == 2
    assert [node.id for node in iter_nodes(copy)] == [node.id for node in iter_nodes(divider_tree)][:4]


def test_insert_rejects_node_shared_within_subtree(divider_tree) -> None:
    shared = Resistor("R9", 9.0)
    with pytest.raises(CircuitStructureError, match="more than once"):
        insert_child(divider_tree, divider_tree.id, SeriesGroup("S", [shared, shared]))
    assert len(divider_tree.children) == 2


def test_insert_rejects_duplicate_ids_within_subtree(divider_tree) -> None:
    twins = ParallelGroup("P", [Resistor("A", 1.0, node_id="twin"), Resistor("B", 2.0, node_id="twin")])
    with pytest.raises(CircuitStructureError, match="Duplicate ids in the inserted subtree: twin"):
        insert_child(divider_tree, divider_tree.id, twins)


def test_inserted_subtree_survives_row_round_trip(divider_tree) -> None:
    updated = insert_child(divider_tree, divider_tree.id, SeriesGroup("S", [Resistor("A", 1.0), Resistor("B", 2.0)]))
    rebuilt = import_rows(export_rows(updated))
    ids = [node.id for node in iter_nodes(rebuilt)]
    assert len(ids) == len(set(ids)) == 8
