import pytest

from diplomatic_render import DELIMITERS, DamageLevel, Dimension, Leaf, LineIndex, PartitionMismatchError, Run
from diplomatic_render.use_cases.services.boundary_service import BoundaryService

LOW = DamageLevel.LOW
OTHER = DamageLevel.OTHER


def _leaf(index, damage=None, unclear=False, children=()):
    return Leaf(id=f"s{index}", index=index, damage=damage, unclear=unclear, children=tuple(children))


def _emitter(leaves, line_id="l1"):
    return BoundaryService(LineIndex.from_leaves(line_id, leaves), line_id)


def test_glyph_table_is_exact():
    assert DELIMITERS[(Dimension.DAMAGE, LOW)] == ("⸢", "⸣")
    assert DELIMITERS[(Dimension.DAMAGE, OTHER)] == ("[", "]")
    assert DELIMITERS[(Dimension.UNCLEAR, True)] == ("(", ")")


def test_isolated_run_draws_both_delimiters():
    leaves = [_leaf(0), _leaf(1, OTHER), _leaf(2, OTHER), _leaf(3)]
    run = Run(Dimension.DAMAGE, OTHER, 1, tuple(leaves[1:3]))
    assert _emitter(leaves).delimiters(run) == ("[", "]")


def test_run_at_line_edges_draws_delimiters_without_neighbours():
    leaves = [_leaf(0, unclear=True), _leaf(1, unclear=True)]
    run = Run(Dimension.UNCLEAR, True, 0, tuple(leaves))
    assert _emitter(leaves).delimiters(run) == ("(", ")")


def test_equal_neighbours_across_a_segment_boundary_suppress_delimiters():
    leaves = [_leaf(0, LOW), _leaf(1, LOW), _leaf(2, LOW)]
    emitter = _emitter(leaves)
    head = Run(Dimension.DAMAGE, LOW, 0, (leaves[0],))
    middle = Run(Dimension.DAMAGE, LOW, 1, (leaves[1],))
    tail = Run(Dimension.DAMAGE, LOW, 2, (leaves[2],))
    assert emitter.delimiters(head) == ("⸢", None)
    assert emitter.delimiters(middle) == (None, None)
    assert emitter.delimiters(tail) == (None, "⸣")


def test_different_damage_level_next_door_still_draws():
    leaves = [_leaf(0, LOW), _leaf(1, OTHER)]
    emitter = _emitter(leaves)
    assert emitter.delimiters(Run(Dimension.DAMAGE, LOW, 0, (leaves[0],))) == ("⸢", "⸣")
    assert emitter.delimiters(Run(Dimension.DAMAGE, OTHER, 1, (leaves[1],))) == ("[", "]")


def test_adjacency_follows_leaf_indices_not_array_positions():
    # Index 4 is missing from the line, so leaf 5 has no neighbour before it.
    leaves = [_leaf(3, LOW), _leaf(5, LOW)]
    emitter = _emitter(leaves)
    assert emitter.delimiters(Run(Dimension.DAMAGE, LOW, 1, (leaves[1],))) == ("⸢", "⸣")


def test_descendant_labels_do_not_stand_in_for_their_sign():
    child = _leaf(6, LOW)
    parent = Leaf(id="seg", index=5, damage=None, kind="seg", children=(child,))
    after = _leaf(7, LOW)
    leaves = [parent, after]
    emitter = _emitter(leaves)
    assert parent.last_index == 6
    # Index 6 resolves to the undamaged seg, so the run opens on its own.
    assert emitter.delimiters(Run(Dimension.DAMAGE, LOW, 1, (after,))) == ("⸢", "⸣")


def test_opening_lookup_resolves_descendants_to_their_sign():
    corr = Leaf(id="corr", index=3, damage=None, kind="corr")
    holder = Leaf(id="p", index=2, damage=OTHER, unclear=True, kind="seg", children=(corr,))
    tail = _leaf(4, OTHER)
    leaves = [_leaf(0, unclear=True), _leaf(1, OTHER, unclear=True), holder, tail]
    emitter = _emitter(leaves)
    head = Run(Dimension.DAMAGE, OTHER, 1, (leaves[1], holder))
    rest = Run(Dimension.DAMAGE, OTHER, 3, (tail,))
    assert emitter.delimiters(head) == ("[", None)
    assert emitter.delimiters(rest) == (None, "]")


def test_closing_lookup_skips_past_descendants():
    child = _leaf(2, None)
    parent = Leaf(id="seg", index=1, damage=OTHER, kind="seg", children=(child,))
    leaves = [_leaf(0, OTHER), parent, _leaf(3, OTHER)]
    emitter = _emitter(leaves)
    run = Run(Dimension.DAMAGE, OTHER, 0, tuple(leaves[:2]))
    assert emitter.delimiters(run) == ("[", None)


def test_single_leaf_with_descendant_content_draws_nothing():
    parent = Leaf(id="choice", index=0, unclear=True, kind="choice", children=(_leaf(1, unclear=True),))
    leaves = [parent]
    run = Run(Dimension.UNCLEAR, True, 0, (parent,))
    assert _emitter(leaves).delimiters(run) == (None, None)


def test_descendant_flag_without_children_also_suppresses():
    flagged = Leaf(id="part", index=0, damage=LOW, kind="part", descendant_flag=True)
    run = Run(Dimension.DAMAGE, LOW, 0, (flagged,))
    assert _emitter([flagged]).delimiters(run) == (None, None)


def test_unannotated_runs_never_draw():
    leaves = [_leaf(0)]
    emitter = _emitter(leaves)
    assert emitter.delimiters(Run(Dimension.DAMAGE, None, 0, tuple(leaves))) == (None, None)
    assert emitter.delimiters(Run(Dimension.UNCLEAR, False, 0, tuple(leaves))) == (None, None)


def test_line_index_is_scoped_to_its_line():
    index = LineIndex.from_leaves("l1", [_leaf(0, LOW)])
    index.add_line("l2", [_leaf(0, OTHER), _leaf(1, OTHER)])
    assert index("l1", 0).damage is LOW
    assert index("l1", 1) is None
    assert index("l2", 1).damage is OTHER
    assert len(index) == 3


def test_line_index_maps_descendant_indices_to_top_level_sign():
    grandchild = _leaf(3, OTHER)
    child = Leaf(id="sic", index=2, kind="sic", children=(grandchild,))
    parent = Leaf(id="choice", index=1, kind="choice", children=(child,))
    index = LineIndex.from_leaves("l1", [_leaf(0), parent])
    assert index("l1", 2) is parent
    assert index("l1", 3) is parent
    assert len(index) == 4


def test_line_index_rejects_duplicate_indices_within_a_sign():
    parent = Leaf(id="seg", index=0, kind="seg", children=(_leaf(0),))
    with pytest.raises(PartitionMismatchError):
        LineIndex.from_leaves("l1", [parent])


def test_line_index_rejects_duplicate_indices():
    with pytest.raises(PartitionMismatchError):
        LineIndex.from_leaves("l1", [_leaf(0), _leaf(0)])
