import pytest

from diplomatic_render import (
    Container,
    DamageLevel,
    Dimension,
    Leaf,
    LeafNode,
    Line,
    LineIndex,
    PartitionMismatchError,
    build_line_markup,
    tree_to_dict,
)
from diplomatic_render.use_cases.services.markup_tree_service import MarkupTreeService

LOW = DamageLevel.LOW
OTHER = DamageLevel.OTHER


def _line(damage, unclear, line_id="l1"):
    leaves = tuple(
        Leaf(id=f"s{idx}", index=idx, damage=level, unclear=flag, payload={"text": chr(ord("a") + idx)})
        for idx, (level, flag) in enumerate(zip(damage, unclear))
    )
    return Line(id=line_id, n="1", leaves=leaves)


def test_worked_scenario_tree_shape():
    line = _line(
        [None, LOW, LOW, None, OTHER, None],
        [False, False, True, True, True, False],
    )
    markup = build_line_markup(line)
    assert markup.steps == 4
    assert markup.splits == 1
    assert markup.leaf_count == 6
    assert tree_to_dict(markup)["children"] == [
        {"leaf": "s0", "index": 0},
        {
            "dimension": "damage",
            "label": "low",
            "open": "⸢",
            "close": "⸣",
            "children": [
                {"leaf": "s1", "index": 1},
                {
                    "dimension": "unclear",
                    "label": True,
                    "open": "(",
                    "close": None,
                    "children": [{"leaf": "s2", "index": 2}],
                },
            ],
        },
        {
            "dimension": "unclear",
            "label": True,
            "open": None,
            "close": ")",
            "children": [
                {"leaf": "s3", "index": 3},
                {
                    "dimension": "damage",
                    "label": "other",
                    "open": "[",
                    "close": "]",
                    "children": [{"leaf": "s4", "index": 4}],
                },
            ],
        },
        {"leaf": "s5", "index": 5},
    ]


def test_containers_are_always_properly_nested():
    line = _line(
        [LOW, LOW, LOW, OTHER, OTHER, None, LOW],
        [True, False, True, True, False, True, True],
    )
    markup = build_line_markup(line)

    def check(node, ancestors):
        if isinstance(node, LeafNode):
            for ancestor in ancestors:
                assert ancestor.dimension.label_of(node.leaf) == ancestor.label
            return
        assert all(ancestor.dimension is not node.dimension for ancestor in ancestors)
        for child in node.children:
            check(child, ancestors + [node])

    for node in markup.children:
        check(node, [])


def test_leaf_order_is_preserved_in_the_tree():
    line = _line(
        [OTHER, None, OTHER, OTHER, LOW, LOW, None],
        [False, True, True, False, True, True, True],
    )
    markup = build_line_markup(line)

    def flatten(nodes):
        for node in nodes:
            if isinstance(node, LeafNode):
                yield node.leaf
            else:
                yield from flatten(node.children)

    assert list(flatten(markup.children)) == list(line.leaves)


def test_split_damage_span_keeps_one_pair_of_delimiters():
    line = _line([LOW, LOW, LOW, LOW], [False, True, True, False])
    markup = build_line_markup(line)
    assert len(markup.children) == 1
    outer = markup.children[0]
    assert isinstance(outer, Container)
    assert outer.dimension is Dimension.DAMAGE
    assert (outer.open_delimiter, outer.close_delimiter) == ("⸢", "⸣")
    inner = [child for child in outer.children if isinstance(child, Container)]
    assert [(node.open_delimiter, node.close_delimiter) for node in inner] == [("(", ")")]


def test_empty_line_yields_empty_tree():
    markup = build_line_markup(Line(id="empty", n="3", leaves=()))
    assert markup.children == ()
    assert markup.steps == 0
    assert markup.leaf_count == 0


def test_leaf_renderer_runs_once_per_leaf_in_order():
    calls = []

    def renderer(leaf):
        calls.append(leaf.index)
        return None

    line = _line([None, LOW, LOW, None], [True, True, False, False])
    markup = MarkupTreeService(leaf_renderer=renderer).build_line(line)
    assert calls == [0, 1, 2, 3]
    assert markup.leaf_count == 4


def test_explicit_oracle_is_used_for_adjacency():
    line = _line([LOW, LOW], [False, False])
    # The enclosing line continues the damaged span on both sides.
    oracle = LineIndex.from_leaves(
        "l1",
        list(line.leaves)
        + [Leaf(id="before", index=-1, damage=LOW), Leaf(id="after", index=2, damage=LOW)],
    )
    markup = build_line_markup(line, oracle)
    outer = markup.children[0]
    assert (outer.open_delimiter, outer.close_delimiter) == (None, None)


def test_non_increasing_indices_are_rejected():
    leaves = (Leaf(id="a", index=2), Leaf(id="b", index=1))
    with pytest.raises(PartitionMismatchError):
        build_line_markup(Line(id="bad", n="1", leaves=leaves))


def _containers(nodes):
    for node in nodes:
        if isinstance(node, Container):
            yield node
            yield from _containers(node.children)


def test_damage_run_around_a_sign_with_descendants_draws_one_pair():
    corr = Leaf(id="corr", index=3, kind="corr")
    leaves = (
        Leaf(id="x", index=0, unclear=True),
        Leaf(id="a", index=1, damage=OTHER, unclear=True),
        Leaf(id="p", index=2, damage=OTHER, unclear=True, kind="seg", children=(corr,)),
        Leaf(id="c", index=4, damage=OTHER),
    )
    markup = build_line_markup(Line(id="l1", n="1", leaves=leaves))
    damage = [node for node in _containers(markup.children) if node.dimension is Dimension.DAMAGE]
    opens = sum(1 for node in damage if node.open_delimiter)
    closes = sum(1 for node in damage if node.close_delimiter)
    assert opens == closes == 1


def test_annotated_descendants_are_decorated_inside_their_parent():
    child = Leaf(id="q", index=6, damage=LOW, payload={"text": "q"})
    seg = Leaf(id="seg", index=5, kind="seg", children=(child,))
    after = Leaf(id="r", index=7, damage=LOW, payload={"text": "r"})
    markup = build_line_markup(Line(id="l1", n="1", leaves=(seg, after)))

    seg_content = markup.children[0].content
    assert seg_content.css_class == "seg"
    decoration = seg_content.children[0]
    assert decoration.css_class == "damage"
    assert [(item.css_class, item.text) for item in decoration.children] == [
        ("tei", "⸢"),
        ("g", "q"),
        ("tei", "⸣"),
    ]
    outer = markup.children[1]
    assert (outer.open_delimiter, outer.close_delimiter) == ("⸢", "⸣")


def test_descendant_runs_share_one_pair_of_delimiters():
    children = (
        Leaf(id="s1", index=2, unclear=True, payload={"text": "a"}),
        Leaf(id="s2", index=3, unclear=True, payload={"text": "b"}),
    )
    choice = Leaf(id="choice", index=1, unclear=True, kind="choice", children=children)
    markup = build_line_markup(Line(id="l1", n="1", leaves=(choice,)))

    holder = markup.children[0]
    # The single sign defers to its decorated children.
    assert (holder.open_delimiter, holder.close_delimiter) == (None, None)
    decoration = holder.children[0].content.children[0]
    assert decoration.css_class == "unclear"
    assert [item.text for item in decoration.children] == ["(", "a", "b", ")"]
