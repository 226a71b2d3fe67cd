import json

import pytest

from diplomatic_render import DamageLevel
from diplomatic_render.infrastructure.io import discover_edition_exports, load_edition, parse_leaf


def test_parse_leaf_reads_annotations_and_payload():
    leaf = parse_leaf(
        {
            "id": "g5",
            "index": 5,
            "kind": "g",
            "text": "mu",
            "whitespace": " ",
            "cert": "low",
            "damage": "medium",
            "unclear": True,
            "ignored": "value",
        }
    )
    assert leaf.id == "g5"
    assert leaf.damage is DamageLevel.OTHER
    assert leaf.unclear is True
    assert dict(leaf.payload) == {"id": "g5", "text": "mu", "whitespace": " ", "cert": "low"}


def test_parse_leaf_treats_missing_or_falsy_markers_as_unannotated():
    leaf = parse_leaf({"index": 0, "damage": "", "unclear": "yes"})
    assert leaf.id == "leaf-0"
    assert leaf.damage is None
    assert leaf.unclear is False


def test_parse_leaf_reads_nested_content():
    leaf = parse_leaf(
        {
            "id": "choice",
            "index": 1,
            "kind": "choice",
            "has_descendant_content": True,
            "children": [{"id": "sic", "index": 2, "kind": "sic", "end_index": 4}],
        }
    )
    assert leaf.has_descendant_content
    assert leaf.children[0].kind == "sic"
    assert leaf.last_index == 4


@pytest.mark.parametrize("item", [{"id": "x"}, {"id": "x", "index": "3"}, {"id": "x", "index": True}, ["x"]])
def test_parse_leaf_requires_integer_index(item):
    with pytest.raises(ValueError):
        parse_leaf(item)


def test_load_edition_builds_layout(tmp_path):
    path = tmp_path / "tablet.json"
    payload = {
        "surfaces": [
            {"columns": [{"lines": [{"id": "l1", "n": "1", "leaves": [{"index": 0}], "notes": ["", "note"]}]}]},
            {"columns": [{"lines": []}, {"lines": [{"id": "l2"}]}]},
        ]
    }
    path.write_text(json.dumps(payload), encoding="utf-8")
    edition = load_edition(path)
    assert edition.title == "tablet"
    assert [len(surface.columns) for surface in edition.surfaces] == [1, 2]
    assert [line.id for line in edition.lines()] == ["l1", "l2"]
    assert edition.lines()[0].notes == ("note",)
    assert edition.lines()[1].leaves == ()


def test_load_edition_rejects_non_object(tmp_path):
    path = tmp_path / "list.json"
    path.write_text("[]", encoding="utf-8")
    with pytest.raises(ValueError):
        load_edition(path)


def test_discover_edition_exports_sorts_json_files(tmp_path):
    (tmp_path / "b.json").write_text("{}", encoding="utf-8")
    (tmp_path / "A.json").write_text("{}", encoding="utf-8")
    (tmp_path / "notes.txt").write_text("", encoding="utf-8")
    assert [path.name for path in discover_edition_exports(tmp_path)] == ["A.json", "b.json"]
    assert discover_edition_exports(tmp_path / "missing") == []


def test_discover_edition_exports_skips_pipeline_artifacts(tmp_path):
    for name in ("tablet.json", "run_manifest.json", "edition_hashes.json", "render_gate_report.json", "tablet.tree.json"):
        (tmp_path / name).write_text("{}", encoding="utf-8")
    assert [path.name for path in discover_edition_exports(tmp_path)] == ["tablet.json"]
