from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from ..domain.models import Column, DamageLevel, Edition, Leaf, Line, Surface

LEAF_PAYLOAD_KEYS = ("text", "whitespace", "cert", "subtype", "name", "type")
ARTIFACT_NAMES = {"run_manifest.json", "edition_hashes.json", "render_gate_report.json"}
TREE_SUFFIX = ".tree.json"


def discover_edition_exports(input_dir: Path) -> list[Path]:
    if not input_dir.exists():
        return []
    # Artifacts of an earlier run may share the directory with the exports.
    paths = [
        path
        for path in input_dir.glob("*.json")
        if path.is_file() and path.name not in ARTIFACT_NAMES and not path.name.endswith(TREE_SUFFIX)
    ]
    return sorted(paths, key=lambda p: p.name.lower())


def read_json(path: Path) -> dict | list:
    with path.open("r", encoding="utf-8") as handle:
        return json.load(handle)


def write_json(path: Path, payload: dict | list) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as handle:
        json.dump(payload, handle, ensure_ascii=False, indent=2)


def write_jsonl(path: Path, rows: list[dict]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as handle:
        for row in rows:
            handle.write(json.dumps(row, ensure_ascii=False) + "\n")


def write_text(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


def load_edition(path: Path) -> Edition:
    payload = read_json(path)
    if not isinstance(payload, dict):
        raise ValueError(f"{path.name}: expected a JSON object at the top level")
    surfaces = payload.get("surfaces", [])
    if not isinstance(surfaces, list):
        raise ValueError(f"{path.name}: 'surfaces' must be a list")
    return Edition(
        title=str(payload.get("title") or path.stem),
        surfaces=tuple(_parse_surface(item, path) for item in surfaces),
        source_path=str(path.resolve()),
    )


def _parse_surface(item: Any, path: Path) -> Surface:
    if not isinstance(item, dict):
        raise ValueError(f"{path.name}: surface entries must be objects")
    return Surface(columns=tuple(_parse_column(column, path) for column in item.get("columns", []) or []))


def _parse_column(item: Any, path: Path) -> Column:
    if not isinstance(item, dict):
        raise ValueError(f"{path.name}: column entries must be objects")
    return Column(lines=tuple(_parse_line(line, path) for line in item.get("lines", []) or []))


def _parse_line(item: Any, path: Path) -> Line:
    if not isinstance(item, dict) or "id" not in item:
        raise ValueError(f"{path.name}: every line needs an 'id'")
    leaves = tuple(parse_leaf(leaf, path) for leaf in item.get("leaves", []) or [])
    notes = tuple(str(note) for note in item.get("notes", []) or [] if str(note).strip())
    return Line(id=str(item["id"]), n=str(item.get("n") or ""), leaves=leaves, notes=notes)


def parse_leaf(item: Any, path: Path | None = None) -> Leaf:
    source = path.name if path is not None else "<leaf>"
    if not isinstance(item, dict):
        raise ValueError(f"{source}: leaf entries must be objects")
    index = item.get("index")
    if not isinstance(index, int) or isinstance(index, bool):
        raise ValueError(f"{source}: leaf {item.get('id')!r} has no integer 'index'")
    payload = {key: item[key] for key in LEAF_PAYLOAD_KEYS if item.get(key) is not None}
    if item.get("id") is not None:
        payload["id"] = item["id"]
    end_index = item.get("end_index")
    return Leaf(
        id=str(item.get("id") or f"leaf-{index}"),
        index=index,
        damage=DamageLevel.from_marker(item.get("damage")),
        unclear=item.get("unclear") is True,
        kind=str(item.get("kind") or "g"),
        payload=payload,
        children=tuple(parse_leaf(child, path) for child in item.get("children", []) or []),
        end_index=end_index if isinstance(end_index, int) else None,
        descendant_flag=item.get("has_descendant_content") is True,
    )
