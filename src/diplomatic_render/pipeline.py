from __future__ import annotations

import hashlib
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from .config import RenderConfig
from .domain.models import Dimension, EditionMarkup, LeafNode, LineMarkup, MarkupNode, RenderedContent
from .infrastructure.html_serializer import HtmlSerializer, tree_to_dict
from .infrastructure.ids import IdGenerator
from .infrastructure.io import TREE_SUFFIX, discover_edition_exports, load_edition, read_json, write_json, write_jsonl, write_text
from .use_cases.services.boundary_service import DELIMITERS
from .use_cases.services.edition_render_service import EditionRenderService
from .use_cases.services.incremental_cache_service import IncrementalCacheService

logger = logging.getLogger(__name__)

_OPEN_GLYPHS = {glyphs[0] for glyphs in DELIMITERS.values()}
_CLOSE_GLYPHS = {glyphs[1] for glyphs in DELIMITERS.values()}


def _sha1(value: str) -> str:
    return hashlib.sha1(value.encode("utf-8")).hexdigest()


def _count_leaf_nodes(nodes: tuple[MarkupNode, ...]) -> int:
    total = 0
    for node in nodes:
        if isinstance(node, LeafNode):
            total += 1
        else:
            total += _count_leaf_nodes(node.children)
    return total


def _delimiter_counts(nodes: tuple[MarkupNode, ...], counts: dict[str, dict[str, int]] | None = None) -> dict[str, dict[str, int]]:
    if counts is None:
        counts = {dimension.value: {"open": 0, "close": 0} for dimension in Dimension}
    for node in nodes:
        if isinstance(node, LeafNode):
            if node.content is not None:
                _content_delimiter_counts(node.content, counts)
            continue
        bucket = counts[node.dimension.value]
        if node.open_delimiter:
            bucket["open"] += 1
        if node.close_delimiter:
            bucket["close"] += 1
        _delimiter_counts(node.children, counts)
    return counts


def _content_delimiter_counts(content: RenderedContent, counts: dict[str, dict[str, int]]) -> None:
    # Decorated child runs render as a dimension span framed by tei glyph spans.
    bucket = counts.get(content.css_class)
    if bucket is not None and content.children:
        if content.children[0].css_class == "tei" and content.children[0].text in _OPEN_GLYPHS:
            bucket["open"] += 1
        if content.children[-1].css_class == "tei" and content.children[-1].text in _CLOSE_GLYPHS:
            bucket["close"] += 1
    for child in content.children:
        _content_delimiter_counts(child, counts)


def _line_row(edition_id: str, line: LineMarkup) -> dict[str, Any]:
    return {
        "edition_id": edition_id,
        "line_id": line.line_id,
        "n": line.n,
        "leaf_count": line.leaf_count,
        "covered_leaves": _count_leaf_nodes(line.children),
        "steps": line.steps,
        "splits": line.splits,
        "delimiters": _delimiter_counts(line.children),
        "notes": len(line.notes),
    }


def _render_export(path: Path, config: RenderConfig, id_generator: IdGenerator) -> tuple[dict, list[dict], dict]:
    edition = load_edition(path)
    source_path = str(path.resolve())
    edition_id = _sha1(source_path)[:16]

    markup: EditionMarkup = EditionRenderService(workers=config.workers).render(edition)
    serializer = HtmlSerializer(stylesheet_href=config.stylesheet_href, id_generator=id_generator)
    html_path = config.output_dir / f"{path.stem}.html"
    write_text(html_path, serializer.serialize(markup))

    tree_path = None
    if config.write_tree_json:
        tree_path = config.output_dir / f"{path.stem}{TREE_SUFFIX}"
        write_json(tree_path, {"title": markup.title, "lines": [tree_to_dict(line) for line in markup.lines()]})

    line_rows = [_line_row(edition_id, line) for line in markup.lines()]
    edition_row = {
        "edition_id": edition_id,
        "source_path": source_path,
        "title": edition.title,
        "html_path": str(html_path.resolve()),
        "tree_path": str(tree_path.resolve()) if tree_path is not None else None,
        "stats": {
            "surfaces": len(markup.surfaces),
            "columns": sum(len(surface) for surface in markup.surfaces),
            "lines": len(line_rows),
            "leaves": sum(row["leaf_count"] for row in line_rows),
            "splits": sum(row["splits"] for row in line_rows),
        },
    }
    result_manifest = {
        "edition_id": edition_id,
        "source_path": source_path,
        "warnings": [],
    }
    if not line_rows:
        result_manifest["warnings"].append("edition has no lines")
    empty_lines = sum(1 for row in line_rows if row["leaf_count"] == 0)
    if empty_lines:
        result_manifest["warnings"].append(f"{empty_lines} lines without leaves")
    return edition_row, line_rows, result_manifest


def run_pipeline(config: RenderConfig) -> dict:
    exports = discover_edition_exports(config.input_dir)
    cache_service = IncrementalCacheService(
        output_dir=config.output_dir,
        sha1_func=_sha1,
        read_json=read_json,
    )
    snapshot = cache_service.load_snapshot()
    current_signature = cache_service.processing_signature(config)
    id_generator = IdGenerator()
    editions: list[dict] = []
    lines: list[dict] = []
    errors: list[dict] = []
    edition_results: list[dict] = []
    reusable_hashes: dict[str, dict[str, str]] = {}
    reused_editions = 0
    processed_editions = 0

    for path in exports:
        source_path = str(path.resolve())
        edition_id = _sha1(source_path)[:16]
        file_hash = cache_service.compute_file_hash(path)
        if config.incremental and cache_service.can_reuse(
            edition_id=edition_id,
            file_hash=file_hash,
            processing_signature=current_signature,
            snapshot=snapshot,
        ):
            editions.append(snapshot.editions_by_id[edition_id])
            lines.extend(snapshot.lines_by_edition.get(edition_id, []))
            edition_results.append(
                {
                    "edition_id": edition_id,
                    "source_path": source_path,
                    "warnings": [],
                    "reused": True,
                }
            )
            reusable_hashes[edition_id] = cache_service.build_entry(
                source_path=source_path,
                file_hash=file_hash,
                processing_signature=current_signature,
            )
            reused_editions += 1
            logger.info("Reusing unchanged edition %s", path.name)
            continue
        try:
            edition_row, line_rows, edition_manifest = _render_export(path, config, id_generator)
            editions.append(edition_row)
            lines.extend(line_rows)
            edition_results.append(edition_manifest)
            reusable_hashes[edition_id] = cache_service.build_entry(
                source_path=source_path,
                file_hash=file_hash,
                processing_signature=current_signature,
            )
            processed_editions += 1
        except Exception as exc:  # pylint: disable=broad-exception-caught
            errors.append({"source_path": source_path, "error": str(exc)})
            logger.error("Failed to render %s: %s", path.name, exc)
            if config.fail_fast:
                raise

    output_dir = config.output_dir
    write_jsonl(output_dir / "editions.jsonl", editions)
    write_jsonl(output_dir / "lines.jsonl", lines)

    manifest = {
        "input_dir": str(config.input_dir.resolve()),
        "output_dir": str(output_dir.resolve()),
        "processed_at_utc": datetime.now(timezone.utc).isoformat(),
        "editions": len(editions),
        "lines": len(lines),
        "leaves": sum(int(row.get("leaf_count", 0)) for row in lines),
        "incremental": {
            "enabled": config.incremental,
            "processed_editions": processed_editions,
            "reused_editions": reused_editions,
        },
        "edition_results": edition_results,
        "errors": errors,
    }
    write_json(output_dir / "run_manifest.json", manifest)
    cache_service.write_cache(
        generated_at_utc=manifest["processed_at_utc"],
        entries=reusable_hashes,
        write_json=write_json,
    )
    return manifest
