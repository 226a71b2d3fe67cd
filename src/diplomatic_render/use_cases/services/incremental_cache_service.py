from __future__ import annotations

import hashlib
import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable

from ...config.render_config import RenderConfig


@dataclass
class IncrementalCacheSnapshot:
    editions_by_id: dict[str, dict[str, Any]]
    lines_by_edition: dict[str, list[dict[str, Any]]]
    cache_by_edition: dict[str, dict[str, str]]


class IncrementalCacheService:
    """Encapsulates cache read/write and reuse decisions for incremental runs."""

    def __init__(
        self,
        *,
        output_dir: Path,
        sha1_func: Callable[[str], str],
        read_json: Callable[[Path], dict[str, Any] | list[Any]],
        version: int = 1,
    ) -> None:
        self.output_dir = output_dir
        self._sha1 = sha1_func
        self._read_json = read_json
        self.version = version

    def processing_signature(self, config: RenderConfig) -> str:
        payload = {
            "cache_version": self.version,
            "stylesheet_href": config.stylesheet_href,
            "write_tree_json": config.write_tree_json,
        }
        return self._sha1(json.dumps(payload, sort_keys=True))

    @staticmethod
    def compute_file_hash(path: Path) -> str:
        hasher = hashlib.sha1()
        with path.open("rb") as handle:
            while True:
                chunk = handle.read(65536)
                if not chunk:
                    break
                hasher.update(chunk)
        return hasher.hexdigest()

    def load_snapshot(self) -> IncrementalCacheSnapshot:
        editions_by_id: dict[str, dict[str, Any]] = {}
        lines_by_edition: dict[str, list[dict[str, Any]]] = {}
        cache_by_edition: dict[str, dict[str, str]] = {}

        for row in self._load_jsonl(self.output_dir / "editions.jsonl"):
            edition_id = str(row.get("edition_id", ""))
            if edition_id:
                editions_by_id[edition_id] = row

        for row in self._load_jsonl(self.output_dir / "lines.jsonl"):
            edition_id = str(row.get("edition_id", ""))
            if not edition_id:
                continue
            lines_by_edition.setdefault(edition_id, []).append(row)

        cache_path = self.output_dir / "edition_hashes.json"
        if cache_path.exists():
            payload = self._read_json(cache_path)
            if isinstance(payload, dict):
                editions_map = payload.get("editions", {})
                if isinstance(editions_map, dict):
                    for edition_id, item in editions_map.items():
                        if not isinstance(item, dict):
                            continue
                        content_hash = item.get("content_hash")
                        processing_signature = item.get("processing_signature")
                        if isinstance(content_hash, str):
                            cache_by_edition[str(edition_id)] = {
                                "content_hash": content_hash,
                                "processing_signature": processing_signature if isinstance(processing_signature, str) else "",
                            }

        return IncrementalCacheSnapshot(
            editions_by_id=editions_by_id,
            lines_by_edition=lines_by_edition,
            cache_by_edition=cache_by_edition,
        )

    def can_reuse(
        self,
        *,
        edition_id: str,
        file_hash: str,
        processing_signature: str,
        snapshot: IncrementalCacheSnapshot,
    ) -> bool:
        prior = snapshot.cache_by_edition.get(edition_id, {})
        if prior.get("content_hash") != file_hash:
            return False
        if prior.get("processing_signature") != processing_signature:
            return False
        edition_row = snapshot.editions_by_id.get(edition_id)
        if edition_row is None:
            return False
        html_path = edition_row.get("html_path")
        if not html_path or not Path(html_path).exists():
            return False
        # The signature says whether a tree dump is expected; the row says where.
        tree_path = edition_row.get("tree_path")
        if tree_path and not Path(tree_path).exists():
            return False
        if edition_id in snapshot.lines_by_edition:
            return True
        return int(edition_row.get("stats", {}).get("lines", 0)) == 0

    @staticmethod
    def build_entry(*, source_path: str, file_hash: str, processing_signature: str) -> dict[str, str]:
        return {
            "source_path": source_path,
            "content_hash": file_hash,
            "processing_signature": processing_signature,
        }

    def write_cache(self, *, generated_at_utc: str, entries: dict[str, dict[str, str]], write_json: Callable[[Path, dict[str, Any]], None]) -> None:
        write_json(
            self.output_dir / "edition_hashes.json",
            {
                "version": self.version,
                "generated_at_utc": generated_at_utc,
                "editions": entries,
            },
        )

    @staticmethod
    def _load_jsonl(path: Path) -> list[dict[str, Any]]:
        rows: list[dict[str, Any]] = []
        if not path.exists():
            return rows
        with path.open("r", encoding="utf-8") as handle:
            for line in handle:
                line = line.strip()
                if line:
                    rows.append(json.loads(line))
        return rows
