from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from deepeval import assert_test
from deepeval.metrics import BaseMetric
from deepeval.test_case import LLMTestCase

from ...config.render_gate_config import RenderGateConfig


class ThresholdMetric(BaseMetric):
    def __init__(self, name: str, actual: float, limit: float, *, minimum: bool = False) -> None:
        self._metric_name = name
        self.actual = float(actual)
        self.limit = float(limit)
        self.minimum = minimum
        self.threshold = 1.0
        self.score: float | None = None
        self.success: bool | None = None
        self.reason: str | None = None
        self.error = None
        self.async_mode = False
        self.evaluation_model = "deterministic"
        self.verbose_mode = False

    def measure(self, test_case: LLMTestCase, *args, **kwargs) -> float:  # noqa: ARG002
        if self.minimum:
            self.success = self.actual >= self.limit
            self.reason = f"actual={self.actual} min_allowed={self.limit}"
        else:
            self.success = self.actual <= self.limit
            self.reason = f"actual={self.actual} max_allowed={self.limit}"
        self.score = 1.0 if self.success else 0.0
        return self.score

    async def a_measure(self, test_case: LLMTestCase, *args, **kwargs) -> float:  # noqa: ARG002
        return self.measure(test_case)

    def is_successful(self) -> bool:
        return bool(self.success)

    @property
    def __name__(self) -> str:
        return self._metric_name


class RenderGateService:
    """Runs deterministic gate checks over render artifacts and reports them through DeepEval."""

    def run(self, config: RenderGateConfig) -> dict[str, Any]:
        manifest = self._load_json(config.artifacts_dir / "run_manifest.json")
        lines = self._load_jsonl(config.artifacts_dir / "lines.jsonl")

        total_lines = len(lines)
        total_leaves = sum(int(row.get("leaf_count", 0)) for row in lines)
        covered_leaves = sum(int(row.get("covered_leaves", 0)) for row in lines)
        coverage_ratio = round((covered_leaves / total_leaves) * 100.0, 2) if total_leaves else 100.0

        unbalanced_lines = [row for row in lines if self._is_unbalanced(row)]
        unbalanced_line_pct = self._pct(len(unbalanced_lines), total_lines)
        split_lines = [row for row in lines if int(row.get("splits", 0)) > 0]
        split_line_pct = self._pct(len(split_lines), total_lines)

        error_count = len(manifest.get("errors", []))
        error_pct = self._pct(error_count, int(manifest.get("editions", 0)) + error_count)

        checks = [
            {
                "name": "coverage_ratio",
                "actual": coverage_ratio,
                "expected_min": config.min_coverage_ratio,
                "passed": coverage_ratio >= config.min_coverage_ratio,
            },
            {
                "name": "unbalanced_line_pct",
                "actual": unbalanced_line_pct,
                "expected_max": config.max_unbalanced_line_pct,
                "passed": unbalanced_line_pct <= config.max_unbalanced_line_pct,
            },
            {
                "name": "split_line_pct",
                "actual": split_line_pct,
                "expected_max": config.max_split_line_pct,
                "passed": split_line_pct <= config.max_split_line_pct,
            },
            {
                "name": "error_pct",
                "actual": error_pct,
                "expected_max": config.max_error_pct,
                "passed": error_pct <= config.max_error_pct,
            },
        ]

        report = {
            "summary": {
                "lines": total_lines,
                "leaves": total_leaves,
                "editions": int(manifest.get("editions", 0)),
                "gates_passed": all(check["passed"] for check in checks),
            },
            "metrics": {
                "coverage_ratio": coverage_ratio,
                "unbalanced_line_pct": unbalanced_line_pct,
                "split_line_pct": split_line_pct,
                "error_pct": error_pct,
            },
            "unbalanced_lines": [
                {"edition_id": row.get("edition_id"), "line_id": row.get("line_id")} for row in unbalanced_lines[:20]
            ],
            "checks": checks,
        }

        config.output_json.parent.mkdir(parents=True, exist_ok=True)
        config.output_json.write_text(json.dumps(report, ensure_ascii=False, indent=2), encoding="utf-8")

        test_case = LLMTestCase(
            input="diplomatic render quality gates",
            actual_output=json.dumps({"checks": checks}),
            expected_output="all checks must pass",
        )
        metrics = [
            ThresholdMetric(
                check["name"],
                check["actual"],
                check["expected_min"] if "expected_min" in check else check["expected_max"],
                minimum="expected_min" in check,
            )
            for check in checks
        ]
        assert_test(test_case, metrics, run_async=False)
        return report

    @staticmethod
    def _is_unbalanced(row: dict[str, Any]) -> bool:
        delimiters = row.get("delimiters", {})
        if not isinstance(delimiters, dict):
            return False
        for counts in delimiters.values():
            if isinstance(counts, dict) and int(counts.get("open", 0)) != int(counts.get("close", 0)):
                return True
        return False

    @staticmethod
    def _load_json(path: Path) -> dict[str, Any]:
        if not path.exists():
            return {}
        return json.loads(path.read_text(encoding="utf-8"))

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

    @staticmethod
    def _pct(part: int, total: int) -> float:
        if total <= 0:
            return 0.0
        return round((part / total) * 100.0, 2)
