from __future__ import annotations

import argparse
import sys
from pathlib import Path

from ..use_cases.render_gates import RenderGateConfig, run_render_gates


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Run deterministic DeepEval quality gates for render artifacts.")
    parser.add_argument("--artifacts-dir", type=Path, default=Path("artifacts"))
    parser.add_argument("--output-json", type=Path, default=Path("artifacts/render_gate_report.json"))
    parser.add_argument("--min-coverage-ratio", type=float, default=100.0)
    parser.add_argument("--max-unbalanced-line-pct", type=float, default=5.0)
    parser.add_argument("--max-split-line-pct", type=float, default=50.0)
    parser.add_argument("--max-error-pct", type=float, default=0.0)
    parser.add_argument("--fail-on-threshold", action="store_true")
    return parser


def main() -> None:
    args = build_parser().parse_args()
    config = RenderGateConfig(
        artifacts_dir=args.artifacts_dir,
        output_json=args.output_json,
        min_coverage_ratio=args.min_coverage_ratio,
        max_unbalanced_line_pct=args.max_unbalanced_line_pct,
        max_split_line_pct=args.max_split_line_pct,
        max_error_pct=args.max_error_pct,
    )
    try:
        report = run_render_gates(config)
    except AssertionError as exc:
        print(f"Render gates failed: {exc}")
        if args.fail_on_threshold:
            sys.exit(2)
        return

    print(f"Render gates passed: {report['summary']['gates_passed']}")
    print(f"Coverage ratio: {report['metrics']['coverage_ratio']}")
    print(f"Unbalanced line pct: {report['metrics']['unbalanced_line_pct']}")
    print(f"Split line pct: {report['metrics']['split_line_pct']}")
    print(f"Error pct: {report['metrics']['error_pct']}")
    print(f"JSON report: {config.output_json}")


if __name__ == "__main__":
    main()
