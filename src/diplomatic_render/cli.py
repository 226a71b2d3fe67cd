from __future__ import annotations

import argparse
import logging
from pathlib import Path

from .pipeline import RenderConfig, run_pipeline


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Render diplomatic transcription exports to nested XHTML markup")
    parser.add_argument("--input-dir", type=Path, required=True, help="Directory holding *.json edition exports")
    parser.add_argument("--output-dir", type=Path, required=True, help="Path to output artifacts directory")
    parser.add_argument("--stylesheet-href", type=str, default="../css/styles.css")
    parser.add_argument("--workers", type=int, default=1, help="Threads used to render the lines of an edition")
    parser.add_argument("--no-incremental", action="store_true", help="Re-render every export even when unchanged")
    parser.add_argument("--tree-json", action="store_true", help="Also write the span tree of each edition as JSON")
    parser.add_argument("--fail-fast", action="store_true", help="Stop immediately if an export fails to render")
    parser.add_argument("--verbose", action="store_true")
    return parser


def main() -> None:
    parser = build_parser()
    args = parser.parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="[diplomatic-render] %(levelname)s %(message)s",
    )
    config = RenderConfig(
        input_dir=args.input_dir,
        output_dir=args.output_dir,
        stylesheet_href=args.stylesheet_href,
        workers=args.workers,
        incremental=not args.no_incremental,
        fail_fast=args.fail_fast,
        write_tree_json=args.tree_json,
    )
    manifest = run_pipeline(config)
    print(f"Rendered editions: {manifest['editions']}")
    print(f"Rendered lines: {manifest['lines']}")
    if manifest["errors"]:
        print(f"Errors: {len(manifest['errors'])}")


if __name__ == "__main__":
    main()
