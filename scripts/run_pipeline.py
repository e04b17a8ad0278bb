"""CLI entry point to extract statistics and resolved redirects from a wiki dump."""
from __future__ import annotations

# ruff: noqa: E402

import argparse
from pathlib import Path
import sys

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from wikistats.pipelines.extract_wiki_stats import run_pipeline


def main() -> None:
    parser = argparse.ArgumentParser(description="Extract wiki statistics and resolve redirects")
    parser.add_argument(
        "--config",
        default="config/pipeline.yaml",
        help="Path to the YAML configuration file",
    )
    args = parser.parse_args()
    run_pipeline(args.config)


if __name__ == "__main__":
    main()
