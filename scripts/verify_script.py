#!/usr/bin/env python3
"""
Run the fact-checking gate over a generated script file and print the report.
Exits with status 1 when the script fails the gate.
"""
import argparse
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from research_pipeline.quality.gates import validate
from research_pipeline.log import setup_logging

setup_logging()


def main():
    parser = argparse.ArgumentParser(description="Validate fact-checking in a generated script")
    parser.add_argument("path", type=Path, help="Script text file")
    args = parser.parse_args()

    text = args.path.read_text(encoding="utf-8")
    report = validate(text)

    print(report.model_dump_json(indent=2))
    if not report.passed:
        sys.exit(1)


if __name__ == "__main__":
    main()
