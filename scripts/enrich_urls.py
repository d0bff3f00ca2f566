#!/usr/bin/env python3
"""
Fetch a list of URLs through the enrichment stage and print per-source status and batch stats.
"""
import argparse
import asyncio
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from research_pipeline.retrieval.enrich import ContentEnricher
from research_pipeline.schemas.evidence import Source
from research_pipeline.log import setup_logging

setup_logging()


async def run(urls):
    enricher = ContentEnricher()
    batch = await enricher.fetch_batch([Source(locator=u, title=u) for u in urls])

    print("-" * 60)
    for s in batch.sources:
        detail = s.skip_reason or s.fetch_error or f"{s.content_length} chars"
        print(f"  [{s.fetch_status}] {s.locator} - {detail}")
    print("-" * 60)
    print(batch.stats.model_dump_json(indent=2))
    for w in batch.warnings:
        print(f"WARNING: {w}")


def main():
    parser = argparse.ArgumentParser(description="Fetch and enrich research URLs")
    parser.add_argument("urls", nargs="+", help="URLs to fetch")
    args = parser.parse_args()
    asyncio.run(run(args.urls))


if __name__ == "__main__":
    main()
