#!/usr/bin/env python3
"""
Command-line interface for the single-page SEO audit
"""
import argparse
import asyncio
import json
import logging
import sys

from exceptions import InvalidURL, ScrapeError
from models import AuditResult
from seo_analyzer import analyze_url

# Configure logging
logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
logger = logging.getLogger("run_analyzer")


def print_summary(result: AuditResult) -> None:
    metrics = result.technical_metrics
    print(f"\n=== SEO Audit: {result.url} ===")
    print(f"Overall score: {result.score}/100")
    if result.degraded:
        print("WARNING: performance lab data was unavailable or partial, default values were used")

    print("\n--- Technical Metrics ---")
    print(f"Performance: {metrics.performance}  SEO: {metrics.seo_score}  "
          f"Accessibility: {metrics.accessibility}  Best practices: {metrics.best_practices}")
    print(f"HTTPS: {metrics.https_enabled}  Meta tags: {metrics.meta_tags_count}  "
          f"Image alt coverage: {metrics.image_optimization}%")
    vitals = metrics.core_web_vitals
    print(f"LCP: {vitals.lcp:.0f} ms  FID: {vitals.fid:.0f} ms  CLS: {vitals.cls:.3f}")

    for heading, factors in (
        ("Positive factors", result.positive_factors),
        ("Negative factors", result.negative_factors),
        ("Recommendations", result.recommendations),
    ):
        print(f"\n--- {heading} ({len(factors)}) ---")
        for factor in factors:
            print(f"- [{factor.impact.value}] {factor.title}: {factor.description}")


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Audit the on-page and technical SEO of a single URL")
    parser.add_argument("url", help="URL to audit, e.g. https://example.com")
    parser.add_argument("--output", help="Write the full result as JSON to this file")
    parser.add_argument("--json", action="store_true", help="Print the full result as JSON instead of a summary")
    args = parser.parse_args(argv)

    try:
        result = asyncio.run(analyze_url(args.url, on_progress=lambda percent: logger.info(f"Progress: {percent}%")))
    except InvalidURL as e:
        logger.error(str(e))
        return 1
    except ScrapeError as e:
        logger.error(f"Failed to analyze website: {e}")
        return 1

    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
    else:
        print_summary(result)

    if args.output:
        with open(args.output, 'w') as f:
            json.dump(result.to_dict(), f, indent=2)
        logger.info(f"Complete audit saved to {args.output}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
