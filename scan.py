#!/usr/bin/env python3
"""
PageDoc CLI
Usage: python scan.py https://example.com [--viewport mobile] [--headful] [--json]
       python scan.py --input snapshot.json
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path

from pagedoc.core.errors import PageDocError
from pagedoc.core.report import print_report
from pagedoc.core.scanner import PageDocScanner, diagnose_snapshot


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="PageDoc — plain-English performance diagnosis for a web page",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="Examples:\n"
               "  python scan.py https://example.com\n"
               "  python scan.py https://myapp.com --viewport mobile --json\n"
               "  python scan.py --input saved-metrics.json",
    )
    parser.add_argument("url", nargs="?", help="Page URL to diagnose")
    parser.add_argument("--input", type=Path, help="Analyze a saved JSON snapshot instead of loading a page")
    parser.add_argument("--viewport", default="desktop", choices=["desktop", "mobile"], help="Viewport (default: desktop)")
    parser.add_argument("--headful", action="store_true", help="Run browser visibly")
    parser.add_argument("--settle-ms", type=int, default=None, help="Idle time after load to catch late long tasks")
    parser.add_argument("--json", action="store_true", help="Output results as JSON instead of a report")

    args = parser.parse_args(argv)

    if args.input:
        try:
            snapshot = json.loads(args.input.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            print(f"\n  Could not read snapshot {args.input}: {e}", file=sys.stderr)
            return 1
        if not isinstance(snapshot, dict):
            print(f"\n  Snapshot {args.input} must hold a JSON object, not {type(snapshot).__name__}", file=sys.stderr)
            return 1
        result = diagnose_snapshot(snapshot, url=args.url or "")
    elif args.url:
        url = args.url
        if not url.startswith("http"):
            url = f"https://{url}"
        if not args.json:
            print(f"\n  PageDoc diagnosing {url} ({args.viewport})\n")
        try:
            result = asyncio.run(run_diagnosis(url, args.viewport, args.headful, args.settle_ms, quiet=args.json))
        except PageDocError as e:
            print(f"\n  Error during diagnosis: {e}", file=sys.stderr)
            return 1
    else:
        parser.error("a URL or --input snapshot is required")

    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
    else:
        print_report(result)
    return 0


def _cli_progress(event_type: str, data: dict):
    if event_type == "navigating":
        print(f"   Loading {data.get('url', '')[:80]}")
    elif event_type == "collecting":
        print("   Collecting timing, network and page metrics")
    elif event_type == "collector_failed":
        print(f"   [WARN] {data.get('error', '')[:100]}")
    elif event_type == "diagnosis_complete":
        print(f"\n   Done: grade {data.get('grade', '?')}, {data.get('issues', 0)} issue(s)\n")


async def run_diagnosis(url: str, viewport: str, headful: bool, settle_ms: int | None, quiet: bool = False):
    scanner = PageDocScanner(
        url=url,
        viewport=viewport,
        headful=headful,
        settle_ms=settle_ms,
        on_progress=None if quiet else _cli_progress,
    )
    return await scanner.diagnose()


if __name__ == "__main__":
    sys.exit(main())
