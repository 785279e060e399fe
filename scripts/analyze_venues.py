"""
Count the publication venues of a Google Scholar profile.

This script:
1. Opens the profile (live over HTTP, in a browser, or from a saved page)
2. Loads every publication by following "Show more" until it stops growing
3. Classifies each venue citation and prints the venue counts
"""

import json
import logging
import sys
from pathlib import Path
from typing import Optional

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from config.settings import settings
from scholar_venues.analysis import ANALYZE_ACTION, AnalysisOrchestrator, handle_message
from scholar_venues.loader import IncrementalLoader
from scholar_venues.profile_urls import resolve_profile_url
from scholar_venues.sources import ContentSourceError, ScholarHtmlSource

REQUEST = {"action": ANALYZE_ACTION}


def print_report(response: dict) -> None:
    """Print an analysis response as a venue table."""
    if not response.get("success"):
        print(f"Error: {response.get('error')}")
        return

    venues = response["venues"]
    print(f"\n{'='*60}")
    print(f"{len(venues)} venues across {response['totalFound']} publications")
    print(f"  Classified: {response['totalProcessed']}")
    print(f"  Skipped: {response['totalSkipped']}")
    print(f"{'='*60}\n")

    width = max(len(v["venue"]) for v in venues)
    for i, item in enumerate(venues, 1):
        print(f"{i:>3}. {item['venue']:<{width}}  {item['count']:>4}")


def headless_mode(headed: bool) -> Optional[bool]:
    """--headed forces a window; otherwise BROWSER_HEADLESS decides."""
    return False if headed else None


def analyze(source, orchestrator: AnalysisOrchestrator, as_json: bool) -> int:
    response = handle_message(REQUEST, source, orchestrator)

    if as_json:
        print(json.dumps(response, indent=2))
    else:
        print_report(response)

    return 0 if response.get("success") else 1


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(
        description="Count the publication venues of a Google Scholar profile"
    )
    parser.add_argument(
        "profile",
        nargs="?",
        default=None,
        help="Scholar user id (e.g. x8xNLZQAAAAJ) or full profile URL",
    )
    parser.add_argument(
        "--html",
        type=Path,
        default=None,
        help="Analyse a saved profile page instead of fetching one",
    )
    parser.add_argument(
        "--browser",
        action="store_true",
        help="Drive a Chromium browser instead of plain HTTP requests",
    )
    parser.add_argument(
        "--headed",
        action="store_true",
        help="Show the browser window (with --browser)",
    )
    parser.add_argument(
        "--max-attempts",
        type=int,
        default=settings.max_load_attempts,
        help=f"Maximum 'Show more' presses (default: {settings.max_load_attempts})",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=settings.per_attempt_timeout,
        help=f"Seconds to wait for new rows per press (default: {settings.per_attempt_timeout})",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the raw response as JSON",
    )

    args = parser.parse_args()

    if not args.profile and not args.html:
        parser.error("a profile or --html FILE is required")

    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    orchestrator = AnalysisOrchestrator(
        loader=IncrementalLoader(max_attempts=args.max_attempts, per_attempt_timeout=args.timeout)
    )
    url = resolve_profile_url(args.profile) if args.profile else None

    if args.html:
        print(f"Analysing saved page: {args.html}")
        source = ScholarHtmlSource.from_file(args.html, url=url)
        sys.exit(analyze(source, orchestrator, args.json))

    print(f"Analysing profile: {url}")

    if args.browser:
        from scholar_venues.sources.browser import browser_session

        with browser_session(url, headless=headless_mode(args.headed)) as source:
            exit_code = analyze(source, orchestrator, args.json)
        sys.exit(exit_code)

    try:
        source = ScholarHtmlSource.from_url(url)
    except ContentSourceError as e:
        print(f"Error: {e}")
        sys.exit(1)

    sys.exit(analyze(source, orchestrator, args.json))
