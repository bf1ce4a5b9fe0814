"""
CLI interface for paperharvest
"""
import argparse
import logging
import sys

from .config import load_settings
from .crawler import Crawler
from .fetcher import Fetcher
from .listing import LISTING_ID_PATTERN
from .store import PaperStore


def create_parser() -> argparse.ArgumentParser:
    """Create CLI argument parser"""
    parser = argparse.ArgumentParser(
        description="Discover arXiv papers that mention a software package"
    )

    parser.add_argument(
        "--config", "-c",
        help="YAML settings file"
    )

    parser.add_argument(
        "--database",
        help="SQLite database path (overrides settings)"
    )

    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Verbose output"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    crawl = subparsers.add_parser("crawl", help="Crawl the search for one or more software names")
    crawl.add_argument("software", nargs="+", help="Software names to search for")
    crawl.add_argument(
        "--workers",
        type=int,
        help="Concurrent detail fetches"
    )
    crawl.add_argument(
        "--verify-mentions",
        action="store_true",
        default=None,
        help="Only insert papers whose PDF mentions the software name"
    )

    single = subparsers.add_parser("single", help="Ingest one paper by identifier")
    single.add_argument("identifier", help="arXiv identifier, e.g. 2508.15522")
    single.add_argument("--software", required=True, help="Software name to associate")

    papers = subparsers.add_parser("papers", help="List stored papers for a software name")
    papers.add_argument("--software", required=True, help="Software name")

    return parser


def main():
    """Main CLI entry point"""
    parser = create_parser()
    args = parser.parse_args()

    software_names = args.software if isinstance(args.software, list) else [args.software]
    if any(not name.strip() for name in software_names):
        print("Error: software name cannot be empty.", file=sys.stderr)
        sys.exit(1)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        settings = load_settings(
            args.config,
            database_path=args.database,
            max_workers=getattr(args, "workers", None),
            verify_mentions=getattr(args, "verify_mentions", None),
        )
        store = PaperStore(settings.database_path)
        store.create_schema()
    except Exception as exc:
        if args.verbose:
            raise
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)

    with store:
        if args.command == "papers":
            _print_papers(store, args.software)
            return

        crawler = Crawler(settings, Fetcher.from_settings(settings), store)

        if args.command == "crawl":
            reports = crawler.run_crawls(args.software)
            for report in reports:
                print(report)
            if any(report.failed or report.discovery_error for report in reports):
                sys.exit(2)
            return

        identifier = _normalize_identifier(args.identifier)
        if not identifier:
            print(f"Error: invalid arXiv identifier: {args.identifier}", file=sys.stderr)
            sys.exit(1)
        try:
            outcome = crawler.ingest_single(identifier, args.software)
        except Exception as exc:
            if args.verbose:
                raise
            print(f"Error: {exc}", file=sys.stderr)
            sys.exit(1)
        print(f"{identifier}: {outcome.value}")


def _print_papers(store: PaperStore, software: str) -> None:
    papers = store.papers_for_software(software)
    for paper in papers:
        published = paper.published_at.date().isoformat() if paper.published_at else "-"
        print(f"{paper.identifier}\t{published}\t{paper.title}")
    print(f"{len(papers)} paper(s) for {software}")


def _normalize_identifier(value: str) -> str:
    match = LISTING_ID_PATTERN.search(value.strip())
    return match.group("id") if match else ""


if __name__ == "__main__":
    main()
