"""Main entry point for the news aggregator."""

import argparse
import asyncio
import sys

from .aggregator import aggregate_news, load_sources
from .config import DRY_RUN, LOG_LEVEL, PORT, STORE_BACKEND
from .delivery import AlertSender
from .storage import get_store
from .utils import setup_logging, get_logger

logger = get_logger(__name__)


def list_sources() -> None:
    """Print the enabled source table."""
    for group, sources in load_sources().items():
        print(f"\n## {group.upper()}")
        for source in sources:
            print(f"  {source.name} [{source.category}] {source.url}")
            print(f"    tags: {', '.join(source.tags)}")


def run_pipeline(store_backend: str, dry_run: bool = False, report: bool = False) -> dict:
    """Run one aggregation against the chosen store."""
    store = get_store(store_backend)
    try:
        stats, candidates = asyncio.run(aggregate_news(store, dry_run=dry_run))
    finally:
        store.close()

    if dry_run:
        print("\n" + "=" * 60)
        print(f"NEWS CANDIDATES (DRY RUN) - {len(candidates)} articles")
        print("=" * 60)
        for article in candidates:
            print(f"\n[{article.category}] {article.title}")
            print(f"  {article.source} | {article.published_at.isoformat()}")
            print(f"  {article.url}")
        if stats.failed_sources:
            print(f"\nUnavailable sources: {', '.join(stats.failed_sources)}")
        return stats.to_dict()

    if report:
        AlertSender().send_run_report(stats.to_dict())

    return stats.to_dict()


def main():
    """CLI entry point."""
    parser = argparse.ArgumentParser(description="RSS news aggregator")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        default=DRY_RUN,
        help="Fetch and print candidates without writing to the store",
    )
    parser.add_argument(
        "--store",
        default=STORE_BACKEND,
        choices=["sqlite", "firestore"],
        help="Document store backend",
    )
    parser.add_argument(
        "--list-sources",
        action="store_true",
        help="Print the configured feed sources and exit",
    )
    parser.add_argument(
        "--serve",
        action="store_true",
        help="Run the HTTP trigger and news API",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=PORT,
        help="Port for --serve",
    )
    parser.add_argument(
        "--report",
        action="store_true",
        help="Email a run summary after a successful run",
    )
    parser.add_argument(
        "--test-email",
        action="store_true",
        help="Send a test email to verify configuration",
    )
    parser.add_argument(
        "--log-level",
        default=LOG_LEVEL,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Set logging level",
    )

    args = parser.parse_args()
    setup_logging(args.log_level)

    if args.list_sources:
        list_sources()
        return

    if args.test_email:
        logger.info("Sending test email...")
        try:
            email_id = AlertSender().send_test()
            print(f"Test email sent successfully! ID: {email_id}")
        except Exception as e:
            print(f"Failed to send test email: {e}")
            sys.exit(1)
        return

    if args.serve:
        from .api import create_app

        app = create_app(store_factory=lambda: get_store(args.store))
        logger.info(f"News aggregation service listening on port {args.port}")
        app.run(host="0.0.0.0", port=args.port)
        return

    try:
        stats = run_pipeline(args.store, dry_run=args.dry_run, report=args.report)
        logger.info(f"Run stats: {stats}")
    except Exception as e:
        logger.error(f"News aggregation failed: {e}")
        if not args.dry_run:
            try:
                AlertSender().send_error_alert(str(e), context=f"store={args.store}")
            except Exception as alert_err:
                logger.error(f"Failed to send error alert: {alert_err}")
        sys.exit(1)


if __name__ == "__main__":
    main()
