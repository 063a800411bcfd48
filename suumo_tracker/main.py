"""
Command line entry point.

Usage:
    suumo-tracker crawl            # crawl all pages
    suumo-tracker crawl 3          # crawl at most 3 index pages
    suumo-tracker crawl --sample-rate 0.2 --quiet
    suumo-tracker graphs --days 30
    suumo-tracker email
"""

import argparse
import sys
from pathlib import Path

from dotenv import load_dotenv

# Load .env file at startup
load_dotenv()

from loguru import logger  # noqa: E402

from config.settings import Settings, get_settings  # noqa: E402
from suumo_tracker.aggregation import category_table  # noqa: E402
from suumo_tracker.connections.redis import close_redis, get_redis  # noqa: E402
from suumo_tracker.errors import ConfigError  # noqa: E402
from suumo_tracker.jobs import CrawlJob  # noqa: E402
from suumo_tracker.modules.listings import ListingRepository  # noqa: E402
from suumo_tracker.modules.metrics import MetricsRepository, utc_today  # noqa: E402
from suumo_tracker.reports.charts import CHART_FILENAME, render_trend_chart  # noqa: E402
from suumo_tracker.reports.mailer import (  # noqa: E402
    build_message,
    build_report_body,
    check_smtp_settings,
    send_report,
)

log = logger.bind(module="Main")


def setup_logging(level: str) -> None:
    """Configure the loguru stderr sink."""
    logger.configure(extra={"module": "Tracker"})
    logger.remove()
    logger.add(
        sys.stderr,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{extra[module]: <14}</cyan> | <level>{message}</level>",
        level=level.upper(),
    )


def parse_max_page(value: str) -> int | None:
    """Page ceiling argument: <= 0 means all pages, invalid falls back to settings."""
    try:
        number = int(value)
    except ValueError:
        return None
    return max(number, 0)


def parse_sample_rate(value: str) -> float | None:
    """Sampling rate argument: invalid or out of [0, 1] falls back to settings."""
    try:
        rate = float(value)
    except ValueError:
        return None
    return rate if 0.0 <= rate <= 1.0 else None


def run_crawl(args: argparse.Namespace, settings: Settings) -> int:
    """Crawl listings and store today's metrics."""
    if not settings.crawler.start_url:
        raise ConfigError("CRAWLER_START_URL is required")

    redis = get_redis()
    job = CrawlJob(
        settings=settings.crawler,
        categories=settings.metrics.categories,
        listings=ListingRepository(redis),
        metrics=MetricsRepository(redis),
    )
    quiet = True if (args.quiet or settings.quiet_mode) else None
    result = job.run(max_page=args.max_page, sample_rate=args.sample_rate, quiet=quiet)

    metrics = result["metrics"]
    print("\nMetrics:")
    for name in category_table(settings.metrics.categories):
        print(
            f"- Average price/size ({name}): {metrics.avgs.get(name)} "
            f"({metrics.counts.get(name, 0)} items)"
        )
    return 0


def run_graphs(args: argparse.Namespace, settings: Settings) -> int:
    """Render the trend chart from stored metrics."""
    days = args.days or settings.report.trend_days
    entries = MetricsRepository(get_redis()).last_days(days)
    if not entries:
        log.warning(f"No metrics found for the last {days} days")
        return 1

    out_dir = Path(settings.report.graph_dir)
    path = render_trend_chart(
        entries,
        list(category_table(settings.metrics.categories)),
        out_dir / CHART_FILENAME,
        title=f"Price per Size (Last {days} days)",
    )
    if path is None:
        log.warning("Nothing to draw")
        return 1

    print(f"Graphs generated in {out_dir} (combined PNG)")
    return 0


def run_email(args: argparse.Namespace, settings: Settings) -> int:
    """Send today's metrics by e-mail."""
    smtp = settings.smtp
    check_smtp_settings(smtp)

    today = utc_today()
    metrics = MetricsRepository(get_redis()).today(today)
    if metrics is None:
        log.error(f"No metrics for today ({today})")
        return 1

    msg = build_message(
        sender=smtp.from_address,
        to=smtp.to,
        body=build_report_body(metrics, settings.metrics.categories),
        attachments=[Path(settings.report.graph_dir) / CHART_FILENAME],
        today=today,
    )
    send_report(smtp, msg)
    print(f"Email sent to {smtp.to}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="suumo-tracker",
        description="Crawl SUUMO listings and report price per size trends",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    crawl = sub.add_parser("crawl", help="Crawl listings and store today's metrics")
    crawl.add_argument(
        "max_page",
        nargs="?",
        type=parse_max_page,
        default=None,
        help="Maximum index pages to crawl (<= 0 means all)",
    )
    crawl.add_argument(
        "--sample-rate",
        type=parse_sample_rate,
        default=None,
        help="Fraction of detail links kept per page (0-1)",
    )
    crawl.add_argument("--quiet", action="store_true", help="Do not print each listing")
    crawl.set_defaults(handler=run_crawl)

    graphs = sub.add_parser("graphs", help="Render the price per size trend chart")
    graphs.add_argument("--days", type=int, default=None, help="Number of days to plot")
    graphs.set_defaults(handler=run_graphs)

    email = sub.add_parser("email", help="Send today's metrics by e-mail")
    email.set_defaults(handler=run_email)

    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI main."""
    args = build_parser().parse_args(argv)
    settings = get_settings()
    setup_logging(settings.log_level)

    try:
        return args.handler(args, settings)
    except ConfigError as e:
        log.error(f"Configuration error: {e}")
        return 2
    finally:
        close_redis()


if __name__ == "__main__":
    sys.exit(main())
