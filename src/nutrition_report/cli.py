"""Command line entry point."""

import argparse
import asyncio
import logging
from datetime import date, datetime
from pathlib import Path

from nutrition_report.adapters.browser import ChromeSession
from nutrition_report.app_logging import configure_logging
from nutrition_report.config import Settings, resolve_date_range
from nutrition_report.containers import AppContainer, build_container
from nutrition_report.domain.diary import DiaryDay
from nutrition_report.domain.report import NutritionSummary
from nutrition_report.errors import (
    ChallengeUnresolved,
    NutritionReportError,
    PreconditionError,
    WalkAborted,
)
from nutrition_report.services.aggregation import summarize_nutrition

_logger = logging.getLogger(__name__)


def create_parser() -> argparse.ArgumentParser:
    """Create and return the argument parser."""
    parser = argparse.ArgumentParser(
        prog="nutrition-report",
        description="Scrape MyFitnessPal diary days and merge them with training reports.",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    scrape = commands.add_parser("scrape", help="Extract diary days from Chrome")
    scrape.add_argument("--username", help="Diary owner (default: MFP_USERNAME)")
    scrape.add_argument(
        "--password", help="Diary password (default: MFP_DIARY_PASSWORD)"
    )
    scrape.add_argument("-d", "--days", type=int, help="Trailing days ending today")
    scrape.add_argument("--start", type=date.fromisoformat, help="First date (ISO)")
    scrape.add_argument("--end", type=date.fromisoformat, help="Last date (ISO)")
    scrape.add_argument("--locale", help="Locale path segment, e.g. pt")
    scrape.add_argument("--out", type=Path, help="Diary JSON output path")
    scrape.add_argument(
        "--save-html", type=Path, help="Write the last diary page HTML to this path"
    )
    scrape.add_argument(
        "--close",
        "--close-browser",
        action="store_true",
        help="Close Chrome when done instead of leaving it open",
    )

    merge = commands.add_parser("merge", help="Merge diary data with training reports")
    merge.add_argument("--intervals-current", help="Current-week training report")
    merge.add_argument("--intervals-next", help="Next-week training report")
    merge.add_argument("--mfp", type=Path, help="Diary JSON to merge")
    merge.add_argument("--out-dir", type=Path, help="Merged report directory")
    return parser


async def wait_for_operator(unresolved: ChallengeUnresolved) -> None:
    """Block until the operator confirms the challenge was solved."""
    _logger.warning("%s. Solve it in the browser, then press ENTER here.", unresolved)
    await asyncio.to_thread(input)


async def scrape(args: argparse.Namespace, container: AppContainer) -> list[DiaryDay]:
    """Walk the requested range in the attached Chrome and save the result."""
    settings = container.settings
    username = args.username or settings.mfp_username
    if not username:
        raise PreconditionError("Missing username. Set MFP_USERNAME or use --username.")
    start, end = resolve_date_range(
        args.days if args.days is not None else settings.default_days,
        args.start,
        args.end,
        date.today(),
    )
    _logger.info("Period: %s to %s", start.isoformat(), end.isoformat())

    session = await ChromeSession.attach(
        settings.chrome_debug_url, settings.navigation_timeout_seconds
    )
    out = args.out or container.diary_files.default_json_path(datetime.now())
    try:
        fetcher = container.diary_fetcher(session, username, save_html=args.save_html)
        await fetcher.prepare()
        days = await container.walker(fetcher).walk(start, end)
    except WalkAborted as aborted:
        if aborted.days:
            _logger.warning("Walk aborted, saving %s days read so far", len(aborted.days))
            container.diary_files.write_days(aborted.days, out)
        raise
    finally:
        await session.close(shutdown=args.close)

    container.diary_files.write_days(days, out)
    log_summary(summarize_nutrition(days))
    return days


def merge(args: argparse.Namespace, container: AppContainer) -> None:
    """Merge the selected diary file with the training reports."""
    mfp_path = args.mfp or container.diary_files.latest()
    if mfp_path is None:
        raise PreconditionError(
            f"No diary file found in {container.diary_files.directory}"
        )
    days = container.diary_files.read_days(mfp_path)
    report = container.merger.merge(
        days, current_name=args.intervals_current, next_name=args.intervals_next
    )
    files = container.merged_report_files
    if args.out_dir is not None:
        files = type(files)(args.out_dir)
    files.write(report)


def log_summary(summary: NutritionSummary) -> None:
    """Log the period averages."""
    if not summary.days_with_data:
        _logger.info("No diary data extracted.")
        return
    averages = summary.averages
    _logger.info(
        "Days with data: %s/%s", summary.days_with_data, summary.days_total
    )
    _logger.info("Average calories: %s kcal", averages.calories)
    if averages.burned > 0:
        _logger.info("Average exercise: -%s kcal", averages.burned)
        _logger.info("Average net: %s kcal", summary.net_average)
    _logger.info(
        "Average protein %sg, carbs %sg, fat %sg",
        averages.protein,
        averages.carbs,
        averages.fat,
    )


def main(argv: list[str] | None = None, settings: Settings | None = None) -> int:
    """Run the command line and return the exit status."""
    configure_logging()
    args = create_parser().parse_args(argv)
    try:
        resolved = settings or Settings()
        updates: dict[str, object] = {}
        if getattr(args, "password", None):
            updates["mfp_diary_password"] = args.password
        if getattr(args, "locale", None):
            updates["mfp_locale"] = args.locale
        if updates:
            resolved = resolved.model_copy(update=updates)
        container = build_container(resolved, escalate=wait_for_operator)
        if args.command == "scrape":
            asyncio.run(scrape(args, container))
        else:
            merge(args, container)
    except NutritionReportError as exc:
        _logger.error("%s", exc)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
