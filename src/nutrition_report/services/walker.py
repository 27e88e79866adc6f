"""Date range walk over diary pages with per-day fault isolation."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import date, timedelta
from pathlib import Path

from nutrition_report.adapters.browser import DiaryPage, PageProvider
from nutrition_report.adapters.html_tables import parse_document
from nutrition_report.config import diary_url
from nutrition_report.domain.diary import DiaryDay
from nutrition_report.errors import NavigationError, PreconditionError, WalkAborted
from nutrition_report.services.challenge import ChallengeResolver, Sleep
from nutrition_report.services.extraction import (
    DEFAULT_RULES,
    ClassificationRules,
    extract_diary,
)

_logger = logging.getLogger(__name__)

DayOperation = Callable[[date], Awaitable[DiaryDay]]


def date_range(start: date, end: date) -> list[date]:
    """Every calendar date from start to end, inclusive."""
    return [start + timedelta(days=offset) for offset in range((end - start).days + 1)]


@dataclass
class DiaryFetcher:
    """Navigate, clear gates and extract one diary day."""

    pages: PageProvider
    resolver: ChallengeResolver
    base_url: str
    username: str
    locale: str | None = None
    include_exercise: bool = True
    settle_seconds: float = 2
    navigation_retries: int = 1
    save_html: Path | None = None
    rules: ClassificationRules = DEFAULT_RULES
    sleep: Sleep = asyncio.sleep

    def url_for(self, day: date) -> str:
        """Diary URL for a day."""
        return diary_url(self.base_url, self.locale, self.username, day)

    async def prepare(self) -> None:
        """Clear gates on the page the session starts on."""
        page = await self.pages.current_page()
        await self.resolver.resolve(page)

    async def fetch(self, day: date) -> DiaryDay:
        """Read one day, re-acquiring the page once on a stale context."""
        url = self.url_for(day)
        page = await self._goto(url)
        await self.sleep(self.settle_seconds)
        await self.resolver.resolve(page, url)
        page_html = await page.content()
        if self.save_html is not None:
            self.save_html.parent.mkdir(parents=True, exist_ok=True)
            self.save_html.write_text(page_html, encoding="utf-8")
        document = parse_document(page_html)
        extracted = extract_diary(
            document, include_exercise=self.include_exercise, rules=self.rules
        )
        return DiaryDay(
            date=day,
            meals=extracted.meals,
            exercise=extracted.exercise,
            totals=extracted.totals,
        )

    async def _goto(self, url: str) -> DiaryPage:
        page = await self.pages.current_page()
        attempt = 0
        while True:
            try:
                await page.goto(url)
                return page
            except NavigationError as exc:
                if not exc.recoverable or attempt >= self.navigation_retries:
                    raise
                attempt += 1
                _logger.warning("Page context lost (%s), opening a fresh page", exc)
                page = await self.pages.new_page()


@dataclass
class DateRangeWalker:
    """Run a per-day operation over a date range, one day at a time."""

    operation: DayOperation
    pacing_seconds: float = 1.5
    sleep: Sleep = asyncio.sleep

    async def walk(self, start: date, end: date) -> list[DiaryDay]:
        """Return exactly one record per date in ascending order."""
        days: list[DiaryDay] = []
        for day in date_range(start, end):
            try:
                days.append(await self._run_day(day))
            except PreconditionError as exc:
                raise WalkAborted(str(exc), days) from exc
            await self.sleep(self.pacing_seconds)
        return days

    async def _run_day(self, day: date) -> DiaryDay:
        try:
            record = await self.operation(day)
        except PreconditionError:
            raise
        except Exception as exc:
            message = str(exc) or type(exc).__name__
            _logger.error("%s ERROR: %s", day.isoformat(), message)
            return DiaryDay.failed(day, message)
        _log_day(record)
        return record


def _log_day(record: DiaryDay) -> None:
    burned = record.totals.calories_burned
    burned_text = f", -{round(burned)} exercise" if burned > 0 else ""
    _logger.info(
        "%s OK - %s items, %s kcal%s",
        record.date.isoformat(),
        len(record.items),
        round(record.totals.calories),
        burned_text,
    )
