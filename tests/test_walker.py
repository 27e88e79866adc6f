"""Tests for the date range walk."""

import asyncio
from datetime import date

import pytest

from nutrition_report.domain.diary import DiaryDay, DiaryTotals, MealCategory
from nutrition_report.errors import NavigationError, PreconditionError, WalkAborted
from nutrition_report.services.challenge import ChallengeResolver
from nutrition_report.services.walker import DateRangeWalker, DiaryFetcher, date_range
from tests.conftest import (
    FakePage,
    FakePageProvider,
    RecordingSleep,
    stale_context_error,
)


def _fetcher(provider: FakePageProvider, password: str | None = "secret") -> DiaryFetcher:
    return DiaryFetcher(
        pages=provider,
        resolver=ChallengeResolver(password=password, sleep=RecordingSleep()),
        base_url="https://www.myfitnesspal.com",
        username="runner",
        locale="pt",
        sleep=RecordingSleep(),
    )


def test_date_range_is_inclusive() -> None:
    days = date_range(date(2024, 2, 27), date(2024, 3, 1))

    assert days == [
        date(2024, 2, 27),
        date(2024, 2, 28),
        date(2024, 2, 29),
        date(2024, 3, 1),
    ]


def test_walk_isolates_failing_day() -> None:
    async def operation(day: date) -> DiaryDay:
        if day == date(2024, 1, 2):
            raise TimeoutError("Navigation timeout of 60000 ms exceeded")
        return DiaryDay(date=day, totals=DiaryTotals(calories=2000))

    sleep = RecordingSleep()
    walker = DateRangeWalker(operation, pacing_seconds=1.5, sleep=sleep)

    days = asyncio.run(walker.walk(date(2024, 1, 1), date(2024, 1, 3)))

    assert [day.date for day in days] == [
        date(2024, 1, 1),
        date(2024, 1, 2),
        date(2024, 1, 3),
    ]
    failed = days[1]
    assert failed.error == "Navigation timeout of 60000 ms exceeded"
    assert failed.totals == DiaryTotals()
    assert all(items == [] for items in failed.meals.values())
    assert failed.exercise == []
    assert days[0].error is None and days[2].error is None
    assert sleep.delays == [1.5, 1.5, 1.5]


def test_walk_propagates_precondition_errors() -> None:
    async def operation(day: date) -> DiaryDay:
        raise PreconditionError("Diary is password protected")

    walker = DateRangeWalker(operation, sleep=RecordingSleep())

    with pytest.raises(PreconditionError):
        asyncio.run(walker.walk(date(2024, 1, 1), date(2024, 1, 2)))


def test_fetch_builds_diary_day_from_page() -> None:
    provider = FakePageProvider()
    fetcher = _fetcher(provider)

    day = asyncio.run(fetcher.fetch(date(2024, 1, 5)))

    assert provider.page.visited == [
        "https://www.myfitnesspal.com/pt/food/diary/runner?date=2024-01-05"
    ]
    assert day.date == date(2024, 1, 5)
    assert day.error is None
    assert len(day.meals[MealCategory.BREAKFAST]) == 2
    assert day.totals.calories == 1765


def test_fetch_reacquires_page_once_on_stale_context() -> None:
    stale = FakePage(goto_errors=[stale_context_error()])
    fresh = FakePage()
    provider = FakePageProvider(page=stale, spare_pages=[fresh])
    fetcher = _fetcher(provider)

    day = asyncio.run(fetcher.fetch(date(2024, 1, 5)))

    assert provider.opened == 1
    assert fresh.visited == [fetcher.url_for(date(2024, 1, 5))]
    assert day.totals.calories == 1765


def test_fetch_gives_up_after_one_retry() -> None:
    provider = FakePageProvider(
        page=FakePage(goto_errors=[stale_context_error()]),
        spare_pages=[FakePage(goto_errors=[stale_context_error()])],
    )
    fetcher = _fetcher(provider)

    with pytest.raises(NavigationError):
        asyncio.run(fetcher.fetch(date(2024, 1, 5)))

    assert provider.opened == 1


def test_fetch_does_not_retry_non_recoverable_errors() -> None:
    provider = FakePageProvider(
        page=FakePage(goto_errors=[NavigationError("net::ERR_NAME_NOT_RESOLVED")])
    )
    fetcher = _fetcher(provider)

    with pytest.raises(NavigationError):
        asyncio.run(fetcher.fetch(date(2024, 1, 5)))

    assert provider.opened == 0


def test_walk_over_fetcher_records_error_after_failed_retry() -> None:
    provider = FakePageProvider(
        page=FakePage(goto_errors=[stale_context_error()]),
        spare_pages=[FakePage(goto_errors=[stale_context_error()])],
    )
    fetcher = _fetcher(provider)
    walker = DateRangeWalker(fetcher.fetch, sleep=RecordingSleep())

    days = asyncio.run(walker.walk(date(2024, 1, 5), date(2024, 1, 6)))

    assert days[0].error is not None
    assert "Execution context" in days[0].error
    assert days[1].error is None
    assert days[1].totals.calories == 1765


def test_fetch_submits_password_gate() -> None:
    provider = FakePageProvider(page=FakePage(password_gate=True))
    fetcher = _fetcher(provider)

    asyncio.run(fetcher.fetch(date(2024, 1, 5)))

    assert provider.page.passwords == ["secret"]


def test_walk_aborts_when_gate_has_no_password() -> None:
    provider = FakePageProvider(page=FakePage(password_gate=True))
    fetcher = _fetcher(provider, password=None)
    walker = DateRangeWalker(fetcher.fetch, sleep=RecordingSleep())

    with pytest.raises(PreconditionError):
        asyncio.run(walker.walk(date(2024, 1, 5), date(2024, 1, 6)))


def test_aborted_walk_keeps_days_read_so_far() -> None:
    async def operation(day: date) -> DiaryDay:
        if day == date(2024, 1, 3):
            raise PreconditionError("Diary is password protected")
        return DiaryDay(date=day, totals=DiaryTotals(calories=2000))

    walker = DateRangeWalker(operation, sleep=RecordingSleep())

    with pytest.raises(WalkAborted) as excinfo:
        asyncio.run(walker.walk(date(2024, 1, 1), date(2024, 1, 5)))

    assert [day.date for day in excinfo.value.days] == [
        date(2024, 1, 1),
        date(2024, 1, 2),
    ]
    assert "password protected" in str(excinfo.value)


def test_fetch_saves_page_html(tmp_path) -> None:
    provider = FakePageProvider()
    fetcher = _fetcher(provider)
    fetcher.save_html = tmp_path / "debug" / "last.html"

    asyncio.run(fetcher.fetch(date(2024, 1, 5)))

    assert "diary-table" in fetcher.save_html.read_text(encoding="utf-8")
