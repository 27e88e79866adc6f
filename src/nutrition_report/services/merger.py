"""Join diary statistics with weekly training reports."""

import logging
import re
from dataclasses import dataclass
from pathlib import PurePath
from typing import Protocol

from nutrition_report.domain.diary import DiaryDay
from nutrition_report.domain.report import (
    MergedReport,
    NextWeekEstimate,
    NutritionSummary,
    TrainingSummary,
)
from nutrition_report.domain.training import ReportRange, TrainingActivity, TrainingWeek
from nutrition_report.errors import PreconditionError
from nutrition_report.services.aggregation import round_half_up, summarize_nutrition

REPORT_NAME = re.compile(r"^report_(\d{4}-\d{2}-\d{2})_(\d{4}-\d{2}-\d{2})\.json$")

MET_BY_TYPE: dict[str, float] = {
    "Ride": 8,
    "Run": 9,
    "Swim": 8,
    "Workout": 3.5,
    "WeightTraining": 3.5,
}

DAYS_PER_WEEK = 7

_logger = logging.getLogger(__name__)


class TrainingReportRepository(Protocol):
    """Read access to persisted weekly training reports."""

    def list_report_names(self) -> list[str]:
        """Return the file names of available reports."""

    def load_week(self, name: str) -> TrainingWeek:
        """Load a report by file name."""


def parse_report_range(name: str) -> ReportRange | None:
    """Parse ``report_<start>_<end>.json``; other names yield None."""
    match = REPORT_NAME.match(name)
    if match is None:
        return None
    return ReportRange(start=match.group(1), end=match.group(2), name=name)


def select_current(names: list[str]) -> ReportRange | None:
    """The report with the greatest start date."""
    ranges = [r for r in (parse_report_range(name) for name in names) if r]
    if not ranges:
        return None
    return max(ranges, key=lambda r: (r.start, r.end))


def select_next(names: list[str], current: ReportRange) -> ReportRange | None:
    """The earliest report starting strictly after ``current`` ends."""
    ranges = sorted(
        (r for r in (parse_report_range(name) for name in names) if r),
        key=lambda r: r.start,
    )
    for candidate in ranges:
        if candidate.start > current.end:
            return candidate
    return None


def minutes_by_type(activities: list[TrainingActivity]) -> dict[str, float]:
    """Total moving minutes per activity type, rounded to one decimal."""
    totals: dict[str, float] = {}
    for activity in activities:
        kind = activity.type or "Unknown"
        totals[kind] = round_half_up(
            totals.get(kind, 0) + (activity.moving_time_minutes or 0), 1
        )
    return totals


def summarize_training(week: TrainingWeek) -> TrainingSummary:
    """Totals from the week header plus per-type minutes and counts."""
    counts: dict[str, int] = {}
    for activity in week.activities:
        kind = activity.type or "Unknown"
        counts[kind] = counts.get(kind, 0) + 1
    return TrainingSummary(
        total_hours=week.total_hours,
        total_tss=week.total_tss,
        total_distance_km=week.total_distance_km,
        by_type_minutes=minutes_by_type(week.activities),
        count_by_type=counts,
    )


def estimate_next_week(
    week: TrainingWeek | None, weight_kg: float | None
) -> NextWeekEstimate | None:
    """MET estimate of planned training energy; None without plan or weight."""
    if week is None or week.planned_activities is None:
        return None
    if not weight_kg or weight_kg <= 0:
        return None
    planned = week.planned_activities
    by_type = minutes_by_type(planned)

    kcal_by_type: dict[str, int] = {}
    total_kcal = 0.0
    for kind, minutes in by_type.items():
        met = MET_BY_TYPE.get(kind, 0)
        kcal = met * weight_kg * (minutes / 60)
        if kcal > 0:
            kcal_by_type[kind] = int(round_half_up(kcal))
            total_kcal += kcal

    return NextWeekEstimate(
        planned_count=len(planned),
        by_type_minutes=by_type,
        estimated_training_kcal=int(round_half_up(total_kcal)),
        estimated_daily_kcal=(
            int(round_half_up(total_kcal / DAYS_PER_WEEK)) if planned else 0
        ),
        kcal_by_type=kcal_by_type,
    )


def merge_report(
    current: TrainingWeek,
    nutrition: NutritionSummary,
    next_week: TrainingWeek | None = None,
) -> MergedReport:
    """Build the merged report; the critique is left for manual completion."""
    return MergedReport(
        start=current.start,
        end=current.end,
        training=summarize_training(current),
        nutrition=nutrition,
        next_week=estimate_next_week(next_week, current.current_weight_kg),
        critique=[],
    )


@dataclass
class TrainingMerger:
    """Locate the current and next training weeks and merge them with diary data."""

    repository: TrainingReportRepository

    def locate(self) -> tuple[ReportRange, ReportRange | None]:
        """Return the current week and, if present, the next planned week."""
        names = self.repository.list_report_names()
        current = select_current(names)
        if current is None:
            raise PreconditionError("No current-week training report found")
        return current, select_next(names, current)

    def merge(
        self,
        days: list[DiaryDay] | None,
        current_name: str | None = None,
        next_name: str | None = None,
    ) -> MergedReport:
        """Merge diary days with the selected training weeks."""
        if days is None:
            raise PreconditionError("No nutrition diary data available to merge")
        if current_name is None:
            current_range, next_range = self.locate()
            current_name = current_range.name
        else:
            current_range = parse_report_range(PurePath(current_name).name)
            next_range = None
            if current_range is not None:
                names = self.repository.list_report_names()
                next_range = select_next(names, current_range)
        if next_name is None and next_range is not None:
            next_name = next_range.name

        current = self.repository.load_week(current_name)
        next_week = self.repository.load_week(next_name) if next_name else None
        if next_week is None:
            _logger.info("No planned week after %s", current_name)
        return merge_report(current, summarize_nutrition(days), next_week)
