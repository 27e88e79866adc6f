"""Domain models for the merged nutrition and training report."""

from dataclasses import dataclass, field
from datetime import date


@dataclass(frozen=True)
class MacroFigures:
    """Rounded calories and macros for a period."""

    calories: int
    protein: int
    carbs: int
    fat: int
    burned: int


@dataclass(frozen=True)
class NutritionSummary:
    """Period statistics over diary days."""

    days_total: int
    days_with_data: int
    totals: MacroFigures
    averages: MacroFigures
    net_average: int


@dataclass(frozen=True)
class TrainingSummary:
    """Summary of a completed training week."""

    total_hours: float
    total_tss: float
    total_distance_km: float
    by_type_minutes: dict[str, float]
    count_by_type: dict[str, int]


@dataclass(frozen=True)
class NextWeekEstimate:
    """MET-based energy estimate for planned training."""

    planned_count: int
    by_type_minutes: dict[str, float]
    estimated_training_kcal: int
    estimated_daily_kcal: int
    kcal_by_type: dict[str, int]


@dataclass(frozen=True)
class MergedReport:
    """Nutrition and training data joined for one week."""

    start: date
    end: date
    training: TrainingSummary
    nutrition: NutritionSummary
    next_week: NextWeekEstimate | None
    critique: list[str] = field(default_factory=list)
