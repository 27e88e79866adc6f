"""Domain models for weekly training reports."""

from dataclasses import dataclass, field
from datetime import date


@dataclass(frozen=True)
class TrainingActivity:
    """A completed or planned activity."""

    type: str
    moving_time_minutes: float


@dataclass(frozen=True)
class ReportRange:
    """Date range encoded in a training report file name."""

    start: str
    end: str
    name: str


@dataclass(frozen=True)
class TrainingWeek:
    """A persisted weekly training report, read-only."""

    start: date
    end: date
    total_hours: float
    total_tss: float
    total_distance_km: float
    activities: list[TrainingActivity] = field(default_factory=list)
    planned_activities: list[TrainingActivity] | None = None
    current_weight_kg: float | None = None
