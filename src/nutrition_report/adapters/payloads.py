"""Pydantic models for persisted diary and training report JSON."""

from datetime import date

from pydantic import BaseModel, ConfigDict, Field

from nutrition_report.domain.diary import (
    DiaryDay,
    DiaryTotals,
    ExerciseItem,
    MealCategory,
    MealItem,
)
from nutrition_report.domain.training import TrainingActivity, TrainingWeek


def _compact(value: float) -> float | int:
    if float(value).is_integer():
        return int(value)
    return value


class MealItemPayload(BaseModel):
    """Meal item as written to the diary JSON."""

    name: str
    calories: float = 0
    carbs: float = 0
    fat: float = 0
    protein: float = 0
    sodium: float = 0
    sugar: float = 0


class ExercisePayload(BaseModel):
    """Exercise entry as written to the diary JSON."""

    model_config = ConfigDict(populate_by_name=True)

    name: str
    calories_burned: float = Field(alias="caloriesBurned")


class TotalsPayload(BaseModel):
    """Day totals as written to the diary JSON."""

    model_config = ConfigDict(populate_by_name=True)

    calories: float = 0
    carbs: float = 0
    fat: float = 0
    protein: float = 0
    sodium: float = 0
    sugar: float = 0
    calories_burned: float = Field(default=0, alias="caloriesBurned")


class MealsPayload(BaseModel):
    """Meal sections of a day."""

    breakfast: list[MealItemPayload] = Field(default_factory=list)
    lunch: list[MealItemPayload] = Field(default_factory=list)
    dinner: list[MealItemPayload] = Field(default_factory=list)
    snacks: list[MealItemPayload] = Field(default_factory=list)


class DiaryDayPayload(BaseModel):
    """One day of the diary JSON output."""

    date: date
    error: str | None = None
    meals: MealsPayload = Field(default_factory=MealsPayload)
    exercise: list[ExercisePayload] = Field(default_factory=list)
    totals: TotalsPayload = Field(default_factory=TotalsPayload)

    @classmethod
    def from_domain(cls, day: DiaryDay) -> "DiaryDayPayload":
        """Build the payload for a domain record."""
        meals = MealsPayload(
            **{
                category.value: [
                    MealItemPayload(**vars(item)) for item in day.meals[category]
                ]
                for category in MealCategory
            }
        )
        return cls(
            date=day.date,
            error=day.error,
            meals=meals,
            exercise=[
                ExercisePayload(name=e.name, calories_burned=e.calories_burned)
                for e in day.exercise
            ],
            totals=TotalsPayload(**vars(day.totals)),
        )

    def to_domain(self) -> DiaryDay:
        """Convert back to the domain record."""
        return DiaryDay(
            date=self.date,
            meals={
                category: [
                    MealItem(**item.model_dump())
                    for item in getattr(self.meals, category.value)
                ]
                for category in MealCategory
            },
            exercise=[
                ExerciseItem(name=e.name, calories_burned=e.calories_burned)
                for e in self.exercise
            ],
            totals=DiaryTotals(**self.totals.model_dump()),
            error=self.error,
        )

    def to_json_dict(self) -> dict[str, object]:
        """Serialize with camelCase keys and whole numbers kept integral."""
        data: dict[str, object] = {"date": self.date.isoformat()}
        if self.error is not None:
            data["error"] = self.error
        data["meals"] = {
            meal: [
                {key: _compact(value) if key != "name" else value for key, value in item.items()}
                for item in items
            ]
            for meal, items in self.meals.model_dump().items()
        }
        data["exercise"] = [
            {"name": e.name, "caloriesBurned": _compact(e.calories_burned)}
            for e in self.exercise
        ]
        data["totals"] = {
            key: _compact(value)
            for key, value in self.totals.model_dump(by_alias=True).items()
        }
        return data


class ActivityPayload(BaseModel):
    """Completed or planned activity in a training report."""

    type: str | None = None
    moving_time_min: float | None = None


class WeekHeaderPayload(BaseModel):
    """``semana`` block of a training report."""

    inicio: date
    fim: date
    tempo_total_horas: float | None = None
    carga_total_tss: float | None = None
    distancia_total_km: float | None = None


class MetricsPayload(BaseModel):
    """``metricas`` block of a training report."""

    peso_atual: float | None = None


class TrainingReportPayload(BaseModel):
    """Persisted weekly training report."""

    model_config = ConfigDict(extra="ignore")

    semana: WeekHeaderPayload
    metricas: MetricsPayload = Field(default_factory=MetricsPayload)
    atividades: list[ActivityPayload] = Field(default_factory=list)
    treinos_planejados: list[ActivityPayload] | None = None

    def to_domain(self) -> TrainingWeek:
        """Convert to the read-only training week."""
        return TrainingWeek(
            start=self.semana.inicio,
            end=self.semana.fim,
            total_hours=self.semana.tempo_total_horas or 0,
            total_tss=self.semana.carga_total_tss or 0,
            total_distance_km=self.semana.distancia_total_km or 0,
            activities=[_activity(a) for a in self.atividades],
            planned_activities=(
                [_activity(a) for a in self.treinos_planejados]
                if self.treinos_planejados is not None
                else None
            ),
            current_weight_kg=self.metricas.peso_atual,
        )


def _activity(payload: ActivityPayload) -> TrainingActivity:
    return TrainingActivity(
        type=payload.type or "Unknown",
        moving_time_minutes=payload.moving_time_min or 0,
    )
