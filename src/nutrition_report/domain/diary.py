"""Domain models for diary days."""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum


class MealCategory(str, Enum):
    """Canonical meal sections of a diary day."""

    BREAKFAST = "breakfast"
    LUNCH = "lunch"
    DINNER = "dinner"
    SNACKS = "snacks"


def empty_meals() -> dict[MealCategory, list["MealItem"]]:
    """Return an empty meal mapping with every category present."""
    return {category: [] for category in MealCategory}


@dataclass(frozen=True)
class MealItem:
    """A single food entry logged in a meal."""

    name: str
    calories: float = 0
    carbs: float = 0
    fat: float = 0
    protein: float = 0
    sodium: float = 0
    sugar: float = 0


@dataclass(frozen=True)
class ExerciseItem:
    """A single exercise entry."""

    name: str
    calories_burned: float


@dataclass(frozen=True)
class DiaryTotals:
    """Summed nutrition figures for a day."""

    calories: float = 0
    carbs: float = 0
    fat: float = 0
    protein: float = 0
    sodium: float = 0
    sugar: float = 0
    calories_burned: float = 0

    @classmethod
    def from_items(
        cls, items: list[MealItem], calories_burned: float = 0
    ) -> "DiaryTotals":
        """Sum item macros; page-rendered totals are never used."""
        return cls(
            calories=sum(item.calories for item in items),
            carbs=sum(item.carbs for item in items),
            fat=sum(item.fat for item in items),
            protein=sum(item.protein for item in items),
            sodium=sum(item.sodium for item in items),
            sugar=sum(item.sugar for item in items),
            calories_burned=calories_burned,
        )


@dataclass(frozen=True)
class DiaryDay:
    """Normalized diary content for one calendar date."""

    date: date
    meals: dict[MealCategory, list[MealItem]] = field(default_factory=empty_meals)
    exercise: list[ExerciseItem] = field(default_factory=list)
    totals: DiaryTotals = field(default_factory=DiaryTotals)
    error: str | None = None

    @classmethod
    def failed(cls, day: date, message: str) -> "DiaryDay":
        """Return the zero-valued record kept for a day that could not be read."""
        return cls(date=day, error=message)

    @property
    def items(self) -> list[MealItem]:
        """All meal items across categories, in category order."""
        return [item for category in MealCategory for item in self.meals[category]]

    @property
    def has_data(self) -> bool:
        """Whether any calories were recorded for the day."""
        return self.totals.calories > 0
