"""Period statistics over diary days."""

import math

from nutrition_report.domain.diary import DiaryDay
from nutrition_report.domain.report import MacroFigures, NutritionSummary


def round_half_up(value: float, digits: int = 0) -> float:
    """Round to ``digits`` places with halves rounded up."""
    scale = 10**digits
    return math.floor((value or 0) * scale + 0.5) / scale


def summarize_nutrition(days: list[DiaryDay]) -> NutritionSummary:
    """Sum and average the days that recorded any calories."""
    with_data = [day for day in days if day.has_data]
    count = len(with_data)

    calories = sum(day.totals.calories for day in with_data)
    protein = sum(day.totals.protein for day in with_data)
    carbs = sum(day.totals.carbs for day in with_data)
    fat = sum(day.totals.fat for day in with_data)
    burned = sum(day.totals.calories_burned for day in with_data)

    totals = MacroFigures(
        calories=int(round_half_up(calories)),
        protein=int(round_half_up(protein)),
        carbs=int(round_half_up(carbs)),
        fat=int(round_half_up(fat)),
        burned=int(round_half_up(burned)),
    )
    if count:
        averages = MacroFigures(
            calories=int(round_half_up(calories / count)),
            protein=int(round_half_up(protein / count)),
            carbs=int(round_half_up(carbs / count)),
            fat=int(round_half_up(fat / count)),
            burned=int(round_half_up(burned / count)),
        )
    else:
        averages = MacroFigures(calories=0, protein=0, carbs=0, fat=0, burned=0)

    return NutritionSummary(
        days_total=len(days),
        days_with_data=count,
        totals=totals,
        averages=averages,
        net_average=averages.calories - averages.burned,
    )
