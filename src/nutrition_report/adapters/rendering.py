"""Text renderings of diary days and merged reports."""

from nutrition_report.domain.diary import DiaryDay, MealCategory
from nutrition_report.domain.report import MergedReport

CSV_HEADER = "date,meal,name,calories,carbs,fat,protein,sodium,sugar"
CRITIQUE_NOTE = "Critique must be filled in manually."
MANUAL_PLACEHOLDER = "- (to be filled in manually)"


def _number(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))


def _quote(text: str) -> str:
    escaped = text.replace('"', '""')
    return f'"{escaped}"'


def diary_csv(days: list[DiaryDay]) -> str:
    """One CSV row per meal item, names double-quoted."""
    rows = [CSV_HEADER]
    for day in days:
        for category in MealCategory:
            for item in day.meals[category]:
                rows.append(
                    ",".join(
                        [
                            day.date.isoformat(),
                            category.value,
                            _quote(item.name),
                            _number(item.calories),
                            _number(item.carbs),
                            _number(item.fat),
                            _number(item.protein),
                            _number(item.sodium),
                            _number(item.sugar),
                        ]
                    )
                )
    return "\n".join(rows)


def merged_report_payload(report: MergedReport) -> dict[str, object]:
    """JSON-ready payload of a merged report."""
    nutrition = report.nutrition
    next_week = report.next_week
    return {
        "period": {"start": report.start.isoformat(), "end": report.end.isoformat()},
        "training": {
            "totalHours": report.training.total_hours,
            "totalTss": report.training.total_tss,
            "totalDistanceKm": report.training.total_distance_km,
            "byTypeMinutes": dict(report.training.by_type_minutes),
            "countByType": dict(report.training.count_by_type),
        },
        "nutrition": {
            "daysTotal": nutrition.days_total,
            "daysWithData": nutrition.days_with_data,
            "totals": vars(nutrition.totals).copy(),
            "averages": vars(nutrition.averages).copy(),
            "netAverage": nutrition.net_average,
        },
        "nextWeek": (
            {
                "plannedCount": next_week.planned_count,
                "byTypeMinutes": dict(next_week.by_type_minutes),
                "estimatedTrainingKcal": next_week.estimated_training_kcal,
                "estimatedDailyKcal": next_week.estimated_daily_kcal,
                "kcalByType": dict(next_week.kcal_by_type),
            }
            if next_week is not None
            else None
        ),
        "critique": list(report.critique),
        "critique_manual": True,
        "critique_note": CRITIQUE_NOTE,
    }


def merged_report_markdown(report: MergedReport) -> str:
    """Human-readable rendering under fixed section headings."""
    training = report.training
    nutrition = report.nutrition
    averages = nutrition.averages
    lines = [
        f"# Nutrition Report ({report.start.isoformat()} to {report.end.isoformat()})",
        "",
        "## Executed Week Summary",
        f"- Training: {training.total_hours} h, {training.total_tss} TSS",
        f"- Total distance: {training.total_distance_km} km",
        f"- Diary: {nutrition.days_with_data}/{nutrition.days_total} days with data",
        f"- Average calories: {averages.calories} kcal",
        f"- Average protein: {averages.protein} g",
        f"- Average carbs: {averages.carbs} g",
        f"- Average fat: {averages.fat} g",
    ]
    if averages.burned > 0:
        lines.append(f"- Exercise calories (diary): -{averages.burned} kcal")
        lines.append(f"- Net calories: {nutrition.net_average} kcal")
    lines += [
        "",
        "## Critique of Executed Week",
        MANUAL_PLACEHOLDER,
        "",
        "## Supplement Timing",
        MANUAL_PLACEHOLDER,
        "",
        "## Next Week (Planned)",
    ]
    if report.next_week is not None:
        lines.append(f"- Planned sessions: {report.next_week.planned_count}")
        lines.append(
            f"- Estimated training expenditure: {report.next_week.estimated_training_kcal} kcal"
            f" (average {report.next_week.estimated_daily_kcal} kcal/day)"
        )
    else:
        lines.append("- No planning data for next week.")
    lines += [
        "",
        "## Notes",
        "- Calorie estimates are MET-based approximations.",
    ]
    return "\n".join(lines)
