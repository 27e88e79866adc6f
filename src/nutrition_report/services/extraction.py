"""Diary page extraction.

Rows of the rendered diary table are classified by a pure function into
header, item or noise variants, then folded into meals with an explicit
"current meal" accumulator. Keyword lists and column offsets live in
``ClassificationRules`` so locale additions are data changes.
"""

import logging
import math
import re
import unicodedata
from dataclasses import dataclass, field, replace

from nutrition_report.adapters.html_tables import DiaryDocument, DiaryTable, TableRow
from nutrition_report.domain.diary import (
    DiaryTotals,
    ExerciseItem,
    MealCategory,
    MealItem,
    empty_meals,
)

_logger = logging.getLogger(__name__)

MIN_NAME_LENGTH = 2
MIN_CELLS = 2
_NON_NUMERIC = re.compile(r"[^\d.\-]")
_DIGIT = re.compile(r"\d")
_LEADING_NUMBER = re.compile(r"-?(?:\d+\.?\d*|\.\d+)")


@dataclass(frozen=True)
class ClassificationRules:
    """Keyword and column rules for reading diary tables."""

    category_keywords: dict[MealCategory, tuple[str, ...]] = field(
        default_factory=lambda: {
            MealCategory.BREAKFAST: ("breakfast", "cafe"),
            MealCategory.LUNCH: ("lunch", "almoco"),
            MealCategory.DINNER: ("dinner", "jantar"),
            MealCategory.SNACKS: ("snack", "lanche"),
        }
    )
    header_row_classes: tuple[str, ...] = ("meal_header", "bottom")
    noise_keywords: tuple[str, ...] = (
        "total",
        "totais",
        "add food",
        "adicionar alimento",
        "goal",
        "remaining",
        "quick tools",
        "your ip",
        "ray id",
    )
    exercise_noise_labels: tuple[str, ...] = (
        "total",
        "add exercise",
        "cardiovascular",
    )
    item_columns: tuple[str, ...] = (
        "calories",
        "carbs",
        "fat",
        "protein",
        "sodium",
        "sugar",
    )
    exercise_calories_column: int = 1
    default_category: MealCategory = MealCategory.SNACKS
    burned_fallback_patterns: tuple[str, ...] = (
        r"exercise[:\s]*[-]?(\d+)",
        r"earned[:\s]*(\d+)",
    )

    def category_for(self, normalized_text: str) -> MealCategory | None:
        """Return the first category whose keyword appears in the text."""
        for category, keywords in self.category_keywords.items():
            if any(keyword in normalized_text for keyword in keywords):
                return category
        return None


DEFAULT_RULES = ClassificationRules()


@dataclass(frozen=True)
class HeaderRow:
    """Row that opens a meal section; ``category`` is None when unrecognized."""

    category: MealCategory | None


@dataclass(frozen=True)
class ItemRow:
    """Row carrying a food entry."""

    item: MealItem


@dataclass(frozen=True)
class NoiseRow:
    """Totals, goal, add-food or diagnostic row."""

    reason: str


ClassifiedRow = HeaderRow | ItemRow | NoiseRow


@dataclass(frozen=True)
class ExtractedDiary:
    """Diary content read from one page, without its date."""

    meals: dict[MealCategory, list[MealItem]]
    exercise: list[ExerciseItem]
    totals: DiaryTotals


@dataclass(frozen=True)
class _MealFold:
    current: MealCategory
    meals: dict[MealCategory, tuple[MealItem, ...]]


def parse_number(value: object) -> float:
    """Parse the first line of a cell as a number; anything unparsable is 0."""
    if value is None:
        return 0.0
    if isinstance(value, bool):
        return 0.0
    if isinstance(value, int | float):
        return float(value)
    lines = [line.strip() for line in str(value).strip().splitlines() if line.strip()]
    if not lines:
        return 0.0
    try:
        parsed = float(lines[0])
    except ValueError:
        pass
    else:
        if math.isfinite(parsed):
            return parsed
    cleaned = _NON_NUMERIC.sub("", lines[0].replace(",", ""))
    match = _LEADING_NUMBER.match(cleaned)
    if match is None:
        return 0.0
    return float(match.group(0))


def normalize_label(text: str) -> str:
    """Lower-case text and strip diacritics for keyword matching."""
    decomposed = unicodedata.normalize("NFD", text.lower())
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def clean_name(text: str) -> str:
    """Normalize an item name to NFC with collapsed whitespace."""
    return " ".join(unicodedata.normalize("NFC", text).split())


def classify_row(row: TableRow, rules: ClassificationRules = DEFAULT_RULES) -> ClassifiedRow:
    """Classify a table row as header, item or noise."""
    normalized = normalize_label(row.text)
    if not normalized.strip():
        return NoiseRow("empty")

    marked = row.has_header_marker or any(
        css in row.classes for css in rules.header_row_classes
    )
    if marked:
        return HeaderRow(rules.category_for(normalized))

    category = rules.category_for(normalized)
    if category is not None and "total" not in normalized and not _has_values(row):
        return HeaderRow(category)

    if len(row.cells) < MIN_CELLS:
        return NoiseRow("too few cells")

    name = clean_name(row.cells[0])
    if len(name) < MIN_NAME_LENGTH:
        return NoiseRow("short name")
    for keyword in rules.noise_keywords:
        if keyword in normalized:
            return NoiseRow(keyword)

    values = {
        column: max(parse_number(_cell(row, offset)), 0.0)
        for offset, column in enumerate(rules.item_columns, start=1)
    }
    item = MealItem(name=name, **values)
    if item.calories > 0 or item.protein > 0 or item.carbs > 0:
        return ItemRow(item)
    return NoiseRow("no nutrition values")


def fold_rows(
    rows: list[ClassifiedRow], rules: ClassificationRules = DEFAULT_RULES
) -> dict[MealCategory, list[MealItem]]:
    """Assign item rows to the meal opened by the most recent header."""
    state = _MealFold(
        current=rules.default_category,
        meals={category: () for category in MealCategory},
    )
    for row in rows:
        state = _step(state, row)
    return {category: list(items) for category, items in state.meals.items()}


def _step(state: _MealFold, row: ClassifiedRow) -> _MealFold:
    if isinstance(row, HeaderRow):
        if row.category is None:
            return state
        return replace(state, current=row.category)
    if isinstance(row, ItemRow):
        meals = dict(state.meals)
        meals[state.current] = (*meals[state.current], row.item)
        return replace(state, meals=meals)
    return state


def extract_meals(
    table: DiaryTable | None, rules: ClassificationRules = DEFAULT_RULES
) -> dict[MealCategory, list[MealItem]]:
    """Read meal items from the primary diary table."""
    if table is None:
        return empty_meals()
    return fold_rows([classify_row(row, rules) for row in table.rows], rules)


def extract_exercise(
    table: DiaryTable | None, rules: ClassificationRules = DEFAULT_RULES
) -> list[ExerciseItem]:
    """Read exercise entries with a positive calories-burned value."""
    if table is None:
        return []
    entries = []
    for row in table.rows:
        if len(row.cells) < MIN_CELLS:
            continue
        name = clean_name(row.cells[0])
        burned = parse_number(_cell(row, rules.exercise_calories_column))
        label = name.lower()
        if not name or burned <= 0:
            continue
        if any(noise in label for noise in rules.exercise_noise_labels):
            continue
        entries.append(ExerciseItem(name=name, calories_burned=burned))
    return entries


def burned_from_text(text: str, rules: ClassificationRules = DEFAULT_RULES) -> float:
    """Fall back to the first calories-burned figure mentioned in page text."""
    for pattern in rules.burned_fallback_patterns:
        match = re.search(pattern, text, flags=re.IGNORECASE)
        if match:
            return float(int(match.group(1)))
    return 0.0


def extract_diary(
    document: DiaryDocument,
    *,
    include_exercise: bool = True,
    rules: ClassificationRules = DEFAULT_RULES,
) -> ExtractedDiary:
    """Turn a parsed diary page into meals, exercise and recomputed totals."""
    meals = extract_meals(document.food_table, rules)
    items = [item for category in MealCategory for item in meals[category]]
    exercise: list[ExerciseItem] = []
    burned = 0.0
    if include_exercise:
        exercise = extract_exercise(document.exercise_table, rules)
        burned = sum(entry.calories_burned for entry in exercise)
        if burned == 0:
            burned = burned_from_text(document.visible_text, rules)
            if burned:
                _logger.debug("Calories burned taken from page text: %s", burned)
    return ExtractedDiary(
        meals=meals,
        exercise=exercise,
        totals=DiaryTotals.from_items(items, calories_burned=burned),
    )


def _cell(row: TableRow, offset: int) -> str:
    if offset < len(row.cells):
        return row.cells[offset]
    return ""


def _has_values(row: TableRow) -> bool:
    return any(_DIGIT.search(cell) for cell in row.cells[1:])
