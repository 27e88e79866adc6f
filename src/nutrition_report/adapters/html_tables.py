"""lxml adapter turning rendered diary HTML into a plain table model."""

import copy
from dataclasses import dataclass

from lxml import html

PRIMARY_TABLE_XPATHS: tuple[str, ...] = (
    "//table[@id='diary-table']",
    "//table[contains(concat(' ', normalize-space(@class), ' '), ' table0 ')]",
    "//*[contains(concat(' ', normalize-space(@class), ' '), ' diary-table ')]",
    "//table",
)

EXERCISE_TABLE_XPATHS: tuple[str, ...] = (
    "//table[@id='diary-exercise-table']",
    "//table[contains(concat(' ', normalize-space(@class), ' '), ' table1 ')]",
    "//*[contains(@id, 'exercise')]",
)

_HEADER_MARKER_XPATH = ".//*[contains(concat(' ', normalize-space(@class), ' '), ' meal_header ')]"


@dataclass(frozen=True)
class TableRow:
    """Text content of one table row."""

    cells: list[str]
    text: str
    classes: frozenset[str] = frozenset()
    has_header_marker: bool = False


@dataclass(frozen=True)
class DiaryTable:
    """Rows of a diary table, in document order."""

    rows: list[TableRow]


@dataclass(frozen=True)
class DiaryDocument:
    """Parsed diary page reduced to what extraction reads."""

    food_table: DiaryTable | None
    exercise_table: DiaryTable | None
    visible_text: str


def parse_document(page_html: str) -> DiaryDocument:
    """Parse page HTML and locate the food and exercise tables."""
    if not page_html.strip():
        return DiaryDocument(food_table=None, exercise_table=None, visible_text="")
    root = html.fromstring(page_html)
    return DiaryDocument(
        food_table=find_table(root, PRIMARY_TABLE_XPATHS),
        exercise_table=find_table(root, EXERCISE_TABLE_XPATHS),
        visible_text=visible_text(root),
    )


def find_table(root: html.HtmlElement, candidates: tuple[str, ...]) -> DiaryTable | None:
    """Return the first candidate match as a table model, if any."""
    for xpath in candidates:
        matches = root.xpath(xpath)
        if matches:
            return _table_model(matches[0])
    return None


def visible_text(root: html.HtmlElement) -> str:
    """Return the body text without script and style content."""
    body = root.find("body")
    target = copy.deepcopy(body if body is not None else root)
    for element in target.xpath(".//script|.//style|.//noscript"):
        element.drop_tree()
    return target.text_content()


def _table_model(element: html.HtmlElement) -> DiaryTable:
    rows = []
    for row in element.iter("tr"):
        classes = frozenset((row.get("class") or "").split())
        rows.append(
            TableRow(
                cells=[cell.text_content() for cell in row.xpath("./td")],
                text=row.text_content(),
                classes=classes,
                has_header_marker=bool(row.xpath(_HEADER_MARKER_XPATH)),
            )
        )
    return DiaryTable(rows=rows)
