"""Shared test fixtures."""

from dataclasses import dataclass, field

import pytest

from nutrition_report.adapters.browser import DiaryPage, PageProvider
from nutrition_report.config import Settings
from nutrition_report.domain.training import TrainingWeek
from nutrition_report.errors import NavigationError

DIARY_HTML_EN = """
<html><head><title>Food Diary | MyFitnessPal</title>
<script>var exercise = 12345;</script></head>
<body>
<table id="diary-table" class="table0">
  <tr class="meal_header"><td class="first alt">Breakfast</td>
    <td>Calories</td><td>Carbs</td><td>Fat</td><td>Protein</td><td>Sodium</td><td>Sugar</td></tr>
  <tr><td class="first alt">Oatmeal, rolled oats</td>
    <td>300</td><td>54</td><td>5</td><td>10</td><td>0</td><td>1</td></tr>
  <tr><td class="first alt">Banana</td>
    <td>105</td><td>27</td><td>0.4</td><td>1.3</td><td>1</td><td>14</td></tr>
  <tr class="bottom"><td class="first">Add Food Quick Tools</td>
    <td>405</td><td>81</td><td>5.4</td><td>11.3</td><td>1</td><td>15</td></tr>
  <tr class="meal_header"><td class="first alt">Lunch</td>
    <td>Calories</td><td>Carbs</td><td>Fat</td><td>Protein</td><td>Sodium</td><td>Sugar</td></tr>
  <tr><td class="first alt">Chicken breast "grilled"</td>
    <td>1,200</td><td>0</td><td>20</td><td>
      <span class="macro-value">150</span>
      <span class="macro-percentage">60</span></td><td>400</td><td>0</td></tr>
  <tr class="meal_header"><td class="first alt">Dinner</td>
    <td>Calories</td><td>Carbs</td><td>Fat</td><td>Protein</td><td>Sodium</td><td>Sugar</td></tr>
  <tr class="meal_header"><td class="first alt">Snacks</td>
    <td>Calories</td><td>Carbs</td><td>Fat</td><td>Protein</td><td>Sodium</td><td>Sugar</td></tr>
  <tr><td class="first alt">Almonds</td>
    <td>160</td><td>6</td><td>14</td><td>6</td><td>0</td><td>1</td></tr>
  <tr><td class="first alt">Water</td>
    <td>0</td><td>0</td><td>0</td><td>0</td><td>0</td><td>0</td></tr>
  <tr class="total"><td class="first">Totals</td>
    <td>9999</td><td>999</td><td>99</td><td>99</td><td>9</td><td>9</td></tr>
  <tr class="total alt"><td class="first">Your Daily Goal</td>
    <td>2000</td><td>250</td><td>67</td><td>100</td><td>2300</td><td>50</td></tr>
  <tr class="total remaining"><td class="first">Remaining</td>
    <td>35</td><td>82</td><td>27</td><td>0</td><td>1898</td><td>19</td></tr>
</table>
<table id="diary-exercise-table" class="table1">
  <tr><td class="first">Running (jogging), 10 km/h</td><td>450</td></tr>
  <tr><td class="first">Cycling, stationary</td><td>250</td></tr>
  <tr><td class="first">Totals</td><td>700</td></tr>
  <tr><td class="first">Add Exercise</td><td>0</td></tr>
</table>
</body></html>
"""

DIARY_HTML_PT = """
<html><body>
<table class="table0">
  <tr><td>Café da Manhã</td><td>Calorias</td><td>Carboidratos</td><td>Gorduras</td>
    <td>Proteínas</td><td>Sódio</td><td>Açúcar</td></tr>
  <tr><td>Pão francês</td><td>150</td><td>29</td><td>2</td><td>5</td><td>300</td><td>1</td></tr>
  <tr><td>Almoço</td><td>Calorias</td><td>Carboidratos</td><td>Gorduras</td>
    <td>Proteínas</td><td>Sódio</td><td>Açúcar</td></tr>
  <tr><td>Arroz branco</td><td>200</td><td>44</td><td>0.5</td><td>4</td><td>1</td><td>0</td></tr>
  <tr><td>Feijão carioca</td><td>76</td><td>13.6</td><td>0.5</td><td>4.8</td><td>2</td><td>0</td></tr>
  <tr><td>Adicionar alimento</td><td>276</td><td>57</td><td>1</td><td>8.8</td><td>3</td><td>0</td></tr>
  <tr><td>Jantar</td><td>Calorias</td><td>Carboidratos</td><td>Gorduras</td>
    <td>Proteínas</td><td>Sódio</td><td>Açúcar</td></tr>
  <tr><td>Frango grelhado</td><td>165</td><td>0</td><td>3.6</td><td>31</td><td>74</td><td>0</td></tr>
  <tr><td>Lanches</td><td>Calorias</td><td>Carboidratos</td><td>Gorduras</td>
    <td>Proteínas</td><td>Sódio</td><td>Açúcar</td></tr>
  <tr><td>Iogurte natural</td><td>90</td><td>7</td><td>5</td><td>5</td><td>60</td><td>7</td></tr>
  <tr><td>Totais</td><td>681</td><td>93.6</td><td>11.6</td><td>49.8</td><td>437</td><td>8</td></tr>
</table>
<p>Calories Remaining. Exercise: -320 earned today</p>
</body></html>
"""

CHALLENGE_HTML = """
<html><head><title>Just a moment...</title></head>
<body><div id="cf_chl_opt">Checking your browser</div></body></html>
"""

PASSWORD_HTML = """
<html><head><title>Food Diary</title></head>
<body><form><input type="password" name="password"/>
<button type="submit">Go</button></form></body></html>
"""


@dataclass
class FakePage(DiaryPage):
    """Scripted page: each read pops the next HTML until one remains."""

    documents: list[str] = field(default_factory=lambda: [DIARY_HTML_EN])
    titles: list[str] = field(default_factory=list)
    password_gate: bool = False
    goto_errors: list[Exception] = field(default_factory=list)
    visited: list[str] = field(default_factory=list)
    passwords: list[str] = field(default_factory=list)

    async def goto(self, url: str) -> None:
        self.visited.append(url)
        if self.goto_errors:
            raise self.goto_errors.pop(0)

    async def content(self) -> str:
        if len(self.documents) > 1:
            return self.documents.pop(0)
        return self.documents[0]

    async def title(self) -> str:
        if len(self.titles) > 1:
            return self.titles.pop(0)
        return self.titles[0] if self.titles else ""

    async def has_password_field(self) -> bool:
        return self.password_gate

    async def submit_password(self, password: str) -> None:
        self.passwords.append(password)
        self.password_gate = False


@dataclass
class FakePageProvider(PageProvider):
    """Page provider handing out scripted pages."""

    page: FakePage = field(default_factory=FakePage)
    spare_pages: list[FakePage] = field(default_factory=list)
    opened: int = 0

    async def current_page(self) -> DiaryPage:
        return self.page

    async def new_page(self) -> DiaryPage:
        self.opened += 1
        self.page = self.spare_pages.pop(0) if self.spare_pages else FakePage()
        return self.page


@dataclass
class RecordingSleep:
    """Async sleep replacement that records requested delays."""

    delays: list[float] = field(default_factory=list)

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


def stale_context_error() -> NavigationError:
    return NavigationError(
        "Navigation failed: Execution context was destroyed", recoverable=True
    )


def training_report(
    start: str,
    end: str,
    *,
    weight: float | None = 70,
    activities: list[dict[str, object]] | None = None,
    planned: list[dict[str, object]] | None = None,
    hours: float = 6.5,
    tss: float = 420,
    distance: float = 150.2,
) -> dict[str, object]:
    """Persisted training report payload."""
    payload: dict[str, object] = {
        "semana": {
            "inicio": start,
            "fim": end,
            "tempo_total_horas": hours,
            "carga_total_tss": tss,
            "distancia_total_km": distance,
        },
        "metricas": {"peso_atual": weight},
        "atividades": activities or [],
    }
    if planned is not None:
        payload["treinos_planejados"] = planned
    return payload


@dataclass
class InMemoryTrainingReports:
    """In-memory training report repository."""

    reports: dict[str, TrainingWeek] = field(default_factory=dict)
    loaded: list[str] = field(default_factory=list)

    def list_report_names(self) -> list[str]:
        return sorted(self.reports)

    def load_week(self, name: str) -> TrainingWeek:
        self.loaded.append(name)
        return self.reports[name]


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        _env_file=None,
        mfp_username="runner",
        mfp_diary_password="secret",
        intervals_dir=str(tmp_path / "Relatorios_Intervals"),
        mfp_dir=str(tmp_path / "Relatorios_MFP"),
        nutri_dir=str(tmp_path / "Relatorios_Nutri"),
    )
