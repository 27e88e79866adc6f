"""Error taxonomy for the diary scrape and report merge."""

from nutrition_report.domain.diary import DiaryDay


class NutritionReportError(Exception):
    """Base class for errors surfaced to the command line."""


class PreconditionError(NutritionReportError):
    """A required input is missing; the run cannot start or continue."""


class NavigationError(NutritionReportError):
    """Navigating the diary page failed."""

    def __init__(self, message: str, *, recoverable: bool = False) -> None:
        super().__init__(message)
        self.recoverable = recoverable


class ChallengeUnresolved(NutritionReportError):
    """An anti-bot interstitial is still shown after polling."""

    def __init__(self, url: str, attempts: int) -> None:
        super().__init__(
            f"Anti-bot challenge still active on {url} after {attempts} checks"
        )
        self.url = url
        self.attempts = attempts


class WalkAborted(PreconditionError):
    """A precondition failed mid-walk; ``days`` holds the records read before it."""

    def __init__(self, message: str, days: list[DiaryDay]) -> None:
        super().__init__(message)
        self.days = days
