"""Application configuration."""

import os
from datetime import date, timedelta
from urllib.parse import quote

from pydantic_settings import BaseSettings, SettingsConfigDict

from nutrition_report.errors import PreconditionError

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    mfp_username: str | None = None
    mfp_diary_password: str | None = None
    mfp_base_url: str = "https://www.myfitnesspal.com"
    mfp_locale: str | None = None
    chrome_debug_host: str = "127.0.0.1"
    chrome_debug_port: int = 9223
    default_days: int = 7
    extract_exercise: bool = True
    navigation_timeout_seconds: float = 60
    settle_seconds: float = 2
    pacing_seconds: float = 1.5
    challenge_poll_seconds: float = 2
    challenge_max_attempts: int = 60
    intervals_dir: str = "Relatorios_Intervals"
    mfp_dir: str = "Relatorios_MFP"
    nutri_dir: str = "Relatorios_Nutri"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )

    @property
    def chrome_debug_url(self) -> str:
        """HTTP endpoint of the Chrome remote debugging port."""
        return f"http://{self.chrome_debug_host}:{self.chrome_debug_port}"


def resolve_date_range(
    days: int | None,
    start: date | None,
    end: date | None,
    today: date,
) -> tuple[date, date]:
    """Resolve an inclusive date range from trailing days or explicit bounds."""
    resolved_end = end or today
    if start is None:
        span = days if days is not None else 7
        if span < 1:
            raise PreconditionError(f"--days must be at least 1, got {span}")
        start = resolved_end - timedelta(days=span - 1)
    if start > resolved_end:
        raise PreconditionError(
            f"Start date {start.isoformat()} is after end date {resolved_end.isoformat()}"
        )
    return start, resolved_end


def diary_url(base_url: str, locale: str | None, username: str, day: date) -> str:
    """Build the public diary URL for a user and day."""
    base = base_url.rstrip("/")
    if locale:
        base = f"{base}/{locale.strip('/')}"
    return f"{base}/food/diary/{quote(username)}?date={day.isoformat()}"
