"""Anti-bot interstitial and password gate handling."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from enum import Enum

from nutrition_report.adapters.browser import DiaryPage
from nutrition_report.errors import ChallengeUnresolved, PreconditionError

TITLE_MARKERS: tuple[str, ...] = ("just a moment", "aguarde")
CONTENT_MARKERS: tuple[str, ...] = ("just a moment", "cf_chl")

_logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[None]]
Escalation = Callable[[ChallengeUnresolved], Awaitable[None]]


class GateOutcome(str, Enum):
    """What the resolver had to do before the diary was readable."""

    CLEAR = "clear"
    CHALLENGE_PASSED = "challenge_passed"
    MANUAL_INTERVENTION = "manual_intervention"
    PASSWORD_SUBMITTED = "password_submitted"


@dataclass(frozen=True)
class RetryPolicy:
    """Bounded polling: how often and how many times to check."""

    max_attempts: int = 60
    interval_seconds: float = 2


@dataclass
class ChallengeResolver:
    """Detect and wait out interstitials, then satisfy a password gate."""

    password: str | None
    policy: RetryPolicy = field(default_factory=RetryPolicy)
    escalate: Escalation | None = None
    sleep: Sleep = asyncio.sleep
    title_markers: tuple[str, ...] = TITLE_MARKERS
    content_markers: tuple[str, ...] = CONTENT_MARKERS

    async def is_challenge(self, page: DiaryPage) -> bool:
        """Return whether the page shows an anti-bot interstitial.

        Title and content markers are matched only against their own source.
        """
        title = (await page.title()).lower()
        if any(marker in title for marker in self.title_markers):
            return True
        content = (await page.content()).lower()
        return any(marker in content for marker in self.content_markers)

    async def wait_out_challenge(self, page: DiaryPage, url: str = "") -> GateOutcome:
        """Poll until the interstitial disappears or escalate after the bound."""
        if not await self.is_challenge(page):
            return GateOutcome.CLEAR
        _logger.warning("Anti-bot challenge detected, solve it in the browser")
        for _ in range(self.policy.max_attempts):
            await self.sleep(self.policy.interval_seconds)
            if not await self.is_challenge(page):
                _logger.info("Challenge cleared, continuing")
                return GateOutcome.CHALLENGE_PASSED
        unresolved = ChallengeUnresolved(url, self.policy.max_attempts)
        if self.escalate is None:
            raise unresolved
        await self.escalate(unresolved)
        return GateOutcome.MANUAL_INTERVENTION

    async def ensure_access(self, page: DiaryPage) -> GateOutcome:
        """Submit the diary password when a password gate is shown."""
        if not await page.has_password_field():
            return GateOutcome.CLEAR
        if not self.password:
            raise PreconditionError(
                "Diary is password protected. Set MFP_DIARY_PASSWORD or use --password."
            )
        await page.submit_password(self.password)
        _logger.info("Diary password submitted")
        return GateOutcome.PASSWORD_SUBMITTED

    async def resolve(self, page: DiaryPage, url: str = "") -> list[GateOutcome]:
        """Clear every gate in front of the diary content."""
        outcomes = [await self.wait_out_challenge(page, url)]
        outcomes.append(await self.ensure_access(page))
        return [outcome for outcome in outcomes if outcome is not GateOutcome.CLEAR]
