"""Browser session adapter over an already-running Chrome."""

import logging
from dataclasses import dataclass
from typing import Protocol

import httpx
from playwright.async_api import Browser, Page, Playwright, async_playwright
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from nutrition_report.errors import NavigationError, PreconditionError

PASSWORD_SELECTOR = (
    'input[type="password"], input[name="password"], input[name="diary_password"]'
)
SUBMIT_SELECTOR = 'button[type="submit"], input[type="submit"]'
RECOVERABLE_MARKERS = ("detached Frame", "Execution context", "Target closed")
TYPING_DELAY_MS = 50

_logger = logging.getLogger(__name__)


class DiaryPage(Protocol):
    """Live page primitives used by the diary scrape."""

    async def goto(self, url: str) -> None:
        """Navigate to a URL and wait for the network to settle."""

    async def content(self) -> str:
        """Return the rendered page HTML."""

    async def title(self) -> str:
        """Return the document title."""

    async def has_password_field(self) -> bool:
        """Return whether a password input is present."""

    async def submit_password(self, password: str) -> None:
        """Type the password, submit it and wait for the page to settle."""


class PageProvider(Protocol):
    """Source of the shared page handle."""

    async def current_page(self) -> DiaryPage:
        """Return the page in use."""

    async def new_page(self) -> DiaryPage:
        """Replace the page in use with a fresh one and return it."""


def is_recoverable(message: str) -> bool:
    """Whether a navigation failure calls for a fresh page."""
    return any(marker in message for marker in RECOVERABLE_MARKERS)


@dataclass
class PlaywrightDiaryPage:
    """Playwright-backed diary page."""

    page: Page
    timeout_ms: float

    async def goto(self, url: str) -> None:
        """Navigate and wrap Playwright failures."""
        try:
            await self.page.goto(url, wait_until="networkidle", timeout=self.timeout_ms)
        except PlaywrightError as exc:
            message = str(exc).splitlines()[0] if str(exc) else type(exc).__name__
            raise NavigationError(
                f"Navigation to {url} failed: {message}",
                recoverable=is_recoverable(str(exc)),
            ) from exc

    async def content(self) -> str:
        """Return the rendered page HTML."""
        return await self.page.content()

    async def title(self) -> str:
        """Return the document title."""
        return await self.page.title()

    async def has_password_field(self) -> bool:
        """Return whether a password input is present."""
        return await self.page.query_selector(PASSWORD_SELECTOR) is not None

    async def submit_password(self, password: str) -> None:
        """Fill the diary password and submit the form."""
        field = await self.page.query_selector(PASSWORD_SELECTOR)
        if field is None:
            return
        await field.type(password, delay=TYPING_DELAY_MS)
        button = await self.page.query_selector(SUBMIT_SELECTOR)
        if button is not None:
            await button.click()
        else:
            await field.press("Enter")
        try:
            await self.page.wait_for_load_state("networkidle", timeout=self.timeout_ms)
        except PlaywrightTimeoutError:
            _logger.warning("Page did not settle after password submit")


@dataclass
class ChromeSession(PageProvider):
    """Page provider attached to Chrome through the DevTools protocol."""

    playwright: Playwright
    browser: Browser
    page: PlaywrightDiaryPage
    timeout_ms: float

    @classmethod
    async def attach(
        cls,
        debug_url: str,
        timeout_seconds: float,
        page_hint: str = "myfitnesspal",
        http_client: httpx.AsyncClient | None = None,
    ) -> "ChromeSession":
        """Attach to the Chrome instance listening on ``debug_url``."""
        await probe_debug_endpoint(debug_url, http_client=http_client)
        playwright = await async_playwright().start()
        try:
            browser = await playwright.chromium.connect_over_cdp(debug_url)
        except PlaywrightError as exc:
            await playwright.stop()
            raise PreconditionError(
                f"Could not attach to Chrome at {debug_url}: {exc}"
            ) from exc
        timeout_ms = timeout_seconds * 1000
        page = await _pick_page(browser, page_hint)
        _logger.info("Attached to Chrome, current page: %s", page.url)
        return cls(
            playwright=playwright,
            browser=browser,
            page=PlaywrightDiaryPage(page, timeout_ms),
            timeout_ms=timeout_ms,
        )

    async def current_page(self) -> DiaryPage:
        """Return the page in use."""
        return self.page

    async def new_page(self) -> DiaryPage:
        """Open a fresh tab in the existing context."""
        contexts = self.browser.contexts
        if contexts:
            page = await contexts[0].new_page()
        else:
            page = await self.browser.new_page()
        self.page = PlaywrightDiaryPage(page, self.timeout_ms)
        return self.page

    async def close(self, *, shutdown: bool = False) -> None:
        """Disconnect, or shut Chrome down when ``shutdown`` is set."""
        try:
            if shutdown:
                cdp = await self.browser.new_browser_cdp_session()
                await cdp.send("Browser.close")
                _logger.info("Chrome closed")
            else:
                await self.browser.close()
        finally:
            await self.playwright.stop()


async def probe_debug_endpoint(
    debug_url: str, http_client: httpx.AsyncClient | None = None
) -> dict[str, object]:
    """Check that Chrome's remote debugging endpoint answers."""
    client = http_client or httpx.AsyncClient()
    try:
        response = await client.get(f"{debug_url}/json/version", timeout=5)
        response.raise_for_status()
        return response.json()
    except httpx.HTTPError as exc:
        raise PreconditionError(
            f"Could not connect to Chrome at {debug_url}. Start Chrome with "
            f"--remote-debugging-port and open the diary first ({exc})"
        ) from exc
    finally:
        if http_client is None:
            await client.aclose()


async def _pick_page(browser: Browser, page_hint: str) -> Page:
    pages = [page for context in browser.contexts for page in context.pages]
    for page in pages:
        if page_hint in page.url:
            return page
    if pages:
        return pages[0]
    if browser.contexts:
        return await browser.contexts[0].new_page()
    return await browser.new_page()
