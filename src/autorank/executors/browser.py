"""Real executor remote-controlling a Chromium session through Playwright."""

import asyncio
import tempfile
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pandas as pd
from playwright.async_api import Browser, BrowserContext, Page, Playwright, async_playwright
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from autorank.config import Settings
from autorank.core.constants import (
    PHASE_AUTH,
    PHASE_INIT,
    PHASE_LOGIN,
    PHASE_NAV,
    PHASE_NET,
    batch_phase,
)
from autorank.core.exceptions import BatchFailed, LoginFailed
from autorank.core.logging import get_logger
from autorank.core.models import Batch
from autorank.executors.base import EventSink
from autorank.jobs.models import LogEvent, LogLevel

logger = get_logger(__name__)

# Generic selectors for the portal login form and upload panel.
USERNAME_SELECTOR = 'input[type="email"], input[name="username"], input[name="login"]'
PASSWORD_SELECTOR = 'input[type="password"], input[name="password"]'
SUBMIT_SELECTOR = 'button[type="submit"], input[type="submit"]'
FILE_INPUT_SELECTOR = 'input[type="file"]'
UPDATE_BUTTON_SELECTOR = 'button:has-text("UPDATE"), input[type="submit"][value="UPDATE"]'


class BrowserPhaseExecutor:
    """Drives the live portal in a real browser window.

    The browser is launched lazily by ``login`` and stays open until ``aclose``.
    Screenshots taken along the way are kept in memory, keyed by the id of the
    log event they document.
    """

    def __init__(
        self,
        settings: Settings,
        playwright_factory: Callable[[], Any] = async_playwright,
    ):
        self.settings = settings
        self._playwright_factory = playwright_factory
        self._playwright: Playwright | None = None
        self._browser: Browser | None = None
        self._context: BrowserContext | None = None
        self.page: Page | None = None
        self.screenshots: dict[str, bytes] = {}
        self._tempdir: tempfile.TemporaryDirectory[str] | None = None

    # ---------------- Browser lifecycle ----------------

    async def _ensure_page(self) -> Page:
        """Launch Playwright and open a page if not done yet."""
        if self.page is None:
            self._playwright = await self._playwright_factory().start()
            self._browser = await self._playwright.chromium.launch(
                headless=self.settings.browser_headless
            )
            self._context = await self._browser.new_context()
            self.page = await self._context.new_page()
            self.page.set_default_timeout(self.settings.browser_selector_timeout_ms)
        return self.page

    async def aclose(self) -> None:
        """Close the page's context, the browser and Playwright."""
        for name, closer in (
            ("context", self._context.close if self._context else None),
            ("browser", self._browser.close if self._browser else None),
            ("playwright", self._playwright.stop if self._playwright else None),
        ):
            if closer is None:
                continue
            try:
                await closer()
            except PlaywrightError as e:
                logger.warning(f"Failed to close {name}: {e}")

        self._playwright = self._browser = self._context = None
        self.page = None
        if self._tempdir is not None:
            self._tempdir.cleanup()
            self._tempdir = None

    # ---------------- Helpers ----------------

    async def _emit_with_screenshot(
        self, sink: EventSink, level: LogLevel, message: str, phase: str
    ) -> LogEvent:
        """Emit an event, attaching a screenshot of the current page when possible."""
        image: bytes | None = None
        if self.page is not None:
            try:
                image = await self.page.screenshot()
            except PlaywrightError as e:
                logger.warning(f"Screenshot failed: {e}")

        event = sink.emit(level, message, phase, has_evidence=image is not None)
        if image is not None:
            self.screenshots[event.id] = image
        return event

    def _upload_dir(self) -> Path:
        if self.settings.upload_workdir:
            path = Path(self.settings.upload_workdir)
            path.mkdir(parents=True, exist_ok=True)
            return path
        if self._tempdir is None:
            self._tempdir = tempfile.TemporaryDirectory(prefix="autorank-")
        return Path(self._tempdir.name)

    def write_batch_file(self, batch: Batch) -> Path:
        """Write a batch to ``batch_<n>.xlsx`` in the upload directory.

        Returns:
            Path: The written workbook.
        """
        path = self._upload_dir() / f"batch_{batch.number}.xlsx"
        df = pd.DataFrame([record.to_dict() for record in batch])
        df.to_excel(path, index=False, engine="openpyxl")
        return path

    # ---------------- Phases ----------------

    async def login(self, username: str, password: str, sink: EventSink) -> bool:
        settings = self.settings

        sink.emit(LogLevel.SYSTEM, "Launching Playwright Browser Engine...", PHASE_INIT)
        try:
            page = await self._ensure_page()
        except PlaywrightError as e:
            raise LoginFailed(f"Could not launch browser: {e}") from e

        sink.emit(LogLevel.INFO, f"Navigating to {settings.portal_login_url}", PHASE_LOGIN)
        try:
            await page.goto(
                settings.portal_login_url, timeout=settings.browser_navigation_timeout_ms
            )
        except PlaywrightError as e:
            logger.warning(f"Login page navigation failed: {e}")
            sink.emit(
                LogLevel.ERROR, "Failed to load login page. Check VPN connection.", PHASE_NET
            )
            return False

        sink.emit(LogLevel.INFO, f"Entering credentials for {username}", PHASE_AUTH)
        timeout = settings.browser_selector_timeout_ms
        try:
            await page.wait_for_selector(USERNAME_SELECTOR, timeout=timeout)
            await page.fill(USERNAME_SELECTOR, username)
            await page.wait_for_selector(PASSWORD_SELECTOR, timeout=timeout)
            await page.fill(PASSWORD_SELECTOR, password)
            await page.click(SUBMIT_SELECTOR)
        except PlaywrightTimeoutError:
            sink.emit(
                LogLevel.WARNING,
                "Standard login fields not found. "
                "Please log in manually in the browser window...",
                PHASE_AUTH,
            )
            await page.wait_for_timeout(settings.manual_login_wait_seconds * 1000)

        await page.wait_for_timeout(settings.post_login_wait_seconds * 1000)

        if await page.is_visible(PASSWORD_SELECTOR):
            await self._emit_with_screenshot(
                sink,
                LogLevel.WARNING,
                "Login form is still displayed; credentials were not accepted.",
                PHASE_AUTH,
            )
            return False

        await self._emit_with_screenshot(
            sink, LogLevel.SUCCESS, "Login phase complete.", PHASE_AUTH
        )
        return True

    async def navigate(self, sink: EventSink) -> None:
        if self.page is None:
            sink.emit(LogLevel.WARNING, "No browser session; skipping navigation.", PHASE_NAV)
            return

        sink.emit(LogLevel.INFO, "Navigating to Dashboard...", PHASE_NAV)
        try:
            await self.page.goto(
                self.settings.portal_catalog_url,
                timeout=self.settings.browser_navigation_timeout_ms,
            )
            await self.page.wait_for_load_state("domcontentloaded")
        except PlaywrightError as e:
            sink.emit(LogLevel.WARNING, f"Catalog page did not load cleanly: {e}", PHASE_NAV)
            return

        await self._emit_with_screenshot(
            sink, LogLevel.SUCCESS, "Catalog Control Panel loaded. Ready for input.", PHASE_NAV
        )

    async def upload_batch(self, batch: Batch, sink: EventSink) -> bool:
        number = batch.number
        phase = batch_phase(number)
        sink.emit(LogLevel.INFO, f"Processing Batch {number} ({len(batch)} items)", phase)

        if self.page is None:
            raise BatchFailed(number, "No browser session available")
        page = self.page

        path = await asyncio.to_thread(self.write_batch_file, batch)
        sink.emit(LogLevel.SYSTEM, f"Converted {len(batch)} records to {path.name}", phase)

        try:
            await page.set_input_files(FILE_INPUT_SELECTOR, str(path))
            sink.emit(LogLevel.INFO, f"Selecting file: {path.name}", phase)
            await page.click(UPDATE_BUTTON_SELECTOR)
            sink.emit(LogLevel.INFO, "Clicking 'UPDATE' button to initiate upload...", phase)
            await page.wait_for_load_state("networkidle")
            await page.wait_for_timeout(self.settings.upload_confirm_wait_ms)
        except PlaywrightError as e:
            await self._emit_with_screenshot(
                sink, LogLevel.ERROR, f"Upload of Batch #{number} failed: {e}", phase
            )
            return False

        sink.emit(LogLevel.SUCCESS, f"Batch {number} uploaded successfully via Chrome.", phase)
        return True
