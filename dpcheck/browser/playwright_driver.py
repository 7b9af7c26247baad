"""Playwright implementation of the BrowserDriver protocol."""

import contextlib
from pathlib import Path
from typing import AsyncIterator, List, Union

from playwright.async_api import Page, async_playwright
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from dpcheck.core.config import BrowserConfig
from dpcheck.utils.logging import get_logger


class PlaywrightDriver:
    """Drives a single Playwright page."""

    def __init__(self, page: Page):
        self.page = page
        self.logger = get_logger("playwright_driver")

    async def open(self, url: str) -> None:
        self.logger.debug(f"🌐 Opening {url}")
        await self.page.goto(url, wait_until="domcontentloaded")

    async def click(self, selector: str, timeout_ms: int) -> None:
        await self.page.locator(selector).first.click(timeout=timeout_ms)

    async def set_value(self, selector: str, value: str, timeout_ms: int) -> None:
        await self.page.locator(selector).first.fill(value, timeout=timeout_ms)

    async def get_text(self, selector: str, timeout_ms: int) -> str:
        return await self.page.locator(selector).first.inner_text(timeout=timeout_ms)

    async def get_texts(self, selector: str) -> List[str]:
        return await self.page.locator(selector).all_inner_texts()

    async def wait_for_displayed(self, selector: str, timeout_ms: int) -> bool:
        try:
            await self.page.locator(selector).first.wait_for(state="visible", timeout=timeout_ms)
        except PlaywrightTimeoutError:
            return False
        return True

    async def wait_for_clickable(self, selector: str, timeout_ms: int) -> bool:
        if not await self.wait_for_displayed(selector, timeout_ms):
            return False
        return await self.page.locator(selector).first.is_enabled()

    async def is_displayed(self, selector: str) -> bool:
        try:
            return await self.page.locator(selector).first.is_visible()
        except PlaywrightError:
            return False

    async def page_text(self) -> str:
        return await self.page.locator("body").inner_text()

    async def pause(self, ms: float) -> None:
        await self.page.wait_for_timeout(ms)

    async def save_screenshot(self, path: Union[str, Path]) -> Path:
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        await self.page.screenshot(path=str(target), full_page=True)
        return target


@contextlib.asynccontextmanager
async def launch_driver(config: BrowserConfig) -> AsyncIterator[PlaywrightDriver]:
    """Launch a browser for one scenario run and close it afterwards."""
    logger = get_logger("playwright_driver")
    async with async_playwright() as pw:
        browser_type = getattr(pw, config.browser)
        browser = await browser_type.launch(headless=config.headless)
        try:
            context = await browser.new_context(
                viewport={"width": config.viewport_width, "height": config.viewport_height},
                ignore_https_errors=config.ignore_https_errors,
            )
            page = await context.new_page()
            page.set_default_navigation_timeout(config.page_load_timeout_ms)
            logger.info(f"🧭 Launched {config.browser} (headless={config.headless})")
            yield PlaywrightDriver(page)
        finally:
            await browser.close()
