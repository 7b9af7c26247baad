"""Shared page-object behaviour: waiting, probing and screenshots."""

from pathlib import Path
from typing import Optional

from dpcheck.browser.driver import BrowserDriver
from dpcheck.core.config import ScreenshotConfig, TimeoutConfig
from dpcheck.core.exceptions import ElementNotFoundException
from dpcheck.utils.logging import get_logger
from dpcheck.utils.timestamp import file_timestamp


class BasePage:
    def __init__(
        self,
        driver: BrowserDriver,
        timeouts: Optional[TimeoutConfig] = None,
        screenshots: Optional[ScreenshotConfig] = None,
    ):
        self.driver = driver
        self.timeouts = timeouts or TimeoutConfig()
        self.screenshots = screenshots or ScreenshotConfig()
        self.logger = get_logger(f"page.{self.__class__.__name__}")

    async def require(self, selector: str, timeout_ms: Optional[int] = None) -> None:
        """Wait for a mandatory element; raise if it never shows up."""
        timeout = self.timeouts.default_wait_ms if timeout_ms is None else timeout_ms
        if not await self.driver.wait_for_displayed(selector, timeout):
            raise ElementNotFoundException(selector, timeout)

    async def probe(self, selector: str, timeout_ms: int) -> bool:
        """Wait for an optional element; report whether it appeared."""
        return await self.driver.wait_for_displayed(selector, timeout_ms)

    async def click(self, selector: str) -> None:
        await self.require(selector)
        await self.driver.click(selector, self.timeouts.default_wait_ms)

    async def read_text(self, selector: str) -> str:
        await self.require(selector)
        return (await self.driver.get_text(selector, self.timeouts.default_wait_ms)).strip()

    async def take_screenshot(self, name: str) -> Path:
        path = Path(self.screenshots.directory) / f"{name}-{file_timestamp()}.png"
        saved = await self.driver.save_screenshot(path)
        self.logger.info(f"📸 Screenshot saved: {saved}")
        return saved
