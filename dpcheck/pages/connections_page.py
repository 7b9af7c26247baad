"""Connections page: data-plane credentials, destinations and event metrics."""

import re
from typing import Optional

from dpcheck.browser.driver import BrowserDriver
from dpcheck.core.config import ScrapeConfig, ScreenshotConfig, TimeoutConfig
from dpcheck.core.exceptions import ValidationException
from dpcheck.core.metrics import EventCounts, MetricScraper
from dpcheck.pages.base_page import BasePage
from dpcheck.utils.logging import mask

WRITE_KEY_PATTERN = re.compile(r"Write key\s+(\w+)")


def extract_write_key(text: str) -> Optional[str]:
    match = WRITE_KEY_PATTERN.search(text)
    return match.group(1) if match else None


class ConnectionsPage(BasePage):
    CONNECTIONS_TAB = '[data-testid="sub-menu-connections"]'
    DESTINATIONS_TAB = '[data-testid="sub-menu-destinations"]'
    DATA_PLANE_URL = "span.sc-jrkPvW.ebfakN.text-ellipsis"
    WRITE_KEY = 'span:has-text("Write key")'
    EVENTS_TAB = 'xpath=//div[normalize-space() = "Events"]'

    def __init__(
        self,
        driver: BrowserDriver,
        timeouts: Optional[TimeoutConfig] = None,
        screenshots: Optional[ScreenshotConfig] = None,
        scrape: Optional[ScrapeConfig] = None,
    ):
        super().__init__(driver, timeouts, screenshots)
        self.scraper = MetricScraper(driver, scrape)

    @staticmethod
    def destination_selector(name: str) -> str:
        return f'xpath=//div[normalize-space() = "{name}"]'

    async def go_to_connections(self) -> None:
        await self.click(self.CONNECTIONS_TAB)
        self.logger.info("✓ Navigated to Connections page")

    async def read_data_plane_url(self) -> str:
        url = await self.read_text(self.DATA_PLANE_URL)
        if not url:
            raise ValidationException("Data plane URL not found or empty")
        self.logger.info(f"✓ Data Plane URL retrieved: {url}")
        return url

    async def read_write_key(self) -> str:
        text = await self.read_text(self.WRITE_KEY)
        write_key = extract_write_key(text)
        if not write_key:
            raise ValidationException(f"Write key not found in text: {text}")
        self.logger.info(f"✓ Write Key retrieved: {mask(write_key)}")
        return write_key

    async def click_webhook_destination(self, name: str) -> None:
        await self.click(self.DESTINATIONS_TAB)
        self.logger.info("✓ Destinations opened")
        await self.click(self.destination_selector(name))
        self.logger.info(f"✓ Destination {name} selected")

    async def open_events_tab(self) -> None:
        await self.click(self.EVENTS_TAB)
        self.logger.info("✓ Events tab opened")

    async def get_event_counts(self) -> EventCounts:
        return await self.scraper.scrape()

    async def get_delivered_count(self) -> int:
        counts = await self.get_event_counts()
        self.logger.info(f"✓ Delivered Events Count: {counts.delivered}")
        return counts.delivered

    async def get_failed_count(self) -> int:
        counts = await self.get_event_counts()
        self.logger.info(f"✓ Failed Events Count: {counts.failed}")
        return counts.failed
