"""Delivered/failed event count scraping for metric panels with unstable markup.

The scraper runs an ordered list of strategies and keeps the first one that
produces a result. Finding nothing is a valid observation (no events yet) and
yields zero counts; the scraper never raises.
"""

import re
from dataclasses import dataclass, field
from typing import Awaitable, Callable, List, Optional, Sequence

from dpcheck.browser.driver import BrowserDriver
from dpcheck.core.config import ScrapeConfig
from dpcheck.utils.logging import get_logger

logger = get_logger("metric_scraper")

NUMERIC_TEXT = re.compile(r"-?\d[\d,.]*")
DELIVERED_PATTERN = re.compile(r"Delivered[:\s]*(\d+)", re.IGNORECASE)
FAILED_PATTERN = re.compile(r"Failed[:\s]*(\d+)", re.IGNORECASE)


@dataclass(frozen=True)
class EventCounts:
    delivered: int = 0
    failed: int = 0
    strategy: Optional[str] = field(default=None, compare=False)

    def __post_init__(self) -> None:
        for name in ("delivered", "failed"):
            value = getattr(self, name)
            if not isinstance(value, int) or isinstance(value, bool) or value < 0:
                raise ValueError(f"{name} must be a non-negative integer, got {value!r}")

    @classmethod
    def zero(cls, strategy: Optional[str] = "fallback") -> "EventCounts":
        return cls(0, 0, strategy=strategy)


Strategy = Callable[[BrowserDriver, ScrapeConfig], Awaitable[Optional[EventCounts]]]


def is_numeric_text(text: str) -> bool:
    return bool(NUMERIC_TEXT.fullmatch(text.strip()))


def parse_count(text: str) -> Optional[int]:
    digits = re.sub(r"[^0-9]", "", text)
    return int(digits) if digits else None


async def numeric_nodes(driver: BrowserDriver, config: ScrapeConfig) -> Optional[EventCounts]:
    """First two purely numeric nodes, in document order, are delivered and failed."""
    texts = [t for t in await driver.get_texts(config.numeric_selector) if is_numeric_text(t)]
    logger.info(f"🔢 Found {len(texts)} numeric elements")
    if len(texts) < 2:
        return None

    counts: List[int] = []
    for text in texts[: config.max_numeric_nodes]:
        value = parse_count(text)
        if value is not None:
            counts.append(value)
    logger.info(f"📊 Found numeric values: {counts}")

    padded = counts + [0, 0]
    return EventCounts(padded[0], padded[1], strategy="numeric_nodes")


async def text_patterns(driver: BrowserDriver, config: ScrapeConfig) -> Optional[EventCounts]:
    """``Delivered: N`` / ``Failed: N`` anywhere in the page text, matched independently."""
    text = await driver.page_text()
    delivered = DELIVERED_PATTERN.search(text)
    failed = FAILED_PATTERN.search(text)
    if not delivered and not failed:
        return None
    return EventCounts(
        int(delivered.group(1)) if delivered else 0,
        int(failed.group(1)) if failed else 0,
        strategy="text_patterns",
    )


DEFAULT_STRATEGIES: Sequence[Strategy] = (numeric_nodes, text_patterns)


class MetricScraper:
    """Extracts ``EventCounts`` from the current page."""

    def __init__(
        self,
        driver: BrowserDriver,
        config: Optional[ScrapeConfig] = None,
        strategies: Sequence[Strategy] = DEFAULT_STRATEGIES,
    ):
        self.driver = driver
        self.config = config or ScrapeConfig()
        self.strategies = tuple(strategies)

    async def wait_until_settled(self) -> bool:
        """Poll the page text until two consecutive reads agree.

        Returns False when the text kept changing for the whole settle window.
        Falls back to a fixed pause if the page cannot be read.
        """
        polls = max(1, int(self.config.settle_timeout_ms // self.config.poll_interval_ms))
        try:
            previous = await self.driver.page_text()
            for _ in range(polls):
                await self.driver.pause(self.config.poll_interval_ms)
                current = await self.driver.page_text()
                if current == previous:
                    return True
                previous = current
        except Exception as e:
            logger.warning(f"⚠️ Could not poll page for stability ({e}); pausing instead")
            await self.driver.pause(self.config.settle_delay_ms)
        return False

    async def scrape(self) -> EventCounts:
        logger.info("🔍 Searching for event counts on the page...")
        try:
            if not await self.wait_until_settled():
                logger.warning("⚠️ Page did not settle before scraping")
            for strategy in self.strategies:
                result = await strategy(self.driver, self.config)
                if result is not None:
                    logger.info(
                        f"✅ Event counts via {result.strategy}: "
                        f"delivered={result.delivered} failed={result.failed}"
                    )
                    return result
        except Exception as e:
            logger.warning(f"⚠️ Error getting event counts: {e}")
            return EventCounts.zero(strategy="error")

        logger.warning("⚠️ No event counts found, returning zeros")
        return EventCounts.zero()
