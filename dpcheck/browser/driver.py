"""Narrow browser capability set used by pages and the metric scraper.

Selectors are strings understood by the concrete driver; the Playwright
implementation accepts CSS, ``xpath=...`` and bare ``//...`` XPath.
"""

from pathlib import Path
from typing import List, Protocol, Union, runtime_checkable


@runtime_checkable
class BrowserDriver(Protocol):
    async def open(self, url: str) -> None: ...

    async def click(self, selector: str, timeout_ms: int) -> None: ...

    async def set_value(self, selector: str, value: str, timeout_ms: int) -> None: ...

    async def get_text(self, selector: str, timeout_ms: int) -> str: ...

    async def get_texts(self, selector: str) -> List[str]:
        """Inner text of every element matching ``selector``, in document order."""
        ...

    async def wait_for_displayed(self, selector: str, timeout_ms: int) -> bool:
        """Probe: True once the element is visible, False when the timeout passes."""
        ...

    async def wait_for_clickable(self, selector: str, timeout_ms: int) -> bool: ...

    async def is_displayed(self, selector: str) -> bool: ...

    async def page_text(self) -> str:
        """Visible text of the whole page body."""
        ...

    async def pause(self, ms: float) -> None: ...

    async def save_screenshot(self, path: Union[str, Path]) -> Path: ...
