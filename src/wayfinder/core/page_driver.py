"""Contract for the live page the engine explores."""

from abc import ABC, abstractmethod
from typing import List

from .models import RawElement, PageContext


class PageDriver(ABC):
    """Runs inside one browser session and acts on its current page."""

    @abstractmethod
    async def extract_interactable_elements(self) -> List[RawElement]:
        """
        Collect the page's interactive elements.

        Includes native interactive tags, elements with click handlers, and
        elements with interactive ARIA roles or a tabindex. Hidden elements are
        left out. Each element carries a stable XPath selector.
        """

    @abstractmethod
    async def click(self, selector: str):
        """
        Scroll the element into view and click it.

        Raises:
            ElementNotFound: nothing on the page matches the selector
        """

    @abstractmethod
    async def go_back(self):
        """
        Navigate one step back in history.

        Raises:
            NavigationTimeout: the previous page did not load in time
        """

    @abstractmethod
    async def wait_until_settled(self, timeout_ms: int) -> bool:
        """Wait until the document reports complete. Never raises."""

    @abstractmethod
    async def capture_page_context(self) -> PageContext:
        """Return url, title, main heading and summarized visible text."""
