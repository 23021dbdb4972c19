"""PageDriver backed by a Playwright browser session."""

import asyncio
from typing import Optional, List, Tuple
from playwright.async_api import (
    async_playwright,
    Browser,
    Page,
    BrowserContext,
    Locator,
    TimeoutError as PlaywrightTimeoutError,
)

from ..core.errors import ElementNotFound, NavigationTimeout
from ..core.models import RawElement, PageContext
from ..core.page_driver import PageDriver
from ..utils import log, summarize_page_text, TargetConfig


EXTRACT_SCRIPT = """
() => {
    const getXPath = (element) => {
        if (element.id) {
            return `//*[@id="${element.id}"]`;
        }
        if (element === document.body) {
            return '/html/body';
        }
        const parent = element.parentNode;
        if (!parent || !parent.children) {
            return '';
        }
        let ix = 0;
        for (const sibling of parent.children) {
            if (sibling === element) {
                return `${getXPath(parent)}/${element.tagName.toLowerCase()}[${ix + 1}]`;
            }
            if (sibling.tagName === element.tagName) {
                ix++;
            }
        }
        return '';
    };

    const interactiveTags = ['A', 'BUTTON', 'INPUT', 'SELECT', 'TEXTAREA'];
    const interactiveRoles = ['button', 'link', 'menuitem', 'tab', 'checkbox', 'radio'];
    const eventTypes = ['click', 'mousedown', 'mouseup', 'dblclick', 'contextmenu'];
    const seen = new Set();
    const results = [];

    document.querySelectorAll('*').forEach((el) => {
        if (el.offsetParent === null && el.tagName !== 'BODY' && el.tagName !== 'HTML') return;

        const events = eventTypes.filter((type) => el.hasAttribute('on' + type) || el['on' + type]);
        const role = el.getAttribute('role');
        const hasRole = role && interactiveRoles.includes(role);
        const isTag = interactiveTags.includes(el.tagName);

        if (!(events.length || isTag || hasRole || el.hasAttribute('tabindex'))) return;

        const xpath = getXPath(el);
        if (!xpath || seen.has(xpath)) return;
        seen.add(xpath);

        if (!events.length) events.push('click');

        let type = 'element';
        if (el.tagName === 'A') type = 'link';
        else if (el.tagName === 'BUTTON') type = 'button';
        else if (el.tagName === 'INPUT') type = 'input';
        else if (el.tagName === 'SELECT') type = 'select';
        else if (el.tagName === 'TEXTAREA') type = 'textarea';
        else if (hasRole) type = role;

        let associatedLabel = null;
        if (el.id) {
            const label = document.querySelector(`label[for="${el.id}"]`);
            if (label) associatedLabel = label.textContent.trim();
        }
        if (!associatedLabel && el.parentElement && el.parentElement.tagName === 'LABEL') {
            associatedLabel = el.parentElement.textContent.trim();
        }

        let surrounding = '';
        if (el.previousElementSibling) surrounding += (el.previousElementSibling.textContent || '').trim().substring(0, 50);
        if (el.nextElementSibling) surrounding += ' ' + (el.nextElementSibling.textContent || '').trim().substring(0, 50);

        const rect = el.getBoundingClientRect();
        results.push({
            type: type,
            tag_name: el.tagName.toLowerCase(),
            selector: xpath,
            text: ((el.textContent || '').trim().substring(0, 100)) ||
                  el.getAttribute('aria-label') || el.getAttribute('title') ||
                  el.getAttribute('placeholder') || el.getAttribute('value') || el.tagName,
            event_listeners: events,
            aria_label: el.getAttribute('aria-label'),
            role: role,
            href: el.getAttribute('href'),
            input_type: el.getAttribute('type'),
            placeholder: el.getAttribute('placeholder'),
            name: el.getAttribute('name'),
            element_id: el.id || null,
            associated_label: associatedLabel,
            surrounding_text: surrounding.trim() || null,
            position: {x: rect.left, y: rect.top, width: rect.width, height: rect.height}
        });
    });

    return results;
}
"""

CONTEXT_SCRIPT = """
() => {
    const h1 = document.querySelector('h1');
    return {
        title: document.title || '',
        mainHeading: h1 ? h1.textContent.trim() : '',
        visibleText: document.body ? document.body.innerText : ''
    };
}
"""


class PlaywrightPageDriver(PageDriver):
    """Drives a single Playwright page for the exploration engine."""

    def __init__(
        self,
        target_config: TargetConfig,
        headless: bool = False,
        browser_type: str = "chromium",
        poll_interval: float = 0.5
    ):
        """
        Initialize the driver.

        Args:
            target_config: Configuration for the app under exploration
            headless: Whether to run browser in headless mode
            browser_type: chromium, firefox or webkit
            poll_interval: Seconds between document readiness checks
        """
        self.target_config = target_config
        self.headless = headless
        self.browser_type = browser_type
        self.poll_interval = poll_interval
        self.playwright = None
        self.browser: Optional[Browser] = None
        self.context: Optional[BrowserContext] = None
        self.page: Optional[Page] = None
        self.action_timeout = target_config.action_timeout

    async def __aenter__(self):
        """Async context manager entry."""
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()

    async def start(self):
        """Start the browser and open a page."""
        log.info(f"Starting browser for {self.target_config.name}")

        self.playwright = await async_playwright().start()
        self.browser, self.browser_type = await self._launch_browser(self.browser_type)
        await self._create_context_and_page()

        log.info("Browser started successfully")

    async def _launch_browser(self, browser_type: str) -> Tuple[Browser, str]:
        """Launch the requested browser type, falling back if needed."""
        browser_map = {
            "chromium": self.playwright.chromium,
            "firefox": self.playwright.firefox,
            "webkit": self.playwright.webkit,
        }
        target = browser_map.get(browser_type.lower())
        if not target:
            log.warning(f"Unknown browser_type '{browser_type}', defaulting to Chromium")
            target = self.playwright.chromium
            browser_type = "chromium"

        try:
            log.info(f"Launching Playwright browser: {browser_type}")
            browser = await target.launch(headless=self.headless)
            return browser, browser_type
        except Exception as launch_error:
            log.error(f"Failed to launch {browser_type}: {launch_error}")
            if browser_type == "chromium":
                log.info("Attempting fallback to WebKit")
                browser = await self.playwright.webkit.launch(headless=self.headless)
                return browser, "webkit"
            raise

    async def close(self):
        """Close the browser and cleanup."""
        log.info("Closing browser")

        if self.page:
            await self.page.close()
        if self.context:
            await self.context.close()
        if self.browser:
            await self.browser.close()
        if self.playwright:
            await self.playwright.stop()

    async def _create_context_and_page(self):
        """Create a fresh browser context and page."""
        if not self.browser:
            return
        self.context = await self.browser.new_context(
            viewport={'width': 1440, 'height': 900},
            locale='en-US'
        )
        self.context.set_default_timeout(self.target_config.page_load_timeout)
        self.page = await self.context.new_page()

    async def _ensure_page(self):
        """Ensure a valid page exists before interacting."""
        if self.page and not self.page.is_closed():
            return
        if not self.context:
            await self._create_context_and_page()
            return
        try:
            self.page = await self.context.new_page()
        except Exception:
            await self._create_context_and_page()

    async def navigate(self, url: str, wait_until: str = "load") -> bool:
        """
        Open the starting URL.

        Args:
            url: URL to navigate to
            wait_until: "load", "domcontentloaded" or "networkidle"

        Returns:
            True if navigation succeeded
        """
        try:
            await self._ensure_page()
            log.info(f"Navigating to: {url}")
            await self.page.goto(url, wait_until=wait_until)
            await asyncio.sleep(self.target_config.wait_for_navigation)
            return True
        except Exception as e:
            log.error(f"Navigation failed: {e}")
            return False

    async def extract_interactable_elements(self) -> List[RawElement]:
        await self._ensure_page()
        records = await self.page.evaluate(EXTRACT_SCRIPT)
        elements = []
        for record in records or []:
            try:
                elements.append(RawElement.from_dict(record))
            except TypeError as e:
                log.debug(f"Skipping unexpected element record: {e}")
        log.info(f"Extracted {len(elements)} interactable elements from {self.page.url}")
        return elements

    def _locator(self, selector: str) -> Locator:
        if selector.startswith(("xpath=", "css=")):
            return self.page.locator(selector).first
        if selector.startswith("/") or selector.startswith("("):
            return self.page.locator(f"xpath={selector}").first
        return self.page.locator(selector).first

    async def _prepare_locator(self, locator: Locator, description: str = ""):
        """Wait for the element to be visible and scroll it into view."""
        try:
            await locator.wait_for(state="visible", timeout=self.action_timeout)
        except PlaywrightTimeoutError as e:
            log.warning(f"Element not visible in time ({description}): {e}")

        try:
            await locator.scroll_into_view_if_needed(timeout=self.action_timeout)
        except Exception as e:
            log.debug(f"Scroll into view skipped ({description}): {e}")

    async def click(self, selector: str):
        await self._ensure_page()
        locator = self._locator(selector)
        if await locator.count() == 0:
            raise ElementNotFound(selector)

        await self._prepare_locator(locator, selector)

        last_error: Optional[Exception] = None
        for attempt in range(2):
            force = attempt == 1
            try:
                await locator.click(timeout=self.action_timeout, force=force)
                return
            except PlaywrightTimeoutError as e:
                log.warning(f"Click timed out ({selector}) attempt {attempt + 1}: {e}")
                last_error = e
            except Exception as e:
                log.warning(f"Click failed ({selector}) attempt {attempt + 1}: {e}")
                last_error = e

        raise ElementNotFound(selector, f"Could not click {selector}: {last_error}")

    async def go_back(self):
        await self._ensure_page()
        try:
            await self.page.go_back(timeout=self.target_config.page_load_timeout)
        except PlaywrightTimeoutError as e:
            raise NavigationTimeout(f"Back navigation from {self.page.url} timed out") from e

    async def wait_until_settled(self, timeout_ms: int) -> bool:
        attempts = max(1, int(timeout_ms / 1000 / self.poll_interval))
        for _ in range(attempts):
            try:
                await self._ensure_page()
                state = await self.page.evaluate("() => document.readyState")
                if state == "complete":
                    return True
            except Exception as e:
                # The document can be swapped out mid-navigation
                log.debug(f"Readiness check failed: {e}")
            await asyncio.sleep(self.poll_interval)
        return False

    async def capture_page_context(self) -> PageContext:
        await self._ensure_page()
        try:
            data = await self.page.evaluate(CONTEXT_SCRIPT)
        except Exception as e:
            log.warning(f"Failed to read page context: {e}")
            data = {}

        return PageContext(
            url=self.page.url,
            title=data.get("title", ""),
            main_heading=data.get("mainHeading", ""),
            visible_text=summarize_page_text(data.get("visibleText", ""), 500)
        )
