"""Capabilities shared by every page object.

Page objects do not inherit from a common base class; each one owns a
``PageSurface`` for navigation and housekeeping and adds its own queries.
"""

import logging
from pathlib import Path
from typing import Optional, Tuple

from playwright.async_api import Locator, Page

from config import favbet_config
from src.shared.browser import DEFAULT_BASE_URL
from src.shared.constants import BROWSER, TIMEOUTS, to_ms

__all__ = [
    'PageSurface',
    'display_title',
    'read_event_card',
]


def display_title(text: Optional[str], index: int, max_length: int = favbet_config.TITLE_MAX_LENGTH) -> str:
    """First non-empty line of a card's text, truncated for readability.

    Falls back to ``Match {index + 1}`` when the card has no text.
    """
    lines = [line.strip() for line in (text or '').strip().split('\n') if line.strip()]
    if not lines:
        return f"Match {index + 1}"
    title = lines[0]
    if len(title) > max_length:
        title = title[:max_length] + '...'
    return title


async def read_event_card(card: Locator, index: int, id_prefix: str = 'event') -> Tuple[str, str]:
    """Read (id, title) from an event card located by ``data-role^="event-id-"``."""
    event_id = await card.get_attribute('data-role') or f"{id_prefix}-{index}"
    title = display_title(await card.text_content(), index)
    return event_id, title


class PageSurface:
    """Navigation, load waiting and housekeeping for one Playwright page.

    Args:
        page: Playwright page
        base_url: Site root that relative paths are resolved against
    """

    def __init__(self, page: Page, base_url: str = DEFAULT_BASE_URL):
        self.page = page
        self.base_url = base_url.rstrip('/')

    @property
    def url(self) -> str:
        return self.page.url

    @property
    def language(self) -> str:
        """Site language from the URL prefix ('uk' unless the page is under /en/)."""
        return 'en' if '/en/' in self.page.url else 'uk'

    def absolute(self, path: str) -> str:
        if path.startswith('http'):
            return path
        return f"{self.base_url}/{path.lstrip('/')}"

    async def goto(self, path: str) -> None:
        url = self.absolute(path)
        logging.debug(f"[page] Navigating to {url}")
        await self.page.goto(url, wait_until='domcontentloaded')
        await self.wait_for_page_load()

    async def wait_for_page_load(self, settle: float = TIMEOUTS.SETTLE) -> None:
        """Wait for DOM ready, then give dynamic content ``settle`` seconds.

        Network idle is never reached on this site because of live-odds websockets.
        """
        await self.page.wait_for_load_state('domcontentloaded')
        if settle:
            await self.page.wait_for_timeout(to_ms(settle))

    async def reload(self) -> None:
        await self.page.reload(wait_until='domcontentloaded')
        await self.wait_for_page_load()

    async def scroll_to_bottom(self) -> None:
        await self.page.evaluate("() => window.scrollTo(0, document.body.scrollHeight)")

    async def scroll_to_top(self) -> None:
        await self.page.evaluate("() => window.scrollTo(0, 0)")

    async def title(self) -> str:
        return await self.page.title()

    async def screenshot(self, name: str, directory: Optional[str] = None) -> Path:
        path = Path(directory or BROWSER.SCREENSHOT_DIR) / f"{name}.png"
        path.parent.mkdir(parents=True, exist_ok=True)
        await self.page.screenshot(path=str(path), full_page=True)
        return path
