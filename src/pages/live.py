"""Live events list"""

import logging
from typing import Optional

from playwright.async_api import Locator, Page
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from config import favbet_config
from src.pages.base import PageSurface, read_event_card
from src.shared.constants import TIMEOUTS, to_ms
from src.shared.locators import LocatorChain
from src.shared.synchronizer import LiveEvent

__all__ = ['LivePage']

NO_EVENTS = LocatorChain('no events message', favbet_config.NO_EVENTS)


class LivePage:
    """The /live/all/ list of in-play events with their favorite stars."""

    def __init__(self, page: Page, base_url: str = favbet_config.BASE_URL):
        self.page = page
        self.surface = PageSurface(page, base_url)

    @property
    def events(self) -> Locator:
        return self.page.locator(favbet_config.EVENT)

    @property
    def favorite_buttons(self) -> Locator:
        return self.page.locator(favbet_config.EVENT_FAVORITE_BUTTON)

    async def open(self) -> None:
        await self.surface.goto(favbet_config.LIVE_PATH)

    async def wait_for_events(self, timeout: float = TIMEOUTS.MEDIUM) -> bool:
        """Wait for the list to render.

        Returns:
            False if the site reports no live events, True once one is visible
        """
        try:
            await self.page.locator(favbet_config.LOADING_SPINNER).first.wait_for(
                state='hidden', timeout=to_ms(timeout)
            )
        except PlaywrightTimeoutError:
            logging.debug("[live] Loading spinner still visible, continuing")

        if await self.has_no_events():
            logging.info("[live] Site reports no live events")
            return False

        await self.events.first.wait_for(state='visible', timeout=to_ms(timeout))
        return True

    async def has_no_events(self) -> bool:
        return await NO_EVENTS.any_visible(self.page)

    async def get_event_count(self) -> int:
        return await self.events.count()

    async def get_event_by_index(self, index: int) -> Optional[LiveEvent]:
        """Read one event card, or None if it is not visible."""
        card = self.events.nth(index)
        if not await card.is_visible():
            return None

        event_id, title = await read_event_card(card, index)
        style = await card.locator(favbet_config.EVENT_STAR_ICON).first.get_attribute('style') or ''
        return LiveEvent(
            id=event_id,
            title=title,
            is_favorited=favbet_config.FAVORITED_STYLE in style,
        )

    async def toggle_favorite(self, index: int) -> bool:
        """Click the favorite star of one event.

        Returns:
            False if there is no visible star at ``index``
        """
        if index >= await self.favorite_buttons.count():
            return False
        button = self.favorite_buttons.nth(index)
        if not await button.is_visible():
            return False
        await button.click()
        return True
