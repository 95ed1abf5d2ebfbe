"""Favorites list"""

import logging
from typing import List

from playwright.async_api import Locator, Page
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from config import favbet_config
from src.pages.base import PageSurface, read_event_card
from src.shared.constants import TIMEOUTS, to_ms
from src.shared.locators import LocatorChain
from src.shared.synchronizer import FavoriteEntry

__all__ = ['FavoritesPage']

FAVORITES_LINK = LocatorChain('favorites link', favbet_config.FAVORITES_LINK)
EMPTY_MESSAGE = LocatorChain('empty favorites message', favbet_config.FAVORITES_EMPTY)

# One synthetic click per listed star, in a single pass
_REMOVE_ALL_SCRIPT = """
([eventSelector, starSelector]) => {
    let clicked = 0;
    document.querySelectorAll(eventSelector).forEach((event) => {
        const star = event.querySelector(starSelector);
        if (star) {
            star.dispatchEvent(new MouseEvent('click', {view: window, bubbles: true, cancelable: true}));
            clicked++;
        }
    });
    return clicked;
}
"""


class FavoritesPage:
    """The account's favorites list.

    Every read goes to the live DOM; nothing about the list is cached.
    """

    def __init__(self, page: Page, base_url: str = favbet_config.BASE_URL):
        self.page = page
        self.surface = PageSurface(page, base_url)

    @property
    def events(self) -> Locator:
        return self.page.locator(favbet_config.EVENT)

    async def open(self) -> None:
        """Open favorites from the navigation link, or by URL if the link is hidden."""
        link = await FAVORITES_LINK.first_visible(self.page, timeout=TIMEOUTS.SHORT)
        if link is None:
            await self.surface.goto(favbet_config.FAVORITES_PATH)
        else:
            await link.click()
        await self.wait_for_list()

    async def wait_for_list(self, timeout: float = TIMEOUTS.MEDIUM) -> None:
        """Wait until either an entry or the empty message is visible."""
        ready = self.events.first.or_(EMPTY_MESSAGE.resolve(self.page)).first
        try:
            await ready.wait_for(state='visible', timeout=to_ms(timeout))
        except PlaywrightTimeoutError:
            logging.debug("[favorites] Neither entries nor empty message visible yet")

    async def get_favorites_count(self) -> int:
        return await self.events.count()

    async def get_favorite_items(self) -> List[FavoriteEntry]:
        items = []
        for index in range(await self.events.count()):
            event_id, title = await read_event_card(self.events.nth(index), index, id_prefix='favorite')
            items.append(FavoriteEntry(id=event_id, title=title))
        return items

    async def is_favorite_present(self, title: str) -> bool:
        """Match by substring in either direction, since listed titles may be truncated."""
        return any(
            title in item.title or item.title in title
            for item in await self.get_favorite_items()
        )

    async def is_empty(self) -> bool:
        return await EMPTY_MESSAGE.any_visible(self.page)

    async def remove_favorite_by_index(self, index: int) -> bool:
        """Remove one entry by clicking its star.

        Returns:
            False if no star is visible at ``index`` (already gone)
        """
        star = self.page.locator(favbet_config.EVENT_STAR_ICON).nth(index)
        if not await star.is_visible():
            return False
        await star.scroll_into_view_if_needed()
        await star.dispatch_event('click')
        return True

    async def remove_all_from_favorites(self) -> int:
        """Issue one removal per listed entry in a single in-page batch.

        Returns:
            Number of removal clicks issued
        """
        clicked = await self.page.evaluate(
            _REMOVE_ALL_SCRIPT,
            [favbet_config.EVENT, favbet_config.EVENT_STAR_ICON],
        )
        logging.info(f"[favorites] Issued {clicked} removals")
        return clicked

    async def refresh(self) -> None:
        await self.surface.reload()
