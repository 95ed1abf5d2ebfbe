"""Footer social links and the YouTube channel they lead to"""

import logging
import re

from playwright.async_api import Locator, Page

from config import favbet_config
from src.pages.base import PageSurface
from src.shared.constants import TIMEOUTS, to_ms

__all__ = ['SocialPage', 'YouTubeChannel']


class SocialPage:
    """Social network links in the site footer."""

    def __init__(self, page: Page, base_url: str = favbet_config.BASE_URL):
        self.page = page
        self.surface = PageSurface(page, base_url)

    @property
    def youtube_link(self) -> Locator:
        return self.page.locator(favbet_config.YOUTUBE_LINK)

    async def open_youtube(self, timeout: float = TIMEOUTS.MEDIUM) -> "YouTubeChannel":
        """Follow the footer YouTube link into the popup it opens."""
        await self.surface.scroll_to_bottom()
        await self.youtube_link.wait_for(state='visible', timeout=to_ms(timeout))

        async with self.page.expect_popup() as popup_info:
            await self.youtube_link.click()
        popup = await popup_info.value
        await popup.wait_for_load_state('domcontentloaded')
        logging.info(f"[social] YouTube opened at {popup.url}")
        return YouTubeChannel(popup)


class YouTubeChannel:
    """The brand's YouTube channel page in its own tab."""

    def __init__(self, page: Page):
        self.page = page

    @property
    def heading(self) -> Locator:
        return self.page.locator(favbet_config.YOUTUBE_CHANNEL_HEADING)

    @property
    def handle(self) -> Locator:
        return self.page.locator(favbet_config.YOUTUBE_CHANNEL_HANDLE).first

    @property
    def description(self) -> Locator:
        return self.page.locator(favbet_config.YOUTUBE_CHANNEL_DESCRIPTION).first

    async def is_expected_channel(self) -> bool:
        """URL and tab title both identify the official channel."""
        if not re.search(favbet_config.YOUTUBE_URL_PATTERN, self.page.url):
            return False
        return re.search(favbet_config.YOUTUBE_TITLE_PATTERN, await self.page.title()) is not None

    async def search(self, query: str) -> None:
        await self.page.get_by_role('combobox', name=favbet_config.YOUTUBE_SEARCH_LABEL).fill(query)
        await self.page.get_by_role('button', name=favbet_config.YOUTUBE_SEARCH_LABEL, exact=True).click()
        await self.page.wait_for_load_state('domcontentloaded')

    def video_link(self, title: str) -> Locator:
        return self.page.locator(f'a:has-text("{title}")').first

    async def close(self) -> None:
        await self.page.close()
