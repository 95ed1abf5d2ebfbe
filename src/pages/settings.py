"""Account settings: interface language and color scheme"""

import logging
import re
from typing import Any, Dict, Optional

from playwright.async_api import Locator, Page

from config import favbet_config
from src.pages.base import PageSurface
from src.shared.constants import TIMEOUTS, to_ms

__all__ = ['SettingsPage']

_ACTIVE_CLASS = re.compile(r'\bactive\b')


class SettingsPage:
    """The /personal-office/settings/ page of a logged-in account."""

    def __init__(self, page: Page, base_url: str = favbet_config.BASE_URL):
        self.page = page
        self.surface = PageSurface(page, base_url)

    @property
    def language(self) -> str:
        return self.surface.language

    @property
    def title(self) -> Locator:
        return self.page.locator(favbet_config.SETTINGS_TITLE)

    def theme_switcher(self, theme: str) -> Locator:
        if theme not in favbet_config.THEMES:
            raise ValueError(f"Unknown theme: {theme}. Available: {favbet_config.THEMES}")
        return self.page.locator(favbet_config.SETTINGS_THEME_SWITCHER.format(theme=theme))

    async def open(self, language: Optional[str] = None) -> None:
        """Open settings in ``language``, defaulting to the current page's language."""
        language = language or self.language
        await self.surface.goto(favbet_config.SETTINGS_PATH.format(language=language))
        await self.page.wait_for_url(
            re.compile(r'.*/personal-office/settings/.*'),
            timeout=to_ms(TIMEOUTS.MEDIUM),
        )

    async def change_language(self, language: Optional[str] = None) -> str:
        """Pick a language from the dropdown (the other one if not given).

        Returns:
            The requested language code
        """
        if language is None:
            language = 'en' if self.language == 'uk' else 'uk'
        if language not in favbet_config.LANGUAGES:
            raise ValueError(f"Unknown language: {language}. Available: {favbet_config.LANGUAGES}")

        logging.info(f"[settings] Switching language {self.language} -> {language}")
        await self.page.locator(favbet_config.SETTINGS_LANGUAGE).click()
        await self.page.wait_for_timeout(to_ms(TIMEOUTS.ANIMATION))
        await self.page.locator(favbet_config.SETTINGS_LANGUAGE_OPTION.format(language=language)).click()
        return language

    async def is_language_applied(self, language: str) -> bool:
        """True once the URL prefix, page title and section labels are in ``language``."""
        if f"/{language}/" not in self.page.url:
            return False
        title = await self.title.text_content() or ''
        if favbet_config.SETTINGS_TITLES[language] not in title:
            return False
        for label in favbet_config.SETTINGS_LABELS[language]:
            if not await self.page.locator(f"text={label}").first.is_visible():
                return False
        return True

    async def active_theme(self) -> Optional[str]:
        for theme in favbet_config.THEMES:
            classes = await self.theme_switcher(theme).get_attribute('class') or ''
            if _ACTIVE_CLASS.search(classes):
                return theme
        return None

    async def toggle_theme(self) -> str:
        """Switch to light if dark is active, otherwise to dark.

        Returns:
            The theme that was clicked
        """
        target = 'light' if await self.active_theme() == 'dark' else 'dark'
        logging.info(f"[settings] Switching theme to {target}")
        await self.theme_switcher(target).click()
        return target

    async def body_theme(self) -> Dict[str, Any]:
        """Body class list and computed background color."""
        return await self.page.evaluate(
            """() => ({
                bodyClasses: document.body.className,
                backgroundColor: window.getComputedStyle(document.body).backgroundColor,
            })"""
        )
