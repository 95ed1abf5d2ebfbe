"""Ranked fallback locator strategies.

The site's markup is outside our control and mixes data attributes with
Ukrainian/English text, so one element is usually described by several
selectors. A ``LocatorChain`` tries them in order and the first visible match
wins.

Usage:
    LOGOUT = LocatorChain('logout', [
        'button:has-text("Вихід")',
        'button:has-text("Logout")',
        lambda page: page.get_by_role('link', name='Logout'),
    ])

    button = await LOGOUT.first_visible(page, timeout=3)
    if button is not None:
        await button.click()
"""

import logging
from typing import Callable, Iterable, List, Optional, Union

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Locator, Page
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from src.shared.constants import to_ms

__all__ = [
    'LocatorChain',
    'LocatorStrategy',
]

LocatorStrategy = Union[str, Callable[[Page], Locator]]


class LocatorChain:
    """Ordered list of locator strategies, first visible match wins.

    Args:
        name: Label for logs
        strategies: Selector strings or callables ``page -> Locator``
    """

    def __init__(self, name: str, strategies: Iterable[LocatorStrategy]):
        self.name = name
        self.strategies: List[LocatorStrategy] = list(strategies)
        if not self.strategies:
            raise ValueError(f"LocatorChain '{name}' needs at least one strategy")

    def __repr__(self) -> str:
        return f"LocatorChain({self.name!r}, {len(self.strategies)} strategies)"

    def candidates(self, page: Page) -> List[Locator]:
        """Materialize every strategy as the first matching element locator."""
        locators = []
        for strategy in self.strategies:
            if callable(strategy):
                locators.append(strategy(page).first)
            else:
                locators.append(page.locator(strategy).first)
        return locators

    def resolve(self, page: Page) -> Locator:
        """Single locator matching any strategy, for use with Playwright waits."""
        locators = self.candidates(page)
        combined = locators[0]
        for locator in locators[1:]:
            combined = combined.or_(locator)
        return combined.first

    async def first_visible(self, page: Page, timeout: Optional[float] = None) -> Optional[Locator]:
        """Return the first strategy whose element is visible.

        Args:
            page: Playwright page
            timeout: Seconds to wait on each strategy; None checks once

        Returns:
            Locator of the winning strategy, or None if none is visible
        """
        for index, locator in enumerate(self.candidates(page)):
            try:
                if timeout:
                    await locator.wait_for(state='visible', timeout=to_ms(timeout))
                    visible = True
                else:
                    visible = await locator.is_visible()
            except PlaywrightTimeoutError:
                visible = False
            except PlaywrightError as e:
                logging.debug(f"[locator] {self.name} strategy {index} failed: {e}")
                visible = False

            if visible:
                logging.debug(f"[locator] {self.name} matched strategy {index}")
                return locator
        return None

    async def any_visible(self, page: Page) -> bool:
        """True if any strategy currently has a visible element (logical OR)."""
        return await self.first_visible(page) is not None
