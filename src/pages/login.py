"""Login form and logged-in detection"""

import asyncio
import logging
from typing import Optional

from playwright.async_api import Locator, Page
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from config import favbet_config
from src.pages.base import PageSurface
from src.shared.constants import TIMEOUTS, to_ms
from src.shared.locators import LocatorChain
from src.shared.synchronizer import LoginOutcome

__all__ = ['LoginPage']

LOGIN_LINK = LocatorChain('login link', favbet_config.LOGIN_LINK)
LOGGED_IN = LocatorChain('logged-in indicator', favbet_config.LOGGED_IN_INDICATORS)
LOGOUT = LocatorChain('logout button', favbet_config.LOGOUT_BUTTON)


class LoginPage:
    """Authentication surface of the site header and the /login/ page."""

    def __init__(self, page: Page, base_url: str = favbet_config.BASE_URL):
        self.page = page
        self.surface = PageSurface(page, base_url)

    @property
    def email_input(self) -> Locator:
        return self.page.get_by_role('textbox', name=favbet_config.EMAIL_LABEL)

    @property
    def password_input(self) -> Locator:
        return self.page.get_by_role('textbox', name=favbet_config.PASSWORD_LABEL)

    @property
    def submit_button(self) -> Locator:
        return self.page.get_by_role('button', name=favbet_config.SUBMIT_LABEL)

    @property
    def error_message(self) -> Locator:
        return self.page.locator(favbet_config.LOGIN_ERROR).first

    def _on_login_page(self) -> bool:
        return '/login/' in self.page.url

    async def open_login_form(self) -> None:
        """Open the login form from the header link, or directly if the link is hidden."""
        if not self._on_login_page():
            link = await LOGIN_LINK.first_visible(self.page, timeout=TIMEOUTS.SHORT)
            if link is None:
                await self.surface.goto(favbet_config.LOGIN_PATH)
            else:
                await link.click()
                await self.page.wait_for_url('**/login/**', timeout=to_ms(TIMEOUTS.MEDIUM))
        await self.email_input.wait_for(state='visible', timeout=to_ms(TIMEOUTS.MEDIUM))

    async def submit_login(
        self,
        email: str,
        password: str,
        timeout: float = TIMEOUTS.LOGIN,
        remember_me: bool = False,
    ) -> LoginOutcome:
        """Fill and submit the login form once.

        Args:
            email: Account e-mail
            password: Account password
            timeout: Seconds to wait for the outcome
            remember_me: Tick the remember-me checkbox if present

        Returns:
            NAVIGATED if the browser left /login/, ERROR_SHOWN if an error
            banner appeared first, TIMED_OUT if neither happened in time
        """
        await self.open_login_form()
        await self.email_input.fill(email)
        await self.password_input.fill(password)

        if remember_me:
            checkbox = self.page.locator(favbet_config.REMEMBER_ME).first
            if await checkbox.is_visible() and not await checkbox.is_checked():
                await checkbox.check()

        await self.submit_button.click()
        outcome = await self._first_outcome(timeout)
        logging.info(f"[login] Login submitted, outcome: {outcome.value}")
        return outcome

    async def _first_outcome(self, timeout: float) -> LoginOutcome:
        navigated = asyncio.ensure_future(
            self.page.wait_for_url(lambda url: '/login/' not in url, timeout=to_ms(timeout))
        )
        error_shown = asyncio.ensure_future(
            self.error_message.wait_for(state='visible', timeout=to_ms(min(timeout, TIMEOUTS.SHORT)))
        )
        outcomes = {navigated: LoginOutcome.NAVIGATED, error_shown: LoginOutcome.ERROR_SHOWN}

        pending = set(outcomes)
        try:
            while pending:
                done, pending = await asyncio.wait(pending, return_when=asyncio.FIRST_COMPLETED)
                for task in done:
                    error = task.exception()
                    if error is None:
                        return outcomes[task]
                    if not isinstance(error, PlaywrightTimeoutError):
                        raise error
            return LoginOutcome.TIMED_OUT
        finally:
            for task in pending:
                task.cancel()
            await asyncio.gather(*pending, return_exceptions=True)

    async def is_logged_in(self) -> bool:
        """True if any logged-in indicator is visible."""
        return await LOGGED_IN.any_visible(self.page)

    async def get_error_message(self, timeout: float = TIMEOUTS.ERROR_MESSAGE) -> Optional[str]:
        try:
            await self.error_message.wait_for(state='visible', timeout=to_ms(timeout))
        except PlaywrightTimeoutError:
            return None
        text = await self.error_message.text_content()
        return text.strip() if text else None

    async def logout(self) -> bool:
        button = await LOGOUT.first_visible(self.page, timeout=TIMEOUTS.SHORT)
        if button is None:
            return False
        await button.click()
        await self.surface.wait_for_page_load()
        return True
