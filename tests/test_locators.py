"""Tests for ranked fallback locator chains."""

from unittest.mock import AsyncMock, Mock

import pytest
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from src.shared.locators import LocatorChain


def make_page(visibility):
    """Mock page whose ``locator(selector).first`` is visible per ``visibility``.

    Values may be bools or exceptions raised by is_visible/wait_for.
    """
    page = Mock()
    elements = {}

    def locator(selector):
        element = Mock(name=selector)
        state = visibility.get(selector, False)
        if isinstance(state, Exception):
            element.is_visible = AsyncMock(side_effect=state)
            element.wait_for = AsyncMock(side_effect=state)
        else:
            element.is_visible = AsyncMock(return_value=state)
            element.wait_for = AsyncMock(
                side_effect=None if state else PlaywrightTimeoutError("Timeout 3000ms exceeded")
            )
        wrapper = Mock()
        wrapper.first = element
        elements[selector] = element
        return wrapper

    page.locator = Mock(side_effect=locator)
    page.elements = elements
    return page


class TestLocatorChain:
    """First visible strategy wins."""

    def test_empty_chain_is_rejected(self):
        with pytest.raises(ValueError):
            LocatorChain('nothing', [])

    @pytest.mark.asyncio
    async def test_first_visible_strategy_wins(self):
        chain = LocatorChain('logout', ['button:has-text("Вихід")', 'button:has-text("Logout")'])
        page = make_page({'button:has-text("Вихід")': True, 'button:has-text("Logout")': True})

        found = await chain.first_visible(page)

        assert found is page.elements['button:has-text("Вихід")']

    @pytest.mark.asyncio
    async def test_falls_through_to_later_strategy(self):
        chain = LocatorChain('balance', ['.user-balance', 'button:has-text("Депозит")'])
        page = make_page({'button:has-text("Депозит")': True})

        found = await chain.first_visible(page)

        assert found is page.elements['button:has-text("Депозит")']

    @pytest.mark.asyncio
    async def test_none_visible_returns_none(self):
        chain = LocatorChain('balance', ['.user-balance', '.account'])

        assert await chain.first_visible(make_page({})) is None
        assert await chain.any_visible(make_page({})) is False

    @pytest.mark.asyncio
    async def test_driver_error_counts_as_not_visible(self):
        chain = LocatorChain('menu', ['[data-testid="user-menu"]', '.user-balance'])
        page = make_page({
            '[data-testid="user-menu"]': PlaywrightError("Element is not attached to the DOM"),
            '.user-balance': True,
        })

        assert await chain.any_visible(page) is True

    @pytest.mark.asyncio
    async def test_timeout_waits_on_each_strategy(self):
        chain = LocatorChain('login link', ['a.login', 'button.login'])
        page = make_page({'button.login': True})

        found = await chain.first_visible(page, timeout=3)

        assert found is page.elements['button.login']
        page.elements['a.login'].wait_for.assert_awaited_once_with(state='visible', timeout=3000)

    @pytest.mark.asyncio
    async def test_callable_strategy(self):
        target = Mock()
        target.is_visible = AsyncMock(return_value=True)
        page = make_page({})
        page.get_by_role = Mock(return_value=Mock(first=target))
        chain = LocatorChain('logout', [lambda p: p.get_by_role('link', name='Logout')])

        assert await chain.first_visible(page) is target
        page.get_by_role.assert_called_once_with('link', name='Logout')

    def test_resolve_combines_with_or(self):
        page = make_page({})
        chain = LocatorChain('indicators', ['.a', '.b', '.c'])

        chain.resolve(page)

        first = page.elements['.a']
        first.or_.assert_called_once_with(page.elements['.b'])
        first.or_.return_value.or_.assert_called_once_with(page.elements['.c'])
