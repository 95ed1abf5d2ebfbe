"""Real-browser fixtures for the favbet.ua scenarios.

Every scenario gets a fresh browser context. Authentication goes through the
StateSynchronizer, so the login form is only used when neither the page nor
the cached session snapshot is already logged in.
"""

import logging

import pytest
import pytest_asyncio
from playwright.async_api import async_playwright

from config import favbet_config
from src.pages.favorites import FavoritesPage
from src.pages.login import LoginPage
from src.shared.browser import BrowserConfig, launch_browser, new_context, screenshot_on_failure
from src.shared.logging_config import setup_logging
from src.shared.sentry_integration import flush, init_sentry, set_test_context
from src.shared.structured_logging import MetricsAggregator
from src.shared.suite_config import get_section, load_environment, load_suite_config
from src.shared.synchronizer import StateSynchronizer


@pytest.hookimpl(tryfirst=True, hookwrapper=True)
def pytest_runtest_makereport(item, call):
    """Expose each phase's report on the item for failure screenshots."""
    outcome = yield
    report = outcome.get_result()
    setattr(item, f"rep_{report.when}", report)


@pytest.fixture(scope="session")
def suite_config():
    load_environment()
    return load_suite_config()


@pytest.fixture(scope="session", autouse=True)
def suite_session(suite_config):
    """Logging and error reporting for the whole run, plus a metrics summary at the end."""
    setup_logging(get_section(suite_config, 'logging').get('file', 'logs/suite.log'))
    init_sentry()
    metrics = MetricsAggregator()
    yield metrics
    logging.info(f"[e2e] Synchronization metrics: {metrics.get_summary()}")
    flush()


@pytest.fixture(scope="session")
def browser_config(suite_config):
    return BrowserConfig.from_dict(get_section(suite_config, 'browser'))


@pytest_asyncio.fixture
async def page(request, browser_config):
    """Fresh browser context and page per scenario, screenshot on failure."""
    set_test_context(request.node.name)
    async with async_playwright() as playwright:
        browser = await launch_browser(playwright, browser_config)
        try:
            context = await new_context(browser, browser_config)
            page = await context.new_page()
            yield page

            report = getattr(request.node, "rep_call", None)
            if report is not None and report.failed:
                await screenshot_on_failure(page, request.node.nodeid, browser_config.screenshot_dir)
            await context.close()
        finally:
            await browser.close()


@pytest.fixture
def synchronizer(request, suite_config, suite_session):
    suite = request.node.module.__name__.rsplit('.', 1)[-1].replace('test_', '')
    return StateSynchronizer.from_config(suite_config, suite=suite, metrics=suite_session)


@pytest_asyncio.fixture
async def authenticated_page(page, browser_config, synchronizer):
    """Home page of a logged-in session."""
    await page.goto(browser_config.url(favbet_config.HOME_PATH), wait_until='domcontentloaded')
    await synchronizer.ensure_authenticated(page, LoginPage(page, browser_config.base_url))
    return page


@pytest_asyncio.fixture
async def clean_favorites(authenticated_page, browser_config, synchronizer):
    """Favorites page of an account whose favorites set has been emptied.

    A cleanup that does not converge is logged and the scenario still runs.
    """
    favorites = FavoritesPage(authenticated_page, browser_config.base_url)
    await favorites.open()
    result = await synchronizer.reset_shared_state(favorites)
    logging.info(f"[e2e] Cleared {result.issued} favorite(s) before test, {result.remaining} left")
    return favorites
