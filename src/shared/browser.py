"""Browser configuration and Playwright context factory.

Every test gets a fresh browser context configured the same way (locale,
timezone, viewport, default timeouts), so session snapshots captured in one
context apply cleanly to the next.
"""

import logging
import os
import re
from contextlib import asynccontextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Any, AsyncIterator, Dict, Optional, Tuple

from playwright.async_api import Browser, BrowserContext, Page, Playwright, async_playwright
from playwright.async_api import Error as PlaywrightError

from src.shared.constants import BROWSER, TIMEOUTS, to_ms

__all__ = [
    'BrowserConfig',
    'DEFAULT_BASE_URL',
    'browser_session',
    'launch_browser',
    'new_context',
    'screenshot_on_failure',
]

DEFAULT_BASE_URL = "https://favbet.ua"

_BROWSER_TYPES = ('chromium', 'firefox', 'webkit')


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


@dataclass
class BrowserConfig:
    """Configuration for browser launch and context creation"""

    base_url: str = DEFAULT_BASE_URL
    browser_type: str = BROWSER.BROWSER_TYPE
    headless: bool = BROWSER.HEADLESS
    slow_mo: int = BROWSER.SLOW_MO
    locale: str = BROWSER.LOCALE
    timezone_id: str = BROWSER.TIMEZONE_ID
    viewport: Tuple[int, int] = BROWSER.VIEWPORT
    user_agent: str = BROWSER.USER_AGENT

    # Seconds; converted to milliseconds when applied to the context
    action_timeout: float = TIMEOUTS.ACTION
    navigation_timeout: float = TIMEOUTS.NAVIGATION

    screenshot_dir: str = BROWSER.SCREENSHOT_DIR

    def __post_init__(self):
        self.base_url = self.base_url.rstrip('/')
        if self.browser_type not in _BROWSER_TYPES:
            raise ValueError(
                f"browser_type must be one of {', '.join(_BROWSER_TYPES)}, got {self.browser_type!r}"
            )

    def url(self, path: str = "/") -> str:
        """Absolute URL for a site path."""
        if re.match(r'^https?://', path):
            return path
        return f"{self.base_url}/{path.lstrip('/')}"

    def context_options(self) -> Dict[str, Any]:
        """Keyword arguments for Browser.new_context()."""
        width, height = self.viewport
        return {
            'base_url': self.base_url,
            'locale': self.locale,
            'timezone_id': self.timezone_id,
            'viewport': {'width': width, 'height': height},
            'user_agent': self.user_agent,
        }

    @classmethod
    def from_env(cls) -> "BrowserConfig":
        """Create config from environment variables"""
        return cls(
            base_url=os.getenv("BASE_URL", DEFAULT_BASE_URL),
            browser_type=os.getenv("BROWSER", BROWSER.BROWSER_TYPE).lower(),
            headless=_env_bool("HEADLESS", BROWSER.HEADLESS),
            slow_mo=int(os.getenv("SLOW_MO", str(BROWSER.SLOW_MO))),
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BrowserConfig":
        """Create config from dictionary (e.g., from YAML).

        BASE_URL and HEADLESS in the environment take precedence over the file.
        """
        viewport = data.get("viewport") or {}
        if isinstance(viewport, dict):
            viewport = (
                int(viewport.get("width", BROWSER.VIEWPORT[0])),
                int(viewport.get("height", BROWSER.VIEWPORT[1])),
            )
        else:
            viewport = tuple(int(v) for v in viewport)

        timeouts = data.get("timeouts") or {}

        return cls(
            base_url=os.getenv("BASE_URL") or data.get("base_url", DEFAULT_BASE_URL),
            browser_type=str(data.get("browser_type", BROWSER.BROWSER_TYPE)).lower(),
            headless=_env_bool("HEADLESS", bool(data.get("headless", BROWSER.HEADLESS))),
            slow_mo=int(data.get("slow_mo", BROWSER.SLOW_MO)),
            locale=data.get("locale", BROWSER.LOCALE),
            timezone_id=data.get("timezone_id", BROWSER.TIMEZONE_ID),
            viewport=viewport,
            user_agent=data.get("user_agent", BROWSER.USER_AGENT),
            action_timeout=float(timeouts.get("action", TIMEOUTS.ACTION)),
            navigation_timeout=float(timeouts.get("navigation", TIMEOUTS.NAVIGATION)),
            screenshot_dir=data.get("screenshot_dir", BROWSER.SCREENSHOT_DIR),
        )


async def launch_browser(playwright: Playwright, config: BrowserConfig) -> Browser:
    """Launch the configured browser engine."""
    browser_type = getattr(playwright, config.browser_type)
    logging.info(
        f"[browser] Launching {config.browser_type} "
        f"({'headless' if config.headless else 'headed'})"
    )
    return await browser_type.launch(headless=config.headless, slow_mo=config.slow_mo)


async def new_context(
    browser: Browser,
    config: BrowserConfig,
    storage_state: Optional[str] = None,
) -> BrowserContext:
    """Create a browser context with the suite's locale, viewport and timeouts.

    Args:
        browser: Launched browser
        config: Browser configuration
        storage_state: Optional Playwright storage state file to start from

    Returns:
        New BrowserContext with default action/navigation timeouts set
    """
    options = config.context_options()
    if storage_state and Path(storage_state).exists():
        options['storage_state'] = storage_state

    context = await browser.new_context(**options)
    context.set_default_timeout(to_ms(config.action_timeout))
    context.set_default_navigation_timeout(to_ms(config.navigation_timeout))
    return context


@asynccontextmanager
async def browser_session(config: BrowserConfig) -> AsyncIterator[Tuple[BrowserContext, Page]]:
    """Start Playwright, launch a browser and yield a fresh context and page.

    Usage:
        async with browser_session(BrowserConfig.from_env()) as (context, page):
            await page.goto(config.url('/uk/'))
    """
    async with async_playwright() as playwright:
        browser = await launch_browser(playwright, config)
        try:
            context = await new_context(browser, config)
            page = await context.new_page()
            yield context, page
        finally:
            await browser.close()


async def screenshot_on_failure(page: Page, name: str, directory: Optional[str] = None) -> Optional[Path]:
    """Save a full-page screenshot for a failed test.

    Never raises: a page that is already closed simply produces no file.

    Returns:
        Path of the screenshot, or None if it could not be taken
    """
    safe_name = re.sub(r'[^\w.-]+', '_', name).strip('_') or 'failure'
    path = Path(directory or BROWSER.SCREENSHOT_DIR) / f"{safe_name}.png"
    path.parent.mkdir(parents=True, exist_ok=True)
    try:
        await page.screenshot(path=str(path), full_page=True)
    except PlaywrightError as e:
        logging.warning(f"[browser] Could not take screenshot {path}: {e}")
        return None
    logging.info(f"[browser] Saved failure screenshot to {path}")
    return path
