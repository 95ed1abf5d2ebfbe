"""Centralized constants for the UI suite.

This module provides frozen dataclass-based configuration groups for all
magic numbers used throughout the codebase. Using dataclasses provides:
- Type safety and IDE autocompletion
- Immutability (frozen=True prevents accidental modification)
- Grouped related constants logically

All durations are in seconds. Conversion to the milliseconds Playwright
expects happens at the driver boundary (see ``to_ms``).

Usage:
    from src.shared.constants import SESSION, POLL, TIMEOUTS

    ttl_ms = SESSION.TTL_MS
    await poll_until(check, timeout=TIMEOUTS.MEDIUM, poll_interval=POLL.INTERVAL)
"""

from dataclasses import dataclass
from typing import Tuple

__all__ = [
    'BROWSER',
    'BrowserDefaults',
    'FAVORITES',
    'FavoritesDefaults',
    'LOGGING',
    'LoggingDefaults',
    'POLL',
    'PollDefaults',
    'SESSION',
    'SessionDefaults',
    'TIMEOUTS',
    'TimeoutDefaults',
    'to_ms',
]


def to_ms(seconds: float) -> float:
    """Convert seconds to the millisecond timeouts used by Playwright."""
    return seconds * 1000


@dataclass(frozen=True)
class SessionDefaults:
    """Authentication session snapshot settings.

    A snapshot older than the TTL is treated as a cache miss and never applied.
    """

    TTL_HOURS: int = 24
    """Maximum snapshot age in hours."""

    TTL_MS: int = 24 * 60 * 60 * 1000
    """Maximum snapshot age in epoch milliseconds (same bound as TTL_HOURS)."""

    SESSION_FILE: str = "playwright/.auth/session.json"
    """Well-known path of the persisted session snapshot."""

    AUTH_COOKIE_FRAGMENTS: Tuple[str, ...] = ('session', 'auth-token', 'user-token')
    """Cookie name fragments that mark a cookie as an authentication artifact."""


@dataclass(frozen=True)
class PollDefaults:
    """Convergence poller settings."""

    INTERVAL: float = 0.5
    """Delay between two checks of the same condition in seconds."""

    MIN_INTERVAL: float = 0.05
    """Smallest accepted poll interval, keeps the poller off a tight loop."""


@dataclass(frozen=True)
class TimeoutDefaults:
    """Timeouts for UI operations and verification loops."""

    SHORT: float = 5.0
    """Short wait (error banners, cleanup settle)."""

    MEDIUM: float = 10.0
    """Medium wait (login outcome, removed-item verification)."""

    LONG: float = 30.0
    """Long wait (full page loads over slow networks)."""

    PAGE_LOAD: float = 15.0
    """Time allowed for a page to reach domcontentloaded."""

    NETWORK_IDLE: float = 20.0
    """Time allowed for the network to go idle."""

    ACTION: float = 15.0
    """Default timeout of a single click/fill action."""

    NAVIGATION: float = 30.0
    """Default timeout of a single navigation."""

    LOGIN: float = 10.0
    """Time allowed for a submitted login to navigate away or show an error."""

    ERROR_MESSAGE: float = 3.0
    """Time allowed for a login error banner to appear."""

    CLEANUP: float = 5.0
    """Time allowed for the favorites list to drain after batch removal."""

    FAVORITES_COUNT: float = 15.0
    """Time allowed for the favorites page to show the expected count."""

    SETTLE: float = 1.0
    """Pause after a load for dynamic content to settle."""

    ANIMATION: float = 0.5
    """Pause for dropdowns and transitions."""


@dataclass(frozen=True)
class FavoritesDefaults:
    """Favorites scenario settings."""

    NUMBER_TO_ADD: int = 3
    """Number of live events added to favorites by the management scenario."""

    TITLE_MAX_LENGTH: int = 50
    """Display titles longer than this are truncated with an ellipsis."""


@dataclass(frozen=True)
class BrowserDefaults:
    """Browser context defaults for the target site."""

    BROWSER_TYPE: str = "chromium"
    HEADLESS: bool = False
    LOCALE: str = "uk-UA"
    TIMEZONE_ID: str = "Europe/Kiev"
    VIEWPORT: Tuple[int, int] = (1280, 720)
    USER_AGENT: str = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    )
    SCREENSHOT_DIR: str = "test-results"
    SLOW_MO: int = 0


@dataclass(frozen=True)
class LoggingDefaults:
    """Logging configuration.

    Controls log file rotation settings.
    """

    MAX_BYTES: int = 10 * 1024 * 1024
    """Maximum log file size before rotation (10MB)."""

    BACKUP_COUNT: int = 5
    """Number of backup log files to keep."""

    LOG_FILE: str = "logs/suite.log"
    """Default log file path."""

    FORMAT: str = '%(asctime)s - %(levelname)s - [%(scenario)s] %(message)s'
    """Record format; ``scenario`` is filled in by ScenarioFilter."""

    QUIET_LOGGERS: Tuple[str, ...] = ('asyncio', 'urllib3', 'sentry_sdk.errors')
    """Third-party loggers capped at WARNING so driver chatter stays out of the suite log."""


# Singleton instances for easy import
SESSION = SessionDefaults()
POLL = PollDefaults()
TIMEOUTS = TimeoutDefaults()
FAVORITES = FavoritesDefaults()
BROWSER = BrowserDefaults()
LOGGING = LoggingDefaults()
