"""Shared utilities for the UI suite"""

from .logging_config import setup_logging

from .io import (
    load_json,
    save_json_atomic,
)

from .suite_config import (
    Credentials,
    get_section,
    load_environment,
    load_suite_config,
)

from .session_cache import (
    SessionCache,
    SessionSnapshot,
    now_ms,
)

from .poller import (
    ConvergenceTimeout,
    poll_until,
    wait_for_count,
)

from .locators import LocatorChain

from .browser import (
    BrowserConfig,
    browser_session,
    launch_browser,
    new_context,
    screenshot_on_failure,
)

from .synchronizer import (
    AuthState,
    AuthenticationError,
    CleanupResult,
    FavoriteEntry,
    LiveEvent,
    LoginOutcome,
    StateSynchronizer,
)

from .structured_logging import (
    LogEvent,
    EventType,
    Phase,
    StructuredLogger,
    MetricsAggregator,
    create_logger,
)
from .sentry_integration import (
    init_sentry,
    capture_suite_error,
    set_test_context,
    add_breadcrumb,
    flush as sentry_flush,
)

__all__ = [
    # Core utilities
    'setup_logging',
    'load_json',
    'save_json_atomic',
    # Configuration
    'Credentials',
    'get_section',
    'load_environment',
    'load_suite_config',
    # Session caching
    'SessionCache',
    'SessionSnapshot',
    'now_ms',
    # Convergence polling
    'ConvergenceTimeout',
    'poll_until',
    'wait_for_count',
    # Browser
    'LocatorChain',
    'BrowserConfig',
    'browser_session',
    'launch_browser',
    'new_context',
    'screenshot_on_failure',
    # State synchronization
    'AuthState',
    'AuthenticationError',
    'CleanupResult',
    'FavoriteEntry',
    'LiveEvent',
    'LoginOutcome',
    'StateSynchronizer',
    # Structured logging and metrics
    'LogEvent',
    'EventType',
    'Phase',
    'StructuredLogger',
    'MetricsAggregator',
    'create_logger',
    # Sentry integration
    'init_sentry',
    'capture_suite_error',
    'set_test_context',
    'add_breadcrumb',
    'sentry_flush',
]
