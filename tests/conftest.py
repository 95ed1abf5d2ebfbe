"""Pytest configuration and fixtures for UI suite tests"""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

import pytest
from unittest.mock import AsyncMock, Mock

from src.shared.session_cache import SessionCache, SessionSnapshot, now_ms
from src.shared.suite_config import Credentials
from src.shared.synchronizer import StateSynchronizer


def pytest_addoption(parser):
    parser.addoption(
        "--run-e2e",
        action="store_true",
        default=False,
        help="Run the real-browser scenarios in tests/e2e against the live site",
    )


def pytest_collection_modifyitems(config, items):
    if config.getoption("--run-e2e"):
        return
    skip_e2e = pytest.mark.skip(reason="browser scenario, use --run-e2e to run")
    for item in items:
        if item.get_closest_marker("e2e") is not None:
            item.add_marker(skip_e2e)


@pytest.fixture
def fake_page():
    """Mock Playwright page with an async browser context."""
    page = Mock()
    page.url = "https://favbet.ua/uk/"
    page.reload = AsyncMock()
    page.goto = AsyncMock()
    page.evaluate = AsyncMock(side_effect=[{'token': 'abc'}, {'tab': '1'}])
    page.context = Mock()
    page.context.cookies = AsyncMock(return_value=[
        {'name': 'user-token', 'value': 't1', 'domain': '.favbet.ua', 'path': '/',
         'expires': -1, 'httpOnly': True, 'secure': True, 'sameSite': 'Lax', 'size': 10},
        {'name': 'auth-token-v2', 'value': 't2', 'domain': '.favbet.ua', 'path': '/'},
        {'name': '_ga', 'value': 'GA1.2.3', 'domain': '.favbet.ua', 'path': '/'},
    ])
    page.context.add_cookies = AsyncMock()
    page.context.add_init_script = AsyncMock()
    return page


@pytest.fixture
def session_cache(tmp_path):
    """SessionCache writing to a temporary file."""
    return SessionCache(path=tmp_path / "session.json")


@pytest.fixture
def valid_snapshot():
    """Snapshot captured one hour ago."""
    return SessionSnapshot(
        cookies=({'name': 'session', 'value': 's1', 'domain': '.favbet.ua', 'path': '/'},),
        local_storage={'token': 'abc'},
        session_storage={},
        captured_at=now_ms() - 60 * 60 * 1000,
    )


@pytest.fixture
def credentials():
    return Credentials(email="qa@example.com", password="secret")


@pytest.fixture
def synchronizer(session_cache, credentials):
    """StateSynchronizer with a short poll interval and tight timeouts."""
    return StateSynchronizer(
        session_cache=session_cache,
        credentials=credentials,
        suite='unit',
        login_timeout=1,
        cleanup_timeout=0.3,
        verify_timeout=0.3,
        poll_interval=0.05,
    )
