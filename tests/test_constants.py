"""Tests for centralized constants module."""

import pytest
from dataclasses import FrozenInstanceError


class TestConstantsModuleExists:
    """Verify the constants module can be imported."""

    def test_all_singleton_instances_exist(self):
        """All singleton constant instances should be available."""
        from src.shared.constants import BROWSER, FAVORITES, LOGGING, POLL, SESSION, TIMEOUTS
        for group in (BROWSER, FAVORITES, LOGGING, POLL, SESSION, TIMEOUTS):
            assert group is not None

    @pytest.mark.parametrize("name", ['BROWSER', 'FAVORITES', 'LOGGING', 'POLL', 'SESSION', 'TIMEOUTS'])
    def test_groups_are_frozen(self, name):
        from src.shared import constants
        group = getattr(constants, name)
        first_field = next(iter(group.__dataclass_fields__))
        with pytest.raises(FrozenInstanceError):
            setattr(group, first_field, None)


class TestSessionDefaults:
    """Session snapshot TTL and location."""

    def test_ttl_is_24_hours(self):
        from src.shared.constants import SESSION
        assert SESSION.TTL_HOURS == 24

    def test_ttl_ms_matches_hours(self):
        from src.shared.constants import SESSION
        assert SESSION.TTL_MS == SESSION.TTL_HOURS * 60 * 60 * 1000

    def test_session_file(self):
        from src.shared.constants import SESSION
        assert SESSION.SESSION_FILE == "playwright/.auth/session.json"

    def test_auth_cookie_fragments(self):
        from src.shared.constants import SESSION
        assert 'session' in SESSION.AUTH_COOKIE_FRAGMENTS
        assert 'user-token' in SESSION.AUTH_COOKIE_FRAGMENTS


class TestPollDefaults:
    """Poller interval defaults."""

    def test_interval(self):
        from src.shared.constants import POLL
        assert POLL.INTERVAL == 0.5

    def test_min_interval_below_default(self):
        from src.shared.constants import POLL
        assert 0 < POLL.MIN_INTERVAL < POLL.INTERVAL


class TestTimeoutDefaults:
    """UI timeouts, in seconds."""

    def test_named_tiers(self):
        from src.shared.constants import TIMEOUTS
        assert (TIMEOUTS.SHORT, TIMEOUTS.MEDIUM, TIMEOUTS.LONG) == (5.0, 10.0, 30.0)

    def test_login_and_cleanup(self):
        from src.shared.constants import TIMEOUTS
        assert TIMEOUTS.LOGIN == 10.0
        assert TIMEOUTS.CLEANUP == 5.0
        assert TIMEOUTS.FAVORITES_COUNT == 15.0

    def test_to_ms(self):
        from src.shared.constants import TIMEOUTS, to_ms
        assert to_ms(TIMEOUTS.NAVIGATION) == 30_000
        assert to_ms(0.5) == 500


class TestBrowserDefaults:
    """Browser context defaults."""

    def test_ukrainian_locale(self):
        from src.shared.constants import BROWSER
        assert BROWSER.LOCALE == "uk-UA"
        assert BROWSER.TIMEZONE_ID == "Europe/Kiev"

    def test_viewport(self):
        from src.shared.constants import BROWSER
        assert BROWSER.VIEWPORT == (1280, 720)


class TestLoggingDefaults:
    """Test logging configuration defaults."""

    def test_max_bytes(self):
        """MAX_BYTES should be 10MB."""
        from src.shared.constants import LOGGING
        assert LOGGING.MAX_BYTES == 10 * 1024 * 1024

    def test_backup_count(self):
        from src.shared.constants import LOGGING
        assert LOGGING.BACKUP_COUNT == 5
