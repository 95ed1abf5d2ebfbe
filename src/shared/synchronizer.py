"""State synchronization around UI tests.

The synchronizer owns the parts of a test that are not the test itself:
getting the browser into an authenticated state, resetting the server-side
favorites set to empty before a scenario, and confirming that asynchronous UI
changes have settled before assertions run.

It talks to the site only through small surface protocols, so the page
objects in ``src.pages`` and in-memory fakes in the unit tests are
interchangeable.

Usage:
    sync = StateSynchronizer(SessionCache(), Credentials.from_env(), suite='favorites')

    await sync.ensure_authenticated(page, LoginPage(page, base_url))
    await sync.reset_shared_state(favorites_page)
    events = await sync.favorite_events(live_page, 3)
    await sync.verify_favorites_count(favorites_page, 3)
"""

import logging
import os
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Optional, Protocol, Sequence

from playwright.async_api import Error as PlaywrightError

from src.shared.constants import POLL, SESSION, TIMEOUTS
from src.shared.poller import ConvergenceTimeout, poll_until, wait_for_count
from src.shared.sentry_integration import add_breadcrumb, capture_suite_error
from src.shared.session_cache import SessionCache
from src.shared.structured_logging import MetricsAggregator, Phase, StructuredLogger
from src.shared.suite_config import Credentials, get_section

__all__ = [
    'AuthState',
    'AuthSurface',
    'AuthenticationError',
    'CleanupResult',
    'FavoriteEntry',
    'FavoritesSurface',
    'LiveEvent',
    'LiveSurface',
    'LoginOutcome',
    'StateSynchronizer',
]


class AuthState(str, Enum):
    """Authentication state of one browser context."""
    UNKNOWN = 'unknown'
    CHECKED = 'checked'
    AUTHENTICATED = 'authenticated'
    LOGIN_IN_FLIGHT = 'login_in_flight'
    FAILED = 'failed'


class LoginOutcome(str, Enum):
    """First observable result of submitting the login form."""
    NAVIGATED = 'navigated'
    ERROR_SHOWN = 'error_shown'
    TIMED_OUT = 'timed_out'


class AuthenticationError(Exception):
    """Raised when a test cannot get an authenticated session.

    Attributes:
        detail: Why authentication failed
    """

    def __init__(self, detail: str):
        self.detail = detail
        super().__init__(f"Failed to login: {detail}. Cannot proceed with test.")


@dataclass(frozen=True)
class FavoriteEntry:
    """An event as listed on the favorites page."""
    id: str
    title: str


@dataclass(frozen=True)
class LiveEvent:
    """An event as listed on the live page."""
    id: str
    title: str
    is_favorited: bool


@dataclass(frozen=True)
class CleanupResult:
    """Outcome of resetting the favorites set.

    Attributes:
        found: Entries present before cleanup
        issued: Removal actions issued (never more than found)
        remaining: Entries still present when cleanup returned
        converged: True if the set was confirmed empty in time
    """
    found: int
    issued: int
    remaining: int
    converged: bool


class AuthSurface(Protocol):
    async def is_logged_in(self) -> bool: ...

    async def submit_login(self, email: str, password: str, timeout: float) -> LoginOutcome: ...

    async def get_error_message(self) -> Optional[str]: ...


class FavoritesSurface(Protocol):
    async def get_favorite_items(self) -> List[FavoriteEntry]: ...

    async def get_favorites_count(self) -> int: ...

    async def remove_all_from_favorites(self) -> int: ...

    async def is_favorite_present(self, title: str) -> bool: ...

    async def refresh(self) -> None: ...


class LiveSurface(Protocol):
    async def get_event_count(self) -> int: ...

    async def get_event_by_index(self, index: int) -> Optional[LiveEvent]: ...

    async def toggle_favorite(self, index: int) -> bool: ...


class StateSynchronizer:
    """Bring the browser and the account into a known state, then verify changes.

    Args:
        session_cache: Snapshot store used to skip the login form
        credentials: Account used when a form login is needed
        suite: Suite name for structured logs and error reports
        login_timeout: Seconds to wait for the login outcome
        cleanup_timeout: Seconds to wait for the favorites set to empty
        verify_timeout: Default seconds for post-action verification
        poll_interval: Seconds between convergence checks
        structured_logger: JSON event logger (default: one per suite)
        metrics: Shared metrics aggregator (default: a new one)
    """

    def __init__(
        self,
        session_cache: Optional[SessionCache] = None,
        credentials: Optional[Credentials] = None,
        suite: str = 'ui',
        login_timeout: float = TIMEOUTS.LOGIN,
        cleanup_timeout: float = TIMEOUTS.CLEANUP,
        verify_timeout: float = TIMEOUTS.FAVORITES_COUNT,
        poll_interval: float = POLL.INTERVAL,
        structured_logger: Optional[StructuredLogger] = None,
        metrics: Optional[MetricsAggregator] = None,
    ):
        self.session_cache = session_cache or SessionCache()
        self.credentials = credentials or Credentials.from_env()
        self.suite = suite
        self.login_timeout = login_timeout
        self.cleanup_timeout = cleanup_timeout
        self.verify_timeout = verify_timeout
        self.poll_interval = poll_interval
        self.events = structured_logger or StructuredLogger(suite=suite)
        self.metrics = metrics if metrics is not None else MetricsAggregator()
        self.state = AuthState.UNKNOWN

    @classmethod
    def from_config(
        cls,
        config: Dict[str, Any],
        suite: str = 'ui',
        metrics: Optional[MetricsAggregator] = None,
    ) -> "StateSynchronizer":
        """Create a synchronizer from the suite YAML (session, poll, timeouts sections).

        SESSION_FILE in the environment overrides session.file.
        """
        session = get_section(config, 'session')
        timeouts = get_section(config, 'timeouts')
        poll = get_section(config, 'poll')

        cache = SessionCache(
            path=os.getenv("SESSION_FILE") or session.get('file'),
            ttl_hours=float(session.get('ttl_hours', SESSION.TTL_HOURS)),
        )
        return cls(
            session_cache=cache,
            credentials=Credentials.from_env(),
            suite=suite,
            login_timeout=float(timeouts.get('login', TIMEOUTS.LOGIN)),
            cleanup_timeout=float(timeouts.get('cleanup', TIMEOUTS.CLEANUP)),
            verify_timeout=float(timeouts.get('verify', TIMEOUTS.FAVORITES_COUNT)),
            poll_interval=float(poll.get('interval', POLL.INTERVAL)),
            metrics=metrics,
        )

    def _transition(self, state: AuthState) -> None:
        logging.debug(f"[sync] auth {self.state.value} -> {state.value}")
        add_breadcrumb(f"auth {self.state.value} -> {state.value}", category='auth')
        self.state = state

    # ------------------------------------------------------------------
    # Authentication
    # ------------------------------------------------------------------

    async def ensure_authenticated(self, page, auth: AuthSurface) -> AuthState:
        """Make sure ``page`` belongs to a logged-in session.

        Order of attempts: already logged in, cached session snapshot, login
        form. A form login is tried once; there is no retry.

        Args:
            page: Playwright page already on the site
            auth: Login capability for that page

        Returns:
            AuthState.AUTHENTICATED

        Raises:
            AuthenticationError: If the login form rejected the credentials,
                produced no outcome in time, or left no logged-in indicator
        """
        self.state = AuthState.UNKNOWN

        if await auth.is_logged_in():
            self._transition(AuthState.AUTHENTICATED)
            self.events.log_auth(state=self.state.value, method='already')
            return self.state

        self._transition(AuthState.CHECKED)
        if await self._restore_session(page, auth):
            self._transition(AuthState.AUTHENTICATED)
            self.metrics.session_restores += 1
            self.events.log_auth(state=self.state.value, method='session_restore')
            return self.state

        self._transition(AuthState.LOGIN_IN_FLIGHT)
        failure = await self._login(auth)
        if failure is not None:
            self._fail(failure, page)

        self._transition(AuthState.AUTHENTICATED)
        self.metrics.logins += 1
        self.events.log_auth(state=self.state.value, method='login')
        await self._save_session(page)
        return self.state

    async def _restore_session(self, page, auth: AuthSurface) -> bool:
        snapshot = self.session_cache.restore()
        if snapshot is None:
            return False

        try:
            await self.session_cache.apply(snapshot, page.context)
            await page.reload(wait_until='domcontentloaded')
        except (PlaywrightError, ValueError) as e:
            logging.warning(f"[sync] Could not apply cached session, discarding it: {e}")
            self.session_cache.clear()
            return False

        if await auth.is_logged_in():
            logging.info("[sync] Logged in from cached session")
            return True

        # Server no longer honours the cookies
        logging.info("[sync] Cached session was not accepted, discarding it")
        self.session_cache.clear()
        return False

    async def _login(self, auth: AuthSurface) -> Optional[str]:
        """Submit the login form once. Returns a failure detail, or None on success."""
        if not self.credentials.is_complete:
            return "TEST_USER_EMAIL and TEST_USER_PASSWORD must be set"

        logging.info(f"[sync] Logging in as {self.credentials.redacted_email}")
        outcome = await auth.submit_login(
            self.credentials.email,
            self.credentials.password,
            timeout=self.login_timeout,
        )

        if outcome == LoginOutcome.ERROR_SHOWN:
            message = await auth.get_error_message()
            return f"login form reported an error ({message or 'no message'})"
        if outcome == LoginOutcome.TIMED_OUT:
            return f"no login outcome within {self.login_timeout:.0f}s"

        try:
            await poll_until(
                auth.is_logged_in,
                timeout=min(self.login_timeout, TIMEOUTS.SHORT),
                poll_interval=self.poll_interval,
                description="logged-in indicator",
            )
        except ConvergenceTimeout:
            return "login submitted but no logged-in indicator appeared"
        return None

    def _fail(self, detail: str, page) -> None:
        self._transition(AuthState.FAILED)
        error = AuthenticationError(detail)
        self.events.log_auth(state=self.state.value, method='login', error=detail)
        capture_suite_error(
            error,
            suite=self.suite,
            extra={'state': self.state.value, 'url': getattr(page, 'url', None)},
        )
        raise error

    async def _save_session(self, page) -> None:
        """Capture and persist a fresh snapshot; failures never fail the test."""
        try:
            snapshot = await self.session_cache.capture(page)
            path = self.session_cache.persist(snapshot)
        except Exception as e:
            logging.warning(f"[sync] Could not save session snapshot: {e}")
            return
        self.events.log_session_saved(cookie_count=len(snapshot.cookies), path=str(path))

    # ------------------------------------------------------------------
    # Shared-state reset
    # ------------------------------------------------------------------

    async def reset_shared_state(self, favorites: FavoritesSurface) -> CleanupResult:
        """Empty the account's favorites set.

        The set is enumerated live, removed in one batch, then polled until
        empty. Cleanup that does not converge is reported, not raised.

        Args:
            favorites: Favorites capability on an open favorites page

        Returns:
            CleanupResult with the entries found, removals issued and
            entries left behind
        """
        start = time.monotonic()
        entries = await favorites.get_favorite_items()
        found = len(entries)
        if found == 0:
            logging.info("[sync] Favorites already empty")
            result = CleanupResult(found=0, issued=0, remaining=0, converged=True)
            self.events.log_cleanup(found=0, issued=0, remaining=0, converged=True, elapsed_ms=0.0)
            return result

        logging.info(f"[sync] Removing {found} existing favorites")
        issued = min(await favorites.remove_all_from_favorites(), found)
        last_count = found

        async def read_count() -> int:
            nonlocal last_count
            last_count = await favorites.get_favorites_count()
            return last_count

        try:
            await wait_for_count(
                read_count,
                0,
                timeout=self.cleanup_timeout,
                poll_interval=self.poll_interval,
                description="favorites count",
            )
            remaining = 0
        except ConvergenceTimeout as e:
            # A failing read leaves the last count that was observed
            remaining = last_count
            self.metrics.incomplete_cleanups += 1
            logging.warning(f"[sync] Cleanup incomplete, {remaining} favorites left: {e}")

        elapsed_ms = (time.monotonic() - start) * 1000
        result = CleanupResult(found=found, issued=issued, remaining=remaining, converged=remaining == 0)
        self.events.log_cleanup(
            found=found,
            issued=issued,
            remaining=remaining,
            converged=result.converged,
            elapsed_ms=elapsed_ms,
        )
        return result

    # ------------------------------------------------------------------
    # Actions and verification
    # ------------------------------------------------------------------

    async def favorite_events(self, live: LiveSurface, count: int) -> List[LiveEvent]:
        """Mark the first ``count`` live events as favorites.

        Events that are already favorites count toward ``count`` and are not
        toggled again, so calling this twice leaves the same set. A toggle
        that is not confirmed in time is logged and left out of the result.

        Returns:
            The confirmed favorite events, in page order
        """
        available = await live.get_event_count()
        if available < count:
            logging.warning(f"[sync] Only {available} live events available, wanted {count}")

        favorited = []
        for index in range(min(count, available)):
            event = await live.get_event_by_index(index)
            if event is None:
                logging.warning(f"[sync] Event {index + 1} is no longer listed, skipping")
                continue
            if event.is_favorited:
                logging.info(f"[sync] Event {index + 1} already in favorites: {event.title}")
                favorited.append(event)
                continue

            if not await live.toggle_favorite(index):
                logging.warning(f"[sync] Favorite toggle for event {index + 1} is not clickable")
                continue
            try:
                event = await self._verify(
                    self._event_favorited(live, index),
                    timeout=min(self.verify_timeout, TIMEOUTS.SHORT),
                    description=f"event {index + 1} favorited",
                    phase=Phase.ACTION,
                )
            except ConvergenceTimeout as e:
                logging.warning(f"[sync] {e}")
                continue
            logging.info(f"[sync] Added event {index + 1} to favorites: {event.title}")
            favorited.append(event)
        return favorited

    @staticmethod
    def _event_favorited(live: LiveSurface, index: int) -> Callable[[], Awaitable[Any]]:
        async def _check():
            event = await live.get_event_by_index(index)
            return event if event is not None and event.is_favorited else False
        return _check

    async def verify_favorites_count(
        self,
        favorites: FavoritesSurface,
        expected: int,
        timeout: Optional[float] = None,
    ) -> int:
        """Wait until the favorites page lists exactly ``expected`` entries.

        Raises:
            ConvergenceTimeout: With the last observed count
        """
        async def _check() -> int:
            actual = await favorites.get_favorites_count()
            if actual != expected:
                raise AssertionError(f"expected favorites count {expected}, got {actual}")
            return actual

        return await self._verify(_check, timeout, description=f"favorites count == {expected}")

    async def verify_present(
        self,
        favorites: FavoritesSurface,
        titles: Sequence[str],
        timeout: Optional[float] = None,
    ) -> None:
        """Wait until every title in ``titles`` is listed on the favorites page."""
        async def _check() -> None:
            missing = [title for title in titles if not await favorites.is_favorite_present(title)]
            if missing:
                raise AssertionError(f"not in favorites: {', '.join(missing)}")

        await self._verify(_check, timeout, description="favorites present")

    async def verify_removed(
        self,
        favorites: FavoritesSurface,
        title: str,
        timeout: Optional[float] = None,
    ) -> None:
        """Refresh the favorites page until ``title`` is no longer listed."""
        async def _check() -> None:
            await favorites.refresh()
            if await favorites.is_favorite_present(title):
                raise AssertionError(f"'{title}' is still in favorites")

        await self._verify(_check, timeout, description=f"'{title}' removed")

    async def verify(
        self,
        check: Callable[[], Awaitable[Any]],
        timeout: Optional[float] = None,
        description: str = "condition",
    ) -> Any:
        """Poll any scenario-specific check with the synchronizer's interval and metrics."""
        return await self._verify(check, timeout, description)

    async def _verify(
        self,
        check: Callable[[], Awaitable[Any]],
        timeout: Optional[float],
        description: str,
        phase: Phase = Phase.VERIFICATION,
    ) -> Any:
        """poll_until with attempt counting, metrics and a structured event."""
        attempts = 0

        async def _counted():
            nonlocal attempts
            attempts += 1
            return await check()

        start = time.monotonic()
        try:
            result = await poll_until(
                _counted,
                timeout=self.verify_timeout if timeout is None else timeout,
                poll_interval=self.poll_interval,
                description=description,
            )
        except ConvergenceTimeout as e:
            elapsed_ms = (time.monotonic() - start) * 1000
            self.metrics.add_poll(converged=False, elapsed_ms=elapsed_ms, attempts=attempts)
            self.events.log_convergence(
                description, converged=False, attempts=attempts,
                elapsed_ms=elapsed_ms, reason=e.reason, phase=phase.value,
            )
            raise

        elapsed_ms = (time.monotonic() - start) * 1000
        self.metrics.add_poll(converged=True, elapsed_ms=elapsed_ms, attempts=attempts)
        self.events.log_convergence(
            description, converged=True, attempts=attempts,
            elapsed_ms=elapsed_ms, phase=phase.value,
        )
        return result
