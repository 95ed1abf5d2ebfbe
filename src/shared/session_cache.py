"""Authentication session caching for the UI suite.

Logging in through the site's form is slow, rate limited and flaky, so a
successful login is captured once as a ``SessionSnapshot`` (auth cookies plus
page storage) and reused by later tests until it is older than the TTL.

Usage:
    cache = SessionCache()

    snapshot = cache.restore()
    if snapshot is None:
        # Cache miss - log in through the form, then
        snapshot = await cache.capture(page)
        cache.persist(snapshot)
    else:
        await cache.apply(snapshot, context)
"""

import json
import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, Optional, Tuple, Union

from src.shared.constants import SESSION
from src.shared.io import load_json, save_json_atomic

__all__ = [
    'SessionCache',
    'SessionSnapshot',
    'now_ms',
]

# Keys accepted by BrowserContext.add_cookies()
_COOKIE_FIELDS = ('name', 'value', 'domain', 'path', 'expires', 'httpOnly', 'secure', 'sameSite')
_REQUIRED_COOKIE_FIELDS = ('name', 'value', 'domain', 'path')
_SAME_SITE_VALUES = ('Strict', 'Lax', 'None')

_READ_STORAGE_SCRIPT = """
(storageName) => {
    const store = window[storageName];
    const items = {};
    for (let i = 0; i < store.length; i++) {
        const key = store.key(i);
        if (key) {
            items[key] = store.getItem(key) || '';
        }
    }
    return items;
}
"""

# about:blank and cross-origin frames throw on storage access
_RESTORE_STORAGE_SCRIPT = """
((data) => {
    try {
        for (const [key, value] of Object.entries(data.localStorage || {})) {
            window.localStorage.setItem(key, value);
        }
        for (const [key, value] of Object.entries(data.sessionStorage || {})) {
            window.sessionStorage.setItem(key, value);
        }
    } catch (e) {}
})(%s);
"""


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


@dataclass(frozen=True)
class SessionSnapshot:
    """Captured authentication artifacts enabling login bypass.

    Snapshots are never mutated in place; a new login produces a new snapshot
    that replaces the persisted one wholesale.

    Attributes:
        cookies: Auth cookies in Playwright's cookie dict shape
        local_storage: Verbatim localStorage key/value pairs
        session_storage: Verbatim sessionStorage key/value pairs
        captured_at: Capture time in epoch milliseconds
    """
    cookies: Tuple[Dict[str, Any], ...] = ()
    local_storage: Dict[str, str] = field(default_factory=dict)
    session_storage: Dict[str, str] = field(default_factory=dict)
    captured_at: int = field(default_factory=now_ms)

    def age_ms(self, now: Optional[int] = None) -> int:
        """Age of the snapshot in milliseconds."""
        return (now if now is not None else now_ms()) - self.captured_at

    def is_valid(self, now: Optional[int] = None, ttl_ms: int = SESSION.TTL_MS) -> bool:
        """A snapshot is usable only while ``now - captured_at < ttl_ms``."""
        return self.age_ms(now) < ttl_ms

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the persisted session file shape."""
        return {
            'cookies': [dict(cookie) for cookie in self.cookies],
            'localStorage': dict(self.local_storage),
            'sessionStorage': dict(self.session_storage),
            'timestamp': self.captured_at,
        }

    @classmethod
    def from_dict(cls, data: Any) -> 'SessionSnapshot':
        """Build a snapshot from the persisted session file shape.

        Raises:
            ValueError: If the structure is not a valid session file
        """
        if not isinstance(data, dict):
            raise ValueError("session data must be a JSON object")

        timestamp = data.get('timestamp')
        if isinstance(timestamp, bool) or not isinstance(timestamp, (int, float)):
            raise ValueError("session data has no numeric 'timestamp'")

        cookies = data.get('cookies', [])
        if not isinstance(cookies, list):
            raise ValueError("'cookies' must be a list")
        for cookie in cookies:
            if not isinstance(cookie, dict) or not all(key in cookie for key in _REQUIRED_COOKIE_FIELDS):
                raise ValueError(f"malformed cookie entry: {cookie!r}")
            if 'sameSite' in cookie and cookie['sameSite'] not in _SAME_SITE_VALUES:
                raise ValueError(f"cookie {cookie['name']!r} has invalid sameSite {cookie['sameSite']!r}")

        storages = []
        for key in ('localStorage', 'sessionStorage'):
            entries = data.get(key, {})
            if not isinstance(entries, dict):
                raise ValueError(f"'{key}' must be an object")
            storages.append({str(k): str(v) for k, v in entries.items()})

        return cls(
            cookies=tuple(_normalize_cookie(cookie) for cookie in cookies),
            local_storage=storages[0],
            session_storage=storages[1],
            captured_at=int(timestamp),
        )


def _normalize_cookie(cookie: Dict[str, Any]) -> Dict[str, Any]:
    """Keep only the cookie fields the browser context accepts back."""
    return {key: cookie[key] for key in _COOKIE_FIELDS if key in cookie}


class SessionCache:
    """Persist and restore authentication sessions with a TTL.

    A missing, unparsable or expired session file is a cache miss: ``restore``
    returns None and the caller falls back to a full login.

    Args:
        path: Session file location (default: SESSION.SESSION_FILE)
        ttl_hours: Snapshot time-to-live in hours (default: 24)
        auth_cookie_fragments: Cookie name fragments kept by ``capture``
    """

    def __init__(
        self,
        path: Optional[Union[str, Path]] = None,
        ttl_hours: float = SESSION.TTL_HOURS,
        auth_cookie_fragments: Iterable[str] = SESSION.AUTH_COOKIE_FRAGMENTS,
    ):
        self.path = Path(path or SESSION.SESSION_FILE)
        self.ttl_ms = int(ttl_hours * 60 * 60 * 1000)
        self.auth_cookie_fragments = tuple(auth_cookie_fragments)

    def is_auth_cookie(self, name: str) -> bool:
        """True if the cookie name contains one of the allow-listed fragments."""
        return any(fragment in name for fragment in self.auth_cookie_fragments)

    async def capture(self, page) -> SessionSnapshot:
        """Capture auth cookies and page storage from a logged-in page.

        Args:
            page: Playwright page whose context holds the credentialed session

        Returns:
            New SessionSnapshot stamped with the current time

        Raises:
            playwright.async_api.Error: If the browser cannot be read
        """
        cookies = await page.context.cookies()
        auth_cookies = tuple(
            _normalize_cookie(cookie) for cookie in cookies
            if self.is_auth_cookie(cookie.get('name', ''))
        )
        local_storage = await page.evaluate(_READ_STORAGE_SCRIPT, 'localStorage')
        session_storage = await page.evaluate(_READ_STORAGE_SCRIPT, 'sessionStorage')

        snapshot = SessionSnapshot(
            cookies=auth_cookies,
            local_storage=dict(local_storage or {}),
            session_storage=dict(session_storage or {}),
            captured_at=now_ms(),
        )
        logging.info(
            f"[session] Captured {len(auth_cookies)} auth cookies "
            f"(of {len(cookies)}), {len(snapshot.local_storage)} localStorage and "
            f"{len(snapshot.session_storage)} sessionStorage entries"
        )
        return snapshot

    def persist(self, snapshot: SessionSnapshot, destination: Optional[Union[str, Path]] = None) -> Path:
        """Write the snapshot, replacing any previous one unconditionally.

        Returns:
            Path the snapshot was written to

        Raises:
            OSError: If the session file cannot be written
        """
        path = Path(destination) if destination else self.path
        save_json_atomic(snapshot.to_dict(), path)
        logging.info(f"[session] Saved session snapshot to {path}")
        return path

    def restore(self, destination: Optional[Union[str, Path]] = None) -> Optional[SessionSnapshot]:
        """Load the persisted snapshot if it exists, parses and is within TTL.

        Returns:
            SessionSnapshot, or None on any kind of cache miss
        """
        path = Path(destination) if destination else self.path
        if not path.exists():
            logging.info(f"[session] No session snapshot found at {path}")
            return None

        data = load_json(path)
        if data is None:
            logging.warning(f"[session] Session snapshot at {path} is unreadable")
            return None

        try:
            snapshot = SessionSnapshot.from_dict(data)
        except ValueError as e:
            logging.warning(f"[session] Session snapshot at {path} is invalid: {e}")
            return None

        if not snapshot.is_valid(ttl_ms=self.ttl_ms):
            age_hours = snapshot.age_ms() / 3_600_000
            logging.info(
                f"[session] Session snapshot expired "
                f"({age_hours:.1f}h old, max: {self.ttl_ms / 3_600_000:.0f}h)"
            )
            return None

        logging.info(
            f"[session] Restored session snapshot from {path} "
            f"({snapshot.age_ms() / 60_000:.0f} min old)"
        )
        return snapshot

    async def apply(self, snapshot: SessionSnapshot, context) -> None:
        """Inject a snapshot into a browser context before its next navigation.

        Storage restoration is registered as an init script so it runs before
        the site's own startup code on every subsequent page load.

        Args:
            snapshot: Valid snapshot to inject
            context: Playwright BrowserContext

        Raises:
            ValueError: If the snapshot is older than the TTL
        """
        if not snapshot.is_valid(ttl_ms=self.ttl_ms):
            raise ValueError("Refusing to apply an expired session snapshot")

        if snapshot.cookies:
            await context.add_cookies([dict(cookie) for cookie in snapshot.cookies])

        if snapshot.local_storage or snapshot.session_storage:
            payload = json.dumps({
                'localStorage': snapshot.local_storage,
                'sessionStorage': snapshot.session_storage,
            }, ensure_ascii=False)
            await context.add_init_script(script=_RESTORE_STORAGE_SCRIPT % payload)

        logging.info(
            f"[session] Applied session snapshot ({len(snapshot.cookies)} cookies, "
            f"{len(snapshot.local_storage) + len(snapshot.session_storage)} storage entries)"
        )

    def clear(self, destination: Optional[Union[str, Path]] = None) -> bool:
        """Remove the persisted snapshot.

        Returns:
            True if a file was removed
        """
        path = Path(destination) if destination else self.path
        if path.exists():
            path.unlink()
            logging.info(f"[session] Cleared session snapshot {path}")
            return True
        return False

    def get_metadata(self, destination: Optional[Union[str, Path]] = None) -> Optional[Dict[str, Any]]:
        """Describe the persisted snapshot without applying it.

        Returns:
            Dict with 'path', 'captured_at', 'age_hours', 'cookie_count',
            'storage_entries' and 'expired', or None if no readable snapshot exists
        """
        path = Path(destination) if destination else self.path
        data = load_json(path)
        if data is None:
            return None

        try:
            snapshot = SessionSnapshot.from_dict(data)
        except ValueError:
            return None

        return {
            'path': str(path),
            'captured_at': snapshot.captured_at,
            'age_hours': round(snapshot.age_ms() / 3_600_000, 2),
            'cookie_count': len(snapshot.cookies),
            'storage_entries': len(snapshot.local_storage) + len(snapshot.session_storage),
            'expired': not snapshot.is_valid(ttl_ms=self.ttl_ms),
        }
