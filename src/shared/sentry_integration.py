"""Sentry.io integration for reporting fatal suite failures.

Authentication failures and driver errors that abort a test are reported with
the test name and synchronization breadcrumbs attached. Nothing is sent unless
SENTRY_DSN is set.

Usage:
    from src.shared.sentry_integration import init_sentry, capture_suite_error

    # Initialize once per test session (tests/e2e/conftest.py, run.py)
    init_sentry()

    # Capture errors with suite context
    capture_suite_error(exception, suite="favorites", extra={"state": "failed"})
"""

import os
import logging
import re
from typing import Any, Dict, Optional

# Lazy import to avoid errors if sentry-sdk not installed
_sentry_sdk = None
_sentry_initialized = False

logger = logging.getLogger(__name__)


def _get_sentry_sdk():
    """Lazy load sentry-sdk to make it optional."""
    global _sentry_sdk
    if _sentry_sdk is None:
        try:
            import sentry_sdk
            _sentry_sdk = sentry_sdk
        except ImportError:
            _sentry_sdk = False  # Mark as unavailable
    return _sentry_sdk if _sentry_sdk else None


def init_sentry(
    dsn: Optional[str] = None,
    environment: Optional[str] = None,
    release: Optional[str] = None,
) -> bool:
    """Initialize Sentry SDK with suite configuration.

    Args:
        dsn: Sentry DSN (defaults to SENTRY_DSN env var)
        environment: Environment name (defaults to SENTRY_ENVIRONMENT or 'development')
        release: Release version (defaults to SENTRY_RELEASE or git hash)

    Returns:
        True if Sentry was initialized, False if disabled or unavailable
    """
    global _sentry_initialized

    if _sentry_initialized:
        return True

    sentry_sdk = _get_sentry_sdk()
    if sentry_sdk is None:
        logger.debug("Sentry SDK not installed, skipping initialization")
        return False

    dsn = dsn or os.getenv("SENTRY_DSN", "")
    if not dsn:
        logger.debug("SENTRY_DSN not set, Sentry disabled")
        return False

    environment = environment or os.getenv("SENTRY_ENVIRONMENT", "development")
    release = release or os.getenv("SENTRY_RELEASE") or _get_git_release()

    try:
        sentry_sdk.init(
            dsn=dsn,
            environment=environment,
            release=release,
            traces_sample_rate=0.0,
            integrations=[],
            before_send=_before_send,
            send_default_pii=False,  # Never send credentials or cookies
            attach_stacktrace=True,
            max_breadcrumbs=50,
        )

        sentry_sdk.set_tag("project", "favbet-ui-suite")

        _sentry_initialized = True
        logger.info(f"Sentry initialized (environment={environment}, release={release})")
        return True

    except Exception as e:
        logger.warning(f"Failed to initialize Sentry: {e}")
        return False


def _get_git_release() -> Optional[str]:
    """Get current git commit hash as release version."""
    try:
        import subprocess
        result = subprocess.run(
            ["git", "rev-parse", "--short", "HEAD"],
            capture_output=True,
            text=True,
            timeout=5,
        )
        if result.returncode == 0:
            return result.stdout.strip()
    except (OSError, subprocess.SubprocessError):
        pass
    return None


def _before_send(event: Dict[str, Any], hint: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """Scrub credentials from exception messages and breadcrumbs before sending."""
    if "exception" in event:
        for exception in event.get("exception", {}).get("values", []):
            if "value" in exception:
                exception["value"] = scrub_sensitive_data(exception["value"])

    for breadcrumb in event.get("breadcrumbs", {}).get("values", []):
        if "message" in breadcrumb:
            breadcrumb["message"] = scrub_sensitive_data(breadcrumb["message"])

    return event


def scrub_sensitive_data(text: str) -> str:
    """Remove credentials, tokens and e-mail addresses from text."""
    if not isinstance(text, str):
        return text

    text = re.sub(r"://[^:/\s]+:[^@\s]+@", "://[REDACTED]@", text)
    text = re.sub(
        r"(password|secret|token|session|cookie)([\"']?\s*[:=]\s*[\"']?)[^&\s,\"'}]+",
        r"\1\2[REDACTED]",
        text,
        flags=re.IGNORECASE,
    )
    text = re.sub(r"[\w.+-]+@[\w-]+\.[\w.-]+", "[EMAIL]", text)
    return text


def set_test_context(test_name: str, suite: Optional[str] = None) -> None:
    """Tag subsequent events with the running test."""
    sentry_sdk = _get_sentry_sdk()
    if sentry_sdk and _sentry_initialized:
        sentry_sdk.set_tag("test", test_name)
        if suite:
            sentry_sdk.set_tag("suite", suite)


def capture_suite_error(
    exception: BaseException,
    suite: Optional[str] = None,
    extra: Optional[Dict[str, Any]] = None,
) -> Optional[str]:
    """Capture an exception with suite context.

    Args:
        exception: The exception to capture
        suite: Suite name for context
        extra: Additional context data (e.g., auth state, URL)

    Returns:
        Sentry event ID if captured, None otherwise
    """
    sentry_sdk = _get_sentry_sdk()
    if not sentry_sdk or not _sentry_initialized:
        return None

    with sentry_sdk.push_scope() as scope:
        if suite:
            scope.set_tag("suite", suite)

        if extra:
            safe_extra = {
                key: scrub_sensitive_data(value) if isinstance(value, str) else value
                for key, value in extra.items()
            }
            scope.set_context("suite_context", safe_extra)

        return sentry_sdk.capture_exception(exception)


def add_breadcrumb(
    message: str,
    category: str = "sync",
    level: str = "info",
    data: Optional[Dict[str, Any]] = None,
) -> None:
    """Add a breadcrumb (auth transitions, cleanup results) for error context."""
    sentry_sdk = _get_sentry_sdk()
    if sentry_sdk and _sentry_initialized:
        sentry_sdk.add_breadcrumb(
            message=message,
            category=category,
            level=level,
            data=data,
        )


def flush(timeout: float = 2.0) -> None:
    """Flush pending events to Sentry before the process exits."""
    sentry_sdk = _get_sentry_sdk()
    if sentry_sdk and _sentry_initialized:
        sentry_sdk.flush(timeout=timeout)
