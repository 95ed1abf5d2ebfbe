#!/usr/bin/env python3
"""
Unified CLI for the favbet.ua UI suite

Usage:
    python run.py --status                         # Session snapshot and config overview
    python run.py --login                          # Log in once and refresh the session snapshot
    python run.py --login --headed                 # Same, with a visible browser
    python run.py --clear-session                  # Delete the session snapshot
    python run.py --e2e                            # Run the browser scenarios
    python run.py --e2e -k favorites               # Run matching scenarios only
"""

import argparse
import asyncio
import logging
import os
import sys
from typing import List, Optional

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

from config import favbet_config
from src.pages.login import LoginPage
from src.shared import (
    AuthenticationError,
    BrowserConfig,
    StateSynchronizer,
    browser_session,
    get_section,
    init_sentry,
    load_suite_config,
    sentry_flush,
    setup_logging,
)
from src.shared.constants import LOGGING, POLL
from src.shared.suite_config import CONFIG_ENV_VAR, CONFIG_PATH, Credentials


def validate_config_on_startup(config: dict) -> List[str]:
    """Validate the suite configuration before launching a browser.

    Args:
        config: Loaded suite.yaml contents

    Returns:
        List of validation errors (empty if config is valid)
    """
    errors = []

    browser = get_section(config, 'browser')
    base_url = browser.get('base_url')
    if base_url is not None and (not isinstance(base_url, str) or not base_url.startswith(('http://', 'https://'))):
        errors.append("browser.base_url must be a valid HTTP/HTTPS URL")

    viewport = browser.get('viewport')
    if viewport is not None:
        if not isinstance(viewport, dict) or not all(
            isinstance(viewport.get(key), int) and viewport.get(key) > 0 for key in ('width', 'height')
        ):
            errors.append("browser.viewport must have positive integer width and height")

    ttl_hours = get_section(config, 'session').get('ttl_hours')
    if ttl_hours is not None and (not isinstance(ttl_hours, (int, float)) or ttl_hours <= 0):
        errors.append("session.ttl_hours must be a positive number")

    interval = get_section(config, 'poll').get('interval')
    if interval is not None and (not isinstance(interval, (int, float)) or interval < POLL.MIN_INTERVAL):
        errors.append(f"poll.interval must be a number of at least {POLL.MIN_INTERVAL}")

    for name, value in get_section(config, 'timeouts').items():
        if not isinstance(value, (int, float)) or value < 0:
            errors.append(f"timeouts.{name} must be a non-negative number")

    return errors


def setup_parser() -> argparse.ArgumentParser:
    """Setup command line argument parser"""
    parser = argparse.ArgumentParser(
        description="favbet.ua UI suite",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__
    )

    action_group = parser.add_mutually_exclusive_group()
    action_group.add_argument(
        '--status',
        action='store_true',
        help='Show session snapshot and configuration without running anything'
    )
    action_group.add_argument(
        '--clear-session',
        action='store_true',
        help='Delete the persisted session snapshot'
    )
    action_group.add_argument(
        '--login',
        action='store_true',
        help='Log in through the form and save a fresh session snapshot'
    )
    action_group.add_argument(
        '--e2e',
        action='store_true',
        help='Run the browser scenarios in tests/e2e (one at a time, no retries)'
    )

    parser.add_argument(
        '-k',
        dest='keyword',
        type=str,
        default=None,
        metavar='EXPR',
        help='Only run scenarios matching the pytest keyword expression (with --e2e)'
    )
    parser.add_argument(
        '--headed',
        action='store_true',
        help='Show the browser window (with --login or --e2e)'
    )
    parser.add_argument(
        '--config',
        type=str,
        default=str(CONFIG_PATH),
        help='Suite configuration file (default: config/suite.yaml)'
    )

    # Logging
    parser.add_argument(
        '--log-file',
        type=str,
        default=LOGGING.LOG_FILE,
        help=f'Log file path (default: {LOGGING.LOG_FILE})'
    )
    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Verbose output'
    )

    return parser


def validate_cli_options(args) -> List[str]:
    """Validate CLI options for conflicts.

    Returns:
        List of validation errors (empty if options are valid)
    """
    errors = []

    if args.keyword and not args.e2e:
        errors.append("-k can only be used with --e2e")

    if args.headed and not (args.login or args.e2e):
        errors.append("--headed can only be used with --login or --e2e")

    if not (args.status or args.clear_session or args.login or args.e2e):
        errors.append("No action specified. Use --status, --login, --clear-session or --e2e")

    return errors


def show_status(config: dict) -> None:
    """Show session snapshot metadata and effective configuration"""
    sync = StateSynchronizer.from_config(config)
    browser = BrowserConfig.from_dict(get_section(config, 'browser'))
    credentials = Credentials.from_env()

    print("\n" + "=" * 60)
    print("UI SUITE STATUS")
    print("=" * 60)

    print(f"\n  Base URL:    {browser.base_url}")
    print(f"  Browser:     {browser.browser_type} ({'headless' if browser.headless else 'headed'})")
    print(f"  Account:     {credentials.redacted_email if credentials.is_complete else 'not configured'}")

    metadata = sync.session_cache.get_metadata()
    print(f"\n--- SESSION ({sync.session_cache.path}) ---")
    if metadata is None:
        print("  No usable session snapshot")
    else:
        state = "EXPIRED" if metadata['expired'] else "valid"
        print(f"  Status:      {state}")
        print(f"  Age:         {metadata['age_hours']:.1f}h (TTL {sync.session_cache.ttl_ms / 3_600_000:.0f}h)")
        print(f"  Cookies:     {metadata['cookie_count']}")
        print(f"  Storage:     {metadata['storage_entries']} entries")

    print("\n" + "=" * 60)


async def refresh_session(config: dict, headed: bool = False) -> int:
    """Log in through the form in a real browser and persist a new snapshot."""
    browser = BrowserConfig.from_dict(get_section(config, 'browser'))
    if headed:
        browser.headless = False

    sync = StateSynchronizer.from_config(config, suite='login')
    if not sync.credentials.is_complete:
        print("Error: test account credentials required")
        print("Set them with:")
        print("  export TEST_USER_EMAIL=your_email")
        print("  export TEST_USER_PASSWORD=your_password")
        return 1

    # Force the form login path
    sync.session_cache.clear()

    async with browser_session(browser) as (context, page):
        await page.goto(browser.url(favbet_config.HOME_PATH), wait_until='domcontentloaded')
        try:
            state = await sync.ensure_authenticated(page, LoginPage(page, browser.base_url))
        except AuthenticationError as e:
            logging.error(str(e))
            return 1

    print(f"Session state: {state.value}")
    metadata = sync.session_cache.get_metadata()
    if metadata is None:
        print("Logged in, but the session snapshot could not be saved (see log)")
        return 1
    print(f"Session snapshot saved to {metadata['path']} ({metadata['cookie_count']} cookies)")
    return 0


def run_e2e(args) -> int:
    """Run the browser scenarios through pytest, strictly one at a time."""
    import pytest

    if args.headed:
        os.environ['HEADLESS'] = 'false'
    os.environ[CONFIG_ENV_VAR] = str(args.config)

    pytest_args = ['tests/e2e', '--run-e2e', '-p', 'no:cacheprovider']
    if args.keyword:
        pytest_args += ['-k', args.keyword]
    if args.verbose:
        pytest_args.append('-v')

    logging.info(f"Running browser scenarios: pytest {' '.join(pytest_args)}")
    return int(pytest.main(pytest_args))


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point"""
    parser = setup_parser()
    args = parser.parse_args(argv)

    # Setup logging
    log_level = logging.DEBUG if args.verbose else logging.INFO
    setup_logging(args.log_file, level=log_level)

    cli_errors = validate_cli_options(args)
    if cli_errors:
        print("Invalid command line options:")
        for error in cli_errors:
            print(f"  - {error}")
        return 1

    config = load_suite_config(args.config)
    config_errors = validate_config_on_startup(config)
    if config_errors:
        print("Configuration errors found:")
        for error in config_errors:
            print(f"  - {error}")
        return 1

    if args.status:
        show_status(config)
        return 0

    if args.clear_session:
        sync = StateSynchronizer.from_config(config)
        if sync.session_cache.clear():
            print(f"Removed {sync.session_cache.path}")
        else:
            print("No session snapshot to remove")
        return 0

    init_sentry()
    try:
        if args.login:
            return asyncio.run(refresh_session(config, headed=args.headed))
        return run_e2e(args)
    except KeyboardInterrupt:
        logging.info("Interrupted by user")
        return 130
    finally:
        sentry_flush()


if __name__ == '__main__':
    sys.exit(main())
