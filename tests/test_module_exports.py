"""Tests for __all__ exports in shared modules"""

import pytest
import importlib


MODULE_PATHS = [
    "src.shared",
    "src.shared.browser",
    "src.shared.constants",
    "src.shared.io",
    "src.shared.locators",
    "src.shared.logging_config",
    "src.shared.poller",
    "src.shared.session_cache",
    "src.shared.structured_logging",
    "src.shared.suite_config",
    "src.shared.synchronizer",
    "src.pages.favorites",
    "src.pages.live",
    "src.pages.login",
    "src.pages.settings",
    "src.pages.social",
    "src.pages.bonuses",
]


@pytest.mark.parametrize("module_path", MODULE_PATHS)
def test_module_has_all_declaration(module_path):
    """Test that the module defines __all__ correctly.

    Args:
        module_path: Dotted path to the module to test
    """
    module = importlib.import_module(module_path)
    assert hasattr(module, '__all__'), f"{module_path} module should define __all__"
    assert isinstance(module.__all__, list), f"{module_path}.__all__ should be a list"
    assert len(module.__all__) > 0, f"{module_path}.__all__ should not be empty"


@pytest.mark.parametrize("module_path", MODULE_PATHS)
def test_exported_items_exist(module_path):
    """Test that all items in __all__ actually exist in the module.

    Args:
        module_path: Dotted path to the module to test
    """
    module = importlib.import_module(module_path)
    for item in module.__all__:
        assert hasattr(module, item), f"{module_path}.__all__ includes '{item}' but it doesn't exist"


@pytest.mark.parametrize("module_path", MODULE_PATHS)
def test_no_private_items_in_exports(module_path):
    """Test that __all__ doesn't include private (underscore-prefixed) items."""
    module = importlib.import_module(module_path)
    private_items = [item for item in module.__all__ if item.startswith('_')]
    assert not private_items, f"{module_path}.__all__ should not include private items: {private_items}"


# Define key exports for each module
KEY_EXPORTS = {
    "src.shared": [
        'StateSynchronizer', 'SessionCache', 'poll_until', 'BrowserConfig', 'setup_logging', 'sentry_flush'
    ],
    "src.shared.synchronizer": [
        'AuthState', 'AuthenticationError', 'CleanupResult', 'LoginOutcome', 'StateSynchronizer',
        'AuthSurface', 'FavoritesSurface', 'LiveSurface',
    ],
    "src.shared.session_cache": [
        'SessionCache', 'SessionSnapshot'
    ],
    "src.shared.poller": [
        'ConvergenceTimeout', 'poll_until', 'wait_for_count'
    ],
}


@pytest.mark.parametrize("module_path,required_exports", KEY_EXPORTS.items())
def test_key_public_items_are_exported(module_path, required_exports):
    """Verify key public items are included in __all__."""
    module = importlib.import_module(module_path)
    missing_exports = set(required_exports) - set(module.__all__)
    assert not missing_exports, f"{module_path}.__all__ is missing required exports: {missing_exports}"
