"""Settings: switch the interface language and the color scheme."""

import re

import pytest

from src.pages.settings import SettingsPage
from src.shared.constants import TIMEOUTS

pytestmark = pytest.mark.e2e


@pytest.mark.asyncio
async def test_change_language_and_theme(authenticated_page, browser_config, synchronizer):
    settings = SettingsPage(authenticated_page, browser_config.base_url)

    await settings.open()
    assert '/personal-office/settings/' in authenticated_page.url

    language = await settings.change_language()
    await synchronizer.verify(
        lambda: settings.is_language_applied(language),
        timeout=TIMEOUTS.MEDIUM,
        description=f"language {language} applied",
    )

    before = await settings.active_theme()
    target = await settings.toggle_theme()
    assert target != before
    await synchronizer.verify(
        lambda: _theme_is(settings, target),
        timeout=TIMEOUTS.SHORT,
        description=f"theme {target} active",
    )

    body = await settings.body_theme()
    assert re.match(r'rgba?\(\d+,\s*\d+,\s*\d+', body['backgroundColor'])
    assert body['bodyClasses']


async def _theme_is(settings, theme):
    return await settings.active_theme() == theme
