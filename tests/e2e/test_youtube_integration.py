"""YouTube: follow the footer link to the official channel and find a video."""

import pytest

from config import favbet_config
from src.pages.social import SocialPage
from src.shared.constants import TIMEOUTS, to_ms

pytestmark = pytest.mark.e2e


@pytest.mark.asyncio
async def test_youtube_channel_and_video(authenticated_page, browser_config, synchronizer):
    social = SocialPage(authenticated_page, browser_config.base_url)

    channel = await social.open_youtube()
    try:
        await synchronizer.verify(
            channel.is_expected_channel,
            timeout=TIMEOUTS.MEDIUM,
            description="official YouTube channel",
        )
        for locator in (channel.heading, channel.handle, channel.description):
            await locator.wait_for(state='visible', timeout=to_ms(TIMEOUTS.MEDIUM))

        await channel.search(favbet_config.YOUTUBE_TARGET_VIDEO)
        await channel.video_link(favbet_config.YOUTUBE_TARGET_VIDEO_LINK).wait_for(
            state='visible', timeout=to_ms(TIMEOUTS.MEDIUM)
        )
    finally:
        await channel.close()
