import asyncio

import pytest

from conftest import TWEET_URL, FakeRunner, failed, ok
from tweetvid.config.settings import YtDlpConfig
from tweetvid.core.errors import ExtractionError, ExtractionTimeoutError
from tweetvid.services.extract import ExtractionGateway, select_formats, shape_metadata
from tweetvid.services.ytdlp import OutputLimitExceeded


def muxed(height, **extra):
    return {"format_id": f"http-{height}", "height": height, "ext": "mp4",
            "vcodec": "avc1", "acodec": "mp4a", "url": f"https://video.twimg.com/{height}.mp4", **extra}


def test_keeps_five_tallest_muxed_formats():
    formats = [muxed(h) for h in (320, 1080, 480, 720, 240, 360, 1440)]
    result = select_formats(formats)

    assert len(result) == 5
    heights = [f.height for f in result]
    assert heights == sorted(heights, reverse=True)
    assert heights == [1440, 1080, 720, 480, 360]


def test_only_split_streams_gives_audio_flag_and_no_formats():
    info = {
        "title": "split",
        "formats": [
            {"format_id": "hls-audio", "vcodec": "none", "acodec": "mp4a"},
            {"format_id": "hls-720", "height": 720, "vcodec": "avc1", "acodec": "none"},
        ],
    }
    metadata = shape_metadata(info)

    assert metadata.has_audio is True
    assert metadata.formats == []


def test_quality_label_fallbacks():
    result = select_formats([
        muxed(720, format_note="HD"),
        muxed(480),
        {"format_id": "http-x", "vcodec": "avc1", "acodec": "mp4a"},
    ])

    assert [f.quality for f in result] == ["HD", "480p", "http-x"]


def test_defaults_and_uploader_fallback():
    metadata = shape_metadata({"channel": "NASA", "formats": []})

    assert metadata.title == "Twitter Video"
    assert metadata.uploader == "NASA"
    assert metadata.has_audio is False
    assert metadata.direct_url is None


def test_direct_url_passthrough():
    metadata = shape_metadata({"title": "t", "url": "https://video.twimg.com/a.mp4"})
    assert metadata.direct_url == "https://video.twimg.com/a.mp4"


def test_playlist_uses_first_video_entry():
    info = {
        "_type": "playlist",
        "title": "thread",
        "uploader": "someone",
        "entries": [
            {"title": "", "formats": [muxed(720)]},
            {"title": "second", "formats": [muxed(1080)]},
        ],
    }
    metadata = shape_metadata(info)

    assert metadata.title == "thread"
    assert metadata.uploader == "someone"
    assert [f.height for f in metadata.formats] == [720]


@pytest.mark.asyncio
async def test_gateway_invokes_dump_json():
    runner = FakeRunner(ok({"title": "clip", "duration": 12.5, "formats": [muxed(720)]}))
    gateway = ExtractionGateway(runner, YtDlpConfig())

    metadata = await gateway.extract(TWEET_URL)

    assert runner.calls == [["yt-dlp", "-J", TWEET_URL]]
    assert metadata.title == "clip"
    assert metadata.duration == 12.5


@pytest.mark.asyncio
async def test_gateway_classifies_timeout():
    gateway = ExtractionGateway(FakeRunner(asyncio.TimeoutError()), YtDlpConfig())

    with pytest.raises(ExtractionTimeoutError):
        await gateway.extract(TWEET_URL)


@pytest.mark.asyncio
@pytest.mark.parametrize("result, fragment", [
    (failed("ERROR: [twitter] 123: No video could be found in this tweet"), "No video"),
    (ok("not json"), "Malformed"),
    (ok("[1, 2]"), "expected an object"),
    (OutputLimitExceeded(1024), "exceeded"),
    (FileNotFoundError(2, "No such file or directory"), "Could not run"),
    (ok({"title": 12345, "formats": []}), "Malformed"),
    (ok({"formats": [{"height": "tall", "vcodec": "avc1", "acodec": "mp4a"}]}), "Malformed"),
    (ok({"uploader": ["a"]}), "Malformed"),
])
async def test_gateway_generic_failures(result, fragment):
    gateway = ExtractionGateway(FakeRunner(result), YtDlpConfig())

    with pytest.raises(ExtractionError) as exc_info:
        await gateway.extract(TWEET_URL)

    assert not isinstance(exc_info.value, ExtractionTimeoutError)
    assert fragment in exc_info.value.details
