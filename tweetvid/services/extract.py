import asyncio
import json
import logging
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from tweetvid.config.settings import YtDlpConfig
from tweetvid.core.errors import ExtractionError, ExtractionTimeoutError
from tweetvid.models.response import FormatDescriptor, VideoMetadata
from tweetvid.services.ytdlp import (
    OutputLimitExceeded,
    ProcessRunner,
    YTDLPCommandBuilder,
    stderr_summary,
)

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "Twitter Video"


def _has_codec(value: Any) -> bool:
    # yt-dlp writes the literal "none" for a missing stream; absent means unknown
    return value != "none"


def is_muxed(fmt: Dict[str, Any]) -> bool:
    return _has_codec(fmt.get("vcodec")) and _has_codec(fmt.get("acodec"))


def is_audio_only(fmt: Dict[str, Any]) -> bool:
    return fmt.get("vcodec") == "none" and _has_codec(fmt.get("acodec"))


def quality_label(fmt: Dict[str, Any]) -> str:
    if fmt.get("format_note"):
        return str(fmt["format_note"])
    if fmt.get("height"):
        return f"{fmt['height']}p"
    return str(fmt.get("format_id") or "unknown")


def select_formats(formats: List[Dict[str, Any]], limit: int = 5) -> List[FormatDescriptor]:
    """Muxed formats, tallest first, at most ``limit`` of them."""
    descriptors = [
        FormatDescriptor(
            quality=quality_label(f),
            height=f.get("height"),
            ext=f.get("ext"),
            filesize=f.get("filesize"),
            url=f.get("url"),
        )
        for f in formats
        if isinstance(f, dict) and is_muxed(f)
    ]
    descriptors.sort(key=lambda d: d.height or 0, reverse=True)
    return descriptors[:limit]


def _pick_entry(info: Dict[str, Any]) -> Dict[str, Any]:
    """Multi-video tweets come back as a playlist; use its first video."""
    if info.get("formats") or not isinstance(info.get("entries"), list):
        return info
    for entry in info["entries"]:
        if isinstance(entry, dict) and entry.get("formats"):
            merged = dict(entry)
            for key in ("title", "uploader", "channel", "thumbnail"):
                if not merged.get(key) and info.get(key):
                    merged[key] = info[key]
            return merged
    return info


def shape_metadata(info: Dict[str, Any], max_formats: int = 5) -> VideoMetadata:
    """Reduce a ``yt-dlp -J`` document to the fields the front-end uses."""
    info = _pick_entry(info)
    formats = [f for f in (info.get("formats") or []) if isinstance(f, dict)]

    direct_url = info.get("url")
    if not isinstance(direct_url, str):
        direct_url = None

    return VideoMetadata(
        title=info.get("title") or DEFAULT_TITLE,
        thumbnail=info.get("thumbnail"),
        duration=info.get("duration"),
        uploader=info.get("uploader") or info.get("channel"),
        formats=select_formats(formats, max_formats),
        has_audio=any(is_audio_only(f) for f in formats),
        direct_url=direct_url,
    )


class ExtractionGateway:
    """Fetches tweet metadata through ``yt-dlp -J``"""

    def __init__(self, runner: ProcessRunner, ytdlp_config: YtDlpConfig,
                 timeout_message: str = "Request timeout. Please try again.",
                 failure_message: str = "Failed to extract video"):
        self.runner = runner
        self.config = ytdlp_config
        self.commands = YTDLPCommandBuilder(ytdlp_config.binary)
        self.timeout_message = timeout_message
        self.failure_message = failure_message

    async def extract(self, url: str) -> VideoMetadata:
        cmd = self.commands.build_info_command(url)

        try:
            result = await self.runner(cmd)
        except asyncio.TimeoutError:
            raise ExtractionTimeoutError(
                self.timeout_message,
                details=f"yt-dlp did not finish within {self.config.timeout_seconds:g}s"
            )
        except OutputLimitExceeded as e:
            raise ExtractionError(self.failure_message, details=str(e))
        except OSError as e:
            raise ExtractionError(self.failure_message, details=f"Could not run {cmd[0]}: {e}")

        if result.returncode != 0:
            raise ExtractionError(self.failure_message, details=stderr_summary(result))

        try:
            info = json.loads(result.stdout.decode(errors="replace"))
        except json.JSONDecodeError as e:
            raise ExtractionError(self.failure_message, details=f"Malformed yt-dlp output: {e}")

        if not isinstance(info, dict):
            raise ExtractionError(self.failure_message, details="Malformed yt-dlp output: expected an object")

        if info.get("url") is None:
            logger.debug("No top-level url in yt-dlp output, directUrl left empty")

        try:
            return shape_metadata(info, self.config.max_formats)
        except ValidationError as e:
            raise ExtractionError(self.failure_message, details=f"Malformed yt-dlp output: {e}")
