import asyncio
from typing import Optional, Union

from tweetvid.config.settings import YtDlpConfig
from tweetvid.core.errors import ExtractionTimeoutError, InvalidRequestError, ResolutionError
from tweetvid.models.internal import ResolutionIntent
from tweetvid.models.response import DownloadResponse
from tweetvid.services.ytdlp import (
    OutputLimitExceeded,
    ProcessRunner,
    YTDLPCommandBuilder,
    stderr_summary,
)

BEST = "best"


def parse_quality(quality: Optional[Union[int, str]]) -> Optional[int]:
    """
    Normalize a quality tier to a pixel height.

    ``None`` and ``"best"`` mean the tool's own best pick and return None.
    Raises ValueError for anything that is not a positive height.
    """
    if quality is None:
        return None
    if isinstance(quality, bool):
        raise ValueError(f"Invalid quality: {quality!r}")
    if isinstance(quality, str):
        value = quality.strip()
        if not value or value.lower() == BEST:
            return None
        if not value.isdigit():
            raise ValueError(f"Invalid quality: {quality!r}")
        quality = int(value)
    if not isinstance(quality, int) or quality <= 0:
        raise ValueError(f"Invalid quality: {quality!r}")
    return quality


def build_format_selector(max_height: Optional[int]) -> Optional[str]:
    """Best video+audio pair under the ceiling, else the best muxed stream under it."""
    if max_height is None:
        return None
    return f"bestvideo[height<={max_height}]+bestaudio/best[height<={max_height}]"


class ResolutionGateway:
    """Resolves a direct media URL through ``yt-dlp -g``"""

    def __init__(self, runner: ProcessRunner, ytdlp_config: YtDlpConfig,
                 success_message: str = "Use this URL to download the video directly",
                 timeout_message: str = "Request timeout. Please try again.",
                 failure_message: str = "Failed to get download URL"):
        self.runner = runner
        self.config = ytdlp_config
        self.commands = YTDLPCommandBuilder(ytdlp_config.binary)
        self.success_message = success_message
        self.timeout_message = timeout_message
        self.failure_message = failure_message

    def intent(self, url: str, quality: Optional[Union[int, str]], invalid_message: str) -> ResolutionIntent:
        try:
            return ResolutionIntent(url=url, max_height=parse_quality(quality))
        except ValueError as e:
            raise InvalidRequestError(invalid_message, details=str(e))

    async def resolve(self, intent: ResolutionIntent) -> DownloadResponse:
        cmd = self.commands.build_get_url_command(
            intent.url,
            build_format_selector(intent.max_height)
        )

        try:
            result = await self.runner(cmd)
        except asyncio.TimeoutError:
            raise ExtractionTimeoutError(
                self.timeout_message,
                details=f"yt-dlp did not finish within {self.config.timeout_seconds:g}s"
            )
        except OutputLimitExceeded as e:
            raise ResolutionError(self.failure_message, details=str(e))
        except OSError as e:
            raise ResolutionError(self.failure_message, details=f"Could not run {cmd[0]}: {e}")

        if result.returncode != 0:
            raise ResolutionError(self.failure_message, details=stderr_summary(result))

        # Separate video and audio streams print one URL each; surface the first
        lines = [line.strip() for line in result.stdout.decode(errors="replace").splitlines()]
        urls = [line for line in lines if line]
        if not urls:
            raise ResolutionError(self.failure_message, details="yt-dlp returned no URL")

        return DownloadResponse(download_url=urls[0], message=self.success_message)
