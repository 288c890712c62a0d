import asyncio

from tweetvid.config.settings import YtDlpConfig
from tweetvid.models.response import DependencyStatus
from tweetvid.services.ytdlp import OutputLimitExceeded, ProcessRunner, YTDLPCommandBuilder, stderr_summary

INSTALLED = "installed"
NOT_INSTALLED = "not installed"


async def check_ytdlp(runner: ProcessRunner, ytdlp_config: YtDlpConfig) -> DependencyStatus:
    """Run ``yt-dlp --version``; never raises."""
    cmd = YTDLPCommandBuilder(ytdlp_config.binary).build_version_command()
    try:
        result = await runner(cmd, timeout=ytdlp_config.version_timeout_seconds)
    except asyncio.TimeoutError:
        return DependencyStatus(ytdlp=NOT_INSTALLED, error=f"{cmd[0]} --version timed out")
    except (OSError, OutputLimitExceeded) as e:
        return DependencyStatus(ytdlp=NOT_INSTALLED, error=str(e))

    if result.returncode != 0:
        return DependencyStatus(ytdlp=NOT_INSTALLED, error=stderr_summary(result))

    version = result.stdout.decode(errors="replace").strip() or None
    return DependencyStatus(ytdlp=INSTALLED, version=version)
