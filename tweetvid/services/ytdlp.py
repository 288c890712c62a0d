from typing import List, Optional
import asyncio

from tweetvid.config.settings import YtDlpConfig
from tweetvid.models.internal import CompletedProcess

READ_CHUNK_SIZE = 64 * 1024


class OutputLimitExceeded(Exception):
    """Child process wrote more than the allowed number of bytes"""

    def __init__(self, limit: int):
        super().__init__(f"yt-dlp output exceeded {limit} bytes")
        self.limit = limit


class SubprocessExecutor:
    """Execute subprocess with a wall-clock bound and an output cap"""

    @staticmethod
    async def _read_capped(stream: asyncio.StreamReader, limit: int) -> bytes:
        buffer = bytearray()
        while True:
            chunk = await stream.read(READ_CHUNK_SIZE)
            if not chunk:
                return bytes(buffer)
            buffer.extend(chunk)
            if len(buffer) > limit:
                raise OutputLimitExceeded(limit)

    @staticmethod
    async def run(
        cmd: List[str],
        timeout: float,
        max_output_bytes: int
    ) -> CompletedProcess:
        """
        Run subprocess with timeout and proper cleanup.

        Raises asyncio.TimeoutError when the bound is exceeded and
        OutputLimitExceeded when stdout or stderr outgrows the cap. In both
        cases, and on cancellation, the child is killed and reaped.
        A missing executable surfaces as FileNotFoundError.
        """
        process = await asyncio.create_subprocess_exec(
            *cmd,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            stdin=asyncio.subprocess.DEVNULL
        )

        async def communicate():
            stdout, stderr = await asyncio.gather(
                SubprocessExecutor._read_capped(process.stdout, max_output_bytes),
                SubprocessExecutor._read_capped(process.stderr, max_output_bytes),
            )
            await process.wait()
            return stdout, stderr

        try:
            stdout, stderr = await asyncio.wait_for(communicate(), timeout=timeout)
        except BaseException:
            if process.returncode is None:
                process.kill()
                await process.wait()
            raise

        return CompletedProcess(
            returncode=process.returncode,
            stdout=stdout,
            stderr=stderr
        )


class ProcessRunner:
    """Runs yt-dlp argument vectors with the configured bounds"""

    def __init__(self, ytdlp_config: YtDlpConfig):
        self.config = ytdlp_config

    async def __call__(self, cmd: List[str], timeout: Optional[float] = None) -> CompletedProcess:
        return await SubprocessExecutor.run(
            cmd,
            timeout=timeout or self.config.timeout_seconds,
            max_output_bytes=self.config.max_output_bytes
        )


class YTDLPCommandBuilder:
    """Build yt-dlp commands"""

    def __init__(self, binary: str = "yt-dlp"):
        self.binary = binary

    def build_info_command(self, url: str) -> List[str]:
        """Metadata dump as a single JSON document"""
        return [self.binary, "-J", url]

    def build_get_url_command(self, url: str, format_str: Optional[str] = None) -> List[str]:
        """Direct media URL(s), one per line"""
        if format_str:
            return [self.binary, "-f", format_str, "-g", url]
        return [self.binary, "-g", url]

    def build_version_command(self) -> List[str]:
        return [self.binary, "--version"]


def stderr_summary(result: CompletedProcess, limit: int = 500) -> str:
    """Last part of stderr, which is where yt-dlp puts the ERROR: line"""
    text = result.stderr.decode(errors="replace").strip()
    if not text:
        return f"yt-dlp exited with status {result.returncode}"
    return text[-limit:]
