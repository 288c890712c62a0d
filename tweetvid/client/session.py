import asyncio
import webbrowser
from enum import Enum
from typing import Callable, List, Optional

from tweetvid.client.api import ApiClient, ApiError
from tweetvid.models.response import DownloadResponse, VideoMetadata

BEST = "best"


class SessionState(str, Enum):
    IDLE = "idle"
    EXTRACTING = "extracting"
    READY = "ready"
    EXTRACT_ERROR = "extract_error"
    DOWNLOADING = "downloading"
    DOWNLOAD_ERROR = "download_error"


BUSY_STATES = {SessionState.EXTRACTING, SessionState.DOWNLOADING}


class SessionBusyError(RuntimeError):
    """A request is already in flight; the controls are disabled"""


def open_in_new_tab(url: str) -> None:
    webbrowser.open_new_tab(url)


class DownloaderSession:
    """
    Front-end state for one user: URL entry, metadata, quality picker.

    Transitions::

        IDLE -> EXTRACTING -> READY | EXTRACT_ERROR
        READY -> DOWNLOADING -> READY (URL opened) | DOWNLOAD_ERROR

    Errors keep the server's message verbatim and are cleared by the next
    submission. ``submit`` and ``download`` refuse to run while another
    request is pending.
    """

    def __init__(self, client: ApiClient, opener: Callable[[str], None] = open_in_new_tab):
        self.client = client
        self.opener = opener
        self.state = SessionState.IDLE
        self.url = ""
        self.video_info: Optional[VideoMetadata] = None
        self.selected_quality: str = BEST
        self.error = ""
        self.last_download: Optional[DownloadResponse] = None

    @property
    def busy(self) -> bool:
        return self.state in BUSY_STATES

    @property
    def controls_enabled(self) -> bool:
        return not self.busy

    def can_submit(self, url: Optional[str] = None) -> bool:
        return self.controls_enabled and bool(url if url is not None else self.url)

    def quality_options(self) -> List[str]:
        """Values offered by the quality picker, "best" first"""
        options = [BEST]
        if self.video_info:
            options.extend(str(f.height) for f in self.video_info.formats if f.height)
        return options

    def select_quality(self, value: str) -> None:
        value = str(value)
        if value not in self.quality_options():
            raise ValueError(f"Unknown quality {value!r}, expected one of {self.quality_options()}")
        self.selected_quality = value

    def _enter(self, state: SessionState) -> None:
        if self.busy:
            raise SessionBusyError(f"Cannot start while {self.state.value}")
        self.state = state

    async def submit(self, url: str) -> Optional[VideoMetadata]:
        self._enter(SessionState.EXTRACTING)
        self.url = url
        self.error = ""
        self.video_info = None
        self.selected_quality = BEST
        self.last_download = None

        try:
            self.video_info = await self.client.extract(url)
        except ApiError as e:
            self.error = e.message
            self.state = SessionState.EXTRACT_ERROR
            return None
        except asyncio.CancelledError:
            self.state = SessionState.IDLE
            raise
        except Exception as e:
            self.error = str(e) or e.__class__.__name__
            self.state = SessionState.EXTRACT_ERROR
            return None

        self.state = SessionState.READY
        return self.video_info

    async def download(self) -> Optional[DownloadResponse]:
        if self.video_info is None:
            raise RuntimeError("Nothing to download, submit a URL first")
        self._enter(SessionState.DOWNLOADING)
        self.error = ""

        quality = None if self.selected_quality == BEST else self.selected_quality
        try:
            response = await self.client.download(self.url, quality)
        except ApiError as e:
            self.error = e.message
            self.state = SessionState.DOWNLOAD_ERROR
            return None
        except asyncio.CancelledError:
            self.state = SessionState.READY
            raise
        except Exception as e:
            self.error = str(e) or e.__class__.__name__
            self.state = SessionState.DOWNLOAD_ERROR
            return None

        self.last_download = response
        try:
            self.opener(response.download_url)
        except Exception as e:
            self.error = f"Could not open {response.download_url}: {e}"
            self.state = SessionState.DOWNLOAD_ERROR
            return None

        self.state = SessionState.READY
        return response
