from .api import ApiClient, ApiError
from .session import DownloaderSession, SessionBusyError, SessionState

__all__ = ["ApiClient", "ApiError", "DownloaderSession", "SessionBusyError", "SessionState"]
