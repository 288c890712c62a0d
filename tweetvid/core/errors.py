from typing import Optional


class ApiError(Exception):
    """Base error rendered as ``{"error": message, "details": details}``"""

    status_code: int = 500

    def __init__(self, message: str, details: Optional[str] = None, headers: Optional[dict] = None):
        super().__init__(message)
        self.message = message
        self.details = details
        self.headers = headers

    def to_dict(self) -> dict:
        body = {"error": self.message}
        if self.details:
            body["details"] = self.details
        return body


class InvalidRequestError(ApiError):
    """Malformed or non-Twitter URL, bad quality tier"""
    status_code = 400


class ExtractionTimeoutError(ApiError):
    status_code = 408


class ExtractionError(ApiError):
    """yt-dlp failed to produce usable metadata"""
    status_code = 500


class ResolutionError(ApiError):
    """yt-dlp failed to produce a direct URL"""
    status_code = 500


class RateLimitExceeded(ApiError):
    status_code = 429
