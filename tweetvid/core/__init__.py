from .errors import (
    ApiError,
    ExtractionError,
    ExtractionTimeoutError,
    InvalidRequestError,
    RateLimitExceeded,
    ResolutionError,
)
from .validation import is_valid_tweet_url

__all__ = [
    "ApiError",
    "ExtractionError",
    "ExtractionTimeoutError",
    "InvalidRequestError",
    "RateLimitExceeded",
    "ResolutionError",
    "is_valid_tweet_url",
]
