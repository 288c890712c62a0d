from .internal import CompletedProcess, ResolutionIntent
from .request import DownloadRequest, ExtractionRequest
from .response import (
    DependencyStatus,
    DownloadResponse,
    ErrorResponse,
    FormatDescriptor,
    HealthResponse,
    VideoMetadata,
)

__all__ = [
    "CompletedProcess",
    "DependencyStatus",
    "DownloadRequest",
    "DownloadResponse",
    "ErrorResponse",
    "ExtractionRequest",
    "FormatDescriptor",
    "HealthResponse",
    "ResolutionIntent",
    "VideoMetadata",
]
