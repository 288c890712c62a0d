from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Snake-case attributes, camelCase JSON"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class FormatDescriptor(CamelModel):
    """One selectable muxed quality"""
    quality: str
    height: Optional[int] = None
    ext: Optional[str] = None
    filesize: Optional[int] = None
    url: Optional[str] = None


class VideoMetadata(CamelModel):
    """Video information response"""
    title: str
    thumbnail: Optional[str] = None
    duration: Optional[float] = None
    uploader: Optional[str] = None
    formats: List[FormatDescriptor] = Field(default_factory=list)
    has_audio: bool = False
    direct_url: Optional[str] = None


class DownloadResponse(CamelModel):
    download_url: str
    message: str


class HealthResponse(BaseModel):
    status: str = "ok"
    message: str


class DependencyStatus(BaseModel):
    ytdlp: str
    version: Optional[str] = None
    error: Optional[str] = None


class ErrorResponse(BaseModel):
    error: str
    details: Optional[str] = None
