from typing import Optional, Union

from pydantic import BaseModel, Field


class ExtractionRequest(BaseModel):
    # Left unconstrained so a missing or malformed URL gets the same 400 as a non-tweet one
    url: Optional[str] = Field(None, description="Tweet URL")


class DownloadRequest(ExtractionRequest):
    quality: Optional[Union[int, str]] = Field(
        None,
        description='Maximum pixel height, or "best"/null for the best available'
    )
