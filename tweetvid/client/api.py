from typing import Optional, Type, TypeVar, Union

import httpx
from pydantic import BaseModel, ValidationError

from tweetvid.models.response import DependencyStatus, DownloadResponse, VideoMetadata

ModelT = TypeVar("ModelT", bound=BaseModel)


class ApiError(Exception):
    """Server-provided error text, shown to the user verbatim"""

    def __init__(self, message: str, status_code: Optional[int] = None, details: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.details = details


class ApiClient:
    """Thin JSON client for the downloader API"""

    def __init__(self, api_url: str, timeout: float = 60.0, client: Optional[httpx.AsyncClient] = None):
        self.api_url = api_url.rstrip("/")
        self._client = client or httpx.AsyncClient(base_url=self.api_url, timeout=timeout)
        self._owns_client = client is None

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def _request(self, method: str, path: str, default_error: str, **kwargs) -> dict:
        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            raise ApiError(f"{default_error}: {e}") from e

        try:
            data = response.json()
        except ValueError:
            data = {}
        if not isinstance(data, dict):
            data = {}

        if not response.is_success:
            raise ApiError(
                data.get("error") or default_error,
                status_code=response.status_code,
                details=data.get("details")
            )
        return data

    @staticmethod
    def _parse(model: Type[ModelT], data: dict, default_error: str) -> ModelT:
        try:
            return model.model_validate(data)
        except ValidationError as e:
            raise ApiError(default_error, details=f"Unexpected response: {e}") from e

    async def extract(self, url: str) -> VideoMetadata:
        data = await self._request("POST", "/api/extract", "Failed to extract video", json={"url": url})
        return self._parse(VideoMetadata, data, "Failed to extract video")

    async def download(self, url: str, quality: Optional[Union[int, str]] = None) -> DownloadResponse:
        data = await self._request(
            "POST", "/api/download", "Failed to get download link",
            json={"url": url, "quality": quality}
        )
        return self._parse(DownloadResponse, data, "Failed to get download link")

    async def check_dependencies(self) -> DependencyStatus:
        data = await self._request("GET", "/api/check-dependencies", "Failed to check dependencies")
        return self._parse(DependencyStatus, data, "Failed to check dependencies")
