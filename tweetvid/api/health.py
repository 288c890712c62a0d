from fastapi import APIRouter, Depends

from tweetvid.api.deps import Translator, get_config, get_runner, get_translator
from tweetvid.config.settings import Config
from tweetvid.infra.rate_limit import rate_limiter
from tweetvid.models.response import DependencyStatus, ErrorResponse, HealthResponse
from tweetvid.services.dependencies import check_ytdlp
from tweetvid.services.ytdlp import ProcessRunner

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health_check(_: Translator = Depends(get_translator)):
    """Lightweight health check, exempt from rate limiting"""
    return HealthResponse(status="ok", message=_("response.server_running"))


@router.get(
    "/check-dependencies",
    response_model=DependencyStatus,
    response_model_exclude_none=True,
    responses={429: {"model": ErrorResponse}},
    dependencies=[Depends(rate_limiter)],
)
async def check_dependencies(
    config: Config = Depends(get_config),
    runner: ProcessRunner = Depends(get_runner),
):
    """Report whether yt-dlp can be executed"""
    return await check_ytdlp(runner, config.ytdlp)
