from fastapi import APIRouter, Depends, Request

from tweetvid.api.deps import Translator, get_config, get_runner, get_translator
from tweetvid.config.settings import Config
from tweetvid.core.errors import ApiError, InvalidRequestError
from tweetvid.core.logging import log_error, log_info
from tweetvid.core.validation import is_valid_tweet_url
from tweetvid.infra.rate_limit import rate_limiter
from tweetvid.models.request import DownloadRequest
from tweetvid.models.response import DownloadResponse, ErrorResponse
from tweetvid.services.resolve import ResolutionGateway
from tweetvid.services.ytdlp import ProcessRunner
from tweetvid.utils.locale import safe_url_for_log

router = APIRouter()


@router.post(
    "/download",
    response_model=DownloadResponse,
    responses={code: {"model": ErrorResponse} for code in (400, 408, 429, 500)},
    dependencies=[Depends(rate_limiter)],
)
async def get_download_url(
    request: Request,
    body: DownloadRequest,
    config: Config = Depends(get_config),
    runner: ProcessRunner = Depends(get_runner),
    _: Translator = Depends(get_translator),
):
    """Resolve a direct, time-limited media URL for the chosen quality"""
    if not is_valid_tweet_url(body.url):
        raise InvalidRequestError(_("error.invalid_url_download"))

    gateway = ResolutionGateway(
        runner,
        config.ytdlp,
        success_message=_("response.download_message"),
        timeout_message=_("error.timeout"),
        failure_message=_("error.download_failed"),
    )
    intent = gateway.intent(body.url, body.quality, _("error.invalid_quality"))

    safe_url = safe_url_for_log(intent.url)
    log_info(request, _("log.resolving", url=safe_url, quality=intent.max_height or "best"))

    try:
        response = await gateway.resolve(intent)
    except ApiError as e:
        log_error(request, f"Download error for {safe_url}: {e.details or e.message}")
        raise

    log_info(request, _("log.resolved", url=safe_url))
    return response
