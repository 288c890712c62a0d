from fastapi import APIRouter, Depends, Request

from tweetvid.api.deps import Translator, get_config, get_runner, get_translator
from tweetvid.config.settings import Config
from tweetvid.core.errors import ApiError, InvalidRequestError
from tweetvid.core.logging import log_error, log_info
from tweetvid.core.validation import is_valid_tweet_url
from tweetvid.infra.rate_limit import rate_limiter
from tweetvid.models.request import ExtractionRequest
from tweetvid.models.response import ErrorResponse, VideoMetadata
from tweetvid.services.extract import ExtractionGateway
from tweetvid.services.ytdlp import ProcessRunner
from tweetvid.utils.locale import safe_url_for_log

router = APIRouter()


@router.post(
    "/extract",
    response_model=VideoMetadata,
    responses={code: {"model": ErrorResponse} for code in (400, 408, 429, 500)},
    dependencies=[Depends(rate_limiter)],
)
async def extract_video(
    request: Request,
    body: ExtractionRequest,
    config: Config = Depends(get_config),
    runner: ProcessRunner = Depends(get_runner),
    _: Translator = Depends(get_translator),
):
    """Fetch title, thumbnail and muxed formats for a tweet"""
    if not is_valid_tweet_url(body.url):
        raise InvalidRequestError(_("error.invalid_url_extract"))

    safe_url = safe_url_for_log(body.url)
    log_info(request, _("log.extracting", url=safe_url))

    gateway = ExtractionGateway(
        runner,
        config.ytdlp,
        timeout_message=_("error.timeout"),
        failure_message=_("error.extract_failed"),
    )

    try:
        video_info = await gateway.extract(body.url)
    except ApiError as e:
        log_error(request, f"Extraction error for {safe_url}: {e.details or e.message}")
        raise

    log_info(request, _("log.extracted", title=video_info.title, count=len(video_info.formats)))
    return video_info
