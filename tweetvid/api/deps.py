import functools
from typing import Callable

from fastapi import Depends, Request

from tweetvid.config.settings import Config
from tweetvid.i18n import i18n
from tweetvid.services.ytdlp import ProcessRunner
from tweetvid.utils.locale import get_locale

Translator = Callable[..., str]


def get_config(request: Request) -> Config:
    return request.app.state.config


def get_translator(request: Request, config: Config = Depends(get_config)) -> Translator:
    locale = get_locale(request.headers.get("accept-language"), config.i18n)
    return functools.partial(i18n.get, locale=locale)


def get_runner(config: Config = Depends(get_config)) -> ProcessRunner:
    """Process runner used for every yt-dlp call; overridden in tests"""
    return ProcessRunner(config.ytdlp)
