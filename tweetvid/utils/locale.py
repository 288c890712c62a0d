from typing import Optional
from urllib.parse import urlparse

from tweetvid.config.settings import I18nConfig


def get_locale(accept_language: Optional[str], i18n_config: I18nConfig) -> str:
    """Extract locale from Accept-Language header"""
    if not accept_language:
        return i18n_config.default_locale

    languages = []
    for lang in accept_language.split(","):
        parts = lang.strip().split(";")
        locale = parts[0].split("-")[0].lower()
        languages.append(locale)

    for locale in languages:
        if locale in i18n_config.supported_locales:
            return locale

    return i18n_config.default_locale


def safe_url_for_log(url: str) -> str:
    """Strip query and fragment so tokens in share links never reach the logs"""
    try:
        parsed = urlparse(url)
    except ValueError:
        return "invalid_url"
    if not parsed.scheme or not parsed.netloc:
        return "invalid_url"
    return f"{parsed.scheme}://{parsed.netloc}{parsed.path}"
