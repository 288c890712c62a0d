from .locale import get_locale, safe_url_for_log

__all__ = ["get_locale", "safe_url_for_log"]
