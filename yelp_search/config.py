"""Configuration helpers for the Yelp search client."""

import logging
import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv

from .options import LocaleOptions

logger = logging.getLogger(__name__)

DEFAULT_SEARCH_URL = "https://api.yelp.com/v3/businesses/search"


class ConfigError(RuntimeError):
    """Raised when mandatory configuration is missing."""


@dataclass(frozen=True)
class Settings:
    api_key: str
    search_url: str = DEFAULT_SEARCH_URL
    timeout: int = 10
    default_cc: Optional[str] = None
    default_lang: Optional[str] = None


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load settings from environment variables with sensible defaults."""
    load_dotenv()

    api_key = os.getenv("YELP_API_KEY", "")
    search_url = os.getenv("YELP_SEARCH_URL") or DEFAULT_SEARCH_URL
    timeout = int(os.getenv("YELP_TIMEOUT_SECONDS", "10"))
    default_cc_raw = os.getenv("YELP_DEFAULT_CC")
    default_cc = default_cc_raw.strip().upper() if default_cc_raw else None
    default_lang_raw = os.getenv("YELP_DEFAULT_LANG")
    default_lang = default_lang_raw.strip().lower() if default_lang_raw else None

    if not api_key:
        logger.warning("YELP_API_KEY is not configured; search requests will fail.")

    return Settings(
        api_key=api_key,
        search_url=search_url,
        timeout=timeout,
        default_cc=default_cc,
        default_lang=default_lang,
    )


def default_locale_options(settings: Optional[Settings] = None) -> Optional[LocaleOptions]:
    """Locale options from YELP_DEFAULT_CC/YELP_DEFAULT_LANG, or None unless both are set."""
    settings = settings or get_settings()
    if settings.default_cc and settings.default_lang:
        return LocaleOptions(cc=settings.default_cc, lang=settings.default_lang)
    return None
