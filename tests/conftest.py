import pytest

from yelp_search import config


@pytest.fixture(autouse=True)
def clear_settings_cache(monkeypatch):
    # Keep a developer's local .env out of the tests.
    monkeypatch.setattr(config, "load_dotenv", lambda: None)
    for name in ("YELP_API_KEY", "YELP_SEARCH_URL", "YELP_TIMEOUT_SECONDS", "YELP_DEFAULT_CC", "YELP_DEFAULT_LANG"):
        monkeypatch.delenv(name, raising=False)
    config.get_settings.cache_clear()
    yield
    config.get_settings.cache_clear()
