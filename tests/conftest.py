import pytest

from app.core.settings import Settings
from fakes import FakeClock


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        twitter_bearer_token="test-token",
        user_id="42",
        twitter_username=None,
        cors_origin="*",
        refresh_seconds=900,
        default_backoff_seconds=300,
        rate_limit_enabled=False,
    )


@pytest.fixture
def clock():
    return FakeClock()
