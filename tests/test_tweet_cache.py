from app.core.cache import TweetCache
from fakes import FakeClock, tweets_payload


def test_empty_cache_is_never_fresh():
    cache = TweetCache(clock=FakeClock())
    assert cache.has_data is False
    assert cache.is_fresh(900) is False

def test_store_records_call_time_and_next_token():
    clock = FakeClock(500.0)
    cache = TweetCache(clock=clock)
    entry = cache.store(tweets_payload("1", next_token="abc"))
    assert entry.captured_at == 500.0
    assert entry.next_token == "abc"
    clock.advance(899)
    assert cache.is_fresh(900) is True
    clock.advance(1)
    assert cache.is_fresh(900) is False

def test_store_overwrites_single_slot():
    cache = TweetCache(clock=FakeClock())
    cache.store(tweets_payload("1"))
    cache.store(tweets_payload("2"))
    assert cache.payload["data"][0]["id"] == "2"
    assert cache.entry.next_token is None

def test_backoff_deadline_and_clear():
    clock = FakeClock(1000.0)
    cache = TweetCache(clock=clock)
    assert cache.in_backoff() is False
    assert cache.start_backoff(300) == 1300.0
    assert cache.in_backoff() is True
    clock.advance(300)
    assert cache.in_backoff() is False
    cache.start_backoff(60)
    cache.clear_backoff()
    assert cache.backoff_until == 0.0
    assert cache.in_backoff() is False
