from dataclasses import dataclass
import time
from typing import Any, Callable, Dict, Optional

@dataclass
class CacheEntry:
    payload: Dict[str, Any]
    captured_at: float
    next_token: Optional[str] = None  # meta.next_token of the cached page

    def age(self, now: float) -> float:
        return now - self.captured_at


# Single-slot in-process cache for the first page, plus the 429 backoff deadline.
# Lives as long as the owning service; lost on process restart.
class TweetCache:
    def __init__(self, clock: Callable[[], float] = time.time):
        self.clock = clock
        self.entry: Optional[CacheEntry] = None
        self.backoff_until: float = 0.0

    @property
    def has_data(self) -> bool:
        return self.entry is not None

    @property
    def payload(self) -> Optional[Dict[str, Any]]:
        return self.entry.payload if self.entry else None

    def is_fresh(self, max_age_seconds: float, now: Optional[float] = None) -> bool:
        if not self.entry:
            return False
        now = self.clock() if now is None else now
        return self.entry.age(now) < max_age_seconds

    def store(self, payload: Dict[str, Any], now: Optional[float] = None) -> CacheEntry:
        meta = payload.get("meta") or {}
        self.entry = CacheEntry(
            payload=payload,
            captured_at=self.clock() if now is None else now,
            next_token=meta.get("next_token") if isinstance(meta, dict) else None,
        )
        return self.entry

    def in_backoff(self, now: Optional[float] = None) -> bool:
        now = self.clock() if now is None else now
        return now < self.backoff_until

    def start_backoff(self, seconds: float, now: Optional[float] = None) -> float:
        now = self.clock() if now is None else now
        self.backoff_until = now + seconds
        return self.backoff_until

    def clear_backoff(self):
        self.backoff_until = 0.0
