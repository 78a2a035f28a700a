from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Dict, Tuple

from fastapi import Depends, HTTPException, Request

from gigboard.core.auth_deps import get_current_principal
from gigboard.core.config import get_settings
from gigboard.policies.ownership import Principal


@dataclass
class Bucket:
    tokens: float
    last_ts: float


class InMemoryRateLimiter:
    """
    Token bucket:
      capacity tokens; refill rate tokens/sec.

    Keyed by (user_id, route_key). Per process only.
    """
    def __init__(self, capacity: int, refill_per_sec: float):
        self.capacity = float(capacity)
        self.refill_per_sec = float(refill_per_sec)
        self._buckets: Dict[Tuple[str, str], Bucket] = {}
        self._lock = threading.Lock()

    def allow(self, user_id: str, route_key: str, cost: float = 1.0) -> bool:
        now = time.monotonic()
        k = (user_id, route_key)
        with self._lock:
            b = self._buckets.get(k)
            if b is None:
                b = Bucket(tokens=self.capacity, last_ts=now)
                self._buckets[k] = b

            # refill
            elapsed = max(0.0, now - b.last_ts)
            b.tokens = min(self.capacity, b.tokens + elapsed * self.refill_per_sec)
            b.last_ts = now

            if b.tokens >= cost:
                b.tokens -= cost
                return True
            return False

    def reset(self) -> None:
        with self._lock:
            self._buckets.clear()


def _bid_limiter() -> InMemoryRateLimiter:
    settings = get_settings()
    window = max(1, settings.bid_rate_limit_window_seconds)
    return InMemoryRateLimiter(
        capacity=settings.bid_rate_limit_capacity,
        refill_per_sec=settings.bid_rate_limit_capacity / float(window),
    )


BID_POST_LIMITER = _bid_limiter()


async def limit_bid_submissions(
    request: Request,
    principal: Principal = Depends(get_current_principal),
) -> None:
    route_key = f"{request.method}:{request.url.path}"
    if not BID_POST_LIMITER.allow(principal.user_id, route_key):
        settings = get_settings()
        raise HTTPException(
            status_code=429,
            detail="Rate limit exceeded for bid submission.",
            headers={"Retry-After": str(settings.bid_rate_limit_window_seconds)},
        )
