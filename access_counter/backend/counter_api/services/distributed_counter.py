# backend/counter_api/services/distributed_counter.py
from __future__ import annotations

from typing import Any, Protocol

import redis
from redis.backoff import NoBackoff
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import TimeoutError as RedisTimeoutError
from redis.retry import Retry

from ..config import settings
from .storage_errors import StorageUnavailable


class DistributedCounter(Protocol):
    def atomic_increment(self, key: str) -> int:
        ...


class RedisDistributedCounter:
    """
    INCR on a shared Redis key. Redis owns the value; nothing is cached here,
    so concurrent callers across instances always get distinct integers.
    """

    backend = "redis"

    def __init__(self, client: Any) -> None:
        self._client = client

    def atomic_increment(self, key: str) -> int:
        try:
            value = self._client.incr(key)
        except (RedisConnectionError, RedisTimeoutError) as e:
            raise StorageUnavailable(self.backend, str(e)) from e
        return int(value)


def build_redis_client(url: str | None = None) -> redis.Redis:
    # from_url is lazy: no connection until the first command; client-side retries off
    return redis.Redis.from_url(
        url or settings.redis_url,
        socket_timeout=settings.redis_socket_timeout_seconds,
        socket_connect_timeout=settings.redis_socket_timeout_seconds,
        retry_on_timeout=False,
        retry=Retry(NoBackoff(), 0),
    )
