"""
Cart storage keyed by session id.

Two backends share the CartStore protocol:
- InMemoryCartStore: per-process dict guarded by an asyncio.Lock
- RedisCartStore: one Redis list per session with a TTL
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import List, Protocol, runtime_checkable

from redis.asyncio import Redis
from redis.exceptions import ResponseError

from storefront.config.settings import Settings
from storefront.models.schemas import CartItem

logger = logging.getLogger(__name__)


@runtime_checkable
class CartStore(Protocol):
    """Session-scoped cart persistence"""

    async def add(self, session_id: str, item: CartItem) -> int:
        """Append an item and return the new cart size"""
        ...

    async def items(self, session_id: str) -> List[CartItem]:
        ...

    async def remove(self, session_id: str, index: int) -> CartItem:
        """Remove the item at ``index``; raises IndexError when out of range"""
        ...

    async def clear(self, session_id: str) -> None:
        ...

    async def close(self) -> None:
        ...


@dataclass
class _Cart:
    items: List[CartItem] = field(default_factory=list)
    touched_at: float = field(default_factory=time.monotonic)


class InMemoryCartStore:
    """
    Process-local cart store.

    Every read-modify-write runs under a single asyncio.Lock, so concurrent
    requests of the same session cannot interleave an add with an
    index-based removal. Carts idle for longer than ``ttl_seconds`` are
    dropped lazily on the next write.
    """

    def __init__(self, ttl_seconds: int = 86400):
        self._ttl_seconds = ttl_seconds
        self._carts: dict[str, _Cart] = {}
        self._lock = asyncio.Lock()

    def _evict_expired(self, now: float) -> None:
        expired = [sid for sid, cart in self._carts.items() if now - cart.touched_at > self._ttl_seconds]
        for sid in expired:
            del self._carts[sid]
        if expired:
            logger.debug(f"Evicted {len(expired)} idle carts")

    def _live_cart(self, session_id: str, now: float) -> _Cart | None:
        cart = self._carts.get(session_id)
        if cart is not None and now - cart.touched_at > self._ttl_seconds:
            del self._carts[session_id]
            return None
        return cart

    async def add(self, session_id: str, item: CartItem) -> int:
        async with self._lock:
            now = time.monotonic()
            self._evict_expired(now)
            cart = self._carts.setdefault(session_id, _Cart())
            cart.items.append(item)
            cart.touched_at = now
            return len(cart.items)

    async def items(self, session_id: str) -> List[CartItem]:
        async with self._lock:
            cart = self._live_cart(session_id, time.monotonic())
            return list(cart.items) if cart else []

    async def remove(self, session_id: str, index: int) -> CartItem:
        async with self._lock:
            now = time.monotonic()
            cart = self._live_cart(session_id, now)
            if cart is None or index < 0 or index >= len(cart.items):
                raise IndexError(index)
            cart.touched_at = now
            return cart.items.pop(index)

    async def clear(self, session_id: str) -> None:
        async with self._lock:
            self._carts.pop(session_id, None)

    async def close(self) -> None:
        async with self._lock:
            self._carts.clear()


# Placeholder written over the removed position before LREM deletes it
_TOMBSTONE = "__removed__"


class RedisCartStore:
    """
    Redis-backed cart store; one list per session under ``cart:{session_id}``.
    """

    def __init__(self, redis: Redis, ttl_seconds: int = 86400, prefix: str = "cart"):
        self._redis = redis
        self._ttl_seconds = ttl_seconds
        self._prefix = prefix

    def _key(self, session_id: str) -> str:
        return f"{self._prefix}:{session_id}"

    async def add(self, session_id: str, item: CartItem) -> int:
        key = self._key(session_id)
        async with self._redis.pipeline(transaction=True) as pipe:
            pipe.rpush(key, item.model_dump_json())
            pipe.expire(key, self._ttl_seconds)
            size, _ = await pipe.execute()
        return int(size)

    async def items(self, session_id: str) -> List[CartItem]:
        raw_items = await self._redis.lrange(self._key(session_id), 0, -1)
        return [CartItem.model_validate_json(raw) for raw in raw_items if raw != _TOMBSTONE]

    async def remove(self, session_id: str, index: int) -> CartItem:
        if index < 0:
            raise IndexError(index)
        key = self._key(session_id)
        async with self._redis.pipeline(transaction=True) as pipe:
            pipe.lindex(key, index)
            pipe.lset(key, index, _TOMBSTONE)
            pipe.lrem(key, 1, _TOMBSTONE)
            pipe.expire(key, self._ttl_seconds)
            try:
                raw, _, _, _ = await pipe.execute()
            except ResponseError as e:
                # "ERR no such key" / "ERR index out of range"
                raise IndexError(index) from e
        if raw is None:
            raise IndexError(index)
        return CartItem.model_validate_json(raw)

    async def clear(self, session_id: str) -> None:
        await self._redis.delete(self._key(session_id))

    async def close(self) -> None:
        await self._redis.aclose()


def build_cart_store(settings: Settings) -> CartStore:
    """Create the cart store selected by CART_BACKEND"""
    if settings.CART_BACKEND == "redis":
        logger.info(f"Using Redis cart store at {settings.REDIS_HOST}:{settings.REDIS_PORT}")
        redis = Redis.from_url(settings.redis_url, decode_responses=True)
        return RedisCartStore(redis, ttl_seconds=settings.CART_TTL_SECONDS)
    logger.info("Using in-memory cart store")
    return InMemoryCartStore(ttl_seconds=settings.CART_TTL_SECONDS)
