"""
Unit tests for the cart stores.

The in-memory store is exercised directly; the Redis store runs against a
mocked client and pipeline.
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from redis.exceptions import ResponseError

from storefront.config.settings import Settings
from storefront.models.schemas import CartItem
from storefront.repositories.cart_store import (
    CartStore,
    InMemoryCartStore,
    RedisCartStore,
    build_cart_store,
)


def _item(product_id: int, price: float = 1.0) -> CartItem:
    return CartItem(product_id=product_id, name=f"Product {product_id}", price=price)


# ============================================================================
# In-memory store
# ============================================================================


@pytest.mark.unit
@pytest.mark.asyncio
async def test_memory_add_returns_new_size():
    store = InMemoryCartStore()

    assert await store.add("s1", _item(1)) == 1
    assert await store.add("s1", _item(1)) == 2
    assert [i.product_id for i in await store.items("s1")] == [1, 1]


@pytest.mark.unit
@pytest.mark.asyncio
async def test_memory_sessions_are_isolated():
    store = InMemoryCartStore()

    await store.add("s1", _item(1))
    await store.add("s2", _item(2))

    assert [i.product_id for i in await store.items("s1")] == [1]
    assert [i.product_id for i in await store.items("s2")] == [2]
    assert await store.items("unknown") == []


@pytest.mark.unit
@pytest.mark.asyncio
async def test_memory_remove_by_position():
    # Arrange
    store = InMemoryCartStore()
    for product_id in (10, 20, 30):
        await store.add("s1", _item(product_id))

    # Act
    removed = await store.remove("s1", 1)

    # Assert
    assert removed.product_id == 20
    assert [i.product_id for i in await store.items("s1")] == [10, 30]


@pytest.mark.unit
@pytest.mark.asyncio
@pytest.mark.parametrize("index", [-1, 2, 50])
async def test_memory_remove_out_of_range(index):
    store = InMemoryCartStore()
    await store.add("s1", _item(1))
    await store.add("s1", _item(2))

    with pytest.raises(IndexError):
        await store.remove("s1", index)
    assert len(await store.items("s1")) == 2


@pytest.mark.unit
@pytest.mark.asyncio
async def test_memory_remove_from_empty_cart():
    store = InMemoryCartStore()

    with pytest.raises(IndexError):
        await store.remove("s1", 0)


@pytest.mark.unit
@pytest.mark.asyncio
async def test_memory_clear_only_affects_one_session():
    store = InMemoryCartStore()
    await store.add("s1", _item(1))
    await store.add("s2", _item(2))

    await store.clear("s1")

    assert await store.items("s1") == []
    assert len(await store.items("s2")) == 1


@pytest.mark.unit
@pytest.mark.asyncio
async def test_memory_idle_carts_expire():
    store = InMemoryCartStore(ttl_seconds=60)

    with patch("storefront.repositories.cart_store.time.monotonic", return_value=1000.0):
        await store.add("s1", _item(1))
    with patch("storefront.repositories.cart_store.time.monotonic", return_value=1061.0):
        assert await store.items("s1") == []


@pytest.mark.unit
@pytest.mark.asyncio
async def test_memory_concurrent_adds_are_not_lost():
    store = InMemoryCartStore()

    sizes = await asyncio.gather(*(store.add("s1", _item(i)) for i in range(50)))

    assert sorted(sizes) == list(range(1, 51))
    assert len(await store.items("s1")) == 50


@pytest.mark.unit
def test_memory_store_satisfies_protocol():
    assert isinstance(InMemoryCartStore(), CartStore)


# ============================================================================
# Redis store
# ============================================================================


@pytest.fixture
def redis_pipeline():
    pipe = MagicMock()
    pipe.execute = AsyncMock()
    return pipe


@pytest.fixture
def mock_redis(redis_pipeline):
    redis = MagicMock()
    redis.pipeline.return_value.__aenter__.return_value = redis_pipeline
    redis.pipeline.return_value.__aexit__.return_value = False
    redis.lrange = AsyncMock(return_value=[])
    redis.delete = AsyncMock(return_value=1)
    redis.aclose = AsyncMock()
    return redis


@pytest.mark.unit
@pytest.mark.asyncio
async def test_redis_add_pushes_and_refreshes_ttl(mock_redis, redis_pipeline):
    # Arrange
    redis_pipeline.execute.return_value = [3, True]
    store = RedisCartStore(mock_redis, ttl_seconds=120)
    item = _item(5, 2.5)

    # Act
    size = await store.add("abc", item)

    # Assert
    assert size == 3
    mock_redis.pipeline.assert_called_once_with(transaction=True)
    redis_pipeline.rpush.assert_called_once_with("cart:abc", item.model_dump_json())
    redis_pipeline.expire.assert_called_once_with("cart:abc", 120)


@pytest.mark.unit
@pytest.mark.asyncio
async def test_redis_items_skip_tombstones(mock_redis):
    mock_redis.lrange.return_value = [_item(1).model_dump_json(), "__removed__", _item(2).model_dump_json()]
    store = RedisCartStore(mock_redis)

    items = await store.items("abc")

    assert [i.product_id for i in items] == [1, 2]
    mock_redis.lrange.assert_awaited_once_with("cart:abc", 0, -1)


@pytest.mark.unit
@pytest.mark.asyncio
async def test_redis_remove_uses_tombstone_in_transaction(mock_redis, redis_pipeline):
    # Arrange
    redis_pipeline.execute.return_value = [_item(9).model_dump_json(), True, 1, True]
    store = RedisCartStore(mock_redis, ttl_seconds=300)

    # Act
    removed = await store.remove("abc", 2)

    # Assert
    assert removed.product_id == 9
    redis_pipeline.lindex.assert_called_once_with("cart:abc", 2)
    redis_pipeline.lset.assert_called_once_with("cart:abc", 2, "__removed__")
    redis_pipeline.lrem.assert_called_once_with("cart:abc", 1, "__removed__")
    redis_pipeline.expire.assert_called_once_with("cart:abc", 300)


@pytest.mark.unit
@pytest.mark.asyncio
async def test_redis_remove_out_of_range(mock_redis, redis_pipeline):
    redis_pipeline.execute.side_effect = ResponseError("ERR index out of range")
    store = RedisCartStore(mock_redis)

    with pytest.raises(IndexError):
        await store.remove("abc", 4)


@pytest.mark.unit
@pytest.mark.asyncio
async def test_redis_remove_negative_index_never_reaches_redis(mock_redis):
    store = RedisCartStore(mock_redis)

    with pytest.raises(IndexError):
        await store.remove("abc", -1)
    mock_redis.pipeline.assert_not_called()


@pytest.mark.unit
@pytest.mark.asyncio
async def test_redis_clear_and_close(mock_redis):
    store = RedisCartStore(mock_redis, prefix="shop-cart")

    await store.clear("abc")
    await store.close()

    mock_redis.delete.assert_awaited_once_with("shop-cart:abc")
    mock_redis.aclose.assert_awaited_once()


# ============================================================================
# Backend selection
# ============================================================================


@pytest.mark.unit
def test_build_cart_store_memory():
    settings = Settings(JWT_SECRET_KEY="k", CART_BACKEND="memory")

    assert isinstance(build_cart_store(settings), InMemoryCartStore)


@pytest.mark.unit
def test_build_cart_store_redis():
    settings = Settings(JWT_SECRET_KEY="k", CART_BACKEND="redis", REDIS_HOST="cache", REDIS_PORT=6380)

    with patch("storefront.repositories.cart_store.Redis.from_url") as from_url:
        store = build_cart_store(settings)

    assert isinstance(store, RedisCartStore)
    from_url.assert_called_once_with("redis://cache:6380/0", decode_responses=True)


@pytest.mark.unit
def test_invalid_cart_backend_rejected():
    with pytest.raises(ValueError):
        Settings(JWT_SECRET_KEY="k", CART_BACKEND="memcached")
