"""
Redis-backed indicator and signal stores.

Indicator series live in one hash per IndicatorKey (field = candle timestamp),
so re-writing a series upserts slots instead of duplicating them.
Signal history is a capped list per (pair, timeframe).

Both stores fall back to process memory when Redis is unavailable.
"""

import json
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

import redis.asyncio as redis

from signal_engine.core.config import settings
from signal_engine.schemas.indicators import IndicatorKind, IndicatorSeries
from signal_engine.schemas.market import Timeframe
from signal_engine.schemas.signals import Signal
from signal_engine.services.cache.interface import (
    IndicatorKey,
    IndicatorStore,
    SignalStore,
)

logger = logging.getLogger(__name__)

# Hash field holding kind/name/parameters of a stored series
META_FIELD = "__meta__"

# Global Redis connection pool
_redis_pool: Optional[redis.Redis] = None


async def init_redis() -> Optional[redis.Redis]:
    """
    Initialize Redis connection pool.
    Returns None (memory fallback) if Redis is disabled or unreachable.
    """
    global _redis_pool

    if _redis_pool is not None:
        return _redis_pool

    if not settings.enable_redis_cache:
        logger.info("Redis cache disabled; using in-memory stores")
        return None

    try:
        _redis_pool = redis.from_url(
            settings.redis_url,
            encoding="utf-8",
            decode_responses=True,
        )
        # Test connection
        await _redis_pool.ping()
        logger.info(f"Redis connected: {settings.redis_url}")
        return _redis_pool
    except Exception as e:
        logger.warning(f"Redis connection failed: {e}. Using in-memory fallback.")
        _redis_pool = None
        return None


async def close_redis() -> None:
    """Close Redis connection pool."""
    global _redis_pool
    if _redis_pool:
        await _redis_pool.aclose()
        _redis_pool = None
        logger.info("Redis connection closed")


def get_redis() -> Optional[redis.Redis]:
    """Get the Redis connection pool."""
    return _redis_pool


def _encode_series(series: IndicatorSeries) -> Dict[str, str]:
    fields = {
        ts.isoformat(): json.dumps(
            value.model_dump(mode="json") if value is not None else None
        )
        for ts, value in zip(series.timestamps, series.values)
    }
    fields[META_FIELD] = json.dumps(
        {
            "kind": series.kind.value if series.kind else None,
            "name": series.name,
            "parameters": series.parameters,
        },
        default=str,
    )
    return fields


def _decode_slot(raw: str) -> Optional[Dict[str, Any]]:
    slot = json.loads(raw)
    if slot is not None:
        # tag back to the enum member the value models are keyed on
        slot["kind"] = IndicatorKind(slot["kind"])
    return slot


def _decode_series(fields: Dict[str, str]) -> Optional[IndicatorSeries]:
    if not fields or META_FIELD not in fields:
        return None

    meta = json.loads(fields[META_FIELD])
    slots = sorted(
        (
            (datetime.fromisoformat(ts), _decode_slot(raw))
            for ts, raw in fields.items()
            if ts != META_FIELD
        ),
        key=lambda slot: slot[0],
    )
    return IndicatorSeries.model_validate(
        {
            "kind": meta["kind"],
            "name": meta["name"],
            "parameters": meta["parameters"],
            "timestamps": [ts for ts, _ in slots],
            "values": [value for _, value in slots],
        }
    )


class RedisIndicatorStore(IndicatorStore):
    """
    Indicator series store.

    Keys:
    - indicator:{PAIR}:{timeframe}:{KIND}:{params digest}:{first candle} → hash
      {iso timestamp → JSON slot, __meta__ → JSON}
    """

    def __init__(self, redis_client: Optional[redis.Redis] = None):
        self._redis = redis_client
        # In-memory fallback when Redis is unavailable
        self._memory_cache: Dict[str, Dict[str, str]] = {}

    @property
    def redis(self) -> Optional[redis.Redis]:
        return self._redis or _redis_pool

    async def get(self, key: IndicatorKey) -> Optional[IndicatorSeries]:
        storage_key = key.storage_key

        if self.redis:
            try:
                fields = await self.redis.hgetall(storage_key)
                return _decode_series(fields)
            except Exception as e:
                logger.debug(f"Redis indicator get failed: {e}")

        # Fallback to memory
        return _decode_series(self._memory_cache.get(storage_key, {}))

    async def put(self, key: IndicatorKey, series: IndicatorSeries) -> None:
        storage_key = key.storage_key
        fields = _encode_series(series)

        if self.redis:
            try:
                await self.redis.hset(storage_key, mapping=fields)
                if settings.indicator_cache_ttl:
                    await self.redis.expire(storage_key, settings.indicator_cache_ttl)
                return
            except Exception as e:
                logger.debug(f"Redis indicator put failed: {e}")

        # Fallback to memory
        self._memory_cache.setdefault(storage_key, {}).update(fields)


class RedisSignalStore(SignalStore):
    """
    Signal history store.

    Keys:
    - signals:{PAIR}:{timeframe} → list of JSON signals, newest first
    """

    def __init__(
        self,
        redis_client: Optional[redis.Redis] = None,
        history_size: Optional[int] = None,
    ):
        self._redis = redis_client
        self.history_size = history_size or settings.signal_history_size
        self._memory_cache: Dict[str, List[str]] = {}

    @property
    def redis(self) -> Optional[redis.Redis]:
        return self._redis or _redis_pool

    @staticmethod
    def _key(pair: Optional[str], timeframe: Timeframe) -> str:
        return f"signals:{(pair or '-').upper()}:{Timeframe.parse(timeframe).value}"

    async def save(self, signals: list[Signal]) -> int:
        grouped: Dict[str, List[str]] = {}
        for signal in signals:
            grouped.setdefault(self._key(signal.pair, signal.timeframe), []).append(
                signal.model_dump_json()
            )

        for key, payloads in grouped.items():
            await self._push(key, payloads)

        return len(signals)

    async def _push(self, key: str, payloads: List[str]) -> None:
        if self.redis:
            try:
                await self.redis.lpush(key, *payloads)
                await self.redis.ltrim(key, 0, self.history_size - 1)
                return
            except Exception as e:
                logger.debug(f"Redis signal save failed: {e}")

        history = self._memory_cache.setdefault(key, [])
        history[:0] = list(reversed(payloads))
        del history[self.history_size :]

    async def latest(
        self, pair: Optional[str], timeframe: Timeframe, limit: int = 10
    ) -> list[Signal]:
        key = self._key(pair, timeframe)

        if self.redis:
            try:
                raw = await self.redis.lrange(key, 0, limit - 1)
                return [Signal.model_validate_json(item) for item in raw]
            except Exception as e:
                logger.debug(f"Redis signal latest failed: {e}")

        raw = self._memory_cache.get(key, [])[:limit]
        return [Signal.model_validate_json(item) for item in raw]


# Singleton instances
_indicator_store: Optional[RedisIndicatorStore] = None
_signal_store: Optional[RedisSignalStore] = None


def get_indicator_store() -> RedisIndicatorStore:
    """Get the indicator store singleton."""
    global _indicator_store
    if _indicator_store is None:
        _indicator_store = RedisIndicatorStore()
    return _indicator_store


def get_signal_store() -> RedisSignalStore:
    """Get the signal store singleton."""
    global _signal_store
    if _signal_store is None:
        _signal_store = RedisSignalStore()
    return _signal_store
