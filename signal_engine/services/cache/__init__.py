"""
Cache module for the signal engine.

Stores computed indicator series and generated signals in Redis,
falling back to process memory when Redis is unavailable.
"""

from signal_engine.services.cache.interface import (
    IndicatorKey,
    IndicatorStore,
    SignalStore,
)
from signal_engine.services.cache.redis_client import (
    RedisIndicatorStore,
    RedisSignalStore,
    get_indicator_store,
    get_signal_store,
    get_redis,
    init_redis,
    close_redis,
)

__all__ = [
    "IndicatorKey",
    "IndicatorStore",
    "SignalStore",
    "RedisIndicatorStore",
    "RedisSignalStore",
    "get_indicator_store",
    "get_signal_store",
    "get_redis",
    "init_redis",
    "close_redis",
]
