"""
Engine Configuration

All settings loaded from environment variables.
"""

from functools import lru_cache
from typing import Optional
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Engine settings from environment variables."""

    # Application
    app_name: str = "Signal Engine"
    app_version: str = "0.1.0"
    environment: str = "development"
    log_level: str = "INFO"

    # Redis (indicator / signal stores)
    redis_url: str = "redis://localhost:6379"
    enable_redis_cache: bool = False
    indicator_cache_ttl: Optional[int] = None  # seconds, None = keep forever
    signal_history_size: int = 500

    # Analysis defaults
    default_timeframe: str = "1d"
    default_candle_limit: int = 100
    default_indicators: list[str] = [
        "SMA",
        "EMA",
        "MACD",
        "RSI",
        "Bollinger Bands",
        "Stochastic",
        "ADX",
        "CCI",
        "OBV",
        "ATR",
    ]

    # Signal heuristics (tunable, not derived)
    signal_recency_candles: int = 3
    stop_loss_multiplier: int = 3  # x range / 10
    take_profit_multiplier: int = 2  # x range / 5
    min_patterns_per_signal: int = 2
    strong_probability: float = 0.70
    medium_probability: float = 0.55
    weak_probability: float = 0.40

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        env_prefix = "SIGNAL_ENGINE_"
        case_sensitive = False


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
