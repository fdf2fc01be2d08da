"""
Indicator Engine Service

CONTRACT:
    Input:  Candles + IndicatorRequest
    Output: IndicatorSeries (aligned 1:1 with the candles)

RESPONSIBILITIES:
    - Calculate SMA, EMA, MACD, RSI, Bollinger Bands, Stochastic,
      ADX, CCI, OBV and ATR
    - Merge request parameters over per-indicator defaults
    - Serve stored series when they cover the requested candles

PURE PYTHON - Uses NumPy for calculations.
All math is deterministic and reproducible.
"""

from signal_engine.services.indicators.calculator import (
    IndicatorCalculator,
    calculate,
    get_indicator_calculator,
)
from signal_engine.services.indicators.interface import IndicatorServiceInterface
from signal_engine.services.indicators.service import (
    IndicatorService,
    get_indicator_service,
)

__all__ = [
    "IndicatorCalculator",
    "calculate",
    "get_indicator_calculator",
    "IndicatorServiceInterface",
    "IndicatorService",
    "get_indicator_service",
]
