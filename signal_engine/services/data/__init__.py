"""
Candle Data

Providers supply the candle history each analysis run works on.
"""

from signal_engine.services.data.interface import CandleProvider
from signal_engine.services.data.memory import InMemoryCandleProvider

__all__ = [
    "CandleProvider",
    "InMemoryCandleProvider",
]
