"""
Signal Generation

CONTRACT:
    Input:  Candles + list[Pattern] + timeframe
    Output: list[Signal] (at most one buy, one sell)
"""

from signal_engine.services.signals.generator import (
    SignalGenerator,
    generate_signals,
    get_signal_generator,
    risk_reward_ratio,
)

__all__ = [
    "SignalGenerator",
    "generate_signals",
    "get_signal_generator",
    "risk_reward_ratio",
]
