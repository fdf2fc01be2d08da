"""Signal Engine: indicators, pattern detection and trading signals."""

__version__ = "0.1.0"
