"""Spotboard - Hyperliquid spot token catalogue."""

__version__ = "0.1.0"
