"""CPR/EMA signal bot: candles -> indicators -> decision -> single-position tracking."""

__version__ = "0.3.0"
