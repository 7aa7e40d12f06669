"""Single-instrument L2 order book synchronizer for exchange market-data feeds."""

__version__ = "0.1.0"
