"""Multi-pass floor-plan analysis for low-voltage takeoffs."""

__version__ = "0.1.0"
