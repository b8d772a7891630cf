"""Training load analytics: TSS, Performance Management Chart, zones and scores."""

__version__ = "0.1.0"
