"""Meta-aggregation of swap and bridge quotes across DEX and bridge aggregators."""

__version__ = "0.1.0"
