"""Depth accumulation and historical binning"""

from .depth import DepthAggregator, aggregate_history, side_total

__all__ = [
    "DepthAggregator",
    "aggregate_history",
    "side_total",
]
