"""
Candle Transforms

RESPONSIBILITIES:
    - Interval aggregation (resampling into wider bars)
    - Heikin-Ashi derivation
    - Date-range filtering and length limiting
"""

from stockchart.services.transforms.aggregation import (
    aggregate_candles,
    aggregate_to_resolution,
    filter_by_date_range,
    limit_data_points,
)
from stockchart.services.transforms.heikin_ashi import heikin_ashi

__all__ = [
    "aggregate_candles",
    "aggregate_to_resolution",
    "filter_by_date_range",
    "limit_data_points",
    "heikin_ashi",
]
