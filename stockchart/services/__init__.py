"""
Services

- indicators: technical indicator library, registry and service
- transforms: candle aggregation and Heikin-Ashi
- rate_limit: sliding-window request limiter
- cache: in-memory response cache
- market_data: providers, normalization and the market data service
"""

from stockchart.services.base import BaseService, ServiceError, ValidationError, ExternalAPIError

__all__ = ["BaseService", "ServiceError", "ValidationError", "ExternalAPIError"]
