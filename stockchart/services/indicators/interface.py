"""
Indicator Service Interface

Contract for batch indicator calculation over one candle series.
"""

from abc import abstractmethod
from typing import Any, Optional, Sequence

from stockchart.services.base import BaseService
from stockchart.schemas.market import Candle
from stockchart.schemas.indicators import (
    IndicatorMetadata,
    IndicatorRequest,
    IndicatorResponse,
    IndicatorType,
)


class IndicatorServiceInterface(BaseService[IndicatorRequest, IndicatorResponse]):
    """
    Batch indicator contract.

    INPUT: IndicatorRequest
        - candles: ascending candle series
        - indicators: list of (type, params, id) configs

    OUTPUT: IndicatorResponse
        - results: id -> time-aligned points
        - errors: id -> message for configs that failed validation
    """

    @property
    def name(self) -> str:
        return "IndicatorService"

    @abstractmethod
    async def execute(self, input_data: IndicatorRequest) -> IndicatorResponse:
        """Calculate every requested indicator over the same candles."""
        pass

    @abstractmethod
    def calculate(
        self,
        indicator_type: IndicatorType,
        candles: Sequence[Candle],
        params: Optional[dict[str, Any]] = None,
    ) -> list:
        """Calculate a single indicator."""
        pass

    @abstractmethod
    def list_indicators(self) -> list[IndicatorMetadata]:
        """Catalog of supported indicators."""
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """Indicator service is always healthy (pure computation)."""
        pass
