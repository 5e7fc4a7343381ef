"""
Indicator Engine Service Implementation

Runs batches of indicator configs over one candle series.
Pure Python/NumPy calculations via the registry.
"""

import logging
from typing import Any, Optional, Sequence

from stockchart.schemas.market import Candle
from stockchart.schemas.indicators import (
    IndicatorMetadata,
    IndicatorRequest,
    IndicatorResponse,
    IndicatorType,
)
from stockchart.services.base import ValidationError
from stockchart.services.indicators.interface import IndicatorServiceInterface
from stockchart.services.indicators.registry import IndicatorRegistry, get_indicator_registry

logger = logging.getLogger(__name__)


class IndicatorService(IndicatorServiceInterface):
    """
    Indicator Engine Service.

    Calculates technical indicators for chart series.
    All calculations are deterministic and reproducible.
    """

    def __init__(self, registry: Optional[IndicatorRegistry] = None):
        self.registry = registry or get_indicator_registry()

    @property
    def name(self) -> str:
        return "IndicatorService"

    async def execute(self, input_data: IndicatorRequest) -> IndicatorResponse:
        """
        Calculate all requested indicators.

        A config with invalid parameters is reported in `errors` and does
        not stop the others.
        """
        response = IndicatorResponse()

        for config in input_data.indicators:
            key = config.id or config.type.value
            try:
                response.results[key] = self.calculate(config.type, input_data.candles, config.params)
            except ValidationError as e:
                logger.warning(f"Skipping indicator {key}: {e.message}")
                response.errors[key] = e.message

        logger.debug(
            f"Calculated {len(response.results)} indicators over {len(input_data.candles)} candles"
        )
        return response

    def calculate(
        self,
        indicator_type: IndicatorType,
        candles: Sequence[Candle],
        params: Optional[dict[str, Any]] = None,
    ) -> list:
        return self.registry.calculate(indicator_type, candles, params)

    def list_indicators(self) -> list[IndicatorMetadata]:
        return self.registry.list_indicators()

    async def health_check(self) -> bool:
        """Indicator service is always healthy (pure computation)."""
        return True


# Singleton instance
_service_instance: Optional[IndicatorService] = None


def get_indicator_service() -> IndicatorService:
    """Get or create indicator service instance."""
    global _service_instance
    if _service_instance is None:
        _service_instance = IndicatorService()
    return _service_instance
