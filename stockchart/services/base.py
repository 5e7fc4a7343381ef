"""
Service Base Classes

Data-layer services (market data, indicators) share one shape:
    validate_input -> execute -> typed output
plus a health probe and an async close for services holding connections.
Errors raised across service boundaries derive from ServiceError.
"""

from abc import ABC, abstractmethod
from typing import Any, Generic, Optional, TypeVar

InputT = TypeVar("InputT")
OutputT = TypeVar("OutputT")


class BaseService(ABC, Generic[InputT, OutputT]):
    """
    Service with one main operation from InputT to OutputT.

    Usable as an async context manager; leaving the block calls close().
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Service name used in logs and error messages."""
        pass

    @abstractmethod
    async def execute(self, input_data: InputT) -> OutputT:
        """
        Run the main operation.

        Raises:
            ServiceError: On invalid input or a failed dependency
        """
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        pass

    async def validate_input(self, input_data: InputT) -> InputT:
        """Checks beyond the pydantic schema; returns the input unchanged by default."""
        return input_data

    async def close(self) -> None:
        """Release connections. Stateless services have nothing to release."""
        return None

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()


class ServiceError(Exception):
    """Failure raised by a service, tagged with the service name."""

    def __init__(self, service_name: str, message: str, details: Optional[dict] = None):
        self.service_name = service_name
        self.message = message
        self.details = details or {}
        super().__init__(f"[{service_name}] {message}")

    def to_dict(self) -> dict[str, Any]:
        """Serializable form for logs and API responses."""
        return {"service": self.service_name, "error": self.message, "details": self.details}


class ValidationError(ServiceError):
    """Caller input rejected (bad window, unknown indicator, invalid params)."""


class ExternalAPIError(ServiceError):
    """A data provider call failed."""
