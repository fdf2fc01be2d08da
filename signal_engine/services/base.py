"""
Service base and errors.

The async services (indicator read-through, analysis orchestration) share the
BaseService shape. Calculator, detector and generator stay plain synchronous
classes and only raise the errors defined here.
"""

from abc import ABC, abstractmethod
from typing import Any, Generic, Optional, TypeVar

InputT = TypeVar("InputT")
OutputT = TypeVar("OutputT")


class BaseService(ABC, Generic[InputT, OutputT]):
    """
    Async engine service.

    Subclasses name themselves for log lines, run one request through
    `execute` and report whether their collaborators respond.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        pass

    @abstractmethod
    async def execute(self, input_data: InputT) -> OutputT:
        """
        Run one request.

        Raises:
            ServiceError: Invalid request the service cannot recover from
        """
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        pass


class ServiceError(Exception):
    """Error raised by an engine component, tagged with the component name."""

    def __init__(
        self, service_name: str, message: str, details: Optional[dict[str, Any]] = None
    ):
        self.service_name = service_name
        self.message = message
        self.details = details or {}
        super().__init__(f"[{service_name}] {message}")


class InvalidParameterError(ServiceError):
    """Indicator parameter outside its valid domain (e.g. length <= 0)."""

    def __init__(self, indicator: str, parameter: str, value: Any, reason: str):
        super().__init__(
            "IndicatorCalculator",
            f"{indicator}: invalid {parameter}={value!r} ({reason})",
            {"indicator": indicator, "parameter": parameter, "value": value},
        )
        self.indicator = indicator
        self.parameter = parameter
