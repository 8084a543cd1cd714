"""
Base Strategy

Common implementation for candle-driven strategies: parameter storage
with validation against the declared ParamSpec list, an activation flag
and a per-strategy logger.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence

from infrastructure.exceptions.system import InvalidStrategyConfigError
from infrastructure.logging import get_logger
from .structs import Candle, ParamSpec, StrategyResult


class BaseStrategy(ABC):

    def __init__(self, name: str, params: Optional[Dict[str, Any]] = None):
        self.name = name
        self.logger = get_logger(f"strategies.{self.__class__.__name__}")
        self.params: Dict[str, Any] = {spec.name: spec.default for spec in self.get_param_config()}
        self.active = False
        if params:
            self.update_params(params)

    def get_params(self) -> Dict[str, Any]:
        return dict(self.params)

    def update_params(self, params: Dict[str, Any]) -> None:
        """
        Merge params into the current set.

        Raises:
            InvalidStrategyConfigError: unknown name, wrong type or value outside [min, max]
        """
        specs = {spec.name: spec for spec in self.get_param_config()}
        for name, value in params.items():
            spec = specs.get(name)
            if spec is None:
                raise InvalidStrategyConfigError(f"Unknown parameter for {self.name}: {name}", name)
            self._validate_param(spec, value)

        self.params = {**self.params, **params}
        self.logger.debug("Strategy parameters updated", strategy=self.name, **params)

    @staticmethod
    def _validate_param(spec: ParamSpec, value: Any) -> None:
        if spec.type == 'boolean':
            if not isinstance(value, bool):
                raise InvalidStrategyConfigError(f"{spec.name} must be a boolean", spec.name)
            return

        if spec.type == 'number':
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise InvalidStrategyConfigError(f"{spec.name} must be a number", spec.name)
            if spec.min is not None and value < spec.min:
                raise InvalidStrategyConfigError(f"{spec.name} must be >= {spec.min}", spec.name)
            if spec.max is not None and value > spec.max:
                raise InvalidStrategyConfigError(f"{spec.name} must be <= {spec.max}", spec.name)
            return

        if spec.type == 'select' and spec.options:
            if value not in [option.get('value') for option in spec.options]:
                raise InvalidStrategyConfigError(f"{spec.name} has unsupported value: {value}", spec.name)

    def set_active(self, active: bool) -> None:
        self.active = active

    @abstractmethod
    def get_param_config(self) -> List[ParamSpec]:
        pass

    @abstractmethod
    def calculate(self, candles: Sequence[Candle]) -> StrategyResult:
        """Evaluate the full candle history and return every signal found."""
        pass

    def reset(self) -> None:
        pass

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name!r}, active={self.active})"
