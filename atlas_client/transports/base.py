"""Utilities shared across transport implementations."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Type

from ..config import DataApiConfig, TransportConfig
from ..errors import ConfigurationError
from ..interfaces import Transport

ACTION_PATH = "/endpoint/data/v1/action/{action}"


@dataclass
class TransportFactory:
    """Registry-backed factory for transport instances."""

    registry: Dict[str, Type[Transport]]

    def create(self, data_api: DataApiConfig, config: TransportConfig) -> Transport:
        try:
            transport_cls = self.registry[config.type]
        except KeyError as exc:
            raise ConfigurationError(f"Unknown transport type: {config.type}") from exc
        return transport_cls(data_api, config)
