"""Transport registry mapping config types to implementations."""

from __future__ import annotations

from typing import Dict, Type

from ..interfaces import Transport
from .base import TransportFactory
from .http import HttpTransport
from .mock import MockTransport


def build_default_factory() -> TransportFactory:
    registry: Dict[str, Type[Transport]] = {
        "http": HttpTransport,
        "mock": MockTransport,
    }
    return TransportFactory(registry)
