"""Transport implementations and the registry that builds them."""

from .http import HttpTransport
from .mock import MockTransport
from .registry import build_default_factory

__all__ = ["HttpTransport", "MockTransport", "build_default_factory"]
