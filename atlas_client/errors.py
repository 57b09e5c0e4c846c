"""Exceptions raised by the Data API client.

Only genuine failures are exceptions. A lookup that matches nothing returns
``None`` and a mutation that touches nothing returns ``False``.
"""

from __future__ import annotations

from typing import Optional


class DataApiError(RuntimeError):
    """Base class for every error raised by this package."""


class ConfigurationError(DataApiError, ValueError):
    """The client or its transport cannot be built from the given settings."""


class TransportError(DataApiError):
    """A request could not be completed or the remote reported an error."""

    def __init__(
        self,
        message: str,
        action: Optional[str] = None,
        status_code: Optional[int] = None,
        retryable: bool = False,
    ) -> None:
        super().__init__(message)
        self.action = action
        self.status_code = status_code
        self.retryable = retryable
