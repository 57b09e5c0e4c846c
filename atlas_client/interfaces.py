"""Interface definitions for the transports the handler talks through."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict


class Transport(ABC):
    """Sends one Data API action and returns the parsed JSON response."""

    @abstractmethod
    def send(self, action: str, body: Dict[str, Any]) -> Dict[str, Any]:
        """POST ``body`` to the ``action`` endpoint.

        Raises ``TransportError`` when the request fails or the remote
        answers with an error payload.
        """
