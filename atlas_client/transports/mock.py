"""Scripted transport that replays canned responses and records every call."""

from __future__ import annotations

import copy
from collections import deque
from dataclasses import dataclass
from typing import Any, Deque, Dict, Iterable, List, Optional, Union

from ..config import DataApiConfig, TransportConfig
from ..errors import TransportError
from ..interfaces import Transport

Reply = Union[Dict[str, Any], BaseException]


@dataclass
class RecordedCall:
    action: str
    body: Dict[str, Any]


class MockTransport(Transport):
    """Replies to each ``send`` with the next scripted response.

    A scripted exception is raised instead of returned. Running past the end
    of the script raises ``TransportError``.
    """

    def __init__(
        self,
        data_api: Optional[DataApiConfig] = None,
        config: Optional[TransportConfig] = None,
        responses: Optional[Iterable[Reply]] = None,
    ) -> None:
        params = config.params if config else {}
        initial = responses if responses is not None else params.get("responses", [])
        self._replies: Deque[Reply] = deque(initial)
        self.calls: List[RecordedCall] = []

    def queue(self, *replies: Reply) -> "MockTransport":
        self._replies.extend(replies)
        return self

    @property
    def actions(self) -> List[str]:
        return [call.action for call in self.calls]

    @property
    def pending(self) -> int:
        return len(self._replies)

    def send(self, action: str, body: Dict[str, Any]) -> Dict[str, Any]:
        self.calls.append(RecordedCall(action=action, body=copy.deepcopy(body)))
        if not self._replies:
            raise TransportError(f"No scripted response left for {action}", action=action)
        reply = self._replies.popleft()
        if isinstance(reply, BaseException):
            raise reply
        return copy.deepcopy(reply)
