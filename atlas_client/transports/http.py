"""HTTP transport for the MongoDB Atlas Data API.

Each action is a single POST to ``{base_url}/endpoint/data/v1/action/{action}``
carrying the api key header. Failed requests raise ``TransportError``. Retries
are off unless ``max_attempts`` is raised above one, and even then only
connection errors, timeouts, 429 and 5xx responses are retried.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Optional

import requests
from tenacity import (
    Retrying,
    before_sleep_log,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from ..config import DataApiConfig, TransportConfig
from ..errors import ConfigurationError, TransportError
from ..interfaces import Transport
from .base import ACTION_PATH

logger = logging.getLogger(__name__)


def _is_retryable(exc: BaseException) -> bool:
    return isinstance(exc, TransportError) and exc.retryable


class HttpTransport(Transport):
    """Transport backed by a ``requests.Session``."""

    DEFAULT_TIMEOUT = 30

    def __init__(
        self,
        data_api: DataApiConfig,
        config: Optional[TransportConfig] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        """Initialize the HTTP transport.

        Optional config params:
            timeout: Seconds before a request is abandoned (default: 30)
            max_attempts: Total attempts per action (default: 1 = no retry)
            wait_min: Minimum backoff between attempts in seconds (default: 2)
            wait_max: Maximum backoff between attempts in seconds (default: 10)
            verify: Verify TLS certificates (default: True)
        """
        if not data_api.api_base_url:
            raise ConfigurationError("HttpTransport requires api_base_url")

        params = config.params if config else {}
        self._base_url = data_api.api_base_url.rstrip("/")
        self._timeout = float(params.get("timeout", self.DEFAULT_TIMEOUT))
        self._max_attempts = max(int(params.get("max_attempts", 1)), 1)
        self._wait_min = float(params.get("wait_min", 2))
        self._wait_max = float(params.get("wait_max", 10))
        self._verify = params.get("verify", True)
        self._session = session or requests.Session()
        self._headers = {
            "Content-Type": "application/json",
            "Access-Control-Request-Headers": "*",
            "api-key": data_api.api_key or "",
        }

    def action_url(self, action: str) -> str:
        return f"{self._base_url}{ACTION_PATH.format(action=action)}"

    def send(self, action: str, body: Dict[str, Any]) -> Dict[str, Any]:
        payload = json.dumps(body)
        retrying = Retrying(
            retry=retry_if_exception(_is_retryable),
            stop=stop_after_attempt(self._max_attempts),
            wait=wait_exponential(multiplier=1, min=self._wait_min, max=self._wait_max),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )
        return retrying(self._post, action, payload)

    def _post(self, action: str, payload: str) -> Dict[str, Any]:
        url = self.action_url(action)
        logger.debug("POST %s", url)

        try:
            response = self._session.post(
                url,
                data=payload,
                headers=self._headers,
                timeout=self._timeout,
                verify=self._verify,
            )
        except (requests.exceptions.ConnectionError, requests.exceptions.Timeout) as exc:
            logger.error("Data API %s request failed: %s", action, exc)
            raise TransportError(
                f"{action} request failed: {exc}", action=action, retryable=True
            ) from exc
        except requests.exceptions.RequestException as exc:
            logger.error("Data API %s request failed: %s", action, exc)
            raise TransportError(f"{action} request failed: {exc}", action=action) from exc

        if not response.ok:
            retryable = response.status_code == 429 or response.status_code >= 500
            logger.error(
                "Data API %s returned HTTP %s: %s",
                action,
                response.status_code,
                response.text[:200],
            )
            raise TransportError(
                f"{action} returned HTTP {response.status_code}: {response.text[:200]}",
                action=action,
                status_code=response.status_code,
                retryable=retryable,
            )

        try:
            data = response.json()
        except ValueError as exc:
            raise TransportError(
                f"{action} returned a non-JSON body",
                action=action,
                status_code=response.status_code,
            ) from exc

        if not isinstance(data, dict):
            raise TransportError(
                f"{action} returned {type(data).__name__}, expected a JSON object",
                action=action,
                status_code=response.status_code,
            )
        if "error" in data:
            logger.error("Data API %s reported an error: %s", action, data["error"])
            raise TransportError(
                f"{action} failed: {data['error']}",
                action=action,
                status_code=response.status_code,
            )
        return data
