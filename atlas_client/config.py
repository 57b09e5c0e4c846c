"""Configuration models and helpers for the Data API client."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

logger = logging.getLogger(__name__)

ENV_API_KEY = "MONGODB_DATA_API_KEY"
ENV_API_BASE_URL = "MONGODB_DATA_API_BASE_URL"
ENV_CLUSTER_NAME = "MONGODB_CLUSTER_NAME"


@dataclass(frozen=True)
class DataApiConfig:
    """Credentials and location of the remote Data API.

    Read once at startup and handed to every client; nothing mutates it.
    """

    api_key: Optional[str] = None
    api_base_url: Optional[str] = None
    cluster_name: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DataApiConfig":
        return cls(
            api_key=data.get("api_key"),
            api_base_url=data.get("api_base_url"),
            cluster_name=data.get("cluster_name"),
        )

    @classmethod
    def from_json(cls, path: Path) -> "DataApiConfig":
        data = json.loads(path.read_text())
        return cls.from_dict(data)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "DataApiConfig":
        env = os.environ if environ is None else environ
        return cls(
            api_key=env.get(ENV_API_KEY),
            api_base_url=env.get(ENV_API_BASE_URL),
            cluster_name=env.get(ENV_CLUSTER_NAME),
        )

    def missing_fields(self) -> List[str]:
        return [
            name
            for name in ("api_key", "api_base_url", "cluster_name")
            if not getattr(self, name)
        ]

    def warn_if_incomplete(self) -> List[str]:
        """Log a warning for each setting the Data API cannot work without."""
        missing = self.missing_fields()
        if "api_base_url" in missing:
            logger.warning(
                "Missing MongoDB Atlas Data API Base URL. Set %s or api_base_url in the config file.",
                ENV_API_BASE_URL,
            )
        if "api_key" in missing:
            logger.warning(
                "Missing MongoDB Atlas Data API Key. Set %s or api_key in the config file.",
                ENV_API_KEY,
            )
        return missing


@dataclass
class TransportConfig:
    """Which transport to build and its free-form parameters."""

    type: str = "http"
    params: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class StoreTarget:
    """The (data source, database, collection) triple scoping every request."""

    data_source: Optional[str]
    database: str
    collection: str

    def to_body(self) -> Dict[str, Any]:
        return {
            "dataSource": self.data_source,
            "database": self.database,
            "collection": self.collection,
        }


@dataclass
class AppConfig:
    """Top-level configuration for the client."""

    data_api: DataApiConfig = field(default_factory=DataApiConfig)
    transport: TransportConfig = field(default_factory=TransportConfig)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AppConfig":
        data_api = DataApiConfig.from_dict(data.get("data_api", {}))
        transport = TransportConfig(**data.get("transport", {}))
        return cls(data_api=data_api, transport=transport)

    @classmethod
    def from_json(cls, path: Path) -> "AppConfig":
        data = json.loads(path.read_text())
        return cls.from_dict(data)

