"""Client for the MongoDB Atlas Data API with composite find-and-modify helpers."""

from .config import AppConfig, DataApiConfig, StoreTarget, TransportConfig
from .errors import ConfigurationError, DataApiError, TransportError
from .handler import MongoHandler, mongo_handler
from .models import FindOneAndDeleteResult, FindOneAndUpdateResult, Query

__all__ = [
    "AppConfig",
    "ConfigurationError",
    "DataApiConfig",
    "DataApiError",
    "FindOneAndDeleteResult",
    "FindOneAndUpdateResult",
    "MongoHandler",
    "Query",
    "StoreTarget",
    "TransportConfig",
    "TransportError",
    "mongo_handler",
]
