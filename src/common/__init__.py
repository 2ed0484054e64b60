"""Common utilities shared by the landing page Lambda and its clients."""
from .config import AppConfig, load_app_config
from .errors import ConfigurationError, ServiceError, StoreError, UpstreamError

__all__ = [
    "AppConfig",
    "load_app_config",
    "ServiceError",
    "ConfigurationError",
    "UpstreamError",
    "StoreError",
]
