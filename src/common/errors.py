"""
Exception types shared by the weather client, the registration repository
and the landing page Lambda.

Invalid identity cookies are not represented here: verification returns None
and the visitor is treated as anonymous.
"""
from typing import Optional


class ServiceError(Exception):
    """Base class for errors raised by this service."""


class ConfigurationError(ServiceError):
    """A required credential or secret is missing. Raised at construction time."""


class UpstreamError(ServiceError):
    """The weather API could not be reached or returned an unusable payload."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class StoreError(ServiceError):
    """The registrations table rejected or failed a request."""
