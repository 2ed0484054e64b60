"""Registration storage (DynamoDB) for the landing page Lambda."""
from .repository import Registration, RegistrationRepository

__all__ = ["Registration", "RegistrationRepository"]
