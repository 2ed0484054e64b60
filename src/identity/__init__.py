"""Signed identity cookie shared by the landing page Lambda."""
from .cookie import IdentityCookie, sign, verify

__all__ = ["IdentityCookie", "sign", "verify"]
