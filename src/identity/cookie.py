"""
Signed identity cookie.

A returning visitor is recognised by a cookie whose value is
"<value>--<signature>", where the signature is an HMAC-SHA256 of
"<field_name>=<value>" under the server secret. Tokens carry no expiry of
their own; the cookie's Max-Age bounds their lifetime.
"""
import base64
import hashlib
import hmac
from typing import Mapping, Optional, Union
from urllib.parse import quote, unquote

from src.common.errors import ConfigurationError

SEPARATOR = "--"
DEFAULT_MAX_AGE_SECONDS = 30 * 24 * 60 * 60

Secret = Union[bytes, str, None]


def _secret_bytes(secret: Secret) -> bytes:
    if secret is None:
        return b""
    if isinstance(secret, str):
        return secret.encode("utf-8")
    return secret


def _signature(field_name: str, value: str, secret: bytes) -> str:
    digest = hmac.new(secret, f"{field_name}={value}".encode("utf-8"), hashlib.sha256).digest()
    return base64.urlsafe_b64encode(digest).decode("ascii").rstrip("=")


def sign(field_name: str, value: str, secret: Secret) -> str:
    """Return the token "<value>--<signature>" for `value` issued as `field_name`."""
    key = _secret_bytes(secret)
    if not key:
        raise ConfigurationError("Identity cookie secret is not set")
    return f"{value}{SEPARATOR}{_signature(field_name, value, key)}"


def verify(field_name: str, token: Optional[str], secret: Secret) -> Optional[str]:
    """
    Return the value carried by `token`, or None if it cannot be trusted.

    Never raises: a missing secret, a token without a separator or a
    signature mismatch all mean "anonymous".
    """
    key = _secret_bytes(secret)
    if not key or not token:
        return None

    value, separator, supplied = token.partition(SEPARATOR)
    if not separator:
        return None

    expected = _signature(field_name, value, key)
    if not hmac.compare_digest(expected.encode("utf-8"), supplied.encode("utf-8")):
        return None
    return value


class IdentityCookie:
    """Issues and reads the signed identity cookie for one field (e.g. "email")."""

    def __init__(self, name: str, secret: Secret, max_age_seconds: int = DEFAULT_MAX_AGE_SECONDS) -> None:
        self.name = name
        self._secret = _secret_bytes(secret)
        self.max_age_seconds = max_age_seconds

    @property
    def enabled(self) -> bool:
        return bool(self._secret)

    def issue(self, value: str) -> str:
        """Set-Cookie header value carrying a freshly signed token."""
        token = quote(sign(self.name, value, self._secret), safe="@.-_")
        return f"{self.name}={token}; Path=/; Max-Age={self.max_age_seconds}; HttpOnly; SameSite=Lax"

    def read(self, cookies: Mapping[str, str]) -> Optional[str]:
        """Verified value from a parsed cookie mapping, or None."""
        raw = cookies.get(self.name)
        if not raw:
            return None
        return verify(self.name, unquote(raw), self._secret)
