"""
Registration persistence in DynamoDB.

Table schema:
  TableName: registrations (REGISTRATIONS_TABLE)
  PK: id (String, UUID)
  Attributes: name (String), email (String), destination (String), created_at (Number epoch)

There is no secondary index, so listing and email lookups are full scans.
"""
import logging
import time
import uuid
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, Iterator, List, Optional

import boto3
from boto3.dynamodb.conditions import Attr
from botocore.exceptions import BotoCoreError, ClientError

from src.common.errors import StoreError

logger = logging.getLogger(__name__)

# ============================================================================
# DynamoDB Schema Constants
# ============================================================================
ID = "id"  # String: UUID, partition key
NAME = "name"
EMAIL = "email"
DESTINATION = "destination"
CREATED_AT = "created_at"  # Number: epoch seconds

DEFAULT_TABLE_NAME = "registrations"
DEFAULT_MAX_SCAN_PAGES = 100

STORE_ERRORS = (BotoCoreError, ClientError)


@dataclass(frozen=True)
class Registration:
    id: str
    name: str
    email: str
    destination: str
    created_at: int

    @classmethod
    def from_item(cls, item: Dict[str, Any]) -> "Registration":
        created_at = item.get(CREATED_AT) or 0
        if isinstance(created_at, Decimal):
            created_at = int(created_at)
        return cls(
            id=str(item.get(ID, "")),
            name=str(item.get(NAME, "")),
            email=str(item.get(EMAIL, "")),
            destination=str(item.get(DESTINATION, "")),
            created_at=int(created_at),
        )

    def to_item(self) -> Dict[str, Any]:
        return {
            ID: self.id,
            NAME: self.name,
            EMAIL: self.email,
            DESTINATION: self.destination,
            CREATED_AT: self.created_at,
        }


def _parse_item(item: Dict[str, Any]) -> Optional[Registration]:
    """Registration for a stored item, or None if the item is unreadable."""
    try:
        return Registration.from_item(item)
    except (TypeError, ValueError, OverflowError) as exc:
        logger.warning(f"Skipping unreadable registration item {item.get(ID)!r}: {exc}")
        return None


class RegistrationRepository:
    """Creates, lists and finds registrations in a scan-only DynamoDB table."""

    def __init__(
        self,
        table: Any = None,
        table_name: str = DEFAULT_TABLE_NAME,
        max_scan_pages: int = DEFAULT_MAX_SCAN_PAGES,
    ) -> None:
        if table is None:
            dynamodb = boto3.resource("dynamodb")
            table = dynamodb.Table(table_name)
        self._table = table
        self.max_scan_pages = max_scan_pages

    def create(self, name: str, email: str, destination: str) -> Registration:
        """
        Write a new registration unconditionally.

        Duplicate emails are allowed. Raises StoreError if the write fails.
        """
        registration = Registration(
            id=str(uuid.uuid4()),
            name=name,
            email=email,
            destination=destination,
            created_at=int(time.time()),
        )
        try:
            self._table.put_item(Item=registration.to_item())
        except STORE_ERRORS as exc:
            raise StoreError(f"Failed to store registration: {type(exc).__name__}") from exc
        logger.info(f"Stored registration {registration.id}")
        return registration

    def _scan_pages(self, **scan_kwargs: Any) -> Iterator[List[Dict[str, Any]]]:
        """Yield scan pages until DynamoDB stops returning LastEvaluatedKey."""
        pages = 0
        while True:
            response = self._table.scan(**scan_kwargs)
            pages += 1
            yield response.get("Items", [])

            if "LastEvaluatedKey" not in response:
                return
            if pages >= self.max_scan_pages:
                logger.warning(f"Stopping scan after {pages} pages; table still reports more items")
                return
            scan_kwargs["ExclusiveStartKey"] = response["LastEvaluatedKey"]

    def list(self, limit: int = 10) -> List[Registration]:
        """Newest registrations first. Returns [] if the table cannot be read."""
        if limit <= 0:
            return []
        items: List[Dict[str, Any]] = []
        try:
            for page in self._scan_pages(
                ProjectionExpression="#id, #n, email, destination, created_at",
                ExpressionAttributeNames={"#id": ID, "#n": NAME},
            ):
                items.extend(page)
        except STORE_ERRORS as exc:
            logger.warning(f"Could not list registrations: {exc}")
            return []

        parsed = (_parse_item(item) for item in items)
        registrations = [r for r in parsed if r is not None]
        registrations.sort(key=lambda r: r.created_at, reverse=True)
        return registrations[:limit]

    def find_by_email(self, email: str) -> Optional[Registration]:
        """
        First registration with this exact email in scan order, or None.

        With duplicate emails the match is whichever the scan reaches first,
        which is not necessarily the most recent registration.
        """
        if not email:
            return None
        try:
            for page in self._scan_pages(FilterExpression=Attr(EMAIL).eq(email)):
                for item in page:
                    if item.get(EMAIL) != email:
                        continue
                    registration = _parse_item(item)
                    if registration is not None:
                        return registration
        except STORE_ERRORS as exc:
            logger.warning(f"Could not look up registration by email: {exc}")
        return None
