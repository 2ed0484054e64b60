from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from unittest.mock import Mock


class FakeTable:
    """In-memory stand-in for a boto3 DynamoDB Table with paged scans.

    `pages` is a list of item lists; each scan call returns the next page and
    a LastEvaluatedKey while more pages remain. With `endless`, every scan
    reports more items and pages past the seeded ones are empty. Filter
    expressions are ignored, as DynamoDB applies them after reading the page.
    """

    def __init__(self, pages: Optional[List[List[Dict[str, Any]]]] = None, endless: bool = False) -> None:
        self.pages = pages if pages is not None else [[]]
        self.endless = endless
        self.scan_calls: List[Dict[str, Any]] = []
        self.put_calls: List[Dict[str, Any]] = []
        self.scan_error: Optional[Exception] = None
        self.put_error: Optional[Exception] = None

    def put_item(self, Item: Dict[str, Any]) -> Dict[str, Any]:
        if self.put_error is not None:
            raise self.put_error
        self.put_calls.append(Item)
        self.pages[-1].append(Item)
        return {}

    def scan(self, **kwargs: Any) -> Dict[str, Any]:
        self.scan_calls.append(dict(kwargs))
        if self.scan_error is not None:
            raise self.scan_error

        start = kwargs.get("ExclusiveStartKey")
        index = start["page"] if start else 0
        if self.endless:
            items = list(self.pages[index]) if index < len(self.pages) else []
            return {"Items": items, "LastEvaluatedKey": {"page": index + 1}}

        response: Dict[str, Any] = {"Items": list(self.pages[index])}
        if index + 1 < len(self.pages):
            response["LastEvaluatedKey"] = {"page": index + 1}
        return response


def make_response(status_code: int = 200, payload: Any = None, json_error: bool = False) -> Mock:
    resp = Mock()
    resp.status_code = status_code
    if json_error:
        resp.json.side_effect = ValueError("No JSON object could be decoded")
    else:
        resp.json.return_value = payload
    return resp


def ts(year: int, month: int, day: int, hour: int = 0) -> int:
    return int(datetime(year, month, day, hour, tzinfo=timezone.utc).timestamp())


def slot(dt: int, temp: Optional[float] = None, description: Optional[str] = None, icon: Optional[str] = None, pop: Optional[float] = None) -> Dict[str, Any]:
    entry: Dict[str, Any] = {"dt": dt, "main": {}, "weather": []}
    if temp is not None:
        entry["main"]["temp"] = temp
    if description is not None or icon is not None:
        entry["weather"].append({"description": description, "icon": icon})
    if pop is not None:
        entry["pop"] = pop
    return entry

