from __future__ import annotations

import base64
import copy
import os
import sys
from pathlib import Path
from typing import Any, Dict, List

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

os.environ.setdefault("AWS_REGION", "us-east-1")
os.environ.setdefault("AWS_DEFAULT_REGION", "us-east-1")

from user_address_api.core.crypto import sha256_str  # noqa: E402

CLIENT_ID = "cli_test"
CLIENT_SECRET = "s3cret-value"


def _matches(condition: Any, item: Dict[str, Any]) -> bool:
    expr = condition.get_expression()
    if expr["operator"] == "AND":
        return all(_matches(part, item) for part in expr["values"])
    if expr["operator"] == "=":
        attr, value = expr["values"]
        return item.get(attr.name) == value
    raise NotImplementedError(expr["operator"])


class InMemoryTable:
    """Enough of a boto3 DynamoDB Table for the address and client stores."""

    def __init__(self, key_names: List[str]) -> None:
        self.key_names = key_names
        self.items: Dict[tuple, Dict[str, Any]] = {}
        self.calls: List[tuple] = []

    def _key(self, key: Dict[str, Any]) -> tuple:
        return tuple(key[name] for name in self.key_names)

    def get_item(self, Key: Dict[str, Any]) -> Dict[str, Any]:
        self.calls.append(("get_item", Key))
        item = self.items.get(self._key(Key))
        return {"Item": copy.deepcopy(item)} if item else {}

    def put_item(self, Item: Dict[str, Any]) -> Dict[str, Any]:
        self.calls.append(("put_item", Item))
        self.items[self._key(Item)] = copy.deepcopy(Item)
        return {}

    def delete_item(self, Key: Dict[str, Any]) -> Dict[str, Any]:
        self.calls.append(("delete_item", Key))
        self.items.pop(self._key(Key), None)
        return {}

    def query(self, **kwargs: Any) -> Dict[str, Any]:
        self.calls.append(("query", kwargs))
        out = [item for item in self.items.values() if _matches(kwargs["KeyConditionExpression"], item)]
        if "FilterExpression" in kwargs:
            out = [item for item in out if _matches(kwargs["FilterExpression"], item)]
        return {"Items": copy.deepcopy(out)}

    def update_item(self, **kwargs: Any) -> Dict[str, Any]:
        self.calls.append(("update_item", kwargs))
        key = kwargs["Key"]
        names = kwargs["ExpressionAttributeNames"]
        values = kwargs["ExpressionAttributeValues"]
        assert kwargs["UpdateExpression"].startswith("SET ")
        item = self.items.setdefault(self._key(key), dict(key))
        for assignment in kwargs["UpdateExpression"][len("SET "):].split(", "):
            name_ph, value_ph = (part.strip() for part in assignment.split("="))
            item[names[name_ph]] = values[value_ph]
        return {"Attributes": copy.deepcopy(item)}


@pytest.fixture
def addresses_table() -> InMemoryTable:
    return InMemoryTable(["userId", "addressId"])


@pytest.fixture
def clients_table() -> InMemoryTable:
    table = InMemoryTable(["clientId"])
    table.put_item(Item={
        "clientId": CLIENT_ID,
        "clientSecret": sha256_str(CLIENT_SECRET),
        "clientName": "Test client",
        "description": "",
        "active": True,
        "createdAt": "2024-01-01T00:00:00.000Z",
        "expiresAt": "2999-01-01T00:00:00.000Z",
    })
    return table


@pytest.fixture
def basic_auth() -> str:
    token = base64.b64encode(f"{CLIENT_ID}:{CLIENT_SECRET}".encode()).decode()
    return f"Basic {token}"
