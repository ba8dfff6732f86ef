from __future__ import annotations

import asyncio
from typing import Any, Dict, List, Optional

from boto3.dynamodb.conditions import Attr, Key
from botocore.exceptions import BotoCoreError, ClientError

from user_address_api.core.logging import get_logger
from user_address_api.errors import StorageError
from user_address_api.models import PatchSet

log = get_logger(__name__)


def storage_error(exc: Exception, op: str, **context: Any) -> StorageError:
    log.error("DynamoDB %s failed", op, exc_info=exc, extra={"context": {"operation": op, **context}})
    if isinstance(exc, ClientError):
        return StorageError(exc.response.get("Error", {}).get("Message") or str(exc))
    return StorageError(str(exc))


class AddressStore:
    """Address collection keyed by (userId, addressId).

    The table carries two secondary indexes used for filtered reads:
    ``suburb_index`` keyed (userId, suburb) and ``postcode_index`` keyed
    (userId, postcode).
    """

    def __init__(self, table: Any, *, suburb_index: str, postcode_index: str) -> None:
        self._table = table
        self._suburb_index = suburb_index
        self._postcode_index = postcode_index

    async def query_addresses(
        self,
        user_id: str,
        suburb: Optional[str] = None,
        postcode: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        kwargs: Dict[str, Any] = {}
        if suburb:
            kwargs["IndexName"] = self._suburb_index
            kwargs["KeyConditionExpression"] = Key("userId").eq(user_id) & Key("suburb").eq(suburb)
            if postcode:
                kwargs["FilterExpression"] = Attr("postcode").eq(postcode)
        elif postcode:
            kwargs["IndexName"] = self._postcode_index
            kwargs["KeyConditionExpression"] = Key("userId").eq(user_id) & Key("postcode").eq(postcode)
        else:
            kwargs["KeyConditionExpression"] = Key("userId").eq(user_id)

        try:
            return await asyncio.to_thread(self._query_all, kwargs)
        except (BotoCoreError, ClientError) as exc:
            raise storage_error(exc, "query", index=kwargs.get("IndexName", "")) from exc

    def _query_all(self, kwargs: Dict[str, Any]) -> List[Dict[str, Any]]:
        items: List[Dict[str, Any]] = []
        while True:
            resp = self._table.query(**kwargs)
            items.extend(resp.get("Items", []))
            last_key = resp.get("LastEvaluatedKey")
            if not last_key:
                return items
            kwargs = {**kwargs, "ExclusiveStartKey": last_key}

    async def put_address(self, item: Dict[str, Any]) -> None:
        try:
            await asyncio.to_thread(self._table.put_item, Item=item)
        except (BotoCoreError, ClientError) as exc:
            raise storage_error(exc, "put_item", address_id=item.get("addressId", "")) from exc

    async def update_address(self, user_id: str, address_id: str, patch: PatchSet) -> Dict[str, Any]:
        if not patch:
            raise ValueError("patch must not be empty")
        # Placeholders come from the closed AddressField enum, never from input.
        assignments = [f"#{field.value} = :{field.value}" for field in patch]
        names = {f"#{field.value}": field.value for field in patch}
        values = {f":{field.value}": value for field, value in patch.items()}
        try:
            resp = await asyncio.to_thread(
                self._table.update_item,
                Key={"userId": user_id, "addressId": address_id},
                UpdateExpression="SET " + ", ".join(assignments),
                ExpressionAttributeNames=names,
                ExpressionAttributeValues=values,
                ReturnValues="ALL_NEW",
            )
        except (BotoCoreError, ClientError) as exc:
            raise storage_error(exc, "update_item", address_id=address_id) from exc
        return resp.get("Attributes", {})

    async def delete_address(self, user_id: str, address_id: str) -> None:
        try:
            await asyncio.to_thread(
                self._table.delete_item,
                Key={"userId": user_id, "addressId": address_id},
            )
        except (BotoCoreError, ClientError) as exc:
            raise storage_error(exc, "delete_item", address_id=address_id) from exc
