from __future__ import annotations

import asyncio
from typing import Any, Dict, Optional

from botocore.exceptions import BotoCoreError, ClientError

from user_address_api.stores.addresses import storage_error


class ClientStore:
    """API client credentials keyed by clientId."""

    def __init__(self, table: Any) -> None:
        self._table = table

    async def get_client(self, client_id: str) -> Optional[Dict[str, Any]]:
        try:
            resp = await asyncio.to_thread(self._table.get_item, Key={"clientId": client_id})
        except (BotoCoreError, ClientError) as exc:
            raise storage_error(exc, "get_item", client_id=client_id) from exc
        return resp.get("Item")

    async def put_client(self, record: Dict[str, Any]) -> None:
        try:
            await asyncio.to_thread(self._table.put_item, Item=record)
        except (BotoCoreError, ClientError) as exc:
            raise storage_error(exc, "put_item", client_id=record.get("clientId", "")) from exc
