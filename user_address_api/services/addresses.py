from __future__ import annotations

import uuid
from typing import Any, Dict, Iterable, List, Optional

from pydantic import ValidationError

from user_address_api.core.logging import get_logger
from user_address_api.core.time import now_iso
from user_address_api.core.validation import (
    is_valid_address_id,
    is_valid_postcode,
    is_valid_suburb,
    is_valid_user_id,
)
from user_address_api.errors import BadRequest, DuplicateAddress, ValidationFailed
from user_address_api.metrics import record_address_operation
from user_address_api.models import (
    COMPARABLE_FIELDS,
    AddressCreateIn,
    AddressField,
    AddressUpdateIn,
    describe_validation_error,
)
from user_address_api.stores.addresses import AddressStore

log = get_logger(__name__)

INVALID_USER_ID = (
    "Invalid userId format. Only alphanumeric characters, hyphens (-), and underscores (_) are allowed."
)
INVALID_ADDRESS_ID = "Invalid addressId format. Must be a valid UUID."
NO_FIELDS = "Request body must have at least 1 key"


def _require_user_id(user_id: Optional[str]) -> str:
    if not user_id:
        raise BadRequest("Missing userId")
    if not is_valid_user_id(user_id):
        raise BadRequest(INVALID_USER_ID)
    return user_id


def _require_ids(user_id: Optional[str], address_id: Optional[str]) -> None:
    if not user_id or not address_id:
        raise BadRequest("Missing userId or addressId")
    if not is_valid_user_id(user_id):
        raise BadRequest(INVALID_USER_ID)
    if not is_valid_address_id(address_id):
        raise BadRequest(INVALID_ADDRESS_ID)


def _comparable(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text.casefold() if text else None


def is_duplicate(candidate: Dict[str, Any], existing: Dict[str, Any]) -> bool:
    """True when both records agree on every comparable field.

    Values are compared trimmed and case-insensitively; an absent value only
    matches another absent value.
    """
    return all(
        _comparable(candidate.get(f.value)) == _comparable(existing.get(f.value))
        for f in COMPARABLE_FIELDS
    )


def find_duplicate(candidate: Dict[str, Any], existing: Iterable[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    return next((item for item in existing if is_duplicate(candidate, item)), None)


class AddressService:
    def __init__(self, store: AddressStore) -> None:
        self._store = store

    async def list_addresses(
        self,
        user_id: Optional[str],
        suburb: Optional[str] = None,
        postcode: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        user_id = _require_user_id(user_id)
        suburb = (suburb or "").strip() or None
        postcode = (postcode or "").strip() or None
        if suburb is not None and not is_valid_suburb(suburb):
            raise BadRequest("Invalid suburb filter")
        if postcode is not None and not is_valid_postcode(postcode):
            raise BadRequest("Invalid postcode filter. Must be exactly 4 digits.")

        items = await self._store.query_addresses(user_id, suburb=suburb, postcode=postcode)
        record_address_operation("list", "success")
        return items

    async def create_address(self, user_id: Optional[str], payload: Any) -> Dict[str, Any]:
        user_id = _require_user_id(user_id)
        try:
            body = AddressCreateIn.model_validate(payload)
        except ValidationError as exc:
            record_address_operation("create", "invalid")
            raise ValidationFailed(error=describe_validation_error(exc)) from exc
        fields = body.model_dump(by_alias=True, exclude_none=True)

        # Best effort: a concurrent create for the same user can still slip in
        # between this read and the put below.
        existing = await self._store.query_addresses(user_id)
        duplicate = find_duplicate(fields, existing)
        if duplicate is not None:
            log.info(
                "Duplicate address rejected",
                extra={"context": {"userId": user_id, "existingAddressId": duplicate.get("addressId")}},
            )
            record_address_operation("create", "duplicate")
            raise DuplicateAddress()

        ts = now_iso()
        item = {
            "userId": user_id,
            "addressId": str(uuid.uuid4()),
            **fields,
            "createdAt": ts,
            "updatedAt": ts,
        }
        await self._store.put_address(item)
        log.info("Address created", extra={"context": {"userId": user_id, "addressId": item["addressId"]}})
        record_address_operation("create", "success")
        return item

    async def update_address(
        self,
        user_id: Optional[str],
        address_id: Optional[str],
        payload: Any,
    ) -> Dict[str, Any]:
        _require_ids(user_id, address_id)
        try:
            body = AddressUpdateIn.model_validate(payload)
        except ValidationError as exc:
            record_address_operation("update", "invalid")
            raise ValidationFailed(describe_validation_error(exc)) from exc

        patch = body.patch_fields()
        if not patch:
            record_address_operation("update", "invalid")
            raise ValidationFailed(NO_FIELDS)
        patch[AddressField.UPDATED_AT] = now_iso()

        # A missing (userId, addressId) is created with just the patched attributes.
        updated = await self._store.update_address(user_id, address_id, patch)
        log.info(
            "Address updated",
            extra={"context": {"userId": user_id, "addressId": address_id, "fields": [f.value for f in patch]}},
        )
        record_address_operation("update", "success")
        return updated

    async def delete_address(self, user_id: Optional[str], address_id: Optional[str]) -> None:
        _require_ids(user_id, address_id)
        await self._store.delete_address(user_id, address_id)
        log.info("Address deleted", extra={"context": {"userId": user_id, "addressId": address_id}})
        record_address_operation("delete", "success")
