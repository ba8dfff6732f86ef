from __future__ import annotations

import uuid
from typing import Any, Dict

from pydantic import ValidationError

from user_address_api.core.crypto import b64encode_str, new_client_secret, sha256_str
from user_address_api.core.logging import get_logger
from user_address_api.core.settings import S
from user_address_api.core.time import iso, iso_after, now_utc
from user_address_api.errors import ApiError, ValidationFailed
from user_address_api.models import ClientCreateReq, describe_validation_error
from user_address_api.services.audit import audit_event
from user_address_api.stores.clients import ClientStore

log = get_logger(__name__)

SECRET_WARNING = "Save the clientSecret now - it cannot be retrieved later"


def basic_auth_header(client_id: str, client_secret: str) -> str:
    return f"Basic {b64encode_str(f'{client_id}:{client_secret}')}"


async def provision_client(store: ClientStore, payload: Any) -> Dict[str, Any]:
    """Create a client credential pair.

    Only the SHA-256 digest of the secret is stored. The plaintext secret is
    returned exactly once, in the result of this call.
    """
    try:
        req = ClientCreateReq.model_validate(payload)
    except ValidationError as exc:
        audit_event("client_create", None, outcome="failure", status_code=400)
        raise ValidationFailed(error=describe_validation_error(exc)) from exc

    client_id = f"cli_{uuid.uuid4()}"
    client_secret = new_client_secret()
    created = now_utc()
    record = {
        "clientId": client_id,
        "clientSecret": sha256_str(client_secret),
        "clientName": req.client_name,
        "description": req.description,
        "active": True,
        "createdAt": iso(created),
        "expiresAt": iso_after(S.client_ttl_days, created),
    }
    try:
        await store.put_client(record)
    except ApiError as exc:
        audit_event("client_create", client_id, outcome="failure", status_code=exc.status_code)
        raise
    audit_event("client_create", client_id, outcome="success", client_name=req.client_name)
    log.info("Client created", extra={"context": {"clientId": client_id, "clientName": req.client_name}})

    return {
        "message": "Client created successfully",
        "clientId": client_id,
        "clientSecret": client_secret,
        "clientName": req.client_name,
        "createdAt": record["createdAt"],
        "expiresAt": record["expiresAt"],
        "warning": SECRET_WARNING,
        "usage": f"Authorization: {basic_auth_header(client_id, client_secret)}",
    }
