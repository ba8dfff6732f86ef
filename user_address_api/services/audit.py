from __future__ import annotations

from typing import Any, Dict, Optional

from user_address_api.core.logging import get_logger
from user_address_api.core.settings import S
from user_address_api.core.time import now_iso

log = get_logger("user_address_api.audit")


def client_ip_from_request(req) -> str:
    xff = req.headers.get("x-forwarded-for")
    if xff:
        return xff.split(",")[0].strip()
    return req.client.host if req.client else "0.0.0.0"


def audit_event(event: str, client_id: Optional[str], request=None, **fields: Any) -> None:
    if not S.audit_log_enabled:
        return
    payload: Dict[str, Any] = {"event": event, "clientId": client_id, "ts": now_iso(), **fields}
    if request is not None:
        payload["ip"] = client_ip_from_request(request)
        payload["userAgent"] = request.headers.get("user-agent", "")[:256]
    log.info("audit %s", event, extra={"context": payload})
