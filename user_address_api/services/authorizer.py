from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

from user_address_api.core.crypto import b64decode_str, digests_match, sha256_str
from user_address_api.core.logging import get_logger
from user_address_api.core.settings import S
from user_address_api.core.time import now_utc, parse_iso
from user_address_api.errors import StorageError, Unauthorized
from user_address_api.metrics import record_auth_decision
from user_address_api.stores.clients import ClientStore

log = get_logger(__name__)

BASIC_SCHEME = "Basic "


@dataclass(frozen=True)
class AuthDecision:
    principal_id: str
    resource: str
    context: Dict[str, str] = field(default_factory=dict)

    def to_policy(self) -> Dict[str, Any]:
        """API Gateway authorizer response allowing ``execute-api:Invoke`` on the resource."""
        return {
            "principalId": self.principal_id,
            "policyDocument": {
                "Version": "2012-10-17",
                "Statement": [
                    {
                        "Action": "execute-api:Invoke",
                        "Effect": "Allow",
                        "Resource": self.resource,
                    }
                ],
            },
            "context": dict(self.context),
        }


def parse_basic_token(token: Optional[str]) -> Tuple[str, str]:
    if not token or not token.startswith(BASIC_SCHEME):
        raise Unauthorized("missing or non-basic authorization")
    decoded = b64decode_str(token[len(BASIC_SCHEME):])
    if decoded is None:
        raise Unauthorized("undecodable credentials")
    client_id, sep, client_secret = decoded.partition(":")
    if not sep or not client_id or not client_secret:
        raise Unauthorized("malformed credentials")
    return client_id, client_secret


def _client_usable(item: Dict[str, Any]) -> bool:
    if item.get("active") is False:
        return False
    expires_at = parse_iso(str(item.get("expiresAt") or ""))
    return expires_at is None or expires_at > now_utc()


class Authorizer:
    """Verifies HTTP Basic credentials against hashed client secrets.

    Every failure surfaces as the same ``Unauthorized``; the actual reason is
    only written to the log.
    """

    def __init__(self, clients: ClientStore, *, enforce_expiry: Optional[bool] = None) -> None:
        self._clients = clients
        self._enforce_expiry = S.client_expiry_enforced if enforce_expiry is None else enforce_expiry

    async def authorize(self, token: Optional[str], resource: str) -> AuthDecision:
        try:
            decision = await self._authorize(token, resource)
        except Unauthorized as exc:
            log.warning("Authorization denied", extra={"context": {"reason": exc.reason, "resource": resource}})
            record_auth_decision("deny")
            raise
        log.info("Authorization successful", extra={"context": {"clientId": decision.principal_id}})
        record_auth_decision("allow")
        return decision

    async def _authorize(self, token: Optional[str], resource: str) -> AuthDecision:
        client_id, client_secret = parse_basic_token(token)
        hashed = sha256_str(client_secret)

        try:
            item = await self._clients.get_client(client_id)
        except StorageError as exc:
            raise Unauthorized(f"client lookup failed: {exc.error or ''}") from exc
        if not item:
            raise Unauthorized("unknown client")

        if not digests_match(str(item.get("clientSecret") or ""), hashed):
            raise Unauthorized("secret mismatch")
        if self._enforce_expiry and not _client_usable(item):
            raise Unauthorized("client inactive or expired")

        return AuthDecision(principal_id=client_id, resource=resource, context={"clientId": client_id})
