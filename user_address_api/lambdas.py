"""
AWS Lambda entry points that sit outside the HTTP router.

  authorizer_handler   API Gateway TOKEN authorizer for the /v1 routes
  init_client_handler  out-of-band client provisioning, invoked directly:

      aws lambda invoke --function-name <InitClientFunction> \\
          --payload '{"clientName":"My App"}' response.json
"""

from __future__ import annotations

import asyncio
from functools import lru_cache
from typing import Any, Dict

from user_address_api.core.logging import get_logger, setup_logging
from user_address_api.core.settings import S
from user_address_api.core.tables import build_tables
from user_address_api.errors import Unauthorized
from user_address_api.services.authorizer import Authorizer
from user_address_api.services.clients import provision_client
from user_address_api.stores.clients import ClientStore

log = get_logger(__name__)


@lru_cache(maxsize=1)
def _client_store() -> ClientStore:
    # Built once per container so warm invocations reuse the connection pool.
    setup_logging(S.log_level, S.log_format)
    return ClientStore(build_tables().clients)


def _request_context(context: Any) -> Dict[str, str]:
    return {
        "functionName": getattr(context, "function_name", "unknown"),
        "requestId": getattr(context, "aws_request_id", "unknown"),
    }


def authorizer_handler(event: Dict[str, Any], context: Any = None) -> Dict[str, Any]:
    authorizer = Authorizer(_client_store())
    try:
        decision = asyncio.run(authorizer.authorize(event.get("authorizationToken"), event.get("methodArn", "")))
    except Unauthorized:
        # API Gateway maps this exact message to a 401.
        raise Exception("Unauthorized") from None
    return decision.to_policy()


def init_client_handler(event: Dict[str, Any], context: Any = None) -> Dict[str, Any]:
    log.info("Initialize client handler started", extra={"context": _request_context(context)})
    return asyncio.run(provision_client(_client_store(), event or {}))
