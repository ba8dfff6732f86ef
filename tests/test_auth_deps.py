import asyncio
import base64
import unittest
from types import SimpleNamespace
from unittest.mock import AsyncMock, Mock

from user_address_api.auth import deps
from user_address_api.core.crypto import sha256_str
from user_address_api.errors import Unauthorized
from user_address_api.services.authorizer import Authorizer
from user_address_api.stores.clients import ClientStore


def run_async(coro):
    return asyncio.run(coro)


def build_request(headers=None, authorizer=None):
    return SimpleNamespace(
        headers=headers or {},
        method="GET",
        url=SimpleNamespace(path="/v1/users/u1/addresses"),
        app=SimpleNamespace(state=SimpleNamespace(authorizer=authorizer)),
    )


def build_authorizer():
    table = Mock()
    table.get_item.return_value = {"Item": {"clientId": "cli_1", "clientSecret": sha256_str("pw")}}
    return Authorizer(ClientStore(table))


class TestRequireClient(unittest.TestCase):
    def test_requires_header(self):
        req = build_request(authorizer=build_authorizer())
        with self.assertRaises(Unauthorized) as ctx:
            run_async(deps.require_client(req))
        self.assertEqual(ctx.exception.status_code, 401)

    def test_rejects_bearer_scheme(self):
        req = build_request({"authorization": "Bearer abc"}, authorizer=build_authorizer())
        with self.assertRaises(Unauthorized):
            run_async(deps.require_client(req))

    def test_accepts_basic_credentials(self):
        token = "Basic " + base64.b64encode(b"cli_1:pw").decode()
        req = build_request({"authorization": token}, authorizer=build_authorizer())
        decision = run_async(deps.require_client(req))
        self.assertEqual(decision.principal_id, "cli_1")
        self.assertEqual(decision.resource, "GET /v1/users/u1/addresses")

    def test_passes_header_and_resource_to_authorizer(self):
        authorizer = Mock()
        authorizer.authorize = AsyncMock(return_value="decision")
        req = build_request({"authorization": "Basic abc"}, authorizer=authorizer)
        self.assertEqual(run_async(deps.require_client(req)), "decision")
        authorizer.authorize.assert_awaited_once_with("Basic abc", "GET /v1/users/u1/addresses")


if __name__ == "__main__":
    unittest.main()
