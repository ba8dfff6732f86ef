import asyncio
import json
import unittest
from types import SimpleNamespace
from unittest.mock import AsyncMock, Mock, patch

from user_address_api.errors import DuplicateAddress, StorageError, ValidationFailed
from user_address_api.routers import addresses
from user_address_api.services.authorizer import AuthDecision

ADDRESS_ID = "123e4567-e89b-42d3-a456-426614174000"


def run_async(coro):
    return asyncio.run(coro)


def build_request(body=b""):
    async def read_json():
        return json.loads(body)

    return SimpleNamespace(
        headers={"user-agent": "agent"},
        client=None,
        state=SimpleNamespace(),
        body=AsyncMock(return_value=body),
        json=read_json,
    )


def build_ctx():
    return AuthDecision(principal_id="cli_1", resource="GET /", context={"clientId": "cli_1"})


def build_service(**methods):
    svc = Mock()
    for name, value in methods.items():
        setattr(svc, name, AsyncMock(return_value=value))
    return svc


class TestReadJsonBody(unittest.TestCase):
    def test_empty_body_reads_as_empty_object(self):
        self.assertEqual(run_async(addresses.read_json_body(build_request(b"  "))), {})

    def test_parses_json(self):
        self.assertEqual(run_async(addresses.read_json_body(build_request(b'{"suburb": "X"}'))), {"suburb": "X"})

    def test_malformed_json_is_validation_failure(self):
        with self.assertRaises(ValidationFailed) as ctx:
            run_async(addresses.read_json_body(build_request(b"{bad")))
        self.assertEqual(ctx.exception.to_body(), {"message": "Validation failed", "error": "Invalid JSON body"})


class TestAddressRoutes(unittest.TestCase):
    def test_get_addresses(self):
        svc = build_service(list_addresses=[{"addressId": "a1"}])
        resp = run_async(addresses.get_addresses("user", suburb="Sydney", postcode=None, ctx=build_ctx(), svc=svc))
        svc.list_addresses.assert_awaited_once_with("user", suburb="Sydney", postcode=None)
        self.assertEqual(resp, {"message": "Addresses retrieved successfully", "addresses": [{"addressId": "a1"}]})

    def test_store_address(self):
        created = {"addressId": ADDRESS_ID, "userId": "user"}
        svc = build_service(create_address=created)
        with patch.object(addresses, "audit_event") as audit_mock:
            resp = run_async(addresses.store_address(
                build_request(b'{"suburb": "X"}'), "user", ctx=build_ctx(), svc=svc,
            ))
        svc.create_address.assert_awaited_once_with("user", {"suburb": "X"})
        audit_mock.assert_called_once()
        self.assertEqual(audit_mock.call_args.args[:2], ("address_create", "cli_1"))
        self.assertEqual(audit_mock.call_args.kwargs["outcome"], "success")
        self.assertEqual(resp["addressId"], ADDRESS_ID)
        self.assertEqual(resp["message"], "Address created successfully")

    def test_store_address_without_body_validates_empty_object(self):
        svc = build_service(create_address={"addressId": ADDRESS_ID})
        with patch.object(addresses, "audit_event"):
            run_async(addresses.store_address(build_request(), "user", ctx=build_ctx(), svc=svc))
        svc.create_address.assert_awaited_once_with("user", {})

    def test_store_address_audits_duplicate(self):
        svc = Mock()
        svc.create_address = AsyncMock(side_effect=DuplicateAddress())
        with patch.object(addresses, "audit_event") as audit_mock:
            with self.assertRaises(DuplicateAddress):
                run_async(addresses.store_address(build_request(b"{}"), "user", ctx=build_ctx(), svc=svc))
        audit_mock.assert_called_once()
        self.assertEqual(audit_mock.call_args.args[:2], ("address_create", "cli_1"))
        self.assertEqual(audit_mock.call_args.kwargs["outcome"], "failure")
        self.assertEqual(audit_mock.call_args.kwargs["status_code"], 409)

    def test_store_address_audits_malformed_body(self):
        svc = build_service(create_address={})
        with patch.object(addresses, "audit_event") as audit_mock:
            with self.assertRaises(ValidationFailed):
                run_async(addresses.store_address(build_request(b"{bad"), "user", ctx=build_ctx(), svc=svc))
        svc.create_address.assert_not_awaited()
        self.assertEqual(audit_mock.call_args.kwargs["outcome"], "failure")
        self.assertEqual(audit_mock.call_args.kwargs["status_code"], 400)

    def test_update_address(self):
        updated = {"addressId": ADDRESS_ID, "suburb": "Melbourne"}
        svc = build_service(update_address=updated)
        with patch.object(addresses, "audit_event") as audit_mock:
            resp = run_async(addresses.update_address(
                build_request(b'{"suburb": "Melbourne"}'), "user", ADDRESS_ID, ctx=build_ctx(), svc=svc,
            ))
        svc.update_address.assert_awaited_once_with("user", ADDRESS_ID, {"suburb": "Melbourne"})
        audit_mock.assert_called_once()
        self.assertEqual(resp["address"]["suburb"], "Melbourne")
        self.assertEqual(resp["addressId"], ADDRESS_ID)

    def test_update_address_audits_validation_failure(self):
        svc = Mock()
        svc.update_address = AsyncMock(side_effect=ValidationFailed("postcode must be exactly 4 digits"))
        with patch.object(addresses, "audit_event") as audit_mock:
            with self.assertRaises(ValidationFailed):
                run_async(addresses.update_address(
                    build_request(b'{"postcode": "1"}'), "user", ADDRESS_ID, ctx=build_ctx(), svc=svc,
                ))
        self.assertEqual(audit_mock.call_args.args[:2], ("address_update", "cli_1"))
        self.assertEqual(audit_mock.call_args.kwargs["outcome"], "failure")
        self.assertEqual(audit_mock.call_args.kwargs["address_id"], ADDRESS_ID)

    def test_delete_address(self):
        svc = build_service(delete_address=None)
        with patch.object(addresses, "audit_event") as audit_mock:
            resp = run_async(addresses.delete_address(build_request(), "user", ADDRESS_ID, ctx=build_ctx(), svc=svc))
        svc.delete_address.assert_awaited_once_with("user", ADDRESS_ID)
        audit_mock.assert_called_once()
        self.assertEqual(resp.status_code, 204)
        self.assertEqual(resp.body, b"")

    def test_delete_address_audits_storage_failure(self):
        svc = Mock()
        svc.delete_address = AsyncMock(side_effect=StorageError("boom"))
        with patch.object(addresses, "audit_event") as audit_mock:
            with self.assertRaises(StorageError):
                run_async(addresses.delete_address(build_request(), "user", ADDRESS_ID, ctx=build_ctx(), svc=svc))
        self.assertEqual(audit_mock.call_args.args[:2], ("address_delete", "cli_1"))
        self.assertEqual(audit_mock.call_args.kwargs["status_code"], 500)


if __name__ == "__main__":
    unittest.main()
