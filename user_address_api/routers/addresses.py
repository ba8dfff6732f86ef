from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, Depends, Query, Request, Response

from user_address_api.auth.deps import require_client
from user_address_api.errors import ApiError, ValidationFailed
from user_address_api.models import AddressCreatedResp, AddressListResp, AddressUpdatedResp, ErrorResp
from user_address_api.services.addresses import AddressService
from user_address_api.services.audit import audit_event
from user_address_api.services.authorizer import AuthDecision

INVALID_JSON = "Invalid JSON body"

router = APIRouter(
    prefix="/v1/users/{user_id}/addresses",
    tags=["addresses"],
    responses={400: {"model": ErrorResp}, 401: {"model": ErrorResp}, 500: {"model": ErrorResp}},
)


def get_address_service(request: Request) -> AddressService:
    return request.app.state.address_service


async def read_json_body(req: Request) -> Any:
    """JSON request body, read only once the client has been authorized.

    An empty body reads as ``{}``.
    """
    raw = await req.body()
    if not raw.strip():
        return {}
    try:
        return await req.json()
    except ValueError as exc:
        raise ValidationFailed(error=INVALID_JSON) from exc


def audit_failure(event: str, ctx: AuthDecision, req: Request, exc: ApiError, **fields: Any) -> None:
    audit_event(event, ctx.principal_id, req, outcome="failure", status_code=exc.status_code, **fields)


@router.get("", response_model=AddressListResp, response_model_exclude_none=True)
async def get_addresses(
    user_id: str,
    suburb: Optional[str] = Query(default=None),
    postcode: Optional[str] = Query(default=None),
    ctx: AuthDecision = Depends(require_client),
    svc: AddressService = Depends(get_address_service),
):
    addresses = await svc.list_addresses(user_id, suburb=suburb, postcode=postcode)
    return {"message": "Addresses retrieved successfully", "addresses": addresses}


@router.post(
    "",
    status_code=201,
    response_model=AddressCreatedResp,
    response_model_exclude_none=True,
    responses={409: {"model": ErrorResp}},
)
async def store_address(
    req: Request,
    user_id: str,
    ctx: AuthDecision = Depends(require_client),
    svc: AddressService = Depends(get_address_service),
):
    try:
        address = await svc.create_address(user_id, await read_json_body(req))
    except ApiError as exc:
        audit_failure("address_create", ctx, req, exc, user_id=user_id)
        raise
    audit_event("address_create", ctx.principal_id, req, outcome="success",
                user_id=user_id, address_id=address["addressId"])
    return {"message": "Address created successfully", "addressId": address["addressId"], "address": address}


@router.patch("/{address_id}", response_model=AddressUpdatedResp, response_model_exclude_none=True)
async def update_address(
    req: Request,
    user_id: str,
    address_id: str,
    ctx: AuthDecision = Depends(require_client),
    svc: AddressService = Depends(get_address_service),
):
    try:
        address = await svc.update_address(user_id, address_id, await read_json_body(req))
    except ApiError as exc:
        audit_failure("address_update", ctx, req, exc, user_id=user_id, address_id=address_id)
        raise
    audit_event("address_update", ctx.principal_id, req, outcome="success",
                user_id=user_id, address_id=address_id)
    return {"message": "Address updated successfully", "address": address, "addressId": address_id}


@router.delete("/{address_id}", status_code=204, response_class=Response)
async def delete_address(
    req: Request,
    user_id: str,
    address_id: str,
    ctx: AuthDecision = Depends(require_client),
    svc: AddressService = Depends(get_address_service),
):
    try:
        await svc.delete_address(user_id, address_id)
    except ApiError as exc:
        audit_failure("address_delete", ctx, req, exc, user_id=user_id, address_id=address_id)
        raise
    audit_event("address_delete", ctx.principal_id, req, outcome="success",
                user_id=user_id, address_id=address_id)
    return Response(status_code=204)
