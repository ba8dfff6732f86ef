from __future__ import annotations

from fastapi import Request

from user_address_api.services.authorizer import AuthDecision, Authorizer


def get_authorizer(request: Request) -> Authorizer:
    return request.app.state.authorizer


def request_resource(request: Request) -> str:
    return f"{request.method} {request.url.path}"


async def require_client(request: Request) -> AuthDecision:
    """
    Gate for every /v1 route: Authorization: Basic base64(clientId:clientSecret).

    The resulting decision names the client as principal; any failure is a
    plain 401 {"message": "Unauthorized"}.
    """
    authorizer = get_authorizer(request)
    token = request.headers.get("authorization")
    return await authorizer.authorize(token, request_resource(request))
