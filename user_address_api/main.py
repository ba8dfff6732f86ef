from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from user_address_api.core.logging import get_logger, setup_logging
from user_address_api.core.settings import S
from user_address_api.core.tables import Tables, build_tables
from user_address_api.errors import ApiError
from user_address_api.metrics import METRICS_ENABLED, metrics_endpoint, metrics_middleware, set_app_info
from user_address_api.routers.addresses import INVALID_JSON, router as addresses_router
from user_address_api.services.addresses import AddressService
from user_address_api.services.authorizer import Authorizer
from user_address_api.stores.addresses import AddressStore
from user_address_api.stores.clients import ClientStore

log = get_logger(__name__)


def build_address_store(tables: Tables) -> AddressStore:
    return AddressStore(
        tables.addresses,
        suburb_index=S.addresses_suburb_index,
        postcode_index=S.addresses_postcode_index,
    )


def _describe_request_error(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    err = errors[0]
    if err.get("type") == "json_invalid":
        return INVALID_JSON
    loc = ".".join(str(part) for part in err.get("loc", ()) if part != "body" and not isinstance(part, int))
    msg = err.get("msg", "Invalid request")
    return f"{loc}: {msg}" if loc else msg


def install_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(ApiError)
    async def api_error_handler(_: Request, exc: ApiError):
        return JSONResponse(status_code=exc.status_code, content=exc.to_body())

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(_: Request, exc: StarletteHTTPException):
        return JSONResponse(status_code=exc.status_code, content={"message": str(exc.detail)})

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(_: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=400,
            content={"message": "Validation failed", "error": _describe_request_error(exc)},
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        log.error(
            "Unhandled error",
            exc_info=exc,
            extra={"context": {"method": request.method, "path": request.url.path}},
        )
        return JSONResponse(status_code=500, content={"message": "Internal server error"})


def create_app(
    tables: Optional[Tables] = None,
    *,
    address_store: Optional[AddressStore] = None,
    client_store: Optional[ClientStore] = None,
) -> FastAPI:
    setup_logging(S.log_level, S.log_format)
    app = FastAPI(title="User Address API", version="1.0.0")

    if address_store is None or client_store is None:
        tables = tables or build_tables()
        address_store = address_store or build_address_store(tables)
        client_store = client_store or ClientStore(tables.clients)

    app.state.authorizer = Authorizer(client_store)
    app.state.address_service = AddressService(address_store)

    install_error_handlers(app)

    @app.get("/health")
    async def health() -> Dict[str, Any]:
        return {"ok": True, "service": "user-address-api", "region": S.aws_region}

    if METRICS_ENABLED:
        app.middleware("http")(metrics_middleware)
        set_app_info(app.title, app.version)
        app.get("/metrics")(metrics_endpoint)

    app.include_router(addresses_router)

    return app


app = create_app()
