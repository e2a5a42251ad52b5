from __future__ import annotations

import json
import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import Depends, FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse, RedirectResponse

from agentflow_bridge.config import settings
from agentflow_bridge.mapping import MappingStore
from agentflow_bridge.payloads import INVALID_PAYLOAD, normalize_payload, parse_bridge_body
from agentflow_bridge.schemas import HealthResponse, PayloadRejection, ReloadMappingResponse
from agentflow_bridge.security import apply_hygiene_headers, require_admin_token
from agentflow_bridge.shop_selector import select_shop
from agentflow_bridge.shopify_api import ShopifyApiClient, ShopifyApiError

logger = logging.getLogger(__name__)

NO_SHOP_AVAILABLE = "no shop available"
INTERNAL_ERROR = "internal error"
PAYLOAD_TOO_LARGE = "payload too large"

_FORM_CONTENT_TYPES = {"application/x-www-form-urlencoded", "multipart/form-data"}

mapping_store = MappingStore(settings.MAPPING_FILE_PATH)
shopify_api = ShopifyApiClient()


@asynccontextmanager
async def _app_lifespan(_app: FastAPI) -> AsyncIterator[None]:
    mapping_store.reload()
    logger.info(
        "bridge.started",
        extra={"shops": [shop.key for shop in settings.shops], "port": settings.PORT},
    )
    yield


app = FastAPI(
    title="Agentflow Bridge",
    default_response_class=ORJSONResponse,
    lifespan=_app_lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type"],
    expose_headers=["Location"],
)


@app.middleware("http")
async def add_hygiene_headers(request: Request, call_next):
    response = await call_next(request)
    apply_hygiene_headers(response.headers)
    return response


@app.exception_handler(Exception)
async def unhandled_exception_handler(_request: Request, exc: Exception) -> ORJSONResponse:
    logger.exception("Unhandled server exception", exc_info=exc)
    response = _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, str(exc) or INTERNAL_ERROR)
    # Served outside the middleware stack.
    apply_hygiene_headers(response.headers)
    return response


def _error_response(status_code: int, message: str) -> ORJSONResponse:
    return ORJSONResponse(status_code=status_code, content={"error": message})


async def _read_bridge_body(request: Request) -> Any:
    raw = await request.body()
    if len(raw) > settings.MAX_BODY_BYTES:
        return PayloadRejection(error=PAYLOAD_TOO_LARGE, status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE)

    content_type = request.headers.get("content-type", "").split(";")[0].strip().lower()
    if content_type in _FORM_CONTENT_TYPES:
        form = await request.form()
        return {key: value for key, value in form.items()}

    if not raw.strip():
        return {}
    try:
        return json.loads(raw)
    except (ValueError, RecursionError):
        return PayloadRejection(error=INVALID_PAYLOAD)


@app.get("/health", response_model=HealthResponse)
def health() -> HealthResponse:
    return HealthResponse(ok=True, ts=int(time.time() * 1000))


@app.get("/mapping.json")
def get_mapping() -> dict[str, Any]:
    return dict(mapping_store.mapping)


@app.post(
    "/admin/reload-mapping",
    response_model=ReloadMappingResponse,
    dependencies=[Depends(require_admin_token)],
)
def reload_mapping() -> ReloadMappingResponse:
    count = mapping_store.reload()
    return ReloadMappingResponse(ok=True, count=count)


@app.post("/bridge")
async def bridge(request: Request):
    body = await _read_bridge_body(request)
    if isinstance(body, PayloadRejection):
        return _error_response(body.status_code, body.error)

    payload = parse_bridge_body(body)
    if isinstance(payload, PayloadRejection):
        return _error_response(payload.status_code, payload.error)

    shop = await select_shop(shops=settings.shops, client=shopify_api)
    if shop is None:
        return _error_response(status.HTTP_503_SERVICE_UNAVAILABLE, NO_SHOP_AVAILABLE)

    try:
        cart_request = normalize_payload(payload)
        checkout_url = await shopify_api.create_cart(shop=shop, cart_request=cart_request)
    except ShopifyApiError as exc:
        logger.warning(
            "bridge.checkout_failed",
            extra={"shop": shop.key, "error": str(exc), "error_kind": type(exc).__name__},
        )
        return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, str(exc) or INTERNAL_ERROR)

    logger.info(
        "bridge.checkout_created",
        extra={"shop": shop.key, "line_count": len(cart_request.lines)},
    )
    # Full-page form navigation, so a plain redirect needs no CORS exposure.
    return RedirectResponse(url=checkout_url, status_code=status.HTTP_302_FOUND)


def run() -> None:
    import uvicorn

    logging.basicConfig(level=settings.LOG_LEVEL.upper())
    uvicorn.run(
        "agentflow_bridge.main:app",
        host=settings.HOST,
        port=settings.PORT,
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    run()
