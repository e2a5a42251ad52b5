from __future__ import annotations

import logging
from typing import Any

import httpx

from agentflow_bridge.config import ShopConfig, settings
from agentflow_bridge.schemas import CartRequest

logger = logging.getLogger(__name__)

_HEALTH_QUERY = "query { shop { name } }"

_CART_CREATE_MUTATION = """
mutation CreateCart($lines: [CartLineInput!], $attributes: [AttributeInput!], $note: String) {
    cartCreate(input: { lines: $lines, attributes: $attributes, note: $note }) {
        cart {
            id
            checkoutUrl
        }
        userErrors {
            field
            message
        }
    }
}
"""


class ShopifyApiError(RuntimeError):
    def __init__(self, *, message: str, status_code: int = 502) -> None:
        super().__init__(message)
        self.status_code = status_code


class ShopifyTransportError(ShopifyApiError):
    pass


class CartUserErrorsError(ShopifyApiError):
    def __init__(self, *, user_errors: list[dict[str, Any]]) -> None:
        messages = "; ".join(str(error.get("message")) for error in user_errors)
        super().__init__(message=messages, status_code=409)
        self.user_errors = user_errors


class MissingCheckoutUrlError(ShopifyApiError):
    pass


class ShopifyApiClient:
    def __init__(self, *, transport: httpx.AsyncBaseTransport | None = None) -> None:
        self._timeout = settings.SHOPIFY_REQUEST_TIMEOUT_SECONDS
        self._transport = transport
        self._api_version = settings.SHOPIFY_STOREFRONT_API_VERSION

    async def probe_storefront(self, *, shop: ShopConfig) -> bool:
        if not shop.is_configured:
            return False
        try:
            response = await self._post(
                url=shop.graphql_url(self._api_version),
                payload={"query": _HEALTH_QUERY},
                headers=self._storefront_headers(shop),
            )
        except (httpx.HTTPError, httpx.InvalidURL, UnicodeError) as exc:
            logger.warning(
                "storefront.probe_failed",
                extra={"shop": shop.key, "error": str(exc)},
            )
            return False

        if not response.is_success:
            logger.warning(
                "storefront.probe_unhealthy",
                extra={"shop": shop.key, "status_code": response.status_code},
            )
            return False
        return True

    async def create_cart(self, *, shop: ShopConfig, cart_request: CartRequest) -> str:
        payload = {"query": _CART_CREATE_MUTATION, "variables": cart_request.to_variables()}
        response = await self._storefront_graphql(shop=shop, payload=payload)

        create_data = response.get("cartCreate") or {}
        if not isinstance(create_data, dict):
            raise ShopifyTransportError(message="cartCreate response must be an object")
        user_errors = create_data.get("userErrors") or []
        if user_errors:
            raise CartUserErrorsError(
                user_errors=[error if isinstance(error, dict) else {"message": error} for error in user_errors]
            )

        cart = create_data.get("cart") or {}
        checkout_url = cart.get("checkoutUrl") if isinstance(cart, dict) else None
        if not isinstance(checkout_url, str) or not checkout_url:
            raise MissingCheckoutUrlError(message="cartCreate response is missing cart.checkoutUrl")
        return checkout_url

    async def _storefront_graphql(self, *, shop: ShopConfig, payload: dict[str, Any]) -> dict[str, Any]:
        response = await self._post_json(
            url=shop.graphql_url(self._api_version),
            payload=payload,
            headers=self._storefront_headers(shop),
        )
        data = response.get("data")
        errors = response.get("errors")
        if errors:
            raise ShopifyTransportError(message=f"Storefront GraphQL errors: {errors}")
        if not isinstance(data, dict):
            raise ShopifyTransportError(message="Storefront GraphQL response is missing data")
        return data

    @staticmethod
    def _storefront_headers(shop: ShopConfig) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            "X-Shopify-Storefront-Access-Token": shop.storefront_access_token,
        }

    async def _post(
        self,
        *,
        url: str,
        payload: dict[str, Any],
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
            return await client.post(url, json=payload, headers=headers)

    async def _post_json(
        self,
        *,
        url: str,
        payload: dict[str, Any],
        headers: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        try:
            response = await self._post(url=url, payload=payload, headers=headers)
        except (httpx.HTTPError, httpx.InvalidURL, UnicodeError) as exc:
            raise ShopifyTransportError(message=f"Network error while calling Shopify: {exc}") from exc

        if response.status_code >= 400:
            raise ShopifyTransportError(
                message=f"Shopify API call failed ({response.status_code}): {response.text}",
            )

        try:
            body = response.json()
        except ValueError as exc:
            raise ShopifyTransportError(message="Shopify API returned invalid JSON") from exc

        if not isinstance(body, dict):
            raise ShopifyTransportError(message="Shopify API response must be a JSON object")
        return body
