from __future__ import annotations

import logging
from collections.abc import Sequence

from agentflow_bridge.config import ShopConfig
from agentflow_bridge.shopify_api import ShopifyApiClient

logger = logging.getLogger(__name__)


async def select_shop(*, shops: Sequence[ShopConfig], client: ShopifyApiClient) -> ShopConfig | None:
    """Return the first healthy shop in priority order.

    Shops are probed one at a time and probing stops at the first healthy
    one. Health is checked again on every call.
    """
    for shop in shops:
        if await client.probe_storefront(shop=shop):
            return shop
    logger.warning("shop_selector.no_shop_available", extra={"shops": [shop.key for shop in shops]})
    return None
