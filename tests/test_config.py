from __future__ import annotations

import pytest
from pydantic import ValidationError

from agentflow_bridge.config import Settings, ShopConfig


def _settings(**overrides) -> Settings:
    values = {
        "SHOP_B_DOMAIN": "shop-b.myshopify.com",
        "SHOP_B_STOREFRONT_TOKEN": "token_b",
        "SHOP_C_DOMAIN": "shop-c.myshopify.com",
        "SHOP_C_STOREFRONT_TOKEN": "token_c",
        "SHOP_PRIORITY": "B,C",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


def test_shops_follow_priority_order():
    shops = _settings(SHOP_PRIORITY="c, b").shops

    assert [shop.key for shop in shops] == ["C", "B"]
    assert shops[0] == ShopConfig(key="C", domain="shop-c.myshopify.com", storefront_access_token="token_c")


def test_shop_values_are_stripped_and_empty_shop_is_not_configured():
    shops = _settings(SHOP_C_DOMAIN="  ", SHOP_B_DOMAIN=" shop-b.myshopify.com ").shops

    assert shops[0].domain == "shop-b.myshopify.com"
    assert shops[0].is_configured is True
    assert shops[1].is_configured is False


def test_graphql_url_uses_storefront_endpoint():
    shop = ShopConfig(key="B", domain="shop-b.myshopify.com", storefront_access_token="token_b")

    assert shop.graphql_url("2024-10") == "https://shop-b.myshopify.com/api/2024-10/graphql.json"


@pytest.mark.parametrize("priority", ["", " , ", "B,X", "B,B"])
def test_invalid_priority_is_rejected(priority):
    with pytest.raises(ValidationError):
        _settings(SHOP_PRIORITY=priority)


def test_timeout_must_be_positive():
    with pytest.raises(ValidationError):
        _settings(SHOPIFY_REQUEST_TIMEOUT_SECONDS=0)


def test_allowed_origins_are_split_and_trimmed():
    settings = _settings(ALLOWED_ORIGINS="https://a.example/, https://b.example,,")

    assert settings.allowed_origins == ["https://a.example", "https://b.example"]
