from __future__ import annotations

from dataclasses import dataclass

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

KNOWN_SHOP_KEYS = ("B", "C")


@dataclass(frozen=True)
class ShopConfig:
    key: str
    domain: str
    storefront_access_token: str

    @property
    def is_configured(self) -> bool:
        return bool(self.domain) and bool(self.storefront_access_token)

    def graphql_url(self, api_version: str) -> str:
        return f"https://{self.domain}/api/{api_version}/graphql.json"


class Settings(BaseSettings):
    SHOP_B_DOMAIN: str = ""
    SHOP_B_STOREFRONT_TOKEN: str = ""
    SHOP_C_DOMAIN: str = ""
    SHOP_C_STOREFRONT_TOKEN: str = ""
    SHOP_PRIORITY: str = "B,C"

    SHOPIFY_STOREFRONT_API_VERSION: str = "2024-10"
    SHOPIFY_REQUEST_TIMEOUT_SECONDS: float = 10.0

    MAPPING_FILE_PATH: str = "./mapping.json"
    ALLOWED_ORIGINS: str = "https://merveillesparis.fr,https://www.merveillesparis.fr"
    BRIDGE_ADMIN_TOKEN: str | None = None
    MAX_BODY_BYTES: int = 200 * 1024

    HOST: str = "0.0.0.0"
    PORT: int = 8080
    LOG_LEVEL: str = "INFO"

    @field_validator(
        "SHOP_B_DOMAIN",
        "SHOP_B_STOREFRONT_TOKEN",
        "SHOP_C_DOMAIN",
        "SHOP_C_STOREFRONT_TOKEN",
    )
    @classmethod
    def strip_shop_values(cls, value: str) -> str:
        return value.strip()

    @field_validator("SHOP_PRIORITY")
    @classmethod
    def validate_priority(cls, value: str) -> str:
        keys = [key.strip().upper() for key in value.split(",") if key.strip()]
        if not keys:
            raise ValueError("SHOP_PRIORITY must include at least one shop key")
        unknown = [key for key in keys if key not in KNOWN_SHOP_KEYS]
        if unknown:
            raise ValueError(f"SHOP_PRIORITY contains unknown shop keys: {', '.join(unknown)}")
        if len(set(keys)) != len(keys):
            raise ValueError("SHOP_PRIORITY must not repeat a shop key")
        return ",".join(keys)

    @model_validator(mode="after")
    def validate_limits(self) -> "Settings":
        if self.SHOPIFY_REQUEST_TIMEOUT_SECONDS <= 0:
            raise ValueError("SHOPIFY_REQUEST_TIMEOUT_SECONDS must be positive")
        if self.MAX_BODY_BYTES <= 0:
            raise ValueError("MAX_BODY_BYTES must be positive")
        return self

    @property
    def shops(self) -> tuple[ShopConfig, ...]:
        configured = {
            "B": ShopConfig(
                key="B",
                domain=self.SHOP_B_DOMAIN,
                storefront_access_token=self.SHOP_B_STOREFRONT_TOKEN,
            ),
            "C": ShopConfig(
                key="C",
                domain=self.SHOP_C_DOMAIN,
                storefront_access_token=self.SHOP_C_STOREFRONT_TOKEN,
            ),
        }
        return tuple(configured[key] for key in self.SHOP_PRIORITY.split(","))

    @property
    def allowed_origins(self) -> list[str]:
        return [origin.strip().rstrip("/") for origin in self.ALLOWED_ORIGINS.split(",") if origin.strip()]

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


settings = Settings()
