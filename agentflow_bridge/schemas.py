from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

VARIANT_GID_PREFIX = "gid://shopify/ProductVariant/"


class CartAttribute(BaseModel):
    model_config = ConfigDict(frozen=True)

    key: str
    value: str


class CartLine(BaseModel):
    model_config = ConfigDict(frozen=True)

    quantity: int = Field(ge=1)
    merchandiseId: str
    sellingPlanId: str | None = None
    attributes: list[CartAttribute] = Field(default_factory=list)


class CartRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    lines: list[CartLine] = Field(default_factory=list)
    attributes: list[CartAttribute] = Field(default_factory=list)
    note: str = ""

    def to_variables(self) -> dict[str, Any]:
        return {
            "lines": [line.model_dump(exclude_none=True) for line in self.lines],
            "attributes": [attribute.model_dump() for attribute in self.attributes],
            "note": self.note,
        }


@dataclass(frozen=True)
class PayloadRejection:
    error: str
    status_code: int = 400


class ReloadMappingResponse(BaseModel):
    ok: bool
    count: int


class HealthResponse(BaseModel):
    ok: bool
    ts: int
