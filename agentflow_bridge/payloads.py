"""Inbound bridge payload handling.

The storefront posts either a JSON object or an HTML form whose ``payload``
field holds that JSON object as a string. Parsing only checks the overall
shape; normalization then turns whatever the client sent into a cart input
the Storefront API accepts, coercing or dropping bad fields instead of
failing.
"""

from __future__ import annotations

import json
import math
import re
from collections.abc import Mapping
from typing import Any

from agentflow_bridge.schemas import (
    VARIANT_GID_PREFIX,
    CartAttribute,
    CartLine,
    CartRequest,
    PayloadRejection,
)

INVALID_PAYLOAD = "invalid payload"
LINES_MISSING = "lines missing"

_GID_PREFIX = "gid://"
_DECIMAL_RE = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


def parse_bridge_body(body: Any) -> dict[str, Any] | PayloadRejection:
    if isinstance(body, Mapping) and isinstance(body.get("payload"), str):
        try:
            body = json.loads(body["payload"])
        except (ValueError, RecursionError):
            return PayloadRejection(error=INVALID_PAYLOAD)

    if not isinstance(body, Mapping):
        return PayloadRejection(error=LINES_MISSING)
    lines = body.get("lines")
    if not isinstance(lines, list) or not lines:
        return PayloadRejection(error=LINES_MISSING)
    return dict(body)


def stringify_scalar(value: Any) -> str:
    # Matches how the storefront's JavaScript renders the same values.
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def to_variant_gid(raw_id: Any) -> str:
    value = stringify_scalar(raw_id) if raw_id else ""
    if value.startswith(_GID_PREFIX):
        return value
    return f"{VARIANT_GID_PREFIX}{value}"


def coerce_quantity(raw_quantity: Any) -> int:
    if isinstance(raw_quantity, bool):
        number = float(raw_quantity)
    elif isinstance(raw_quantity, int):
        return raw_quantity if raw_quantity >= 1 else 1
    elif isinstance(raw_quantity, float):
        number = raw_quantity
    elif isinstance(raw_quantity, str):
        cleaned = raw_quantity.strip()
        if not _DECIMAL_RE.fullmatch(cleaned):
            return 1
        number = float(cleaned)
    else:
        return 1

    if not math.isfinite(number):
        return 1
    quantity = int(number)
    return quantity if quantity >= 1 else 1


def coerce_attributes(raw: Any) -> list[CartAttribute]:
    """Keep string, number and boolean values; drop nulls, objects and arrays."""
    if not isinstance(raw, Mapping):
        return []
    attributes: list[CartAttribute] = []
    for key, value in raw.items():
        if value is None:
            continue
        if not isinstance(value, (str, int, float)):
            continue
        attributes.append(CartAttribute(key=str(key), value=stringify_scalar(value)))
    return attributes


def normalize_line(raw_line: Any) -> CartLine:
    if not isinstance(raw_line, Mapping):
        raw_line = {}
    selling_plan = raw_line.get("selling_plan")
    return CartLine(
        quantity=coerce_quantity(raw_line.get("quantity")),
        merchandiseId=to_variant_gid(raw_line.get("id")),
        sellingPlanId=stringify_scalar(selling_plan) if selling_plan else None,
        attributes=coerce_attributes(raw_line.get("properties")),
    )


def normalize_payload(payload: Any) -> CartRequest:
    if not isinstance(payload, Mapping):
        payload = {}
    raw_lines = payload.get("lines")
    if not isinstance(raw_lines, list):
        raw_lines = []
    note = payload.get("note")
    if not isinstance(note, (str, int, float)):
        note = None
    return CartRequest(
        lines=[normalize_line(raw_line) for raw_line in raw_lines],
        attributes=coerce_attributes(payload.get("attributes")),
        note=stringify_scalar(note) if note else "",
    )
