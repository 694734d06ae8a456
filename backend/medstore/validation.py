from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any

from .errors import InvalidInputError
from .time_utils import parse_iso_date


# Maximum price: Rs 99,99,999.99 (999,999,999 paise)
MAX_PRICE_PAISE = 999_999_999

# Ceiling for a tax rate in basis points (100%)
MAX_RATE_BPS = 10_000


@dataclass(frozen=True)
class FieldPolicy:
    """
    Central policy layer for one record type:
    - field_types: the coercion applied to each client-writable field
    - required_on_create: fields required for create
    - nullable: fields that may be explicitly set to null
    """
    field_types: dict[str, str]
    required_on_create: frozenset[str] = field(default_factory=frozenset)
    nullable: frozenset[str] = field(default_factory=frozenset)


def coerce_int(key: str, value: Any) -> int:
    # Already an int (but not bool which is a subclass of int)
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            raise InvalidInputError(f"{key} must be an integer")
        # Reject scientific notation (e.g., "1e15", "1E10")
        if "e" in stripped.lower():
            raise InvalidInputError(f"{key} must be a plain integer (scientific notation not allowed)")
        if "." in stripped:
            raise InvalidInputError(f"{key} must be an integer (no decimals)")
        try:
            return int(stripped)
        except ValueError:
            raise InvalidInputError(f"{key} must be an integer")
    if isinstance(value, float):
        raise InvalidInputError(f"{key} must be an integer, not a decimal")
    raise InvalidInputError(f"{key} must be an integer")


def coerce_bool(key: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in {"true", "1", "yes"}:
        return True
    if isinstance(value, str) and value.strip().lower() in {"false", "0", "no"}:
        return False
    raise InvalidInputError(f"{key} must be a boolean")


def coerce_date(key: str, value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            parsed = parse_iso_date(value)
        except ValueError:
            raise InvalidInputError(f"{key} must be an ISO-8601 date")
        if parsed is None:
            raise InvalidInputError(f"{key} must be an ISO-8601 date")
        return parsed
    raise InvalidInputError(f"{key} must be a date")


def coerce_str(key: str, value: Any) -> str:
    if not isinstance(value, (str, int)) or isinstance(value, bool):
        raise InvalidInputError(f"{key} must be a string")
    return str(value).strip()


_COERCERS = {
    "int": coerce_int,
    "bool": coerce_bool,
    "date": coerce_date,
    "str": coerce_str,
}


def validate_payload(*, payload: Any, policy: FieldPolicy, partial: bool) -> dict:
    """
    Validates + normalizes incoming data against a FieldPolicy.
    Returns a cleaned patch dict with only writable fields.

    partial=False: create semantics (enforce required_on_create)
    partial=True: patch semantics (validate only provided keys)
    """
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise InvalidInputError("Invalid payload")

    if not partial:
        missing = sorted(f for f in policy.required_on_create if f not in payload)
        if missing:
            raise InvalidInputError(f"Missing required fields: {', '.join(missing)}")

    for k in payload.keys():
        if k not in policy.field_types:
            raise InvalidInputError(f"Field not allowed: {k}")

    patch: dict = {}
    for k, raw in payload.items():
        if raw is None:
            if k not in policy.nullable:
                raise InvalidInputError(f"{k} cannot be null")
            patch[k] = None
            continue
        val = _COERCERS[policy.field_types[k]](k, raw)
        if isinstance(val, str) and val == "" and k not in policy.nullable:
            raise InvalidInputError(f"{k} cannot be blank")
        patch[k] = val

    return patch


def enforce_rules_medicine(patch: dict) -> None:
    """
    Business rules on medicine fields that type coercion alone does not capture.
    """
    if "price_paise" in patch:
        price = patch["price_paise"]
        if price < 0:
            raise InvalidInputError("price_paise must be >= 0")
        if price > MAX_PRICE_PAISE:
            raise InvalidInputError(f"price_paise cannot exceed {MAX_PRICE_PAISE}")
    for key in ("stock_quantity", "min_stock_level"):
        if key in patch and patch[key] < 0:
            raise InvalidInputError(f"{key} must be >= 0")


def enforce_rate_bps(rate_bps: Any) -> int:
    rate = coerce_int("gst_rate_bps", rate_bps)
    if rate < 0 or rate > MAX_RATE_BPS:
        raise InvalidInputError(f"gst_rate_bps must be between 0 and {MAX_RATE_BPS}")
    return rate
