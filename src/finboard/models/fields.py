"""Coercion helpers shared by the entity constructors.

Every helper raises :class:`~finboard.errors.ValidationError` naming the
offending field, so a rejected create/update never reaches the store.
"""

from __future__ import annotations

import math
import re
from datetime import date, datetime
from typing import Any, Mapping

from ..errors import ValidationError

_MISSING = object()

# 1.234,56 / 1234,56 / 1234.56 / 1234
_THOUSANDS_WITH_COMMA = re.compile(r"^\d{1,3}(?:\.\d{3})+(?:,\d+)?$")
_THOUSANDS_ONLY = re.compile(r"^\d{1,3}(?:\.\d{3})+$")


def parse_decimal(raw: str) -> float:
    """Parse a number written with either '.' or ',' as decimal separator.

    Dots followed by groups of three digits are read as thousands separators
    (``1.234,56`` and ``1.234`` are both one thousand and something).
    """

    text = raw.strip().replace(" ", "")
    if _THOUSANDS_WITH_COMMA.match(text) or _THOUSANDS_ONLY.match(text):
        text = text.replace(".", "")
    text = text.replace(",", ".")
    value = float(text)
    if not math.isfinite(value):
        raise ValueError(f"non-finite number: {raw!r}")
    return value


def _present(data: Mapping[str, Any], key: str) -> bool:
    value = data.get(key)
    return value is not None and not (isinstance(value, str) and not value.strip())


def require_text(data: Mapping[str, Any], key: str, *, default: Any = _MISSING) -> str:
    if not _present(data, key):
        if default is _MISSING:
            raise ValidationError(f"{key} is required", field=key)
        return default
    value = data[key]
    if not isinstance(value, str):
        raise ValidationError(f"{key} must be text", field=key)
    return value.strip()


def require_number(
    data: Mapping[str, Any],
    key: str,
    *,
    default: Any = _MISSING,
    minimum: float | None = None,
    positive: bool = False,
) -> float:
    """Return ``data[key]`` as a finite float, enforcing the given bounds."""

    if not _present(data, key):
        if default is _MISSING:
            raise ValidationError(f"{key} is required", field=key)
        return default

    value = data[key]
    if isinstance(value, bool):
        raise ValidationError(f"{key} must be a number", field=key)
    try:
        number = parse_decimal(value) if isinstance(value, str) else float(value)
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"{key} must be a number", field=key) from exc

    if not math.isfinite(number):
        raise ValidationError(f"{key} must be finite", field=key)
    if positive and number <= 0:
        raise ValidationError(f"{key} must be greater than zero", field=key)
    if minimum is not None and number < minimum:
        raise ValidationError(f"{key} must be at least {minimum}", field=key)
    return number


def require_int(
    data: Mapping[str, Any], key: str, *, default: Any = _MISSING, minimum: int | None = None
) -> int:
    if not _present(data, key):
        if default is _MISSING:
            raise ValidationError(f"{key} is required", field=key)
        return default

    value = data[key]
    if isinstance(value, bool):
        raise ValidationError(f"{key} must be a whole number", field=key)
    try:
        if isinstance(value, str):
            value = value.strip()
        number = int(value)
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"{key} must be a whole number", field=key) from exc
    if isinstance(value, float) and value != number:
        raise ValidationError(f"{key} must be a whole number", field=key)
    if minimum is not None and number < minimum:
        raise ValidationError(f"{key} must be at least {minimum}", field=key)
    return number


def require_date(data: Mapping[str, Any], key: str, *, default: Any = _MISSING) -> str:
    """Return an ISO ``YYYY-MM-DD`` string for ``data[key]``."""

    if not _present(data, key):
        if default is _MISSING:
            raise ValidationError(f"{key} is required", field=key)
        return default

    value = data[key]
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip()[:10]).isoformat()
        except ValueError as exc:
            raise ValidationError(f"{key} must be a YYYY-MM-DD date", field=key) from exc
    raise ValidationError(f"{key} must be a YYYY-MM-DD date", field=key)


def optional_bool(data: Mapping[str, Any], key: str, *, default: bool = False) -> bool:
    value = data.get(key)
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "on", "sim"}
    if isinstance(value, (int, float)):
        return bool(value)
    raise ValidationError(f"{key} must be true or false", field=key)


def reject_unknown(data: Mapping[str, Any], allowed: frozenset[str], entity: str) -> None:
    unknown = sorted(set(data) - allowed)
    if unknown:
        raise ValidationError(f"Unknown {entity} field(s): {', '.join(unknown)}", field=unknown[0])


__all__ = [
    "parse_decimal",
    "require_text",
    "require_number",
    "require_int",
    "require_date",
    "optional_bool",
    "reject_unknown",
]
