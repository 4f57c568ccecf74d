from __future__ import annotations

import math
from collections.abc import Iterable
from typing import Any

from fastapi.encoders import jsonable_encoder

from school_service.schemas import SchoolCreateRequest

_BODY_FIELDS = tuple(SchoolCreateRequest.model_fields)
_MISSING_BODY_MESSAGE = "Field required"


def _field_error(location: str, path: str, msg: str, value: Any = None, *, has_value: bool = False) -> dict[str, Any]:
    error: dict[str, Any] = {"type": "field", "location": location, "path": path, "msg": msg}
    if has_value:
        # NaN and Infinity are not representable in a JSON response.
        error["value"] = str(value) if isinstance(value, float) and not math.isfinite(value) else value
    return error


def field_errors(errors: Iterable[dict[str, Any]]) -> list[dict[str, Any]]:
    """Flatten pydantic request errors into one entry per offending field.

    A body that is absent or not a JSON object fails as a whole; it is
    reported as every required body field missing.
    """
    flattened: list[dict[str, Any]] = []
    for err in errors:
        loc = tuple(err.get("loc", ()))
        location = str(loc[0]) if loc else "request"
        if location == "body" and (len(loc) == 1 or err.get("type") == "json_invalid"):
            flattened.extend(_field_error("body", name, _MISSING_BODY_MESSAGE) for name in _BODY_FIELDS)
            continue
        path = ".".join(str(part) for part in loc[1:])
        has_value = err.get("type") != "missing"
        flattened.append(
            _field_error(location, path, str(err.get("msg", "Invalid value")), err.get("input"), has_value=has_value)
        )
    return jsonable_encoder(_dedupe(flattened))


def _dedupe(errors: list[dict[str, Any]]) -> list[dict[str, Any]]:
    seen: set[tuple[str, str, str]] = set()
    unique: list[dict[str, Any]] = []
    for error in errors:
        key = (error["location"], error["path"], error["msg"])
        if key in seen:
            continue
        seen.add(key)
        unique.append(error)
    return unique
