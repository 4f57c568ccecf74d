from typing import Any


def success_response(**fields: Any) -> dict[str, Any]:
    return {"success": True, **fields}


def failure_response(message: str, **fields: Any) -> dict[str, Any]:
    return {"success": False, "message": message, **fields}
