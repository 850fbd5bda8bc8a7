from typing import Any, Optional

from rest_framework.response import Response


def _flatten(errors: Any, prefix: str = "") -> list:
    out = []
    if isinstance(errors, dict):
        for k, v in errors.items():
            out.extend(_flatten(v, f"{prefix}{k}."))
    elif isinstance(errors, (list, tuple)):
        for v in errors:
            out.extend(_flatten(v, prefix))
    else:
        out.append(f"{prefix.rstrip('.')}: {errors}" if prefix else str(errors))
    return out


def error_response(error: str, status: int, *, details: Optional[str] = None, **extra) -> Response:
    """JSON error envelope: {"error": ..., "details"?: ..., **extra}."""
    body = {"error": error}
    if details:
        body["details"] = details
    body.update(extra)
    return Response(body, status=status)


def validation_error(errors, message: str = "Missing required fields") -> Response:
    return error_response(message, 400, details="; ".join(_flatten(errors)))
