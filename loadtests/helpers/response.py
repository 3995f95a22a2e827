"""Turn Storefront API error bodies into one-line messages for Locust.

Bodies the API can return on failure:

- Checkout errors (404/409/422/503): {"error": "msg", "error_type": "InsufficientStock"}
- Protean validation (400): {"error": {"field": ["msg"]}}
- Identity/capability checks (401/403): {"detail": "msg"}
- Request schema validation (422): {"detail": [{"loc": [...], "msg": "..."}]}
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from requests import Response

_MAX_LEN = 300


def _schema_errors(details: list) -> str:
    parts = []
    for err in details:
        loc = ".".join(str(p) for p in err.get("loc", []))
        msg = err.get("msg", str(err))
        parts.append(f"{loc}: {msg}" if loc else msg)
    return " | ".join(parts)


def extract_error_detail(response: Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return (getattr(response, "text", "") or "")[:_MAX_LEN] or "(empty response body)"

    if not isinstance(body, dict):
        return str(body)[:_MAX_LEN]

    if "error_type" in body:
        return f"{body['error_type']}: {body.get('error', '')}"

    error = body.get("error")
    if isinstance(error, dict):
        return " | ".join(f"{field}: {msg}" for field, msg in error.items())
    if error is not None:
        return str(error)

    detail = body.get("detail")
    if isinstance(detail, list):
        return _schema_errors(detail)
    if detail is not None:
        return str(detail)

    return str(body)[:_MAX_LEN]
