"""Response Envelope — the uniform {success, message?, data?, count?} wrapper.

Invariants:
    - success is always present; message/data/count only when meaningful
    - count accompanies list payloads and equals len(data)
"""

from typing import Any


def envelope(
    data: Any = None, message: str | None = None, count: int | None = None,
) -> dict:
    body: dict[str, Any] = {"success": True}
    if message is not None:
        body["message"] = message
    if count is not None:
        body["count"] = count
    if data is not None:
        body["data"] = data
    return body


def list_envelope(items: list, message: str | None = None) -> dict:
    return envelope(data=items, message=message, count=len(items))
