from __future__ import annotations

from typing import Any

import httpx

from promptwire.errors import BackendError, TransportErrorKind

_BODY_PREVIEW = 300

# 529 is Anthropic's "overloaded" status.
_THROTTLED = (429, 529)


def classify_status(response: httpx.Response, *, provider: str) -> None:
    """Raise a classified BackendError for any non-2xx response."""
    status = response.status_code
    if status < 400:
        return
    body = response.text[:_BODY_PREVIEW]
    if status in (401, 403):
        kind = TransportErrorKind.AUTH
    elif status in _THROTTLED:
        kind = TransportErrorKind.RATE_LIMITED
    else:
        kind = TransportErrorKind.PROVIDER_REJECTED
    raise BackendError(kind, body, status_code=status, provider=provider)


def network_error(exc: httpx.HTTPError, *, provider: str) -> BackendError:
    return BackendError(
        TransportErrorKind.NETWORK,
        f"{type(exc).__name__}: {exc}",
        provider=provider,
    )


def decode_json(response: httpx.Response, *, provider: str) -> Any:
    try:
        return response.json()
    except ValueError as exc:
        raise BackendError(
            TransportErrorKind.MALFORMED_RESPONSE,
            f"response body is not JSON: {exc}",
            status_code=response.status_code,
            provider=provider,
        ) from exc


async def post_json(
    client: httpx.AsyncClient,
    url: str,
    payload: dict[str, Any],
    *,
    provider: str,
    headers: dict[str, str] | None = None,
) -> Any:
    try:
        r = await client.post(url, json=payload, headers=headers)
    except httpx.HTTPError as exc:
        raise network_error(exc, provider=provider) from exc
    classify_status(r, provider=provider)
    return decode_json(r, provider=provider)


def malformed(detail: str, *, provider: str) -> BackendError:
    return BackendError(TransportErrorKind.MALFORMED_RESPONSE, detail, provider=provider)


def unsupported_model(model: Any, *, provider: str) -> BackendError:
    return BackendError(
        TransportErrorKind.PROVIDER_REJECTED,
        f"backend does not support selected model: {model!r}",
        provider=provider,
    )
