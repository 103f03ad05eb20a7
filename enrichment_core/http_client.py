"""
Outbound HTTP transport shared by all provider adapters.

Adapters call http_request() through their rate limiter. Non-2xx responses are
mapped onto the typed provider exceptions; transport failures are logged and
re-raised. Adapters are responsible for turning any of these into a failed
ProviderResponse.
"""

import logging
from typing import Any, Dict, Optional

import httpx

from .config import settings
from .errors import (
    AuthenticationError,
    EnrichmentProviderError,
    RateLimitError,
    ServiceUnavailableError,
)

logger = logging.getLogger(__name__)

_BODY_METHODS = {"post", "put", "patch"}


def _handle_response(response: httpx.Response, provider: Optional[str]) -> Any:
    """
    Extract the JSON payload from a response or raise a typed error.

    Raises:
        AuthenticationError: 401 / 403
        RateLimitError: 429
        ServiceUnavailableError: 503
        EnrichmentProviderError: any other non-2xx status
    """
    status = response.status_code
    if 200 <= status < 300:
        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError:
            logger.warning(f"Non-JSON response from {response.request.url}")
            return {}
    if status in (401, 403):
        raise AuthenticationError(f"Authentication failed ({status})", provider)
    if status == 429:
        retry_after = response.headers.get("retry-after")
        raise RateLimitError(
            f"Rate limit exceeded. Retry after {retry_after or 'unknown'} seconds",
            provider,
            retry_after=int(retry_after) if retry_after and retry_after.isdigit() else None,
        )
    if status == 503:
        raise ServiceUnavailableError("Service unavailable", provider)
    raise EnrichmentProviderError(
        f"HTTP {status}: {response.text[:200]}", provider, f"HTTP_{status}"
    )


async def http_request(
    method: str,
    url: str,
    *,
    headers: Optional[Dict[str, str]] = None,
    json_body: Optional[Any] = None,
    params: Optional[Dict[str, str]] = None,
    timeout: Optional[float] = None,
    client: Optional[httpx.AsyncClient] = None,
    provider: Optional[str] = None,
) -> Any:
    """
    Perform one outbound request and return the parsed payload.

    Args:
        method: HTTP method (get, post, put, patch, delete)
        url: Absolute URL
        headers: Request headers (auth headers included)
        json_body: JSON body, only sent for post/put/patch
        params: Query string parameters
        timeout: Timeout in seconds (defaults to HTTP_TIMEOUT_SECONDS)
        client: Shared AsyncClient; a short-lived one is opened when omitted
        provider: Provider name attached to raised errors

    Returns:
        Parsed JSON payload ({} for empty bodies)
    """
    method = method.lower()
    request_kwargs: Dict[str, Any] = {
        "headers": headers,
        "params": params,
        "timeout": timeout if timeout is not None else settings.HTTP_TIMEOUT_SECONDS,
    }
    if json_body is not None and method in _BODY_METHODS:
        request_kwargs["json"] = json_body

    try:
        if client is not None:
            response = await client.request(method.upper(), url, **request_kwargs)
            return _handle_response(response, provider)

        async with httpx.AsyncClient() as owned_client:
            response = await owned_client.request(method.upper(), url, **request_kwargs)
            return _handle_response(response, provider)
    except httpx.HTTPError as exc:
        logger.error(f"HTTP request failed: {method.upper()} {url}: {exc}")
        raise
