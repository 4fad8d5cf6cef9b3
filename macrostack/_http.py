"""Shared HTTP helpers for every macrostack adapter.

Provides the one retrying GET used by all providers plus URL/exception
sanitisation so that API keys are never logged in plain text,
regardless of which adapter raises the error.
"""

from __future__ import annotations

import json
import logging
import re
import ssl
import time
from typing import Any

import certifi
import httpx

from .config import Config
from .error_taxonomy import PayloadError

logger = logging.getLogger(__name__)

# Regex to strip API keys/tokens from URLs before logging.
_TOKEN_RE = re.compile(r"(apikey|api_key|token|key)=[^&\s]+", re.IGNORECASE)

# Yahoo rejects requests without a browser-like agent.
DEFAULT_HEADERS: dict[str, str] = {
    "User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36",
    "Accept": "application/json",
}

DEFAULT_TIMEOUT_S: float = 15.0
DEFAULT_MAX_ATTEMPTS: int = 3
DEFAULT_BACKOFF_STEP_S: float = 2.0


def _sanitize_url(url: str) -> str:
    """Remove apikey/token query params from a URL for safe logging."""
    return _TOKEN_RE.sub(r"\1=***", url)


def _sanitize_exc(exc: BaseException) -> str:
    """Strip API keys/tokens from exception text for safe logging."""
    return _TOKEN_RE.sub(r"\1=***", str(exc))


def build_client(cfg: Config) -> httpx.Client:
    """Return the synchronous client shared by all adapters of one run."""
    # Cached once per run; avoids re-parsing the CA bundle on every request.
    ssl_ctx = ssl.create_default_context(cafile=certifi.where())
    return httpx.Client(
        timeout=cfg.http_timeout_s,
        headers=DEFAULT_HEADERS,
        verify=ssl_ctx,
        follow_redirects=True,
    )


def fetch_with_retry(
    client: httpx.Client,
    url: str,
    *,
    params: dict[str, Any] | None = None,
    headers: dict[str, str] | None = None,
    timeout: float | None = None,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    backoff_step: float = DEFAULT_BACKOFF_STEP_S,
) -> httpx.Response:
    """GET *url*, retrying transport failures with linear backoff.

    The fixed ``User-Agent`` and the 15 s timeout are applied first;
    *headers* and *timeout* supplied by the caller win on conflict.

    Only transport failures (connect errors, timeouts, broken reads) are
    retried, sleeping ``attempt * backoff_step`` seconds between tries.
    An HTTP error status is a received answer: it is returned as-is so
    the caller can inspect ``is_success``/``status_code``.  After the
    last failed attempt the transport error propagates.
    """
    attempts = max(int(max_attempts), 1)
    merged_headers = {**DEFAULT_HEADERS, **(headers or {})}
    effective_timeout = DEFAULT_TIMEOUT_S if timeout is None else timeout

    for attempt in range(1, attempts + 1):
        try:
            return client.get(
                url,
                params=params,
                headers=merged_headers,
                timeout=effective_timeout,
            )
        except httpx.TransportError as exc:
            if attempt >= attempts:
                logger.warning(
                    "Giving up on %s after %d attempts: %s",
                    _sanitize_url(url), attempts, _sanitize_exc(exc),
                )
                raise
            wait = attempt * backoff_step
            logger.warning(
                "Attempt %d/%d failed for %s (%s: %s) – retrying in %.1fs",
                attempt, attempts, _sanitize_url(url),
                type(exc).__name__, _sanitize_exc(exc), wait,
            )
            time.sleep(wait)
    # range() is never empty, the loop either returns or raises.
    raise RuntimeError(f"no attempt made for {_sanitize_url(url)}")


def fetch_for(cfg: Config, client: httpx.Client, url: str, **kwargs: Any) -> httpx.Response:
    """:func:`fetch_with_retry` with the attempt/backoff/timeout of *cfg*."""
    kwargs.setdefault("timeout", cfg.http_timeout_s)
    return fetch_with_retry(
        client,
        url,
        max_attempts=cfg.http_max_attempts,
        backoff_step=cfg.http_backoff_step_s,
        **kwargs,
    )


def require_ok(r: httpx.Response, source: str) -> httpx.Response:
    """Raise :class:`PayloadError` unless *r* carries a 2xx status."""
    if not r.is_success:
        raise PayloadError(
            f"{source} answered HTTP {r.status_code} "
            f"({_sanitize_url(str(r.request.url))})",
            source=source,
        )
    return r


def safe_json(r: httpx.Response, source: str) -> Any:
    """Parse a successful JSON response; raise PayloadError with sanitized URL on failure."""
    require_ok(r, source)
    ct = r.headers.get("content-type", "")
    try:
        return r.json()
    except (json.JSONDecodeError, ValueError):
        raise PayloadError(
            f"{source} returned non-JSON (content-type={ct!r}, "
            f"status={r.status_code}, url={_sanitize_url(str(r.request.url))})",
            source=source,
        ) from None
