"""HTTPS availability probe."""
from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable

import httpx

from tidy_url.config import settings

logger = logging.getLogger(__name__)

# Takes the https:// URL to check, resolves to True when it is reachable
HttpsProbe = Callable[[str], Awaitable[bool]]


async def can_use_https(url: str, client: httpx.AsyncClient | None = None) -> bool:
    """HEAD the given https URL, following redirects. True on a 2xx answer."""
    if client is None:
        async with httpx.AsyncClient(headers={"User-Agent": settings.https_probe_user_agent}) as c:
            return await can_use_https(url, c)

    try:
        resp = await client.head(
            url,
            timeout=settings.https_probe_timeout_seconds,
            follow_redirects=True,
        )
    except httpx.HTTPError as e:
        logger.debug("HTTPS probe failed for %s: %s", url, e)
        return False

    logger.debug("HTTPS probe %s -> %d", url, resp.status_code)
    return resp.is_success
