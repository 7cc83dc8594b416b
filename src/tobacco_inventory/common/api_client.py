import logging
from typing import Any, Optional

import httpx
from fastapi import HTTPException, status

from ..core import config

logger = logging.getLogger(__name__)


async def _get_json(client: httpx.AsyncClient, url: str, error_prefix: str) -> Any:
    try:
        response = await client.get(url, headers={"Accept": "application/json"})
        response.raise_for_status()
        return response.json()
    except httpx.HTTPStatusError as e:
        reason = f"HTTP error! status: {e.response.status_code}"
    except httpx.HTTPError as e:
        reason = str(e) or e.__class__.__name__
    except ValueError as e:  # body is not JSON
        reason = f"invalid JSON body ({e})"

    logger.error(f"GET {url} failed: {reason}")
    raise HTTPException(
        status_code=status.HTTP_502_BAD_GATEWAY,
        detail=f"{error_prefix}: {reason}",
    )


async def fetch_json(
    url: str, error_prefix: str, client: Optional[httpx.AsyncClient] = None
) -> Any:
    """
    Performs a single GET request and returns the decoded JSON body.

    There is no retry and no caching: any transport error, non-2xx status or
    undecodable body is turned into a 502 HTTPException whose detail starts
    with ``error_prefix``.

    Args:
        url: The endpoint to call.
        error_prefix: Human readable prefix for the error detail.
        client: An existing client to reuse; a short-lived one is created otherwise.
    """
    logger.debug(f"Fetching {url}")
    if client is None:
        async with httpx.AsyncClient(timeout=config.REQUEST_TIMEOUT_SECONDS) as owned_client:
            return await _get_json(owned_client, url, error_prefix)
    return await _get_json(client, url, error_prefix)
