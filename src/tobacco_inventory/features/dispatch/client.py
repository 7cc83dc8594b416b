import logging
from typing import List, Optional

import httpx
from fastapi import HTTPException, status
from pydantic import ValidationError

from ...common.api_client import fetch_json
from ...core import config
from .schemas import DispatchRecord

logger = logging.getLogger(__name__)

ERROR_PREFIX = "Failed to load dispatch data"


def _extract_records(payload) -> list:
    """The endpoint answers either a bare array or an object wrapping one."""
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict):
        for key in ("data", "message", "records"):
            value = payload.get(key)
            if value and isinstance(value, list):
                return value
    return []


async def fetch_dispatch_records(client: Optional[httpx.AsyncClient] = None) -> List[DispatchRecord]:
    payload = await fetch_json(config.DISPATCH_API_URL, ERROR_PREFIX, client=client)
    raw_records = _extract_records(payload)
    if not raw_records:
        logger.warning("Dispatch endpoint returned no records")

    try:
        records = [DispatchRecord.model_validate(item) for item in raw_records]
    except ValidationError as e:
        logger.error(f"Dispatch record validation error: {e}")
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"{ERROR_PREFIX}: unexpected response format",
        )
    logger.info(f"Fetched {len(records)} dispatch records")
    return records


async def get_dispatch_records() -> List[DispatchRecord]:
    return await fetch_dispatch_records()
