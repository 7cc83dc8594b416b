import logging
from typing import List, Optional

import httpx
from fastapi import HTTPException, status
from pydantic import ValidationError

from ...common.api_client import fetch_json
from ...core import config
from .schemas import SaleRecord

logger = logging.getLogger(__name__)


async def fetch_sale_records(client: Optional[httpx.AsyncClient] = None) -> List[SaleRecord]:
    """
    Fetches every sale record from the upstream API.

    The endpoint answers ``{"message": [...records...]}``. Anything else is
    reported as an invalid payload.

    Returns:
        The records in the order the API served them.
    """
    payload = await fetch_json(
        config.SALES_API_URL, "Failed to fetch inventory data", client=client
    )
    raw_records = payload.get("message") if isinstance(payload, dict) else None
    if not isinstance(raw_records, list):
        logger.error("Sales endpoint returned no record array under 'message'")
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="API returned no data or invalid format.",
        )

    try:
        records = [SaleRecord.model_validate(item) for item in raw_records]
    except ValidationError as e:
        logger.error(f"Sale record validation error: {e}")
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="API returned no data or invalid format.",
        )
    logger.info(f"Fetched {len(records)} sale records")
    return records


async def get_sale_records() -> List[SaleRecord]:
    """FastAPI dependency yielding a fresh copy of the upstream records."""
    return await fetch_sale_records()
