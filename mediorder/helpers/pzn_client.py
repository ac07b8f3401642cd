import asyncio
from typing import Optional
from urllib.parse import quote

import requests
from pydantic import ValidationError

from mediorder.commons.logger import logger
from mediorder.validation.validators import PznInfo


class PznWebClient:
    """
    Client for the local PZN lookup server:
      GET {base_url}/{pzn} -> {"brandName": ..., "activeIngredients": [...], "formCode"|"form": ...}
    Any failure (timeout, HTTP status, bad JSON) means "not found".
    """

    def __init__(self, base_url: str, timeout: float = 10.0):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    async def fetch(self, pzn: str) -> Optional[PznInfo]:
        url = f"{self.base_url}/{quote(pzn)}"
        try:
            res = await asyncio.wait_for(
                asyncio.to_thread(requests.get, url, timeout=self.timeout),
                timeout=self.timeout,
            )
        except (asyncio.TimeoutError, requests.RequestException) as ex:
            logger.warning(f"PZN lookup {pzn} failed: {ex}")
            return None

        if not res.ok:
            logger.info(f"PZN lookup {pzn}: HTTP {res.status_code}")
            return None
        try:
            data = res.json()
        except ValueError as ex:
            logger.warning(f"PZN lookup {pzn}: invalid JSON ({ex})")
            return None
        if not isinstance(data, dict) or not data.get("brandName"):
            return None

        try:
            return PznInfo.model_validate(
                {
                    "brandName": data["brandName"],
                    "activeIngredients": data.get("activeIngredients") or [],
                    "formCode": data.get("formCode") or data.get("form"),
                }
            )
        except ValidationError as ex:
            logger.warning(f"PZN lookup {pzn}: unexpected payload ({ex.error_count()} errors)")
            return None
