# mediorder/services/lookup_service.py
import asyncio
from dataclasses import replace
from pathlib import Path
from typing import Dict, Mapping, Optional, Tuple, Union

import yaml
from pydantic import ValidationError

from mediorder.commons.logger import logger
from mediorder.helpers.pzn_cache import JsonPznCache
from mediorder.helpers.pzn_client import PznWebClient
from mediorder.parsers.models import Entry, Medication, Plan
from mediorder.validation.validators import PZN_WIDTH, PznInfo, normalize_pzn


def load_reference_table(path: Union[str, Path]) -> Dict[str, dict]:
    """
    Static offline table (Festbetrag extract), keyed by the 8-digit PZN:
      "01234567": {b: brand, i: ingredient, s: strength, f: form code}
    """
    p = Path(path)
    if not p.exists():
        logger.warning(f"PZN reference table not found: {p}")
        return {}
    with open(p, "r", encoding="utf-8") as f:
        # keys stay text: safe_load reads an unquoted 01016155 as an octal int
        data = yaml.load(f, Loader=yaml.BaseLoader)
    if not isinstance(data, dict):
        logger.warning(f"PZN reference table {p} is not a mapping, ignored")
        return {}
    table = {str(k).zfill(PZN_WIDTH): v for k, v in data.items() if isinstance(v, dict)}
    logger.info(f"Loaded {len(table)} PZNs from {p}")
    return table


class PznLookupService:
    """
    Resolves PZNs in strict order:
      1) local cache (keyed by the 8-digit PZN)
      2) static reference table
      3) web client, only if configured
    Hits from 2) and 3) are written through to the cache. Failures mean None.
    """

    def __init__(
        self,
        cache: JsonPznCache,
        reference_table: Optional[Mapping[str, dict]] = None,
        client: Optional[PznWebClient] = None,
        pad_width: int = PZN_WIDTH,
    ):
        self.cache = cache
        self.reference_table = reference_table or {}
        self.client = client
        self.pad_width = pad_width

    async def lookup(self, pzn: str) -> Optional[PznInfo]:
        key = normalize_pzn(pzn, self.pad_width)

        cached = await self.cache.get(key)
        if cached is not None:
            return cached

        info = self._from_table(key)
        if info is None and self.client is not None:
            info = await self.client.fetch(key)
        if info is None:
            logger.debug(f"PZN {pzn} unresolved")
            return None

        await self.cache.put(key, info)
        return info

    def _from_table(self, key: str) -> Optional[PznInfo]:
        row = self.reference_table.get(key)
        if not row:
            return None
        try:
            ingredients = [{"name": row["i"], "strength": row.get("s") or None}] if row.get("i") else []
            return PznInfo(brand_name=row["b"], active_ingredients=ingredients, form_code=row.get("f") or None)
        except (KeyError, ValidationError) as ex:
            logger.warning(f"Invalid reference row for PZN {key}: {ex}")
            return None

    async def enrich_medication(self, med: Medication) -> Tuple[Medication, bool]:
        """Fill brand name / ingredients / form code only where they are missing."""
        if not med.pzn:
            return med, False
        if med.brand_name and med.active_ingredients:
            return med, False

        info = await self.lookup(med.pzn)
        if info is None:
            return med, False

        enriched = replace(
            med,
            brand_name=med.brand_name or info.brand_name,
            active_ingredients=med.active_ingredients or info.ingredients(),
            form_code=med.form_code if med.form_code is not None else info.form_code,
        )
        return enriched, True

    async def enrich_plan(self, plan: Plan) -> Tuple[Plan, int]:
        """Return a new Plan with medications enriched, plus how many were changed."""
        count = 0
        sections = []
        for section in plan.sections:
            results = await asyncio.gather(*(self._enrich_entry(e) for e in section.entries))
            count += sum(1 for _, changed in results if changed)
            sections.append(replace(section, entries=tuple(e for e, _ in results)))
        if count:
            logger.info(f"Plan {plan.uuid}: {count} medication(s) enriched")
        return replace(plan, sections=tuple(sections)), count

    async def _enrich_entry(self, entry: Entry) -> Tuple[Entry, bool]:
        if isinstance(entry, Medication):
            return await self.enrich_medication(entry)
        return entry, False
