"""Reference nutrient lookups against USDA FDC."""

import dataclasses
import logging
from dataclasses import dataclass, field

import httpx

from verified_meals.adapters.fdc_client import FdcClient
from verified_meals.domain.errors import ReferenceLookupError
from verified_meals.domain.nutrition import ENERGY_ID, TRACKED_NUTRIENT_IDS, ReferenceRecord
from verified_meals.services.cache import Cache, InMemoryCache

# Foundation foods often report energy only through the Atwater factors.
_ATWATER_ENERGY_IDS = (2047, 2048)

_logger = logging.getLogger(__name__)


@dataclass
class ReferenceLookupService:
    """Search and fetch reference records with a call-scoped cache."""

    fdc_client: FdcClient
    cache: Cache = field(default_factory=InMemoryCache)

    def scoped(self) -> "ReferenceLookupService":
        """Return a copy sharing the client but starting with an empty cache."""
        return dataclasses.replace(self, cache=InMemoryCache())

    async def search(self, query: str, page_size: int = 25) -> list[ReferenceRecord]:
        """Search the reference database by name."""
        cache_key = f"fdc:search:{query.lower()}:{page_size}"
        cached = self.cache.get(cache_key)
        if isinstance(cached, list):
            return cached

        try:
            payload = await self.fdc_client.search_foods(query, page_size=page_size)
        except httpx.HTTPError as exc:
            raise ReferenceLookupError(f"Search for {query!r} failed: {exc}") from exc

        records = [_record_from_payload(food) for food in payload.get("foods", [])]
        self.cache.set(cache_key, records)
        _logger.debug("Reference search: query=%s results=%s", query, len(records))
        return records

    async def fetch_details(self, fdc_id: int) -> ReferenceRecord:
        """Fetch full nutrient details for one record."""
        cache_key = f"fdc:food:{fdc_id}"
        cached = self.cache.get(cache_key)
        if isinstance(cached, ReferenceRecord):
            return cached

        try:
            payload = await self.fdc_client.get_food(fdc_id)
        except httpx.HTTPError as exc:
            raise ReferenceLookupError(f"Fetch of food {fdc_id} failed: {exc}") from exc

        record = _record_from_payload(payload)
        self.cache.set(cache_key, record)
        return record


def _record_from_payload(food: dict[str, object]) -> ReferenceRecord:
    return ReferenceRecord(
        fdc_id=int(food["fdcId"]),
        description=str(food.get("description", "")),
        data_type=food.get("dataType"),
        brand=food.get("brandOwner") or food.get("brandName"),
        nutrients_per_100g=_extract_nutrients(food.get("foodNutrients") or []),
    )


def _extract_nutrients(food_nutrients: list[dict[str, object]]) -> dict[int, float]:
    """Map nutrient id to amount per 100 g.

    Search results carry ``nutrientId``/``value``; detail responses nest the id
    under ``nutrient`` and use ``amount``.
    """
    values: dict[int, float] = {}
    atwater: dict[int, float] = {}
    for nutrient in food_nutrients:
        nutrient_info = nutrient.get("nutrient") or {}
        nutrient_id = nutrient_info.get("id") or nutrient.get("nutrientId")
        amount = nutrient.get("amount")
        if amount is None:
            amount = nutrient.get("value")
        if nutrient_id is None or amount is None:
            continue
        nutrient_id = int(nutrient_id)
        if nutrient_id in TRACKED_NUTRIENT_IDS:
            values[nutrient_id] = float(amount)
        elif nutrient_id in _ATWATER_ENERGY_IDS:
            atwater[nutrient_id] = float(amount)

    if ENERGY_ID not in values:
        for nutrient_id in _ATWATER_ENERGY_IDS:
            if nutrient_id in atwater:
                values[ENERGY_ID] = atwater[nutrient_id]
                break
    return values
