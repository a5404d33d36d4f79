"""Online Food Search - best-effort nutrition lookup for foods not in the catalog.

Sources:
    CalorieNinjas - needs an API key, good with regional dish names
    Open Food Facts - free, no key, good for packaged foods

Any failure (network, HTTP status, malformed body) is logged and reported
as no results.
"""

import logging
import uuid
from typing import Any

import httpx

from ..core.models import FoodCategory, FoodItem, FoodUnit, OnlineSearchResult, SearchSource


logger = logging.getLogger(__name__)

OPEN_FOOD_FACTS_API = "https://world.openfoodfacts.org/cgi/search.pl"
CALORIE_NINJAS_API = "https://api.calorieninjas.com/v1/nutrition"
USER_AGENT = "CalorieTrack/1.0"

OPEN_FOOD_FACTS_LIMIT = 10
KJ_PER_KCAL = 4.184
REQUEST_TIMEOUT = 15

ALTERNATIVE_SEARCH_TERMS: dict[str, list[str]] = {
    "bhakri": ["bhakri", "bhakari", "indian flatbread", "jowar roti", "bajra roti"],
    "chapati": ["chapati", "roti", "indian flatbread", "wheat roti"],
    "pohe": ["poha", "pohe", "flattened rice", "beaten rice"],
    "vada pav": ["vada pav", "batata vada", "potato fritter"],
    "misal": ["misal", "misal pav", "sprouted lentils curry"],
    "thalipeeth": ["thalipeeth", "multigrain pancake"],
    "puran poli": ["puran poli", "stuffed sweet bread", "dal poli"],
    "shrikhand": ["shrikhand", "sweet yogurt", "hung curd dessert"],
    "modak": ["modak", "sweet dumpling", "coconut dumpling"],
    "sabudana": ["sabudana", "sago", "tapioca"],
    "usal": ["usal", "sprouted beans curry", "misal"],
    "amti": ["amti", "dal curry", "maharashtrian dal"],
    "bharli vangi": ["bharli vangi", "stuffed eggplant", "stuffed brinjal"],
    "zunka": ["zunka", "gram flour curry", "besan curry"],
    "pitla": ["pitla", "gram flour gravy"],
    "kadhi": ["kadhi", "yogurt curry", "buttermilk curry"],
    "sol kadhi": ["sol kadhi", "kokum curry", "coconut kokum drink"],
    "bhaji": ["bhaji", "sabzi", "vegetable curry", "indian vegetable"],
    "dal": ["dal", "daal", "lentils", "pulses"],
    "paratha": ["paratha", "stuffed flatbread", "indian bread"],
    "idli": ["idli", "rice cake", "steamed rice cake"],
    "dosa": ["dosa", "indian crepe", "rice crepe"],
    "upma": ["upma", "semolina porridge", "rava upma"],
    "puri": ["puri", "poori", "fried bread"],
    "khichdi": ["khichdi", "kitchari", "rice lentils"],
    "sambar": ["sambar", "sambhar", "lentil soup"],
    "rasam": ["rasam", "indian soup"],
    "biryani": ["biryani", "biriyani", "indian rice"],
    "paneer": ["paneer", "indian cheese", "cottage cheese"],
    "raita": ["raita", "yogurt salad"],
    "lassi": ["lassi", "yogurt drink"],
    "gulab jamun": ["gulab jamun", "indian sweet"],
    "jalebi": ["jalebi", "indian sweet"],
    "halwa": ["halwa", "halva", "indian dessert"],
    "ladoo": ["ladoo", "laddu", "indian sweet ball"],
    "kheer": ["kheer", "rice pudding", "indian pudding"],
    "chutney": ["chutney", "indian condiment"],
    "pickle": ["indian pickle", "achar"],
    "papad": ["papad", "papadum", "indian cracker"],
}


def _product_calories(nutriments: dict[str, Any]) -> float | None:
    """Calories per 100 g from an Open Food Facts product, converting kJ if needed."""
    kcal = nutriments.get("energy-kcal_100g") or nutriments.get("energy-kcal")
    if kcal:
        return float(kcal)
    kj = nutriments.get("energy_100g")
    if kj:
        return float(kj) / KJ_PER_KCAL
    return None


def parse_open_food_facts(data: dict[str, Any]) -> list[OnlineSearchResult]:
    """Turn an Open Food Facts search response into results with calorie data."""
    results: list[OnlineSearchResult] = []
    products = data.get("products")
    if not isinstance(products, list):
        return results

    for product in products:
        calories = _product_calories(product.get("nutriments") or {})
        name = product.get("product_name")
        if not calories or not name:
            continue
        results.append(
            OnlineSearchResult(
                name=name,
                calories=round(calories),
                serving_size=100,
                serving_unit="grams",
                source=SearchSource.OPEN_FOOD_FACTS,
                image_url=product.get("image_small_url") or product.get("image_url"),
                brand=product.get("brands"),
            )
        )

    return results[:OPEN_FOOD_FACTS_LIMIT]


def parse_calorie_ninjas(data: dict[str, Any]) -> list[OnlineSearchResult]:
    """Turn a CalorieNinjas response into results."""
    items = data.get("items")
    if not isinstance(items, list):
        return []

    return [
        OnlineSearchResult(
            name=item["name"],
            calories=round(item["calories"]),
            serving_size=item.get("serving_size_g") or 100,
            serving_unit="grams",
            source=SearchSource.CALORIE_NINJAS,
        )
        for item in items
        if item.get("calories") and item.get("name")
    ]


def dedupe_by_name(results: list[OnlineSearchResult]) -> list[OnlineSearchResult]:
    """Keep the first result for each case-insensitive name."""
    seen: set[str] = set()
    unique = []
    for result in results:
        key = result.name.lower()
        if key not in seen:
            seen.add(key)
            unique.append(result)
    return unique


class FoodSearchClient:
    """Client for the online nutrition lookups.

    Args:
        calorie_ninjas_api_key: Enables CalorieNinjas when set
        http_client: Shared httpx client (one is created per call otherwise)
    """

    def __init__(
        self,
        calorie_ninjas_api_key: str | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.calorie_ninjas_api_key = calorie_ninjas_api_key
        self._http_client = http_client

    @property
    def is_calorie_ninjas_configured(self) -> bool:
        return bool(self.calorie_ninjas_api_key)

    async def _get_json(self, url: str, params: dict, headers: dict) -> dict[str, Any]:
        if self._http_client is not None:
            resp = await self._http_client.get(url, params=params, headers=headers)
            resp.raise_for_status()
            return resp.json()

        async with httpx.AsyncClient(timeout=REQUEST_TIMEOUT, follow_redirects=True) as client:
            resp = await client.get(url, params=params, headers=headers)
            resp.raise_for_status()
            return resp.json()

    async def search_open_food_facts(self, query: str) -> list[OnlineSearchResult]:
        """Search Open Food Facts. Returns [] on any failure."""
        logger.debug("Searching Open Food Facts: %s", query)
        params = {
            "search_terms": query,
            "search_simple": 1,
            "action": "process",
            "json": 1,
            "page_size": 20,
        }
        try:
            data = await self._get_json(OPEN_FOOD_FACTS_API, params, {"User-Agent": USER_AGENT})
            return parse_open_food_facts(data)
        except Exception as e:
            logger.error("Open Food Facts search error: %s", str(e))
            return []

    async def search_calorie_ninjas(self, query: str) -> list[OnlineSearchResult]:
        """Search CalorieNinjas. Returns [] when unconfigured or on any failure."""
        if not self.is_calorie_ninjas_configured:
            logger.debug("CalorieNinjas API key not configured")
            return []

        logger.debug("Searching CalorieNinjas: %s", query)
        try:
            data = await self._get_json(
                CALORIE_NINJAS_API,
                {"query": query},
                {"X-Api-Key": self.calorie_ninjas_api_key},
            )
            return parse_calorie_ninjas(data)
        except Exception as e:
            logger.error("CalorieNinjas search error: %s", str(e))
            return []

    async def search(self, query: str) -> list[OnlineSearchResult]:
        """Search every configured source, CalorieNinjas first, de-duplicated by name."""
        results: list[OnlineSearchResult] = []
        if self.is_calorie_ninjas_configured:
            results.extend(await self.search_calorie_ninjas(query))
        results.extend(await self.search_open_food_facts(query))
        return dedupe_by_name(results)

    async def search_with_alternatives(self, query: str) -> list[OnlineSearchResult]:
        """Search for the query, then for its alternative terms if nothing was found.

        Regional dish names often miss in the online databases; their
        alternative spellings and descriptions are tried one after another
        and all their results are combined.
        """
        results = await self.search(query)
        if results:
            return results

        terms = get_alternative_search_terms(query)
        if len(terms) <= 1:
            return results

        for term in terms:
            if term != query:
                logger.debug("No results for %s, trying %s", query, term)
                results.extend(await self.search(term))
        return dedupe_by_name(results)


def convert_to_food_item(result: OnlineSearchResult) -> FoodItem:
    """Turn a search result into a custom food the user can log."""
    return FoodItem(
        id=f"custom-online-{uuid.uuid4().hex[:12]}",
        name=result.name,
        category=FoodCategory.CUSTOM,
        calories_per_unit=result.calories,
        unit=FoodUnit.GRAMS,
        unit_weight=result.serving_size,
        is_custom=True,
    )


def get_alternative_search_terms(query: str) -> list[str]:
    """Alternative spellings and descriptions for regional dish names.

    Returns:
        The alternatives for the first known dish contained in the query,
        otherwise just the query
    """
    lower_query = query.lower()
    for key, alternatives in ALTERNATIVE_SEARCH_TERMS.items():
        if key in lower_query:
            return alternatives
    return [query]
