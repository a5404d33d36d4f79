"""Tests for online food search using a mocked HTTP transport."""

import httpx
import pytest

from src.core.models import FoodCategory, FoodUnit, OnlineSearchResult, SearchSource
from src.shell.food_search import (
    CALORIE_NINJAS_API,
    OPEN_FOOD_FACTS_API,
    FoodSearchClient,
    convert_to_food_item,
    dedupe_by_name,
    get_alternative_search_terms,
    parse_calorie_ninjas,
    parse_open_food_facts,
)


OFF_RESPONSE = {
    "products": [
        {
            "product_name": "Instant Poha",
            "brands": "Acme",
            "nutriments": {"energy-kcal_100g": 351.4},
            "image_small_url": "https://img.example/poha.jpg",
        },
        {"product_name": "Mystery", "nutriments": {}},
        {"nutriments": {"energy-kcal_100g": 200}},
        {"product_name": "Kj Only", "nutriments": {"energy_100g": 418.4}},
    ]
}

NINJAS_RESPONSE = {
    "items": [
        {"name": "poha", "calories": 180.2, "serving_size_g": 150},
        {"name": "nothing", "calories": 0},
    ]
}


def make_client(handler, api_key=None) -> FoodSearchClient:
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return FoodSearchClient(calorie_ninjas_api_key=api_key, http_client=http_client)


class TestParsers:
    """Tests for response parsing."""

    def test_open_food_facts(self):
        """Products without a name or calories are skipped; kJ is converted."""
        results = parse_open_food_facts(OFF_RESPONSE)
        assert [r.name for r in results] == ["Instant Poha", "Kj Only"]
        assert results[0].calories == 351
        assert results[0].brand == "Acme"
        assert results[0].image_url == "https://img.example/poha.jpg"
        assert results[1].calories == 100
        assert all(r.source == SearchSource.OPEN_FOOD_FACTS for r in results)

    def test_open_food_facts_limit(self):
        """At most ten products are kept."""
        data = {"products": [{"product_name": f"P{i}", "nutriments": {"energy-kcal_100g": 100}} for i in range(25)]}
        assert len(parse_open_food_facts(data)) == 10

    def test_open_food_facts_malformed(self):
        """A body without products gives no results."""
        assert parse_open_food_facts({"error": "oops"}) == []

    def test_calorie_ninjas(self):
        """Items carry their serving size; zero-calorie items are skipped."""
        results = parse_calorie_ninjas(NINJAS_RESPONSE)
        assert len(results) == 1
        assert results[0].calories == 180
        assert results[0].serving_size == 150
        assert results[0].source == SearchSource.CALORIE_NINJAS

    def test_dedupe(self):
        """Duplicates by name are dropped, first one kept."""
        results = [
            OnlineSearchResult(name="Poha", calories=180, source="calorieninjas"),
            OnlineSearchResult(name="poha", calories=350, source="openfoodfacts"),
        ]
        assert [r.calories for r in dedupe_by_name(results)] == [180]


class TestFoodSearchClient:
    """Tests for FoodSearchClient."""

    async def test_open_food_facts_only_without_key(self):
        """Without an API key only Open Food Facts is queried."""
        requested = []

        def handler(request: httpx.Request) -> httpx.Response:
            requested.append(str(request.url).split("?")[0])
            assert request.url.params["search_terms"] == "poha"
            assert request.headers["User-Agent"].startswith("CalorieTrack")
            return httpx.Response(200, json=OFF_RESPONSE)

        results = await make_client(handler).search("poha")
        assert requested == [OPEN_FOOD_FACTS_API]
        assert [r.name for r in results] == ["Instant Poha", "Kj Only"]

    async def test_both_sources_with_key(self):
        """CalorieNinjas results come first, then Open Food Facts."""

        def handler(request: httpx.Request) -> httpx.Response:
            if str(request.url).startswith(CALORIE_NINJAS_API):
                assert request.headers["X-Api-Key"] == "secret"
                return httpx.Response(200, json=NINJAS_RESPONSE)
            return httpx.Response(200, json=OFF_RESPONSE)

        results = await make_client(handler, api_key="secret").search("poha")
        assert [r.source for r in results] == [
            SearchSource.CALORIE_NINJAS,
            SearchSource.OPEN_FOOD_FACTS,
            SearchSource.OPEN_FOOD_FACTS,
        ]

    async def test_http_error_gives_no_results(self):
        """Error statuses are reported as no results."""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(500)

        assert await make_client(handler, api_key="secret").search("poha") == []

    async def test_network_error_gives_no_results(self):
        """Connection failures are reported as no results."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("offline", request=request)

        assert await make_client(handler).search_open_food_facts("poha") == []

    async def test_calorie_ninjas_unconfigured(self):
        """CalorieNinjas returns nothing without a key."""
        client = make_client(lambda request: httpx.Response(200, json=NINJAS_RESPONSE))
        assert client.is_calorie_ninjas_configured is False
        assert await client.search_calorie_ninjas("poha") == []


class TestAlternativeSearch:
    """Tests for retrying with alternative terms."""

    @staticmethod
    def off_handler(hits: dict, searched: list):
        def handler(request: httpx.Request) -> httpx.Response:
            term = request.url.params["search_terms"]
            searched.append(term)
            products = [
                {"product_name": name, "nutriments": {"energy-kcal_100g": 300}}
                for name in hits.get(term, [])
            ]
            return httpx.Response(200, json={"products": products})

        return handler

    async def test_retries_alternatives_when_empty(self):
        """A miss on a regional name falls back to its alternatives."""
        searched = []
        hits = {"poha": ["Poha"], "flattened rice": ["Flattened Rice", "poha"]}
        client = make_client(self.off_handler(hits, searched))

        results = await client.search_with_alternatives("pohe")
        assert searched == ["pohe", "poha", "flattened rice", "beaten rice"]
        assert [r.name for r in results] == ["Poha", "Flattened Rice"]

    async def test_no_retry_when_found(self):
        """Alternatives are not tried when the query has results."""
        searched = []
        client = make_client(self.off_handler({"pohe": ["Pohe"]}, searched))

        results = await client.search_with_alternatives("pohe")
        assert searched == ["pohe"]
        assert [r.name for r in results] == ["Pohe"]

    async def test_unknown_dish_not_retried(self):
        """Queries without alternatives are searched once."""
        searched = []
        client = make_client(self.off_handler({}, searched))

        assert await client.search_with_alternatives("quinoa salad") == []
        assert searched == ["quinoa salad"]


class TestConversion:
    """Tests for turning results into foods."""

    def test_convert_to_food_item(self):
        """Results become custom foods measured in grams."""
        result = OnlineSearchResult(name="Poha", calories=180, serving_size=150, source="calorieninjas")
        food = convert_to_food_item(result)
        assert food.id.startswith("custom-online-")
        assert food.category == FoodCategory.CUSTOM
        assert food.unit == FoodUnit.GRAMS
        assert food.unit_weight == 150
        assert food.is_custom is True

    @pytest.mark.parametrize(
        "query,expected",
        [("Chapati", "roti"), ("masoor dal", "lentils"), ("kokum drink", "kokum drink")],
    )
    def test_alternative_terms(self, query, expected):
        """Known dishes expand to alternatives; others pass through."""
        assert expected in get_alternative_search_terms(query)
