"""
Tests for the TheMealDB connector using a mocked requests session.

These tests mock requests.Session to avoid making real API calls during testing.
The tests verify that:
- Each operation calls the right endpoint with the right parameters
- A null "meals" envelope is an empty result, not an error
- Transport failures (connection, HTTP status, invalid JSON) raise NetworkError
- Malformed meal objects are skipped
"""

import os
from unittest.mock import Mock, patch

import pytest
import requests

from mealfinder.connectors.base import NetworkError
from mealfinder.connectors.mealdb_connector import DEFAULT_BASE_URL, MealDBConnector


def make_session(payload=None, json_error=None, http_error=None):
    """Build a mock session whose get() returns one response."""
    response = Mock()
    if json_error is not None:
        response.json.side_effect = json_error
    else:
        response.json.return_value = payload
    if http_error is not None:
        response.raise_for_status.side_effect = http_error
    session = Mock()
    session.get.return_value = response
    return session


SEARCH_PAYLOAD = {
    "meals": [
        {"idMeal": "52795", "strMeal": "Chicken Handi", "strCategory": "Chicken", "strMealThumb": "handi.jpg"},
        {"idMeal": "52796", "strMeal": "Chicken Alfredo Primavera", "strCategory": "Chicken", "strMealThumb": "alfredo.jpg"},
    ]
}


class TestMealDBConnectorConfig:
    """Tests for connector initialization."""

    @patch.dict(os.environ, {}, clear=True)
    def test_defaults(self):
        """Test the public v1 endpoint and default timeout are used."""
        connector = MealDBConnector(session=Mock())
        assert connector.base_url == DEFAULT_BASE_URL
        assert connector.timeout == 10.0
        assert connector.source == "themealdb"

    @patch.dict(os.environ, {"MEALDB_BASE_URL": "https://example.test/api/", "MEALDB_TIMEOUT_SECONDS": "3"})
    def test_env_overrides(self):
        """Test MEALDB_BASE_URL and MEALDB_TIMEOUT_SECONDS are honored."""
        connector = MealDBConnector(session=Mock())
        assert connector.base_url == "https://example.test/api"
        assert connector.timeout == 3.0

    @patch.dict(os.environ, {"MEALDB_TIMEOUT_SECONDS": "soon"})
    def test_invalid_timeout_falls_back(self):
        """Test a non-numeric timeout falls back to the default."""
        assert MealDBConnector(session=Mock()).timeout == 10.0


class TestMealDBConnectorSearch:
    """Tests for search_by_name and search_by_ingredient."""

    def test_search_by_name_calls_search_endpoint(self):
        """Test search_by_name uses search.php?s= and normalizes results."""
        session = make_session(SEARCH_PAYLOAD)
        connector = MealDBConnector(base_url="https://api.test", timeout=5, session=session)

        results = connector.search_by_name("chicken")

        session.get.assert_called_once_with("https://api.test/search.php", params={"s": "chicken"}, timeout=5)
        assert [r.id for r in results] == ["52795", "52796"]
        assert results[0].category == "Chicken"

    def test_search_by_ingredient_calls_filter_endpoint(self):
        """Test search_by_ingredient uses filter.php?i=."""
        session = make_session({"meals": [{"idMeal": "1", "strMeal": "Beef Stew", "strMealThumb": "s.jpg"}]})
        connector = MealDBConnector(base_url="https://api.test", timeout=5, session=session)

        results = connector.search_by_ingredient("beef")

        session.get.assert_called_once_with("https://api.test/filter.php", params={"i": "beef"}, timeout=5)
        assert results[0].name == "Beef Stew"
        assert results[0].category is None

    def test_null_meals_is_empty_result(self):
        """Test {"meals": null} means no matches, not an error."""
        connector = MealDBConnector(session=make_session({"meals": None}))
        assert connector.search_by_name("zzzz") == []
        assert connector.search_by_ingredient("zzzz") == []

    def test_malformed_meals_are_skipped(self):
        """Test meals without id or name are dropped, the rest kept."""
        payload = {"meals": [{"strMeal": "No id"}, "garbage", {"idMeal": "2", "strMeal": "Ok"}]}
        connector = MealDBConnector(session=make_session(payload))
        assert [r.id for r in connector.search_by_name("x")] == ["2"]


class TestMealDBConnectorLookup:
    """Tests for lookup_by_id and random."""

    def test_lookup_by_id(self):
        """Test lookup.php?i= returns the full recipe."""
        meal = {"idMeal": "52771", "strMeal": "Arrabiata", "strIngredient1": "penne", "strMeasure1": "1 pound"}
        session = make_session({"meals": [meal]})
        connector = MealDBConnector(base_url="https://api.test", timeout=5, session=session)

        detail = connector.lookup_by_id("52771")

        session.get.assert_called_once_with("https://api.test/lookup.php", params={"i": "52771"}, timeout=5)
        assert detail.id == "52771"
        assert detail.ingredients[0].label == "1 pound penne"

    def test_lookup_unknown_id_returns_none(self):
        """Test an unknown id is a not-found (None), not an error."""
        connector = MealDBConnector(session=make_session({"meals": None}))
        assert connector.lookup_by_id("0") is None

    def test_random(self):
        """Test random.php is called without parameters."""
        session = make_session({"meals": [{"idMeal": "9", "strMeal": "Random Pie"}]})
        connector = MealDBConnector(base_url="https://api.test", timeout=5, session=session)

        detail = connector.random()

        session.get.assert_called_once_with("https://api.test/random.php", params=None, timeout=5)
        assert detail.name == "Random Pie"


class TestMealDBConnectorErrors:
    """Tests that transport failures surface as NetworkError."""

    def test_connection_error(self):
        """Test connection failures raise NetworkError."""
        session = Mock()
        session.get.side_effect = requests.exceptions.ConnectionError("DNS failure")
        connector = MealDBConnector(session=session)

        with pytest.raises(NetworkError):
            connector.search_by_name("chicken")

    def test_timeout(self):
        """Test timeouts raise NetworkError."""
        session = Mock()
        session.get.side_effect = requests.exceptions.Timeout("slow")
        with pytest.raises(NetworkError):
            MealDBConnector(session=session).random()

    def test_http_error_status(self):
        """Test non-2xx responses raise NetworkError."""
        session = make_session(http_error=requests.exceptions.HTTPError("500 Server Error"))
        with pytest.raises(NetworkError):
            MealDBConnector(session=session).lookup_by_id("1")

    def test_invalid_json(self):
        """Test a body that is not JSON raises NetworkError."""
        session = make_session(json_error=ValueError("Expecting value"))
        with pytest.raises(NetworkError):
            MealDBConnector(session=session).search_by_ingredient("beef")
