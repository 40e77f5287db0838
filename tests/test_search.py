"""
Tests for aggregated search (merge and partial failures).

These tests verify that:
- By-name results come first, then new by-ingredient results, in API order
- Each recipe id appears at most once
- One failing endpoint does not hide the other's results
- sources_status distinguishes "nothing matched" from "nothing worked"
"""

from unittest.mock import Mock, patch

from mealfinder.connectors.base import NetworkError
from mealfinder.models import RecipeSummary
from mealfinder.search import aggregated_search, merge_results


def summary(recipe_id, name=None, category=None):
    return RecipeSummary(id=recipe_id, name=name or f"Recipe {recipe_id}", category=category)


class TestMergeResults:
    """Tests for merge_results ordering and deduplication."""

    def test_name_results_first_then_new_ingredient_results(self):
        """Test order: by-name in API order, then unseen by-ingredient ids."""
        merged = merge_results(
            [summary("1"), summary("2")],
            [summary("2"), summary("3"), summary("4")],
        )
        assert [r.id for r in merged] == ["1", "2", "3", "4"]

    def test_ids_are_unique(self):
        """Test duplicates inside and across lists are dropped."""
        merged = merge_results(
            [summary("1"), summary("1")],
            [summary("1"), summary("5"), summary("5")],
        )
        assert [r.id for r in merged] == ["1", "5"]

    def test_by_name_record_wins(self):
        """Test the by-name record (with category) is kept for a shared id."""
        merged = merge_results([summary("7", category="Beef")], [summary("7")])
        assert merged[0].category == "Beef"

    def test_empty_inputs(self):
        """Test merging two empty lists gives an empty list."""
        assert merge_results([], []) == []

    def test_only_ingredient_results(self):
        """Test ingredient results are returned when the name search is empty."""
        assert [r.id for r in merge_results([], [summary("3"), summary("2")])] == ["3", "2"]


class TestAggregatedSearch:
    """Tests for aggregated_search with a mocked connector."""

    def test_both_sources_ok(self):
        """Test merged results and ok status for both sources."""
        connector = Mock()
        connector.search_by_name.return_value = [summary("1", "Chicken Handi", "Chicken")]
        connector.search_by_ingredient.return_value = [summary("1"), summary("2")]

        response = aggregated_search("chicken", connector=connector)

        connector.search_by_name.assert_called_once_with("chicken")
        connector.search_by_ingredient.assert_called_once_with("chicken")
        assert [r.id for r in response.results] == ["1", "2"]
        assert response.sources_status == {"name": "ok", "ingredient": "ok"}
        assert not response.partial_failure
        assert not response.all_failed

    def test_ingredient_failure_keeps_name_results(self):
        """Test a failing ingredient search still returns by-name results."""
        connector = Mock()
        connector.search_by_name.return_value = [summary("1")]
        connector.search_by_ingredient.side_effect = NetworkError("timeout")

        response = aggregated_search("chicken", connector=connector)

        assert [r.id for r in response.results] == ["1"]
        assert response.sources_status == {"name": "ok", "ingredient": "error"}
        assert response.partial_failure

    def test_name_failure_keeps_ingredient_results(self):
        """Test a failing name search still returns by-ingredient results."""
        connector = Mock()
        connector.search_by_name.side_effect = NetworkError("503")
        connector.search_by_ingredient.return_value = [summary("9")]

        response = aggregated_search("egg", connector=connector)

        assert [r.id for r in response.results] == ["9"]
        assert response.sources_status["name"] == "error"

    def test_all_failed(self):
        """Test both sources failing is reported as all_failed, not as empty."""
        connector = Mock()
        connector.search_by_name.side_effect = NetworkError("down")
        connector.search_by_ingredient.side_effect = NetworkError("down")

        response = aggregated_search("chicken", connector=connector)

        assert response.results == []
        assert response.all_failed
        assert not response.partial_failure

    def test_no_matches_is_not_a_failure(self):
        """Test empty results from both sources are a successful empty search."""
        connector = Mock()
        connector.search_by_name.return_value = []
        connector.search_by_ingredient.return_value = []

        response = aggregated_search("zzzz", connector=connector)

        assert response.results == []
        assert not response.all_failed

    @patch("mealfinder.search.MealDBConnector")
    def test_default_connector(self, mock_connector_class):
        """Test a MealDBConnector is created when no connector is passed."""
        instance = mock_connector_class.return_value
        instance.search_by_name.return_value = []
        instance.search_by_ingredient.return_value = [summary("3")]

        response = aggregated_search("rice")

        mock_connector_class.assert_called_once_with()
        assert [r.id for r in response.results] == ["3"]
