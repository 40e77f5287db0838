"""
Tests for card, detail and page rendering.
"""

from unittest.mock import Mock

from mealfinder.controllers import DetailController, SearchController
from mealfinder.favorites import FavoritesStore
from mealfinder.layout import render_recipe_page, render_register_page, render_search_results
from mealfinder.models import IngredientLine, RecipeDetail, RecipeSummary
from mealfinder.render import esc, render_card, render_detail
from mealfinder.storage import MemoryStorage


def store():
    return FavoritesStore(MemoryStorage("render"))


class TestCard:
    """Tests for recipe cards."""

    def test_card_fields(self):
        """Test a card carries title, image, category, detail link and save button."""
        recipe = RecipeSummary(id="52795", name="Chicken Handi", thumbnail_url="handi.jpg", category="Chicken")
        html = render_card(recipe, store()).to_html()

        assert "Chicken Handi" in html
        assert 'src="handi.jpg"' in html
        assert '<p class="muted">Chicken</p>' in html
        assert 'href="/recipe?id=52795"' in html
        assert 'data-id="52795"' in html
        assert ">Save</button>" in html

    def test_no_category_line_without_category(self):
        """Test ingredient-search records render without a category line."""
        html = render_card(RecipeSummary(id="1", name="Beef Stew"), store()).to_html()
        assert 'class="muted"' not in html

    def test_values_are_escaped(self):
        """Test remote text cannot inject markup."""
        recipe = RecipeSummary(id="1", name='<script>alert("x")</script>', thumbnail_url='" onerror="x')
        html = render_card(recipe, store()).to_html()

        assert "<script>" not in html
        assert "&lt;script&gt;" in html
        assert 'onerror="x' not in html

    def test_esc_none(self):
        assert esc(None) == ""


class TestDetail:
    """Tests for the recipe detail markup."""

    def test_detail_sections(self):
        """Test ingredients, tags, video link and source are rendered."""
        recipe = RecipeDetail(
            id="52771",
            name="Spicy Arrabiata Penne",
            category="Vegetarian",
            area="Italian",
            tags=["Pasta", "Curry"],
            instructions="Boil water.",
            youtube_url="https://www.youtube.com/watch?v=1IszT_guI08",
            source_url="https://example.test/arrabiata",
            ingredients=[IngredientLine(ingredient="penne rigate", measure="1 pound")],
        )
        html = render_detail(recipe)

        assert "<li>1 pound penne rigate</li>" in html
        assert "Pasta, Curry" in html
        assert 'href="https://www.youtube.com/watch?v=1IszT_guI08"' in html
        assert "https://example.test/arrabiata" in html
        assert "Boil water." in html

    def test_missing_video_and_meta(self):
        """Test a recipe without video renders a disabled link and placeholders."""
        html = render_detail(RecipeDetail(id="1", name="Plain"))

        assert 'aria-disabled="true"' in html
        assert "source" not in html
        assert "<strong>Category:</strong> —" in html


class TestPages:
    """Tests for page-level rendering of controller states."""

    def test_search_results_empty(self):
        """Test the empty state shows the meta line and the no-results text."""
        connector = Mock()
        connector.search_by_name.return_value = []
        connector.search_by_ingredient.return_value = []
        controller = SearchController(connector, {"q": "zzzz"})
        controller.run()

        html = render_search_results(controller, store())

        assert 'id="noResults"' in html
        assert "No results for &quot;zzzz&quot;" in html

    def test_recipe_page_message(self):
        """Test the no-selection message is shown in the recipe wrapper."""
        controller = DetailController(Mock(), {})
        controller.load()

        html = render_recipe_page(controller)

        assert 'id="recipeWrap"' in html
        assert "No recipe selected." in html

    def test_register_page_error(self):
        """Test the registration form shows the validation message and keeps the username."""
        html = render_register_page(error="Please fill in every field.", username="ana")
        assert "Please fill in every field." in html
        assert 'value="ana"' in html
