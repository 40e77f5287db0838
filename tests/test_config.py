"""
Tests for environment-driven configuration.
"""

import os
from unittest.mock import patch

from api.config import DEFAULT_MEALDB_BASE_URL, HomeConfig, MealDBConfig, get_config_status


class TestConfig:
    """Tests for config getters."""

    @patch.dict(os.environ, {}, clear=True)
    def test_defaults(self):
        assert MealDBConfig.get_base_url() == DEFAULT_MEALDB_BASE_URL
        assert MealDBConfig.get_timeout_seconds() == 10.0
        assert HomeConfig.get_random_count() == 6
        assert HomeConfig.get_featured_per_term() == 2

    @patch.dict(os.environ, {"HOME_RANDOM_COUNT": "3", "FEATURED_PER_TERM": "abc", "MEALDB_BASE_URL": "https://x.test/"})
    def test_overrides_and_invalid_values(self):
        """Test valid overrides apply and invalid numbers fall back to defaults."""
        assert HomeConfig.get_random_count() == 3
        assert HomeConfig.get_featured_per_term() == 2
        assert MealDBConfig.get_base_url() == "https://x.test"

    @patch.dict(os.environ, {"HOME_RANDOM_COUNT": "0"})
    def test_non_positive_count_falls_back(self):
        assert HomeConfig.get_random_count() == 6

    @patch.dict(os.environ, {"DATABASE_URL": "sqlite:///x.db"})
    def test_config_status(self):
        status = get_config_status()
        assert status["database_configured"] is True
        assert status["home_random_count"] == 6
