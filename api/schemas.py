"""
Pydantic schemas for FastAPI request and response models.

This module defines the Pydantic models used for API request validation and
response serialization. Recipe records themselves are the domain models from
mealfinder.models; these schemas wrap them with page state and status fields.

The schemas include:
- SearchResponse: merged results with per-source status and page state
- HomeResponse / HomeSectionOut: the two home page sections
- FavoriteInput / SaveFavoriteResponse / FavoritesView: favorites
- RegisterRequest / RegisterResponse: local account registration
"""

from typing import Dict, List, Optional

from pydantic import BaseModel, Field, ConfigDict

from mealfinder.models import FavoriteEntry, RecipeSummary


class SearchResponse(BaseModel):
    """Merged search results for one query."""
    query: str = Field(..., description="Search query as received (trimmed)")
    state: str = Field(..., description="Page state: success, empty or error")
    results: List[RecipeSummary] = Field(default_factory=list, description="By-name results first, then new by-ingredient results")
    sources_status: Dict[str, str] = Field(default_factory=dict, description="'ok' or 'error' per source (name, ingredient)")
    partial_failure: bool = Field(False, description="True when one source failed but the other answered")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "query": "chicken",
                "state": "success",
                "results": [
                    {"id": "52795", "name": "Chicken Handi", "thumbnail_url": "https://www.themealdb.com/images/media/meals/wyxwsp1486979827.jpg", "category": "Chicken"},
                ],
                "sources_status": {"name": "ok", "ingredient": "ok"},
                "partial_failure": False,
            }
        }
    )


class HomeSectionOut(BaseModel):
    state: str
    message: str = ""
    partial_failure: bool = False
    records: List[RecipeSummary] = Field(default_factory=list)


class HomeResponse(BaseModel):
    trending: HomeSectionOut
    featured: HomeSectionOut
    tags: List[Dict[str, str]] = Field(default_factory=list, description="Quick-search tags ({label, query})")


class FavoriteInput(BaseModel):
    """Input model for saving a favorite (what a card's save button sends)."""
    id: str = Field(..., min_length=1, description="Recipe identifier")
    name: str = Field(..., min_length=1, description="Recipe display name")
    thumbnail_url: Optional[str] = Field(None, description="Recipe thumbnail URL")
    category: Optional[str] = Field(None, description="Recipe category (not stored)")


class SaveFavoriteResponse(BaseModel):
    status: str = Field(..., description="saved, already_saved or error")
    label: str = Field(..., description="New label for the save button")
    favorites_count: int = Field(0, ge=0)


class FavoritesView(BaseModel):
    items: List[FavoriteEntry] = Field(default_factory=list)


class RegisterRequest(BaseModel):
    username: str = Field("", description="Account name")
    password: str = Field("", description="Account password (stored hashed)")


class RegisterResponse(BaseModel):
    status: str = "ok"
    username: str
    replaced: bool = Field(False, description="True if an account with this username already existed")
