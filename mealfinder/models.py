"""
Recipe, favorite and account models for the meal finder.

This module defines the canonical record shapes used throughout the app.
The connector maps raw TheMealDB meal objects into RecipeSummary or
RecipeDetail; the favorites store and account registry persist
FavoritesBlob and RegisteredUser as JSON blobs in client storage.

# NOTE: TheMealDB returns every field as a string (or null), including ids.
    Ingredient-filter results only carry idMeal, strMeal and strMealThumb,
    so category is optional on RecipeSummary.

Persisted blobs are versioned. Anything that fails validation on read is
treated as absent by the caller, never as a fatal error.
"""

from typing import Any, Dict, List, Literal, Optional
from urllib.parse import quote

import bcrypt
from pydantic import BaseModel, Field

# TheMealDB exposes ingredients as strIngredient1..20 / strMeasure1..20
INGREDIENT_SLOTS = 20

FAVORITES_SCHEMA_VERSION = 1
USER_SCHEMA_VERSION = 1

# bcrypt only reads the first 72 bytes of a password
MAX_PASSWORD_BYTES = 72


def _clean(value: Any) -> Optional[str]:
    """Trim a raw API string, mapping blank values to None."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None


class RecipeSummary(BaseModel):
    """
    Minimal recipe record, produced by every API endpoint.

    Ingredient-filter results omit the category; nothing else about the
    shape is guaranteed across sources beyond the id.
    """
    id: str = Field(..., description="TheMealDB meal identifier (idMeal)")
    name: str = Field(..., description="Display name (strMeal)")
    thumbnail_url: Optional[str] = Field(None, description="Thumbnail image URL (strMealThumb)")
    category: Optional[str] = Field(None, description="Category, absent on ingredient-filter results")

    @property
    def detail_url(self) -> str:
        """Link to the detail page for this recipe."""
        return f"/recipe?id={quote(self.id, safe='')}"

    @classmethod
    def from_meal(cls, meal: Dict[str, Any]) -> "RecipeSummary":
        """
        Build a summary from a raw TheMealDB meal object.

        Raises:
            ValueError: If the meal has no id or no name.
        """
        recipe_id = _clean(meal.get("idMeal"))
        name = _clean(meal.get("strMeal"))
        if not recipe_id or not name:
            raise ValueError("meal object is missing idMeal or strMeal")
        return cls(
            id=recipe_id,
            name=name,
            thumbnail_url=_clean(meal.get("strMealThumb")),
            category=_clean(meal.get("strCategory")),
        )


class IngredientLine(BaseModel):
    """One (measure, ingredient) pair from a recipe detail."""
    ingredient: str
    measure: Optional[str] = None

    @property
    def label(self) -> str:
        return f"{self.measure or ''} {self.ingredient}".strip()


def compact_ingredients(meal: Dict[str, Any]) -> List[IngredientLine]:
    """
    Collapse the 20 ingredient/measure slots into an ordered list.

    Slots with a missing or blank ingredient are skipped; later slots are
    still read, so a gap in the middle does not truncate the list.

    Examples:
        >>> lines = compact_ingredients({"strIngredient1": "Salt", "strIngredient2": "", "strIngredient3": "Pepper"})
        >>> [line.ingredient for line in lines]
        ['Salt', 'Pepper']
    """
    lines: List[IngredientLine] = []
    for slot in range(1, INGREDIENT_SLOTS + 1):
        ingredient = _clean(meal.get(f"strIngredient{slot}"))
        if not ingredient:
            continue
        lines.append(IngredientLine(ingredient=ingredient, measure=_clean(meal.get(f"strMeasure{slot}"))))
    return lines


class RecipeDetail(RecipeSummary):
    """Full recipe record returned by lookup and random."""
    area: Optional[str] = Field(None, description="Cuisine area (strArea)")
    tags: List[str] = Field(default_factory=list, description="Tags split from strTags")
    instructions: Optional[str] = Field(None, description="Free-text instructions")
    youtube_url: Optional[str] = Field(None, description="External video link")
    source_url: Optional[str] = Field(None, description="Original source link")
    ingredients: List[IngredientLine] = Field(default_factory=list, description="Compacted ingredient list")

    @classmethod
    def from_meal(cls, meal: Dict[str, Any]) -> "RecipeDetail":
        summary = RecipeSummary.from_meal(meal)
        tags_raw = _clean(meal.get("strTags")) or ""
        return cls(
            **summary.model_dump(),
            area=_clean(meal.get("strArea")),
            tags=[tag.strip() for tag in tags_raw.split(",") if tag.strip()],
            instructions=_clean(meal.get("strInstructions")),
            youtube_url=_clean(meal.get("strYoutube")),
            source_url=_clean(meal.get("strSource")),
            ingredients=compact_ingredients(meal),
        )


class FavoriteEntry(BaseModel):
    """A saved recipe summary. Never updated or removed once stored."""
    id: str
    name: str
    thumbnail_url: Optional[str] = None

    @classmethod
    def from_recipe(cls, recipe: RecipeSummary) -> "FavoriteEntry":
        return cls(id=recipe.id, name=recipe.name, thumbnail_url=recipe.thumbnail_url)

    @classmethod
    def from_legacy(cls, item: Dict[str, Any]) -> "FavoriteEntry":
        """
        Read an entry written by the old site ({id, title, img}).

        A missing title falls back to the id so the entry can still be re-saved.

        Raises:
            ValueError: If the entry has no usable id.
        """
        recipe_id = _clean(item.get("id"))
        if not recipe_id:
            raise ValueError("legacy favorite is missing its id")
        return cls(id=recipe_id, name=_clean(item.get("title")) or recipe_id, thumbnail_url=_clean(item.get("img")))


class FavoritesBlob(BaseModel):
    """Versioned favorites list as persisted under the favorites key."""
    version: Literal[FAVORITES_SCHEMA_VERSION] = FAVORITES_SCHEMA_VERSION
    items: List[FavoriteEntry] = Field(default_factory=list)


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


class RegisteredUser(BaseModel):
    """
    Locally registered account.

    Only a bcrypt hash of the password is stored (the salt is part of the hash).
    """
    version: Literal[USER_SCHEMA_VERSION] = USER_SCHEMA_VERSION
    username: str = Field(..., min_length=1)
    password_hash: str

    @classmethod
    def create(cls, username: str, password: str) -> "RegisteredUser":
        return cls(username=username, password_hash=hash_password(password))

    def verify_password(self, password: str) -> bool:
        try:
            return bcrypt.checkpw(password.encode("utf-8"), self.password_hash.encode("utf-8"))
        except ValueError:
            # Stored hash is not a bcrypt hash
            return False
