"""
HTML rendering for recipe cards and the recipe detail view.

A Card is the display unit for one recipe on the home, search and favorites
pages: thumbnail, title, optional category line, a "View" link to the detail
page and a "Save" action. Every value interpolated into markup goes through
esc().

The save action is wired to the favorites store. Triggering it never raises:
a corrupt favorites blob reads as empty (handled by the store) and a storage
backend failure only turns the button label into a transient error.
"""

import html
import logging
from dataclasses import dataclass
from typing import Any, Optional

from .favorites import FavoritesStore
from .models import FavoriteEntry, RecipeDetail, RecipeSummary
from .storage import StorageError

logger = logging.getLogger(__name__)

LABEL_SAVE = "Save"
LABEL_SAVED = "Saved"
LABEL_ALREADY_SAVED = "Already saved"
LABEL_SAVE_FAILED = "Couldn't save"


def esc(value: Any) -> str:
    """HTML-escape a value for text or attribute context (None -> "")."""
    if value is None:
        return ""
    return html.escape(str(value), quote=True)


class SaveAction:
    """
    "Save to favorites" action of a card.

    Attributes:
        entry: FavoriteEntry that will be stored
        label: Current button label; starts as "Save"
        status: Outcome of the last trigger ("saved", "already_saved", "error"), None before
    """

    def __init__(self, entry: FavoriteEntry, store: FavoritesStore) -> None:
        self.entry = entry
        self.store = store
        self.label = LABEL_SAVE
        self.status: Optional[str] = None

    def trigger(self) -> str:
        """
        Save the entry if not already saved and update the label.

        Returns:
            The new label
        """
        try:
            added = self.store.add(self.entry)
        except StorageError as e:
            logger.error("Saving favorite %s failed: %s", self.entry.id, e)
            self.status = "error"
            self.label = LABEL_SAVE_FAILED
            return self.label

        self.status = "saved" if added else "already_saved"
        self.label = LABEL_SAVED if added else LABEL_ALREADY_SAVED
        return self.label


@dataclass
class Card:
    """Display unit for one recipe."""
    recipe_id: str
    title: str
    image_url: Optional[str]
    category: Optional[str]
    detail_url: str
    save_action: SaveAction

    def to_html(self) -> str:
        category = f'<p class="muted">{esc(self.category)}</p>' if self.category else ""
        return (
            '<div class="card">'
            f'<img src="{esc(self.image_url)}" alt="{esc(self.title)}" loading="lazy">'
            '<div class="card-body">'
            f"<h3>{esc(self.title)}</h3>"
            f"{category}"
            '<div class="card-actions">'
            f'<a class="btn primary" href="{esc(self.detail_url)}">View</a>'
            f'<button class="btn" data-id="{esc(self.recipe_id)}" data-name="{esc(self.title)}" '
            f'data-thumb="{esc(self.image_url)}" aria-label="save">{esc(self.save_action.label)}</button>'
            "</div>"
            "</div>"
            "</div>"
        )


def render_card(recipe: RecipeSummary, store: FavoritesStore) -> Card:
    """Project a recipe summary (or detail) into a Card wired to the store."""
    return Card(
        recipe_id=recipe.id,
        title=recipe.name,
        image_url=recipe.thumbnail_url,
        category=recipe.category,
        detail_url=recipe.detail_url,
        save_action=SaveAction(FavoriteEntry.from_recipe(recipe), store),
    )


def render_detail(recipe: RecipeDetail) -> str:
    """Full recipe markup: meta column, ingredients and instructions."""
    tags = f"<strong>Tags:</strong> {esc(', '.join(recipe.tags))}" if recipe.tags else ""
    if recipe.youtube_url:
        video = f'<a class="btn primary" href="{esc(recipe.youtube_url)}" target="_blank" rel="noopener">Watch video</a>'
    else:
        video = '<a class="btn primary" href="#" aria-disabled="true">Watch video</a>'
    ingredients = "".join(f"<li>{esc(line.label)}</li>" for line in recipe.ingredients)
    source = ""
    if recipe.source_url:
        source = (
            '<p class="muted source">Source: '
            f'<a href="{esc(recipe.source_url)}" target="_blank" rel="noopener">{esc(recipe.source_url)}</a></p>'
        )

    return (
        '<div class="recipe-meta">'
        f'<img src="{esc(recipe.thumbnail_url)}" alt="{esc(recipe.name)}" class="hero-img">'
        f"<h2>{esc(recipe.name)}</h2>"
        f'<p class="muted"><strong>Category:</strong> {esc(recipe.category or "—")} '
        f'&nbsp; <strong>Area:</strong> {esc(recipe.area or "—")}</p>'
        f'<p class="tags">{tags}</p>'
        f'<p class="video">{video}</p>'
        "</div>"
        "<div>"
        '<div class="card ingredients"><h3>Ingredients</h3>'
        f"<ul>{ingredients}</ul></div>"
        '<div class="card instructions"><h3>Instructions</h3>'
        f"<p>{esc(recipe.instructions)}</p></div>"
        f"{source}"
        "</div>"
    )
