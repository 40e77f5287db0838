"""
Page layout for the server-rendered site.

Provides the shared page shell (header, nav, global styles, page script) and
one render function per page that turns a settled controller into HTML.
Standard feedback markup is used for every state: a muted paragraph for
idle/empty/error messages and a notice line for partial failures.

The page script does two things in the browser:
- Save buttons POST to /api/favorites and show the returned label.
- The search page form rewrites ?q= with history.replaceState and reloads
  only the results fragment. Each request is numbered and a response is
  ignored unless it belongs to the latest request.
"""

from typing import Iterable, Optional
from urllib.parse import quote

from .controllers import DetailController, HomeController, HomeSection, PageState, SearchController
from .favorites import FavoritesStore
from .models import FavoriteEntry, RecipeSummary
from .render import esc, render_card, render_detail

SITE_NAME = "Meal Finder"

GLOBAL_STYLES = """
body { font-family: 'Nunito', sans-serif; margin: 0; background: #fafaf7; color: #222; }
header { display: flex; gap: 1rem; align-items: center; padding: 0.75rem 1.5rem; border-bottom: 1px solid #e5e5e0; }
header nav a { margin-right: 0.75rem; color: #2f6f4e; text-decoration: none; }
main { max-width: 1100px; margin: 0 auto; padding: 1rem 1.5rem; }
.grid { display: grid; grid-template-columns: repeat(auto-fill, minmax(200px, 1fr)); gap: 1rem; }
.card { border: 1px solid #e5e5e0; border-radius: 10px; background: #fff; overflow: hidden; }
.card img { width: 100%; display: block; }
.card-body { padding: 0.5rem 0.75rem; }
.card-actions { display: flex; gap: 0.5rem; margin-top: 0.5rem; }
.btn { padding: 0.3rem 0.8rem; border-radius: 6px; border: 1px solid #2f6f4e; background: #fff; color: #2f6f4e; cursor: pointer; text-decoration: none; }
.btn.primary { background: #2f6f4e; color: #fff; }
.tag { margin: 0 0.4rem 0.4rem 0; padding: 0.2rem 0.7rem; border-radius: 999px; border: 1px solid #ccc; background: #fff; text-decoration: none; color: #333; display: inline-block; }
.muted { color: #777; }
.notice { color: #9a6700; }
.recipe { display: grid; grid-template-columns: 1fr 1.4fr; gap: 1.5rem; }
.hero-img { width: 100%; border-radius: 10px; }
.ingredients, .instructions { padding: 0.75rem 1rem; margin-bottom: 0.75rem; }
form.search { display: flex; gap: 0.5rem; margin: 0.5rem 0 1rem; }
form.search input { flex: 1; padding: 0.4rem; }
"""

PAGE_SCRIPT = """
document.addEventListener('click', async (e) => {
  const btn = e.target.closest('button[data-id]');
  if (!btn) return;
  try {
    const res = await fetch('/api/favorites', {
      method: 'POST',
      headers: {'Content-Type': 'application/json'},
      body: JSON.stringify({id: btn.dataset.id, name: btn.dataset.name, thumbnail_url: btn.dataset.thumb || null}),
    });
    const data = await res.json();
    btn.textContent = data.label || "Couldn't save";
  } catch (err) {
    btn.textContent = "Couldn't save";
  }
});

const searchForm = document.querySelector('#searchFormPage');
if (searchForm) {
  let latestRequest = 0;
  searchForm.addEventListener('submit', async (e) => {
    e.preventDefault();
    const q = searchForm.querySelector('input[name=q]').value.trim();
    history.replaceState(null, '', `?q=${encodeURIComponent(q)}`);
    const requestId = ++latestRequest;
    const target = document.querySelector('#searchResults');
    target.innerHTML = '<p class="muted">Searching...</p>';
    try {
      const res = await fetch(`/search/results?q=${encodeURIComponent(q)}`);
      const body = await res.text();
      if (requestId !== latestRequest) return;
      target.innerHTML = body;
    } catch (err) {
      if (requestId !== latestRequest) return;
      target.innerHTML = '<p class="muted">Failed to load results.</p>';
    }
  });
}
"""


def page_shell(title: str, body: str, body_id: str, notice: Optional[str] = None) -> str:
    """Wrap page content in the shared document, header and nav."""
    notice_html = f'<p class="notice">{esc(notice)}</p>' if notice else ""
    return (
        "<!DOCTYPE html>"
        '<html lang="en"><head><meta charset="utf-8">'
        '<meta name="viewport" content="width=device-width, initial-scale=1">'
        f"<title>{esc(title)} | {SITE_NAME}</title>"
        f"<style>{GLOBAL_STYLES}</style></head>"
        f'<body id="{esc(body_id)}">'
        f"<header><strong>{SITE_NAME}</strong><nav>"
        '<a href="/">Home</a><a href="/search">Search</a>'
        '<a href="/favorites">Favorites</a><a href="/register">Register</a>'
        "</nav></header>"
        f"<main>{notice_html}{body}</main>"
        f"<script>{PAGE_SCRIPT}</script>"
        "</body></html>"
    )


def muted(message: str) -> str:
    return f'<p class="muted">{esc(message)}</p>'


def card_grid(records: Iterable[RecipeSummary], store: FavoritesStore) -> str:
    cards = "".join(render_card(record, store).to_html() for record in records)
    return f'<div class="grid">{cards}</div>'


def search_form(form_id: str, action: str, query: str = "") -> str:
    return (
        f'<form class="search" id="{esc(form_id)}" action="{esc(action)}" method="get">'
        f'<input type="search" name="q" value="{esc(query)}" placeholder="Search by recipe or ingredient">'
        '<button class="btn primary" type="submit">Search</button>'
        "</form>"
    )


def _home_section(section: HomeSection, section_id: str, store: FavoritesStore) -> str:
    heading = f"<h2>{esc(section.title)}</h2>"
    if section.state == PageState.SUCCESS:
        notice = f'<p class="notice">{esc(section.message)}</p>' if section.partial_failure else ""
        content = notice + card_grid(section.records, store)
    elif section.state == PageState.LOADING:
        content = muted("Loading...")
    else:
        content = muted(section.message)
    return f'<section id="{esc(section_id)}">{heading}{content}</section>'


def render_home_page(controller: HomeController, store: FavoritesStore, notice: Optional[str] = None) -> str:
    tags = "".join(
        f'<a class="tag" href="/search?q={quote(tag["query"])}">{esc(tag["label"])}</a>'
        for tag in controller.tags
    )
    body = (
        "<h1>Find your next meal</h1>"
        + search_form("searchForm", "/search")
        + f'<div id="tagList">{tags}</div>'
        + _home_section(controller.trending, "trendingGrid", store)
        + _home_section(controller.featured, "featuredGrid", store)
    )
    return page_shell("Home", body, "page-home", notice=notice)


def render_search_results(controller: SearchController, store: FavoritesStore) -> str:
    """Results fragment: meta line plus cards or the state message."""
    if controller.state == PageState.SUCCESS:
        notice = f'<p class="notice">{esc(controller.message)}</p>' if controller.partial_failure else ""
        return f'<p id="searchMeta">{esc(controller.meta)}</p>{notice}' + card_grid(controller.results, store)
    if controller.state == PageState.EMPTY:
        return (
            f'<p id="searchMeta">{esc(controller.meta)}</p>'
            '<p id="noResults" class="muted">No recipes matched. Try another ingredient or name.</p>'
        )
    return muted(controller.message)


def render_search_page(controller: SearchController, store: FavoritesStore) -> str:
    body = (
        "<h1>Search recipes</h1>"
        + search_form("searchFormPage", "/search", controller.query)
        + f'<div id="searchResults">{render_search_results(controller, store)}</div>'
    )
    return page_shell("Search", body, "page-search")


def render_recipe_page(controller: DetailController) -> str:
    if controller.state == PageState.SUCCESS and controller.recipe is not None:
        content = render_detail(controller.recipe)
        title = controller.recipe.name
    else:
        content = f'<div class="recipe-meta">{muted(controller.message)}</div>'
        title = "Recipe"
    return page_shell(title, f'<div id="recipeWrap" class="recipe">{content}</div>', "page-recipe")


def render_favorites_page(entries: Iterable[FavoriteEntry], store: FavoritesStore) -> str:
    records = [RecipeSummary(id=e.id, name=e.name, thumbnail_url=e.thumbnail_url) for e in entries]
    content = card_grid(records, store) if records else muted("No saved recipes yet.")
    return page_shell("Favorites", f"<h1>Saved recipes</h1>{content}", "page-favorites")


def render_register_page(error: Optional[str] = None, username: str = "") -> str:
    error_html = f'<p class="notice">{esc(error)}</p>' if error else ""
    body = (
        "<h1>Create an account</h1>"
        + error_html
        + '<form method="post" action="/register">'
        f'<p><label>Username <input id="name" name="username" value="{esc(username)}"></label></p>'
        '<p><label>Password <input id="password" name="password" type="password"></label></p>'
        '<button class="btn primary" id="register" type="submit">Register</button>'
        "</form>"
    )
    return page_shell("Register", body, "page-register")
