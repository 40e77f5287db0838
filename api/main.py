"""
FastAPI application for Meal Finder.

This module serves the site pages and a small JSON API:
- GET /: Home page (tags, trending random recipes, featured searches)
- GET /search: Search page; GET /search/results: results fragment for in-page re-search
- GET /recipe: Recipe detail page
- GET /favorites: Saved recipes page
- GET/POST /register: Local account registration
- GET /api/search, /api/home, /api/recipes/random, /api/recipes/{id}: JSON views
- GET/POST /api/favorites: Read and save favorites
- POST /api/register: Register a local account
- GET /health: Health check

Client storage (favorites, accounts) is scoped to a browser session. The
session is taken from the X-Session-ID header, else the mf_session cookie;
when neither is present a new session id is issued as a cookie.

Run the API with:
    uvicorn api.main:app --reload

Access API documentation at:
    http://localhost:8000/docs (Swagger UI)
"""

# Import config early to load .env file before any other code accesses environment variables
import api.config  # noqa: F401

import logging
import time
import uuid
from typing import Optional, Tuple

from fastapi import Cookie, FastAPI, Form, Header, HTTPException, Query, Response, status
from fastapi.responses import HTMLResponse, RedirectResponse

from api.config import HomeConfig, MealDBConfig, get_config_status
from api.schemas import (
    FavoriteInput,
    FavoritesView,
    HomeResponse,
    HomeSectionOut,
    RegisterRequest,
    RegisterResponse,
    SaveFavoriteResponse,
    SearchResponse,
)
from mealfinder.accounts import ValidationError, get_registered_user, register_user
from mealfinder.connectors.base import NetworkError
from mealfinder.connectors.mealdb_connector import MealDBConnector
from mealfinder.controllers import DetailController, HomeController, HomeSection, PageState, SearchController
from mealfinder.db import db_is_enabled, init_db
from mealfinder.events import log_favorite_saved, log_recipe_viewed, log_search_performed, log_user_registered
from mealfinder.favorites import FavoritesStore
from mealfinder.layout import (
    render_favorites_page,
    render_home_page,
    render_recipe_page,
    render_register_page,
    render_search_page,
    render_search_results,
)
from mealfinder.models import RecipeDetail, RecipeSummary
from mealfinder.render import render_card
from mealfinder.storage import StorageError, get_storage

logger = logging.getLogger(__name__)

SESSION_COOKIE = "mf_session"
SESSION_COOKIE_MAX_AGE = 60 * 60 * 24 * 365

# Track app start time for uptime calculation
_APP_START_TIME = time.time()

app = FastAPI(
    title="Meal Finder",
    description="Search TheMealDB by name or ingredient, view recipes and keep local favorites",
    version="1.0.0",
    openapi_tags=[
        {"name": "pages", "description": "Server-rendered HTML pages."},
        {"name": "search", "description": "Recipe search and lookup (TheMealDB)."},
        {"name": "favorites", "description": "Per-session saved recipes."},
        {"name": "accounts", "description": "Per-session local account registration."},
        {"name": "health", "description": "Health check and monitoring endpoints."},
    ],
)

# Initialize database tables if DATABASE_URL is set
if db_is_enabled():
    try:
        init_db()
    except Exception as e:
        # Don't crash the app; storage calls will report StorageError instead
        logger.warning("Database initialization failed: %s", e)


def get_connector() -> MealDBConnector:
    """Build the recipe connector from configuration."""
    return MealDBConnector(base_url=MealDBConfig.get_base_url(), timeout=MealDBConfig.get_timeout_seconds())


def resolve_session(x_session_id: Optional[str], cookie_session: Optional[str]) -> Tuple[str, bool]:
    """
    Resolve the client storage session.

    Returns:
        (session_id, is_new); is_new means the id was just generated and
        should be set as a cookie on the response
    """
    if x_session_id:
        return x_session_id, False
    if cookie_session:
        return cookie_session, False
    return uuid.uuid4().hex, True


def _remember_session(response: Response, session_id: str, is_new: bool) -> None:
    if is_new:
        response.set_cookie(SESSION_COOKIE, session_id, max_age=SESSION_COOKIE_MAX_AGE, httponly=True, samesite="lax")


def _favorites_store(session_id: str) -> FavoritesStore:
    return FavoritesStore(get_storage(session_id))


def _html(body: str, session_id: str, is_new: bool, status_code: int = 200) -> HTMLResponse:
    response = HTMLResponse(body, status_code=status_code)
    _remember_session(response, session_id, is_new)
    return response


def _section_out(section: HomeSection) -> HomeSectionOut:
    return HomeSectionOut(
        state=section.state.value,
        message=section.message,
        partial_failure=section.partial_failure,
        records=section.records,
    )


def _home_controller() -> HomeController:
    controller = HomeController(
        get_connector(),
        random_count=HomeConfig.get_random_count(),
        featured_per_term=HomeConfig.get_featured_per_term(),
    )
    controller.load()
    return controller


def _search_controller(q: str, session_id: str) -> SearchController:
    controller = SearchController(get_connector(), {"q": q})
    controller.run()
    if controller.search_results is not None:
        log_search_performed(
            session_id,
            controller.query,
            len(controller.results),
            controller.search_results.sources_status,
        )
    return controller


# ============================================================================
# Pages
# ============================================================================

@app.get("/", response_class=HTMLResponse, tags=["pages"])
def home_page(
    registered: Optional[str] = Query(None, description="Set after a successful registration"),
    x_session_id: Optional[str] = Header(None, alias="X-Session-ID"),
    mf_session: Optional[str] = Cookie(None),
) -> HTMLResponse:
    """Home page with quick-search tags, trending and featured recipes."""
    session_id, is_new = resolve_session(x_session_id, mf_session)
    controller = _home_controller()
    notice = "Registration successful." if registered else None
    return _html(render_home_page(controller, _favorites_store(session_id), notice=notice), session_id, is_new)


@app.get("/search", response_class=HTMLResponse, tags=["pages"])
def search_page(
    q: str = Query("", description="Recipe name or ingredient"),
    x_session_id: Optional[str] = Header(None, alias="X-Session-ID"),
    mf_session: Optional[str] = Cookie(None),
) -> HTMLResponse:
    """Search page seeded from ?q=."""
    session_id, is_new = resolve_session(x_session_id, mf_session)
    controller = _search_controller(q, session_id)
    return _html(render_search_page(controller, _favorites_store(session_id)), session_id, is_new)


@app.get("/search/results", response_class=HTMLResponse, tags=["pages"])
def search_results_fragment(
    q: str = Query("", description="Recipe name or ingredient"),
    x_session_id: Optional[str] = Header(None, alias="X-Session-ID"),
    mf_session: Optional[str] = Cookie(None),
) -> HTMLResponse:
    """Results fragment used by the search page to re-run a search without reloading."""
    session_id, is_new = resolve_session(x_session_id, mf_session)
    controller = _search_controller(q, session_id)
    return _html(render_search_results(controller, _favorites_store(session_id)), session_id, is_new)


@app.get("/recipe", response_class=HTMLResponse, tags=["pages"])
def recipe_page(
    id: Optional[str] = Query(None, description="TheMealDB recipe id"),
    x_session_id: Optional[str] = Header(None, alias="X-Session-ID"),
    mf_session: Optional[str] = Cookie(None),
) -> HTMLResponse:
    """Recipe detail page seeded from ?id=."""
    session_id, is_new = resolve_session(x_session_id, mf_session)
    controller = DetailController(get_connector(), {"id": id or ""})
    controller.load()
    if controller.recipe_id and controller.state != PageState.ERROR:
        log_recipe_viewed(session_id, controller.recipe_id, found=controller.state == PageState.SUCCESS)
    return _html(render_recipe_page(controller), session_id, is_new)


@app.get("/favorites", response_class=HTMLResponse, tags=["pages"])
def favorites_page(
    x_session_id: Optional[str] = Header(None, alias="X-Session-ID"),
    mf_session: Optional[str] = Cookie(None),
) -> HTMLResponse:
    """Saved recipes for this session."""
    session_id, is_new = resolve_session(x_session_id, mf_session)
    store = _favorites_store(session_id)
    try:
        entries = store.load()
    except StorageError as e:
        logger.error("Failed to read favorites for session %s: %s", session_id, e)
        entries = []
    return _html(render_favorites_page(entries, store), session_id, is_new)


@app.get("/register", response_class=HTMLResponse, tags=["pages"])
def register_page(
    x_session_id: Optional[str] = Header(None, alias="X-Session-ID"),
    mf_session: Optional[str] = Cookie(None),
) -> HTMLResponse:
    session_id, is_new = resolve_session(x_session_id, mf_session)
    return _html(render_register_page(), session_id, is_new)


@app.post("/register", tags=["pages"])
def register_form(
    username: str = Form(""),
    password: str = Form(""),
    x_session_id: Optional[str] = Header(None, alias="X-Session-ID"),
    mf_session: Optional[str] = Cookie(None),
):
    """Handle the registration form; redirects home on success."""
    session_id, is_new = resolve_session(x_session_id, mf_session)
    try:
        user = register_user(get_storage(session_id), username, password)
    except ValidationError as e:
        return _html(render_register_page(error=e.message, username=username), session_id, is_new, status_code=400)
    except StorageError as e:
        logger.error("Registration failed for session %s: %s", session_id, e)
        return _html(
            render_register_page(error="Registration is unavailable right now.", username=username),
            session_id, is_new, status_code=503,
        )

    log_user_registered(session_id, user.username)
    response = RedirectResponse("/?registered=1", status_code=status.HTTP_303_SEE_OTHER)
    _remember_session(response, session_id, is_new)
    return response


# ============================================================================
# JSON API
# ============================================================================

@app.get(
    "/api/search",
    response_model=SearchResponse,
    tags=["search"],
    summary="Search recipes by name and ingredient",
    description="Searches TheMealDB by name and by main ingredient in parallel and merges the results, "
                "by-name results first, deduplicated by recipe id.",
)
def api_search(
    response: Response,
    q: str = Query(..., min_length=1, description="Recipe name or ingredient (e.g., 'chicken')"),
    x_session_id: Optional[str] = Header(None, alias="X-Session-ID"),
    mf_session: Optional[str] = Cookie(None),
) -> SearchResponse:
    """
    Search recipes.

    Raises:
        HTTPException 400: If the query is blank
        HTTPException 502: If both TheMealDB endpoints failed
    """
    session_id, is_new = resolve_session(x_session_id, mf_session)
    _remember_session(response, session_id, is_new)

    controller = _search_controller(q, session_id)
    if controller.state == PageState.IDLE:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Search query must not be blank.")
    if controller.state == PageState.ERROR:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="Error connecting to TheMealDB.")

    return SearchResponse(
        query=controller.query,
        state=controller.state.value,
        results=controller.results,
        sources_status=controller.search_results.sources_status,
        partial_failure=controller.partial_failure,
    )


@app.get("/api/home", response_model=HomeResponse, tags=["search"], summary="Home page sections")
def api_home() -> HomeResponse:
    controller = _home_controller()
    return HomeResponse(
        trending=_section_out(controller.trending),
        featured=_section_out(controller.featured),
        tags=controller.tags,
    )


@app.get("/api/recipes/random", response_model=RecipeDetail, tags=["search"], summary="One random recipe")
def api_random_recipe() -> RecipeDetail:
    try:
        recipe = get_connector().random()
    except NetworkError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=f"Error connecting to TheMealDB: {e}") from e
    if recipe is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No recipe returned.")
    return recipe


@app.get("/api/recipes/{recipe_id}", response_model=RecipeDetail, tags=["search"], summary="Recipe by id")
def api_recipe(recipe_id: str) -> RecipeDetail:
    """
    Full recipe with the compacted ingredient list.

    Raises:
        HTTPException 404: If TheMealDB has no recipe with this id
        HTTPException 502: If TheMealDB could not be reached
    """
    controller = DetailController(get_connector(), {"id": recipe_id})
    controller.load()
    if controller.state == PageState.ERROR:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="Error connecting to TheMealDB.")
    if controller.recipe is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Recipe {recipe_id} not found.")
    return controller.recipe


@app.get("/api/favorites", response_model=FavoritesView, tags=["favorites"])
def api_list_favorites(
    response: Response,
    x_session_id: Optional[str] = Header(None, alias="X-Session-ID"),
    mf_session: Optional[str] = Cookie(None),
) -> FavoritesView:
    session_id, is_new = resolve_session(x_session_id, mf_session)
    _remember_session(response, session_id, is_new)
    try:
        items = _favorites_store(session_id).load()
    except StorageError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e)) from e
    return FavoritesView(items=items)


@app.post(
    "/api/favorites",
    response_model=SaveFavoriteResponse,
    tags=["favorites"],
    summary="Save a recipe to favorites",
    description="Appends the recipe unless its id is already saved. The response carries the new save "
                "button label. A storage failure is reported as status 'error', not as an HTTP error.",
)
def api_save_favorite(
    item: FavoriteInput,
    response: Response,
    x_session_id: Optional[str] = Header(None, alias="X-Session-ID"),
    mf_session: Optional[str] = Cookie(None),
) -> SaveFavoriteResponse:
    session_id, is_new = resolve_session(x_session_id, mf_session)
    _remember_session(response, session_id, is_new)

    store = _favorites_store(session_id)
    recipe = RecipeSummary(id=item.id, name=item.name, thumbnail_url=item.thumbnail_url, category=item.category)
    action = render_card(recipe, store).save_action
    label = action.trigger()
    log_favorite_saved(session_id, item.id, action.status)

    count = 0
    if action.status != "error":
        count = len(store.load())
    return SaveFavoriteResponse(status=action.status, label=label, favorites_count=count)


@app.post("/api/register", response_model=RegisterResponse, tags=["accounts"])
def api_register(
    body: RegisterRequest,
    response: Response,
    x_session_id: Optional[str] = Header(None, alias="X-Session-ID"),
    mf_session: Optional[str] = Cookie(None),
) -> RegisterResponse:
    """
    Register a local account for this session.

    Raises:
        HTTPException 400: If username or password is empty
        HTTPException 503: If client storage is unavailable
    """
    session_id, is_new = resolve_session(x_session_id, mf_session)
    _remember_session(response, session_id, is_new)
    storage = get_storage(session_id)
    try:
        replaced = get_registered_user(storage, body.username) is not None
        user = register_user(storage, body.username, body.password)
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message) from e
    except StorageError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e)) from e

    log_user_registered(session_id, user.username)
    return RegisterResponse(username=user.username, replaced=replaced)


@app.get("/health", tags=["health"])
def health():
    """
    Health check endpoint for monitoring and status checks.

    Returns:
        Dictionary with status, API metadata, uptime and effective configuration.
        Always returns 200 OK if the endpoint is reachable.
    """
    return {
        "status": "ok",
        "name": "Meal Finder",
        "version": "1.0.0",
        "uptime_seconds": int(time.time() - _APP_START_TIME),
        "db_enabled": db_is_enabled(),
        "config": get_config_status(),
    }
