# state.py
"""Pure transitions and derivations over AppState.

Every transition takes the current state and returns the next one. Transitions
that need data from the catalog also return a FetchRequest; the app runs it and
feeds the outcome back through fetch_succeeded or fetch_failed. Only the
request carrying the latest token may change the results.
"""
from dataclasses import replace
from typing import List, Optional, Tuple

from models import (AppState, CatalogItem, FetchKind, FetchRequest, QueryState,
                    ResultPage, ResultSource, ViewMode)

DEFAULTS_ERROR = "Failed to load featured anime."
SEARCH_ERROR = "Failed to fetch anime data. Please try again."

Transition = Tuple[AppState, Optional[FetchRequest]]


def _issue(state: AppState, kind: FetchKind, page: int, search_text: str = "", **changes) -> Transition:
    token = state.request_token + 1
    request = FetchRequest(kind=kind, token=token, page=page, query=search_text)
    return replace(state, loading=True, error=None, request_token=token, **changes), request


def load_defaults(state: AppState, page: int = 1) -> Transition:
    return _issue(state, FetchKind.DEFAULTS, page, source=ResultSource.DEFAULT)


def submit(state: AppState, text: str) -> Transition:
    """Starts a new search from page 1. Blank text leaves everything untouched."""
    query = text.strip()
    if not query:
        return state, None
    return _issue(state, FetchKind.SEARCH, 1, query,
                  query=QueryState(text=query, page=1), source=ResultSource.SEARCH)


def change_page(state: AppState, page: int) -> Transition:
    # total_pages belongs to the last completed fetch until the pending one lands
    if state.loading or not 1 <= page <= state.total_pages:
        return state, None
    if state.source is ResultSource.SEARCH:
        if not state.query.text:
            return state, None
        return _issue(state, FetchKind.SEARCH, page, state.query.text)
    return load_defaults(state, page)


def back_to_trending(state: AppState) -> Transition:
    return load_defaults(replace(state, query=QueryState()))


def fetch_succeeded(state: AppState, request: FetchRequest, page: ResultPage) -> AppState:
    if request.token != state.request_token:
        return state
    return replace(
        state,
        results=page.items,
        meta=page.meta,
        results_source=ResultSource.SEARCH if request.kind is FetchKind.SEARCH else ResultSource.DEFAULT,
        query=replace(state.query, page=request.page),
        loading=False,
        error=None,
    )


def fetch_failed(state: AppState, request: FetchRequest) -> AppState:
    if request.token != state.request_token:
        return state
    if request.kind is FetchKind.DEFAULTS:
        return replace(state, loading=False, error=DEFAULTS_ERROR)
    return replace(state, results=(), meta=None, loading=False, error=SEARCH_ERROR)


def settle(state: AppState, request: FetchRequest) -> AppState:
    """Clears the loading flag if the request is still the latest one."""
    if request.token != state.request_token or not state.loading:
        return state
    return replace(state, loading=False)


def open_details(state: AppState, item: CatalogItem) -> AppState:
    return replace(state, selected=item)


def close_details(state: AppState) -> AppState:
    if state.selected is None:
        return state
    return replace(state, selected=None)


def find_item(state: AppState, mal_id: int) -> Optional[CatalogItem]:
    return next((item for item in state.results if item.mal_id == mal_id), None)


def page_window(current: int, total: int, size: int = 5) -> List[int]:
    """Page numbers to offer as buttons, centred on current where possible."""
    if total < 1 or size < 1:
        return []
    start = max(1, min(total - size + 1, current - size // 2))
    end = min(total, start + size - 1)
    return list(range(start, end + 1))


def view_mode(state: AppState) -> ViewMode:
    if state.loading:
        return ViewMode.LOADING
    if state.error:
        return ViewMode.ERROR
    if state.source is ResultSource.SEARCH:
        return ViewMode.SEARCHING if state.results else ViewMode.NO_RESULTS
    return ViewMode.DEFAULT


def results_banner(state: AppState) -> str:
    if not state.results or state.loading:
        return ""
    if state.results_source is ResultSource.DEFAULT:
        return f"🔥 TRENDING ANIME • Discover the most popular anime • {state.total_results} total"
    current = state.meta.current_page if state.meta else state.query.page
    return f"Found {state.total_results} anime • Page {current} of {state.total_pages}"


def grid_visible(state: AppState) -> bool:
    return bool(state.results) and not state.loading


def pagination_visible(state: AppState) -> bool:
    return grid_visible(state) and state.total_pages > 1
