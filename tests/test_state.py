from dataclasses import replace

import pytest

from models import AppState, FetchKind, QueryState, ResultSource, ViewMode
from state import (DEFAULTS_ERROR, SEARCH_ERROR, back_to_trending, change_page,
                   close_details, fetch_failed, fetch_succeeded, find_item,
                   grid_visible, load_defaults, open_details, page_window,
                   pagination_visible, results_banner, settle, submit,
                   view_mode)
from tests.conftest import make_item, make_page


def searched(query="Naruto", page=None):
    """State after a successful search for query."""
    state, request = submit(AppState(), query)
    return fetch_succeeded(state, request, page or make_page())


def test_initial_load_issues_one_defaults_request():
    state, request = load_defaults(AppState())
    assert request.kind is FetchKind.DEFAULTS
    assert request.page == 1
    assert request.token == state.request_token == 1
    assert view_mode(state) is ViewMode.LOADING


@pytest.mark.parametrize("text", ["", "   ", "\t\n"])
def test_blank_submit_issues_no_request(text):
    state = AppState()
    new_state, request = submit(state, text)
    assert request is None
    assert new_state is state


def test_submit_resets_page_and_switches_to_search():
    state = replace(searched("Bleach"), query=QueryState("Bleach", 3))
    state, request = submit(state, "  Naruto  ")
    assert request.kind is FetchKind.SEARCH
    assert (request.query, request.page) == ("Naruto", 1)
    assert state.query == QueryState("Naruto", 1)
    assert state.source is ResultSource.SEARCH
    assert state.loading and state.error is None


def test_naruto_scenario():
    state = searched("Naruto", make_page(count=20, total=100, last_page=5))
    assert len(state.results) == 20
    assert state.total_pages == 5
    assert state.total_results == 100
    assert view_mode(state) is ViewMode.SEARCHING
    assert page_window(state.query.page, state.total_pages) == [1, 2, 3, 4, 5]
    assert results_banner(state) == "Found 100 anime • Page 1 of 5"
    assert pagination_visible(state)


@pytest.mark.parametrize("page", [1, 2, 3, 4, 5])
def test_change_page_lands_on_requested_page(page):
    state, request = change_page(searched(), page)
    assert request.kind is FetchKind.SEARCH
    assert request.query == "Naruto"
    state = fetch_succeeded(state, request, make_page(current_page=page))
    assert state.query.page == page


@pytest.mark.parametrize("page", [0, -1, 6, 100])
def test_change_page_out_of_range_is_ignored(page):
    state = searched()
    new_state, request = change_page(state, page)
    assert request is None
    assert new_state is state


def test_change_page_in_trending_pages_the_defaults():
    state, request = load_defaults(AppState())
    state = fetch_succeeded(state, request, make_page(last_page=10, total=200))
    state, request = change_page(state, 4)
    assert request.kind is FetchKind.DEFAULTS
    assert request.page == 4
    assert state.source is ResultSource.DEFAULT


def test_empty_search_shows_no_results():
    state, request = submit(AppState(), "zzzzznonexistent")
    state = fetch_succeeded(state, request, make_page(count=0, total=0, last_page=1))
    assert state.results == ()
    assert view_mode(state) is ViewMode.NO_RESULTS
    assert not grid_visible(state)


def test_failed_search_clears_results():
    state, request = submit(searched(), "One Piece")
    state = fetch_failed(state, request)
    assert state.results == ()
    assert state.meta is None
    assert state.error == SEARCH_ERROR
    assert view_mode(state) is ViewMode.ERROR
    assert not state.loading


def test_failed_defaults_load_keeps_previous_results():
    state, request = load_defaults(AppState())
    state = fetch_succeeded(state, request, make_page())
    state, request = load_defaults(state)
    state = fetch_failed(state, request)
    assert len(state.results) == 20
    assert state.error == DEFAULTS_ERROR
    assert view_mode(state) is ViewMode.ERROR


def test_new_request_clears_previous_error():
    state, request = load_defaults(AppState())
    state = fetch_failed(state, request)
    state, _ = submit(state, "Naruto")
    assert state.error is None
    assert view_mode(state) is ViewMode.LOADING


def test_stale_response_is_ignored():
    state, first = submit(AppState(), "Naruto")
    state, second = submit(state, "Bleach")
    after_stale = fetch_succeeded(state, first, make_page(start_id=500))
    assert after_stale is state
    assert fetch_failed(state, first) is state

    state = fetch_succeeded(state, second, make_page(start_id=900))
    assert state.results[0].mal_id == 900
    assert state.query.text == "Bleach"


def test_results_and_meta_replaced_together():
    state = searched(page=make_page(count=20, total=100, last_page=5))
    state, request = change_page(state, 2)
    state = fetch_succeeded(state, request, make_page(count=3, total=43, last_page=3, start_id=41))
    assert len(state.results) == state.meta.count == 3
    assert state.total_pages == 3


def test_settle_clears_loading_only_for_latest_request():
    state, first = submit(AppState(), "Naruto")
    state, second = submit(state, "Bleach")
    assert settle(state, first).loading
    assert not settle(state, second).loading


def test_back_to_trending_resets_query_and_reloads_defaults():
    state, request = back_to_trending(searched())
    assert state.query == QueryState()
    assert state.source is ResultSource.DEFAULT
    assert request.kind is FetchKind.DEFAULTS
    assert request.page == 1


def test_details_selection_replaces_previous():
    state = searched()
    first, second = state.results[0], state.results[1]
    state = open_details(open_details(state, first), second)
    assert state.selected is second
    state = close_details(state)
    assert state.selected is None
    assert close_details(state) is state


def test_find_item_by_id():
    state = searched()
    assert find_item(state, 3) == make_item(3)
    assert find_item(state, 9999) is None


def test_trending_banner():
    state, request = load_defaults(AppState())
    state = fetch_succeeded(state, request, make_page(total=25000, last_page=1250))
    assert results_banner(state).startswith("🔥 TRENDING ANIME")
    assert results_banner(state).endswith("25000 total")


@pytest.mark.parametrize("current,total,expected", [
    (1, 1, [1]),
    (1, 3, [1, 2, 3]),
    (1, 10, [1, 2, 3, 4, 5]),
    (2, 10, [1, 2, 3, 4, 5]),
    (5, 10, [3, 4, 5, 6, 7]),
    (9, 10, [6, 7, 8, 9, 10]),
    (10, 10, [6, 7, 8, 9, 10]),
    (3, 0, []),
])
def test_page_window(current, total, expected):
    assert page_window(current, total) == expected


def test_page_window_stays_in_bounds():
    for total in range(1, 15):
        for current in range(1, total + 1):
            window = page_window(current, total)
            assert 1 <= len(window) <= 5
            assert window[0] >= 1 and window[-1] <= total
            assert current in window


def test_change_page_waits_for_pending_search():
    state, _ = submit(searched("Naruto", make_page(last_page=5)), "Bleach")
    new_state, request = change_page(state, 4)
    assert request is None
    assert new_state is state


def test_change_page_waits_for_pending_trending_reload():
    state, _ = back_to_trending(searched("Naruto", make_page(last_page=5)))
    assert change_page(state, 2)[1] is None


def test_banner_follows_the_results_on_screen():
    state = searched("Naruto", make_page(total=100, last_page=5))
    state, request = back_to_trending(state)
    state = fetch_failed(state, request)
    assert len(state.results) == 20
    assert state.results_source is ResultSource.SEARCH
    assert results_banner(state) == "Found 100 anime • Page 1 of 5"

    state, request = load_defaults(state)
    state = fetch_succeeded(state, request, make_page(total=25000, last_page=1250))
    assert state.results_source is ResultSource.DEFAULT
    assert results_banner(state).startswith("🔥 TRENDING ANIME")
