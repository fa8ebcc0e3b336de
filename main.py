# main.py
import argparse
import asyncio

from rich.markup import escape
from textual.app import App, ComposeResult
from textual.containers import Container, Vertical
from textual.reactive import reactive
from textual.widgets import (Button, Footer, Header, Input, Label,
                             LoadingIndicator, Static)

from config import Config
from models import AppState, FetchKind, FetchRequest, ResultSource, ViewMode
from services import CatalogService, FetchError
from state import (Transition, back_to_trending, change_page, close_details,
                   fetch_failed, fetch_succeeded, find_item, grid_visible,
                   load_defaults, open_details, pagination_visible,
                   results_banner, settle, submit, view_mode)
from ui import (AnimeDetailScreen, LogPane, PaginationBar, ResultsDisplay,
                SearchControls, attribution)

class AnimeNexusApp(App):
    TITLE = "ANIME NEXUS"
    SUB_TITLE = "Discover legendary anime in the digital realm"
    BINDINGS = [
        ("q", "quit", "Quit"),
        ("slash", "focus_search", "Search"),
        ("left_square_bracket", "previous_page", "Prev Page"),
        ("right_square_bracket", "next_page", "Next Page"),
        ("t", "back_to_trending", "Trending"),
    ]
    CSS = """
    Screen {
        background: $surface;
    }

    #main-container {
        padding: 0 1;
    }

    #search-controls {
        layout: horizontal;
        height: auto;
        margin-bottom: 1;
    }

    #search-controls Label {
        padding: 1 1 0 0;
    }

    #search-input {
        width: 1fr;
    }

    #back-button {
        margin-bottom: 1;
    }

    #results-info {
        text-align: center;
        color: $accent;
        height: auto;
    }

    #error-banner {
        color: $error;
        border: round $error;
        padding: 0 2;
        height: auto;
    }

    #loading-box {
        height: 5;
        align: center middle;
    }

    #loading-box Label {
        width: 100%;
        text-align: center;
    }

    #no-results {
        text-align: center;
        padding: 2;
        height: auto;
        color: $text-muted;
    }

    #results-table {
        height: 1fr;
    }

    #pagination {
        height: auto;
        align: center middle;
    }

    #pagination Button {
        min-width: 5;
    }

    #log {
        height: 6;
        border-top: solid $primary;
    }

    #attribution {
        text-align: center;
        color: $text-muted;
    }

    AnimeDetailScreen {
        align: center middle;
    }

    #detail-dialog {
        width: 80%;
        height: 90%;
        border: thick $error;
        background: $panel;
        padding: 1 2;
    }

    #detail-actions {
        height: auto;
        margin-top: 1;
    }

    #detail-actions Button {
        margin-right: 1;
    }
    """

    app_state = reactive(AppState(), init=False)

    def __init__(self, catalog_service: CatalogService, config: Config):
        super().__init__()
        self.catalog_service = catalog_service
        self.config = config

    def compose(self) -> ComposeResult:
        yield Header()
        with Container(id="main-container"):
            yield SearchControls(id="search-controls")
            yield Button("← Back to Trending", id="back-button")
            yield Static(id="results-info")
            yield Static(id="error-banner")
            with Vertical(id="loading-box"):
                yield LoadingIndicator()
                yield Label("Scanning the anime database...")
            yield Static(id="no-results")
            yield ResultsDisplay(id="results-table")
            yield PaginationBar(self.config.PAGE_WINDOW_SIZE, id="pagination")
            yield LogPane(id="log", wrap=True, highlight=True, markup=True)
            yield Static(attribution(), id="attribution")
        yield Footer()

    def on_mount(self) -> None:
        self.search_screen = self.screen
        self.search_screen.query_one(Input).focus()
        self.search_screen.query_one(LogPane).add_message(f"🌐 Using catalog at {escape(self.config.API_BASE_URL)}")
        self.start_fetch(load_defaults(self.app_state))

    def watch_app_state(self, old_state: AppState, new_state: AppState) -> None:
        """Pushes every state change to the child widgets."""
        if old_state.results != new_state.results:
            self.search_screen.query_one(ResultsDisplay).update_results(new_state.results)
        self.render_state(new_state)
        if new_state.selected is not None and new_state.selected != old_state.selected:
            if isinstance(self.screen, AnimeDetailScreen):
                self.pop_screen()
            self.push_screen(AnimeDetailScreen(new_state.selected), self.handle_details_closed)

    def render_state(self, state: AppState) -> None:
        mode = view_mode(state)
        self.search_screen.query_one(SearchControls).set_busy(state.loading)
        self.search_screen.query_one("#back-button").display = state.source is ResultSource.SEARCH

        banner = results_banner(state)
        info = self.search_screen.query_one("#results-info", Static)
        info.update(banner)
        info.display = bool(banner)

        error = self.search_screen.query_one("#error-banner", Static)
        error.update(state.error or "")
        error.display = mode is ViewMode.ERROR

        self.search_screen.query_one("#loading-box").display = mode is ViewMode.LOADING

        no_results = self.search_screen.query_one("#no-results", Static)
        no_results.update(
            f'No anime found in the nexus for "{escape(state.query.text)}"\n'
            "Try expanding your search parameters"
        )
        no_results.display = mode is ViewMode.NO_RESULTS

        self.search_screen.query_one(ResultsDisplay).display = grid_visible(state)
        pagination = self.search_screen.query_one(PaginationBar)
        pagination.update_pages(state.query.page, state.total_pages)
        pagination.display = pagination_visible(state)

    def start_fetch(self, transition: Transition) -> bool:
        """Applies a transition and runs its fetch, if it issued one."""
        self.app_state, request = transition
        if request is None:
            return False
        log = self.search_screen.query_one(LogPane)
        if request.kind is FetchKind.SEARCH:
            log.add_message(f"🔎 Searching for '{escape(request.query)}' (page {request.page})...")
        else:
            log.add_message(f"🔥 Loading trending anime (page {request.page})...")
        self.run_worker(self.perform_fetch(request), group="catalog_fetch", exclusive=True)
        return True

    def handle_details_closed(self, result: None) -> None:
        self.app_state = close_details(self.app_state)

    # --- Actions ---
    def action_focus_search(self) -> None:
        self.search_screen.query_one(Input).focus()

    def action_previous_page(self) -> None:
        self.go_to_page(self.app_state.query.page - 1)

    def action_next_page(self) -> None:
        self.go_to_page(self.app_state.query.page + 1)

    def action_back_to_trending(self) -> None:
        if self.app_state.source is not ResultSource.SEARCH:
            return
        self.search_screen.query_one(SearchControls).clear()
        self.start_fetch(back_to_trending(self.app_state))

    def go_to_page(self, page: int) -> None:
        if self.start_fetch(change_page(self.app_state, page)):
            self.search_screen.query_one(ResultsDisplay).scroll_home(animate=False)

    # --- Message Handlers ---
    def on_search_controls_search_requested(self, message: SearchControls.SearchRequested) -> None:
        self.start_fetch(submit(self.app_state, message.query))

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "back-button":
            self.action_back_to_trending()

    def on_pagination_bar_page_requested(self, message: PaginationBar.PageRequested) -> None:
        self.go_to_page(message.page)

    def on_results_display_item_chosen(self, message: ResultsDisplay.ItemChosen) -> None:
        item = find_item(self.app_state, message.mal_id)
        if item:
            self.app_state = open_details(self.app_state, item)

    # --- Worker Methods ---
    async def perform_fetch(self, request: FetchRequest) -> None:
        log = self.search_screen.query_one(LogPane)
        try:
            if request.kind is FetchKind.SEARCH:
                page = await asyncio.to_thread(self.catalog_service.search, request.query, request.page)
            else:
                page = await asyncio.to_thread(self.catalog_service.fetch_defaults, request.page)
        except FetchError as e:
            if request.token != self.app_state.request_token:
                return
            self.app_state = fetch_failed(self.app_state, request)
            log.add_message(f"[red]❌ {escape(self.app_state.error or '')}[/red]")
            log.add_message(f"[dim]{escape(str(e))}[/dim]")
        else:
            if request.token != self.app_state.request_token:
                log.add_message(f"[dim]Ignored a stale response for page {request.page}.[/dim]")
                return
            self.app_state = fetch_succeeded(self.app_state, request, page)
            if request.kind is FetchKind.DEFAULTS:
                log.add_message(f"🔥 Loaded {len(page.items)} trending anime.")
            elif page.items:
                log.add_message(f"🎬 Found {page.meta.total} anime for '{escape(request.query)}'.")
            else:
                log.add_message(f"🤷 No anime found for '{escape(request.query)}'.")
        finally:
            self.app_state = settle(self.app_state, request)


def run() -> None:
    parser = argparse.ArgumentParser(description="Search and browse anime from the Jikan (MyAnimeList) API.")
    parser.add_argument("--api-url", default=Config.API_BASE_URL,
                        help=f"Base URL of the Jikan API (default: {Config.API_BASE_URL}).")
    parser.add_argument("--timeout", type=float, default=Config.REQUEST_TIMEOUT,
                        help=f"Request timeout in seconds (default: {Config.REQUEST_TIMEOUT}).")
    args = parser.parse_args()

    app_config = Config(API_BASE_URL=args.api_url, REQUEST_TIMEOUT=args.timeout)
    catalog_service = CatalogService(app_config)

    app = AnimeNexusApp(catalog_service, app_config)

    try:
        app.run()
    finally:
        catalog_service.close()


if __name__ == "__main__":
    run()
