# ui.py
from typing import Dict, Iterable, Optional

try:
    import pyperclip
except ImportError:
    pyperclip = None

from rich.style import Style
from rich.text import Text
from textual.app import ComposeResult
from textual.containers import Horizontal, VerticalScroll
from textual.message import Message
from textual.screen import ModalScreen
from textual.widgets import (Button, DataTable, Input, Label, Markdown, RichLog,
                             Static)

from models import CatalogItem
from state import page_window

JIKAN_URL = "https://jikan.moe/"
MYANIMELIST_URL = "https://myanimelist.net/"


def score_label(score: Optional[float]) -> str:
    return "N/A" if score is None else f"{score:.1f}"


def episodes_label(episodes: Optional[int]) -> str:
    return "N/A" if episodes is None else str(episodes)


def format_details(item: CatalogItem) -> str:
    """Builds the Markdown body of the detail screen. Absent fields are left out."""
    lines = [f"## {item.title}"]
    if item.title_english and item.title_english != item.title:
        lines += ["", f"*{item.title_english}*"]
    lines += [
        "",
        f"- **Score**: {score_label(item.score)}",
        f"- **Episodes**: {episodes_label(item.episodes)}",
    ]
    optional_fields = [
        ("Status", item.status),
        ("Aired", item.aired),
        ("Year", item.year),
        ("Rating", item.rating),
        ("Duration", item.duration),
        ("Studios", ", ".join(item.studios)),
        ("Genres", ", ".join(item.genres)),
        ("Trailer", item.trailer_url),
        ("Poster", item.image_url),
    ]
    lines += [f"- **{name}**: {value}" for name, value in optional_fields if value not in (None, "")]
    if item.synopsis:
        lines += ["", "### Synopsis", "", item.synopsis]
    return "\n".join(lines)


def attribution() -> Text:
    return Text.assemble(
        "Powered by ",
        ("Jikan API", Style(link=JIKAN_URL, color="red")),
        " • ",
        ("MyAnimeList", Style(link=MYANIMELIST_URL, color="red")),
    )


class SearchControls(Static):
    """Widget for the search input and button."""
    searching = False

    class SearchRequested(Message):
        def __init__(self, query: str) -> None:
            self.query = query
            super().__init__()

    def compose(self) -> ComposeResult:
        yield Label("Enter search terms:")
        yield Input(placeholder="Search the anime multiverse...", id="search-input")
        yield Button("SEARCH", id="search-button", variant="primary", disabled=True)

    def on_button_pressed(self, event: Button.Pressed) -> None:
        event.stop()
        self.post_search_message()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        self.post_search_message()

    def on_input_changed(self, event: Input.Changed) -> None:
        self._refresh_button()

    def post_search_message(self) -> None:
        query = self.query_one(Input).value.strip()
        if query:
            self.post_message(self.SearchRequested(query))

    def set_busy(self, busy: bool) -> None:
        self.searching = busy
        self.query_one(Button).label = "SCANNING..." if busy else "SEARCH"
        self._refresh_button()

    def clear(self) -> None:
        self.query_one(Input).value = ""

    def _refresh_button(self) -> None:
        button = self.query_one(Button)
        button.disabled = self.searching or not self.query_one(Input).value.strip()


class ResultsDisplay(DataTable):
    """Widget for the main results table, one row per anime card."""
    class ItemChosen(Message):
        def __init__(self, mal_id: int) -> None:
            self.mal_id = mal_id
            super().__init__()

    def on_mount(self) -> None:
        self.add_columns("Title", "Score", "Episodes", "Trailer")
        self.cursor_type = "row"

    def on_data_table_row_selected(self, event: DataTable.RowSelected) -> None:
        if event.row_key.value is not None:
            self.post_message(self.ItemChosen(int(event.row_key.value)))

    def update_results(self, results: Iterable[CatalogItem]) -> None:
        self.clear()
        for item in results:
            self.add_row(
                item.title,
                Text(f"★ {score_label(item.score)}", style="yellow"),
                episodes_label(item.episodes),
                Text("▶ TRAILER", style="red") if item.trailer_url else "",
                key=str(item.mal_id),
            )
        self.focus()


class PaginationBar(Horizontal):
    """Prev/next buttons around a sliding window of page numbers."""
    class PageRequested(Message):
        def __init__(self, page: int) -> None:
            self.page = page
            super().__init__()

    def __init__(self, window_size: int = 5, **kwargs) -> None:
        super().__init__(**kwargs)
        self.window_size = window_size
        self.current = 1
        self.total = 1
        self._slot_pages: Dict[str, int] = {}

    def compose(self) -> ComposeResult:
        yield Button("◀ PREV", id="page-prev")
        for slot in range(self.window_size):
            yield Button("", id=f"page-slot-{slot}", classes="page-number")
        yield Button("NEXT ▶", id="page-next")

    def update_pages(self, current: int, total: int) -> None:
        self.current, self.total = current, total
        window = page_window(current, total, self.window_size)
        self._slot_pages = {}
        for slot, button in enumerate(self.query(".page-number").results(Button)):
            if slot < len(window):
                page = window[slot]
                self._slot_pages[button.id] = page
                button.label = str(page)
                button.variant = "primary" if page == current else "default"
                button.display = True
            else:
                button.display = False
        self.query_one("#page-prev", Button).disabled = current <= 1
        self.query_one("#page-next", Button).disabled = current >= total

    def on_button_pressed(self, event: Button.Pressed) -> None:
        event.stop()
        if event.button.id == "page-prev":
            target = self.current - 1
        elif event.button.id == "page-next":
            target = self.current + 1
        else:
            target = self._slot_pages.get(event.button.id)
        if target is not None:
            self.post_message(self.PageRequested(target))


class AnimeDetailScreen(ModalScreen[None]):
    """Modal overlay with the extended fields of one anime."""
    BINDINGS = [
        ("escape", "close", "Close"),
        ("w", "watch_trailer", "Watch Trailer"),
        ("c", "copy_link", "Copy Link"),
    ]

    def __init__(self, item: CatalogItem) -> None:
        super().__init__()
        self.item = item

    def compose(self) -> ComposeResult:
        with VerticalScroll(id="detail-dialog"):
            yield Markdown(format_details(self.item), id="detail-body")
            with Horizontal(id="detail-actions"):
                if self.item.trailer_url:
                    yield Button("▶ WATCH TRAILER", id="watch-trailer", variant="error")
                if self.item.url:
                    yield Button("MyAnimeList", id="open-mal")
                yield Button("Close", id="close-detail")

    def on_button_pressed(self, event: Button.Pressed) -> None:
        event.stop()
        if event.button.id == "watch-trailer":
            self.action_watch_trailer()
        elif event.button.id == "open-mal" and self.item.url:
            self.app.open_url(self.item.url)
        elif event.button.id == "close-detail":
            self.action_close()

    def action_close(self) -> None:
        self.dismiss(None)

    def action_watch_trailer(self) -> None:
        if self.item.trailer_url:
            self.app.open_url(self.item.trailer_url)

    def action_copy_link(self) -> None:
        link = self.item.trailer_url or self.item.url
        if not pyperclip:
            self.notify("'pyperclip' not installed.", severity="error")
            return
        if not link:
            self.notify("No link available for this anime.", severity="warning")
            return
        pyperclip.copy(link)
        self.notify(f"Copied link for '{self.item.title}'.")


class LogPane(RichLog):
    """A dedicated widget for logging application events."""
    def add_message(self, message: str) -> None:
        self.write(message)
