# models.py
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple

YOUTUBE_WATCH_URL = "https://www.youtube.com/watch?v={}"

@dataclass(frozen=True)
class Trailer:
    """External trailer reference attached to a catalog item."""
    youtube_id: Optional[str] = None
    url: Optional[str] = None

    @property
    def watch_url(self) -> Optional[str]:
        if not self.youtube_id:
            return None
        return YOUTUBE_WATCH_URL.format(self.youtube_id)

@dataclass(frozen=True)
class CatalogItem:
    """A data class to hold all available details for a single anime."""
    mal_id: int
    title: str
    image_url: Optional[str] = None
    title_english: Optional[str] = None
    score: Optional[float] = None
    trailer: Optional[Trailer] = None
    synopsis: Optional[str] = None
    episodes: Optional[int] = None
    status: Optional[str] = None
    aired: Optional[str] = None
    genres: Tuple[str, ...] = ()
    studios: Tuple[str, ...] = ()
    year: Optional[int] = None
    rating: Optional[str] = None
    duration: Optional[str] = None
    url: Optional[str] = None

    @property
    def trailer_url(self) -> Optional[str]:
        return self.trailer.watch_url if self.trailer else None

@dataclass(frozen=True)
class PageMeta:
    """Pagination block returned alongside one page of results."""
    last_visible_page: int = 1
    has_next_page: bool = False
    current_page: int = 1
    count: int = 0
    total: int = 0
    per_page: int = 0

@dataclass(frozen=True)
class ResultPage:
    """Items and pagination metadata from a single fetch."""
    items: Tuple[CatalogItem, ...]
    meta: PageMeta

@dataclass(frozen=True)
class QueryState:
    """The submitted search text and the page currently on screen."""
    text: str = ""
    page: int = 1

class ResultSource(Enum):
    DEFAULT = "default"
    SEARCH = "search"

class ViewMode(Enum):
    DEFAULT = "default"
    SEARCHING = "searching"
    NO_RESULTS = "no_results"
    ERROR = "error"
    LOADING = "loading"

class FetchKind(Enum):
    DEFAULTS = "defaults"
    SEARCH = "search"

@dataclass(frozen=True)
class FetchRequest:
    """One outbound call, tagged with the token that was current when issued."""
    kind: FetchKind
    token: int
    page: int = 1
    query: str = ""

@dataclass(frozen=True)
class AppState:
    """A single object to hold the entire application state."""
    query: QueryState = field(default_factory=QueryState)
    results: Tuple[CatalogItem, ...] = ()
    meta: Optional[PageMeta] = None
    source: ResultSource = ResultSource.DEFAULT
    results_source: ResultSource = ResultSource.DEFAULT
    loading: bool = False
    error: Optional[str] = None
    selected: Optional[CatalogItem] = None
    request_token: int = 0

    @property
    def total_pages(self) -> int:
        if self.meta is None:
            return 1
        return max(1, self.meta.last_visible_page)

    @property
    def total_results(self) -> int:
        return self.meta.total if self.meta else len(self.results)
