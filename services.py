# services.py
from typing import Any, Dict, List, Optional, Tuple

import requests

from config import Config
from models import CatalogItem, PageMeta, ResultPage, Trailer

class FetchError(Exception):
    """Raised when the catalog API cannot produce a usable page of results."""


class CatalogService:
    """A service to handle interactions with the Jikan REST API."""
    def __init__(self, config: Config, session: Optional[requests.Session] = None):
        self.config = config
        self.base_url = config.API_BASE_URL.rstrip("/")
        self.session = session or requests.Session()
        self.session.headers.update({"User-Agent": config.USER_AGENT, "Accept": "application/json"})

    def fetch_defaults(self, page: int = 1) -> ResultPage:
        """Fetches one page of the top-ranked (trending) anime."""
        params: Dict[str, Any] = {"limit": self.config.RESULTS_PER_PAGE}
        if page > 1:
            params["page"] = page
        return self._get_page("/top/anime", params)

    def search(self, query: str, page: int = 1) -> ResultPage:
        """Searches the catalog by free text. Blank queries never reach the network."""
        query = query.strip()
        if not query:
            raise ValueError("search query must not be empty")
        if page < 1:
            raise ValueError(f"page must be >= 1, got {page}")
        params = {"q": query, "page": page, "limit": self.config.RESULTS_PER_PAGE}
        return self._get_page("/anime", params)

    def close(self) -> None:
        self.session.close()

    def _get_page(self, path: str, params: Dict[str, Any]) -> ResultPage:
        url = f"{self.base_url}{path}"
        try:
            response = self.session.get(url, params=params, timeout=self.config.REQUEST_TIMEOUT)
            response.raise_for_status()
            payload = response.json()
        except requests.RequestException as e:
            raise FetchError(f"Request to {url} failed: {e}") from e
        except ValueError as e:
            raise FetchError(f"Response from {url} is not valid JSON: {e}") from e

        if not isinstance(payload, dict) or not isinstance(payload.get("data"), list):
            raise FetchError(f"Response from {url} has no 'data' list.")

        unique_items: dict[int, CatalogItem] = {}
        for raw in payload["data"]:
            parsed = self._parse_item(raw)
            if parsed:
                unique_items[parsed.mal_id] = parsed
        items = tuple(unique_items.values())
        return ResultPage(items=items, meta=self._parse_pagination(payload.get("pagination"), items))

    def _parse_item(self, item: Any) -> Optional[CatalogItem]:
        """Parses a single raw API item into our CatalogItem data model."""
        if not isinstance(item, dict):
            return None
        mal_id = _as_int(item.get("mal_id"))
        if mal_id is None:
            return None

        images = item.get("images")
        jpg = images.get("jpg") if isinstance(images, dict) else None
        if not isinstance(jpg, dict):
            jpg = {}
        aired = item.get("aired")
        return CatalogItem(
            mal_id=mal_id,
            title=_as_str(item.get("title")) or "Untitled",
            image_url=_as_str(jpg.get("large_image_url")) or _as_str(jpg.get("image_url")),
            title_english=_as_str(item.get("title_english")),
            score=_as_float(item.get("score")),
            trailer=self._parse_trailer(item.get("trailer")),
            synopsis=_as_str(item.get("synopsis")),
            episodes=_as_int(item.get("episodes")),
            status=_as_str(item.get("status")),
            aired=_as_str(aired.get("string")) if isinstance(aired, dict) else None,
            genres=_names(item.get("genres")),
            studios=_names(item.get("studios")),
            year=_as_int(item.get("year")),
            rating=_as_str(item.get("rating")),
            duration=_as_str(item.get("duration")),
            url=_as_str(item.get("url")),
        )

    def _parse_trailer(self, trailer: Any) -> Optional[Trailer]:
        if not isinstance(trailer, dict):
            return None
        youtube_id = _as_str(trailer.get("youtube_id"))
        url = _as_str(trailer.get("url"))
        if not youtube_id and not url:
            return None
        return Trailer(youtube_id=youtube_id, url=url)

    def _parse_pagination(self, pagination: Any, items: Tuple[CatalogItem, ...]) -> PageMeta:
        if not isinstance(pagination, dict):
            return PageMeta(count=len(items), total=len(items), per_page=len(items))
        counts = pagination.get("items")
        if not isinstance(counts, dict):
            counts = {}
        return PageMeta(
            last_visible_page=_as_int(pagination.get("last_visible_page")) or 1,
            has_next_page=bool(pagination.get("has_next_page", False)),
            current_page=_as_int(pagination.get("current_page")) or 1,
            count=_as_int(counts.get("count")) or len(items),
            total=_as_int(counts.get("total")) or len(items),
            per_page=_as_int(counts.get("per_page")) or self.config.RESULTS_PER_PAGE,
        )


def _as_str(value: Any) -> Optional[str]:
    if isinstance(value, str) and value.strip():
        return value
    return None

def _as_int(value: Any) -> Optional[int]:
    # bool is an int subclass; the API never means True as 1
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return None

def _as_float(value: Any) -> Optional[float]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value)

def _names(entries: Any) -> Tuple[str, ...]:
    if not isinstance(entries, list):
        return ()
    names: List[str] = []
    for entry in entries:
        name = entry.get("name") if isinstance(entry, dict) else None
        if isinstance(name, str) and name:
            names.append(name)
    return tuple(names)
