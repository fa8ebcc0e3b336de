import pytest

from models import CatalogItem, PageMeta, ResultPage, Trailer


def make_raw_item(mal_id, **overrides):
    """Builds one item the way the Jikan API returns it."""
    item = {
        "mal_id": mal_id,
        "url": f"https://myanimelist.net/anime/{mal_id}",
        "images": {"jpg": {"image_url": f"https://cdn.example/{mal_id}.jpg",
                           "large_image_url": f"https://cdn.example/{mal_id}l.jpg"}},
        "trailer": {"youtube_id": None, "url": None},
        "title": f"Anime {mal_id}",
        "title_english": None,
        "episodes": 12,
        "status": "Finished Airing",
        "aired": {"string": "Apr 3, 2009 to Jul 4, 2010"},
        "duration": "24 min per ep",
        "rating": "R - 17+ (violence & profanity)",
        "score": 8.5,
        "synopsis": "A synopsis.",
        "year": 2009,
        "studios": [{"mal_id": 1, "name": "Bones"}],
        "genres": [{"mal_id": 1, "name": "Action"}, {"mal_id": 2, "name": "Drama"}],
    }
    item.update(overrides)
    return item


def make_payload(count=20, total=100, last_page=5, current_page=1, start_id=1):
    return {
        "data": [make_raw_item(start_id + i) for i in range(count)],
        "pagination": {
            "last_visible_page": last_page,
            "has_next_page": current_page < last_page,
            "current_page": current_page,
            "items": {"count": count, "total": total, "per_page": 20},
        },
    }


def make_item(mal_id, **overrides):
    fields = {"mal_id": mal_id, "title": f"Anime {mal_id}", "score": 8.0, "episodes": 12}
    fields.update(overrides)
    return CatalogItem(**fields)


def make_page(count=20, total=100, last_page=5, current_page=1, start_id=1):
    items = tuple(make_item(start_id + i) for i in range(count))
    meta = PageMeta(last_visible_page=last_page, has_next_page=current_page < last_page,
                    current_page=current_page, count=count, total=total, per_page=20)
    return ResultPage(items=items, meta=meta)


@pytest.fixture
def trailer_item():
    return make_item(
        5114,
        title="Fullmetal Alchemist: Brotherhood",
        title_english="Fullmetal Alchemist: Brotherhood",
        trailer=Trailer(youtube_id="abc123", url="https://www.youtube.com/watch?v=abc123"),
        url="https://myanimelist.net/anime/5114",
    )
