# config.py
from dataclasses import dataclass

@dataclass
class Config:
    """Holds all application configuration."""
    API_BASE_URL: str = "https://api.jikan.moe/v4"
    RESULTS_PER_PAGE: int = 20
    REQUEST_TIMEOUT: float = 10.0
    PAGE_WINDOW_SIZE: int = 5
    USER_AGENT: str = "anime-nexus/0.1 (+https://jikan.moe/)"
