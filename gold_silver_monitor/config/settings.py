"""Configuration settings for the monitor."""

from dataclasses import dataclass, field
from pathlib import Path
import os

from dotenv import load_dotenv


load_dotenv()


# Refresh cadence and history bounds
REFRESH_INTERVAL_MS = 60 * 60 * 1000  # 1 hour
DUPLICATE_WINDOW_MS = 10_000
MAX_HISTORY = 5000  # ~200 days of hourly samples

# Key of the persisted history slot (same key the browser app used)
STORAGE_KEY = "gold_silver_history_v1"

GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
DEFAULT_MODEL = "gemini-2.5-flash"
REQUEST_TIMEOUT = 30.0


@dataclass
class Settings:
    """Application settings."""

    gemini_api_key: str = field(
        default_factory=lambda: os.getenv("GEMINI_API_KEY") or os.getenv("API_KEY", "")
    )
    model: str = field(default_factory=lambda: os.getenv("GEMINI_MODEL", DEFAULT_MODEL))
    base_url: str = field(
        default_factory=lambda: os.getenv("GEMINI_BASE_URL", GEMINI_BASE_URL)
    )
    refresh_interval_ms: int = REFRESH_INTERVAL_MS
    cache_dir: Path = field(
        default_factory=lambda: Path(os.getenv("MONITOR_CACHE_DIR", "cache"))
    )
    db_path: Path = field(init=False)

    def __post_init__(self) -> None:
        self.cache_dir = Path(self.cache_dir)
        self.cache_dir.mkdir(parents=True, exist_ok=True)
        self.db_path = self.cache_dir / "monitor.db"

    def validate(self) -> None:
        """Validate required settings."""
        if not self.gemini_api_key:
            raise ValueError(
                "GEMINI_API_KEY not set. Get one at: "
                "https://aistudio.google.com/app/apikey"
            )

    def has_api_key(self) -> bool:
        """Check if a Gemini API key is configured."""
        return bool(self.gemini_api_key)
