# services/api/settings.py
from pydantic_settings import BaseSettings
from pydantic import ConfigDict, Field
from typing import List, Optional, Tuple
from pathlib import Path

class Settings(BaseSettings):
    # Storage settings
    # Default to JSON files; override via .env (STORAGE_BACKEND=sqlite)
    storage_backend: str = "json"
    data_dir: str = "data"
    db_url: str = "sqlite:///data/signzones.db"

    # CORS settings
    allowed_origins: str = "http://localhost:3001,http://localhost:3002,http://localhost:8000,http://localhost:3000"

    # ---- Zone drawing ----
    # Drags smaller than this (percent of page) are discarded as accidental clicks
    min_zone_width_pct: float = 3.0
    min_zone_height_pct: float = 2.0

    # ---- Signature capture surface ----
    signature_canvas_width: int = 450
    signature_canvas_height: int = 180
    signature_pen_color: str = "#1e293b"
    signature_stroke_width: int = 2

    # ---- View zoom (pixel width of the rendered page) ----
    editor_zoom_min: int = 300
    editor_zoom_max: int = 900
    viewer_zoom_max: int = 800
    zoom_step: int = 80

    # ---- Downstream submission ----
    # Where a signing viewer posts {"signatures": [...]} once every zone is signed
    submission_url: Optional[str] = Field(
        default=None,
        description="Endpoint receiving the completed signatures",
    )
    submission_timeout_s: float = 30.0

    # Timeout for /proxy-pdf fetches
    proxy_timeout_s: float = 30.0

    # Zone lists are cached per document for this many seconds
    zone_cache_ttl_s: int = 5

    model_config = ConfigDict(
        # Always load .env from the same folder as this settings.py
        env_file=str(Path(__file__).resolve().parent / ".env"),
        extra="ignore",
    )

    def get_origins_list(self) -> List[str]:
        """Parse comma-separated origins into a list."""
        if not self.allowed_origins:
            return ["*"]
        return [origin.strip() for origin in self.allowed_origins.split(",") if origin.strip()]

    @property
    def signature_canvas_size(self) -> Tuple[int, int]:
        return (self.signature_canvas_width, self.signature_canvas_height)


_settings_instance = None

def get_settings() -> Settings:
    """Singleton pattern for settings."""
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = Settings()
    return _settings_instance
