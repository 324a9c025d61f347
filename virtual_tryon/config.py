"""Configuration management for the virtual try-on studio."""

from pathlib import Path
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings


POSE_INSTRUCTIONS = [
    "Full frontal view, hands on hips",
    "Slightly turned, 3/4 view",
    "Side profile view",
    "Jumping in the air, mid-action shot",
    "Walking towards camera",
    "Leaning against a wall",
]


class GeminiConfig(BaseModel):
    """Gemini image generation settings."""
    model: str = "gemini-2.5-flash-image"
    api_key: str | None = None


class StoreConfig(BaseModel):
    """Persistent store settings."""
    database_path: Path = Path("data/virtual_tryon.db")
    cache_ttl_hours: float = 24.0

    @property
    def cache_ttl_seconds(self) -> float:
        return self.cache_ttl_hours * 60 * 60


class ImageConfig(BaseModel):
    """Output normalization and image download settings."""
    target_ratio: float = 1.0  # 1:1 square
    ratio_tolerance: float = 0.01
    fill_color: str = "#f0f0f0"  # Neutral light gray backdrop
    download_timeout: float = 30.0


class TryOnConfig(BaseSettings):
    """Main studio configuration."""

    # Sub-configs
    gemini: GeminiConfig = Field(default_factory=GeminiConfig)
    store: StoreConfig = Field(default_factory=StoreConfig)
    images: ImageConfig = Field(default_factory=ImageConfig)

    pose_instructions: list[str] = Field(default_factory=lambda: list(POSE_INSTRUCTIONS))

    # Loaded from .env
    gemini_api_key: str | None = None
    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        env_prefix = ""
        env_nested_delimiter = "__"
        extra = "ignore"

    @property
    def api_key(self) -> str | None:
        """API key from the nested section, falling back to GEMINI_API_KEY."""
        return self.gemini.api_key or self.gemini_api_key


def load_config() -> TryOnConfig:
    """Load configuration from environment and defaults."""
    return TryOnConfig()
