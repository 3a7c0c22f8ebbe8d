from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration using pydantic-settings."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False
    )

    # Database
    database_url: str = Field(
        default="sqlite+aiosqlite:///./coffeemania.db",
        description="Database connection URL (postgresql+asyncpg://... in production)",
    )

    # Target site
    base_url: str = Field(
        default="https://coffeemania.ru", description="Root URL of the chain's website"
    )
    menu_path: str = Field(default="/menu", description="Path of the menu listing")
    restaurants_path: str = Field(
        default="/restaurants", description="Path of the restaurant listing"
    )
    item_path_marker: str = Field(
        default="/menu/", description="Substring identifying item-page links"
    )
    excluded_restaurants: str = Field(
        default="Кофемания Chef's",
        description="Comma-separated restaurant names to skip",
    )

    # Fetching
    max_concurrent_requests: int = Field(
        default=20, ge=1, description="Ceiling on in-flight HTTP requests per batch"
    )
    fetch_delay_min: float = Field(default=0.01, ge=0.0)
    fetch_delay_max: float = Field(default=0.02, ge=0.0)
    request_timeout: float = Field(
        default=10.0, gt=0.0, description="Per-request timeout in seconds"
    )
    max_retries: int = Field(default=3, ge=1, description="Attempts per page")
    verify_ssl: bool = Field(default=True, description="Verify TLS certificates")
    user_agent: str = Field(
        default=(
            "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 "
            "(KHTML, like Gecko) Chrome/121.0 Safari/537.36"
        ),
    )

    # Listing discovery
    listing_mode: str = Field(
        default="browser",
        pattern="^(browser|static)$",
        description="browser = Playwright scroll-to-load, static = plain GET",
    )
    max_scrolls: int = Field(default=20, ge=1)
    scroll_pause: float = Field(default=0.0, ge=0.0)
    page_load_timeout_ms: int = Field(default=60_000, ge=1)

    # Image cache
    images_dir: str = Field(default="images", description="Menu image cache root")
    restaurant_images_dir: str = Field(
        default="restaurant_images", description="Restaurant image cache root"
    )

    # Scheduling
    sync_interval: int = Field(
        default=3600, ge=1, description="Seconds between runs in --every mode"
    )

    # Application
    app_env: str = Field(
        default="development", description="Environment (development, production)"
    )
    debug: bool = Field(default=False, description="Debug mode")

    @property
    def menu_url(self) -> str:
        return f"{self.base_url}{self.menu_path}"

    @property
    def restaurants_url(self) -> str:
        return f"{self.base_url}{self.restaurants_path}"

    @property
    def fetch_delay_range(self) -> tuple[float, float]:
        return (self.fetch_delay_min, max(self.fetch_delay_min, self.fetch_delay_max))

    @property
    def excluded_restaurant_names(self) -> list[str]:
        """Parse excluded restaurant names into a list."""
        return [n.strip() for n in self.excluded_restaurants.split(",") if n.strip()]


# Global settings instance
settings = Settings()
