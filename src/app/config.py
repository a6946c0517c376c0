"""Configuration management using Pydantic settings."""

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "County Explorer"
    debug: bool = False

    # Server
    host: str = "0.0.0.0"
    port: int = 8000

    # Region data, loaded once shortly after startup
    regions_path: Path = Path("./data/counties.geojson")
    regions_load_delay: float = 0.5     # seconds
    simplify_min_distance_km: float = 0.35

    # Default view (overview mode)
    map_center_lat: float = 0.0236
    map_center_lng: float = 37.9062
    map_default_zoom: float = 6

    # Camera flights
    fly_duration: float = 1.2           # seconds
    fly_ease_linearity: float = 0.5
    fit_padding_px: int = 50

    # Panes: the shadow sits under the regions, shifted up-left
    shadow_offset_x: int = -3
    shadow_offset_y: int = -5
    shadow_z_index: int = 399
    surface_z_index: int = 400
    overlay_z_index: int = 410

    @property
    def map_center(self) -> tuple[float, float]:
        return (self.map_center_lat, self.map_center_lng)

    @property
    def shadow_offset(self) -> tuple[int, int]:
        return (self.shadow_offset_x, self.shadow_offset_y)


settings = Settings()
