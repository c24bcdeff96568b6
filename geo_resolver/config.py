"""Application configuration via Pydantic Settings.

NOTE: We explicitly map .env variable names (AZURE_MAPS_KEY,
GEOCODE_MAX_CONCURRENT, etc.) to avoid silent misconfiguration.
Settings are frozen: build a new instance before constructing a service.
"""

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Throttle
    max_concurrent_requests: int = Field(
        default=6, ge=1, validation_alias="GEOCODE_MAX_CONCURRENT"
    )

    # Adaptive cache sizing
    max_cache_size: int = Field(default=3000, ge=0, validation_alias="GEOCODE_MAX_CACHE_SIZE")
    max_cache_size_overflow: int = Field(
        default=1000, ge=0, validation_alias="GEOCODE_MAX_CACHE_OVERFLOW"
    )

    # Azure Maps
    azure_maps_key: str = Field(default="", validation_alias="AZURE_MAPS_KEY")
    azure_maps_search_url: str = Field(
        default="https://atlas.microsoft.com/search/address/json",
        validation_alias="AZURE_MAPS_SEARCH_URL",
    )
    azure_maps_api_version: str = Field(default="1.0", validation_alias="AZURE_MAPS_API_VERSION")
    request_timeout: float = Field(default=10.0, gt=0, validation_alias="GEOCODE_REQUEST_TIMEOUT")
    # Falls back to the process locale when unset
    language: str | None = Field(default=None, validation_alias="GEOCODE_LANGUAGE")

    # App
    snapshot_path: str | None = Field(default=None, validation_alias="GEOCODE_SNAPSHOT_PATH")
    debug: bool = Field(default=False, validation_alias="DEBUG")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "frozen": True,
        "populate_by_name": True,
    }


settings = Settings()
