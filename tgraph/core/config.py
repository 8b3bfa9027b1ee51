"""Application configuration using Pydantic settings."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="TGRAPH_", env_file=".env", env_file_encoding="utf-8", extra="ignore")

    service_name: str = "tgraph"
    log_level: str = "INFO"

    # Source and viewer defaults
    log_file: str = "heap.log"
    metric: str = "heapUsed"
    max_data_points: int = 100
    refresh_rate_ms: int = 100
    accumulate: bool = False
    style: str = "blocks"
    chart_height: int = 20

    # Web dashboard
    host: str = "127.0.0.1"
    port: int = 3456
    auto_open: bool = True
    web_style: str = "line"
    resolution: int = 100
    min_resolution: int = 50
    max_resolution: int = 1000
    tail_interval_ms: int = 100

    # Downsampling
    variation_threshold: float = 0.1

    # Sampler (monitor command)
    sample_interval_ms: int = 100
    include_cpu: bool = True


settings = Settings()
