# Configuration management

from pydantic_settings import BaseSettings  # type: ignore
from functools import lru_cache
from typing import List


class Settings(BaseSettings):
    # Application
    app_host: str = "0.0.0.0"
    app_port: int = 8000
    debug: bool = False
    log_level: str = "INFO"
    log_json: bool = True

    # Storage
    storage_path: str = "./storage"

    # Structure Analysis
    analysis_sample_size: int = 10

    # Conversion
    default_table_name: str = "main_table"
    default_collection_name: str = "main_collection"
    index_coverage_threshold: float = 0.8
    max_payload_bytes: int = 10 * 1024 * 1024

    # Security
    allowed_origins: List[str] = [
        "http://localhost:3000", "http://localhost:8000"]

    # Observability
    metrics_enabled: bool = True

    class Config:
        env_file = ".env"
        case_sensitive = False


@lru_cache()
def get_settings() -> Settings:
    return Settings()
