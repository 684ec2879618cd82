from pydantic import Field
from pydantic_settings import BaseSettings

from disk_ttl_cache.storage.envelope import MAX_TTL


class Settings(BaseSettings):
    host: str = "0.0.0.0"
    port: int = 8000

    require_auth: bool = False
    api_key: str = "dummy-local-key"

    cache_path: str = ".cache_disk"
    create_cache_path: bool = True  # mkdir cache_path before starting the store
    clean_every: int = Field(60000, ge=0)  # ms between cleaner sweeps, 0 = no cleaner
    default_ttl: int = Field(3600000, ge=1, le=MAX_TTL)  # ms, used when PUT omits ttl

    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        extra = "ignore"
