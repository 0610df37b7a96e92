"""Store configuration via environment variables."""

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    model_config = {"env_prefix": "MEMORY_KV_", "env_file": ".env", "env_file_encoding": "utf-8"}

    store_ttl_seconds: float = Field(5 * 60.0, ge=0)  # "inf" disables the full clear
    log_level: str = "INFO"
