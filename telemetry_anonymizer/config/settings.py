from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"

    enable_pseudonyms: bool = True
    preserve_structure: bool = True
    hash_salt: str = "proxmox-mpc-default-salt"

    max_processing_time_ms: int = Field(default=5000, ge=1)
    short_circuit_threshold_ms: int = Field(default=100, ge=0)
    max_depth: int = Field(default=100, ge=1)
