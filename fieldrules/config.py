from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Rule tags
    TAG_NAME: str = "validate"
    FIELD_NAME_TAG: str = "json"

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False  # True for structured JSON, False for colored console output

    model_config = SettingsConfigDict(env_prefix="FIELDRULES_", env_file=".env", extra="ignore")


@lru_cache
def get_settings() -> Settings:
    return Settings()
