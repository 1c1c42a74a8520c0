from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.domain.fetch_strategy import STRATEGY_PROFILES, FetchStrategy


class Config(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    API_PREFIX: str = "/api"
    DEFAULT_STRATEGY: FetchStrategy = FetchStrategy.FETCH_JOIN
    LOG_LEVEL: str = "INFO"

    @field_validator("DEFAULT_STRATEGY")
    @classmethod
    def _summary_strategy_only(cls, value: FetchStrategy) -> FetchStrategy:
        # The unversioned endpoint returns summaries, never raw entities
        if STRATEGY_PROFILES[value].returns_entities:
            raise ValueError("DEFAULT_STRATEGY must return summaries, not entities")
        return value


config = Config()
