"""Runtime configuration read from ``KONTENT_*`` environment variables."""

from functools import lru_cache
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="KONTENT_",
        env_file=".env",
        extra="ignore",
        frozen=True,
    )

    project_id: str = ""
    delivery_api_key: str = ""
    management_api_key: str = ""
    languages: List[str] = Field(
        default_factory=lambda: ["de", "en", "zh"],
        description="Language codenames queried one after another.",
    )

    delivery_api_base: str = "https://deliver.kontent.ai"
    management_api_base: str = "https://manage.kontent.ai/v2"

    page_size: int = Field(default=1000, ge=1, le=2000)
    max_requests: int = Field(
        default=50,
        ge=1,
        description="Safety ceiling on paginated requests per language.",
    )
    request_timeout: float = 30.0  # seconds

    @property
    def is_valid(self) -> bool:
        return bool(self.project_id)


@lru_cache
def get_settings() -> Settings:
    return Settings()
