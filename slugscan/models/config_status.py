from typing import List

from pydantic import BaseModel


class ConfigStatus(BaseModel):
    """Configuration summary that never exposes key values."""

    project_id: str
    delivery_api_key: bool
    management_api_key: bool
    languages: List[str]
