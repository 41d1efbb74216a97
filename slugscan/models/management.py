from typing import List

from pydantic import BaseModel, ConfigDict, Field


class ManagementDuplicatesRequest(BaseModel):
    """Body accepted by ``POST /management/duplicates``.

    Both the camelCase keys used by the original custom-app client and
    snake_case keys are accepted. Missing values are reported as a 400 by the
    router rather than a validation error.
    """

    model_config = ConfigDict(populate_by_name=True)

    environment_id: str = Field(default="", alias="environmentId")
    content_type: str = Field(default="", alias="contentType")
    slug_element: str = Field(default="", alias="slugElement")


class SimpleDuplicate(BaseModel):
    slug: str
    items: List[str]


class ManagementDuplicatesResponse(BaseModel):
    duplicates: List[SimpleDuplicate]
