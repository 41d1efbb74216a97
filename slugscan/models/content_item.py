from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

SlugField = Literal["url_slug", "slug"]


class RawSystem(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str = ""
    codename: str = ""
    type: str = ""
    language: str = ""

    @field_validator("name", "codename", "type", "language", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> str:
        return value if isinstance(value, str) else ""


class SlugElement(BaseModel):
    model_config = ConfigDict(extra="ignore")

    value: Optional[str] = None

    @field_validator("value", mode="before")
    @classmethod
    def _only_strings(cls, value: Any) -> Optional[str]:
        return value if isinstance(value, str) else None


class RawElements(BaseModel):
    """The two element names a page type may use for its slug."""

    model_config = ConfigDict(extra="ignore")

    url_slug: Optional[SlugElement] = None
    slug: Optional[SlugElement] = None

    @field_validator("url_slug", "slug", mode="before")
    @classmethod
    def _drop_malformed(cls, value: Any) -> Any:
        return value if isinstance(value, dict) else None


class RawContentItem(BaseModel):
    """One content item as returned by the Delivery API."""

    model_config = ConfigDict(extra="ignore")

    system: RawSystem = RawSystem()
    elements: RawElements = RawElements()

    @model_validator(mode="before")
    @classmethod
    def _default_missing_blocks(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return {}
        cleaned: Dict[str, Any] = dict(data)
        for key in ("system", "elements"):
            if not isinstance(cleaned.get(key), dict):
                cleaned.pop(key, None)
        return cleaned


class Pagination(BaseModel):
    model_config = ConfigDict(extra="ignore")

    skip: Optional[int] = None
    limit: Optional[int] = None
    count: Optional[int] = None
    next_page: Optional[str] = None


class DeliveryPage(BaseModel):
    """A single page of an ``/items`` listing."""

    model_config = ConfigDict(extra="ignore")

    items: List[RawContentItem] = []
    pagination: Pagination = Pagination()

    @field_validator("items", mode="before")
    @classmethod
    def _null_items(cls, value: Any) -> Any:
        return [] if value is None else value

    @field_validator("pagination", mode="before")
    @classmethod
    def _null_pagination(cls, value: Any) -> Any:
        return {} if value is None else value


class ContentItem(BaseModel):
    """A normalised page item carrying a resolved slug."""

    model_config = ConfigDict(frozen=True)

    name: str
    codename: str
    type: str
    language: str
    slug: str
    slug_field: SlugField
