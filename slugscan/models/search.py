from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from slugscan.models.content_item import ContentItem


class SearchRequest(BaseModel):
    slug: str = Field(
        min_length=1,
        max_length=512,
        description=(
            "Exact slug to look up across all configured languages.  Compared "
            "as-is, surrounding whitespace included."
        ),
        examples=["about-us"],
    )

    @field_validator("slug")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("slug must not be blank")
        return value


class StrategyResult(BaseModel):
    """Outcome of one lookup strategy, including its diagnostics."""

    success: bool
    method: str
    items: List[ContentItem] = []
    error: Optional[str] = None

    # direct filter search
    field: Optional[str] = None
    url: Optional[str] = None
    urls: List[str] = []
    matched_fields: List[str] = []

    # full scan
    total_items: Optional[int] = None
    total_requests: Optional[int] = None
    all_slugs_count: Optional[int] = None
    exact_matches: Optional[int] = None
    case_insensitive_matches: Optional[int] = None
    similar_slugs: List[str] = []
    url_slug_count: Optional[int] = None
    slug_count: Optional[int] = None

    note: Optional[str] = None


class SearchResult(BaseModel):
    success: bool
    method: str
    items: List[ContentItem] = []
    total_items: int = 0
    error: Optional[str] = None
    delivery_api: Optional[StrategyResult] = None
    delivery_api_all_items: Optional[StrategyResult] = None
    management_api: Optional[StrategyResult] = None
