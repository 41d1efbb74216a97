from typing import List, Optional

from pydantic import BaseModel

from slugscan.models.content_item import SlugField


class DuplicateSummaryItem(BaseModel):
    """One distinct content item (by codename) publishing under a shared slug."""

    name: str
    codename: str
    languages: List[str]
    language_count: int
    slug_field: SlugField


class DuplicateGroup(BaseModel):
    slug: str
    items: List[DuplicateSummaryItem]


class DuplicateResult(BaseModel):
    duplicates: List[DuplicateGroup] = []
    total_items: Optional[int] = None
    total_requests: Optional[int] = None
    unique_slugs: Optional[int] = None
    error: Optional[str] = None
