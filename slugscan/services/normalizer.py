"""Slug resolution and small list helpers shared by the lookup strategies.

Content types in the same project do not agree on the slug element name:
older pages use ``url_slug`` and newer ones ``slug``.  Everything downstream
works with :class:`ContentItem`, which records the resolved value together
with the element that supplied it.
"""

from collections import Counter
from typing import Dict, Iterable, List, Optional, Tuple

from slugscan.models.content_item import ContentItem, RawContentItem, SlugField

PAGE_TYPE = "page"

UNKNOWN_NAME = "Unknown"
UNKNOWN_CODENAME = "unknown_codename"
UNKNOWN_LANGUAGE = "unknown_language"

# Checked in this order; the first non-empty value wins.
SLUG_FIELDS: Tuple[SlugField, ...] = ("url_slug", "slug")


def _resolve_slug(item: RawContentItem) -> Tuple[Optional[str], SlugField]:
    for field in SLUG_FIELDS:
        element = getattr(item.elements, field)
        if element is not None and element.value:
            return element.value, field
    return None, "slug"


def slug_of(item: RawContentItem) -> Optional[str]:
    """Return the slug of *item*, or *None* when neither element is populated."""
    return _resolve_slug(item)[0]


def is_page_with_slug(item: RawContentItem) -> bool:
    return item.system.type == PAGE_TYPE and slug_of(item) is not None


def normalize(item: RawContentItem) -> ContentItem:
    """Convert a raw Delivery API item into a :class:`ContentItem`.

    Callers are expected to have filtered slug-less items out already; if one
    slips through it is returned with an empty slug.
    """
    slug, slug_field = _resolve_slug(item)
    system = item.system
    return ContentItem(
        name=system.name or UNKNOWN_NAME,
        codename=system.codename or UNKNOWN_CODENAME,
        type=system.type or UNKNOWN_NAME,
        language=system.language or UNKNOWN_LANGUAGE,
        slug=slug or "",
        slug_field=slug_field,
    )


def filter_page_items_with_slugs(items: Iterable[RawContentItem]) -> List[RawContentItem]:
    """Keep only items of type ``page`` that carry a slug in either element."""
    return [item for item in items if is_page_with_slug(item)]


def matches_slug(item: RawContentItem, target_slug: str) -> bool:
    """Return *True* when *item* is a page whose slug element equals *target_slug*.

    Both elements are compared, so an item with a stale ``url_slug`` and a
    matching ``slug`` still counts.
    """
    if item.system.type != PAGE_TYPE:
        return False
    for field in SLUG_FIELDS:
        element = getattr(item.elements, field)
        if element is not None and element.value == target_slug:
            return True
    return False


def unique_slug_values(items: Iterable[ContentItem]) -> List[str]:
    """Distinct non-empty slugs in first-seen order."""
    seen: Dict[str, None] = {}
    for item in items:
        if item.slug:
            seen.setdefault(item.slug, None)
    return list(seen)


def find_similar_slugs(slugs: Iterable[str], term: str) -> List[str]:
    """Slugs containing *term*, compared case-insensitively."""
    needle = term.lower()
    return [slug for slug in slugs if slug and needle in slug.lower()]


def count_by_slug_field(items: Iterable[ContentItem]) -> Dict[str, int]:
    counts = Counter(item.slug_field for item in items)
    return {field: counts.get(field, 0) for field in SLUG_FIELDS}


def remove_duplicate_items(items: Iterable[ContentItem]) -> List[ContentItem]:
    """Drop repeated ``(codename, language)`` pairs, keeping the first one.

    Language variants of one content item are kept; only the same variant
    found more than once is collapsed.
    """
    seen: set = set()
    unique: List[ContentItem] = []
    for item in items:
        key = (item.codename, item.language)
        if key in seen:
            continue
        seen.add(key)
        unique.append(item)
    return unique
