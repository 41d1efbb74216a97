"""Slug grouping and true-duplicate classification.

A slug only counts as duplicated when two or more *different* content items
(codenames) publish under it.  One content item present in several languages
shares its slug across those variants, which is expected and not reported.

Slugs are compared with strict, case-sensitive equality; ``About`` and
``about`` are separate groups here.
"""

from typing import Dict, Iterable, List, Tuple

from slugscan.models.content_item import ContentItem
from slugscan.models.duplicates import DuplicateGroup, DuplicateSummaryItem
from slugscan.models.management import SimpleDuplicate

SlugGroups = Dict[str, List[ContentItem]]


def group_by_slug(items: Iterable[ContentItem]) -> SlugGroups:
    """Group *items* by slug, preserving the order slugs are first seen."""
    groups: SlugGroups = {}
    for item in items:
        if not item.slug:
            continue
        groups.setdefault(item.slug, []).append(item)
    return groups


def _summarise(codename: str, rows: List[ContentItem]) -> DuplicateSummaryItem:
    languages = sorted(row.language for row in rows)
    first = rows[0]
    return DuplicateSummaryItem(
        name=first.name,
        codename=codename,
        languages=languages,
        language_count=len(languages),
        slug_field=first.slug_field,
    )


def filter_duplicates(groups: SlugGroups) -> List[DuplicateGroup]:
    """Return the slugs shared by at least two distinct codenames.

    Each codename in a duplicated slug becomes a single summary entry listing
    every language it appeared in, so ``sum(language_count)`` equals the
    number of rows that carried the slug.
    """
    duplicates: List[DuplicateGroup] = []
    for slug, rows in groups.items():
        by_codename: Dict[str, List[ContentItem]] = {}
        for row in rows:
            by_codename.setdefault(row.codename, []).append(row)

        if len(by_codename) < 2:
            continue

        duplicates.append(
            DuplicateGroup(
                slug=slug,
                items=[_summarise(codename, entries) for codename, entries in by_codename.items()],
            )
        )
    return duplicates


def find_simple_duplicates(pairs: Iterable[Tuple[str, str]]) -> List[SimpleDuplicate]:
    """Group ``(slug, name)`` pairs and keep slugs seen more than once.

    Used for management-API listings, which are already scoped to one content
    type and need no codename distinction.
    """
    names_by_slug: Dict[str, List[str]] = {}
    for slug, name in pairs:
        if not slug:
            continue
        names_by_slug.setdefault(slug, []).append(name)
    return [
        SimpleDuplicate(slug=slug, items=names)
        for slug, names in names_by_slug.items()
        if len(names) > 1
    ]
