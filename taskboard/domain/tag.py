"""Tag title canonicalization and reconcile"""
from typing import Iterable

MAX_TAG_LENGTH = 50


def normalize_tag(title: str) -> str:
    return title.strip().lower()


def normalize_tags(titles: Iterable[str] | None) -> list[str]:
    """Lower-case, strip, drop empties and duplicates; first occurrence wins"""
    result: list[str] = []
    seen: set[str] = set()
    for title in titles or ():
        tag = normalize_tag(title)
        if tag and tag not in seen:
            seen.add(tag)
            result.append(tag)
    return result


def diff_tags(current: Iterable[str], updated: Iterable[str]) -> tuple[list[str], list[str]]:
    """
    Compute (tags_to_add, tags_to_remove) between two tag sets

    Comparison is over lower-cased titles; output keeps the input order.
    """
    current_tags = normalize_tags(current)
    updated_tags = normalize_tags(updated)
    to_add = [t for t in updated_tags if t not in set(current_tags)]
    to_remove = [t for t in current_tags if t not in set(updated_tags)]
    return to_add, to_remove
