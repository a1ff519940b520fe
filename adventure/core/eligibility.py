from __future__ import annotations

from collections.abc import Collection, Iterable


def is_eligible(requires: Iterable[str], tags: Collection[str]) -> bool:
    """True when every required tag is present. No requirements means always eligible."""

    return all(req in tags for req in requires)
