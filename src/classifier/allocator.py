"""Top-K allocation of scored posts into disjoint category lists.

Steps:
1. Rank every post per category (score desc, engagement desc, input order).
2. Take the top N per category as provisional lists.
3. A post picked by several categories stays only where it scores highest
   (earlier category wins ties).
4. Backfill short lists from the unused posts by engagement, in the fixed
   order pain -> trending -> content.
5. Truncate each list to N.

No post ID ends up in more than one list.
"""

import logging
from functools import reduce
from typing import Sequence

from src.models import CATEGORIES, ScoredPost

logger = logging.getLogger(__name__)

Allocation = dict[str, tuple[ScoredPost, ...]]


def rank_for_category(scored: Sequence[ScoredPost], category: str) -> list[ScoredPost]:
    """Sort posts by a category's final score, best first.

    Ties go to higher engagement, then to earlier input position.
    """
    return sorted(
        scored,
        key=lambda s: (-s.final_scores[category], -s.post.engagement, s.position),
    )


def rank_by_engagement(scored: Sequence[ScoredPost]) -> list[ScoredPost]:
    """Sort posts by raw engagement, best first, input order on ties."""
    return sorted(scored, key=lambda s: (-s.post.engagement, s.position))


def provisional_top_k(scored: Sequence[ScoredPost], limit: int) -> Allocation:
    """Take the top N posts for each category independently."""
    return {
        category: tuple(rank_for_category(scored, category)[:limit])
        for category in CATEGORIES
    }


def _preferred_category(item: ScoredPost, candidates: Sequence[str]) -> str:
    best = candidates[0]
    for category in candidates[1:]:
        if item.final_scores[category] > item.final_scores[best]:
            best = category
    return best


def resolve_overlaps(provisional: Allocation) -> Allocation:
    """Keep each post only in its highest-scoring provisional category.

    Args:
        provisional: Category -> provisional list (may overlap).

    Returns:
        Category -> list with every post ID in exactly one category.
        Order within each list is preserved.
    """
    appearances: dict[str, list[str]] = {}
    for category in CATEGORIES:
        for item in provisional[category]:
            appearances.setdefault(item.post.id, []).append(category)

    owners = {}
    for category in CATEGORIES:
        for item in provisional[category]:
            if item.post.id not in owners:
                owners[item.post.id] = _preferred_category(item, appearances[item.post.id])

    return {
        category: tuple(
            item for item in provisional[category]
            if owners[item.post.id] == category
        )
        for category in CATEGORIES
    }


def backfill(
    allocation: Allocation,
    scored: Sequence[ScoredPost],
    limit: int,
) -> Allocation:
    """Fill short category lists with unused posts ranked by engagement.

    Categories are filled in the fixed order, so when the pool runs out the
    earlier categories have priority.

    Args:
        allocation: Disjoint category lists.
        scored: All scored posts.
        limit: Per-category cap.

    Returns:
        New allocation with short lists topped up.
    """
    used = frozenset(item.post.id for items in allocation.values() for item in items)
    pool = [s for s in rank_by_engagement(scored) if s.post.id not in used]

    def fill(state: tuple[Allocation, frozenset], category: str) -> tuple[Allocation, frozenset]:
        lists, taken = state
        current = lists[category]
        needed = max(0, limit - len(current))
        extra = tuple(s for s in pool if s.post.id not in taken)[:needed]
        return (
            {**lists, category: current + extra},
            taken | {s.post.id for s in extra},
        )

    filled, _ = reduce(fill, CATEGORIES, (dict(allocation), used))
    return filled


def allocate(scored: Sequence[ScoredPost], limit: int = 3) -> Allocation:
    """Allocate scored posts into three disjoint lists of at most `limit`.

    Args:
        scored: Scored posts with unique IDs.
        limit: Per-category cap (at least 1).

    Returns:
        Category -> tuple of ScoredPost.
    """
    if limit < 1:
        raise ValueError(f"limit must be at least 1, got {limit}")

    provisional = provisional_top_k(scored, limit)
    resolved = resolve_overlaps(provisional)

    moved = sum(len(provisional[c]) - len(resolved[c]) for c in CATEGORIES)
    if moved:
        logger.debug(f"[Allocator] Removed {moved} cross-category duplicates")

    filled = backfill(resolved, scored, limit)
    return {category: filled[category][:limit] for category in CATEGORIES}
