"""
Deterministic ranking over a whole entity population.

The ranking is kept ascending (worst first). Rank 1 is the tail entry: the
highest score, and among equal scores the largest tie-break key.
"""

from __future__ import annotations

from functools import cmp_to_key
from typing import Iterable, List, Mapping, Optional, Sequence, Tuple

from app.core.errors import PreconditionViolation
from app.core.models import RankingEntry, TieBreakKey


def _cmp(a, b) -> int:
    return (a > b) - (a < b)


def compare_entries(a: RankingEntry, b: RankingEntry) -> int:
    """Ascending by score, then ascending by tie-break key."""
    if a.score != b.score:
        return _cmp(a.score, b.score)
    return _cmp(a.key, b.key)


def build_ranking(
    population: Iterable[Tuple[int, TieBreakKey]],
    scores: Mapping[int, int],
) -> Tuple[RankingEntry, ...]:
    """
    Build the ascending ranking for every (entity_id, tie_break_key) pair.

    Entities without a score entry rank with score 0.
    """
    entries = [
        RankingEntry(entity_id=entity_id, key=key, score=scores.get(entity_id, 0))
        for entity_id, key in population
    ]

    keys = {e.key for e in entries}
    if len(keys) != len(entries):
        raise PreconditionViolation("tie-break keys must be unique within a ranking population")

    entries.sort(key=cmp_to_key(compare_entries))
    return tuple(entries)


def resolve_rank(ranking: Sequence[RankingEntry], key: TieBreakKey) -> int:
    rank = 1
    for entry in reversed(ranking):
        if entry.key == key:
            return rank
        rank += 1
    raise PreconditionViolation(f"key {key!r} is not part of the ranking population")


def ranked_entries(ranking: Sequence[RankingEntry], limit: Optional[int] = None) -> List[Tuple[int, RankingEntry]]:
    """Best-first (rank, entry) pairs, optionally cut to the first `limit`."""
    best_first = reversed(ranking)
    out: List[Tuple[int, RankingEntry]] = []
    for rank, entry in enumerate(best_first, start=1):
        if limit is not None and rank > limit:
            break
        out.append((rank, entry))
    return out
