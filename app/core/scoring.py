from __future__ import annotations

from typing import Dict, Mapping


def aggregate_scores(event_counts: Mapping[int, int], monetary_sums: Mapping[int, int]) -> Dict[int, int]:
    """
    Fold per-entity event counts and tip sums into one score per entity id.

    Every id present in either mapping gets an entry; a missing side counts as 0.
    Values are summed as given, without sign checks.
    """
    scores: Dict[int, int] = {}
    for entity_id, count in event_counts.items():
        scores[entity_id] = scores.get(entity_id, 0) + count
    for entity_id, amount in monetary_sums.items():
        scores[entity_id] = scores.get(entity_id, 0) + amount
    return scores
