from __future__ import annotations

from app.core.scoring import aggregate_scores


def test_score_is_count_plus_sum():
    scores = aggregate_scores({1: 3, 2: 5}, {1: 100, 2: 0})
    assert scores == {1: 103, 2: 5}


def test_ids_from_either_side_are_covered():
    scores = aggregate_scores({1: 4}, {2: 50})
    assert scores == {1: 4, 2: 50}


def test_empty_inputs_give_empty_scores():
    assert aggregate_scores({}, {}) == {}


def test_supply_order_does_not_matter():
    counts = {1: 2, 2: 7, 3: 1}
    sums = {3: 30, 1: 10}
    reordered_counts = dict(reversed(list(counts.items())))
    reordered_sums = dict(reversed(list(sums.items())))
    assert aggregate_scores(counts, sums) == aggregate_scores(reordered_counts, reordered_sums)


def test_negative_values_are_summed_verbatim():
    assert aggregate_scores({1: -2}, {1: 5}) == {1: 3}
