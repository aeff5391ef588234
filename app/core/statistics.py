from __future__ import annotations

import logging
from typing import List, Mapping

from app.core.errors import NotFoundError
from app.core.models import UserStatistics, LivestreamStatistics, TopRow
from app.core.ranking import build_ranking, resolve_rank, ranked_entries
from app.core.scoring import aggregate_scores
from app.storage.repo import Repository

logger = logging.getLogger(__name__)


def pick_favorite_emoji(counts: Mapping[str, int]) -> str:
    """Most used emoji name; ties go to the lexicographically largest name."""
    if not counts:
        return ""
    return max(counts.items(), key=lambda kv: (kv[1], kv[0]))[0]


class StatisticsService:
    """
    Computes user and livestream statistics from one consistent snapshot.

    Nothing is cached between calls: every call reads the current facts,
    rebuilds the ranking and throws it away.
    """

    def __init__(self, repo: Repository) -> None:
        self._repo = repo

    def compute_user_statistics(self, username: str) -> UserStatistics:
        with self._repo.snapshot() as snap:
            user = snap.find_user_by_name(username)
            if user is None:
                raise NotFoundError("not found user that has the given username")

            reactions = snap.count_reactions_by_user()
            tips = snap.sum_tips_by_user()
            ranking = build_ranking(
                ((u.id, u.name) for u in snap.list_users()),
                aggregate_scores(reactions, tips),
            )
            rank = resolve_rank(ranking, user.name)

            stats = UserStatistics(
                rank=rank,
                viewers_count=snap.count_viewers_for_user(user.id),
                total_reactions=reactions.get(user.id, 0),
                total_livecomments=snap.count_livecomments_for_user(user.id),
                total_tip=tips.get(user.id, 0),
                favorite_emoji=pick_favorite_emoji(snap.count_emoji_for_user(user.id)),
            )

        logger.info("User stats computed: user=%s rank=%s/%s", username, rank, len(ranking))
        return stats

    def compute_livestream_statistics(self, livestream_id: int) -> LivestreamStatistics:
        with self._repo.snapshot() as snap:
            if snap.find_livestream(livestream_id) is None:
                raise NotFoundError("cannot get stats of not found livestream")

            reactions = snap.count_reactions_by_livestream()
            tips = snap.sum_tips_by_livestream()
            ranking = build_ranking(
                ((ls.id, ls.id) for ls in snap.list_livestreams()),
                aggregate_scores(reactions, tips),
            )
            rank = resolve_rank(ranking, livestream_id)

            stats = LivestreamStatistics(
                rank=rank,
                viewers_count=snap.count_viewers_for_livestream(livestream_id),
                total_reactions=reactions.get(livestream_id, 0),
                total_reports=snap.count_reports_for_livestream(livestream_id),
                max_tip=snap.max_tip_for_livestream(livestream_id),
                total_tip=tips.get(livestream_id, 0),
            )

        logger.info("Livestream stats computed: livestream=%s rank=%s/%s", livestream_id, rank, len(ranking))
        return stats

    def compute_user_ranking(self, limit: int) -> List[TopRow]:
        with self._repo.snapshot() as snap:
            users = snap.list_users()
            scores = aggregate_scores(snap.count_reactions_by_user(), snap.sum_tips_by_user())

        ranking = build_ranking(((u.id, u.name) for u in users), scores)
        return [
            TopRow(rank=rank, entity_id=e.entity_id, label=str(e.key), score=e.score)
            for rank, e in ranked_entries(ranking, limit)
        ]

    def compute_livestream_ranking(self, limit: int) -> List[TopRow]:
        with self._repo.snapshot() as snap:
            livestreams = snap.list_livestreams()
            scores = aggregate_scores(snap.count_reactions_by_livestream(), snap.sum_tips_by_livestream())

        titles = {ls.id: ls.title for ls in livestreams}
        ranking = build_ranking(((ls.id, ls.id) for ls in livestreams), scores)
        return [
            TopRow(rank=rank, entity_id=e.entity_id, label=titles[e.entity_id], score=e.score)
            for rank, e in ranked_entries(ranking, limit)
        ]
