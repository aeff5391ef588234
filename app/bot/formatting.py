from __future__ import annotations

from typing import Sequence
from html import escape

from app.core.models import TopRow, UserStatistics, LivestreamStatistics
from app.bot.messages import (
    get_message,
    MSG_USER_STATS,
    MSG_LIVESTREAM_STATS,
    MSG_NO_FAVORITE_EMOJI,
    MSG_TOP_EMPTY,
    MSG_TOP_USERS_HEADER,
    MSG_TOP_LIVESTREAMS_HEADER,
    MSG_TOP_ROW,
)


def format_user_stats_message(username: str, stats: UserStatistics, locale: str = "en") -> str:
    favorite = stats.favorite_emoji or get_message(MSG_NO_FAVORITE_EMOJI, locale)
    fields = stats.to_dict()
    fields["favorite_emoji"] = escape(favorite)
    return get_message(MSG_USER_STATS, locale, username=escape(username), **fields)


def format_livestream_stats_message(livestream_id: int, stats: LivestreamStatistics, locale: str = "en") -> str:
    return get_message(MSG_LIVESTREAM_STATS, locale, livestream_id=livestream_id, **stats.to_dict())


def _format_top(rows: Sequence[TopRow], header: str, locale: str) -> str:
    if not rows:
        return get_message(MSG_TOP_EMPTY, locale)

    lines = [get_message(header, locale)]
    for r in rows:
        lines.append(get_message(MSG_TOP_ROW, locale, rank=r.rank, label=escape(r.label), score=r.score))
    return "\n".join(lines)


def format_top_users_message(rows: Sequence[TopRow], locale: str = "en") -> str:
    return _format_top(rows, MSG_TOP_USERS_HEADER, locale)


def format_top_livestreams_message(rows: Sequence[TopRow], locale: str = "en") -> str:
    # Untitled livestreams are listed by id
    rows = [r if r.label else TopRow(rank=r.rank, entity_id=r.entity_id, label=f"#{r.entity_id}", score=r.score) for r in rows]
    return _format_top(rows, MSG_TOP_LIVESTREAMS_HEADER, locale)
