from __future__ import annotations

from dataclasses import dataclass, asdict
from typing import Any, Union

TieBreakKey = Union[str, int]


@dataclass(frozen=True)
class User:
    id: int
    name: str
    display_name: str


@dataclass(frozen=True)
class Livestream:
    id: int
    user_id: int
    title: str


@dataclass(frozen=True)
class RankingEntry:
    entity_id: int
    key: TieBreakKey
    score: int


@dataclass(frozen=True)
class TopRow:
    rank: int
    entity_id: int
    label: str
    score: int


@dataclass(frozen=True)
class UserStatistics:
    rank: int
    viewers_count: int
    total_reactions: int
    total_livecomments: int
    total_tip: int
    favorite_emoji: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class LivestreamStatistics:
    rank: int
    viewers_count: int
    total_reactions: int
    total_reports: int
    max_tip: int
    total_tip: int

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
