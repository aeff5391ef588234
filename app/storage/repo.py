from __future__ import annotations

from typing import ContextManager, Dict, Optional, Protocol, Sequence

from app.core.models import User, Livestream


class StatsSnapshot(Protocol):
    """
    Read access to the platform data, bound to one read transaction.

    Aggregate mappings only contain ids that have at least one matching row.
    Driver failures surface as UpstreamFetchError.
    """

    # --- population ---
    def find_user_by_name(self, name: str) -> Optional[User]: ...

    def find_livestream(self, livestream_id: int) -> Optional[Livestream]: ...

    def list_users(self) -> Sequence[User]: ...

    def list_livestreams(self) -> Sequence[Livestream]: ...

    # --- score facts ---
    def count_reactions_by_user(self) -> Dict[int, int]: ...

    def sum_tips_by_user(self) -> Dict[int, int]: ...

    def count_reactions_by_livestream(self) -> Dict[int, int]: ...

    def sum_tips_by_livestream(self) -> Dict[int, int]: ...

    # --- per-user facts ---
    def count_viewers_for_user(self, user_id: int) -> int: ...

    def count_livecomments_for_user(self, user_id: int) -> int: ...

    def count_emoji_for_user(self, user_id: int) -> Dict[str, int]: ...

    # --- per-livestream facts ---
    def count_viewers_for_livestream(self, livestream_id: int) -> int: ...

    def max_tip_for_livestream(self, livestream_id: int) -> int: ...

    def count_reports_for_livestream(self, livestream_id: int) -> int: ...


class Repository(Protocol):
    def snapshot(self) -> ContextManager[StatsSnapshot]: ...
