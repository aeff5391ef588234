"""
Localized message templates for bot replies.

Supports English ('en') and Russian ('ru'). Templates use str.format
placeholders that are filled in at render time.
"""

from __future__ import annotations

import logging
from typing import Literal, Final, Any

logger = logging.getLogger(__name__)

MSG_GREETING: Final[str] = "greeting"
MSG_HELP: Final[str] = "help"
MSG_USER_STATS: Final[str] = "user_stats"
MSG_LIVESTREAM_STATS: Final[str] = "livestream_stats"
MSG_NO_FAVORITE_EMOJI: Final[str] = "no_favorite_emoji"
MSG_USER_NOT_FOUND: Final[str] = "user_not_found"
MSG_LIVESTREAM_NOT_FOUND: Final[str] = "livestream_not_found"
MSG_USER_STATS_USAGE: Final[str] = "user_stats_usage"
MSG_LIVESTREAM_STATS_USAGE: Final[str] = "livestream_stats_usage"
MSG_LIVESTREAM_ID_INVALID: Final[str] = "livestream_id_invalid"
MSG_STATS_FAILED: Final[str] = "stats_failed"
MSG_TOP_EMPTY: Final[str] = "top_empty"
MSG_TOP_USERS_HEADER: Final[str] = "top_users_header"
MSG_TOP_LIVESTREAMS_HEADER: Final[str] = "top_livestreams_header"
MSG_TOP_ROW: Final[str] = "top_row"

SupportedLocale = Literal["en", "ru"]

_COMMANDS_EN = (
    "  /user_stats &lt;username&gt; — user statistics\n"
    "  /livestream_stats &lt;id&gt; — livestream statistics\n"
    "  /top_users — top streamers\n"
    "  /top_livestreams — top livestreams\n"
    "  /help — this message"
)
_COMMANDS_RU = (
    "  /user_stats &lt;username&gt; — статистика пользователя\n"
    "  /livestream_stats &lt;id&gt; — статистика трансляции\n"
    "  /top_users — топ стримеров\n"
    "  /top_livestreams — топ трансляций\n"
    "  /help — это сообщение"
)

_TRANSLATIONS: dict[SupportedLocale, dict[str, str]] = {
    "en": {
        MSG_GREETING: "<b>Livestream Stats Bot</b> {version}\nApplication started successfully!\n\nAvailable commands:\n" + _COMMANDS_EN,
        MSG_HELP: "<b>Commands</b>\n" + _COMMANDS_EN,
        MSG_USER_STATS: (
            "<b>{username}</b>\nRank: <b>#{rank}</b>\nViewers: {viewers_count}\n"
            "Reactions: {total_reactions}\nComments: {total_livecomments}\nTips: {total_tip}\n"
            "Favorite emoji: {favorite_emoji}"
        ),
        MSG_LIVESTREAM_STATS: (
            "<b>Livestream #{livestream_id}</b>\nRank: <b>#{rank}</b>\nViewers: {viewers_count}\n"
            "Reactions: {total_reactions}\nTips: {total_tip}\nMax tip: {max_tip}\nSpam reports: {total_reports}"
        ),
        MSG_NO_FAVORITE_EMOJI: "none yet",
        MSG_USER_NOT_FOUND: "User {username} not found.",
        MSG_LIVESTREAM_NOT_FOUND: "Livestream #{livestream_id} not found.",
        MSG_USER_STATS_USAGE: "Usage: /user_stats &lt;username&gt;",
        MSG_LIVESTREAM_STATS_USAGE: "Usage: /livestream_stats &lt;livestream_id&gt;",
        MSG_LIVESTREAM_ID_INVALID: "livestream_id must be an integer.",
        MSG_STATS_FAILED: "Failed to compute statistics, try again later.",
        MSG_TOP_EMPTY: "Nothing to rank yet.",
        MSG_TOP_USERS_HEADER: "<b>Top streamers</b>",
        MSG_TOP_LIVESTREAMS_HEADER: "<b>Top livestreams</b>",
        MSG_TOP_ROW: "{rank}. {label} — <b>{score}</b> pts",
    },
    "ru": {
        MSG_GREETING: "<b>Бот статистики трансляций</b> {version}\nПриложение успешно запущено!\n\nДоступные команды:\n" + _COMMANDS_RU,
        MSG_HELP: "<b>Команды</b>\n" + _COMMANDS_RU,
        MSG_USER_STATS: (
            "<b>{username}</b>\nМесто: <b>#{rank}</b>\nЗрители: {viewers_count}\n"
            "Реакции: {total_reactions}\nКомментарии: {total_livecomments}\nЧаевые: {total_tip}\n"
            "Любимый эмодзи: {favorite_emoji}"
        ),
        MSG_LIVESTREAM_STATS: (
            "<b>Трансляция #{livestream_id}</b>\nМесто: <b>#{rank}</b>\nЗрители: {viewers_count}\n"
            "Реакции: {total_reactions}\nЧаевые: {total_tip}\nМакс. чаевые: {max_tip}\nЖалобы на спам: {total_reports}"
        ),
        MSG_NO_FAVORITE_EMOJI: "пока нет",
        MSG_USER_NOT_FOUND: "Пользователь {username} не найден.",
        MSG_LIVESTREAM_NOT_FOUND: "Трансляция #{livestream_id} не найдена.",
        MSG_USER_STATS_USAGE: "Использование: /user_stats &lt;username&gt;",
        MSG_LIVESTREAM_STATS_USAGE: "Использование: /livestream_stats &lt;livestream_id&gt;",
        MSG_LIVESTREAM_ID_INVALID: "livestream_id должен быть целым числом.",
        MSG_STATS_FAILED: "Не удалось посчитать статистику, попробуйте позже.",
        MSG_TOP_EMPTY: "Пока некого ранжировать.",
        MSG_TOP_USERS_HEADER: "<b>Топ стримеров</b>",
        MSG_TOP_LIVESTREAMS_HEADER: "<b>Топ трансляций</b>",
        MSG_TOP_ROW: "{rank}. {label} — <b>{score}</b> очков",
    },
}


def get_message(msg_type: str, locale: SupportedLocale = "en", **kwargs: Any) -> str:
    """
    Get a localized message by type and locale.

    Args:
        msg_type: Message type constant (e.g., MSG_USER_STATS)
        locale: Language code ('en' or 'ru'). Unknown locales fall back to 'en'
        **kwargs: Placeholder values to substitute in the message template

    Raises:
        KeyError: If msg_type is not a known message type
        ValueError: If a placeholder required by the template is missing

    Example:
        >>> get_message(MSG_TOP_ROW, "en", rank=1, label="alice", score=42)
        '1. alice — <b>42</b> pts'
    """
    if locale not in _TRANSLATIONS:
        logger.warning("Unsupported locale: %s, falling back to 'en'", locale)
        locale = "en"

    translations = _TRANSLATIONS[locale]
    if msg_type not in translations:
        raise KeyError(f"Message type '{msg_type}' not found in translations for locale '{locale}'")

    try:
        return translations[msg_type].format(**kwargs)
    except KeyError as e:
        missing_key = str(e).strip("'")
        raise ValueError(f"Missing required placeholder '{missing_key}' for message type '{msg_type}'") from e
