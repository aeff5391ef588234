from __future__ import annotations

import logging
from html import escape

from telegram import Update
from telegram.ext import ContextTypes

from app.core.config import AppConfig, get_app_version
from app.core.errors import NotFoundError, UpstreamFetchError
from app.core.statistics import StatisticsService
from app.bot.formatting import (
    format_user_stats_message,
    format_livestream_stats_message,
    format_top_users_message,
    format_top_livestreams_message,
)
from app.bot.messages import (
    get_message,
    MSG_GREETING,
    MSG_HELP,
    MSG_USER_NOT_FOUND,
    MSG_LIVESTREAM_NOT_FOUND,
    MSG_USER_STATS_USAGE,
    MSG_LIVESTREAM_STATS_USAGE,
    MSG_LIVESTREAM_ID_INVALID,
    MSG_STATS_FAILED,
)

logger = logging.getLogger(__name__)


async def _reply(update: Update, cfg: AppConfig, text: str) -> None:
    await update.effective_message.reply_text(text=text, parse_mode=cfg.parse_mode)


async def cmd_user_stats(update: Update, context: ContextTypes.DEFAULT_TYPE, *, service: StatisticsService, cfg: AppConfig) -> None:
    if not update.effective_message:
        return
    if not context.args:
        await _reply(update, cfg, get_message(MSG_USER_STATS_USAGE, cfg.locale))
        return

    username = context.args[0]
    try:
        stats = service.compute_user_statistics(username)
    except NotFoundError:
        logger.info("User stats requested for unknown user %s", username)
        await _reply(update, cfg, get_message(MSG_USER_NOT_FOUND, cfg.locale, username=escape(username)))
        return
    except UpstreamFetchError:
        logger.exception("Failed to fetch facts for user %s", username)
        await _reply(update, cfg, get_message(MSG_STATS_FAILED, cfg.locale))
        return

    await _reply(update, cfg, format_user_stats_message(username, stats, cfg.locale))


async def cmd_livestream_stats(update: Update, context: ContextTypes.DEFAULT_TYPE, *, service: StatisticsService, cfg: AppConfig) -> None:
    if not update.effective_message:
        return
    if not context.args:
        await _reply(update, cfg, get_message(MSG_LIVESTREAM_STATS_USAGE, cfg.locale))
        return

    try:
        livestream_id = int(context.args[0])
    except ValueError:
        await _reply(update, cfg, get_message(MSG_LIVESTREAM_ID_INVALID, cfg.locale))
        return

    try:
        stats = service.compute_livestream_statistics(livestream_id)
    except NotFoundError:
        logger.info("Livestream stats requested for unknown livestream %s", livestream_id)
        await _reply(update, cfg, get_message(MSG_LIVESTREAM_NOT_FOUND, cfg.locale, livestream_id=livestream_id))
        return
    except UpstreamFetchError:
        logger.exception("Failed to fetch facts for livestream %s", livestream_id)
        await _reply(update, cfg, get_message(MSG_STATS_FAILED, cfg.locale))
        return

    await _reply(update, cfg, format_livestream_stats_message(livestream_id, stats, cfg.locale))


async def cmd_top_users(update: Update, context: ContextTypes.DEFAULT_TYPE, *, service: StatisticsService, cfg: AppConfig) -> None:
    if not update.effective_message:
        return
    try:
        rows = service.compute_user_ranking(cfg.top_limit)
    except UpstreamFetchError:
        logger.exception("Failed to build user ranking")
        await _reply(update, cfg, get_message(MSG_STATS_FAILED, cfg.locale))
        return
    await _reply(update, cfg, format_top_users_message(rows, cfg.locale))


async def cmd_top_livestreams(update: Update, context: ContextTypes.DEFAULT_TYPE, *, service: StatisticsService, cfg: AppConfig) -> None:
    if not update.effective_message:
        return
    try:
        rows = service.compute_livestream_ranking(cfg.top_limit)
    except UpstreamFetchError:
        logger.exception("Failed to build livestream ranking")
        await _reply(update, cfg, get_message(MSG_STATS_FAILED, cfg.locale))
        return
    await _reply(update, cfg, format_top_livestreams_message(rows, cfg.locale))


async def cmd_help(update: Update, context: ContextTypes.DEFAULT_TYPE, *, cfg: AppConfig) -> None:
    if not update.effective_message:
        return
    await _reply(update, cfg, get_message(MSG_HELP, cfg.locale))


async def on_error(update: object, context: ContextTypes.DEFAULT_TYPE) -> None:
    logger.error("Unhandled error while processing update %s", update, exc_info=context.error)


async def send_greeting(app, cfg: AppConfig) -> None:
    """Send a greeting message to admin chat on application startup."""
    if not cfg.admin_chat_id:
        logger.info("Application started. (No ADMIN_CHAT_ID configured.)")
        return

    try:
        text = get_message(MSG_GREETING, cfg.locale, version=escape(get_app_version()))
        await app.bot.send_message(chat_id=cfg.admin_chat_id, text=text, parse_mode=cfg.parse_mode)
        logger.info("Application started. Greeting sent to admin chat %s.", cfg.admin_chat_id)
    except Exception as e:
        logger.warning("Failed to send greeting to admin chat %s: %s", cfg.admin_chat_id, e)
