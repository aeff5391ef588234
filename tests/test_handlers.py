from __future__ import annotations

import asyncio
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest

from app.bot.handlers import cmd_user_stats, cmd_livestream_stats, cmd_top_users, cmd_top_livestreams, cmd_help
from app.core.config import AppConfig
from app.core.errors import UpstreamFetchError


@pytest.fixture
def cfg() -> AppConfig:
    return AppConfig(bot_token="t", top_limit=5)


def _update():
    return SimpleNamespace(effective_message=SimpleNamespace(reply_text=AsyncMock()))


def _context(*args: str):
    return SimpleNamespace(args=list(args))


def _reply_text(update) -> str:
    update.effective_message.reply_text.assert_awaited_once()
    return update.effective_message.reply_text.await_args.kwargs["text"]


def test_user_stats_reply(service, seed, cfg):
    uid = seed.user("alice")
    seed.reaction(seed.livestream(uid), "fire")
    update = _update()

    asyncio.run(cmd_user_stats(update, _context("alice"), service=service, cfg=cfg))

    text = _reply_text(update)
    assert "Rank: <b>#1</b>" in text
    assert "Favorite emoji: fire" in text


def test_user_stats_unknown_user(service, cfg):
    update = _update()
    asyncio.run(cmd_user_stats(update, _context("ghost"), service=service, cfg=cfg))
    assert _reply_text(update) == "User ghost not found."


def test_user_stats_usage(service, cfg):
    update = _update()
    asyncio.run(cmd_user_stats(update, _context(), service=service, cfg=cfg))
    assert _reply_text(update).startswith("Usage: /user_stats")


def test_livestream_stats_reply(service, seed, cfg):
    ls = seed.livestream(seed.user("alice"))
    seed.comment(ls, tip=30)
    update = _update()

    asyncio.run(cmd_livestream_stats(update, _context(str(ls)), service=service, cfg=cfg))

    assert "Max tip: 30" in _reply_text(update)


def test_livestream_stats_rejects_non_integer_id(service, cfg):
    update = _update()
    asyncio.run(cmd_livestream_stats(update, _context("abc"), service=service, cfg=cfg))
    assert _reply_text(update) == "livestream_id must be an integer."


def test_livestream_stats_unknown(service, cfg):
    update = _update()
    asyncio.run(cmd_livestream_stats(update, _context("42"), service=service, cfg=cfg))
    assert _reply_text(update) == "Livestream #42 not found."


def test_top_commands(service, seed, cfg):
    uid = seed.user("alice")
    seed.livestream(uid, "show")

    users = _update()
    asyncio.run(cmd_top_users(users, _context(), service=service, cfg=cfg))
    assert "1. alice" in _reply_text(users)

    streams = _update()
    asyncio.run(cmd_top_livestreams(streams, _context(), service=service, cfg=cfg))
    assert "1. show" in _reply_text(streams)


class _UnavailableService:
    def compute_user_statistics(self, username: str):
        raise UpstreamFetchError("database unavailable")


def test_upstream_failure_reply(cfg):
    failing = _UnavailableService()
    update = _update()

    asyncio.run(cmd_user_stats(update, _context("alice"), service=failing, cfg=cfg))

    assert _reply_text(update) == "Failed to compute statistics, try again later."


def test_help(cfg):
    update = _update()
    asyncio.run(cmd_help(update, _context(), cfg=cfg))
    assert "/user_stats" in _reply_text(update)
