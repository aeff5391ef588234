from __future__ import annotations

import logging
import os

from telegram.ext import Application, CommandHandler

from app.core.config import AppConfig
from app.core.statistics import StatisticsService
from app.storage.migrations import SQL_DIR
from app.storage.sqlite_repo import SQLiteRepository
from app.storage.pg_repo import PostgresRepository
from app.bot.handlers import (
    cmd_user_stats,
    cmd_livestream_stats,
    cmd_top_users,
    cmd_top_livestreams,
    cmd_help,
    on_error,
    send_greeting,
)


logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s - %(message)s"


def _sqlite_path_from_db_url(db_url: str) -> str:
    # Expected: sqlite:///data/isupipe.db
    if not db_url.startswith("sqlite:///"):
        raise RuntimeError("DB_URL must be sqlite:///... or postgresql://...")
    return db_url.replace("sqlite:///", "", 1)


def _is_postgres(db_url: str) -> bool:
    return db_url.startswith("postgresql://") or db_url.startswith("postgres://")


def build_repo(cfg: AppConfig):
    """Build the repository matching DB_URL."""
    migrations_dir = SQL_DIR if cfg.run_migrations else None

    if _is_postgres(cfg.db_url):
        logger.info("Using PostgreSQL repository")
        return PostgresRepository(dsn=cfg.db_url, migrations_dir=migrations_dir)

    db_path = _sqlite_path_from_db_url(cfg.db_url)
    logger.info("Using SQLite repository: %s", db_path)
    return SQLiteRepository(db_path=db_path, migrations_dir=migrations_dir)


def build_app(*, cfg: AppConfig) -> Application:
    service = StatisticsService(build_repo(cfg))

    application = Application.builder().token(cfg.bot_token).build()

    application.add_handler(CommandHandler("user_stats", lambda u, c: cmd_user_stats(u, c, service=service, cfg=cfg)))
    application.add_handler(CommandHandler("livestream_stats", lambda u, c: cmd_livestream_stats(u, c, service=service, cfg=cfg)))
    application.add_handler(CommandHandler("top_users", lambda u, c: cmd_top_users(u, c, service=service, cfg=cfg)))
    application.add_handler(CommandHandler("top_livestreams", lambda u, c: cmd_top_livestreams(u, c, service=service, cfg=cfg)))
    application.add_handler(CommandHandler(["help", "start"], lambda u, c: cmd_help(u, c, cfg=cfg)))
    application.add_error_handler(on_error)

    application.post_init = lambda app: send_greeting(app, cfg)

    return application


class RedactingFormatter(logging.Formatter):
    """Formatter that hides a secret (the bot token) from every log line."""

    def __init__(self, fmt: str, secret: str) -> None:
        super().__init__(fmt)
        self._secret = secret

    def format(self, record: logging.LogRecord) -> str:
        msg = super().format(record)
        if not self._secret:
            return msg
        return msg.replace(self._secret, "<BOT_TOKEN_REDACTED>")


def setup_logging(cfg: AppConfig) -> None:
    root = logging.getLogger()
    for h in list(root.handlers):
        root.removeHandler(h)

    stream_h = logging.StreamHandler()
    stream_h.setFormatter(RedactingFormatter(LOG_FORMAT, cfg.bot_token))
    root.addHandler(stream_h)
    root.setLevel(os.getenv("LOG_LEVEL", "INFO"))

    # Reduce verbosity for noisy third-party libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)


def main() -> None:
    cfg = AppConfig.from_env()
    setup_logging(cfg)

    app = build_app(cfg=cfg)

    # Polling mode
    app.run_polling(
        allowed_updates=["message"],
        close_loop=False,
    )


if __name__ == "__main__":
    main()
