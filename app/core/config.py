from __future__ import annotations

from dataclasses import dataclass
import os
from dotenv import load_dotenv


@dataclass(frozen=True)
class AppConfig:
    bot_token: str

    db_url: str = "sqlite:///data/isupipe.db"

    top_limit: int = 10

    locale: str = "en"  # "en" | "ru"

    run_migrations: bool = True

    parse_mode: str = "HTML"

    admin_chat_id: int = 0  # Optional: set to send greeting to this chat on startup

    @staticmethod
    def from_env() -> "AppConfig":
        load_dotenv()  # Load .env file
        bot_token = os.getenv("BOT_TOKEN", "").strip()
        if not bot_token:
            raise RuntimeError("BOT_TOKEN is required.")

        def _int(name: str, default: int) -> int:
            raw = os.getenv(name, str(default)).strip()
            try:
                return int(raw)
            except ValueError as ex:
                raise RuntimeError(f"{name} must be int. Got '{raw}'.") from ex

        def _bool(name: str, default: bool) -> bool:
            raw = os.getenv(name, "").strip().lower()
            if not raw:
                return default
            if raw in ("1", "true", "yes", "on"):
                return True
            if raw in ("0", "false", "no", "off"):
                return False
            raise RuntimeError(f"{name} must be a boolean. Got '{raw}'.")

        locale = os.getenv("LOCALE", "en").strip().lower()
        if locale not in ("en", "ru"):
            raise RuntimeError("LOCALE must be 'en' or 'ru'.")

        top_limit = _int("TOP_LIMIT", 10)
        if top_limit < 1:
            raise RuntimeError("TOP_LIMIT must be >= 1.")

        return AppConfig(
            bot_token=bot_token,
            db_url=os.getenv("DB_URL", "sqlite:///data/isupipe.db").strip(),
            top_limit=top_limit,
            locale=locale,
            run_migrations=_bool("RUN_MIGRATIONS", True),
            admin_chat_id=_int("ADMIN_CHAT_ID", 0),
        )


def get_app_version() -> str:
    """Installed package version, or "unknown" when running from a source checkout."""
    from importlib.metadata import version, PackageNotFoundError

    try:
        return version("livestream-stats-bot")
    except PackageNotFoundError:
        return "unknown"
