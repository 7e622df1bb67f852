# config.py
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv


def _load_env_file() -> None:
    """
    Load .env from the project root (same folder as this config.py).
    Already-set environment variables win.
    """
    dotenv_path = Path(__file__).resolve().parent / ".env"
    if dotenv_path.exists():
        load_dotenv(dotenv_path=dotenv_path, override=False)


@dataclass(frozen=True)
class MySqlConfig:
    host: str
    port: int
    user: str
    password: str
    database: str
    minsize: int = 1
    maxsize: int = 5
    connect_timeout: int = 10


@dataclass(frozen=True)
class BotConfig:
    token: str
    dev_guild_id: int | None
    command_prefix: str
    log_level: str
    mysql: MySqlConfig
    bot_admin_ids: frozenset[int] = frozenset()
    prediction_lock_minutes: int = 5


def _getenv(name: str, default: str | None = None) -> str | None:
    v = os.getenv(name)
    if v is None:
        return default
    v = v.strip()
    return v if v else default


def _int_or_none(value: str | None, var_name: str) -> int | None:
    if value is None:
        return None
    try:
        return int(value)
    except ValueError as e:
        raise ValueError(f"{var_name} must be an integer, got: {value!r}") from e


def _int(value: str | None, var_name: str, default: int) -> int:
    parsed = _int_or_none(value, var_name)
    return default if parsed is None else parsed


def _id_set(value: str | None, var_name: str) -> frozenset[int]:
    # "123, 456" -> {123, 456}
    if not value:
        return frozenset()
    out = set()
    for part in value.split(","):
        part = part.strip()
        if part:
            out.add(_int_or_none(part, var_name))
    return frozenset(out)


def load_config() -> BotConfig:
    _load_env_file()

    token = (_getenv("DISCORD_TOKEN") or "").strip()
    if not token:
        raise RuntimeError("Missing DISCORD_TOKEN environment variable.")

    minsize = _int(_getenv("DB_POOL_MIN"), "DB_POOL_MIN", 1)
    maxsize = _int(_getenv("DB_POOL_MAX"), "DB_POOL_MAX", 5)
    if minsize < 1:
        raise ValueError("DB_POOL_MIN must be >= 1")
    if maxsize < minsize:
        raise ValueError("DB_POOL_MAX must be >= DB_POOL_MIN")

    lock_minutes = _int(_getenv("PREDICTION_LOCK_MINUTES"), "PREDICTION_LOCK_MINUTES", 5)
    if lock_minutes < 0:
        raise ValueError("PREDICTION_LOCK_MINUTES must be >= 0")

    return BotConfig(
        token=token,
        dev_guild_id=_int_or_none(_getenv("DEV_GUILD_ID"), "DEV_GUILD_ID"),
        command_prefix=_getenv("COMMAND_PREFIX", "!") or "!",
        log_level=(_getenv("LOG_LEVEL", "INFO") or "INFO").upper(),
        mysql=MySqlConfig(
            host=_getenv("DB_HOST", "127.0.0.1") or "127.0.0.1",
            port=_int(_getenv("DB_PORT"), "DB_PORT", 3306),
            user=_getenv("DB_USER", "root") or "root",
            password=_getenv("DB_PASSWORD", "") or "",
            database=_getenv("DB_NAME", "bolao_copa") or "bolao_copa",
            minsize=minsize,
            maxsize=maxsize,
            connect_timeout=_int(_getenv("DB_CONNECT_TIMEOUT"), "DB_CONNECT_TIMEOUT", 10),
        ),
        bot_admin_ids=_id_set(_getenv("BOT_ADMIN_IDS"), "BOT_ADMIN_IDS"),
        prediction_lock_minutes=lock_minutes,
    )
