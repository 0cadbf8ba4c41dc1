from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from tg_khatma.time_utils import DEFAULT_TZ


@dataclass(frozen=True)
class Settings:
    telegram_bot_token: str
    database_path: Path
    tz: str
    quran_reference_path: Path | None
    api_token: str | None
    api_host: str
    api_port: int


def _load_env_file(path: Path) -> None:
    if not path.exists():
        return
    for line in path.read_text().splitlines():
        raw = line.strip()
        if not raw or raw.startswith("#") or "=" not in raw:
            continue
        key, value = raw.split("=", maxsplit=1)
        key = key.strip()
        value = value.strip().strip('"').strip("'")
        if key and key not in os.environ:
            os.environ[key] = value


def _parse_port(value: str | None, default: int = 8080) -> int:
    if value is None:
        return default
    try:
        port = int(value)
    except ValueError:
        return default
    return port if 0 < port < 65536 else default


def load_settings(require_bot_token: bool = True, env_file: Path = Path(".env")) -> Settings:
    _load_env_file(env_file)

    token = os.getenv("TELEGRAM_BOT_TOKEN", "")
    if require_bot_token and not token:
        raise RuntimeError("TELEGRAM_BOT_TOKEN is required")

    reference_raw = os.getenv("QURAN_REFERENCE_PATH", "").strip()

    return Settings(
        telegram_bot_token=token,
        database_path=Path(os.getenv("DATABASE_PATH", "./data/app.db")),
        tz=os.getenv("TZ", DEFAULT_TZ) or DEFAULT_TZ,
        quran_reference_path=Path(reference_raw) if reference_raw else None,
        api_token=os.getenv("API_TOKEN") or None,
        api_host=os.getenv("API_HOST", "127.0.0.1"),
        api_port=_parse_port(os.getenv("API_PORT")),
    )
