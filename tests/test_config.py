from __future__ import annotations

from pathlib import Path

import pytest

from tg_khatma.config import load_settings

ENV_KEYS = ("TELEGRAM_BOT_TOKEN", "DATABASE_PATH", "TZ", "QURAN_REFERENCE_PATH", "API_TOKEN", "API_HOST", "API_PORT")


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch) -> None:
    for key in ENV_KEYS:
        # setenv first so values written by the .env loader are undone at teardown
        monkeypatch.setenv(key, "")
        monkeypatch.delenv(key)


def test_bot_token_required(tmp_path: Path) -> None:
    with pytest.raises(RuntimeError):
        load_settings(env_file=tmp_path / ".env")


def test_defaults_without_bot_token(tmp_path: Path) -> None:
    settings = load_settings(require_bot_token=False, env_file=tmp_path / ".env")
    assert settings.database_path == Path("./data/app.db")
    assert settings.tz == "UTC"
    assert settings.quran_reference_path is None
    assert settings.api_token is None
    assert settings.api_host == "127.0.0.1"
    assert settings.api_port == 8080


def test_env_file_does_not_override_environment(tmp_path: Path, monkeypatch) -> None:
    env_file = tmp_path / ".env"
    env_file.write_text(
        "# local settings\n"
        "TELEGRAM_BOT_TOKEN='abc:123'\n"
        "TZ=Asia/Riyadh\n"
        "QURAN_REFERENCE_PATH=./ref.yaml\n"
        "API_PORT=not-a-port\n"
    )
    monkeypatch.setenv("TZ", "Europe/London")
    settings = load_settings(env_file=env_file)
    assert settings.telegram_bot_token == "abc:123"
    assert settings.tz == "Europe/London"
    assert settings.quran_reference_path == Path("./ref.yaml")
    assert settings.api_port == 8080
