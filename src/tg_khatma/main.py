from __future__ import annotations

import asyncio

from tg_khatma.config import load_settings
from tg_khatma.db import Database
from tg_khatma.logging_setup import setup_logging
from tg_khatma.quran_reference import load_reference
from tg_khatma.telegram_bot import build_application


def run_bot() -> None:
    setup_logging()
    settings = load_settings()
    db = Database(settings.database_path)
    reference = load_reference(settings.quran_reference_path)

    # Python 3.14 does not auto-create a default event loop in main thread.
    try:
        asyncio.get_event_loop()
    except RuntimeError:
        asyncio.set_event_loop(asyncio.new_event_loop())

    application = build_application(settings, db, reference)
    application.run_polling()
