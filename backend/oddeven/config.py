"""Конфигурация приложения."""
import os
import secrets
from decimal import Decimal
from functools import lru_cache


@lru_cache
def get_config():
    return type("Config", (), {
        # пустой секрет — ключ подписи бейджей генерируется на процесс
        "badge_secret": os.environ.get("ODDEVEN_BADGE_SECRET", "") or secrets.token_hex(32),
        "currency": os.environ.get("ODDEVEN_CURRENCY", "XRD"),
        "default_stake": Decimal(os.environ.get("ODDEVEN_DEFAULT_STAKE", "100")),
        "debug": os.environ.get("DEBUG", "0").lower() in ("1", "true", "yes"),
        "allowed_origins": os.environ.get("ALLOWED_ORIGINS", "*").split(","),
    })()
