# crediario/config.py
from __future__ import annotations

import logging.config
import os

from dotenv import load_dotenv

# carrega .env quando rodar fora do uvicorn (scripts, init_db)
load_dotenv()


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./crediario.db").strip()
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").strip().upper() or "INFO"

CORS_ORIGINS = [
    o.strip()
    for o in os.getenv(
        "CORS_ORIGINS",
        "http://localhost:5173,http://127.0.0.1:5173,http://localhost:3000,http://127.0.0.1:3000",
    ).split(",")
    if o.strip()
]

# intervalo usado quando não dá para estimar pelo histórico da venda
DEFAULT_INTERVAL_DAYS = int(os.getenv("CREDIT_SALE_DEFAULT_INTERVAL_DAYS", "30"))

# lança o pagamento também no caixa (tabela transactions)
RECORD_CASH_ENTRY = _env_bool("CREDIT_SALE_RECORD_CASH_ENTRY", "1")


def setup_logging(level: str = LOG_LEVEL) -> None:
    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "default": {"format": "%(asctime)s %(levelname)s [%(name)s]: %(message)s"},
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "default",
                    "stream": "ext://sys.stdout",
                }
            },
            "root": {"handlers": ["console"], "level": level},
        }
    )
