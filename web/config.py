#!/usr/bin/env python3
"""
web/config.py — Server settings read from the environment.

    MARBLES_HOST    bind address          (default 127.0.0.1)
    MARBLES_PORT    port                  (default 8000)
    LOG_LEVEL       root logging level    (default INFO)
    MARBLES_RELOAD  uvicorn auto-reload   (default off; "1", "true", "yes" turn it on)
"""

from __future__ import annotations

import os
from dataclasses import dataclass


LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


@dataclass(frozen=True)
class Settings:
    host: str = "127.0.0.1"
    port: int = 8000
    log_level: str = "INFO"
    reload: bool = False


def load_settings() -> Settings:
    return Settings(
        host=os.getenv("MARBLES_HOST", "127.0.0.1"),
        port=int(os.getenv("MARBLES_PORT", "8000")),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        reload=os.getenv("MARBLES_RELOAD", "0").lower() in {"1", "true", "yes"},
    )
