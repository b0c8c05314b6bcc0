from __future__ import annotations

import os
from dataclasses import dataclass
from collections.abc import Mapping

from .browser import DEFAULT_CDP_URL
from .fetch import DEFAULT_BATCH_SIZE
from .http import DEFAULT_USER_AGENT


KNOWN_KEYS = [
    "CART_ALLERGENS_BATCH_SIZE",
    "CART_ALLERGENS_HTTP_TIMEOUT",
    "CART_ALLERGENS_USER_AGENT",
    "CART_ALLERGENS_CDP_URL",
    "CART_ALLERGENS_REPORT_PATH",
    "CART_ALLERGENS_LOG_LEVEL",
]


@dataclass(frozen=True)
class Config:
    batch_size: int = DEFAULT_BATCH_SIZE
    # None disables the client-side timeout.
    http_timeout_s: float | None = 30.0
    user_agent: str = DEFAULT_USER_AGENT
    cdp_url: str = DEFAULT_CDP_URL
    report_path: str = "artifacts/scan_report.json"
    log_level: str = "WARNING"

    @staticmethod
    def load_from_env(env: Mapping[str, str] | None = None) -> "Config":
        env = os.environ if env is None else env
        defaults = Config()

        def get(key: str) -> str | None:
            val = env.get(key)
            if val is None or not val.strip():
                return None
            return val.strip()

        batch = get("CART_ALLERGENS_BATCH_SIZE")
        timeout = get("CART_ALLERGENS_HTTP_TIMEOUT")

        return Config(
            batch_size=_parse_int("CART_ALLERGENS_BATCH_SIZE", batch) if batch else defaults.batch_size,
            http_timeout_s=_parse_timeout(timeout) if timeout else defaults.http_timeout_s,
            user_agent=get("CART_ALLERGENS_USER_AGENT") or defaults.user_agent,
            cdp_url=(get("CART_ALLERGENS_CDP_URL") or defaults.cdp_url).rstrip("/"),
            report_path=get("CART_ALLERGENS_REPORT_PATH") or defaults.report_path,
            log_level=(get("CART_ALLERGENS_LOG_LEVEL") or defaults.log_level).upper(),
        )


def _parse_int(key: str, raw: str) -> int:
    try:
        val = int(raw)
    except ValueError:
        raise RuntimeError(f"{key} must be an integer, got {raw!r}")
    if val < 1:
        raise RuntimeError(f"{key} must be >= 1, got {val}")
    return val


def _parse_timeout(raw: str) -> float | None:
    try:
        val = float(raw)
    except ValueError:
        raise RuntimeError(f"CART_ALLERGENS_HTTP_TIMEOUT must be a number, got {raw!r}")
    if val <= 0:
        return None
    return val
