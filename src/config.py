from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

FIELD_LOG_LEVELS = ("NONE", "ERROR", "INFO", "DEBUG", "ALL")

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


class ConfigError(RuntimeError):
    pass


def _flag(env: Mapping[str, str], name: str, default: bool) -> bool:
    raw = env.get(name)
    if raw is None or not raw.strip():
        return default
    value = raw.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ConfigError(f"{name} must be a boolean, got {raw!r}")


def _expiry_days(env: Mapping[str, str]) -> int | None:
    raw = (env.get("API_KEY_EXPIRY_DAYS") or "").strip()
    if not raw:
        return None
    try:
        days = int(raw)
    except ValueError as exc:
        raise ConfigError(f"API_KEY_EXPIRY_DAYS must be an integer, got {raw!r}") from exc
    # AppSync rejects keys that expire in less than a day or more than a year
    if not 1 <= days <= 365:
        raise ConfigError(f"API_KEY_EXPIRY_DAYS must be between 1 and 365, got {days}")
    return days


@dataclass(frozen=True)
class DeploySettings:
    account: str | None
    region: str | None
    stack_id: str
    field_log_level: str | None  # None disables API logging
    api_key_expiry_days: int | None
    xray_enabled: bool
    retain_tables: bool
    enable_monitoring: bool

    @property
    def monitoring_stack_id(self) -> str:
        return f"{self.stack_id}Monitoring"


def load_settings(env: Mapping[str, str] | None = None) -> DeploySettings:
    """Read deployment settings from the environment.

    ``.env`` is expected to be loaded already (the app entry point does it).
    """
    if env is None:
        env = os.environ

    level: str | None = (env.get("APPSYNC_FIELD_LOG_LEVEL") or "ALL").strip().upper()
    if level not in FIELD_LOG_LEVELS:
        raise ConfigError(
            f"APPSYNC_FIELD_LOG_LEVEL must be one of {', '.join(FIELD_LOG_LEVELS)}, got {level!r}",
        )
    if not _flag(env, "ENABLE_APPSYNC_LOGGING", True):
        level = None

    stack_id = (env.get("CATALOG_STACK_ID") or "ProductCatalogStack").strip()

    return DeploySettings(
        account=env.get("AWS_ACCOUNT_ID") or None,
        region=env.get("AWS_REGION") or None,
        stack_id=stack_id,
        field_log_level=level,
        api_key_expiry_days=_expiry_days(env),
        xray_enabled=_flag(env, "ENABLE_XRAY", False),
        retain_tables=_flag(env, "RETAIN_TABLES", False),
        enable_monitoring=_flag(env, "ENABLE_MONITORING", True),
    )
