from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, List, Optional

import yaml

from rn_core.events import public_key_hex


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _parse_bool(raw: Any, default: bool) -> bool:
    if raw is None:
        return default
    if isinstance(raw, bool):
        return raw
    return str(raw).strip().lower() in ("1", "true", "yes", "y")


ORDER_BOOK_QUERY = "/api/book/?currency=0&type=2"

FETCH_TIMEOUT_S = _env_float("FETCH_TIMEOUT_S", 30.0)
RELAY_OPEN_TIMEOUT_S = _env_float("RELAY_OPEN_TIMEOUT_S", 10.0)
RELAY_ACK_TIMEOUT_S = _env_float("RELAY_ACK_TIMEOUT_S", 5.0)
DB_POOL_SIZE = _env_int("DB_POOL_SIZE", 10)
DB_POOL_RECYCLE_S = _env_int("DB_POOL_RECYCLE_S", 180)
DB_TIMEOUT_S = _env_int("DB_TIMEOUT_S", 10)

DEFAULT_CONFIG_PATH = "config.yml"
ENV_PREFIX = "RN_"

REQUIRED_KEYS = (
    "tor_proxy_url",
    "tor_proxy_port",
    "nostr_privkey",
    "nostr_relays",
    "robosats_onion_url",
    "robosats_referral_url",
    "db_url",
    "db_table",
    "db_username",
    "db_password",
)
OPTIONAL_KEYS = (
    "db_dsn",
    "ledger_table",
    "ledger_error_policy",
    "exit_on_ledger_error",
    "sync_interval_s",
    "run_on_start",
    "log_level",
    "log_dir",
)
LEDGER_ERROR_POLICIES = ("abort", "skip")


class ConfigError(RuntimeError):
    pass


@dataclass(frozen=True)
class BridgeSettings:
    tor_proxy_url: str
    tor_proxy_port: str
    nostr_privkey: str
    nostr_relays: str
    robosats_onion_url: str
    robosats_referral_url: str
    db_url: str
    db_table: str
    db_username: str
    db_password: str
    db_dsn: Optional[str] = None
    ledger_table: str = "orders"
    ledger_error_policy: str = "abort"
    exit_on_ledger_error: bool = True
    sync_interval_s: float = 300.0
    run_on_start: bool = True
    log_level: str = "INFO"
    log_dir: str = "logs"

    @property
    def proxy_url(self) -> str:
        base = self.tor_proxy_url.strip().rstrip("/")
        # socks5h makes the proxy resolve .onion hostnames.
        if base.startswith("socks5://"):
            base = "socks5h://" + base[len("socks5://"):]
        return f"{base}:{self.tor_proxy_port.strip()}"

    @property
    def relays(self) -> List[str]:
        return [r.strip() for r in self.nostr_relays.split(",") if r.strip()]

    @property
    def database_url(self) -> str:
        if self.db_dsn:
            return self.db_dsn
        return f"mysql+pymysql://{self.db_username}:{self.db_password}@{self.db_url}/{self.db_table}"

    @property
    def nostr_pubkey(self) -> str:
        return public_key_hex(self.nostr_privkey)


def _read_yaml(path: Path) -> dict:
    try:
        with path.open("r", encoding="utf-8") as f:
            raw = yaml.safe_load(f)
    except FileNotFoundError as exc:
        raise ConfigError(f"Config file not found: {path}") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"Unable to parse config file {path}: {exc}") from exc
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ConfigError(f"Config file {path} must contain a mapping at top level.")
    return raw


def _apply_env(values: dict) -> dict:
    merged = dict(values)
    for key in REQUIRED_KEYS + OPTIONAL_KEYS:
        env_val = os.getenv(ENV_PREFIX + key.upper())
        if env_val is not None:
            merged[key] = env_val
    return merged


def settings_from_mapping(values: dict) -> BridgeSettings:
    missing = [k for k in REQUIRED_KEYS if not str(values.get(k) or "").strip()]
    if missing:
        raise ConfigError(f"Missing required config values: {', '.join(missing)}")

    policy = str(values.get("ledger_error_policy") or "abort").strip().lower()
    if policy not in LEDGER_ERROR_POLICIES:
        raise ConfigError(
            f"ledger_error_policy must be one of {', '.join(LEDGER_ERROR_POLICIES)} (got {policy!r})."
        )

    raw_interval = values.get("sync_interval_s")
    try:
        # Absent or blank means default; 0 is a value and gets rejected below.
        interval = 300.0 if raw_interval is None or str(raw_interval).strip() == "" else float(raw_interval)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"sync_interval_s must be a number (got {values.get('sync_interval_s')!r}).") from exc
    if interval <= 0:
        raise ConfigError("sync_interval_s must be positive.")

    settings = BridgeSettings(
        **{k: str(values[k]).strip() for k in REQUIRED_KEYS},
        db_dsn=(str(values["db_dsn"]).strip() or None) if values.get("db_dsn") else None,
        ledger_table=str(values.get("ledger_table") or "orders").strip(),
        ledger_error_policy=policy,
        exit_on_ledger_error=_parse_bool(values.get("exit_on_ledger_error"), True),
        sync_interval_s=interval,
        run_on_start=_parse_bool(values.get("run_on_start"), True),
        log_level=str(values.get("log_level") or "INFO").strip().upper(),
        log_dir=str(values.get("log_dir") or "logs").strip(),
    )

    if not settings.relays:
        raise ConfigError("No relays found in config. You must configure at least one relay.")
    try:
        public_key_hex(settings.nostr_privkey)
    except ValueError as exc:
        raise ConfigError(f"Invalid nostr_privkey: {exc}") from exc
    return settings


def load_settings(path: str | Path | None = None) -> BridgeSettings:
    """Read the YAML config, apply ``RN_*`` environment overrides and validate."""
    cfg_path = Path(path or DEFAULT_CONFIG_PATH)
    values = _read_yaml(cfg_path) if path is not None or cfg_path.exists() else {}
    return settings_from_mapping(_apply_env(values))
