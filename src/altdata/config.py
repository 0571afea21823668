import os
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Settings:
    data_folder: str = "data"
    max_workers: int = 4
    fetch_max_retries: int = 2
    request_timeout_seconds: float = 30.0
    log_level: str = "INFO"


def _read_int(environ: Mapping[str, str], name: str, default: int) -> int:
    raw = environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from exc
    if value < 0:
        raise ValueError(f"{name} must not be negative, got {value}")
    return value


def _read_float(environ: Mapping[str, str], name: str, default: float) -> float:
    raw = environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number, got {raw!r}") from exc
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {value}")
    return value


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    env = os.environ if environ is None else environ
    defaults = Settings()
    return Settings(
        data_folder=env.get("ALTDATA_DATA_FOLDER") or defaults.data_folder,
        max_workers=max(1, _read_int(env, "ALTDATA_MAX_WORKERS", defaults.max_workers)),
        fetch_max_retries=_read_int(env, "ALTDATA_FETCH_MAX_RETRIES", defaults.fetch_max_retries),
        request_timeout_seconds=_read_float(
            env, "ALTDATA_REQUEST_TIMEOUT_SECONDS", defaults.request_timeout_seconds
        ),
        log_level=(env.get("ALTDATA_LOG_LEVEL") or defaults.log_level).upper(),
    )
