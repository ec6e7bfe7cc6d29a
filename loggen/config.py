"""Configuration: frozen dataclass built from defaults <- YAML file <- env vars <- CLI args."""

import logging
import os
from dataclasses import dataclass, fields

import psutil
import yaml

from loggen.strategy import WrapStrategy

logger = logging.getLogger(__name__)

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

ENV_VARS = {
    "in_base_dir": "LOGGEN_IN_BASE_DIR",
    "out_base_dir": "LOGGEN_OUT_BASE_DIR",
    "interval_ms": "LOGGEN_INTERVAL_MS",
    "parallelism": "LOGGEN_PARALLELISM",
    "strategy": "LOGGEN_STRATEGY",
    "sort_paths": "LOGGEN_SORT_PATHS",
    "log_level": "LOGGEN_LOG_LEVEL",
}


def _parse_bool(value) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("true", "1", "yes")


@dataclass(frozen=True)
class Config:
    in_base_dir: str | None = None
    out_base_dir: str | None = None
    interval_ms: int = 250
    parallelism: int = 0  # 0 = one worker per CPU
    strategy: str = "append"
    sort_paths: bool = True
    log_level: str = "INFO"

    @property
    def interval_seconds(self) -> float:
        return self.interval_ms / 1000.0

    @property
    def wrap_strategy(self) -> WrapStrategy:
        return WrapStrategy.parse(self.strategy)


_CASTS = {
    "in_base_dir": str,
    "out_base_dir": str,
    "interval_ms": int,
    "parallelism": int,
    "strategy": lambda v: str(v).strip().lower(),
    "sort_paths": _parse_bool,
    "log_level": lambda v: str(v).strip().upper(),
}


def load_yaml_config(path: str | None) -> dict:
    """Load settings from a YAML file. Returns empty dict if no path or file missing."""
    if not path:
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except FileNotFoundError:
        logger.warning("Config file %s not found, using defaults", path)
        return {}
    except yaml.YAMLError as e:
        raise ValueError(f"Config file {path} is not valid YAML: {e}") from e
    if not isinstance(data, dict):
        raise ValueError(f"Config file {path} must contain a mapping, got {type(data).__name__}")
    logger.info("Loaded YAML config from %s", path)
    return data


def load_config(cli_args=None, yaml_data: dict | None = None, environ=None) -> Config:
    """Build Config from defaults <- YAML data <- env vars <- CLI args (highest priority).

    cli_args is an argparse namespace; attributes left as None don't override.
    """
    environ = os.environ if environ is None else environ
    known = {f.name for f in fields(Config)}
    kwargs: dict = {}

    for key, value in (yaml_data or {}).items():
        key = str(key).replace("-", "_")
        if key not in known:
            logger.warning("Ignoring unknown config key '%s'", key)
            continue
        if value is not None:
            kwargs[key] = _CASTS[key](value)

    for key, env_name in ENV_VARS.items():
        raw = environ.get(env_name)
        if raw is not None and raw.strip():
            kwargs[key] = _CASTS[key](raw)

    if cli_args is not None:
        for key in known:
            value = getattr(cli_args, key, None)
            if value is not None:
                kwargs[key] = _CASTS[key](value)

    return Config(**kwargs)


def validate(config: Config) -> None:
    """Raise ValueError describing the first problem found."""
    if not config.in_base_dir:
        raise ValueError("Input base directory is required (--in-base-dir)")
    if not config.out_base_dir:
        raise ValueError("Output base directory is required (--out-base-dir)")
    if not os.path.isdir(config.in_base_dir):
        raise ValueError(f"Input base directory {config.in_base_dir} does not exist")
    if os.path.abspath(config.in_base_dir) == os.path.abspath(config.out_base_dir):
        raise ValueError("Input and output base directories must differ")
    if config.interval_ms < 0:
        raise ValueError(f"{config.interval_ms} isn't a positive number (interval)")
    if config.parallelism < 0:
        raise ValueError(f"{config.parallelism} isn't a positive number (parallelism)")
    if config.log_level not in LOG_LEVELS:
        raise ValueError(f"Unknown log level '{config.log_level}'")
    WrapStrategy.parse(config.strategy)


def resolve_parallelism(config: Config) -> int:
    """Worker count to use; 0 means one per logical CPU."""
    if config.parallelism > 0:
        return config.parallelism
    return psutil.cpu_count() or 1
