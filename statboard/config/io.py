from __future__ import annotations

import json
import logging

from pathlib import Path
from typing import Dict, List, Tuple

import pandas as pd

from statboard.config.model import GlobalConfig, SourceConfig
from statboard.core.data_source import DataFrameSource
from statboard.core.exceptions import ConfigError

logger = logging.getLogger(__name__)


def load_global_config(root: Path) -> GlobalConfig:
    """
    Load configuration from a directory.

    Expected structure:

        root/
            global.json
            sources/
                posts.json
                ...

    global.json keys:

    - ui_title: title for UI, defaults to 'Statboard'
    - default_filters: raw filter values the dashboard starts with (same shape as the form)
    - data_root: directory CSV paths are resolved against. Relative paths are
                 resolved relative to 'root'; defaults to 'root'.
    - dev_mode: make widget programming errors fatal instead of logged
    - port: preferred port for app.py (PORT env var wins), defaults to 8050
    - max_page_sessions: open page sessions kept before the oldest is closed

    :param root: Directory containing 'global.json' and optionally 'sources/'.
    :return: A GlobalConfig instance.
    :raises FileNotFoundError: if global.json does not exist.
    :raises ConfigError: if a file is not valid JSON or has the wrong shape.
    """
    root = Path(root)
    logger.info("Loading global config", extra={"config_root": str(root)})

    global_path = root / "global.json"
    if not global_path.is_file():
        raise FileNotFoundError(f"File not found at {global_path}")

    raw_global = _read_json(global_path)
    if not isinstance(raw_global, dict):
        raise ConfigError(f"{global_path} must contain a JSON object")

    sources: List[SourceConfig] = []
    sources_dir = root / "sources"
    if sources_dir.is_dir():
        for idx, config_file in enumerate(sorted(sources_dir.glob("*.json"))):
            raw = _read_json(config_file)
            if not isinstance(raw, dict) or "file" not in raw:
                raise ConfigError(f"{config_file} must be an object with a 'file' key")
            sources.append(SourceConfig.from_raw(raw, source_path=config_file, index=idx))

    names = [s.name for s in sources]
    if len(names) != len(set(names)):
        raise ConfigError(f"Duplicate source names in {sources_dir}: {names}")

    default_filters = raw_global.get("default_filters") or {}
    if not isinstance(default_filters, dict):
        raise ConfigError("default_filters must be an object")

    data_root_raw = raw_global.get("data_root")
    if data_root_raw is None:
        data_root = root.resolve()
    else:
        data_root_path = Path(data_root_raw)
        data_root = data_root_path if data_root_path.is_absolute() else (root / data_root_path).resolve()

    return GlobalConfig(
        ui_title=raw_global.get("ui_title", "Statboard"),
        sources=sources,
        default_filters=default_filters,
        data_root=data_root,
        dev_mode=bool(raw_global.get("dev_mode", False)),
        port=_as_int(raw_global.get("port", 8050), "port"),
        max_page_sessions=_as_int(raw_global.get("max_page_sessions", 64), "max_page_sessions"),
    )


def load_sources(global_config: GlobalConfig) -> Dict[str, pd.DataFrame]:
    """
    Read every configured CSV into a DataFrame keyed by source name.

    Date columns are parsed up-front; the status column is coerced to bool so
    '1'/'0', 'true'/'false' in the CSV all filter the same way.
    """
    frames: Dict[str, pd.DataFrame] = {}
    for cfg in global_config.sources:
        path = cfg.file if cfg.file.is_absolute() else (global_config.data_root or Path(".")) / cfg.file
        if not path.is_file():
            raise ConfigError(f"Source '{cfg.name}': file not found at {path}")

        df = pd.read_csv(path)
        for col in cfg.parse_dates:
            if col not in df.columns:
                raise ConfigError(f"Source '{cfg.name}': missing date column '{col}'")
            df[col] = pd.to_datetime(df[col])

        if cfg.status_field in df.columns:
            df[cfg.status_field] = df[cfg.status_field].map(_as_bool)

        frames[cfg.name] = df

    logger.info(
        "Sources loaded from config",
        extra={"n_sources": len(frames), "source_names": sorted(frames), "rows": {k: len(v) for k, v in frames.items()}},
    )
    return frames


def load_data_source(root: Path) -> Tuple[GlobalConfig, DataFrameSource]:
    """
    Main entrypoint used by the app: config + a ready DataFrameSource.
    """
    global_config = load_global_config(root)
    return global_config, DataFrameSource(load_sources(global_config))


def _read_json(path: Path):
    try:
        with path.open() as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON in {path}: {e}") from e


def _as_bool(value) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("1", "true", "yes", "y")


def _as_int(value, key: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"{key} must be an integer, got {value!r}") from e
