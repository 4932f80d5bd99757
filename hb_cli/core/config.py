"""Configuration loading and persistence."""

from __future__ import annotations

import copy
import json
import os
from pathlib import Path
from typing import Any, Dict, Optional

try:  # Python 3.11+
    import tomllib  # type: ignore[attr-defined]
except ModuleNotFoundError:  # Python 3.9-3.10
    import tomli as tomllib  # type: ignore[no-redef]

from hb_cli.core.constants import (
    API_BASE,
    LOW_CONFIDENCE_THRESHOLD,
    REPORT_FILENAME,
    TWILIO_WEBHOOK_URL,
)


class ConfigError(RuntimeError):
    """Raised when config file parsing fails."""


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def expand_path(path_str: str) -> Path:
    """Expand user/env vars and return absolute path."""
    return Path(os.path.expandvars(path_str)).expanduser().resolve()


def default_data_dir() -> Path:
    """Resolve XDG-style data directory with env override."""
    raw = os.getenv("HB_DATA_DIR", "~/.local/share/hb")
    return expand_path(raw)


def default_config_path() -> Path:
    """Get default config file path."""
    raw = os.getenv("HB_CONFIG_FILE", "~/.config/hb/config.toml")
    return expand_path(raw)


def _default_config() -> Dict[str, Any]:
    data_dir = default_data_dir()
    return {
        "auth": {
            "session_store": str(data_dir / "session.json"),
            "remote_login": False,
        },
        "api": {
            "base_url": API_BASE,
            "rate_limit_delay": 0.0,
            "max_retries": 3,
            "timeout_seconds": 30,
        },
        "classification": {
            "extra_exercise_keywords": [],
            "extra_food_keywords": [],
            "low_confidence_threshold": LOW_CONFIDENCE_THRESHOLD,
        },
        "storage": {
            "log_store": str(data_dir / "health_log.jsonl"),
            "template_store": str(data_dir / "templates.json"),
            "twilio_store": str(data_dir / "twilio.json"),
        },
        "twilio": {
            "webhook_url": TWILIO_WEBHOOK_URL,
            "auto_reply": True,
        },
        "report": {
            "default_directory": "./reports",
            "filename": REPORT_FILENAME,
            "include_raw_messages": True,
        },
    }


def _read_config(path: Path) -> Dict[str, Any]:
    suffix = path.suffix.lower()
    text = path.read_text()
    try:
        if suffix in {".toml", ""}:
            loaded = tomllib.loads(text)
        else:
            loaded = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Invalid JSON in config file {path}: {exc}") from exc
    except Exception as exc:
        if suffix in {".toml", ""}:
            raise ConfigError(f"Invalid TOML in config file {path}: {exc}") from exc
        raise ConfigError(f"Failed to parse config file {path}: {exc}") from exc

    if not isinstance(loaded, dict):
        raise ConfigError(f"Config file {path} must contain an object/table at the root")
    return loaded


def load_config(path: Optional[Path] = None) -> Dict[str, Any]:
    """Load configuration from disk, merged with defaults."""
    cfg_path = path or default_config_path()
    cfg = _default_config()

    if cfg_path.exists():
        cfg = _deep_merge(cfg, _read_config(cfg_path))

    return cfg


def _toml_literal(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, str):
        escaped = value.replace("\\", "\\\\").replace('"', '\\"')
        return f'"{escaped}"'
    if isinstance(value, list):
        items = ", ".join(_toml_literal(item) for item in value if item is not None)
        return f"[{items}]"
    raise TypeError(f"Unsupported TOML value type: {type(value)!r}")


def _dict_to_toml(data: Dict[str, Any], prefix: Optional[str] = None) -> str:
    lines = []
    plain_keys = []
    nested_keys = []

    for key, value in data.items():
        if value is None:
            continue
        if isinstance(value, dict):
            nested_keys.append((key, value))
        else:
            plain_keys.append((key, value))

    if prefix is not None:
        lines.append(f"[{prefix}]")

    for key, value in plain_keys:
        lines.append(f"{key} = {_toml_literal(value)}")

    if plain_keys and nested_keys:
        lines.append("")

    for index, (key, value) in enumerate(nested_keys):
        table_name = key if prefix is None else f"{prefix}.{key}"
        lines.append(_dict_to_toml(value, prefix=table_name))
        if index != len(nested_keys) - 1:
            lines.append("")

    return "\n".join(lines)


def save_config(config: Dict[str, Any], path: Optional[Path] = None) -> Path:
    """Save configuration to disk as TOML (default) or JSON."""
    cfg_path = path or default_config_path()
    cfg_path.parent.mkdir(parents=True, exist_ok=True)

    if cfg_path.suffix.lower() == ".json":
        cfg_path.write_text(json.dumps(config, indent=2) + "\n")
        return cfg_path

    cfg_path.write_text(_dict_to_toml(config).strip() + "\n")
    return cfg_path


def _resolve_store(config: Dict[str, Any], env_var: str, section: str, key: str, filename: str) -> Path:
    raw = os.getenv(env_var) or config.get(section, {}).get(key)
    if not raw:
        raw = str(default_data_dir() / filename)
    return expand_path(raw)


def resolve_session_store(config: Dict[str, Any]) -> Path:
    """Resolve session file path from env/config."""
    return _resolve_store(config, "HB_SESSION_STORE", "auth", "session_store", "session.json")


def resolve_log_store(config: Dict[str, Any]) -> Path:
    """Resolve health log file path from env/config."""
    return _resolve_store(config, "HB_LOG_STORE", "storage", "log_store", "health_log.jsonl")


def resolve_template_store(config: Dict[str, Any]) -> Path:
    """Resolve template file path from env/config."""
    return _resolve_store(config, "HB_TEMPLATE_STORE", "storage", "template_store", "templates.json")


def resolve_twilio_store(config: Dict[str, Any]) -> Path:
    """Resolve Twilio account file path from env/config."""
    return _resolve_store(config, "HB_TWILIO_STORE", "storage", "twilio_store", "twilio.json")


def resolve_api_base(config: Dict[str, Any]) -> str:
    return os.getenv("HB_API_BASE_URL") or str(config.get("api", {}).get("base_url") or API_BASE)


def resolve_output_dir(config: Dict[str, Any], explicit: Optional[Path] = None) -> Path:
    """Resolve report directory with CLI override first."""
    if explicit is not None:
        return explicit.expanduser().resolve()
    raw = os.getenv("HB_OUTPUT_DIR") or config.get("report", {}).get(
        "default_directory",
        "./reports",
    )
    return expand_path(raw)


def low_confidence_threshold(config: Dict[str, Any]) -> float:
    raw = config.get("classification", {}).get("low_confidence_threshold", LOW_CONFIDENCE_THRESHOLD)
    try:
        return float(raw)
    except (TypeError, ValueError):
        return LOW_CONFIDENCE_THRESHOLD
