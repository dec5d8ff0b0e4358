"""Configuration loading for licaudit (.licaudit.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

from .tokenizer import DEFAULT_QUEUE_SIZE

CONFIG_FILENAME = ".licaudit.yml"


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class SignatureConfig:
    """Which licenses to detect and any project-specific phrases."""

    enabled: Optional[List[str]] = None
    extra: Dict[str, List[str]] = field(default_factory=dict)


@dataclass
class AuditConfig:
    """Represents the settings defined in .licaudit.yml."""

    exclude_paths: List[str] = field(default_factory=list)
    workers: Optional[int] = None
    queue_size: int = DEFAULT_QUEUE_SIZE
    license_file: Optional[str] = None
    overrides: Dict[str, List[str]] = field(default_factory=dict)
    documented: Dict[str, List[str]] = field(default_factory=dict)
    signatures: SignatureConfig = field(default_factory=SignatureConfig)
    kinds: Dict[str, str] = field(default_factory=dict)


def load_config(config_path: Path) -> AuditConfig:
    """Load configuration from disk; a missing file yields defaults."""
    config_file = _resolve_config_path(config_path)
    if not config_file.exists():
        return AuditConfig()

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    workers = _as_int(data.get("workers"))
    if workers is not None and workers < 1:
        raise ConfigError("workers must be a positive integer")

    queue_size = _as_int(data.get("queue_size"))
    if queue_size is not None and queue_size < 1:
        raise ConfigError("queue_size must be a positive integer")

    signature_data = _as_dict(data.get("signatures"))
    signatures = SignatureConfig()
    if signature_data:
        if "enabled" in signature_data:
            signatures.enabled = _as_str_list(signature_data.get("enabled"))
        signatures.extra = _as_tag_map(signature_data.get("extra"), "signatures.extra")

    kinds = {
        str(suffix): str(kind)
        for suffix, kind in _as_dict(data.get("kinds")).items()
        if _as_str(kind)
    }

    return AuditConfig(
        exclude_paths=_as_str_list(data.get("exclude_paths")),
        workers=workers,
        queue_size=queue_size or DEFAULT_QUEUE_SIZE,
        license_file=_as_str(data.get("license_file")),
        overrides=_as_tag_map(data.get("overrides"), "overrides"),
        documented=_as_tag_map(data.get("documented"), "documented"),
        signatures=signatures,
        kinds=kinds,
    )


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Failed to read {path.name}: {exc}") from exc
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded or {}


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float, bool)) else None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float, bool))]
    return []


def _as_tag_map(value: Any, key: str) -> Dict[str, List[str]]:
    """Coerce ``{path: [Tag, ...]}`` mappings; a bare string counts as one tag."""
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ConfigError(f"{key} must be a mapping of paths to license lists")
    return {str(path): _as_str_list(tags) for path, tags in value.items()}


__all__ = [
    "AuditConfig",
    "CONFIG_FILENAME",
    "ConfigError",
    "SignatureConfig",
    "load_config",
]
