"""
Config system - layered typed configuration for connections.

Sources, later overriding earlier:
1. Config files (JSON or YAML)
2. ``.env`` file
3. Environment variables (``THINORM_*``)
4. Manual overrides

Usage:
    config = ConfigLoader.load(paths=["thinorm.yaml"]).connection_config()
    conn = await connect(config.url, **config.connect_kwargs())
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field, fields, MISSING
from glob import glob
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, get_origin, get_type_hints

from dotenv import dotenv_values

from .faults import ConfigFault

__all__ = ["ConnectionConfig", "ConfigLoader"]


@dataclass
class ConnectionConfig:
    """Everything ``connect`` needs besides the record types."""

    url: str = "sqlite:///:memory:"
    connect_retries: int = 1
    connect_retry_delay: float = 0.5
    log_sql: bool = True
    options: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if self.connect_retries < 1:
            raise ConfigFault(key="connect_retries", reason="must be at least 1")
        if self.connect_retry_delay < 0:
            raise ConfigFault(key="connect_retry_delay", reason="must not be negative")

    def connect_kwargs(self) -> Dict[str, Any]:
        return {
            "connect_retries": self.connect_retries,
            "connect_retry_delay": self.connect_retry_delay,
            "log_sql": self.log_sql,
            **self.options,
        }


class ConfigLoader:
    """
    Merges every configuration source into one nested dict, then validates
    it into a ``ConnectionConfig``.

    Precedence (highest first): overrides, environment, ``.env`` file,
    config files, dataclass defaults.
    """

    def __init__(self, env_prefix: str = "THINORM_"):
        self.env_prefix = env_prefix
        self.config_data: Dict[str, Any] = {}

    @classmethod
    def load(
        cls,
        paths: Optional[list[str]] = None,
        env_prefix: str = "THINORM_",
        env_file: Optional[str] = None,
        overrides: Optional[Dict[str, Any]] = None,
    ) -> "ConfigLoader":
        """
        Args:
            paths: Config file paths or glob patterns (``.json``, ``.yaml``, ``.yml``)
            env_prefix: Only variables starting with this prefix are read
            env_file: Optional ``.env`` file; silently skipped when absent
            overrides: Applied last
        """
        loader = cls(env_prefix=env_prefix)
        for pattern in paths or []:
            for match in sorted(glob(pattern)):
                loader._merge_dict(loader.config_data, loader._read_file(Path(match)))
        if env_file and Path(env_file).exists():
            loader._apply_variables(dotenv_values(env_file))
        loader._apply_variables(os.environ)
        if overrides:
            loader._merge_dict(loader.config_data, overrides)
        return loader

    # ── Sources ──────────────────────────────────────────────────────

    def _read_file(self, path: Path) -> Dict[str, Any]:
        suffix = path.suffix.lower()
        if suffix not in (".json", ".yaml", ".yml"):
            return {}
        text = path.read_text(encoding="utf-8")
        if suffix == ".json":
            try:
                data = json.loads(text)
            except json.JSONDecodeError as exc:
                raise ConfigFault(key=str(path), reason=str(exc)) from exc
        else:
            import yaml
            try:
                data = yaml.safe_load(text)
            except yaml.YAMLError as exc:
                raise ConfigFault(key=str(path), reason=str(exc)) from exc
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigFault(key=str(path), reason="top level must be a mapping")
        return data

    def _apply_variables(self, variables: Mapping[str, Optional[str]]) -> None:
        """``THINORM_OPTIONS__TIMEOUT=5`` -> ``{"options": {"timeout": 5}}``."""
        for name, raw in variables.items():
            if raw is None or not name.startswith(self.env_prefix):
                continue
            *parents, leaf = name[len(self.env_prefix):].lower().split("__")
            node = self.config_data
            for part in parents:
                child = node.get(part)
                if not isinstance(child, dict):
                    child = node[part] = {}
                node = child
            node[leaf] = self._parse_value(raw)

    def _parse_value(self, value: str) -> Any:
        """Best-effort scalar parsing for environment strings."""
        lowered = value.strip().lower()
        if lowered in ("true", "yes"):
            return True
        if lowered in ("false", "no"):
            return False
        try:
            return int(value)
        except ValueError:
            pass
        if "." in value:
            try:
                return float(value)
            except ValueError:
                pass
        if value[:1] in ("{", "["):
            try:
                return json.loads(value)
            except json.JSONDecodeError:
                return value
        return value

    def _merge_dict(self, target: dict, source: dict) -> None:
        """Recursive in-place merge; nested dicts merge, anything else replaces."""
        for key, value in source.items():
            existing = target.get(key)
            if isinstance(existing, dict) and isinstance(value, dict):
                self._merge_dict(existing, value)
            else:
                target[key] = value

    # ── Access ───────────────────────────────────────────────────────

    def get(self, path: str, default: Any = None) -> Any:
        """Value at a dotted path such as ``"options.charset"``."""
        node: Any = self.config_data
        for part in path.split("."):
            if not isinstance(node, dict) or part not in node:
                return default
            node = node[part]
        return node

    def connection_config(self) -> ConnectionConfig:
        """Validate the merged data into a ``ConnectionConfig``."""
        return self._instantiate_dataclass(ConnectionConfig, self.config_data)

    def _instantiate_dataclass(self, config_class: type, data: dict):
        """Type-check known keys, ignore unknown ones, build the dataclass."""
        hints = get_type_hints(config_class)
        kwargs: Dict[str, Any] = {}
        for info in fields(config_class):
            if info.name not in data:
                if info.default is MISSING and info.default_factory is MISSING:
                    raise ConfigFault(key=info.name, reason="required config field not provided")
                continue
            expected = hints.get(info.name, Any)
            value = data[info.name]
            if expected is float and type(value) is int:
                value = float(value)
            if not self._check_type(value, expected):
                raise ConfigFault(
                    key=info.name,
                    reason=f"expected {getattr(expected, '__name__', expected)}, got {type(value).__name__}",
                )
            kwargs[info.name] = value
        return config_class(**kwargs)

    def _check_type(self, value: Any, expected_type: Any) -> bool:
        if expected_type is Any:
            return True
        origin = get_origin(expected_type)
        if origin is not None:
            return isinstance(value, origin)
        # bool is an int subclass but never a valid count
        if expected_type is int and isinstance(value, bool):
            return False
        return isinstance(value, expected_type)

    def to_dict(self) -> dict:
        return self.config_data.copy()
