"""Compiler configuration.

Values are merged from several sources, later ones overriding earlier:

    defaults
       |
       +---> configuration file (TOML, JSON, YAML)
       |
       +---> environment variables (LINGOBUNDLE_<FIELD>)
       |
       +---> explicit keyword overrides
       v
    CompilerConfig

Usage:
    >>> config = CompilerConfig.load("pyproject.toml", strict_duplicates=True)
    >>> config.output_dir
    PosixPath('build')

In ``pyproject.toml`` the settings live under ``[tool.lingobundle]``.
"""

from __future__ import annotations

import json
import logging
import os
import tomllib
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any

import yaml

from lingobundle.exceptions import ConfigError

logger = logging.getLogger(__name__)

ENV_PREFIX = "LINGOBUNDLE_"
DEFAULT_BASE = "lingobundle.bundle.CompiledBundle"

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
_TRUE = ("true", "yes", "1", "on")
_FALSE = ("false", "no", "0", "off")


@dataclass(frozen=True)
class CompilerConfig:
    """Settings shared by the compiler, the emitter and the CLI.

    Attributes:
        base: Dotted path of the bundle class generated bundles extend.
        output_dir: Root directory for emitted bundle modules.
        include_fuzzy: Compile fuzzy translations; if False they become
            untranslated.
        strict_duplicates: Raise on duplicate composite keys instead of
            letting the later entry win.
        max_expression_length: Longest accepted plural expression.
        max_nesting_depth: Deepest accepted plural-expression nesting, counting
            both parentheses and operator nesting in the parsed tree.
        log_level: Level for the ``lingobundle`` logger in the CLI.
    """

    base: str = DEFAULT_BASE
    output_dir: Path = field(default_factory=lambda: Path("build"))
    include_fuzzy: bool = True
    strict_duplicates: bool = False
    max_expression_length: int = 1000
    max_nesting_depth: int = 64
    log_level: str = "WARNING"

    def __post_init__(self) -> None:
        object.__setattr__(self, "output_dir", Path(self.output_dir))
        object.__setattr__(self, "log_level", str(self.log_level).upper())
        errors = self.validate()
        if errors:
            raise ConfigError(f"Configuration validation failed: {', '.join(errors)}")

    def validate(self) -> list[str]:
        """Return a list of validation errors (empty if valid)."""
        errors = []
        if not self.base or any(not part.isidentifier() for part in self.base.split(".")):
            errors.append(f"base must be a dotted class path, got {self.base!r}")
        if self.max_expression_length < 1:
            errors.append("max_expression_length must be positive")
        if self.max_nesting_depth < 1:
            errors.append("max_nesting_depth must be positive")
        if self.log_level not in _LOG_LEVELS:
            errors.append(f"log_level must be one of {', '.join(_LOG_LEVELS)}")
        return errors

    def with_overrides(self, **overrides: Any) -> "CompilerConfig":
        """Return a copy with the given (non-None) values replaced."""
        values = _coerce({k: v for k, v in overrides.items() if v is not None})
        return replace(self, **values)

    def to_dict(self) -> dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}

    @classmethod
    def from_file(cls, path: str | Path) -> "CompilerConfig":
        """Load settings from a file."""
        return cls(**_coerce(load_config_file(path)))

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> "CompilerConfig":
        """Load settings from ``LINGOBUNDLE_*`` environment variables."""
        return cls(**_coerce(env_values(environ)))

    @classmethod
    def load(
        cls,
        path: str | Path | None = None,
        environ: dict[str, str] | None = None,
        **overrides: Any,
    ) -> "CompilerConfig":
        """Merge defaults, file, environment and overrides.

        Raises:
            ConfigError: On unreadable files, unknown keys or invalid values.
        """
        values: dict[str, Any] = {}
        if path is not None:
            values.update(load_config_file(path))
        values.update(env_values(environ))
        values.update({k: v for k, v in overrides.items() if v is not None})
        config = cls(**_coerce(values))
        logger.debug("Loaded compiler configuration: %s", config)
        return config


# =============================================================================
# Sources
# =============================================================================


def load_config_file(path: str | Path) -> dict[str, Any]:
    """Read raw settings from a TOML, JSON or YAML file.

    For ``pyproject.toml`` only the ``[tool.lingobundle]`` table is used.

    Raises:
        ConfigError: If the file is missing, unparsable or not a mapping.
    """
    path = Path(path)
    if not path.exists():
        raise ConfigError(f"Configuration file not found: {path}")

    suffix = path.suffix.lower()
    try:
        content = path.read_text(encoding="utf-8")
        if suffix == ".toml":
            data = tomllib.loads(content)
            if path.name == "pyproject.toml" or "tool" in data:
                data = data.get("tool", {}).get("lingobundle", {})
        elif suffix == ".json":
            data = json.loads(content)
        elif suffix in (".yaml", ".yml"):
            data = yaml.safe_load(content) or {}
        else:
            raise ConfigError(f"Unsupported configuration format: {suffix}")
    except ConfigError:
        raise
    except (OSError, ValueError, yaml.YAMLError) as e:
        raise ConfigError(f"Failed to load configuration from {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Configuration in {path} must be a mapping")
    if "lingobundle" in data and isinstance(data["lingobundle"], dict):
        data = data["lingobundle"]
    return {key.replace("-", "_"): value for key, value in data.items()}


def env_values(environ: dict[str, str] | None = None) -> dict[str, Any]:
    """Collect ``LINGOBUNDLE_<FIELD>`` variables as raw settings."""
    environ = os.environ if environ is None else environ
    known = {f.name for f in fields(CompilerConfig)}
    values: dict[str, Any] = {}
    for key, value in environ.items():
        if not key.startswith(ENV_PREFIX):
            continue
        name = key[len(ENV_PREFIX):].lower()
        if name in known:
            values[name] = value
    return values


def _coerce(values: dict[str, Any]) -> dict[str, Any]:
    """Convert raw values to the field types of CompilerConfig."""
    types = {f.name: f.type for f in fields(CompilerConfig)}
    result: dict[str, Any] = {}
    for name, value in values.items():
        if name not in types:
            raise ConfigError(f"Unknown configuration key: {name!r}")
        kind = types[name]
        if kind == "bool":
            result[name] = _parse_bool(name, value)
        elif kind == "int":
            try:
                result[name] = int(value)
            except (TypeError, ValueError):
                raise ConfigError(f"{name} must be an integer, got {value!r}") from None
        elif kind == "Path":
            result[name] = Path(value)
        else:
            result[name] = str(value)
    return result


def _parse_bool(name: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    raise ConfigError(f"{name} must be a boolean, got {value!r}")
