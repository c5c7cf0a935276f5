"""Converter settings: defaults, environment overrides and YAML files."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Mapping

import yaml

from .exceptions import ConfigError

DEFAULT_FETCH_TIMEOUT_S = 10.0
DEFAULT_USER_AGENT = "MarkDocx/0.1"

DEFAULT_CODE_FONT = "Consolas"
DEFAULT_LINK_COLOR = "0563C1"
DEFAULT_CODE_COLOR = "C7254E"
DEFAULT_CODE_SHADE = "F2F2F2"
DEFAULT_HEADER_SHADE = "D9D9D9"
DEFAULT_RULE_COLOR = "A6A6A6"
DEFAULT_CAPTION_COLOR = "808080"

DEFAULT_IMAGE_WIDTH_IN = 3.17
DEFAULT_IMAGE_HEIGHT_IN = 2.11

COLOR_FIELDS = ("link_color", "code_color", "code_shade", "header_shade", "rule_color", "caption_color")
_HEX_COLOR = re.compile(r"[0-9A-Fa-f]{6}")


@dataclass(frozen=True)
class ConverterConfig:
    fetch_timeout_s: float = DEFAULT_FETCH_TIMEOUT_S
    user_agent: str = DEFAULT_USER_AGENT
    code_font: str = DEFAULT_CODE_FONT
    link_color: str = DEFAULT_LINK_COLOR
    code_color: str = DEFAULT_CODE_COLOR
    code_shade: str = DEFAULT_CODE_SHADE
    header_shade: str = DEFAULT_HEADER_SHADE
    rule_color: str = DEFAULT_RULE_COLOR
    caption_color: str = DEFAULT_CAPTION_COLOR
    image_width_in: float = DEFAULT_IMAGE_WIDTH_IN
    image_height_in: float = DEFAULT_IMAGE_HEIGHT_IN

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "ConverterConfig":
        source: Mapping[str, str] = os.environ if environ is None else environ
        overrides: dict[str, Any] = {}

        timeout = source.get("MARKDOCX_FETCH_TIMEOUT_S", "").strip()
        if timeout:
            try:
                overrides["fetch_timeout_s"] = float(timeout)
            except ValueError as exc:
                raise ConfigError(f"MARKDOCX_FETCH_TIMEOUT_S must be a number, got {timeout!r}") from exc

        user_agent = source.get("MARKDOCX_USER_AGENT", "").strip()
        if user_agent:
            overrides["user_agent"] = user_agent

        return _validated(cls(**overrides))

    def with_overrides(self, data: Mapping[str, Any]) -> "ConverterConfig":
        known = {f.name for f in fields(self)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(f"Unknown configuration keys: {', '.join(unknown)}")
        values: dict[str, Any] = {}
        for key, value in data.items():
            current = getattr(self, key)
            if isinstance(current, float):
                try:
                    values[key] = float(value)
                except (TypeError, ValueError) as exc:
                    raise ConfigError(f"{key} must be a number, got {value!r}") from exc
            elif key in COLOR_FIELDS:
                if not isinstance(value, str):
                    raise ConfigError(f"{key} must be a quoted hex colour such as \"0563C1\", got {value!r}")
                values[key] = value.strip()
            else:
                values[key] = str(value)
        return _validated(replace(self, **values))


def load_config(path: str | Path | None = None, environ: Mapping[str, str] | None = None) -> ConverterConfig:
    """Build settings from the environment, then apply an optional YAML file."""
    config = ConverterConfig.from_env(environ)
    if path is None:
        return config
    config_path = Path(path).expanduser()
    try:
        text = config_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Cannot read config file {config_path}: {exc}") from exc
    try:
        data = yaml.safe_load(text) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {config_path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError("Config root must be a mapping of setting names to values.")
    return config.with_overrides(data)


def _validated(config: ConverterConfig) -> ConverterConfig:
    if config.fetch_timeout_s <= 0:
        raise ConfigError("fetch_timeout_s must be positive")
    if config.image_width_in <= 0 or config.image_height_in <= 0:
        raise ConfigError("image extent must be positive")
    for name in COLOR_FIELDS:
        value = getattr(config, name)
        if not _HEX_COLOR.fullmatch(value):
            raise ConfigError(f"{name} must be six hex digits (RRGGBB), got {value!r}")
    return config
