"""YAML configuration loader with env var resolution and Pydantic validation.

Loads config from (priority order):
1. BIZADVISOR_CONFIG_PATH (explicit path)
2. ./bizadvisor.yaml (working directory)
3. ~/.bizadvisor/config.yaml (user home)

Environment variables override YAML: BIZADVISOR_<SECTION>_<KEY>, then
the well-known OPENROUTER_* variables.
${VAR} references in YAML values resolve from environment at load time.
"""

import logging
import os
import re
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field

from src.utils.paths import get_config_dir

logger = logging.getLogger(__name__)

_ENV_VAR_PATTERN = re.compile(r"\$\{([^}]+)\}")

# Well-known variable -> (section, field)
_OPENROUTER_ENV: dict[str, tuple[str, str]] = {
    "OPENROUTER_API_KEY": ("advisor", "api_key"),
    "OPENROUTER_MODEL": ("advisor", "model"),
    "OPENROUTER_HTTP_REFERER": ("advisor", "http_referer"),
    "OPENROUTER_APP_TITLE": ("advisor", "app_title"),
}


def resolve_env_vars(value: str) -> str:
    """Resolve ${VAR} references in a string from environment variables.

    Args:
        value: String potentially containing ${VAR} references.

    Returns:
        String with all ${VAR} references replaced by their env values.
        Missing env vars resolve to empty string.
    """
    def _replace(match: re.Match) -> str:
        return os.environ.get(match.group(1), "")

    return _ENV_VAR_PATTERN.sub(_replace, value)


def _resolve_env_vars_recursive(data: Any) -> Any:
    """Recursively resolve ${VAR} references in a nested data structure."""
    if isinstance(data, str):
        return resolve_env_vars(data)
    elif isinstance(data, dict):
        return {k: _resolve_env_vars_recursive(v) for k, v in data.items()}
    elif isinstance(data, list):
        return [_resolve_env_vars_recursive(item) for item in data]
    return data


class AdvisorConfig(BaseModel):
    """Settings for the OpenAI-compatible completion endpoint."""

    api_key: str | None = None
    model: str = "openrouter/auto"
    base_url: str = "https://openrouter.ai/api/v1"
    timeout_seconds: float = Field(default=60.0, gt=0)
    http_referer: str | None = None
    app_title: str | None = None


class AttachmentConfig(BaseModel):
    """Settings for generated file attachments."""

    inline_max_bytes: int = Field(default=1024 * 1024, ge=0)


class AppConfig(BaseModel):
    """Top-level configuration for the BizAdvisor backend."""

    advisor: AdvisorConfig = AdvisorConfig()
    attachments: AttachmentConfig = AttachmentConfig()


def _find_config_file() -> Path | None:
    """Search for config file in standard locations.

    Returns:
        Path to config file if found, None otherwise.
    """
    candidates = [
        Path.cwd() / "bizadvisor.yaml",
        Path.cwd() / "bizadvisor.yml",
        get_config_dir() / "config.yaml",
        get_config_dir() / "config.yml",
    ]
    for candidate in candidates:
        if candidate.exists():
            return candidate
    return None


def _apply_env_overrides(data: dict[str, Any]) -> dict[str, Any]:
    """Apply BIZADVISOR_<SECTION>_<KEY> and OPENROUTER_* overrides.

    Args:
        data: Parsed YAML config dict.

    Returns:
        Config dict with env var overrides applied.
    """
    prefix = "BIZADVISOR_"
    known_sections = sorted(AppConfig.model_fields.keys(), key=len, reverse=True)
    for key, value in os.environ.items():
        if not key.startswith(prefix):
            continue
        suffix = key[len(prefix):].lower()  # e.g. "advisor_timeout_seconds"
        matched_section = None
        matched_field = None
        for section in known_sections:
            section_prefix = section + "_"
            if suffix.startswith(section_prefix):
                matched_section = section
                matched_field = suffix[len(section_prefix):]
                break
        if matched_section is None or not matched_field:
            continue
        section_data = data.setdefault(matched_section, {})
        if isinstance(section_data, dict):
            section_data[matched_field] = value

    for env_name, (section, field_name) in _OPENROUTER_ENV.items():
        value = os.environ.get(env_name, "").strip()
        if value:
            section_data = data.setdefault(section, {})
            if isinstance(section_data, dict):
                section_data[field_name] = value
    return data


def load_config(config_path: str | None = None) -> AppConfig:
    """Load BizAdvisor configuration from YAML file with env var resolution.

    Args:
        config_path: Explicit path to config file. If None, uses
            BIZADVISOR_CONFIG_PATH or searches standard locations.

    Returns:
        Parsed and validated AppConfig. Defaults apply when no file exists.

    Raises:
        FileNotFoundError: If an explicit path does not exist.
    """
    config_path = config_path or os.environ.get("BIZADVISOR_CONFIG_PATH") or None
    raw_data: dict[str, Any] = {}
    if config_path:
        path: Path | None = Path(config_path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")
    else:
        path = _find_config_file()

    if path is not None:
        logger.info("Loading config from %s", path)
        with open(path) as f:
            raw_data = yaml.safe_load(f) or {}

    data = _resolve_env_vars_recursive(raw_data)
    data = _apply_env_overrides(data)
    # Pydantic coerces string env values to the declared field types
    return AppConfig(**data)


@lru_cache(maxsize=1)
def get_config() -> AppConfig:
    """Return the process-wide configuration, loaded once."""
    return load_config()
