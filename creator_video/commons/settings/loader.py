"""Settings loader with layered configuration support."""

import json
import os
from pathlib import Path
from typing import Any

from creator_video.commons.settings.models import Settings


class SettingsLoader:
    """Loads and merges configuration from multiple sources.

    Configuration precedence (highest to lowest):
    1. Environment variables (CREATOR_VIDEO__SECTION__KEY)
    2. Environment-specific config (appsettings.{env}.json)
    3. Base config (appsettings.json)
    """

    ENV_PREFIX = "CREATOR_VIDEO__"
    CONFIG_DIR_VAR = "CREATOR_VIDEO_CONFIG_DIR"

    def __init__(
        self,
        config_dir: Path | None = None,
        environment: str | None = None,
    ) -> None:
        """Initialize the settings loader.

        Args:
            config_dir: Directory containing configuration files. Defaults to
                $CREATOR_VIDEO_CONFIG_DIR, then 'config' in the working directory.
            environment: Environment name (dev, staging, prod). Defaults to
                CREATOR_VIDEO__APP__ENVIRONMENT or 'dev'.
        """
        self.config_dir = config_dir or Path(os.getenv(self.CONFIG_DIR_VAR, "config"))
        self.environment = environment or os.getenv(
            f"{self.ENV_PREFIX}APP__ENVIRONMENT", "dev"
        )

    def load(self) -> Settings:
        """Load settings with proper precedence.

        Returns:
            Fully resolved Settings instance.
        """
        config = self._read_json("appsettings.json")
        config = _deep_merge(config, self._read_json(f"appsettings.{self.environment}.json"))
        config = _deep_merge(config, self._env_overrides())
        return Settings(**config)

    def _env_overrides(self) -> dict[str, Any]:
        """Collect prefixed environment variables as a nested dict.

        CREATOR_VIDEO__WEBHOOK__SECRET=abc becomes {"webhook": {"secret": "abc"}}.
        Scalars stay strings so pydantic applies the field type; only JSON
        arrays and objects are decoded here.
        """
        result: dict[str, Any] = {}

        for key, value in os.environ.items():
            if not key.startswith(self.ENV_PREFIX):
                continue

            path = key[len(self.ENV_PREFIX) :].lower().split("__")
            node = result
            for part in path[:-1]:
                node = node.setdefault(part, {})
            node[path[-1]] = _decode_structured(value)

        return result

    def _read_json(self, filename: str) -> dict[str, Any]:
        """Read a JSON config file, or return an empty dict when it is absent."""
        path = self.config_dir / filename
        if not path.exists():
            return {}
        with path.open(encoding="utf-8") as f:
            return dict(json.load(f))


def _decode_structured(value: str) -> Any:
    if value.startswith(("[", "{")):
        try:
            return json.loads(value)
        except json.JSONDecodeError:
            return value
    return value


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge ``override`` into a copy of ``base``."""
    merged = base.copy()
    for key, value in override.items():
        if isinstance(merged.get(key), dict) and isinstance(value, dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


class _SettingsHolder:
    """Holder for the process settings to avoid global statements."""

    instance: Settings | None = None


def get_settings(
    config_dir: Path | None = None,
    environment: str | None = None,
    *,
    reload: bool = False,
) -> Settings:
    """Get or create the process-wide settings instance.

    Args:
        config_dir: Optional config directory override.
        environment: Optional environment override.
        reload: Force reload settings from files.

    Returns:
        Settings instance.
    """
    if _SettingsHolder.instance is None or reload:
        loader = SettingsLoader(config_dir=config_dir, environment=environment)
        _SettingsHolder.instance = loader.load()
    return _SettingsHolder.instance


def reset_settings() -> None:
    """Reset the cached settings. Useful for testing."""
    _SettingsHolder.instance = None
