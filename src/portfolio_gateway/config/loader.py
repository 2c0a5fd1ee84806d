"""
Configuration Loader - YAML, Profile Overlay, Environment Secrets.

Resolution order (later wins):
    1. config/default.yaml (or the file given)
    2. profiles/<profile>.yaml next to that file
    3. Environment variables in ENV_OVERRIDES

The merged dictionary is validated into a GatewayConfig by Pydantic.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple, Union

import yaml

from portfolio_gateway.config.models import GatewayConfig

logger = logging.getLogger(__name__)

# Environment variable -> (section, key).
ENV_OVERRIDES: Dict[str, Tuple[str, str]] = {
    "FMP_API_KEY": ("upstream", "market_api_key"),
    "NEWS_API_KEY": ("upstream", "news_api_key"),
    "UPSTREAM_TIMEOUT_SECONDS": ("upstream", "timeout_seconds"),
    "GEMINI_API_KEY": ("chat", "api_key"),
    "CACHE_STORE_URL": ("cache_store", "url"),
    "CACHE_STORE_KEY": ("cache_store", "api_key"),
}


def deep_merge(base: Mapping[str, Any], overlay: Mapping[str, Any]) -> Dict[str, Any]:
    """Nested dicts are merged key by key; any other overlay value replaces."""
    merged = dict(base)
    for key, value in overlay.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = deep_merge(current, value)
        else:
            merged[key] = value
    return merged


class ConfigLoader:
    """Builds a validated GatewayConfig from YAML and the environment."""

    def __init__(
        self,
        base_path: Optional[Path] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> None:
        """
        Args:
            base_path: Directory relative config paths are resolved against
            environ: Source of overrides; os.environ when omitted
        """
        self._base_path = base_path or Path(".")
        self._environ = os.environ if environ is None else environ

    def load(
        self,
        config_path: Union[str, Path],
        profile: Optional[str] = None,
    ) -> GatewayConfig:
        """
        Load, overlay and validate.

        Raises:
            FileNotFoundError: If the config file or the profile is missing
            ValidationError: If the merged config is invalid
        """
        path = Path(config_path)
        if not path.is_absolute():
            path = self._base_path / path
        raw = self._read_yaml(path)

        if profile:
            profile_path = path.parent / "profiles" / f"{profile}.yaml"
            if not profile_path.exists():
                raise FileNotFoundError(f"Profile not found: {profile} ({profile_path})")
            raw = deep_merge(raw, self._read_yaml(profile_path))
            logger.info(f"Applied config profile: {profile}")

        return self.load_from_dict(raw)

    def load_from_dict(self, config_dict: Dict[str, Any]) -> GatewayConfig:
        """Validate a config dictionary after applying environment overrides."""
        return GatewayConfig.model_validate(deep_merge(config_dict, self._env_overlay()))

    def _env_overlay(self) -> Dict[str, Dict[str, str]]:
        overlay: Dict[str, Dict[str, str]] = {}
        for var, (section, key) in ENV_OVERRIDES.items():
            value = self._environ.get(var)
            if value:
                overlay.setdefault(section, {})[key] = value
        return overlay

    @staticmethod
    def _read_yaml(path: Path) -> Dict[str, Any]:
        with open(path, encoding="utf-8") as f:
            return yaml.safe_load(f) or {}


def load_config(
    config_path: Union[str, Path],
    profile: Optional[str] = None,
    base_path: Optional[Path] = None,
) -> GatewayConfig:
    """Load the gateway config using the process environment."""
    return ConfigLoader(base_path=base_path).load(config_path, profile)
