"""YAML config loader with environment overrides and dotted-key lookup."""

import logging
import os
from pathlib import Path
from typing import Any

import yaml
from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel

from weatherproxy.config.schema import ProxyConfig

logger = logging.getLogger(__name__)

ENV_API_KEY = "CWA_API_KEY"
ENV_PORT = "PORT"
ENV_BASE_URL = "CWA_API_BASE_URL"
ENV_CITY_POLICY = "INVALID_CITY_POLICY"


def load_config(path: str | Path | None = None) -> ProxyConfig:
    """Load and validate config from an optional YAML file plus environment.

    A missing path yields the built-in defaults. Environment variables
    (including those from a ``.env`` file) override YAML values.
    """
    raw: dict[str, Any] = {}
    if path is not None:
        path = Path(path)
        if path.exists():
            with open(path, encoding="utf-8") as f:
                raw = yaml.safe_load(f) or {}
        else:
            logger.warning("Config file %s not found, using defaults", path)

    load_dotenv(find_dotenv(usecwd=True))
    _apply_env_overrides(raw)
    return ProxyConfig(**raw)


def _apply_env_overrides(raw: dict[str, Any]) -> None:
    api_key = os.getenv(ENV_API_KEY)
    port = os.getenv(ENV_PORT)
    base_url = os.getenv(ENV_BASE_URL)
    policy = os.getenv(ENV_CITY_POLICY)

    if api_key:
        raw.setdefault("upstream", {})["api_key"] = api_key.strip()
    if base_url:
        raw.setdefault("upstream", {})["base_url"] = base_url.strip()
    if port:
        try:
            raw.setdefault("server", {})["port"] = int(port)
        except ValueError:
            logger.warning("Ignoring non-integer %s=%r", ENV_PORT, port)
    if policy:
        raw.setdefault("validation", {})["invalid_city_policy"] = (
            policy.strip().lower()
        )


def get_config_value(config: ProxyConfig, dotted_key: str) -> Any:
    """Get a config value by dotted key path. E.g. 'upstream.timeout_seconds'."""
    parts = dotted_key.split(".")
    obj: Any = config
    for part in parts:
        if isinstance(obj, (list, tuple)):
            obj = obj[int(part)]
        elif isinstance(obj, BaseModel) and part in type(obj).model_fields:
            obj = getattr(obj, part)
        elif isinstance(obj, dict):
            obj = obj[part]
        else:
            raise KeyError(f"Config key not found: {dotted_key}")
    return obj
