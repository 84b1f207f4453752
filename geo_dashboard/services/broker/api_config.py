"""
APIConfig — YAML loader for the widget data endpoint definition.

Single Responsibility: parse ``widget_api.yml`` into typed dataclasses.
No HTTP calls, no business logic.

Usage::

    from geo_dashboard.services.broker.api_config import api_config_loader

    ep = api_config_loader.get("widgets")   # APIEndpoint | None
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

logger = logging.getLogger(__name__)

# Bundled default (geo_dashboard/config/widget_api.yml)
DEFAULT_CONFIG_PATH = Path(__file__).resolve().parents[2] / "config" / "widget_api.yml"

_AUTH_TYPES = ("none", "bearer", "api_key")


# ── Dataclass ────────────────────────────────────────────────────

@dataclass(frozen=True)
class APIEndpoint:
    """
    Immutable definition of one HTTP endpoint.

    ``latitude_param`` / ``longitude_param`` name the query parameters
    that carry the resolved coordinates.
    """
    api_id: str
    name: str
    base_url: str
    method: str = "GET"
    timeout: int = 10
    auth_type: str = "none"
    auth_env_var: Optional[str] = None
    headers: Dict[str, str] = field(default_factory=dict)
    params: Dict[str, Any] = field(default_factory=dict)
    response_key: Optional[str] = None
    latitude_param: str = "lat"
    longitude_param: str = "lon"
    enabled: bool = True


# ── Loader ───────────────────────────────────────────────────────

class APIConfigLoader:
    """
    Loads and caches the parsed endpoint definitions from YAML.

    The YAML is read once on first access and cached in memory.
    Call ``reload()`` to re-read after manual edits.
    """

    def __init__(self, config_path: Path = DEFAULT_CONFIG_PATH):
        self._config_path = Path(config_path)
        self._endpoints: Dict[str, APIEndpoint] = {}
        self._loaded = False

    @property
    def config_path(self) -> Path:
        return self._config_path

    def get(self, api_id: str) -> Optional[APIEndpoint]:
        """Return a single endpoint by its api_id, or ``None``."""
        self._ensure_loaded()
        return self._endpoints.get(api_id)

    def list_ids(self) -> List[str]:
        self._ensure_loaded()
        return list(self._endpoints.keys())

    def reload(self) -> None:
        """Force re-read of the YAML file."""
        self._loaded = False
        self._endpoints.clear()
        self._ensure_loaded()

    # ── Internal ─────────────────────────────────────────────

    def _ensure_loaded(self) -> None:
        if not self._loaded:
            self._load()

    def _load(self) -> None:
        self._loaded = True

        if not self._config_path.exists():
            logger.warning(f"[APIConfig] Config file not found: {self._config_path}")
            return

        try:
            raw = yaml.safe_load(self._config_path.read_text(encoding="utf-8"))
        except yaml.YAMLError as exc:
            logger.error(f"[APIConfig] YAML parse error: {exc}")
            return

        if not raw or not isinstance(raw, dict):
            logger.info("[APIConfig] No endpoints configured in YAML")
            return

        for api_id, definition in raw.items():
            if not isinstance(definition, dict):
                continue
            try:
                self._endpoints[api_id] = _parse_endpoint(api_id, definition)
            except (KeyError, ValueError, TypeError) as exc:
                logger.error(f"[APIConfig] Skipping invalid entry '{api_id}': {exc}")

        logger.info(f"[APIConfig] Loaded {len(self._endpoints)} endpoint(s)")


def _parse_endpoint(api_id: str, definition: Dict[str, Any]) -> APIEndpoint:
    auth_type = str(definition.get("auth_type", "none")).lower()
    if auth_type not in _AUTH_TYPES:
        raise ValueError(f"auth_type must be one of {_AUTH_TYPES}, got '{auth_type}'")

    method = str(definition.get("method", "GET")).upper()
    if method not in ("GET", "POST"):
        raise ValueError(f"method must be GET or POST, got '{method}'")

    return APIEndpoint(
        api_id=api_id,
        name=definition.get("name", api_id),
        base_url=definition["base_url"],
        method=method,
        timeout=int(definition.get("timeout", 10)),
        auth_type=auth_type,
        auth_env_var=definition.get("auth_env_var"),
        headers=definition.get("headers") or {},
        params=definition.get("params") or {},
        response_key=definition.get("response_key"),
        latitude_param=definition.get("latitude_param", "lat"),
        longitude_param=definition.get("longitude_param", "lon"),
        enabled=bool(definition.get("enabled", True)),
    )


# ── Singleton ────────────────────────────────────────────────────
api_config_loader = APIConfigLoader()
