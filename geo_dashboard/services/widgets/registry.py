"""
WidgetRegistry — type tag → lazily-loaded renderer.

Single Responsibility: answer "which renderer draws this tag?".

``resolve(tag)`` never raises.  A registered tag yields a
``RendererHandle``; anything else yields a ``NotFound`` value that the
dispatcher turns into the unknown-widget placeholder.

The renderer module behind a handle is imported with ``importlib`` the
first time ``load()`` is called, so only the widget types actually
present in a payload are ever imported.

Usage::

    from geo_dashboard.services.widgets.registry import widget_registry

    handle = widget_registry.resolve("kpi")
    if isinstance(handle, RendererHandle):
        renderer_cls = handle.load()
"""

from __future__ import annotations

import importlib
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Type, Union

from geo_dashboard.config.widget_registry import RENDERER_PACKAGE, WIDGET_REGISTRY
from geo_dashboard.services.widgets.base import BaseRenderer

logger = logging.getLogger(__name__)


class RendererLoadError(Exception):
    """A registered renderer module could not be imported or is malformed."""


@dataclass(frozen=True)
class NotFound:
    """Result of resolving a tag nobody registered."""
    tag: str


class RendererHandle:
    """Deferred reference to one renderer class."""

    def __init__(
        self,
        tag: str,
        module_path: str,
        class_name: str,
        category: str = "",
        default_config: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.tag = tag
        self.module_path = module_path
        self.class_name = class_name
        self.category = category
        self.default_config = dict(default_config or {})
        self._cls: Optional[Type[BaseRenderer]] = None

    @property
    def is_loaded(self) -> bool:
        return self._cls is not None

    def load(self) -> Type[BaseRenderer]:
        """Import (once) and return the renderer class."""
        if self._cls is not None:
            return self._cls

        try:
            module = importlib.import_module(self.module_path)
        except ImportError as exc:
            raise RendererLoadError(f"Cannot import {self.module_path}: {exc}") from exc

        cls = getattr(module, self.class_name, None)
        if not (isinstance(cls, type) and issubclass(cls, BaseRenderer)):
            raise RendererLoadError(
                f"{self.module_path} does not export '{self.class_name}' "
                f"as a BaseRenderer subclass"
            )

        logger.debug(f"[WidgetRegistry] Loaded renderer for '{self.tag}'")
        self._cls = cls
        return cls

    def describe(self) -> Dict[str, Any]:
        return {
            "tag": self.tag,
            "module": self.module_path,
            "class_name": self.class_name,
            "category": self.category,
            "loaded": self.is_loaded,
        }

    def __repr__(self) -> str:
        return f"RendererHandle({self.tag!r} -> {self.module_path}.{self.class_name})"


ResolveResult = Union[RendererHandle, NotFound]


class WidgetRegistry:
    """In-memory tag → RendererHandle mapping."""

    def __init__(self) -> None:
        self._handles: Dict[str, RendererHandle] = {}

    @classmethod
    def from_config(
        cls,
        config: Mapping[str, Mapping[str, Any]] = WIDGET_REGISTRY,
        package: str = RENDERER_PACKAGE,
    ) -> "WidgetRegistry":
        registry = cls()
        for tag, entry in config.items():
            module = entry["module"]
            registry.register(
                tag,
                module if "." in module else f"{package}.{module}",
                entry["class_name"],
                category=entry.get("category", ""),
                default_config=entry.get("default_config"),
            )
        return registry

    # ── Registration ─────────────────────────────────────────

    def register(
        self,
        tag: str,
        module_path: str,
        class_name: str,
        category: str = "",
        default_config: Optional[Dict[str, Any]] = None,
    ) -> RendererHandle:
        """Add (or replace) the renderer for ``tag``."""
        if tag in self._handles:
            logger.info(f"[WidgetRegistry] Replacing renderer for '{tag}'")
        handle = RendererHandle(tag, module_path, class_name, category, default_config)
        self._handles[tag] = handle
        return handle

    # ── Lookup ───────────────────────────────────────────────

    def resolve(self, tag: Any) -> ResolveResult:
        if not isinstance(tag, str):
            return NotFound(tag=repr(tag))
        handle = self._handles.get(tag)
        if handle is None:
            return NotFound(tag=tag)
        return handle

    def is_registered(self, tag: str) -> bool:
        return tag in self._handles

    def known_tags(self) -> List[str]:
        return sorted(self._handles)

    def describe(self) -> List[Dict[str, Any]]:
        return [self._handles[tag].describe() for tag in self.known_tags()]

    def preload(self) -> Dict[str, Optional[str]]:
        """Eagerly load every renderer. Returns tag → error (or None)."""
        errors: Dict[str, Optional[str]] = {}
        for tag, handle in self._handles.items():
            try:
                handle.load()
                errors[tag] = None
            except RendererLoadError as exc:
                logger.error(f"[WidgetRegistry] {exc}")
                errors[tag] = str(exc)
        return errors


# ── Singleton ────────────────────────────────────────────────────
widget_registry = WidgetRegistry.from_config()
