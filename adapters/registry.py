"""Adapter registry: name → adapter class, tagged with capabilities at registration."""

from __future__ import annotations

import importlib
import re
from typing import Any

import structlog
from pydantic import BaseModel, ConfigDict

from adapters.base import Capability, ContentAdapter, SupportType, capabilities_of
from core.config import ADAPTER_NAME_PATTERN, AdapterEntry, AdapterManifest

logger = structlog.get_logger(__name__)

_ADAPTER_NAME_RE = re.compile(ADAPTER_NAME_PATTERN)


class RegisteredAdapter(BaseModel):
    """One registry row."""

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    name: str
    support_type: str
    adapter_cls: type[ContentAdapter]
    capabilities: frozenset[Capability]

    @property
    def public_name(self) -> str:
        """Name published to consumers: bare for core, ``<type>_<name>`` otherwise."""
        if self.support_type == SupportType.CORE:
            return self.name
        return f"{self.support_type}_{self.name}"


def import_adapter_class(factory: str) -> type[ContentAdapter]:
    """Resolve a ``package.module:ClassName`` reference."""
    module_name, _, attr_path = factory.partition(":")
    target: Any = importlib.import_module(module_name)
    for attr in attr_path.split("."):
        target = getattr(target, attr)
    if not (isinstance(target, type) and issubclass(target, ContentAdapter)):
        raise TypeError(f"{factory} is not a ContentAdapter subclass")
    return target


class AdapterRegistry:
    """Resolves adapter names to instances and answers capability questions.

    Populated once at startup from the manifest and/or ``register()``.
    Instances are created per lookup and never cached.
    """

    def __init__(self, source: Any = None) -> None:
        self._source = source
        self._entries: dict[str, RegisteredAdapter] = {}

    @classmethod
    def from_manifest(cls, manifest: AdapterManifest, source: Any = None) -> AdapterRegistry:
        """Build a registry from the enabled manifest entries.

        Entries whose class cannot be imported are logged and left out.
        """
        registry = cls(source=source)
        for entry in manifest.enabled():
            registry._register_entry(entry)
        return registry

    def _register_entry(self, entry: AdapterEntry) -> None:
        try:
            adapter_cls = import_adapter_class(entry.factory)
        except (ImportError, AttributeError, TypeError) as exc:
            logger.warning(
                "Adapter class could not be loaded",
                adapter=entry.name,
                factory=entry.factory,
                error=str(exc),
            )
            return
        self.register(entry.name, adapter_cls, support_type=entry.support_type)

    def register(
        self,
        name: str,
        adapter_cls: type[ContentAdapter],
        *,
        support_type: str | None = None,
    ) -> RegisteredAdapter:
        """Register an adapter class under a name."""
        if not _ADAPTER_NAME_RE.match(name):
            raise ValueError(f"Invalid adapter name: {name!r}")
        if name in self._entries:
            raise ValueError(f"Adapter already registered: {name}")

        entry = RegisteredAdapter(
            name=name,
            support_type=support_type or adapter_cls.support_type,
            adapter_cls=adapter_cls,
            capabilities=capabilities_of(adapter_cls),
        )
        # Bare and public names share one namespace.
        taken = {entry.public_name, entry.name}
        for existing in self._entries.values():
            clash = taken & {existing.name, existing.public_name}
            if clash:
                raise ValueError(
                    f"Adapter name {clash.pop()!r} already used by {existing.public_name}"
                )
        self._entries[name] = entry
        logger.debug(
            "Adapter registered",
            adapter=entry.public_name,
            capabilities=sorted(c.name for c in entry.capabilities),
        )
        return entry

    def names(self) -> list[str]:
        return list(self._entries)

    def get_entry(self, name: str) -> RegisteredAdapter | None:
        """Look up by bare name or by the prefixed public name."""
        entry = self._entries.get(name)
        if entry is not None:
            return entry
        for candidate in self._entries.values():
            if candidate.public_name == name:
                return candidate
        return None

    def capabilities(self, name: str) -> frozenset[Capability]:
        entry = self.get_entry(name)
        return entry.capabilities if entry else frozenset()

    def supports(self, name: str, capability: Capability) -> bool:
        return capability in self.capabilities(name)

    def instantiate(self, name: str) -> ContentAdapter | None:
        """Create an adapter instance, or None when no adapter has that name.

        Errors raised by the adapter's constructor propagate.
        """
        entry = self.get_entry(name)
        if entry is None:
            return None
        return entry.adapter_cls(self._source)

    def supports_html_content(self, name: str) -> bool:
        """Installed and able to list a course's HTML content items."""
        entry = self.get_entry(name)
        if entry is None or Capability.COURSE_ITEMS not in entry.capabilities:
            return False
        adapter = entry.adapter_cls(self._source)
        return bool(adapter.is_installed())

    def discover_html_capable_adapters(self) -> list[str]:
        """Public names of every adapter that supports HTML content.

        A candidate that fails while being instantiated or probed is
        logged and excluded; the scan goes on.
        """
        names: list[str] = []
        for entry in self._entries.values():
            try:
                capable = self.supports_html_content(entry.name)
            except Exception as exc:
                logger.warning(
                    "Adapter probe failed",
                    adapter=entry.public_name,
                    error=str(exc),
                )
                continue
            if capable:
                names.append(entry.public_name)
        return names
