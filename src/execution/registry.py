# src/execution/registry.py — v2
"""Agent registry: versioned lookup of executable capabilities.

One registry is created by the composition root (AgentService or a test)
and handed to whoever needs lookup; there is no module-level instance.
Entries are keyed 'name:version'. Re-registering a key replaces it.
Resolving without a version picks the lexicographically highest version
string registered under that name, so numeric ordering needs zero-padded
versions ("1.10.0" sorts before "1.9.0").
"""

from __future__ import annotations

import importlib
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Awaitable, Callable

from papermind.core.errors import RegistryError
from papermind.core.models import AgentDescriptor

if TYPE_CHECKING:
    from papermind.agents.base_agent import BaseAgent

logger = logging.getLogger(__name__)

AgentCallable = Callable[..., Awaitable[Any]]


@dataclass(frozen=True)
class _Entry:
    descriptor: AgentDescriptor
    fn: AgentCallable


class AgentRegistry:
    """Registry of named, versioned capabilities."""

    def __init__(self) -> None:
        self._entries: dict[str, _Entry] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, name: object) -> bool:
        return any(e.descriptor.name == name for e in self._entries.values())

    @property
    def names(self) -> list[str]:
        """Sorted distinct agent names."""
        return sorted({e.descriptor.name for e in self._entries.values()})

    def register(self, descriptor: AgentDescriptor, fn: AgentCallable) -> None:
        """Register fn under descriptor.key, replacing any previous entry."""
        if descriptor.key in self._entries:
            logger.debug("Replacing registered agent %s", descriptor.key)
        self._entries[descriptor.key] = _Entry(descriptor, fn)
        logger.debug("Registered agent %s", descriptor.key)

    def register_agent(self, agent: BaseAgent) -> None:
        """Register a BaseAgent's descriptor and its execute method."""
        self.register(agent.descriptor, agent.execute)

    def resolve(self, name: str, version: str | None = None) -> AgentCallable | None:
        """Return the callable for name (and version), or None if not registered."""
        entry = self._lookup(name, version)
        return entry.fn if entry else None

    def resolve_or_raise(self, name: str, version: str | None = None) -> AgentCallable:
        fn = self.resolve(name, version)
        if fn is None:
            wanted = f"{name}:{version}" if version else name
            raise RegistryError(f"Agent '{wanted}' not found in registry")
        return fn

    def descriptor(self, name: str, version: str | None = None) -> AgentDescriptor | None:
        entry = self._lookup(name, version)
        return entry.descriptor if entry else None

    def list(self) -> list[dict[str, str]]:
        """Describe every registered entry, in registration order."""
        return [
            {
                "name": e.descriptor.name,
                "version": e.descriptor.version,
                "description": e.descriptor.description,
            }
            for e in self._entries.values()
        ]

    def load_agents(self, class_paths: list[str], **kwargs: Any) -> list[BaseAgent]:
        """Import, instantiate and register BaseAgent subclasses by dotted path.

        Failures are logged and skipped so one broken agent does not take the
        others down.

        Args:
            class_paths: e.g. 'papermind.agents.paper_analysis.PaperAnalysisAgent'.
            **kwargs: Passed to every agent constructor.

        Returns:
            The registered agent instances.
        """
        loaded: list[BaseAgent] = []
        for class_path in class_paths:
            try:
                agent = _import_agent(class_path, **kwargs)
            except RegistryError as exc:
                logger.warning("Failed to load agent %s: %s", class_path, exc)
                continue
            self.register_agent(agent)
            loaded.append(agent)
        logger.info("Registry loaded %d/%d agents", len(loaded), len(class_paths))
        return loaded

    def _lookup(self, name: str, version: str | None) -> _Entry | None:
        if version is not None:
            return self._entries.get(f"{name}:{version}")
        versions = [
            e for e in self._entries.values() if e.descriptor.name == name
        ]
        if not versions:
            return None
        return max(versions, key=lambda e: e.descriptor.version)


def _import_agent(class_path: str, **kwargs: Any) -> BaseAgent:
    """Import and instantiate an agent from a dotted class path."""
    from papermind.agents.base_agent import BaseAgent

    parts = class_path.rsplit(".", 1)
    if len(parts) != 2:
        raise RegistryError(f"Invalid class path: {class_path}")
    module_path, class_name = parts

    try:
        module = importlib.import_module(module_path)
    except ImportError as exc:
        raise RegistryError(f"Cannot import module {module_path}: {exc}") from exc

    cls = getattr(module, class_name, None)
    if cls is None:
        raise RegistryError(f"Class {class_name} not found in {module_path}")
    if not isinstance(cls, type) or not issubclass(cls, BaseAgent):
        raise RegistryError(f"{class_path} is not a BaseAgent subclass")

    return cls(**kwargs)
