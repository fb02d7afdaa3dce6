"""
Probe Registry for PhantomPulse.

Provides a central, class-level registry where probes register themselves
via the :meth:`ProbeRegistry.register` decorator.  The orchestrator uses the
registry to discover available probes and the order in which their results
are merged.
"""

from __future__ import annotations

from typing import Optional, Type

from phantompulse.config import Settings
from phantompulse.probes.base import BaseProbe


class ProbeRegistry:
    """Manages all available probes.

    Probes are stored in a class-level dictionary keyed by their unique
    ``name`` attribute.  Registration happens at import time through the
    :meth:`register` class-method decorator.

    Example::

        @ProbeRegistry.register
        class MyProbe(BaseProbe):
            name = "myprobe"
            ...
    """

    _probes: dict[str, Type[BaseProbe]] = {}

    @classmethod
    def register(cls, probe_class: Type[BaseProbe]) -> Type[BaseProbe]:
        """Class-method decorator that registers a probe in the registry.

        Returns:
            The unmodified *probe_class* so the decorator is transparent.
        """
        cls._probes[probe_class.name] = probe_class
        return probe_class

    @classmethod
    def get_probe(cls, name: str, settings: Optional[Settings] = None) -> BaseProbe:
        """Instantiate and return a single probe by name.

        Raises:
            KeyError: If no probe with the given name is registered.
        """
        return cls._probes[name](settings)

    @classmethod
    def names(cls) -> list[str]:
        """Return registered probe names in merge order."""
        return [
            probe_cls.name
            for probe_cls in sorted(cls._probes.values(), key=lambda p: p.order)
        ]

    @classmethod
    def get_all(cls, settings: Optional[Settings] = None) -> list[BaseProbe]:
        """Return fresh instances of every registered probe in merge order."""
        return [cls._probes[name](settings) for name in cls.names()]

    @classmethod
    def get_execution_order(
        cls,
        selected: Optional[list[str]] = None,
        settings: Optional[Settings] = None,
    ) -> list[BaseProbe]:
        """Return probe instances sorted by ascending ``order``.

        All returned probes are independent of each other and may run
        concurrently; the order only determines how their fragments are
        merged.

        Args:
            selected: Optional list of probe names to include.  When ``None``
                      or empty, **all** registered probes are returned.
            settings: Settings handed to every instance.

        Raises:
            KeyError: If *selected* names an unregistered probe.
        """
        if selected:
            probes = [cls.get_probe(name, settings) for name in selected]
        else:
            probes = cls.get_all(settings)
        return sorted(probes, key=lambda probe: probe.order)
