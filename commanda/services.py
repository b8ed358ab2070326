"""
Commanda services: the resolver capability and a minimal container.

The dispatcher only needs one capability from a dependency-injection layer:
resolve(type) returning an instance or None. Resolver names that capability;
any object exposing a callable resolve attribute is accepted as a Resolver
(isinstance/issubclass honour it through __subclasshook__), so a host
application can plug in its own container.

ServiceContainer is the small container the host builder ships with:
- add_singleton(type, instance=Unset, factory=Unset): one shared instance,
  created lazily from the factory (or the type itself) on first resolution,
  at most once even when several threads resolve it together.
- add_transient(type, factory=Unset): a fresh instance on every resolution.
- resolve(type): the instance, or None when nothing is registered. Resolver
  and the container's own type resolve to the container.
"""
import builtins
import logging
import threading
from abc import ABC, abstractmethod

from .utils import Unset, coalesce

logger = logging.getLogger(__name__)


class Resolver(ABC):
    """
    Capability: resolve(type) -> instance | None.
    """

    @abstractmethod
    def resolve(self, type, /):
        """
        Return an instance for type, or None when it cannot be resolved.
        """
        raise NotImplementedError

    @classmethod
    def __subclasshook__(cls, subclass):
        if cls is Resolver:
            if callable(getattr(subclass, "resolve", None)):
                return True
        return NotImplemented


class ServiceContainer(Resolver):
    """
    Type-keyed registry of singleton and transient services.
    """

    def __init__(self):
        self._singletons = {}
        self._factories = {}
        self._transients = {}
        self._lock = threading.RLock()

    def add_singleton(self, type, /, instance=Unset, factory=Unset):
        """
        Register a shared service.

        Exactly one of instance/factory may be given; with neither, the type
        itself is called (without arguments) on first resolution.
        """
        if instance is not Unset and factory is not Unset:
            raise TypeError("add_singleton() takes an instance or a factory, not both")
        if factory is not Unset and not callable(factory):
            raise TypeError("add_singleton() 'factory' must be callable")

        self._transients.pop(type, None)
        if instance is not Unset:
            self._factories.pop(type, None)
            self._singletons[type] = instance
        else:
            self._singletons.pop(type, None)
            self._factories[type] = coalesce(factory, type)
        logger.debug("registered singleton service %r", type)
        return self

    def add_transient(self, type, /, factory=Unset):
        """
        Register a service built anew on every resolution.
        """
        if factory is not Unset and not callable(factory):
            raise TypeError("add_transient() 'factory' must be callable")

        self._singletons.pop(type, None)
        self._factories.pop(type, None)
        self._transients[type] = coalesce(factory, type)
        logger.debug("registered transient service %r", type)
        return self

    def resolve(self, type, /):
        if type is Resolver or type is builtins.type(self):
            return self
        if type in self._singletons:
            return self._singletons[type]
        with self._lock:
            # Another thread may have built it while this one waited.
            if type in self._factories:
                self._singletons[type] = self._factories[type]()
                del self._factories[type]
            if type in self._singletons:
                return self._singletons[type]
        if type in self._transients:
            return self._transients[type]()
        logger.debug("no service registered for %r", type)
        return None

    def __contains__(self, type):
        return type in self._singletons or type in self._factories or type in self._transients


__all__ = (
    "Resolver",
    "ServiceContainer",
)
