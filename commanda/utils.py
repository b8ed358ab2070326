"""
Commanda utilities shared by the binding and dispatch layers.

Overview
- UnsetType / Unset
  • Singleton marker for "no value" where None is a value a handler may receive
    (an injected service that could not be resolved, an explicit None default).
  • Falsey, printable as "Unset", sealed against subclassing.

- coalesce(value, default=None)
  • Materialize Unset into a concrete fallback; None, 0, "" and [] pass through.

- rename(callable, name) / @rename("name")
  • Give synthesized callables a stable __name__/__qualname__.

- mirror("attr")
  • Read-only property over a private "_attr" field; lists/sets/dicts are
    handed out as tuple/frozenset/mappingproxy views.

- ReflectiveType
  • Metaclass for the small immutable records of the package (option markers,
    parameter specs, command descriptors): mirrored properties from
    __introspectable__, stable __repr__ and __rich_repr__.

- kebabize(name)
  • Parameter name to option alias body ("containerName" → "container-name").

Quick examples
    >>> coalesce(Unset, "fallback")
    'fallback'
    >>> kebabize("HTTPServer")
    'http-server'
"""
import builtins
import functools
import operator
import re
from collections.abc import Mapping, Set
from types import MappingProxyType
from typing import final


@final
class UnsetType:
    """
    Sentinel type for a value that was not provided.

    Argument vectors start out filled with Unset; the parser, the defaulting
    pass and the injection pass replace it. A parameter spec without a default
    carries Unset as its default.
    """

    def __or__(self, other, /):
        """
        Support PEP 604 unions in isinstance checks (e.g., str | Unset).
        """
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    def __ror__(self, other, /):
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __reduce__(self):
        return "Unset"

    def __init_subclass__(cls, **options):
        raise TypeError("type 'UnsetType' is not an acceptable base type")


Unset = UnsetType()
"""
Singleton marker for "not provided" (see UnsetType).
"""


def coalesce(object, default=None, /):
    """
    Return object unless it is Unset, in which case return default.

    Falsey values are legitimate values here: coalesce(None, 1) is None.
    """
    return object if object is not Unset else default


def rename(*parameters):
    """
    Set __name__/__qualname__ on a callable, or build a decorator doing so.

    Forms
    - rename(callable, name) -> callable (renamed in place)
    - rename(name) -> decorator
    """
    match len(parameters):
        case 2:
            callable, name = parameters
            if not builtins.callable(callable):
                raise TypeError("rename() first argument must be callable")
            if not isinstance(name, str):
                raise TypeError("rename() second argument must be a string")
            try:
                callable.__qualname__ = name
                callable.__name__ = name
            except (AttributeError, TypeError):
                raise TypeError("rename() first argument must be a updatable callable") from None
            return callable
        case 1:
            name, = parameters
            if not isinstance(name, str):
                raise TypeError("@rename() argument must be a string")

            def wrapper(callable):
                if not builtins.callable(callable):
                    raise TypeError("@rename() must be applied to a callable")
                return rename(callable, name)

            return rename(wrapper, "rename")
        case _:
            raise TypeError("rename takes 1 to 2 arguments but %d were given" % len(parameters))


def _freeze(object):
    # Shallow: records only ever hold flat containers.
    if isinstance(object, list):
        return tuple(object)
    elif isinstance(object, Mapping):
        return MappingProxyType(object)
    elif isinstance(object, Set) and not isinstance(object, frozenset):
        return frozenset(object)
    return object


def mirror(name, /, *, freeze=True):
    """
    Build a read-only property that serves self._{name}.

    Mutable containers are returned as read-only views (list → tuple,
    dict → mappingproxy, set → frozenset) so public state cannot be edited
    through the property. Unset is served as-is. With freeze=False the field
    is served verbatim (values handed to handlers, such as defaults).
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")

    @rename(name)
    def getter(self):
        object = getattr(self, "_" + name)
        return _freeze(object) if freeze else object

    return property(getter)


class ReflectiveType(type):
    """
    Metaclass for immutable records.

    Responsibilities
    - Expose every name in __introspectable__ as a mirrored, read-only property.
      Names also listed in __verbatim__ are served without freezing.
    - Derive __typename__ from the class name ("CommandDescriptor" →
      "command-descriptor") for error messages.
    - Provide __repr__ and __rich_repr__ built from __displayable__ (or
      __introspectable__ when no display subset is declared).
    - Block attribute assignment on instances once construction finished;
      constructors write their private fields through object.__setattr__.
    """
    __introspectable__ = ()
    __displayable__ = Unset

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name, freeze=name not in namespace.get("__verbatim__", ()))
                for name in namespace.get("__introspectable__", ())
            },
        )

        @rename("__repr__")
        def __repr__(self):
            return f"{type(self).__typename__}({', '.join(map(functools.partial(operator.mod, '%s=%r'), self.__rich_repr__()))})"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in coalesce(type(self).__displayable__, type(self).__introspectable__):
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        @rename("__setattr__")
        def __setattr__(self, name, value, /):
            raise AttributeError(f"{type(self).__typename__} is immutable, cannot set {name!r}")
        self.__setattr__ = __setattr__

        return self


def populate(self, metadata, /):
    """
    Write sanitized metadata into the private "_name" fields of a record.

    Records built by ReflectiveType refuse attribute assignment, so their
    constructors go through here once and never again.
    """
    for name, value in metadata.items():
        object.__setattr__(self, "_" + name, value)
    return self


@functools.cache
def kebabize(name, /):
    """
    Convert a parameter name into the body of an option alias.

    Rules
    - a dash goes before an uppercase letter that is not the first character
      and is preceded by a lowercase letter or followed by one;
    - every letter is lowercased;
    - underscores become dashes, and leading/trailing ones are dropped so
      private-looking names ("_force") still read well.

    Examples
    - kebabize("containerName") -> "container-name"
    - kebabize("HTTPServer")    -> "http-server"
    - kebabize("dry_run")       -> "dry-run"
    """
    if not isinstance(name, str):
        raise TypeError("kebabize() argument must be a string")

    characters = []
    for index, character in enumerate(name):
        if character.isupper():
            preceded = index > 0 and name[index - 1].islower()
            followed = index + 1 < len(name) and name[index + 1].islower()
            if index > 0 and (preceded or followed):
                characters.append("-")
            characters.append(character.lower())
        else:
            characters.append(character)
    return re.sub(r"[_-]+", "-", "".join(characters)).strip("-")


__all__ = (
    # Functions
    "coalesce",
    "rename",
    "mirror",
    "kebabize",
    "populate",

    # Types
    "UnsetType",
    "ReflectiveType",

    # Constants
    "Unset",
)
