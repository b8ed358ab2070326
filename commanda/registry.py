"""
Commanda command registry: descriptors, explicit builders, and bulk scanning.

What this module provides
- CommandDescriptor: immutable record of a registered command (name, descr,
  handler, parameter specs). Parameters are reflected from the handler's
  signature unless the caller supplies them.
- CommandBuilder: fluent alternative to reflection where each parameter's role
  is stated explicitly (positional, option, injected).
- CommandRegistry: append-only, ordered collection of descriptors with
  first-match lookup by (case-sensitive) name.
- scan(cls, resolver): register every public "void or asynchronous" method of
  a class as a command named after the lowercased method name.

Duplicates
- A registry accepts duplicate names by default: lookups return the first
  descriptor registered under a name and a warning is logged for the shadowed
  one. CommandRegistry(unique=True) turns a duplicate into a
  DuplicateCommandError instead.

Quick start
    registry = CommandRegistry()

    @registry.register("sum", descr="add two numbers")
    def add(a: int, b: int):
        print(a + b)

    registry.add(
        CommandBuilder("greet", greet)
        .positional("name")
        .option("shout", type=bool, descr="uppercase the greeting")
        .build()
    )
"""
import collections.abc
import inspect
import logging
import typing
from inspect import Parameter
from types import NoneType

from .arguments import Option, Kind, Named, ParameterSpec, classify, kindof, reflect
from .faults import DuplicateCommandError, DuplicateOptionError, ServiceResolutionError
from .utils import *

logger = logging.getLogger(__name__)


class CommandDescriptor(metaclass=ReflectiveType):
    """
    Immutable description of one registered command.

    Parameters
    - name: str
      Key used to select the command (exact, case-sensitive). Cannot be empty.
    - handler: Callable
      Invoked with the bound argument vector (see commanda.dispatch for the
      accepted handler shapes).
    - descr: Unset | str
      One-line description for the help listing; None when absent.
    - parameters: Unset | Iterable[ParameterSpec]
      Declared parameters in handler order. Unset reflects them from the
      handler's signature.
      Two named options resolving to the same alias raise DuplicateOptionError.
    """

    __introspectable__ = (
        "name",
        "descr",
        "handler",
        "parameters",
    )

    __displayable__ = (
        "name",
        "descr",
        "parameters",
    )

    def __new__(cls, name, handler, /, descr=Unset, parameters=Unset):
        if not isinstance(name, str):
            raise TypeError(f"{cls.__typename__} 'name' must be a string")
        elif not name:
            raise ValueError(f"{cls.__typename__} 'name' cannot be empty")

        if not callable(handler):
            raise TypeError(f"{cls.__typename__} 'handler' must be callable")

        if not isinstance(descr, str | Unset):
            raise TypeError(f"{cls.__typename__} 'descr' must be a string")
        elif isinstance(descr, str):
            descr = descr.strip()

        if parameters is Unset:
            parameters = reflect(handler)
        elif not isinstance(parameters, collections.abc.Iterable):
            raise TypeError(f"{cls.__typename__} 'parameters' must be an iterable of parameter specs")

        sanitized = []
        for parameter in parameters:
            if not isinstance(parameter, ParameterSpec):
                raise TypeError(f"{cls.__typename__} 'parameters' must be an iterable of parameter specs")
            if any(existing.name == parameter.name for existing in sanitized):
                raise ValueError(f"{cls.__typename__} parameter name {parameter.name!r} is already in use")
            sanitized.append(parameter)

        aliases = set()
        for parameter in sanitized:
            match classify(parameter):
                case Named(alias=alias) if alias in aliases:
                    raise DuplicateOptionError(f"command {name!r} declares option {alias!r} more than once")
                case Named(alias=alias):
                    aliases.add(alias)

        return populate(super().__new__(cls), {
            "name": name,
            "descr": descr or None,
            "handler": handler,
            "parameters": tuple(sanitized),
        })


class CommandBuilder:
    """
    Describe a command parameter by parameter, without reflection.

    Each method appends one parameter (in handler order) and returns the
    builder; build() produces the CommandDescriptor.
    """

    def __init__(self, name, handler, /, descr=Unset):
        self._name = name
        self._handler = handler
        self._descr = descr
        self._parameters = []

    def positional(self, name, /, type=str, default=Unset):
        if kindof(type) is Kind.EXTERNAL:
            raise TypeError(f"positional parameter {name!r} must be a string, boolean or number")
        self._parameters.append(ParameterSpec(name, type=type, default=default))
        return self

    def option(self, name, /, type=bool, default=Unset, alias=Unset, descr=Unset):
        if kindof(type) is Kind.EXTERNAL:
            raise TypeError(f"option parameter {name!r} must be a string, boolean or number")
        self._parameters.append(ParameterSpec(name, type=type, default=default, option=Option(alias, descr)))
        return self

    def injected(self, name, /, type):
        if kindof(type) is not Kind.EXTERNAL:
            raise TypeError(f"injected parameter {name!r} cannot be a string, boolean or number")
        self._parameters.append(ParameterSpec(name, type=type))
        return self

    def build(self):
        return CommandDescriptor(self._name, self._handler, self._descr, self._parameters)


def _returns_nothing(function):
    """
    Return whether a function is eligible for scanning: a coroutine function,
    or a function whose return annotation is missing, None, or an awaitable.
    """
    if inspect.iscoroutinefunction(function):
        return True
    annotation = inspect.signature(function, eval_str=True).return_annotation
    if annotation in (Parameter.empty, None, NoneType):
        return True
    return typing.get_origin(annotation) in (collections.abc.Awaitable, collections.abc.Coroutine) or annotation in (
        collections.abc.Awaitable, collections.abc.Coroutine
    )


def _scanned(cls, name, *, bound, resolver):
    """
    Build the handler of a scanned method.

    Static and class methods are called on the class. Instance methods resolve
    the class through the resolver on every call; a miss is a configuration
    error. The handler publishes the method's signature (minus self) so the
    dispatcher invokes it like any reflected handler.
    """
    method = getattr(cls, name)
    signature = inspect.signature(method)
    if not bound:
        signature = signature.replace(parameters=tuple(signature.parameters.values())[1:])

    @rename(name)
    def handler(*args, **kwargs):
        if bound:
            return getattr(cls, name)(*args, **kwargs)
        if (target := resolver.resolve(cls)) is None:
            raise ServiceResolutionError(f"cannot resolve {cls.__qualname__!r} to run its {name!r} command")
        return getattr(target, name)(*args, **kwargs)

    handler.__signature__ = signature
    handler.__doc__ = inspect.getdoc(method)
    return handler


def scan(cls, resolver, /):
    """
    Describe every eligible public method of cls as a command.

    Eligibility
    - public name (no leading underscore), including inherited methods;
    - a plain function (instance method), staticmethod, or classmethod;
    - "void or asynchronous" (see _returns_nothing).

    Naming
    - command name: the method name lowercased;
    - description: first docstring line, or the method name.

    Returns
    - list[CommandDescriptor] in name order (dir() order), plus a flag telling
      whether any instance method was found, as (descriptors, instanced).
    """
    if not isinstance(cls, type):
        raise TypeError("scan() first argument must be a class")

    descriptors = []
    instanced = False

    for name in dir(cls):
        if name.startswith("_"):
            continue
        member = inspect.getattr_static(cls, name)
        if isinstance(member, staticmethod | classmethod):
            function, bound = member.__func__, True
        elif inspect.isfunction(member):
            function, bound = member, False
        else:
            continue

        if not _returns_nothing(function):
            logger.debug("skipping %s.%s: returns a value", cls.__qualname__, name)
            continue

        parameters = reflect(getattr(cls, name))
        if not bound:
            parameters = parameters[1:]
            instanced = True

        descr = (inspect.getdoc(function) or "").strip().partition("\n")[0] or name
        descriptors.append(CommandDescriptor(
            name.lower(),
            _scanned(cls, name, bound=bound, resolver=resolver),
            descr,
            parameters,
        ))

    return descriptors, instanced


class CommandRegistry:
    """
    Ordered, append-only collection of command descriptors.

    Lifecycle
    - Built up during registration (add/register/include).
    - seal() freezes it; the host seals the registry when it is built so that
      dispatches only ever read it.
    """

    def __init__(self, *, unique=False):
        self._descriptors = []
        self._unique = bool(unique)
        self._sealed = False

    @property
    def descriptors(self):
        return tuple(self._descriptors)

    @property
    def sealed(self):
        return self._sealed

    def seal(self):
        self._sealed = True
        return self

    def add(self, descriptor, /):
        """
        Append a descriptor. Duplicates are shadowed (warned) or rejected.
        """
        if not isinstance(descriptor, CommandDescriptor):
            raise TypeError("add() argument must be a command descriptor")
        if self._sealed:
            raise RuntimeError("registry is sealed, commands cannot be added after the host is built")

        if descriptor.name in self:
            if self._unique:
                raise DuplicateCommandError(f"command name {descriptor.name!r} is already in use")
            logger.warning("command %r is already registered, the new handler is unreachable", descriptor.name)

        self._descriptors.append(descriptor)
        logger.debug("registered command %r with %d parameter(s)", descriptor.name, len(descriptor.parameters))
        return descriptor

    def register(self, name, handler=Unset, /, descr=Unset, parameters=Unset):
        """
        Register a handler under name, or return a decorator doing so.

        Decorator form returns the handler unchanged so it stays callable.
        """
        def wrapper(handler, /):
            self.add(CommandDescriptor(name, handler, descr, parameters))
            return handler

        return wrapper(handler) if handler is not Unset else rename(wrapper, "register")

    def include(self, cls, resolver, /):
        """
        Register every eligible method of cls (see scan()).

        Returns whether cls declared instance methods, in which case the caller
        must make cls resolvable through the resolver.
        """
        descriptors, instanced = scan(cls, resolver)
        for descriptor in descriptors:
            self.add(descriptor)
        return instanced

    def find(self, name, /):
        """
        Return the first descriptor registered under name, or None.
        """
        for descriptor in self._descriptors:
            if descriptor.name == name:
                return descriptor
        return None

    def __contains__(self, name):
        return self.find(name) is not None

    def __iter__(self):
        return iter(self.descriptors)

    def __len__(self):
        return len(self._descriptors)

    def __bool__(self):
        return bool(self._descriptors)


__all__ = (
    "CommandDescriptor",
    "CommandBuilder",
    "CommandRegistry",
    "scan",
)
