r"""
Commanda parameter specifications, classification, and value conversion.

Overview
- Option
  • Declaration marker turning a handler parameter into a named option.
    Carries an optional alias override and an optional description.
    Used either as the parameter default or as Annotated metadata:

        def deploy(
            image,
            replicas: int = Option(default=1, descr="pod count"),
            force: Annotated[bool, Option("yes")] = False,
        ): ...

- Kind / kindof(type)
  • The type tag of a declared parameter: STRING, BOOLEAN, NUMERIC, or
    EXTERNAL (anything else: services, collections, generic aliases).

- ParameterSpec
  • Immutable record of one declared parameter: name, type, default, option
    metadata, and the inspect.Parameter kind. Built by reflect(handler) from a
    signature, or directly by callers that describe a command by hand.

- Positional / Named / Injected, classify(spec)
  • The role a parameter plays during a dispatch. EXTERNAL parameters are
    always Injected (option metadata on them is ignored); other parameters are
    Named when they carry option metadata, Positional otherwise.

- convert(token, type) / parse_boolean(token)
  • Best-effort conversion of one token. Failures yield Unset, never an
    exception: a bad value is reported later as a missing one.

Type resolution for reflected parameters
- Annotated[T, ...] is unwrapped to T (an Option in its metadata is kept).
- T | None and Optional[T] are unwrapped to T.
- An unannotated parameter takes the type of its default when that default is
  a string, boolean, or number; otherwise it is a string.
"""
import builtins
import inspect
import numbers
import typing
from enum import Enum
from inspect import Parameter
from types import NoneType, UnionType

from .utils import *


class Option(metaclass=ReflectiveType):
    """
    Marker for a named option.

    Parameters
    - name: Unset | str
      Alias override. The alias becomes "--" + name; a leading "--" in the
      override is accepted and not doubled. Blank strings count as absent, in
      which case the alias is derived from the parameter name.
    - descr: Unset | str
      Description shown in the help listing. Blank strings count as absent
      and the property then reads None.
    - default: Any (keyword-only)
      Default value of the parameter when the marker itself occupies the
      default slot. Unset means the option has no default.
    """

    __introspectable__ = (
        "name",
        "descr",
        "default",
    )

    __verbatim__ = ("default",)

    def __new__(cls, name=Unset, /, descr=Unset, *, default=Unset):
        if not isinstance(name, str | Unset):
            raise TypeError(f"{cls.__typename__} 'name' must be a string")
        if not isinstance(descr, str | Unset):
            raise TypeError(f"{cls.__typename__} 'descr' must be a string")

        name = name.strip().removeprefix("--") if isinstance(name, str) else name
        descr = descr.strip() if isinstance(descr, str) else descr

        return populate(super().__new__(cls), {
            "name": name or Unset,
            "descr": descr or None,
            "default": default,
        })


class Kind(Enum):
    """
    Type tag of a declared parameter.
    """
    STRING = "string"
    BOOLEAN = "boolean"
    NUMERIC = "numeric"
    EXTERNAL = "external"


def kindof(type, /):
    """
    Return the Kind of a declared type.

    - str and its subclasses → STRING
    - bool → BOOLEAN (checked before numbers: bool is an int)
    - numbers.Number subclasses (int, float, complex, Decimal, Fraction) → NUMERIC
    - enums (IntEnum and StrEnum included) → EXTERNAL
    - anything else, including non-class annotations → EXTERNAL
    """
    if not isinstance(type, builtins.type) or issubclass(type, Enum):
        return Kind.EXTERNAL
    if issubclass(type, bool):
        return Kind.BOOLEAN
    if issubclass(type, str):
        return Kind.STRING
    if issubclass(type, numbers.Number):
        return Kind.NUMERIC
    return Kind.EXTERNAL


def _unwrap(annotation):
    """
    Strip Annotated and Optional layers; collect Annotated metadata on the way.
    """
    metadata = []
    while True:
        origin = typing.get_origin(annotation)
        if origin is typing.Annotated:
            annotation, *extras = typing.get_args(annotation)
            metadata.extend(extras)
        elif origin in (typing.Union, UnionType):
            members = [member for member in typing.get_args(annotation) if member is not NoneType]
            if len(members) != 1:
                return annotation, metadata
            annotation, = members
        else:
            return annotation, metadata


class ParameterSpec(metaclass=ReflectiveType):
    """
    Immutable description of one declared handler parameter.

    Properties
    - name: the parameter name (used in "missing required argument" reports).
    - type: the declared type after unwrapping.
    - default: the declared default, or Unset when the parameter has none.
    - option: the Option marker, or Unset for non-option parameters.
    - kind: the inspect.Parameter kind; KEYWORD_ONLY parameters are passed by
      keyword when the handler is invoked.
    - has_default / tag: derived conveniences.
    """

    __introspectable__ = (
        "name",
        "type",
        "default",
        "option",
        "kind",
    )

    __displayable__ = (
        "name",
        "type",
        "default",
        "option",
    )

    __verbatim__ = ("default",)

    def __new__(cls, name, /, type=str, default=Unset, option=Unset, kind=Parameter.POSITIONAL_OR_KEYWORD):
        if not isinstance(name, str):
            raise TypeError(f"{cls.__typename__} 'name' must be a string")
        elif not name.isidentifier():
            raise ValueError(f"{cls.__typename__} 'name' must be a valid identifier")
        if not isinstance(option, Option | Unset):
            raise TypeError(f"{cls.__typename__} 'option' must be an option marker")
        if kind in (Parameter.VAR_POSITIONAL, Parameter.VAR_KEYWORD):
            raise ValueError(f"{cls.__typename__} 'kind' cannot be variadic")

        return populate(super().__new__(cls), {
            "name": name,
            "type": type,
            "default": default,
            "option": option,
            "kind": kind,
        })

    @property
    def has_default(self):
        return self.default is not Unset

    @property
    def tag(self):
        return kindof(self.type)

    @classmethod
    def from_parameter(cls, parameter, /):
        """
        Build a spec from an inspect.Parameter (annotations already evaluated).

        An Option found in the default slot wins over the declared default and
        contributes its own default; an Option in Annotated metadata leaves the
        declared default in place. Declaring both is an error.
        """
        annotation, metadata = _unwrap(parameter.annotation)
        options = [extra for extra in metadata if isinstance(extra, Option)]
        default = parameter.default

        if isinstance(default, Option):
            options.append(default)
            default = default.default
        elif default is Parameter.empty:
            default = Unset

        if len(options) > 1:
            raise TypeError(f"{cls.__typename__} parameter {parameter.name!r} declares more than one option")

        if annotation is Parameter.empty:
            if default is not Unset and default is not None and kindof(builtins.type(default)) is not Kind.EXTERNAL:
                annotation = builtins.type(default)
            else:
                annotation = str

        return cls(
            parameter.name,
            type=annotation,
            default=default,
            option=options[0] if options else Unset,
            kind=parameter.kind,
        )


def reflect(handler, /):
    """
    Derive the parameter specs of a handler from its signature.

    String annotations are evaluated (eval_str=True); variadic *args and
    **kwargs are not parameters and are skipped.
    """
    try:
        signature = inspect.signature(handler, eval_str=True)
    except TypeError:
        raise TypeError("reflect() argument must be callable") from None
    except ValueError:
        raise ValueError("reflect() argument must be an inspectable callable") from None

    return tuple(
        ParameterSpec.from_parameter(parameter)
        for parameter in signature.parameters.values()
        if parameter.kind not in (Parameter.VAR_POSITIONAL, Parameter.VAR_KEYWORD)
    )


class Positional(metaclass=ReflectiveType):
    """
    Role: bound from the next free positional token.
    """
    __introspectable__ = ()

    def __new__(cls):
        return super().__new__(cls)


class Named(metaclass=ReflectiveType):
    """
    Role: bound from "--alias [value]".
    """
    __introspectable__ = (
        "alias",
        "descr",
    )
    __match_args__ = ("alias", "descr")

    def __new__(cls, alias, /, descr=None):
        if not isinstance(alias, str) or not alias.startswith("--"):
            raise ValueError(f"{cls.__typename__} 'alias' must be a '--' prefixed string")
        return populate(super().__new__(cls), {
            "alias": alias,
            "descr": descr,
        })


class Injected(metaclass=ReflectiveType):
    """
    Role: resolved through the resolver, never from tokens.
    """
    __introspectable__ = ()

    def __new__(cls):
        return super().__new__(cls)


def aliasof(spec, /):
    """
    Return the "--" prefixed alias addressing an option parameter.
    """
    return "--" + coalesce(spec.option.name, kebabize(spec.name))


def classify(spec, /):
    """
    Return the role of a parameter spec.

    EXTERNAL is the single discriminator for injection: option metadata on an
    external parameter does not make it named.
    """
    if spec.tag is Kind.EXTERNAL:
        return Injected()
    if spec.option is not Unset:
        return Named(aliasof(spec), spec.option.descr)
    return Positional()


def parse_boolean(token, /):
    """
    Strict boolean literal parsing: "true"/"false" in any case, surrounding
    whitespace ignored. Anything else is Unset.
    """
    return {"true": True, "false": False}.get(token.strip().lower(), Unset)


def convert(token, type, /):
    """
    Convert one token into the declared type, or return Unset.

    Strings pass through the type itself (so str subclasses are honoured),
    booleans use parse_boolean, numbers are built by calling the type on the
    token (int("12"), Decimal("1.5"), ...). Any failure of that call is
    swallowed into Unset; the defaulting pass decides what a missing value
    means. External types are never converted from tokens.
    """
    if not isinstance(token, str):
        raise TypeError("convert() first argument must be a string")

    match kindof(type):
        case Kind.BOOLEAN:
            return parse_boolean(token)
        case Kind.STRING | Kind.NUMERIC:
            try:
                return type(token)
            except (ValueError, TypeError, ArithmeticError):
                return Unset
        case _:
            raise TypeError(f"convert() cannot build {type!r} from a token")


__all__ = (
    "Option",
    "Kind",
    "kindof",
    "ParameterSpec",
    "reflect",
    "Positional",
    "Named",
    "Injected",
    "aliasof",
    "classify",
    "parse_boolean",
    "convert",
)
