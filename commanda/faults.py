"""
Commanda faults: user-input errors, configuration errors, and their rendering.

Scope
- FaultCode: stable numeric identifiers for every user-facing fault.
- CommandException: base for user-input errors (unknown command, missing
  required argument/option, empty registry). These are caught at the dispatch
  boundary, rendered with rich on the error console, and turned into exit
  status 1. The handler is never invoked when one of them is raised.
- ConfigurationError: base for programming mistakes in registration
  (unsupported handler shape, duplicate names in a unique registry, a scanned
  service that cannot be resolved). These propagate; nothing catches them.

Rendering
- A fault renders as a header "[ prog — code | title ]", the message, and a
  "→ hint" line. Styles come from the palette below and may be overridden by a
  __styles__ mapping on __main__. With colorful=False no style is applied.
- Codes may be relabelled by a __codes__ mapping on __main__ (see normalize()).
"""
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Group
from rich.text import Text

from .utils import Unset, coalesce


class FaultCode(IntEnum):
    """
    canonical fault codes (stable identifiers).

    grouping
    - routing (1110x): NO_COMMANDS, UNKNOWN_COMMAND
    - binding (1112x): MISSING_ARGUMENT, MISSING_OPTION
    - configuration (1190x): UNSUPPORTED_HANDLER, DUPLICATED_COMMAND,
      UNRESOLVABLE_SERVICE, DUPLICATED_OPTION
    """
    # --- routing errors ---
    NO_COMMANDS                 = 11100
    UNKNOWN_COMMAND             = 11101

    # --- binding errors ---
    MISSING_ARGUMENT            = 11121
    MISSING_OPTION              = 11122

    # --- configuration errors ---
    UNSUPPORTED_HANDLER         = 11901
    DUPLICATED_COMMAND          = 11902
    UNRESOLVABLE_SERVICE        = 11903
    DUPLICATED_OPTION           = 11904

    def normalize(self):
        """
        return the label shown for this code.

        the host application can provide a __codes__ mapping in __main__ to
        relabel codes; without one, the numeric value is used.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


class CommandException(Exception):
    """
    Base class of user-input errors.

    Subclasses fix the code, title and hint; instances carry the message and
    rendering options (prog, colorful) supplied by whoever raises or reports
    them. Options are read-only once set.
    """
    code = Unset
    title = "command error"
    hint = Unset

    def __init__(self, message, /, **options):
        assert isinstance(message, str)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    def configure(self, **options):
        """
        Return a copy carrying extra rendering options (later keys win).
        """
        clone = type(self)(self.message, **{**self.options, **options})
        clone.__cause__ = self.__cause__
        return clone

    def __rich__(self):
        main = __import__("__main__")
        colorful = self.options.get("colorful", False)

        styles = defaultdict(str, {
            # header parts
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #00E5FF",  # neon cyan fault code
            "error-title": "bold #FF4DA6",  # pinky title

            # body
            "error-message": "#C8C8D0",  # soft light gray message
            "hint-arrow": "#9CE19C dim",  # green arrow
            "hint": "italic #9CE19C",  # green hint text
        } | getattr(main, "__styles__", {}))

        def text(fragment, style):
            if not fragment:
                return Text("")
            return Text(str(fragment), styles[style] if colorful else "")

        prog = self.options.get("prog", getattr(main, "__prog__", "commanda"))

        header = Text.assemble(
            "[ ",
            text(prog, "prog-name"),
            " — ",
            text(self.code.normalize() if self.code else "", "code"),
            " | ",
            text(self.title.title(), "error-title"),
            " ]",
        )
        renders = [header, text(self.message, "error-message")]
        if hint := coalesce(self.options.get("hint", Unset), self.hint):
            renders.append(Text.assemble(text(" → ", "hint-arrow"), text(hint, "hint")))
        return Group(*renders)


class NoCommandsError(CommandException):
    code = FaultCode.NO_COMMANDS
    title = "no commands"
    hint = "register at least one command before running the host"


class UnknownCommandError(CommandException):
    code = FaultCode.UNKNOWN_COMMAND
    title = "unknown command"
    hint = "pick one of the commands listed below"


class MissingArgumentError(CommandException):
    code = FaultCode.MISSING_ARGUMENT
    title = "missing argument"
    hint = "positional arguments are filled in declaration order"


class MissingOptionError(CommandException):
    code = FaultCode.MISSING_OPTION
    title = "missing option"
    hint = "pass the option followed by its value"


class ConfigurationError(Exception):
    """
    Base class of registration mistakes; never caught by the dispatcher.
    """
    code = Unset


class UnsupportedHandlerError(ConfigurationError, TypeError):
    code = FaultCode.UNSUPPORTED_HANDLER


class DuplicateCommandError(ConfigurationError, ValueError):
    code = FaultCode.DUPLICATED_COMMAND


class ServiceResolutionError(ConfigurationError, LookupError):
    code = FaultCode.UNRESOLVABLE_SERVICE


class DuplicateOptionError(ConfigurationError, ValueError):
    code = FaultCode.DUPLICATED_OPTION


__all__ = (
    "FaultCode",
    "CommandException",
    "NoCommandsError",
    "UnknownCommandError",
    "MissingArgumentError",
    "MissingOptionError",
    "ConfigurationError",
    "UnsupportedHandlerError",
    "DuplicateCommandError",
    "ServiceResolutionError",
    "DuplicateOptionError",
)
