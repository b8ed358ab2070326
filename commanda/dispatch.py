"""
Commanda dispatcher: select a command, bind its arguments, invoke its handler.

Run sequence for one prompt
1. tokenize(prompt): the raw tokens. The first token names the command.
2. Routing
   • empty registry → NoCommandsError;
   • no tokens → the help listing, exit status 0;
   • empty or unregistered name → UnknownCommandError (followed by help).
3. Binding (commanda.binding): parse the remaining tokens and apply defaults.
4. Injection: every external slot receives resolver.resolve(type), which is
   None when the resolver has nothing for that type.
5. Invocation, by handler shape:
   (a) the handler declares as many non-variadic parameters as the vector has
       slots: positional slots go positionally, keyword-only ones by keyword;
   (b) the handler declares exactly two parameters and the first is annotated
       with a Resolver type: handler(resolver, vector);
   anything else raises UnsupportedHandlerError.
   An awaitable result is awaited before the run completes.

Exit status
- 0 after help or after the handler completes;
- 1 after any CommandException, which is rendered on the error console.
Configuration errors (UnsupportedHandlerError, ServiceResolutionError, ...)
propagate to the caller.
"""
import asyncio
import inspect
import logging
import os
import shlex
import sys
from inspect import Parameter

from rich.console import Console

from .binding import bind
from .faults import CommandException, NoCommandsError, UnknownCommandError, UnsupportedHandlerError
from .help import HelpRenderer
from .services import Resolver
from .utils import Unset, coalesce

logger = logging.getLogger(__name__)


def tokenize(prompt=Unset, /):
    """
    Normalize a prompt into a list of tokens.

    - Unset: the process arguments (sys.argv[1:]);
    - str: split with shell rules (shlex.split);
    - iterable of str: taken as-is. Tokens are never trimmed or dropped.
    """
    if prompt is Unset:
        return sys.argv[1:]
    if isinstance(prompt, str):
        return shlex.split(prompt)

    try:
        tokens = list(prompt)
    except TypeError:
        raise TypeError("prompt must be a string or an iterable of strings") from None
    if not all(isinstance(token, str) for token in tokens):
        raise TypeError("prompt must be a string or an iterable of strings")
    return tokens


def _signature(handler):
    try:
        return inspect.signature(handler, eval_str=True)
    except (TypeError, ValueError):
        raise UnsupportedHandlerError(f"cannot inspect the signature of {handler!r}") from None


def _is_resolver(annotation):
    return isinstance(annotation, type) and issubclass(annotation, Resolver)


async def _await(awaitable):
    return await awaitable


class Dispatcher:
    """
    Run prompts against a registry, resolving services through a resolver.

    Parameters
    - registry: CommandRegistry
    - resolver: Resolver
    - prog: Unset | str
      Program name shown in fault headers. Defaults to __prog__ on __main__,
      then to the basename of sys.argv[0].
    - colorful: Unset | bool
      Style help and faults (default False).
    - stdout / stderr: Unset | rich.console.Console
      Help goes to stdout, faults to stderr.
    """

    def __init__(self, registry, resolver, /, *, prog=Unset, colorful=Unset, stdout=Unset, stderr=Unset):
        if not isinstance(resolver, Resolver):
            raise TypeError("Dispatcher() 'resolver' must expose a resolve() method")

        self.registry = registry
        self.resolver = resolver
        self.prog = coalesce(prog, getattr(__import__("__main__"), "__prog__", Unset))
        if self.prog is Unset:
            self.prog = os.path.basename(sys.argv[0]) if sys.argv and sys.argv[0] else "commanda"
        self.colorful = coalesce(colorful, False)
        self.stdout = Console() if stdout is Unset else stdout
        self.stderr = Console(stderr=True) if stderr is Unset else stderr
        self.help = HelpRenderer(self.stdout, colorful=self.colorful)

    def report(self, fault, /):
        """
        Render a fault on the error console; unknown commands also get help.
        """
        self.stderr.print(fault.configure(prog=self.prog, colorful=self.colorful))
        if isinstance(fault, UnknownCommandError):
            self.help.render(self.registry)
        return 1

    def launch(self, tokens, /):
        """
        Route, bind, inject and invoke; return the handler's result.

        Returns Unset when only the help listing was shown.
        """
        if not self.registry:
            raise NoCommandsError("No commands registered.")

        if not tokens:
            self.help.render(self.registry)
            return Unset

        name, *tokens = tokens
        if not name:
            raise UnknownCommandError("missing command name")
        if (descriptor := self.registry.find(name)) is None:
            raise UnknownCommandError(f"unknown command {name!r}")

        logger.debug("dispatching %r with %d token(s)", name, len(tokens))
        plan, vector = bind(descriptor, tokens)
        for index in plan.external:
            vector[index] = self.resolver.resolve(descriptor.parameters[index].type)

        return self.invoke(descriptor, vector)

    def invoke(self, descriptor, vector, /):
        """
        Call the handler of descriptor with a complete argument vector.
        """
        handler = descriptor.handler
        parameters = [
            parameter for parameter in _signature(handler).parameters.values()
            if parameter.kind not in (Parameter.VAR_POSITIONAL, Parameter.VAR_KEYWORD)
        ]

        if len(parameters) == len(vector):
            logger.debug("invoking %r with its argument vector", descriptor.name)
            args, kwargs = [], {}
            for parameter, value in zip(parameters, vector):
                if parameter.kind is Parameter.KEYWORD_ONLY:
                    kwargs[parameter.name] = value
                else:
                    args.append(value)
            return handler(*args, **kwargs)

        if len(parameters) == 2 and _is_resolver(parameters[0].annotation):
            logger.debug("invoking %r with the resolver and the raw vector", descriptor.name)
            return handler(self.resolver, vector)

        raise UnsupportedHandlerError(
            f"command {descriptor.name!r}: handler takes {len(parameters)} parameter(s) "
            f"but {len(vector)} were declared"
        )

    def run(self, prompt=Unset, /):
        """
        Run one prompt to completion and return the exit status.

        Awaitable results are driven with asyncio.run; inside a running event
        loop use run_async() instead.
        """
        try:
            result = self.launch(tokenize(prompt))
            if inspect.isawaitable(result):
                asyncio.run(_await(result))
        except CommandException as fault:
            return self.report(fault)
        return 0

    async def run_async(self, prompt=Unset, /):
        """
        Coroutine form of run().
        """
        try:
            result = self.launch(tokenize(prompt))
            if inspect.isawaitable(result):
                await result
        except CommandException as fault:
            return self.report(fault)
        return 0


__all__ = (
    "tokenize",
    "Dispatcher",
)
