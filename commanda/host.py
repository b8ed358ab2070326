"""
Commanda host: the builder applications use to declare and run commands.

A host owns one CommandRegistry and one resolver (a ServiceContainer unless
the application brings its own). The builder collects registrations; build()
seals the registry and returns a CommandHost whose run()/run_async() hand the
prompt to a Dispatcher.

Quick start
    builder = CommandHostBuilder(prog="demo")
    builder.services.add_singleton(GreetingService)

    @builder.add_command("greet", descr="Say hello")
    def greet(name):
        print(f"Hello, {name}!")

    builder.add_commands(Maintenance)
    raise SystemExit(builder.build().run())

Logging
- The package logs through the standard logging module and stays silent by
  default. configure_logging() (or verbose=True on the builder) attaches a
  rich handler to the "commanda" logger.
"""
import logging

from rich.console import Console
from rich.logging import RichHandler

from .dispatch import Dispatcher
from .registry import CommandDescriptor, CommandRegistry
from .services import Resolver, ServiceContainer
from .utils import Unset, coalesce

logger = logging.getLogger(__name__)


def configure_logging(level=logging.DEBUG, /, console=Unset):
    """
    Route the package's log records to a rich handler on stderr.

    Calling it again replaces the handler installed by a previous call.
    """
    package = logging.getLogger(__name__.partition(".")[0])
    for handler in list(package.handlers):
        if isinstance(handler, RichHandler):
            package.removeHandler(handler)

    handler = RichHandler(
        console=Console(stderr=True) if console is Unset else console,
        show_path=False,
        rich_tracebacks=True,
    )
    handler.setLevel(level)
    package.addHandler(handler)
    package.setLevel(level)
    return handler


class CommandHost:
    """
    A built host: a sealed registry plus the dispatcher that runs it.
    """

    def __init__(self, dispatcher, /):
        self.dispatcher = dispatcher

    @property
    def registry(self):
        return self.dispatcher.registry

    @property
    def services(self):
        return self.dispatcher.resolver

    def run(self, prompt=Unset, /):
        return self.dispatcher.run(prompt)

    async def run_async(self, prompt=Unset, /):
        return await self.dispatcher.run_async(prompt)


class CommandHostBuilder:
    """
    Collect commands and services, then build a CommandHost.

    Parameters (all keyword-only, all optional)
    - prog: program name shown in fault headers.
    - colorful: style help and faults.
    - unique: reject duplicate command names instead of shadowing them.
    - verbose: call configure_logging() with DEBUG level.
    - stdout / stderr: rich consoles for help and faults.
    - services: a Resolver to use instead of a fresh ServiceContainer. Only a
      ServiceContainer gets the registry and scanned classes registered.
    """

    def __init__(
            self,
            *,
            prog=Unset,
            colorful=Unset,
            unique=Unset,
            verbose=Unset,
            stdout=Unset,
            stderr=Unset,
            services=Unset,
    ):
        services = ServiceContainer() if services is Unset else services
        if not isinstance(services, Resolver):
            raise TypeError("CommandHostBuilder() 'services' must expose a resolve() method")

        self._options = {
            "prog": prog,
            "colorful": colorful,
            "stdout": stdout,
            "stderr": stderr,
        }
        self._services = services
        self._registry = CommandRegistry(unique=coalesce(unique, False))
        self._built = False

        if coalesce(verbose, False):
            configure_logging(logging.DEBUG)
        if isinstance(services, ServiceContainer):
            services.add_singleton(CommandRegistry, self._registry)

    @property
    def services(self):
        return self._services

    @property
    def registry(self):
        return self._registry

    def add_command(self, name, handler=Unset, /, descr=Unset, parameters=Unset):
        """
        Register a handler, or return a decorator registering the decorated one.

        The direct form returns the builder for chaining; the decorator form
        returns the handler unchanged.
        """
        if handler is Unset:
            return self._registry.register(name, Unset, descr, parameters)
        self._registry.add(CommandDescriptor(name, handler, descr, parameters))
        return self

    def add_commands(self, cls, /):
        """
        Register every eligible method of cls (see commanda.registry.scan).

        A class declaring instance methods is registered as a transient
        service unless the container already knows it.
        """
        instanced = self._registry.include(cls, self._services)
        if instanced and isinstance(self._services, ServiceContainer) and cls not in self._services:
            self._services.add_transient(cls)
            logger.debug("registered %s as a transient service for its commands", cls.__qualname__)
        return self

    def build(self):
        """
        Seal the registry and return the host. A builder builds once.
        """
        if self._built:
            raise RuntimeError("CommandHostBuilder.build() was already called")
        self._built = True
        self._registry.seal()
        return CommandHost(Dispatcher(self._registry, self._services, **self._options))


__all__ = (
    "configure_logging",
    "CommandHost",
    "CommandHostBuilder",
)
