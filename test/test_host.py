"""
Host tests (builder registration surface, scanning integration, logging).

Conventions
- Test method names follow CamelCase per project convention.
"""
import io
import logging
import unittest
from unittest import TestCase

from rich.console import Console
from rich.logging import RichHandler

from commanda import CommandHost, CommandHostBuilder, CommandRegistry, Option, ParameterSpec, configure_logging
from commanda.faults import DuplicateCommandError


def console():
    return Console(file=io.StringIO(), color_system=None, width=200)


class Maintenance:
    calls = []

    def cleanup(self, target, dry_run: bool = Option()):
        """Remove build leftovers."""
        Maintenance.calls.append((target, dry_run))

    @staticmethod
    async def ping():
        Maintenance.calls.append("pong")


class HostBuilderTest(TestCase):

    def setUp(self):
        Maintenance.calls.clear()
        self.stdout = console()
        self.stderr = console()
        self.builder = CommandHostBuilder(prog="tool", stdout=self.stdout, stderr=self.stderr)

    def testRegistryIsAService(self):
        self.assertIs(self.builder.services.resolve(CommandRegistry), self.builder.registry)

    def testAddCommandChains(self):
        result = self.builder.add_command("a", lambda: None).add_command("b", lambda: None)
        self.assertIs(result, self.builder)
        self.assertEqual(len(self.builder.registry), 2)

    def testAddCommandDecorator(self):
        @self.builder.add_command("greet", descr="Say hello")
        def greet(name):
            return name

        self.assertEqual(greet("Ada"), "Ada")
        self.assertEqual(self.builder.registry.find("greet").descr, "Say hello")

    def testAddCommandsRegistersTransientService(self):
        self.builder.add_commands(Maintenance)
        self.assertIn(Maintenance, self.builder.services)
        self.assertEqual({descriptor.name for descriptor in self.builder.registry}, {"cleanup", "ping"})

    def testScannedCommandsRun(self):
        host = self.builder.add_commands(Maintenance).build()
        self.assertEqual(host.run(["cleanup", "dist", "--dry-run"]), 0)
        self.assertEqual(host.run(["ping"]), 0)
        self.assertEqual(Maintenance.calls, [("dist", True), "pong"])

    def testExistingServiceRegistrationIsKept(self):
        instance = Maintenance()
        self.builder.services.add_singleton(Maintenance, instance)
        self.builder.add_commands(Maintenance)
        self.assertIs(self.builder.services.resolve(Maintenance), instance)

    def testBuildSealsRegistry(self):
        self.builder.add_command("a", lambda: None)
        host = self.builder.build()
        self.assertIsInstance(host, CommandHost)
        self.assertTrue(host.registry.sealed)
        with self.assertRaises(RuntimeError):
            self.builder.add_command("b", lambda: None)

    def testBuildOnlyOnce(self):
        self.builder.build()
        with self.assertRaises(RuntimeError):
            self.builder.build()

    def testUniqueRejectsDuplicates(self):
        builder = CommandHostBuilder(unique=True)
        builder.add_command("a", lambda: None)
        with self.assertRaises(DuplicateCommandError):
            builder.add_command("a", lambda: None)

    def testHostRunsPrompt(self):
        calls = []
        self.builder.add_command("sum", lambda a, b: calls.append(a + b), parameters=[
            ParameterSpec("a", type=int),
            ParameterSpec("b", type=int),
        ])
        host = self.builder.build()
        self.assertEqual(host.run("sum 2 5"), 0)
        self.assertEqual(calls, [7])

    def testRejectsNonResolverServices(self):
        with self.assertRaises(TypeError):
            CommandHostBuilder(services=object())


class LoggingTest(TestCase):

    def tearDown(self):
        package = logging.getLogger("commanda")
        for handler in list(package.handlers):
            if isinstance(handler, RichHandler):
                package.removeHandler(handler)
        package.setLevel(logging.NOTSET)

    def testConfigureLoggingInstallsOneRichHandler(self):
        configure_logging(logging.INFO, console())
        handler = configure_logging(logging.DEBUG, console())
        handlers = [h for h in logging.getLogger("commanda").handlers if isinstance(h, RichHandler)]
        self.assertEqual(handlers, [handler])
        self.assertEqual(logging.getLogger("commanda").level, logging.DEBUG)

    def testConfiguredLoggingShowsRegistration(self):
        output = console()
        configure_logging(logging.DEBUG, output)
        builder = CommandHostBuilder()
        builder.add_command("greet", lambda name: None)
        self.assertIn("registered command 'greet'", output.file.getvalue())


if __name__ == '__main__':
    unittest.main()
