"""
Commanda help listing.

Layout (one line per command, commands sorted by name):

    Available commands:
      deploy image [--replicas : pod count] [--force]    roll out an image
      sum a b
    Use --help for detailed help if supported.

Named options render as "[--alias : descr]" ("[--alias]" without a
description), positional parameters as their bare name. Injected parameters
are not user input and are left out.

Palette keys
- title, command-name, option-name, argument-name, description, footer

Customization
- A __styles__ mapping on __main__ overrides palette entries.
- With colorful=False nothing is styled.
"""
from collections import defaultdict

from rich.console import Group
from rich.text import Text

from .arguments import Named, Positional, classify


class HelpRenderer:
    """
    Render a registry listing on a rich console.
    """

    def __init__(self, console, /, *, colorful=False):
        self._console = console
        self._colorful = bool(colorful)

    def _styles(self):
        return defaultdict(str, {
            "title": "bold #FFFFFF",  # white header
            "command-name": "bold #36C5F0",  # sky-blue commands
            "option-name": "bold #00E6FF",  # cyan options
            "argument-name": "bold #FFD600",  # amber positionals
            "description": "#9CA3AF",  # muted gray
            "footer": "#737373",  # dim footer gray
        } | getattr(__import__("__main__"), "__styles__", {}))

    def lines(self, registry, /):
        """
        Return the listing as a list of rich Text lines.
        """
        styles = self._styles()

        def text(fragment, style):
            return Text(str(fragment), styles[style] if self._colorful else "")

        lines = [text("Available commands:", "title")]
        for descriptor in sorted(registry, key=lambda x: x.name):
            parts = [text(descriptor.name, "command-name")]
            for parameter in descriptor.parameters:
                match classify(parameter):
                    case Named(alias=alias, descr=descr):
                        parts.append(Text.assemble(
                            "[",
                            text(alias, "option-name"),
                            text(f" : {descr}", "description") if descr else "",
                            "]",
                        ))
                    case Positional():
                        parts.append(text(parameter.name, "argument-name"))

            line = Text("  ") + Text(" ").join(parts)
            if descriptor.descr:
                line.append_text(Text("    ") + text(descriptor.descr, "description"))
            lines.append(line)
        lines.append(text("Use --help for detailed help if supported.", "footer"))
        return lines

    def render(self, registry, /):
        # One line per command whatever the terminal width.
        self._console.print(Group(*self.lines(registry)), soft_wrap=True)


__all__ = (
    "HelpRenderer",
)
