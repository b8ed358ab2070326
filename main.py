from typing import Annotated

from commanda import *

__prog__ = "commanda-demo"


class GreetingService:
    def say_hello(self):
        print("Hello from GreetingService!")

    async def say_hello_async(self, name):
        print(f"Hello {name} from async service!")


class Maintenance:
    """
    Commands discovered by add_commands(): "cleanup" and "status".
    """

    def __init__(self):
        self.greeter = GreetingService()

    def cleanup(self, target: str, dry_run: bool = Option(descr="only list what would go")):
        """Remove build leftovers."""
        print(f"{'would remove' if dry_run else 'removing'} {target}")

    @staticmethod
    def status(verbose: Annotated[bool, Option("v")] = False):
        """Print the service status."""
        print("all good" + (" (verbose)" if verbose else ""))


builder = CommandHostBuilder()
builder.services.add_singleton(GreetingService)


@builder.add_command("greet", descr="Say hello")
def greet(name):
    print(f"Hello, {name}!")


@builder.add_command("sum")
def add(a: int, b: int):
    print(a + b)


builder.add_command("hello", lambda svc: svc.say_hello(), parameters=[ParameterSpec("svc", type=GreetingService)])


@builder.add_command("hello-async")
async def hello_async(svc: GreetingService, name: str):
    await svc.say_hello_async(name)


builder.add_commands(Maintenance)


if __name__ == '__main__':
    raise SystemExit(builder.build().run())
