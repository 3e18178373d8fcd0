from dataclasses import dataclass, field

import click

from duplex import Command, Commander, Shell, tag
from duplex.logging_setup import init_logger

__prog__ = "directory"


@dataclass
class Address:
    city: str = tag("", long="city", hint="City")
    zip: int = tag(0, long="zip", hint="Postal code")


@dataclass
class Lookup:
    name: str = tag("", valid="required", long="name", short="n", hint="Name")
    limit: int = tag(0, long="limit", short="l", hint="Maximum results")
    address: Address = field(default_factory=Address)


@dataclass
class Match:
    xml_name: str = "match"
    name: str = ""
    city: str = ""
    limit: int = 0


def lookup(request, response):
    response.name = request.name
    response.city = request.address.city
    response.limit = request.limit


root = click.Group("directory")
commander = Commander(root)
commander.add(Command("lookup", Lookup(), Match(), short_desc="look a person up", request_handler=lookup))


@root.command("shell")
def shell():
    """Start an interactive session."""
    session = Shell(prompt="directory> ")
    commander.register_shell(session)
    session.run()


if __name__ == '__main__':
    init_logger()
    root()
