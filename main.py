from rich.pretty import pprint

from argstream import *

registry = Registry(command="copy", descr="Copy files to a destination, the long way round.")
registry.declare([
    {"name": "destination", "kind": "path", "aliases": ["-d"], "required": True, "target": "destination"},
    {"name": "copies", "kind": "integer", "aliases": ["-n"], "default": 1, "target": "copies"},
    {"name": "mode", "kind": "enum", "choices": ["fast", "safe"], "default": "safe", "target": "mode"},
    {"name": "verbose", "kind": "flag", "aliases": ["-v"], "target": "verbose"},
    {"name": "source", "kind": "path", "positional": True, "list": True, "target": "sources"},
])


class Settings:
    pass


if __name__ == '__main__':
    if (result := registry.run()) is not None:
        pprint(result.populate(Settings()).__dict__)
