"""
Argstream registries: collect specs, compile lookup indices, parse and run.

What this module provides
- Registry: an insertion-ordered set of specs keyed by canonical name, plus the
  built-in help spec ("--help", "-h", "-?"). Specs are added one at a time with
  register(), through the factory methods (string(), integer(), ...) or from a
  declarative table with declare().

- CompiledRegistry: the immutable result of Registry.compile(). It owns the
  long-name index (case-folded), the short-name index (exact characters) and
  the positional slot, and is the only thing the parser accepts.

- Registry.parse(argv): compile, parse and validate in one call.
- Registry.run(argv): the top-level routine for a program's main block; it
  renders faults and help screens instead of raising.

Compile rules
- A long name (case-insensitive) or a short name may belong to one spec only.
- At most one spec may be positional.
- compile() is idempotent, and its failure is permanent: once a compile has
  been attempted the registry no longer accepts specs, and a failed compile
  re-raises the same CompileError on every later call.

Quick start
    from argstream import Registry

    registry = Registry(command="tool", descr="Copy things around.")
    count = registry.integer("count", "-c", default=1, descr="how many copies")
    verbose = registry.flag("verbose", "-v")
    source = registry.path("source", positional=True, required=True)

    if (result := registry.run()) is not None:
        print(result.value(count), result.value(verbose), result.value(source))
"""
import os.path
import shlex
import sys
import warnings
from collections.abc import Iterable, Mapping
from types import MappingProxyType
from warnings import catch_warnings

from rich.console import Console

from . import specs as _specs
from .helper import render_help
from .faults import *
from .specs import Kind, Spec
from .utils import *


class CompiledRegistry:
    """
    Immutable, indexed view of a registry.

    Built by Registry.compile(); never instantiate it directly. Lookups return
    None for names that are not registered.
    """

    def __init__(self, registry, /):
        longs = {}
        shorts = {}
        positional = None

        for spec in registry.specs.values():
            for name in spec.longs:
                if (other := longs.get(key := casefold(name))) is not None:
                    raise DuplicateLongNameError(
                        "long name '--%s' of option %r clashes with option %r" % (name, spec.name, other.name),
                        spec=spec,
                        other=other,
                        token="--" + name,
                        docs=getdoc(FaultCode.DUPLICATE_LONG_NAME)
                    )
                longs[key] = spec

            for name in spec.shorts:
                if (other := shorts.get(name)) is not None:
                    raise DuplicateShortNameError(
                        "short name '-%s' of option %r clashes with option %r" % (name, spec.name, other.name),
                        spec=spec,
                        other=other,
                        token="-" + name,
                        docs=getdoc(FaultCode.DUPLICATE_SHORT_NAME)
                    )
                shorts[name] = spec

            if spec.positional:
                if positional is not None:
                    raise DuplicatePositionalError(
                        "options %r and %r are both positional" % (positional.name, spec.name),
                        spec=spec,
                        other=positional,
                        docs=getdoc(FaultCode.DUPLICATE_POSITIONAL)
                    )
                positional = spec

        self._registry = registry
        self._specs = MappingProxyType(dict(registry.specs))
        self._longs = MappingProxyType(longs)
        self._shorts = MappingProxyType(shorts)
        self._positional = positional

    @property
    def registry(self):
        """The Registry this index was compiled from."""
        return self._registry

    @property
    def specs(self):
        """Read-only mapping of canonical name to spec, in registration order."""
        return self._specs

    @property
    def longs(self):
        """Read-only mapping of case-folded long name to spec."""
        return self._longs

    @property
    def shorts(self):
        """Read-only mapping of short character to spec."""
        return self._shorts

    @property
    def help(self):
        return self._registry.help

    @property
    def command(self):
        return self._registry.command

    @property
    def descr(self):
        return self._registry.descr

    @property
    def fancy(self):
        return self._registry.fancy

    @property
    def colorful(self):
        return self._registry.colorful

    def lookup_long(self, name, /):
        """
        Spec owning the long name `name` (without dashes), case-insensitively.
        """
        return self._longs.get(casefold(name))

    def lookup_short(self, char, /):
        """
        Spec owning the short character `char` (exact match).
        """
        return self._shorts.get(char)

    def lookup_positional(self):
        return self._positional

    def lookup(self, name, /):
        """
        Spec registered under the canonical name `name`.
        """
        return self._specs.get(name)

    def __contains__(self, spec):
        return isinstance(spec, Spec) and self._specs.get(spec.name) is spec

    def __iter__(self):
        return iter(self._specs.values())

    def __len__(self):
        return len(self._specs)

    def __repr__(self):
        return "CompiledRegistry(%s)" % ", ".join(map(repr, self._specs))


def _registering(factory):
    # Registry method wrapping a module-level factory: build, register, return.
    def method(self, name, /, *aliases, **options):
        return self.register(factory(name, *aliases, **options))
    method.__name__ = method.__qualname__ = factory.__name__
    method.__doc__ = "Build a %s spec, register it and return it." % factory.__name__
    return method


class Registry:
    """
    Mutable collection of specs for one program.

    Configuration (keyword arguments)
    - command: program name shown in usage and fault headers
      (default: the basename of sys.argv[0]).
    - descr: one-paragraph program description for the help screen.
    - fancy: draw help screens and faults inside panels.
    - colorful: style output with the palette (hosts may override the palette
      through a __styles__ mapping in __main__).
    """

    def __init__(self, *, command=Unset, descr=Unset, fancy=False, colorful=True):
        if not isinstance(command, str | Unset):
            raise TypeError("Registry() 'command' must be a string")
        if not isinstance(descr, str | Unset | None):
            raise TypeError("Registry() 'descr' must be a string")

        self._command = coalesce(command, os.path.basename(sys.argv[0]) or "argstream")
        self._descr = coalesce(descr)
        self._fancy = bool(fancy)
        self._colorful = bool(colorful)
        self._specs = {}
        self._compiled = None
        self._failure = None
        self._attempted = False

        self._help = self.register(Spec(
            "help", "-h", "-?",
            kind=Kind.HELP,
            descr="Print an informative help message.",
        ))

    @property
    def command(self):
        return self._command

    @property
    def descr(self):
        return self._descr

    @property
    def fancy(self):
        return self._fancy

    @property
    def colorful(self):
        return self._colorful

    @property
    def help(self):
        """The built-in help spec."""
        return self._help

    @property
    def specs(self):
        """Read-only mapping of canonical name to spec, in registration order."""
        return MappingProxyType(self._specs)

    @property
    def compiled(self):
        """True once compile() has succeeded."""
        return self._compiled is not None

    def register(self, spec, /):
        """
        Add `spec` and return it.

        Raises
        - RegistryFrozenError: compile() was already attempted.
        - DuplicateSpecError: the spec already belongs to a registry, or its
          canonical name is taken here.
        """
        if not isinstance(spec, Spec):
            raise TypeError("register() argument must be a spec")

        if self._attempted:
            raise RegistryFrozenError(
                "cannot register option %r: the registry was already compiled" % spec.name,
                spec=spec,
                docs=getdoc(FaultCode.REGISTRY_FROZEN)
            )

        if spec.registry is not None:
            raise DuplicateSpecError(
                "option %r is already registered%s" % (
                    spec.name, " here" if spec.registry is self else " with another registry"
                ),
                hint="build a new spec for each registry",
                spec=spec,
                docs=getdoc(FaultCode.DUPLICATE_SPEC)
            )

        if spec.name in self._specs:
            raise DuplicateSpecError(
                "canonical name %r is already taken" % spec.name,
                hint="pick another name and keep the old one as an alias if needed",
                spec=spec,
                other=self._specs[spec.name],
                docs=getdoc(FaultCode.DUPLICATE_SPEC)
            )

        spec._registry = self  # NOQA: ownership is recorded by the registry only
        self._specs[spec.name] = spec
        return spec

    string = _registering(_specs.string)
    integer = _registering(_specs.integer)
    double = _registering(_specs.double)
    boolean = _registering(_specs.boolean)
    flag = _registering(_specs.flag)
    enumeration = _registering(_specs.enumeration)
    path = _registering(_specs.path)
    uri = _registering(_specs.uri)
    date = _registering(_specs.date)
    custom = _registering(_specs.custom)

    def declare(self, table, /):
        """
        Register one spec per row of a declarative table and return them.

        Each row is a mapping with a "name", an optional "kind" (default
        "string"), optional "aliases" (e.g. ["-o", "--out"]) and any other
        Spec keyword option:

            registry.declare([
                {"name": "output", "kind": "path", "aliases": ["-o"], "target": "output"},
                {"name": "verbose", "kind": "flag", "aliases": ["-v"]},
            ])

        An unknown kind raises UnconstructibleKindError.
        """
        if isinstance(table, str | Mapping) or not isinstance(table, Iterable):
            raise TypeError("declare() argument must be an iterable of mappings")

        declared = []
        for index, row in enumerate(table, 1):
            if not isinstance(row, Mapping):
                raise TypeError("declare() rows must be mappings")
            if "name" not in row:
                raise TypeError("declare() %s row has no 'name'" % ordinal(index))

            options = dict(row)
            name = options.pop("name")
            aliases = options.pop("aliases", ())
            if isinstance(aliases, str):
                aliases = (aliases,)

            try:
                kind = Kind.resolve(options.pop("kind", Kind.STRING))
            except ValueError:
                raise UnconstructibleKindError(
                    "unknown kind %r for option %r in %s row" % (row.get("kind"), name, ordinal(index)),
                    hint="use one of %s" % ", ".join(kind.value for kind in Kind),
                    kind=row.get("kind"),
                    docs=getdoc(FaultCode.UNCONSTRUCTIBLE_KIND)
                ) from None

            declared.append(self.register(Spec(name, *aliases, kind=kind, **options)))
        return declared

    def compile(self):
        """
        Build (once) and return the CompiledRegistry.

        Raises the CompileError of the first failed attempt on every call.
        """
        if self._failure is not None:
            raise self._failure
        if self._compiled is not None:
            return self._compiled

        self._attempted = True
        try:
            self._compiled = CompiledRegistry(self)
        except CompileError as error:
            self._failure = error
            raise
        return self._compiled

    def parse(self, argv=Unset, /):
        """
        Compile, parse `argv` and validate the result.

        `argv` is sys.argv[1:] when omitted, a shell-like string (split with
        shlex), or an iterable of strings. Validation is skipped when help was
        requested, so "--help" works even without the required options.
        """
        from .grammar import Parser

        result = Parser(self.compile()).parse(_tokenize(argv))
        if not result.help_requested:
            result.validate()
        return result

    def run(self, argv=Unset, /, *, console=Unset):
        """
        Parse `argv` the way a program's main block wants it.

        - On a ParseError, print the fault and the help screen, return None.
        - When help is requested, print the help screen, return None.
        - Otherwise return the ParseResult.

        Warnings raised while parsing are printed along with the outcome.
        CompileErrors are programming errors and propagate unchanged.
        """
        compiled = self.compile()
        console = Console(stderr=True) if console is Unset else console
        options = {
            "shell": True,
            "console": console,
            "prog": self._command,
            "fancy": self._fancy,
            "colorful": self._colorful,
        }

        with catch_warnings(record=True) as caught:
            warnings.simplefilter("always", ArgstreamWarning)
            try:
                result = self.parse(argv)
            except ParseError as error:
                result = error

        for warning in caught:
            if isinstance(warning.message, ArgstreamWarning):
                trigger(warning.message, **options)
            else:
                warnings.warn_explicit(warning.message, warning.category, warning.filename, warning.lineno)

        if isinstance(result, ParseError):
            trigger(result, **options)
            console.print()
            console.print(render_help(compiled, console=console))
            return None

        if result.help_requested:
            console.print(render_help(compiled, console=console))
            return None

        return result

    def __contains__(self, spec):
        return isinstance(spec, Spec) and self._specs.get(spec.name) is spec

    def __iter__(self):
        return iter(self._specs.values())

    def __len__(self):
        return len(self._specs)

    def __repr__(self):
        return "Registry(%s)" % ", ".join(map(repr, self._specs))


def _tokenize(argv):
    if argv is Unset:
        return sys.argv[1:]
    if isinstance(argv, str):
        return shlex.split(argv)
    if isinstance(argv, Iterable):
        tokens = list(argv)
        for token in tokens:
            if not isinstance(token, str):
                raise TypeError("argv must be a string or an iterable of strings")
        return tokens
    raise TypeError("argv must be a string or an iterable of strings")


__all__ = (
    "Registry",
    "CompiledRegistry",
)
