r"""
Argstream option specifications and built-in kinds.

Overview
- Kind: the closed set of option kinds. Each kind decides how many tokens a
  match consumes and how the text converts to a value.
    • STRING   one token, verbatim
    • INTEGER  one token; 0x.. hex, 0b.. binary, 0.. octal, else decimal
    • DOUBLE   one token; decimal or scientific notation
    • BOOLEAN  one token; first letter 0/f -> False, 1/t -> True
    • FLAG     no token; True when present (False when inverted)
    • HELP     a FLAG that marks a help request
    • ENUM     one token; case-sensitive member of declared symbols
    • PATH     one token; separators normalized to the host, as pathlib.Path
    • URI      one token; drive-letter and UNC paths become file: URIs
    • DATE     one token; ISO 8601 date or date-time
    • CUSTOM   the spec's own converter decides (the extension point)

- Spec[_T]: a named, typed option descriptor. Metadata is given as keyword
  arguments at construction, validated right away, and read-only afterwards.

- Factories: string(), integer(), double(), boolean(), flag(), enumeration(),
  path(), uri(), date(), custom() build a Spec of the matching kind.

Names
- The canonical name is the first positional argument, written bare
  ("output"). It is always one of the long names.
- Extra aliases are written the way users type them: "--out" adds a long
  name, "-o" adds a short name. Short names are exactly one character.

Converters
- A converter is called as converter(stream, spec, seen) where `stream` is the
  TokenStream, `spec` the matched Spec and `seen` the literal option text the
  user typed ("--out", "-o") or None for positional matches. It consumes what
  it needs and returns the value, or raises ParseError.

Quick example:
    >>> from argstream.specs import integer, flag
    >>> threads = integer("threads", "-t", default=4, descr="worker count")
    >>> verbose = flag("verbose", "-v")
    ...
"""
import builtins
import datetime
import enum
import functools
import operator
import os
import pathlib
import re
import urllib.parse
from collections.abc import Iterable

from rich.text import Text

from .faults import BadValueError, MissingValueError, UnconstructibleKindError, FaultCode, getdoc
from .tokens import END
from .utils import *


class Kind(enum.Enum):
    """
    Closed set of built-in option kinds.

    CUSTOM is the single extension point: its conversion is the spec's own
    `converter` callable instead of a built-in routine.
    """
    STRING = "string"
    INTEGER = "integer"
    DOUBLE = "double"
    BOOLEAN = "boolean"
    FLAG = "flag"
    HELP = "help"
    ENUM = "enum"
    PATH = "path"
    URI = "uri"
    DATE = "date"
    CUSTOM = "custom"

    @classmethod
    def resolve(cls, object, /):
        """
        Accept a Kind, its value ("integer") or its member name ("INTEGER").

        Raises ValueError for anything else.
        """
        if isinstance(object, cls):
            return object
        if isinstance(object, str):
            try:
                return cls(object.strip().lower())
            except ValueError:
                pass
        raise ValueError("unknown option kind %r" % (object,))

    @property
    def nullary(self):
        """
        True for kinds whose matches consume no token.
        """
        return self in (Kind.FLAG, Kind.HELP)


_METAVARS = {
    Kind.STRING: "STRING",
    Kind.INTEGER: "INTEGER",
    Kind.DOUBLE: "DOUBLE",
    Kind.BOOLEAN: "BOOLEAN",
    Kind.ENUM: "ENUM",
    Kind.PATH: "FILE",
    Kind.URI: "URI",
    Kind.DATE: "DATE",
    Kind.CUSTOM: "VALUE",
}


class SpecType(type):
    """
    Metaclass that gives specs stable, readable introspection.

    Responsibilities
    - Expose every name in __introspectable__ as a read-only property backed by
      the private field "_{name}" (containers are copied on access).
    - Derive __typename__ from the class name for messages.
    - Provide __repr__ and __rich_repr__ over __displayable__ (falling back to
      __introspectable__).
    """
    __introspectable__ = ()
    __displayable__ = Unset

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ())
            },
        )

        def __repr__(self):
            return f"{type(self).__typename__}({
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
            })"
        __repr__.__qualname__ = __repr__.__name__ = "__repr__"
        self.__repr__ = __repr__

        def __rich_repr__(self):
            for name in coalesce(type(self).__displayable__, type(self).__introspectable__):
                yield name, getattr(self, name)
        __rich_repr__.__qualname__ = __rich_repr__.__name__ = "__rich_repr__"
        self.__rich_repr__ = __rich_repr__

        return self


def _sanitize_names(cls, metadata, /):
    """
    Internal: validate the canonical name and split aliases into long/short.

    - name: non-empty, starts with a letter or digit, no whitespace, no "=".
    - aliases: "--long" or "-x" (x is one character other than "-", "=" or
      whitespace). Duplicates (case-insensitive for long names) are rejected.
    """
    if not isinstance(name := metadata["name"], str):
        raise TypeError(f"{cls.__typename__} name must be a string")
    elif not re.fullmatch(r"[^\W_][^\s=]*", name := name.strip()):
        raise ValueError(f"{cls.__typename__} name {name!r} must be a bare long name (e.g. 'output')")

    longs = [name]
    shorts = []
    for alias in metadata["aliases"]:
        if not isinstance(alias, str):
            raise TypeError(f"{cls.__typename__} aliases must be strings")
        elif re.fullmatch(r"--[^\W_][^\s=]*", alias := alias.strip()):
            if casefold(alias[2:]) in map(casefold, longs):
                raise ValueError(f"{cls.__typename__} long names cannot contain duplicates")
            longs.append(alias[2:])
        elif re.fullmatch(r"-[^\s=-]", alias):
            if alias[1] in shorts:
                raise ValueError(f"{cls.__typename__} short names cannot contain duplicates")
            shorts.append(alias[1])
        else:
            raise ValueError(
                f"{cls.__typename__} alias {alias!r} must look like '--long-name' or '-x'"
            )

    metadata["name"] = name
    metadata["longs"] = tuple(longs)
    metadata["shorts"] = tuple(shorts)
    del metadata["aliases"]


def _sanitize_metadata(cls, metadata, /):
    """
    Internal: validate and normalize everything except names.

    - kind: any form Kind.resolve() accepts.
    - metavar: Unset (kind default), None (no label) or a non-empty string;
      flags cannot carry one.
    - descr: Unset/None or a non-empty string (or rich Text).
    - choices: required for ENUM (an iterable of distinct strings, or an
      enum.Enum subclass), forbidden otherwise.
    - converter: required for CUSTOM, forbidden otherwise.
    - default: free for value kinds; flags derive theirs from `inverted`.
    - positional: flags cannot be positional (they consume no token).
    """
    try:
        kind = metadata["kind"] = Kind.resolve(metadata["kind"])
    except ValueError:
        raise UnconstructibleKindError(
            "unknown kind %r for option %r" % (metadata["kind"], metadata["name"]),
            hint="use one of %s" % ", ".join(kind.value for kind in Kind),
            kind=metadata["kind"],
            docs=getdoc(FaultCode.UNCONSTRUCTIBLE_KIND)
        ) from None

    if kind.nullary:
        if metadata["metavar"] not in (Unset, None):
            raise TypeError(f"{kind.value} {cls.__typename__} cannot specify a 'metavar'")
        if metadata["default"] is not Unset:
            raise TypeError(f"{kind.value} {cls.__typename__} cannot specify a 'default'; use 'inverted' instead")
        if metadata["positional"]:
            raise TypeError(f"{kind.value} {cls.__typename__} cannot be positional")
        metadata["metavar"] = None
        metadata["default"] = metadata["inverted"]
    else:
        if metadata["inverted"]:
            raise TypeError(f"only flag {cls.__typename__}s can be inverted")
        metadata["default"] = coalesce(metadata["default"])

        if not isinstance(metavar := metadata["metavar"], str | Unset | None):
            raise TypeError(f"{cls.__typename__} 'metavar' must be a string")
        elif isinstance(metavar, str) and not (metavar := metavar.strip()):
            raise ValueError(f"{cls.__typename__} 'metavar' cannot be empty")
        metadata["metavar"] = metavar

    if not isinstance(descr := metadata["descr"], str | Text | Unset | None):
        raise TypeError(f"{cls.__typename__} 'descr' must be a string")
    elif isinstance(descr, str) and not (descr := descr.strip()):
        raise ValueError(f"{cls.__typename__} 'descr' cannot be empty")
    metadata["descr"] = coalesce(descr)

    choices = metadata["choices"]
    metadata["enumeration"] = None
    if kind is Kind.ENUM:
        if isinstance(choices, builtins.type) and issubclass(choices, enum.Enum):
            metadata["enumeration"] = choices
            choices = builtins.list(choices.__members__)
        elif isinstance(choices, str) or not isinstance(choices, Iterable):
            raise TypeError(f"enum {cls.__typename__} 'choices' must be an iterable of strings or an Enum type")
        sanitized = []
        for choice in choices:
            if not isinstance(choice, str):
                raise TypeError(f"enum {cls.__typename__} 'choices' must be strings")
            elif choice in sanitized:
                raise ValueError(f"enum {cls.__typename__} 'choices' cannot contain duplicates")
            sanitized.append(choice)
        if not sanitized:
            raise ValueError(f"enum {cls.__typename__} must declare at least one choice")
        metadata["choices"] = tuple(sanitized)
    elif choices:
        raise TypeError(f"only enum {cls.__typename__}s can declare 'choices'")
    else:
        metadata["choices"] = ()

    if kind is Kind.CUSTOM:
        if not callable(metadata["converter"]):
            raise TypeError(f"custom {cls.__typename__} 'converter' must be callable")
    elif metadata["converter"] is not Unset:
        raise TypeError(f"only custom {cls.__typename__}s can specify a 'converter'")
    metadata["converter"] = coalesce(metadata["converter"])

    if metadata["metavar"] is Unset:
        if kind is Kind.ENUM:
            metadata["metavar"] = "{%s}" % ",".join(metadata["choices"])
        else:
            metadata["metavar"] = _METAVARS[kind]

    if not isinstance(target := metadata["target"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'target' must be an attribute name")
    elif isinstance(target, str) and not target.isidentifier():
        raise ValueError(f"{cls.__typename__} 'target' must be a valid identifier")
    metadata["target"] = coalesce(target)


class Spec[_T](metaclass=SpecType):
    """
    Named, typed option descriptor.

    A Spec is generic over the value type _T its kind produces. It belongs to
    exactly one Registry (see argstream.registry); the registry records the
    ownership on register() and refuses specs owned elsewhere.

    Properties
    - The names listed in __introspectable__ are read-only attributes mirroring
      the sanitized metadata.
    """

    __introspectable__ = (
        "name",
        "longs",
        "shorts",
        "kind",
        "positional",
        "required",
        "list",
        "default",
        "metavar",
        "descr",
        "choices",
        "enumeration",
        "inverted",
        "converter",
        "target",
        "hidden",
    )

    __displayable__ = (
        "name",
        "longs",
        "shorts",
        "kind",
        "positional",
        "required",
        "list",
        "default",
        "metavar",
    )

    def __init__(
            self,
            name,
            /,
            *aliases,
            kind=Kind.STRING,
            default=Unset,
            positional=False,
            required=False,
            list=False,
            metavar=Unset,
            descr=Unset,
            choices=(),
            inverted=False,
            converter=Unset,
            target=Unset,
            hidden=False
    ):
        """
        Construct a Spec.

        Parameters
        - name: str
          Canonical, bare long name ("output"). Unique within a registry.
        - aliases: str
          Extra names as typed on the command line: "--out", "-o".
        - kind: Kind | str
          Option kind; see Kind.
        - default: _T
          Value reported when the option is absent. None means "no default".
          Flags derive their default from `inverted`.
        - positional: bool
          Match bare (dash-less) tokens. At most one per registry.
        - required: bool
          At least one match must be present after parsing.
        - list: bool
          The option may be matched more than once.
        - metavar: str | None
          Label of the value in usage text. Defaults per kind.
        - descr: str | Text
          One-paragraph description for help output.
        - choices: Iterable[str] | type[Enum]
          Declared symbols of an ENUM option.
        - inverted: bool
          FLAG/HELP only: presence yields False and absence True.
        - converter: Callable
          CUSTOM only: converter(stream, spec, seen) -> value.
        - target: str
          Attribute written by ParseResult.populate().
        - hidden: bool
          Suppress from help output.
        """
        metadata = {
            "name": name,
            "aliases": aliases,
            "kind": kind,
            "default": default,
            "positional": bool(positional),
            "required": bool(required),
            "list": bool(list),
            "metavar": metavar,
            "descr": descr,
            "choices": choices,
            "inverted": bool(inverted),
            "converter": converter,
            "target": target,
            "hidden": bool(hidden),
        }
        _sanitize_names(type(self), metadata)
        _sanitize_metadata(type(self), metadata)

        for name, object in metadata.items():
            setattr(self, "_" + name, object)

        self._registry = None

    @property
    def registry(self):
        """
        The registry this spec was registered with, or None.
        """
        return self._registry

    @property
    def present(self):
        """
        Value a FLAG/HELP match yields (None for value kinds).
        """
        return not self._inverted if self._kind.nullary else None

    def label(self, seen=None, /):
        """
        Name used in messages: the text the user typed, else the canonical form.
        """
        if seen:
            return seen
        if self._positional:
            return self._metavar or self._name
        return "--" + self._name

    def convert(self, stream, seen=None, /):
        """
        Run this spec's conversion against the stream and return the value.
        """
        if self._kind is Kind.CUSTOM:
            return self._converter(stream, self, seen)
        return CONVERTERS[self._kind](stream, self, seen)


def _name(spec, seen):
    if seen is None:
        return "positional argument %s" % spec.label()
    return "option %r" % seen


def _describe(spec, seen, stream):
    # "option '--count' at second position"
    return "%s at %s position" % (_name(spec, seen), ordinal(max(stream.position, 1)))


def take(stream, spec, seen=None, /):
    """
    Consume the single token a value kind needs, or raise MissingValueError.

    Exposed for custom converters.
    """
    if (token := stream.consume()) is END:
        raise MissingValueError(
            "%s requires a value" % _describe(spec, seen, stream),
            hint="pass a value right after %s, e.g. %s %s" % (spec.label(seen), spec.label(seen), spec.metavar or "VALUE"),
            spec=spec,
            token=seen,
            position=stream.position,
            docs=getdoc(FaultCode.MISSING_VALUE)
        )
    return token


def reject(stream, spec, seen, token, expected, /, hint=Unset):
    """
    Raise BadValueError for `token`; exposed for custom converters.
    """
    raise BadValueError(
        "bad value %r at %s position for %s: expected %s" % (
            token, ordinal(max(stream.position, 1)), _name(spec, seen), expected
        ),
        hint=coalesce(hint, "run with --help to see what %s accepts" % spec.label(seen)),
        spec=spec,
        token=token,
        position=stream.position,
        docs=getdoc(FaultCode.BAD_VALUE)
    )


_DIGITS = {
    2: re.compile(r"[01]+"),
    8: re.compile(r"[0-7]+"),
    10: re.compile(r"[0-9]+"),
    16: re.compile(r"[0-9a-fA-F]+"),
}

_FLOAT = re.compile(r"[+-]?(?:(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?|inf|infinity|nan)", re.IGNORECASE)

_URI = re.compile(r"(?:[A-Za-z0-9\-._~:/?#\[\]@!$&'()*+,;=]|%[0-9A-Fa-f]{2})*")


def parse_integer(text, /):
    """
    Parse an integer literal with radix prefixes.

    "0x1F" -> 31, "0b101" -> 5, "017" -> 15, "42" -> 42. An optional leading
    sign is accepted. Anything else raises ValueError.
    """
    sign = ""
    body = text
    if body[:1] in ("+", "-"):
        sign, body = body[0], body[1:]

    match body[:2].lower():
        case "0x":
            radix, digits = 16, body[2:]
        case "0b":
            radix, digits = 2, body[2:]
        case _ if body[:1] == "0" and len(body) > 1:
            radix, digits = 8, body[1:]
        case _:
            radix, digits = 10, body

    if not _DIGITS[radix].fullmatch(digits):
        raise ValueError("invalid base-%d literal: %r" % (radix, text))
    return int(sign + digits, radix)


def _convert_string(stream, spec, seen):
    return take(stream, spec, seen)


def _convert_integer(stream, spec, seen):
    token = take(stream, spec, seen)
    try:
        return parse_integer(token)
    except ValueError:
        reject(stream, spec, seen, token, "an integer",
               hint="use decimal (42), hexadecimal (0x2A), octal (052) or binary (0b101010)")


def _convert_double(stream, spec, seen):
    token = take(stream, spec, seen)
    if not _FLOAT.fullmatch(token):
        reject(stream, spec, seen, token, "a number", hint="use decimal or scientific notation (e.g. 2.5 or 1e-3)")
    return float(token)


def _convert_boolean(stream, spec, seen):
    token = take(stream, spec, seen)
    match token[:1].lower():
        case "0" | "f":
            return False
        case "1" | "t":
            return True
    reject(stream, spec, seen, token, "'true' or 'false'")


def _convert_flag(stream, spec, seen):
    return spec.present


def _convert_enum(stream, spec, seen):
    token = take(stream, spec, seen)
    if token not in spec.choices:
        reject(stream, spec, seen, token, "one of %s" % ", ".join(map(repr, spec.choices)),
               hint="choices are case-sensitive")
    if spec.enumeration is not None:
        return spec.enumeration[token]
    return token


def _convert_path(stream, spec, seen):
    token = take(stream, spec, seen)
    return pathlib.Path(token.replace("/", os.sep).replace("\\", os.sep))


def _convert_uri(stream, spec, seen):
    token = value = take(stream, spec, seen)
    if re.fullmatch(r"[A-Za-z]:[\\/].*", value, re.DOTALL):
        # drive letter: file:///C:/...
        value = "file:///" + value
    elif re.fullmatch(r"[\\/][\\/].*", value, re.DOTALL):
        # UNC: file://host/share/...
        value = "file:" + value
    value = value.replace("\\", "/")

    if not _URI.fullmatch(value):
        reject(stream, spec, seen, token, "a uri", hint="percent-encode spaces and other reserved characters")
    try:
        return urllib.parse.urlsplit(value)
    except ValueError:
        reject(stream, spec, seen, token, "a uri")


def _convert_date(stream, spec, seen):
    token = take(stream, spec, seen)
    try:
        return datetime.date.fromisoformat(token)
    except ValueError:
        pass
    try:
        return datetime.datetime.fromisoformat(token)
    except ValueError:
        reject(stream, spec, seen, token, "an iso 8601 date", hint="use YYYY-MM-DD or YYYY-MM-DDTHH:MM:SS")


CONVERTERS = {
    Kind.STRING: _convert_string,
    Kind.INTEGER: _convert_integer,
    Kind.DOUBLE: _convert_double,
    Kind.BOOLEAN: _convert_boolean,
    Kind.FLAG: _convert_flag,
    Kind.HELP: _convert_flag,
    Kind.ENUM: _convert_enum,
    Kind.PATH: _convert_path,
    Kind.URI: _convert_uri,
    Kind.DATE: _convert_date,
}


def _factory(kind, name):
    def factory(*args, **kwargs):
        if "kind" in kwargs:
            raise TypeError(f"{name}() got an unexpected keyword argument 'kind'")
        return Spec(*args, kind=kind, **kwargs)
    factory.__name__ = factory.__qualname__ = name
    factory.__doc__ = f"Build a {kind.value} Spec; arguments are forwarded to Spec()."
    return factory


string = _factory(Kind.STRING, "string")
integer = _factory(Kind.INTEGER, "integer")
double = _factory(Kind.DOUBLE, "double")
boolean = _factory(Kind.BOOLEAN, "boolean")
flag = _factory(Kind.FLAG, "flag")
enumeration = _factory(Kind.ENUM, "enumeration")
path = _factory(Kind.PATH, "path")
uri = _factory(Kind.URI, "uri")
date = _factory(Kind.DATE, "date")
custom = _factory(Kind.CUSTOM, "custom")


__all__ = (
    # Classes
    "Kind",
    "Spec",

    # Factories
    "string",
    "integer",
    "double",
    "boolean",
    "flag",
    "enumeration",
    "path",
    "uri",
    "date",
    "custom",

    # Converter helpers
    "CONVERTERS",
    "parse_integer",
    "take",
    "reject",
)

# The metaclass is an implementation detail of Spec.
del SpecType
