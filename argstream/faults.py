"""
Argstream faults (errors and warnings) and rendering.

Scope
- FaultCode: stable numeric identifiers for every user-facing issue, grouped by
  the stage that detects it (compile, parse, use, warnings).
- ArgstreamError and its three disjoint families:
  • CompileError: the option specification set is defective (duplicate names,
    a second positional slot, an unknown kind). Raised before any token is read.
  • ParseError: the argument vector is defective relative to a valid registry
    (unknown option, bad value, missing required option, wrong arity).
  • UseError: the caller queried a valid ParseResult the wrong way (e.g. asked
    for a single value of an option matched several times).
- ArgstreamWarning: non-fatal notices (e.g. an empty inline value).
- trigger(): surface a fault; raise/warn normally, or print it when shell=True.
- getdoc(): optional long description of a code supplied by the host application.

Rendering
- Every fault knows how to draw itself with rich (__rich__): a one-line header
  "[ prog — code | title ]", the lowercased message and a single hint.
- The host can override colors through a __styles__ mapping in __main__,
  remap codes through __codes__ and force the program name through __prog__.
- Faults are immutable records: copy.replace(fault, **context) returns a new
  fault of the same type with merged options.
"""
import copy
import os.path
import sys
import warnings
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes (stable identifiers).

    grouping
    - compile (210xx): the registry itself is inconsistent.
    - parse (220xx): the argument vector does not fit the registry.
    - use (230xx): the caller misused a parse result.
    - warnings (240xx): notices that never stop a parse.
    """
    # --- compile errors (210xx) ---
    DUPLICATE_LONG_NAME         = 21001
    DUPLICATE_SHORT_NAME        = 21002
    DUPLICATE_POSITIONAL        = 21003
    UNCONSTRUCTIBLE_KIND        = 21004
    REGISTRY_FROZEN             = 21005
    DUPLICATE_SPEC              = 21006

    # --- parse errors (220xx) ---
    UNKNOWN_OPTION              = 22001
    MISSING_VALUE               = 22002
    BAD_VALUE                   = 22003
    UNEXPECTED_POSITIONAL       = 22005
    MISSING_REQUIRED            = 22006
    ARITY                       = 22007
    ARGUMENT_FILE               = 22008

    # --- use errors (230xx) ---
    AMBIGUOUS_VALUE             = 23001
    FOREIGN_SPEC                = 23002

    # --- warnings (240xx) ---
    EMPTY_INLINE_VALUE          = 24001

    def normalize(self):
        """
        return a host-normalized label for this code.

        a __codes__ mapping in __main__ may map codes to friendlier labels;
        otherwise the numeric value is used.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


def _program(options):
    main = __import__("__main__")
    return getattr(main, "__prog__", options.get("prog") or os.path.basename(sys.argv[0]) or "argstream")


def _render(fault, palette, *, title):
    # Shared drawing routine for errors and warnings.
    main = __import__("__main__")
    options = fault.options
    colorful = options.get("colorful", True)

    styles = defaultdict(str, palette | getattr(main, "__styles__", {}))

    def styler(style):
        return styles[style] if colorful else ""

    def text(fragment, style=""):
        if not fragment:
            return Text("")
        if not colorful:
            return Text(str(fragment))
        if isinstance(fragment, Text):
            return fragment
        return Text(str(fragment), style)

    header = Text.assemble(
        "[ ",
        text(_program(options), styler("prog-name")),
        " — ",
        text(code.normalize() if (code := options.get("code", fault.code)) else "-", styler("code")),
        " | ",
        text(options.get("title", fault.title).title(), styler(title)),
        " ]"
    )
    message = text(fault.message, styler("message"))
    parts = [message]
    if hint := options.get("hint", fault.hint):
        parts.append(Text.assemble(text(" → ", styler("hint-arrow")), text(hint, styler("hint"))))

    if options.get("fancy", False):
        return Panel(Group(*parts), title=header, title_align="left")

    return Group(header, *parts)


class ArgstreamError(Exception):
    """
    Base type of every argstream error.

    A fault carries a lowercased, position-first message plus keyword context
    (spec, token, position, count, ...) in a read-only `options` mapping.
    Subclasses set class-level `code`, `title` and `hint` defaults; any of them
    can be overridden per instance through options of the same name.
    """
    code = None
    title = "error"
    hint = None

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    def __getattr__(self, name):
        # Context such as fault.spec or fault.token reads straight from options.
        try:
            return self.__dict__["options"][name]
        except KeyError:
            raise AttributeError(name) from None

    def __str__(self):
        return str(self.message)

    def __rich__(self):
        return _render(self, {
            # header parts
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #00E5FF",  # neon cyan fault code
            "error-title": "bold #FF4DA6",  # friendly pinky title

            # body
            "message": "#C8C8D0",  # soft light gray message
            "hint-arrow": "#9CE19C dim",  # gentle green arrow
            "hint": "italic #9CE19C",  # gentle green hint text
        }, title="error-title")

    def __trigger__(self):
        if not self.options.get("shell", False):
            raise self
        self.options.get("console", console).print(self)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class CompileError(ArgstreamError):
    """The option specification set is inconsistent."""
    title = "bad option specification"


class ParseError(ArgstreamError):
    """The argument vector does not fit the compiled registry."""
    title = "bad arguments"


class UseError(ArgstreamError):
    """A parse result was queried in a way its contents cannot satisfy."""
    title = "bad query"


class DuplicateLongNameError(CompileError):
    code = FaultCode.DUPLICATE_LONG_NAME
    title = "duplicate long name"
    hint = "long names are case-insensitive; give each option its own name"


class DuplicateShortNameError(CompileError):
    code = FaultCode.DUPLICATE_SHORT_NAME
    title = "duplicate short name"
    hint = "short names are exact characters; give each option its own character"


class DuplicatePositionalError(CompileError):
    code = FaultCode.DUPLICATE_POSITIONAL
    title = "duplicate positional slot"
    hint = "only one option per registry may be positional; make the others named"


class UnconstructibleKindError(CompileError):
    code = FaultCode.UNCONSTRUCTIBLE_KIND
    title = "unknown option kind"


class RegistryFrozenError(CompileError):
    code = FaultCode.REGISTRY_FROZEN
    title = "registry already compiled"
    hint = "register every option before the first parse"


class DuplicateSpecError(CompileError):
    code = FaultCode.DUPLICATE_SPEC
    title = "option already registered"


class UnknownOptionError(ParseError):
    code = FaultCode.UNKNOWN_OPTION
    title = "unknown option"


class MissingValueError(ParseError):
    code = FaultCode.MISSING_VALUE
    title = "missing option value"


class BadValueError(ParseError):
    code = FaultCode.BAD_VALUE
    title = "bad option value"


class UnexpectedPositionalError(ParseError):
    code = FaultCode.UNEXPECTED_POSITIONAL
    title = "unexpected positional argument"


class MissingRequiredError(ParseError):
    code = FaultCode.MISSING_REQUIRED
    title = "missing required option"


class ArityError(ParseError):
    code = FaultCode.ARITY
    title = "option repeated"


class ArgumentFileError(ParseError):
    code = FaultCode.ARGUMENT_FILE
    title = "unreadable argument file"


class AmbiguousValueError(UseError):
    code = FaultCode.AMBIGUOUS_VALUE
    title = "ambiguous single value"
    hint = "use values() for options that can be matched more than once"


class ForeignSpecError(UseError):
    code = FaultCode.FOREIGN_SPEC
    title = "unknown option"


class ArgstreamWarning(UserWarning):
    """
    Base type of argstream warnings.

    Outside shell mode a warning goes through warnings.warn so host code can
    filter or record it; in shell mode it is printed with rich.
    """
    code = None
    title = "warning"
    hint = None

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    def __str__(self):
        return str(self.message)

    def __rich__(self):
        return _render(self, {
            # header parts
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #FFB400",  # amber fault code for warnings
            "warning-title": "bold #FFC2E0",  # softer pinky title for warnings

            # body
            "message": "#D6D6DE",  # slightly lighter gray body
            "hint-arrow": "#B8EFAF dim",  # softer green arrow
            "hint": "italic #B8EFAF",  # softer green hint text
        }, title="warning-title")

    def __trigger__(self):
        if not self.options.get("shell", False):
            return warnings.warn(self, stacklevel=self.options.get("stacklevel", 2))
        self.options.get("console", console).print(self)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class EmptyInlineValueWarning(ArgstreamWarning):
    code = FaultCode.EMPTY_INLINE_VALUE
    title = "empty inline value"


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ (see the base classes).
    - options are merged into the fault via copy.replace() before triggering.
    - errors are raised and warnings are warned, unless shell=True, in which
      case both are printed to the (error) console.
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    copy.replace(fault, **options).__trigger__()


def getdoc(code, /):
    """
    optional documentation lookup for a fault code.

    the host application may expose a __docs__ mapping in __main__ keyed by
    FaultCode members; None is returned when no entry exists.
    """
    if not isinstance(code, FaultCode):
        raise TypeError("getdoc() argument must be a fault-code")
    return getattr(__import__("__main__"), "__docs__", {}).get(code)


__all__ = (
    "FaultCode",
    "ArgstreamError",
    "CompileError",
    "ParseError",
    "UseError",
    "DuplicateLongNameError",
    "DuplicateShortNameError",
    "DuplicatePositionalError",
    "UnconstructibleKindError",
    "RegistryFrozenError",
    "DuplicateSpecError",
    "UnknownOptionError",
    "MissingValueError",
    "BadValueError",
    "UnexpectedPositionalError",
    "MissingRequiredError",
    "ArityError",
    "ArgumentFileError",
    "AmbiguousValueError",
    "ForeignSpecError",
    "ArgstreamWarning",
    "EmptyInlineValueWarning",
    "trigger",
    "getdoc",
)
