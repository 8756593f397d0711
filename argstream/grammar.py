r"""
Argstream grammar: turn an argument vector into matches.

The parser reads tokens from a TokenStream and classifies the next token by
the first rule that applies:

1. "@file"          read the argument file, splice its tokens, continue.
                    A bare "@" is an ordinary positional token.
2. "--name[=value]" long option; an inline value is pushed back as a fresh
                    token so the converter reads both forms the same way
                    (a flag reads none, so the value is dispatched next).
3. "-abc"           short-option cluster; each character's converter runs
                    immediately, so "-AB x y" feeds x to A and y to B.
4. anything else    the positional spec's converter reads it.

A bare "--" ends option processing: every later token is handed verbatim to
the positional spec, without option or "@file" interpretation.

Every dispatch yields one or more Match records, appended to the ParseResult
in encounter order. The parser never recovers from a ParseError.
"""
import difflib

from .faults import *
from .registry import CompiledRegistry
from .result import Match, ParseResult
from .tokens import END, TokenStream
from .utils import *


class Parser:
    """
    Grammar driver over a CompiledRegistry.

    A parser keeps no state between parse() calls, so one parser may serve any
    number of sequential parses.
    """

    def __init__(self, registry, /):
        if not isinstance(registry, CompiledRegistry):
            raise TypeError("Parser() argument must be a compiled registry (see Registry.compile())")
        self._registry = registry

    @property
    def registry(self):
        return self._registry

    def parse(self, argv, /):
        """
        Parse `argv` (an iterable of strings) into a ParseResult.

        The result is frozen before it is returned and is not validated; call
        ParseResult.validate() (Registry.parse() does) to check required
        options and arity.
        """
        tokens = tuple(argv)
        stream = TokenStream(tokens)
        result = ParseResult(self._registry, tokens)

        while (token := stream.peek()) is not END:
            if token == "--":
                stream.consume()
                result.extend(self._terminated(stream))
                break
            result.extend(self._dispatch(stream, token))

        result.freeze()
        return result

    def _dispatch(self, stream, token):
        if token.startswith("@") and len(token) > 1:
            stream.consume()
            stream.expand(token[1:])
            return ()
        if token.startswith("--") and len(token) > 2:
            return (self._long(stream),)
        if token.startswith("-") and len(token) > 1:
            return self._cluster(stream)
        return (self._positional(stream),)

    def _long(self, stream):
        token = stream.consume()
        name, assigned, value = token[2:].partition("=")
        seen = "--" + name

        if (spec := self._registry.lookup_long(name)) is None:
            raise self._unknown(stream, seen, token)

        if assigned:
            if not value and not spec.kind.nullary:
                trigger(EmptyInlineValueWarning(
                    "empty inline value for option %r at %s position" % (seen, ordinal(stream.position)),
                    hint="add a value after '=' (for example: %s=%s)" % (seen, spec.metavar or "VALUE"),
                    spec=spec,
                    token=token,
                    position=stream.position,
                    docs=getdoc(FaultCode.EMPTY_INLINE_VALUE)
                ), stacklevel=5)
            stream.prepend(value)

        return Match(spec, seen, spec.convert(stream, seen))

    def _cluster(self, stream):
        token = stream.consume()
        matches = []
        for char in token[1:]:
            if (spec := self._registry.lookup_short(char)) is None:
                raise self._unknown(stream, "-" + char, token)
            matches.append(Match(spec, "-" + char, spec.convert(stream, "-" + char)))
        return matches

    def _positional(self, stream):
        if (spec := self._registry.lookup_positional()) is None:
            token = stream.consume()
            raise UnexpectedPositionalError(
                "unexpected argument %r at %s position: no positional arguments allowed" % (
                    token, ordinal(stream.position)
                ),
                hint="options start with '-' or '--'; run with --help to see them",
                token=token,
                position=stream.position,
                docs=getdoc(FaultCode.UNEXPECTED_POSITIONAL)
            )

        consumed = stream.consumed
        value = spec.convert(stream, None)
        if stream.consumed == consumed:
            raise TypeError("converter of positional option %r consumed no token" % spec.name)
        return Match(spec, None, value)

    def _terminated(self, stream):
        matches = []
        while stream.peek() is not END:
            matches.append(self._positional(stream))
        return matches

    def _unknown(self, stream, seen, token):
        if seen.startswith("--"):
            names = ["--" + name for name in self._registry.longs]
            suggestions = difflib.get_close_matches(casefold(seen), names, 3)
            message = "unknown option %r at %s position" % (seen, ordinal(stream.position))
        else:
            names = ["-" + name for name in self._registry.shorts]
            suggestions = difflib.get_close_matches(seen, names, 3)
            message = "unknown option %r in %r at %s position" % (seen, token, ordinal(stream.position))

        try:
            hint = "did you mean %r? run with --help to see all options" % suggestions[0]
        except IndexError:
            hint = "run with --help to see all options"

        return UnknownOptionError(
            message,
            hint=hint,
            token=token,
            name=seen,
            suggestions=suggestions,
            position=stream.position,
            docs=getdoc(FaultCode.UNKNOWN_OPTION)
        )


def parse(registry, argv, /):
    """
    Parse `argv` against `registry` (a Registry or a CompiledRegistry).

    The result is not validated.
    """
    if not isinstance(registry, CompiledRegistry):
        registry = registry.compile()
    return Parser(registry).parse(argv)


__all__ = (
    "Parser",
    "parse",
)
