"""
Argstream parse results.

- Match: one recognized occurrence of an option, as a NamedTuple
  (spec, seen, value, synthesized). `seen` is the literal option text the user
  typed ("--out", "-o"); it is None for positional and synthesized matches.

- ParseResult: matches in command-line order plus a per-spec grouping, with
  the accessors programs actually use:
    • value(spec, default)   single value; 0 matches -> default
    • values(spec, default)  every value in order; 0 matches -> [default] or []
    • validate()             required options present, non-list options once
    • with_defaults()        matches followed by synthesized default matches
    • populate(target)       write resolved values onto an object

Specs may be passed either as Spec objects or by canonical name. Asking about a
spec that belongs to another registry raises ForeignSpecError.
"""
from typing import NamedTuple

from .faults import *
from .specs import Spec
from .utils import *


class Match(NamedTuple):
    spec: Spec
    seen: str | None
    value: object
    synthesized: bool = False


class ParseResult:
    """
    Matches collected by one parse, grouped by spec.

    The parser fills a result with add()/extend() and freezes it before
    handing it out; a frozen result no longer accepts matches.
    """

    def __init__(self, registry, argv=(), /):
        self._registry = registry
        self._argv = tuple(argv)
        self._matches = []
        self._groups = {}
        self._frozen = False

    @property
    def registry(self):
        """The CompiledRegistry this result was parsed against."""
        return self._registry

    @property
    def argv(self):
        """The argument vector as given to the parser."""
        return self._argv

    @property
    def matches(self):
        return tuple(self._matches)

    @property
    def frozen(self):
        return self._frozen

    def freeze(self):
        self._frozen = True
        return self

    def _resolve(self, spec):
        # Accept a Spec of this registry or its canonical name.
        if isinstance(spec, str):
            if (resolved := self._registry.lookup(spec)) is None:
                raise ForeignSpecError(
                    "no option is registered under the name %r" % spec,
                    hint="pass the spec object or its canonical (first) name",
                    name=spec,
                    docs=getdoc(FaultCode.FOREIGN_SPEC)
                )
            return resolved
        if isinstance(spec, Spec):
            if spec not in self._registry:
                raise ForeignSpecError(
                    "option %r does not belong to this registry" % spec.name,
                    hint="query results with specs registered in the registry that parsed them",
                    spec=spec,
                    docs=getdoc(FaultCode.FOREIGN_SPEC)
                )
            return spec
        raise TypeError("expected a spec or a canonical option name")

    def add(self, match, /):
        """
        Append one match, keeping encounter order and the per-spec grouping.
        """
        if self._frozen:
            raise TypeError("cannot add matches to a frozen parse result")
        if not isinstance(match, Match):
            raise TypeError("add() argument must be a match")
        self._resolve(match.spec)
        self._matches.append(match)
        self._groups.setdefault(match.spec, []).append(match)

    def extend(self, matches, /):
        for match in matches:
            self.add(match)

    def matches_for(self, spec, /):
        """
        Matches of `spec`, in encounter order.
        """
        return list(self._groups.get(self._resolve(spec), ()))

    @property
    def involved(self):
        """
        Specs with at least one match, in first-seen order.
        """
        return list(self._groups)

    def validate(self):
        """
        Check that required specs are matched and non-list specs match once.

        Raises MissingRequiredError for the first required spec without a
        match (in registration order), then ArityError for the first non-list
        spec matched more than once (in first-seen order).
        """
        for spec in self._registry:
            if spec.required and not self._groups.get(spec):
                raise MissingRequiredError(
                    "missing required %s" % _describe(spec),
                    hint="pass %s" % _example(spec),
                    spec=spec,
                    docs=getdoc(FaultCode.MISSING_REQUIRED)
                )

        for spec, matches in self._groups.items():
            if not spec.list and len(matches) > 1:
                raise ArityError(
                    "%s can be given only once, was given %d times" % (_describe(spec), len(matches)),
                    hint="keep a single occurrence of %s" % spec.label(matches[0].seen),
                    spec=spec,
                    count=len(matches),
                    docs=getdoc(FaultCode.ARITY)
                )
        return self

    def value(self, spec, /, default=Unset):
        """
        Single value of `spec`.

        - 0 matches: `default` when given, else the spec's own default (may be None).
        - 1 match: its value.
        - 2+ matches: AmbiguousValueError, list spec or not.
        """
        spec = self._resolve(spec)
        match self._groups.get(spec, []):
            case []:
                return coalesce(default, spec.default)
            case [match]:
                return match.value
            case matches:
                raise AmbiguousValueError(
                    "%s was given %d times; a single value is ambiguous" % (_describe(spec), len(matches)),
                    spec=spec,
                    count=len(matches),
                    docs=getdoc(FaultCode.AMBIGUOUS_VALUE)
                )

    def values(self, spec, /, default=Unset):
        """
        Every value of `spec` in encounter order.

        With no match, a one-element list holding the default (the given one,
        else the spec's own) when there is one, else an empty list.
        """
        spec = self._resolve(spec)
        if matches := self._groups.get(spec):
            return [match.value for match in matches]
        if (default := coalesce(default, spec.default)) is not None:
            return [default]
        return []

    @property
    def help_requested(self):
        """
        True when the registry's help option was given (or defaults to True).
        """
        help = self._registry.help
        if matches := self._groups.get(help):
            return any(match.value for match in matches)
        return bool(help.default)

    def with_defaults(self):
        """
        Matches followed by one synthesized match per unmatched spec that has a
        non-None default, in registration order.
        """
        synthesized = [
            Match(spec, None, spec.default, True)
            for spec in self._registry
            if spec not in self._groups and spec.default is not None
        ]
        return self.matches + tuple(synthesized)

    def populate(self, target, /):
        """
        Write resolved values onto `target` and return it.

        Every spec with a `target` attribute name is written: list specs get
        values(), the others value().
        """
        for spec in self._registry:
            if spec.target is None:
                continue
            setattr(target, spec.target, self.values(spec) if spec.list else self.value(spec))
        return target

    def __getitem__(self, spec):
        return self.value(spec)

    def __contains__(self, spec):
        try:
            return bool(self._groups.get(self._resolve(spec)))
        except ForeignSpecError:
            return False

    def __iter__(self):
        return iter(tuple(self._matches))

    def __len__(self):
        return len(self._matches)

    def __repr__(self):
        return "ParseResult(%s)" % ", ".join(
            "%s=%r" % (match.seen or match.spec.name, match.value) for match in self._matches
        )


def _describe(spec):
    if spec.positional:
        return "positional argument %s" % spec.label()
    return "option %r" % ("--" + spec.name)


def _example(spec):
    if spec.positional:
        return spec.metavar or spec.name
    if spec.kind.nullary:
        return "--" + spec.name
    return "--%s=%s" % (spec.name, spec.metavar or "VALUE")


__all__ = (
    "Match",
    "ParseResult",
)
