"""
Token stream: the cursor the grammar and the option converters read from.

Overview
- END: falsey singleton returned by peek()/consume() once nothing is left.
- TokenStream: a deque of pending tokens with
  • peek(): the next token (or END) without consuming it;
  • consume(): take and return the next token (or END);
  • prepend(*tokens): splice tokens right ahead of the cursor (the grammar uses it
    to push the tail of "--name=value" back as a fresh token);
  • expand(name): read an argument file and splice its tokens (the "@file" form).

Positions
- Every pending token remembers the 1-based argv position it came from. Tokens
  spliced by prepend() or expand() inherit the position of the token that
  produced them, so messages about "--name=value" or "@args.txt" always point
  at what the user actually typed.

Argument files
- Contents are split with shlex in POSIX mode with comments enabled: quotes
  group words, "#" starts a comment, and any whitespace (newlines included)
  separates tokens.
- Spliced tokens are classified like any other token, so a file may name
  further "@file" directives. A file that is still being expanded cannot be
  named again; that would never terminate and raises ArgumentFileError.
"""
import os.path
import shlex
from collections import deque
from collections.abc import Iterable

from .contents import read_text
from .faults import ArgumentFileError, FaultCode, getdoc
from .utils import ordinal

END = type("end-type", (), {
    "__slots__": (),
    "__repr__": lambda self: "END",
    "__bool__": lambda self: False,
    "__doc__": "marker returned by TokenStream.peek()/consume() when no token is left",
})()


class _Boundary:
    # Queued after the tokens of an argument file; reaching it closes the file.
    __slots__ = ("path",)

    def __init__(self, path):
        self.path = path


class TokenStream:
    """
    Cursor over an argument vector.

    The stream only guarantees one token of lookahead (peek). Converters that
    need more simply consume() repeatedly.
    """

    def __init__(self, tokens=(), /):
        if isinstance(tokens, str) or not isinstance(tokens, Iterable):
            raise TypeError("TokenStream() argument must be an iterable of strings")
        entries = deque()
        for position, token in enumerate(tokens, 1):
            if not isinstance(token, str):
                raise TypeError("TokenStream() argument must be an iterable of strings")
            entries.append((token, position))
        self._entries = entries
        self._files = []
        self._consumed = 0
        self._position = 0

    def _settle(self):
        # Drop boundaries sitting at the head, closing their argument files.
        while self._entries and isinstance(self._entries[0][0], _Boundary):
            boundary, _ = self._entries.popleft()
            self._files.remove(boundary.path)

    def peek(self):
        """
        Return the next token without consuming it, or END.
        """
        self._settle()
        if not self._entries:
            return END
        return self._entries[0][0]

    def consume(self):
        """
        Take the next token, or return END when the stream is exhausted.
        """
        self._settle()
        if not self._entries:
            return END
        token, self._position = self._entries.popleft()
        self._consumed += 1
        return token

    def prepend(self, *tokens):
        """
        Splice tokens immediately ahead of the cursor, in the given order.

        The new tokens report the position of the most recently consumed one.
        """
        for token in tokens:
            if not isinstance(token, str):
                raise TypeError("prepend() arguments must be strings")
        self._entries.extendleft((token, self._position) for token in reversed(tokens))

    def expand(self, name, /):
        """
        Read the argument file `name` and splice its tokens ahead of the cursor.

        Raises ArgumentFileError when the file cannot be read or split, or when
        it is already being expanded.
        """
        path = os.path.realpath(name)
        if path in self._files:
            raise ArgumentFileError(
                "argument file %r at %s position includes itself" % (name, ordinal(self.position)),
                hint="remove the '@%s' directive from inside the file chain" % name,
                token="@" + name,
                path=name,
                position=self.position,
                docs=getdoc(FaultCode.ARGUMENT_FILE)
            )

        try:
            tokens = shlex.split(read_text(name), comments=True)
        except OSError as error:
            raise ArgumentFileError(
                "cannot read argument file %r at %s position: %s" % (
                    name, ordinal(self.position), (error.strerror or str(error)).lower()
                ),
                hint="check that the file exists and is readable",
                token="@" + name,
                path=name,
                position=self.position,
                docs=getdoc(FaultCode.ARGUMENT_FILE)
            ) from error
        except (ValueError, UnicodeDecodeError) as error:
            raise ArgumentFileError(
                "cannot split argument file %r at %s position: %s" % (name, ordinal(self.position), str(error).lower()),
                hint="argument files use shell quoting; check for unbalanced quotes",
                token="@" + name,
                path=name,
                position=self.position,
                docs=getdoc(FaultCode.ARGUMENT_FILE)
            ) from error

        self._files.append(path)
        self._entries.appendleft((_Boundary(path), self._position))
        self.prepend(*tokens)

    @property
    def position(self):
        """
        1-based argv position of the last consumed token (0 before the first).
        """
        return self._position

    @property
    def consumed(self):
        """
        Number of tokens consumed so far, spliced ones included.
        """
        return self._consumed

    @property
    def exhausted(self):
        return self.peek() is END

    def remaining(self):
        """
        Pending tokens, in order, without consuming them.
        """
        return [token for token, _ in self._entries if not isinstance(token, _Boundary)]

    def __bool__(self):
        return not self.exhausted

    def __len__(self):
        return len(self.remaining())

    def __repr__(self):
        return "TokenStream(%r)" % self.remaining()


__all__ = (
    "END",
    "TokenStream",
)
