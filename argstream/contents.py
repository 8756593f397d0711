"""
Convenience readers for file- and URI-valued options.

These helpers take already-resolved values (a `pathlib.Path` from a PATH
option, a `urllib.parse.SplitResult` or string from a URI option) and perform
ordinary buffered I/O. They never take part in parsing, except that the
parser reads `@file` argument files through read_text().

Errors are the stdlib's own (OSError, URLError, UnicodeDecodeError); callers
decide how to report them.
"""
import io
import os
import urllib.parse
import urllib.request


def open_path(path, /, mode="r", *, encoding=None):
    """
    Open a PATH value; text modes default to UTF-8.
    """
    if "b" not in mode:
        encoding = encoding or "utf-8"
    return open(os.fspath(path), mode, encoding=encoding)


def read_text(path, /, *, encoding="utf-8"):
    with open_path(path, "r", encoding=encoding) as stream:
        return stream.read()


def read_bytes(path, /):
    with open_path(path, "rb") as stream:
        return stream.read()


def uri_to_path(uri, /):
    """
    Turn a `file:` URI into a host filesystem path string.

    `file:///C:/x` yields `C:\\x` on Windows and `/C:/x` elsewhere; a UNC form
    `file://host/share` keeps its host as a leading `//host` component.
    """
    parts = urllib.parse.urlsplit(_geturl(uri))
    if parts.scheme != "file":
        raise ValueError("uri_to_path() argument must be a file: uri, not %r" % parts.scheme)
    path = urllib.request.url2pathname(parts.path)
    if parts.netloc and parts.netloc != "localhost":
        path = "//" + parts.netloc + path
    return path


def open_uri(uri, /, *, timeout=None):
    """
    Open a URI value for binary reading.

    `file:` URIs are opened directly; anything else goes through
    urllib.request.urlopen().
    """
    url = _geturl(uri)
    if urllib.parse.urlsplit(url).scheme == "file":
        return open_path(uri_to_path(url), "rb")
    if timeout is None:
        return urllib.request.urlopen(url)
    return urllib.request.urlopen(url, timeout=timeout)


def read_uri_bytes(uri, /, *, timeout=None):
    with open_uri(uri, timeout=timeout) as stream:
        return stream.read()


def read_uri_text(uri, /, *, encoding="utf-8", timeout=None):
    with open_uri(uri, timeout=timeout) as stream:
        return io.TextIOWrapper(stream, encoding=encoding).read()


def _geturl(uri):
    if isinstance(uri, urllib.parse.SplitResult):
        return uri.geturl()
    if isinstance(uri, str):
        return uri
    raise TypeError("uri must be a string or a urllib.parse.SplitResult")


__all__ = (
    "open_path",
    "read_text",
    "read_bytes",
    "uri_to_path",
    "open_uri",
    "read_uri_bytes",
    "read_uri_text",
)
