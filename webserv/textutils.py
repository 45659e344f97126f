"""Delimited line extraction from seekable streams."""

from __future__ import annotations

from typing import IO, AnyStr


class IncompleteLineError(Exception):
    """The stream ended before the line delimiter was found."""


def getline_core(stream: IO[AnyStr], delim: AnyStr) -> tuple[AnyStr, bool]:
    """Read up to and including ``delim``.

    Returns the line without the delimiter and whether the delimiter was
    found before the stream ran out.
    """
    line = delim[:0]
    while True:
        char = stream.read(1)
        if not char:
            return line, False
        line += char
        if line.endswith(delim):
            return line[: len(line) - len(delim)], True


def getline(stream: IO[AnyStr], delim: AnyStr) -> AnyStr:
    """Read one complete line ending in ``delim``.

    If the delimiter is not found, the stream position is restored and
    :class:`IncompleteLineError` is raised.
    """
    position = stream.tell()
    line, complete = getline_core(stream, delim)
    if complete:
        return line
    stream.seek(position)
    raise IncompleteLineError("incomplete line")