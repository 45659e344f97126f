"""Incremental parsers for request heads and multipart bodies."""

from __future__ import annotations

import enum
import io
from dataclasses import dataclass, field
from typing import BinaryIO

from webserv.http.common import ONE_ONE, is_ws, rtrim_ws, to_method, to_version
from webserv.http.errors import HeaderError, ParseError, VersionError
from webserv.http.headers import Headers
from webserv.http.message import Request
from webserv.textutils import IncompleteLineError, getline

_CRLF = b"\r\n"
_LF = b"\n"


def _decode(raw: bytes) -> str:
    return raw.decode("latin-1")


class HeaderParser:
    """Reads a block of header lines, joining folded continuation lines."""

    def __init__(self) -> None:
        self._buf = ""

    def clear(self) -> None:
        self._buf = ""

    def parse(self, stream: BinaryIO, headers: Headers) -> bool:
        """Read CRLF-terminated headers; True once the blank line is seen."""
        try:
            while True:
                line = _decode(getline(stream, _CRLF))
                if not line:
                    if self._buf:
                        headers.insert(self._buf)
                    self._buf = ""
                    return True
                if is_ws(line[0]):
                    self._buf += line
                else:
                    if self._buf:
                        headers.insert(self._buf)
                    self._buf = line
        except IncompleteLineError:
            return False

    def parse_cgi(self, stream: BinaryIO, headers: Headers) -> bool:
        """Read LF-terminated headers as produced by a CGI script."""
        try:
            while True:
                line = _decode(getline(stream, _LF))
                if not line:
                    return True
                headers.update(line)
        except IncompleteLineError:
            return False


class ParserState(enum.Enum):
    START = "start"
    HEADER = "header"
    DONE = "done"


class RequestParser:
    """Builds a :class:`Request` from its request line and headers."""

    def __init__(self) -> None:
        self._header_parser = HeaderParser()
        self.state = ParserState.START
        self.request: Request | None = None

    def clear(self) -> None:
        self._header_parser.clear()
        self.state = ParserState.START
        self.request = None

    def parse(self, stream: BinaryIO) -> ParserState:
        """Consume as much of ``stream`` as possible and return the state."""
        try:
            while self.state is not ParserState.DONE:
                if self.state is ParserState.START:
                    self.request = self._parse_request_line(stream)
                elif self._header_parser.parse(stream, self.request.headers):
                    self.state = ParserState.DONE
                else:
                    break
        except IncompleteLineError:
            pass
        return self.state

    def _parse_request_line(self, stream: BinaryIO) -> Request:
        line = ""
        while not line:  # leading bare CRLFs are ignored
            line = _decode(getline(stream, _CRLF))
        parts = line.split(" ")
        method = to_method(parts[0])
        uri = parts[1] if len(parts) > 1 else ""
        try:
            version = to_version(parts[2] if len(parts) > 2 else "")
        except ValueError as exc:
            raise VersionError(str(exc)) from exc
        if version != ONE_ONE:
            raise VersionError("unsupported HTTP version")
        if len(parts) > 3:
            raise ParseError("excess elements in first line")
        self.state = ParserState.HEADER
        return Request(method, version, uri)


@dataclass
class BodyPart:
    """One part of a multipart body."""

    headers: Headers = field(default_factory=Headers)
    body: bytes = b""
    is_last: bool = False


class _Stage(enum.Enum):
    FIRST = "first"
    HEADERS = "headers"
    BODY = "body"
    DONE = "done"


class MultipartParser:
    """Splits a multipart body into parts as its bytes arrive."""

    def __init__(self, boundary: str = "") -> None:
        self._boundary = b"--" + boundary.encode("latin-1")
        self._stage = _Stage.FIRST
        self._stream = io.BytesIO()
        self._part = BodyPart()

    @property
    def boundary(self) -> str:
        """The delimiter line, including its leading dashes."""
        return _decode(self._boundary)

    def clear(self) -> None:
        self._stage = _Stage.FIRST
        self._stream = io.BytesIO()
        self._part = BodyPart()

    def load(self, data: bytes) -> None:
        """Append more body bytes."""
        rest = self._stream.read()
        self._stream = io.BytesIO(rest + bytes(data))

    def parse(self) -> BodyPart | None:
        """Return the next complete part, or None if more bytes are needed."""
        try:
            while True:
                if self._stage is _Stage.FIRST:
                    self._parse_boundary()
                elif self._stage is _Stage.HEADERS:
                    self._parse_headers()
                elif self._stage is _Stage.BODY:
                    self._parse_body()
                else:
                    self._stage = _Stage.HEADERS
                    part, self._part = self._part, BodyPart()
                    return part
        except IncompleteLineError:
            return None

    def _parse_boundary(self) -> None:
        line = _decode(getline(self._stream, _CRLF))
        if rtrim_ws(line) != self.boundary:
            raise ParseError("incorrect multipart boundary")
        self._stage = _Stage.HEADERS

    def _parse_headers(self) -> None:
        while True:
            line = _decode(getline(self._stream, _CRLF))
            if not line:
                self._stage = _Stage.BODY
                return
            self._part.headers.insert(line)

    def _parse_body(self) -> None:
        position = self._stream.tell()
        body = getline(self._stream, self._boundary)
        terminator = self._stream.read(2)
        if len(terminator) < 2:
            self._stream.seek(position)
            raise IncompleteLineError("incomplete boundary terminator")
        if terminator != _CRLF:
            if terminator != b"--":
                raise ParseError("incorrect multipart boundary terminator")
            self._part.is_last = True
        if len(body) < 2:
            raise ParseError("multipart body part is not followed by CRLF")
        self._part.body = body[:-2]
        self._stage = _Stage.DONE


def is_multipart(request: Request) -> str | None:
    """The boundary of a multipart request, or None for other requests."""
    if "Content-Type" not in request.headers:
        return None
    values = request.headers.at("Content-Type").values
    if not values or not values[0].startswith("multipart/"):
        return None
    content_type = values[0]
    begin = content_type.find("boundary=")
    if begin == -1:
        raise HeaderError("multipart content type does not define boundary")
    begin += len("boundary=")
    end = begin
    while end < len(content_type) and content_type[end] not in " \t\r\n":
        end += 1
    return content_type[begin:end]