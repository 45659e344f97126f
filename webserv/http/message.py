"""HTTP requests and responses."""

from __future__ import annotations

import re
from http import HTTPStatus

from webserv.http.common import (
    ONE_ONE,
    Body,
    BodyType,
    Method,
    Version,
    description,
    to_status,
    version_to_string,
)
from webserv.http.errors import HeaderError, ParseError
from webserv.http.headers import Headers

_ULONG_MAX = 2**64 - 1
_UNSIGNED = re.compile(r"\s*\+?(\d+)")


def _parse_length(text: str) -> int:
    match = _UNSIGNED.match(text)
    if match is None:
        raise HeaderError("Content-Length: bad number")
    value = int(match.group(1))
    if value > _ULONG_MAX:
        raise HeaderError("Content-Length: out of bounds")
    return value


class Message:
    """Headers shared by requests and responses."""

    def __init__(self) -> None:
        self.headers = Headers()

    def _body_length(self) -> int | None:
        if "Content-Length" not in self.headers:
            return None
        values = self.headers.at("Content-Length").values
        if len(values) != 1:
            raise HeaderError("Content-Length: can have only one value")
        return _parse_length(values[0])

    def expects_body(self) -> Body:
        """Describe the body announced by the headers."""
        length = self._body_length()
        chunked = self.headers.contains("Transfer-Encoding", "chunked")
        if length is not None:
            if chunked:
                raise ParseError("bad body description")
            if length > 0:
                return Body(BodyType.BY_LENGTH, length)
        if chunked:
            return Body(BodyType.CHUNKED)
        return Body(BodyType.NONE)

    def clear(self) -> None:
        self.headers.clear()

    def __str__(self) -> str:
        return "".join(f"{header}\n" for header in self.headers)


class Request(Message):
    def __init__(self, method: Method, version: Version, uri: str) -> None:
        super().__init__()
        self.method = method
        self.version = version
        self.uri = uri

    def clear(self) -> None:
        super().clear()
        self.method = Method.GET
        self.version = (0, 0)
        self.uri = ""

    def __str__(self) -> str:
        start = f"{self.method.name} {self.uri} {version_to_string(self.version)}\n"
        return start + super().__str__()


class Response(Message):
    def __init__(self, status: int = HTTPStatus.OK) -> None:
        super().__init__()
        self.status = status
        self.version: Version = ONE_ONE

    def clear(self) -> None:
        super().clear()
        self.status = HTTPStatus.OK

    def init_from_headers(self) -> None:
        """Take the status from a ``Status`` header, as CGI output gives it."""
        values = self.headers.at("Status").values if "Status" in self.headers else []
        self.status = to_status(values[0]) if values else HTTPStatus.OK

    def serialize(self) -> str:
        """The status line and headers as sent on the wire."""
        status_line = (
            f"{version_to_string(self.version)} {int(self.status)} "
            f"{description(self.status)}\r\n"
        )
        if len(self.headers) == 0:
            return status_line
        return status_line + self.headers.serialize() + "\r\n"