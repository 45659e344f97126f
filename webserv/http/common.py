"""Methods, versions, status codes and small text helpers for HTTP."""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass
from http import HTTPStatus

from webserv.http.errors import MethodError

Version = tuple[int, int]

ONE_ONE: Version = (1, 1)

_WHITESPACE = " \t"
_LEADING_NUMBER = re.compile(r"\s*\+?(\d+)")


class Method(enum.IntFlag):
    """Request methods; each is one bit so that sets of them form a mask."""

    GET = 1 << 0
    HEAD = 1 << 1
    POST = 1 << 2
    PUT = 1 << 3
    DELETE = 1 << 4
    CONNECT = 1 << 5
    OPTIONS = 1 << 6
    TRACE = 1 << 7
    PATCH = 1 << 8


class BodyType(enum.Enum):
    NONE = "none"
    BY_LENGTH = "by_length"
    CHUNKED = "chunked"


@dataclass(frozen=True)
class Body:
    """How a message body is delimited."""

    type: BodyType = BodyType.NONE
    length: int = 0

    def __bool__(self) -> bool:
        return self.type is not BodyType.NONE


def to_method(text: str) -> Method:
    """Return the method named exactly ``text``."""
    method = Method.__members__.get(text)
    if method is None:
        raise MethodError("unrecognized method")
    return method


def _leading_number(text: str) -> int:
    match = _LEADING_NUMBER.match(text)
    if match is None:
        raise ValueError(f"not a number: {text!r}")
    return int(match.group(1))


def to_version(text: str) -> Version:
    """Parse ``HTTP/<major>.<minor>``."""
    scheme, _, rest = text.partition("/")
    if scheme != "HTTP":
        raise ValueError("not a HTTP version")
    parts = rest.split(".")
    major = parts[0]
    minor = parts[1] if len(parts) > 1 else ""
    return (_leading_number(major), _leading_number(minor))


def version_to_string(version: Version) -> str:
    major, minor = version
    return f"HTTP/{major}.{minor}"


def to_status(text: str) -> HTTPStatus | int:
    """Read the status code at the start of ``text``; 0 if there is none."""
    match = _LEADING_NUMBER.match(text)
    number = int(match.group(1)) if match else 0
    try:
        return HTTPStatus(number)
    except ValueError:
        return number


def description(status: int) -> str:
    """The reason phrase of ``status``, or an empty string if unknown."""
    try:
        return HTTPStatus(status).phrase
    except ValueError:
        return ""


def is_client_error(status: int) -> bool:
    return 400 <= int(status) <= 499


def is_server_error(status: int) -> bool:
    return 500 <= int(status) <= 599


def is_error(status: int) -> bool:
    return is_client_error(status) or is_server_error(status)


def trim_ws(text: str) -> str:
    """Strip spaces and tabs from both ends."""
    return text.strip(_WHITESPACE)


def ltrim_ws(text: str) -> str:
    return text.lstrip(_WHITESPACE)


def rtrim_ws(text: str) -> str:
    return text.rstrip(_WHITESPACE)


def is_ws(char: str) -> bool:
    return char in (" ", "\t")


def strcmp_nocase(first: str, second: str) -> bool:
    """Compare two strings character by character, ignoring case."""
    return len(first) == len(second) and all(
        a.lower() == b.lower() for a, b in zip(first, second)
    )