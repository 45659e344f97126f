"""HTTP header fields."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator

from webserv.http.errors import HeaderError

_SPACE = " \t\n\r\f\v"


@dataclass
class Header:
    """A header field; ``values`` holds its comma-separated values."""

    name: str
    values: list[str] = field(default_factory=list)

    def csvalue(self) -> str:
        """The values joined by commas."""
        return ",".join(self.values)

    def __str__(self) -> str:
        return f"{self.name}: {self.csvalue()}"


class Headers:
    """An ordered collection of header fields keyed by exact name."""

    def __init__(self, lines: tuple[str, ...] | list[str] = ()) -> None:
        self._fields: dict[str, list[str]] = {}
        for line in lines:
            self.insert(line)

    def __iter__(self) -> Iterator[Header]:
        for name, values in self._fields.items():
            yield Header(name, values)

    def __len__(self) -> int:
        return len(self._fields)

    def __contains__(self, name: object) -> bool:
        return name in self._fields

    def __repr__(self) -> str:
        return f"Headers({self._fields!r})"

    def clear(self) -> None:
        self._fields.clear()

    def at(self, name: str) -> Header:
        """The header called ``name``; raises KeyError if absent.

        The returned header shares its value list with this collection.
        """
        return Header(name, self._fields[name])

    def contains(self, name: str, value: str) -> bool:
        """Whether header ``name`` is present and holds ``value``."""
        return value in self._fields.get(name, ())

    def insert(self, line: str) -> Header:
        """Parse ``line`` and set that header, replacing any earlier one."""
        header = self.to_header(line)
        self._fields[header.name] = header.values
        return header

    def update(self, header: str | Header) -> Header:
        """Add a header, merging its values into an existing one."""
        if isinstance(header, str):
            header = self.to_header(header)
        values = self._fields.get(header.name)
        if values is None:
            values = self._fields[header.name] = []
        for value in header.values:
            if value not in values:
                values.append(value)
        return Header(header.name, values)

    @staticmethod
    def to_header(line: str) -> Header:
        """Parse ``name: value, value, ...`` into a header."""
        name, _, rest = line.partition(":")
        if not name:
            raise HeaderError("nameless header is invalid")
        values: list[str] = []
        for piece in rest.split(","):
            piece = piece.lstrip(_SPACE)
            if piece and piece not in values:
                values.append(piece)
        return Header(name, values)

    def serialize(self) -> str:
        """Every header as a CRLF-terminated line."""
        return "".join(f"{header}\r\n" for header in self)