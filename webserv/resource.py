"""Resources served for a request: files, directory listings and built-in pages."""

from __future__ import annotations

import io
import os
from http import HTTPStatus
from pathlib import Path
from typing import BinaryIO
from urllib.parse import urlsplit

from webserv import mime
from webserv.http import html
from webserv.http.common import Method
from webserv.http.errors import ParseError
from webserv.http.parse import BodyPart, MultipartParser
from webserv.logs import Level, elog
from webserv.route import Location

PathLike = str | os.PathLike[str]


class ResourceError(Exception):
    """A resource could not be handled."""


class ResourceIOError(ResourceError):
    """Reading from or writing to a resource failed."""


def _with_length(body: str) -> str:
    return f"Content-Length: {len(body.encode('utf-8'))}\r\n\r\n{body}"


def make_directory_list(path: PathLike) -> str:
    """Headers and body of a page listing the directory ``path``."""
    return _with_length(html.directory_list(path))


def make_redirection(destination: str) -> str:
    """A ``Location`` header pointing at ``destination``."""
    parts = urlsplit(str(destination))
    dest = parts.path
    if parts.query:
        dest += "?" + parts.query
    if parts.fragment:
        dest += "#" + parts.fragment
    return f"Location: {dest}\r\n\r\n"


def make_error_page(status: int) -> str:
    """Headers and body of the built-in page for ``status``."""
    return _with_length(html.error_page(status))


def _file_headers(path: PathLike) -> str:
    return (
        "Connection: keep-alive\r\n"
        f"Content-Type: {mime.get_type(path)}\r\n"
        f"Content-Length: {os.path.getsize(path)}\r\n"
        "\r\n"
    )


def _created_headers_and_body(location: Location) -> str:
    representation = str(location.source)
    return (
        "Connection: keep-alive\r\n"
        "Content-Type: text/plain\r\n"
        f"Content-Length: {len(representation.encode('utf-8'))}\r\n"
        f"Location: {representation}\r\n\r\n"
        f"{representation}"
    )


class Resource:
    """A file or built-in page answering a request.

    Reading yields the response headers first, then the file contents.
    """

    def __init__(self) -> None:
        self._head = io.BytesIO()
        self._input: BinaryIO | None = None
        self._output: BinaryIO | None = None

    def __enter__(self) -> Resource:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # Opening

    def open(self, method: Method, location: Location) -> HTTPStatus:
        """Prepare the resource for ``method`` and return the response status."""
        if method is Method.GET:
            return self._get(location)
        if method is Method.POST:
            return self._post(location)
        if method is Method.DELETE:
            return self._delete(location)
        return HTTPStatus.NOT_IMPLEMENTED

    def open_redirection(self, destination: str) -> None:
        """Serve a redirection to ``destination``."""
        self._open_builtin(make_redirection(destination))

    def open_error(self, status: int, errpage: PathLike | None = None) -> None:
        """Serve ``errpage`` for ``status``, or the built-in page if there is none."""
        if errpage is None or self._get_file(errpage) == HTTPStatus.NOT_FOUND:
            self._open_builtin(make_error_page(status))

    # Closing

    def close(self) -> None:
        self.close_in()
        self.close_out()

    def close_in(self) -> None:
        self._head = io.BytesIO()
        if self._input is not None:
            self._input.close()
            self._input = None

    def close_out(self) -> None:
        if self._output is not None:
            self._output.close()
            self._output = None

    # I/O

    def read(self, size: int) -> bytes:
        """Up to ``size`` bytes; headers come before the file contents."""
        chunk = self._head.read(size)
        if chunk or self._input is None:
            return chunk
        try:
            return self._input.read(size)
        except OSError as exc:
            raise ResourceIOError("resource not available for reading") from exc

    def write(self, data: bytes) -> int:
        """Write ``data`` to the resource opened for posting."""
        if self._output is None:
            raise ResourceIOError("resource not available for writing")
        try:
            self._output.write(bytes(data))
        except OSError as exc:
            raise ResourceIOError("resource not available for writing") from exc
        return len(data)

    # Methods

    def _get(self, location: Location) -> HTTPStatus:
        target = Path(location.target)
        if not target.exists():
            return HTTPStatus.NOT_FOUND
        if target.is_dir():
            return self._get_directory(location)
        return self._get_file(target)

    def _get_file(self, path: PathLike) -> HTTPStatus:
        if self._input is not None:
            self._input.close()
            self._input = None
        try:
            self._input = open(path, "rb")
            headers = _file_headers(path)
        except OSError:
            if self._input is not None:
                self._input.close()
                self._input = None
            return HTTPStatus.NOT_FOUND
        self._head = io.BytesIO(headers.encode("utf-8"))
        return HTTPStatus.OK

    def _get_directory(self, location: Location) -> HTTPStatus:
        if location.forbids_directory():
            return HTTPStatus.FORBIDDEN
        if location.lists_directory():
            self._open_builtin(make_directory_list(location.target))
            return HTTPStatus.OK
        return self._get_file(Path(location.target) / location.directory_file())

    def _post(self, location: Location) -> HTTPStatus:
        self.close_out()
        try:
            self._output = open(location.target, "wb")
        except OSError:
            return HTTPStatus.INTERNAL_SERVER_ERROR
        self._head = io.BytesIO(_created_headers_and_body(location).encode("utf-8"))
        return HTTPStatus.ACCEPTED

    def _delete(self, location: Location) -> HTTPStatus:
        target = Path(location.target)
        if not target.exists():
            return HTTPStatus.NOT_FOUND
        try:
            if target.is_dir():
                target.rmdir()
            else:
                target.unlink()
        except OSError:
            return HTTPStatus.INTERNAL_SERVER_ERROR
        self._head = io.BytesIO(b"Connection: keep-alive\r\n\r\n")
        return HTTPStatus.NO_CONTENT

    def _open_builtin(self, text: str) -> None:
        self._head = io.BytesIO(text.encode("utf-8"))


def _part_filename(part: BodyPart) -> str:
    """The file name given in a part's Content-Disposition header."""
    disposition = part.headers.at("Content-Disposition").csvalue()
    begin = disposition.find("filename=")
    if begin == -1:
        raise LookupError("no file name in Content-Disposition")
    begin += len("filename=")
    if disposition[begin : begin + 1] == '"':
        end = disposition.find('"', begin + 1)
        if end != -1:
            begin += 1
    else:
        end = disposition.find(";", begin)
    return disposition[begin:] if end == -1 else disposition[begin:end]


class MultipartResource:
    """Stores the files of a multipart upload in a directory."""

    def __init__(self) -> None:
        self._parser = MultipartParser()
        self._directory: Path | None = None
        self._head = io.BytesIO()

    def __enter__(self) -> MultipartResource:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def open(self, method: Method, location: Location, boundary: str) -> HTTPStatus:
        """Prepare to receive a body delimited by ``boundary``."""
        if method is not Method.POST:
            return HTTPStatus.BAD_REQUEST
        self._parser = MultipartParser(boundary)
        return self._post(location)

    def close(self) -> None:
        self._parser.clear()
        self._directory = None
        self._head = io.BytesIO()

    def read(self, size: int) -> bytes:
        return self._head.read(size)

    def write(self, data: bytes) -> int:
        """Feed body bytes; every completed part is written to its file."""
        self._parser.load(data)
        try:
            self._write_parts()
        except ParseError as exc:
            elog.log(Level.ERROR, "Error when parsing multipart body: ", str(exc))
            raise ResourceIOError(str(exc)) from exc
        return len(data)

    def _write_parts(self) -> None:
        while (part := self._parser.parse()) is not None:
            try:
                filename = _part_filename(part)
            except LookupError:
                elog.log(
                    Level.WARNING,
                    "Could not process multipart body: no file name was provided.",
                )
                continue
            directory = self._directory if self._directory is not None else Path()
            try:
                with open(directory / filename, "wb") as out:
                    out.write(part.body)
            except OSError as exc:
                raise ResourceIOError(
                    "resource part not available for writing"
                ) from exc

    def _post(self, location: Location) -> HTTPStatus:
        self._directory = Path(location.target)
        if not self._directory.is_dir():
            return HTTPStatus.INTERNAL_SERVER_ERROR
        self._head = io.BytesIO(_created_headers_and_body(location).encode("utf-8"))
        return HTTPStatus.CREATED