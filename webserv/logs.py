"""Access and error logging."""

from __future__ import annotations

import enum
import sys
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Iterable, TextIO


class VariableType(enum.Enum):
    LITERAL = "literal"
    TIME_LOCAL = "time_local"
    REQUEST = "request"
    STATUS = "status"
    HOST = "host"
    CLIENT = "client"


@dataclass(frozen=True)
class Variable:
    """One element of an access log format: literal text or a field."""

    type: VariableType = VariableType.LITERAL
    data: str = ""

    @classmethod
    def literal(cls, text: str) -> Variable:
        return cls(VariableType.LITERAL, text)


DEFAULT_FORMAT: tuple[Variable, ...] = (
    Variable.literal("["),
    Variable(VariableType.TIME_LOCAL),
    Variable.literal("] Host: "),
    Variable(VariableType.HOST),
    Variable.literal("; Client: "),
    Variable(VariableType.CLIENT),
    Variable.literal("; Request: "),
    Variable(VariableType.REQUEST),
)

_TIMESTAMP_FORMAT = "%Y/%m/%d %H:%M:%S%z"


class Logger:
    """Writes lines to a stream or to an attached log file."""

    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream
        self._file: TextIO | None = None
        self.timestamp = ""

    def _default_stream(self) -> TextIO:
        return sys.stdout

    @property
    def stream(self) -> TextIO:
        if self._file is not None:
            return self._file
        if self._stream is not None:
            return self._stream
        return self._default_stream()

    def attach_file(self, path: str) -> None:
        """Append further output to the file at ``path``."""
        try:
            handle = open(path, "a", encoding="utf-8")
        except OSError as exc:
            raise RuntimeError(f"could not open log: {path}") from exc
        self.detach_file()
        self._file = handle

    def detach_file(self) -> None:
        """Close an attached file and go back to the original stream."""
        if self._file is not None:
            self._file.close()
            self._file = None

    def __enter__(self) -> Logger:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.detach_file()

    def timestamp_update(self) -> None:
        """Set :attr:`timestamp` to the current local time."""
        self.timestamp = datetime.now().astimezone().strftime(_TIMESTAMP_FORMAT)

    def _write_line(self, line: str) -> None:
        stream = self.stream
        stream.write(line + "\n")
        stream.flush()


class AccessLogger(Logger):
    """Logs one line per handled request."""

    def __init__(
        self,
        stream: TextIO | None = None,
        fmt: Iterable[Variable] = DEFAULT_FORMAT,
    ) -> None:
        super().__init__(stream)
        self.format = list(fmt)

    def log(
        self,
        request: Any,
        host: str,
        port: int,
        client: object,
        status: int | None = None,
    ) -> None:
        self.timestamp_update()
        pieces = []
        for variable in self.format:
            if variable.type is VariableType.LITERAL:
                pieces.append(variable.data)
            elif variable.type is VariableType.TIME_LOCAL:
                pieces.append(self.timestamp)
            elif variable.type is VariableType.HOST:
                pieces.append(f"{host}:{port}")
            elif variable.type is VariableType.CLIENT:
                pieces.append(str(client))
            elif variable.type is VariableType.REQUEST:
                pieces.append(f"{request.method.name} {request.uri}")
            elif variable.type is VariableType.STATUS:
                pieces.append("" if status is None else str(int(status)))
        self._write_line("".join(pieces))


class Level(enum.IntEnum):
    DEBUG = 0
    INFO = 1
    NOTICE = 2
    WARNING = 3
    ERROR = 4
    CRITICAL = 5
    ALERT = 6
    EMERGENCY = 7


DEFAULT_LEVEL = Level.ERROR


def level_to_string(level: Level) -> str:
    return Level(level).name.lower()


def level_from_string(text: str) -> Level:
    for level in Level:
        if text == level.name.lower():
            return level
    raise ValueError("string does not match error logger level")


def _to_text(arg: object) -> str:
    if isinstance(arg, bool):
        return str(int(arg))
    if isinstance(arg, float):
        return f"{arg:f}"
    return str(arg)


class ErrorLogger(Logger):
    """Logs diagnostic messages at or above a minimum level."""

    def __init__(
        self, stream: TextIO | None = None, level: Level = DEFAULT_LEVEL
    ) -> None:
        super().__init__(stream)
        self.level = level

    def _default_stream(self) -> TextIO:
        return sys.stderr

    def log(self, level: Level, *args: object) -> None:
        if level < self.level:
            return
        self.timestamp_update()
        message = "".join(_to_text(arg) for arg in args)
        self._write_line(f"[{level_to_string(level)}] [{self.timestamp}] {message}")


alog = AccessLogger()
elog = ErrorLogger()