"""Socket addresses and readiness polling."""

from __future__ import annotations

import enum
import errno as _errno
import ipaddress
import os
import selectors
import socket
from dataclasses import dataclass
from typing import Any, Iterable, Union

_PORT_MAX = 0xFFFF
_ADDRESS_MAX = 0xFFFFFFFF


class NetworkError(Exception):
    """A socket or polling operation failed."""

    def __init__(self, message: str, code: int | None = None) -> None:
        text = message if code is None else f"{message}: {os.strerror(code)}"
        super().__init__(text)
        self.errno = code


@dataclass(frozen=True)
class Address:
    """An IPv4 socket address; ``address`` is the host-order 32-bit number."""

    port: int = 0
    address: int = 0

    def __post_init__(self) -> None:
        if not 0 <= self.port <= _PORT_MAX:
            raise ValueError(f"port out of range: {self.port}")
        if not 0 <= self.address <= _ADDRESS_MAX:
            raise ValueError(f"address out of range: {self.address}")

    @property
    def host(self) -> str:
        """The address in dotted-quad notation."""
        return str(ipaddress.IPv4Address(self.address))

    @property
    def sockaddr(self) -> tuple[str, int]:
        """The address in the form the socket module takes."""
        return (self.host, self.port)

    def __str__(self) -> str:
        return f"{self.host}:{self.port}"

    @staticmethod
    def from_socket(sock: socket.socket) -> Address:
        """The local address that ``sock`` is bound to."""
        try:
            name = sock.getsockname()
        except OSError as exc:
            raise NetworkError("getsockname", exc.errno) from exc
        if sock.family != socket.AF_INET or not isinstance(name, tuple):
            raise NetworkError("getsockname")
        host, port = name
        return Address(port, int(ipaddress.IPv4Address(host)))


class EventType(enum.IntFlag):
    """Kinds of readiness a handle can be polled for."""

    READ = 0x001
    EXCEPTION = 0x002
    WRITE = 0x004
    ERROR = 0x008
    HANGUP = 0x010
    CLOSED = 0x2000


EventTypes = Union[EventType, Iterable[EventType]]


def _bitmask(events: EventTypes) -> EventType:
    if isinstance(events, EventType):
        return events
    mask = EventType(0)
    for event in events:
        mask |= event
    return mask


def _selector_mask(events: EventType) -> int:
    mask = 0
    if events & EventType.READ:
        mask |= selectors.EVENT_READ
    if events & EventType.WRITE:
        mask |= selectors.EVENT_WRITE
    if not mask:
        raise ValueError("no pollable event types")
    return mask


def _from_selector(mask: int) -> EventType:
    events = EventType(0)
    if mask & selectors.EVENT_READ:
        events |= EventType.READ
    if mask & selectors.EVENT_WRITE:
        events |= EventType.WRITE
    return events


@dataclass
class Event:
    """The kinds of readiness reported for one handle."""

    events: EventType = EventType(0)

    def happened(self, kind: EventType) -> bool:
        return bool(self.events & kind)

    def expire(self, kind: EventType) -> bool:
        """Clear ``kind`` and return whether it had happened."""
        did_happen = self.happened(kind)
        self.events &= ~kind
        return did_happen


class Poller:
    """Waits for readiness on a set of registered handles.

    The events of the most recent :meth:`wait` are kept and can be looked up
    per handle with :meth:`event`.
    """

    def __init__(self) -> None:
        self._selector = selectors.DefaultSelector()
        self._events: dict[Any, Event] = {}

    def __enter__(self) -> Poller:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def __len__(self) -> int:
        mapping = self._selector.get_map()
        return 0 if mapping is None else len(mapping)

    def add(self, handle: Any, events: EventTypes) -> Any:
        """Register ``handle``; adding a handle twice is not an error."""
        types = _bitmask(events)
        try:
            self._selector.register(handle, _selector_mask(types), types)
        except KeyError:
            pass  # already registered
        except OSError as exc:
            raise NetworkError("epoll_ctl", exc.errno) from exc
        return handle

    def modify(self, handle: Any, events: EventTypes) -> None:
        """Change what ``handle`` is polled for; unknown handles are ignored."""
        types = _bitmask(events)
        try:
            self._selector.modify(handle, _selector_mask(types), types)
        except KeyError:
            return
        except OSError as exc:
            raise NetworkError("epoll_ctl", exc.errno) from exc

    def remove(self, handle: Any) -> None:
        """Stop polling ``handle``."""
        try:
            self._selector.unregister(handle)
        except KeyError as exc:
            raise NetworkError("epoll_ctl", _errno.ENOENT) from exc
        except OSError as exc:
            raise NetworkError("epoll_ctl", exc.errno) from exc
        self._events.pop(handle, None)

    def wait(self, timeout: float | None = None) -> dict[Any, Event]:
        """Wait up to ``timeout`` seconds (forever if None) for readiness."""
        try:
            ready = self._selector.select(timeout)
        except OSError as exc:
            raise NetworkError("epoll_wait", exc.errno) from exc
        self._events = {key.fileobj: Event(_from_selector(mask)) for key, mask in ready}
        return dict(self._events)

    def event(self, handle: Any) -> Event:
        """The event of ``handle`` from the last wait; KeyError if it had none."""
        return self._events[handle]

    def close(self) -> None:
        self._events.clear()
        self._selector.close()