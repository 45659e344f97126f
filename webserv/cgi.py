"""Running CGI scripts connected to the server through a socket pair."""

from __future__ import annotations

import enum
import errno
import os
import socket
import subprocess
from pathlib import Path
from typing import Mapping

from webserv.logs import Level, elog
from webserv.network import EventType, NetworkError, Poller
from webserv.resource import ResourceError, ResourceIOError

_FORK_ERRNOS = frozenset({errno.EAGAIN, errno.ENOMEM})


class ProcessStatus(enum.Enum):
    BUSY = "busy"
    SUCCESS = "success"
    FAILURE = "failure"
    ABORTED = "aborted"


class CGIError(ResourceError):
    """A CGI script could not be handled."""


class WaitError(CGIError):
    """The state of the script's process could not be queried."""


class ForkError(CGIError):
    """No process could be started for the script."""


class CGI:
    """A running CGI script.

    The script runs in its own directory with ``environ`` as its environment;
    its standard input and output are one end of a socket pair whose other
    end is registered with ``poller``.
    """

    def __init__(
        self,
        script: str | os.PathLike[str],
        environ: Mapping[str, str],
        poller: Poller,
    ) -> None:
        self._poller = poller
        self._obuf = bytearray()
        self._process: subprocess.Popen[bytes] | None = None
        self._spawn_failed = False
        self._socket: socket.socket | None = None
        self._spawn(Path(script), environ)

    def __enter__(self) -> CGI:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _spawn(self, script: Path, environ: Mapping[str, str]) -> None:
        try:
            parent, child = socket.socketpair()
        except OSError as exc:
            raise NetworkError("pair", exc.errno) from exc
        parent.setblocking(False)
        try:
            self._process = subprocess.Popen(
                [script.name],
                executable=os.path.join(os.curdir, script.name),
                cwd=script.parent,
                env=dict(environ),
                stdin=child,
                stdout=child,
            )
        except OSError as exc:
            if exc.errno in _FORK_ERRNOS:
                child.close()
                parent.close()
                raise ForkError(str(exc)) from exc
            # The script could not be started: it counts as a failed run.
            elog.log(Level.ERROR, "execve: ", str(exc))
            self._spawn_failed = True
        finally:
            child.close()
        self._socket = parent
        self._poller.add(parent, EventType.READ | EventType.WRITE)

    def _require_socket(self) -> socket.socket:
        if self._socket is None:
            raise CGIError("uninitialized socket")
        return self._socket

    def read(self, size: int) -> bytes:
        """Read up to ``size`` bytes of the script's output.

        Pending input is flushed first. The socket must have been reported
        readable by the last poll.
        """
        self.flush()
        sock = self._require_socket()
        try:
            event = self._poller.event(sock)
        except KeyError as exc:
            raise ResourceIOError("socket unavailable") from exc
        if not event.happened(EventType.READ):
            raise ResourceIOError("socket unavailable for reading")
        try:
            return sock.recv(size)
        except OSError as exc:
            raise NetworkError("recv", exc.errno) from exc

    def write(self, data: bytes) -> int:
        """Queue ``data`` as input for the script."""
        self._obuf += bytes(data)
        return len(data)

    def flush(self) -> None:
        """Send queued input if the last poll reported the socket."""
        if not self._obuf:
            return
        sock = self._require_socket()
        try:
            event = self._poller.event(sock)
        except KeyError:
            return  # not among the polled handles this round
        if not event.happened(EventType.WRITE):
            raise ResourceIOError("socket unavailable for writing")
        try:
            sent = sock.send(self._obuf)
        except OSError as exc:
            raise NetworkError("send", exc.errno) from exc
        del self._obuf[:sent]

    def wait(self) -> ProcessStatus:
        """Check, without blocking, whether the script has finished."""
        if self._spawn_failed:
            self._spawn_failed = False
            return ProcessStatus.FAILURE
        if self._process is None:
            return ProcessStatus.SUCCESS
        try:
            code = self._process.poll()
        except OSError as exc:
            raise WaitError(str(exc)) from exc
        if code is None:
            return ProcessStatus.BUSY
        self._process = None
        if code < 0:
            return ProcessStatus.ABORTED
        if code != 0:
            return ProcessStatus.FAILURE
        return ProcessStatus.SUCCESS

    def kill(self) -> ProcessStatus:
        """Kill the script and report its status."""
        if self._process is not None:
            try:
                self._process.kill()
            except OSError:
                pass
        try:
            return self.wait()
        except WaitError:
            return ProcessStatus.FAILURE

    def close(self) -> None:
        """Kill the script, reap it and release the socket."""
        self.kill()
        if self._process is not None:
            self._process.wait()
            self._process = None
        if self._socket is not None:
            try:
                self._poller.remove(self._socket)
            except NetworkError:
                pass
            self._socket.close()
            self._socket = None