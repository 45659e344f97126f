"""A tree of routes mapping request paths onto filesystem paths."""

from __future__ import annotations

import enum
import os
from pathlib import PurePosixPath
from typing import Iterable, Union

from webserv.http.common import Method

PathLike = Union[str, "os.PathLike[str]"]


class _MethodOption(enum.Enum):
    INHERITS = "inherits"
    OWN = "own"


class _DirectoryOption(enum.Enum):
    INHERITS = "inherits"
    FORBID = "forbid"
    LISTING = "listing"
    DEFAULT_FILE = "default_file"


class _CGIOption(enum.Enum):
    INHERITS = "inherits"
    ALLOW = "allow"
    DISALLOW = "disallow"


def _split(path: PathLike) -> tuple[str, list[str]]:
    """Split ``path`` into its root (``/`` if absolute, else empty) and its names."""
    text = os.fspath(path)
    root = "/" if text.startswith("/") else ""
    names = [part for part in text.split("/") if part]
    return root, names


def _branch(root: str, names: list[str]) -> list[str]:
    """The path elements that follow the first one."""
    return names if root else names[1:]


def _extension(name: str) -> str:
    """The text after the last dot, ignoring a dot that starts the name."""
    index = name.rfind(".")
    return name[index + 1 :] if index >= 1 else ""


def _append(root: PurePosixPath, segments: Iterable[str]) -> PurePosixPath:
    for segment in segments:
        root = root / segment
    return root


class BaseRoute:
    """Directory, method and CGI settings shared by routes and locations."""

    def __init__(self, inherit: bool = False) -> None:
        self._methopt = _MethodOption.INHERITS if inherit else _MethodOption.OWN
        self._allowed_methods = Method(0)
        self._diropt = (
            _DirectoryOption.INHERITS if inherit else _DirectoryOption.FORBID
        )
        self._directory_file = ""
        self._cgiopt = _CGIOption.INHERITS if inherit else _CGIOption.DISALLOW
        self._cgi: set[str] = set()

    def lists_directory(self) -> bool:
        return self._diropt is _DirectoryOption.LISTING

    def forbids_directory(self) -> bool:
        return self._diropt is _DirectoryOption.FORBID

    def directory_file(self) -> str:
        return self._directory_file

    def allows_method(self, method: Method) -> bool:
        return bool(self._allowed_methods & method)

    def allows_cgi(self, ext: str) -> bool:
        return ext in self._cgi


class Route(BaseRoute):
    """A node of the route tree; its children are keyed by file name."""

    def __init__(self, path: PathLike) -> None:
        root, names = _split(path)
        segments = ([root] if root else []) + names
        if not segments:
            raise ValueError("empty route path")
        super().__init__()
        self._parent: Route | None = None
        self._subroutes: dict[str, Route] = {}
        self.filename = segments[0]
        self._redirection = ""
        self.extend(path)

    @classmethod
    def _child(cls, parent: Route, name: str) -> Route:
        route = cls.__new__(cls)
        BaseRoute.__init__(route, inherit=True)
        route._parent = parent
        route._subroutes = {}
        route.filename = name
        route._redirection = ""
        return route

    def __repr__(self) -> str:
        return f"Route({str(self.source())!r})"

    # Paths

    def source(self) -> PurePosixPath:
        """The request path this route matches."""
        if self._parent is not None:
            return self._parent.source() / self.filename
        return PurePosixPath(self.filename)

    def target(self) -> PurePosixPath:
        """The filesystem path this route maps to."""
        if self._redirection:
            return PurePosixPath(self._redirection)
        if self._parent is not None:
            return self._parent.target() / self.filename
        return self.source()

    # Inherited settings

    def _method_owner(self) -> Route:
        route = self
        while route._parent is not None and route._methopt is _MethodOption.INHERITS:
            route = route._parent
        return route

    def _dir_owner(self) -> Route:
        route = self
        while (
            route._parent is not None
            and route._diropt is _DirectoryOption.INHERITS
        ):
            route = route._parent
        return route

    def _cgi_owner(self) -> Route:
        route = self
        while route._parent is not None and route._cgiopt is _CGIOption.INHERITS:
            route = route._parent
        return route

    def lists_directory(self) -> bool:
        return BaseRoute.lists_directory(self._dir_owner())

    def forbids_directory(self) -> bool:
        return BaseRoute.forbids_directory(self._dir_owner())

    def directory_file(self) -> str:
        return BaseRoute.directory_file(self._dir_owner())

    def allows_method(self, method: Method) -> bool:
        return BaseRoute.allows_method(self._method_owner(), method)

    def allows_cgi(self, ext: str) -> bool:
        return BaseRoute.allows_cgi(self._cgi_owner(), ext)

    # Lookup

    def follow(self, path: PathLike) -> Location:
        """Resolve a request path to a location below this route."""
        root, names = _split(path)
        if root != self.filename and root != "":
            raise ValueError("different root path")
        segments = _branch(root, names)
        route = self
        for index, segment in enumerate(segments):
            child = route._subroutes.get(segment)
            if child is None:
                return Location(route, segments[index:])
            route = child
        return Location(route)

    def seek(self, path: PathLike) -> Route:
        """The route at exactly ``path``; raises ValueError if there is none."""
        root, names = _split(path)
        if root != self.filename:
            raise ValueError("different root path")
        route = self
        for segment in _branch(root, names):
            child = route._subroutes.get(segment)
            if child is None:
                raise ValueError("route not found")
            route = child
        return route

    # Modifiers

    def extend(self, path: PathLike) -> Route:
        """Create the routes along ``path`` and return the last one."""
        root, names = _split(path)
        if root != self.filename:
            raise ValueError("different root path")
        route = self
        for segment in _branch(root, names):
            child = route._subroutes.get(segment)
            if child is None:
                child = route._subroutes[segment] = Route._child(route, segment)
            route = child
        return route

    def redirect(self, path: PathLike) -> Route:
        """Map this route onto ``path``; an empty path removes the mapping."""
        self._redirection = os.fspath(path)
        return self

    def list_directory(self) -> Route:
        self._directory_file = ""
        self._diropt = _DirectoryOption.LISTING
        return self

    def forbid_directory(self) -> Route:
        self._directory_file = ""
        self._diropt = _DirectoryOption.FORBID
        return self

    def set_directory_file(self, name: str) -> Route:
        self._diropt = _DirectoryOption.DEFAULT_FILE
        self._directory_file = name
        return self

    def reset_diropts(self) -> Route:
        self._directory_file = ""
        self._diropt = (
            _DirectoryOption.INHERITS
            if self._parent is not None
            else _DirectoryOption.FORBID
        )
        return self

    def allow_method(self, method: Method) -> Route:
        self._methopt = _MethodOption.OWN
        self._allowed_methods |= method
        return self

    def disallow_method(self, method: Method) -> Route:
        self._methopt = _MethodOption.OWN
        self._allowed_methods &= ~method
        return self

    def reset_methods(self) -> Route:
        self._allowed_methods = Method(0)
        if self._parent is not None:
            self._methopt = _MethodOption.INHERITS
        return self

    def allow_cgi(self, ext: str) -> Route:
        self._cgiopt = _CGIOption.ALLOW
        self._cgi.add(ext)
        return self

    def disallow_cgi(self, ext: str) -> Route:
        self._cgi.discard(ext)
        return self

    def reset_cgi(self) -> Route:
        self._cgi.clear()
        self._cgiopt = (
            _CGIOption.INHERITS if self._parent is not None else _CGIOption.DISALLOW
        )
        return self


class Location(BaseRoute):
    """A request path resolved against a route.

    The route's settings are copied when the location is made.
    ``segments`` are the names below ``route`` that no subroute matched.
    """

    def __init__(self, route: Route, segments: Iterable[str] = ()) -> None:
        super().__init__()
        method_owner = route._method_owner()
        dir_owner = route._dir_owner()
        cgi_owner = route._cgi_owner()
        self._allowed_methods = method_owner._allowed_methods
        self._diropt = dir_owner._diropt
        self._directory_file = dir_owner._directory_file
        self._cgiopt = cgi_owner._cgiopt
        self._cgi = set(cgi_owner._cgi)

        branch = list(segments)
        cgi_end = len(branch)
        self.is_cgi = False
        for index, segment in enumerate(branch):
            if route.allows_cgi(_extension(segment)):
                self.is_cgi = True
                cgi_end = index + 1
                break
        self.source = _append(route.source(), branch)
        self.target = _append(route.target(), branch[:cgi_end])
        self.path_info = "".join(f"/{segment}" for segment in branch[cgi_end:])

    def __repr__(self) -> str:
        return (
            f"Location(source={str(self.source)!r}, target={str(self.target)!r}, "
            f"is_cgi={self.is_cgi}, path_info={self.path_info!r})"
        )

    def translate(self, route: Route) -> Location:
        """Resolve this location's path info against ``route``."""
        return route.follow(self.path_info)