"""Built-in HTML pages."""

from __future__ import annotations

import os
from pathlib import Path

from webserv.http.common import description


def error_page(status: int) -> str:
    """A minimal page describing ``status``."""
    title = f"{int(status)} {description(status)}"
    return (
        '<!DOCTYPE html><html lang="en-US"><head><meta charset="utf-8" /><title>'
        f"{title}"
        '</title></head><body><h1 align="center">'
        f"{title}"
        '</h1><hr /><p align="center">webserv</p></body></html>'
    )


def _quoted(name: str) -> str:
    escaped = name.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def directory_list(path: str | os.PathLike[str]) -> str:
    """A page listing the entries of directory ``path``."""
    directory = Path(path)
    items = "".join(
        f"<li>{_quoted(entry.name)}</li>" for entry in sorted(directory.iterdir())
    )
    return (
        '<!DOCTYPE html><html><meta charset="utf-8" /><title>'
        f"{os.fspath(path)}</title></head><body><ul>"
        f"{items}</body></html>"
    )