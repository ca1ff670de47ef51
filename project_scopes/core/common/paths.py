# File: project_scopes/core/common/paths.py

import posixpath
from pathlib import Path, PurePosixPath
from typing import Iterator, Optional, Union

# Marker for the project root in project-relative form.
ROOT = "."


def to_relative(root: Optional[Path], value: Union[str, Path]) -> str:
    """
    Converts an absolute or host-specific path into a project-root-relative,
    '/'-separated string.

    "." and ".." segments are collapsed. Values outside the root (and globs)
    keep their text otherwise, so they can still be stored as-is; see
    is_outside().
    """
    text = str(value).strip().replace("\\", "/")
    if not text:
        return ""

    candidate = Path(text)
    if root is not None and candidate.is_absolute():
        try:
            text = candidate.relative_to(root).as_posix()
        except ValueError:
            pass

    return posixpath.normpath(text)


def is_outside(path: str) -> bool:
    """True for absolute paths and paths that climb above the project root."""
    return Path(path).is_absolute() or path == ".." or path.startswith("../")


def parent_dir(path: str) -> str:
    """dirname() with '.' standing in for the project root."""
    parent = posixpath.dirname(path)
    return parent or ROOT


def is_root(path: str) -> bool:
    """True once climbing one more level would not change the path."""
    return parent_dir(path) == path


def to_absolute(root: Path, path: str) -> Path:
    if path == ROOT:
        return root
    return root.joinpath(*PurePosixPath(path).parts)


def ancestors(path: str) -> Iterator[str]:
    """
    Yields path, dirname(path), dirname(dirname(path)), ... stopping before
    the root marker.
    """
    current = path
    while current != ROOT and not is_root(current):
        yield current
        current = parent_dir(current)
