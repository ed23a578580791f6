"""Containment check for paths inside the upload temp directory."""
import os
from pathlib import Path
from typing import Union

PathLike = Union[str, Path]


class PathGuardError(Exception):
    """Raised when a file operation targets a path outside the temp directory."""


def _canonical(path: PathLike) -> str:
    resolved = os.path.realpath(os.path.abspath(os.fspath(path)))
    return resolved.rstrip(os.sep) or os.sep


def is_within(candidate: PathLike, root: PathLike) -> bool:
    """Return True if *candidate* resolves to a strict descendant of *root*.

    Both paths are made absolute and canonical (symlinks followed, ``..``
    collapsed) before comparing.  The root itself is not "within" the root.
    """
    candidate_path = _canonical(candidate)
    root_path = _canonical(root)
    if candidate_path == root_path:
        return False
    prefix = root_path if root_path.endswith(os.sep) else root_path + os.sep
    return candidate_path.startswith(prefix)
