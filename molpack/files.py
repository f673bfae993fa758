"""File and path helpers used while staging and packing a library."""

from __future__ import annotations

import os
import shutil
import sys
from pathlib import Path

DOT_LIBRARY = ".library"

_IS_WINDOWS = os.name == "nt"


def _extension(filename: str | None) -> str | None:
    """Return the lower-cased text from the last dot on, or None."""
    if filename is None:
        return None
    dot = filename.rfind(".")
    if dot < 0:
        return None
    return filename[dot:].lower()


def is_modelica_file(filename: str | None) -> bool:
    """Tell whether a file name has the Modelica extension ``.mo``."""
    return _extension(filename) == ".mo"


def is_encrypted_file(filename: str | None) -> bool:
    """Tell whether a file name has the encrypted Modelica extension ``.moc``."""
    return _extension(filename) == ".moc"


def extract_filename(path: str) -> str:
    """Return the last component of a path, or the path itself if it has no separator."""
    separators = "/\\" if _IS_WINDOWS else "/"
    cut = max(path.rfind(sep) for sep in separators)
    return path[cut + 1:] if cut >= 0 else path


def extract_path(path: str | None) -> str | None:
    """Return everything before the last separator, or the whole path without one."""
    if path is None:
        return None
    separator = "\\" if _IS_WINDOWS else "/"
    cut = path.rfind(separator)
    return path[:cut] if cut >= 0 else path


def is_directory(path: str | os.PathLike[str]) -> bool:
    """Tell whether a path exists and is a directory."""
    return os.path.isdir(path)


def validate_path(path: str | os.PathLike[str] | None) -> str:
    """Check that a library path names an existing directory.

    Trailing slashes and backslashes are trimmed; the trimmed path is returned.
    """
    text = os.fspath(path) if path is not None else ""
    if not text:
        raise ValueError("Path is empty!")

    while len(text) > 1 and text[-1] in "/\\":
        text = text[:-1]

    if not os.path.exists(text):
        raise FileNotFoundError(f"Library path {text} does not exist.")
    if not os.path.isdir(text):
        raise NotADirectoryError(f"Library path {text} is not a directory.")
    return text


def executable_directory() -> Path:
    """Return the directory the running program was started from."""
    program = sys.argv[0] if sys.argv and sys.argv[0] else sys.executable
    return Path(os.path.realpath(program)).parent


def copy_file(
    source: str | os.PathLike[str], destination: str | os.PathLike[str]
) -> Path:
    """Copy a file's contents and permission bits to a new location."""
    shutil.copyfile(source, destination)
    if not _IS_WINDOWS:
        shutil.copymode(source, destination)
    return Path(destination)


def copy_directory(
    source: str | os.PathLike[str], destination: str | os.PathLike[str]
) -> None:
    """Recursively copy directories and regular files, skipping ``.library`` entries.

    Symbolic links and special files are not copied. Raises OSError if the
    source directory cannot be read.
    """
    destination = Path(destination)
    with os.scandir(source) as entries:
        for entry in sorted(entries, key=lambda e: e.name):
            if entry.name == DOT_LIBRARY:
                continue
            target = destination / entry.name
            if entry.is_dir(follow_symlinks=False):
                target.mkdir(exist_ok=True)
                copy_directory(entry.path, target)
            elif entry.is_file(follow_symlinks=False):
                shutil.copyfile(entry.path, target)


def remove_folder(path: str | os.PathLike[str]) -> None:
    """Delete a directory and everything below it."""
    shutil.rmtree(path)


def find_file(
    filename: str, root: str | os.PathLike[str]
) -> Path | None:
    """Search a directory tree depth first for a regular file with the given name.

    Returns the first match, or None. Raises OSError if ``root`` cannot be read.
    """
    with os.scandir(root) as scan:
        entries = sorted(scan, key=lambda e: e.name)
    for entry in entries:
        if entry.is_dir(follow_symlinks=False):
            try:
                found = find_file(filename, entry.path)
            except OSError:
                continue
            if found is not None:
                return found
        elif entry.is_file(follow_symlinks=False) and entry.name == filename:
            return Path(entry.path)
    return None


def strip_prefix(
    path: str | os.PathLike[str], prefix: str | os.PathLike[str]
) -> str:
    """Return the part of ``path`` after ``prefix`` and the separator that follows it."""
    path_text = os.fspath(path)
    prefix_text = os.fspath(prefix)
    if not path_text.startswith(prefix_text):
        raise ValueError(f"{path_text} does not start with {prefix_text}")
    return path_text[len(prefix_text) + 1:]