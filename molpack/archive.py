"""Packing a staged library into a ``.mol`` container (a zip archive)."""

from __future__ import annotations

import os
import zipfile
from pathlib import Path

from molpack.files import is_modelica_file, strip_prefix

ARCHIVE_EXTENSION = ".mol"
ENTRY_COMMENT = b"Modelica_archive"
_COMPRESSION = zipfile.ZIP_DEFLATED
_COMPRESS_LEVEL = 9


class ArchiveError(RuntimeError):
    """Raised when the container cannot be written."""


def zip_entry_name(
    path: str | os.PathLike[str], staging_root: str | os.PathLike[str]
) -> str:
    """Return the archive member name for a staged file.

    The staging folder and its following separator are removed and
    backslashes become forward slashes.
    """
    try:
        relative = strip_prefix(path, staging_root)
    except ValueError as exc:
        raise ArchiveError(str(exc)) from exc
    return relative.replace("\\", "/")


def _add_file(archive: zipfile.ZipFile, path: str, staging_root: str) -> None:
    name = zip_entry_name(path, staging_root)
    try:
        data = Path(path).read_bytes()
        info = zipfile.ZipInfo.from_file(path, arcname=name)
    except OSError as exc:
        raise ArchiveError(
            f'Error: Failed to copy file "{path}" to zip-archive.'
        ) from exc
    info.comment = ENTRY_COMMENT
    info.compress_type = _COMPRESSION
    try:
        archive.writestr(
            info, data, compress_type=_COMPRESSION, compresslevel=_COMPRESS_LEVEL
        )
    except (OSError, ValueError) as exc:
        raise ArchiveError(
            f'Error: Failed to add file "{name}" to zip archive.'
        ) from exc


def zip_directory(
    path: str | os.PathLike[str],
    archive: zipfile.ZipFile,
    staging_root: str | os.PathLike[str],
    encrypted: bool,
) -> int:
    """Add every regular file below ``path`` to an open archive.

    When ``encrypted`` is true, plain Modelica files (``.mo``) are left out.
    Returns the number of files added.
    """
    root_text = os.fspath(staging_root)
    try:
        with os.scandir(path) as scan:
            entries = sorted(scan, key=lambda e: e.name)
    except OSError as exc:
        raise ArchiveError(f"Failed to open directory {os.fspath(path)}") from exc

    added = 0
    for entry in entries:
        if entry.is_dir(follow_symlinks=False):
            added += zip_directory(entry.path, archive, root_text, encrypted)
        elif entry.is_file(follow_symlinks=False):
            if encrypted and is_modelica_file(entry.name):
                continue
            _add_file(archive, entry.path, root_text)
            added += 1
    return added


def create_zip_archive(
    staging_root: str | os.PathLike[str],
    library_name: str,
    output_dir: str | os.PathLike[str] | None = None,
    encrypted: bool = False,
) -> Path:
    """Write ``<library_name>.mol`` from the staging folder and return its path.

    Any earlier archive of that name in ``output_dir`` (default: the current
    directory) is replaced.
    """
    directory = Path(output_dir) if output_dir is not None else Path.cwd()
    target = directory / f"{library_name}{ARCHIVE_EXTENSION}"
    if target.exists():
        try:
            target.unlink()
        except OSError as exc:
            raise ArchiveError(f"Failed to remove old archive {target}: {exc}") from exc

    try:
        with zipfile.ZipFile(target, "w", compression=_COMPRESSION) as archive:
            zip_directory(staging_root, archive, staging_root, encrypted)
    except ArchiveError:
        target.unlink(missing_ok=True)
        raise
    except OSError as exc:
        raise ArchiveError(f"Error creating archive {target}: {exc}") from exc
    return target