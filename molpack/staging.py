"""The temporary staging copy of a library that is packed into a container."""

from __future__ import annotations

import os
import tempfile
from pathlib import Path
from types import TracebackType

from molpack.arguments import ICON_PATH, LIBRARY_PATH, LVE_EXECUTABLES, PackageArguments
from molpack.files import (
    DOT_LIBRARY,
    copy_directory,
    copy_file,
    executable_directory,
    extract_filename,
    find_file,
    remove_folder,
)

_STAGING_PREFIX = "TemporaryFolder"
_LVE_FOLDER = "LVE"


class StagingError(RuntimeError):
    """Raised when a step of staging the library fails."""


def count_lve(directory: str | os.PathLike[str]) -> int:
    """Count the known LVE executables present in a directory."""
    folder = Path(directory)
    return sum((folder / name).exists() for name in LVE_EXECUTABLES)


class StagingArea:
    """A temporary folder holding a copy of the library and its ``.library`` folder.

    The temporary folder is created on first use and removed by :meth:`delete`
    or on leaving a ``with`` block.
    """

    def __init__(
        self,
        arguments: PackageArguments,
        executable_dir: str | os.PathLike[str] | None = None,
        temp_root: str | os.PathLike[str] | None = None,
    ) -> None:
        self.arguments = arguments
        self.executable_dir = (
            Path(executable_dir) if executable_dir is not None else executable_directory()
        )
        self.temp_root = Path(temp_root) if temp_root is not None else Path(tempfile.gettempdir())
        self.icon_path: str | None = None
        self.lve_files: list[str] = []
        self._root: Path | None = None

    @property
    def root(self) -> Path:
        """The temporary staging folder, created on first access."""
        if self._root is None:
            try:
                self._root = Path(tempfile.mkdtemp(prefix=_STAGING_PREFIX, dir=self.temp_root))
            except OSError as exc:
                raise StagingError(f"Unable to create temporary folder: {exc}") from exc
        return self._root

    @property
    def source_path(self) -> Path:
        """The folder inside the staging area that holds the copied library."""
        name = self.arguments.library_name()
        if not name:
            raise StagingError("No library path given.")
        return self.root / name

    @property
    def dot_library_path(self) -> Path:
        """The ``.library`` folder inside the copied library."""
        return self.source_path / DOT_LIBRARY

    def copy_folder_structure(self) -> Path:
        """Copy the library into the staging area and return the copy's path."""
        library = self.arguments.get(LIBRARY_PATH)
        if library is None:
            raise StagingError("Fail to get librarypath")
        target = self.source_path
        try:
            target.mkdir(mode=0o775)
        except OSError as exc:
            raise StagingError(f"Failed to create source folder: {exc}") from exc
        try:
            copy_directory(library, target)
        except OSError as exc:
            raise StagingError(f"Failed to perform staging of files: {exc}") from exc
        return target

    def create_library_folder(self) -> Path:
        """Create the ``.library`` folder in the copied library."""
        path = self.dot_library_path
        try:
            path.mkdir(mode=0o775)
        except OSError as exc:
            raise StagingError(
                f"Error: Failed to create directory with path {path}: {exc.strerror or exc}"
            ) from exc
        return path

    def prepare_icon_file(self) -> str | None:
        """Find the icon in the copied library and return its path relative to it.

        Returns None when no icon argument was given.
        """
        icon = self.arguments.get(ICON_PATH)
        if icon is None:
            return None
        source = self.source_path
        try:
            found = find_file(extract_filename(icon), source)
        except OSError as exc:
            raise StagingError(
                "Unable to locate the icon file in the source folder."
            ) from exc
        if found is None:
            raise StagingError("Unable to locate the icon file in the source folder.")
        relative = found.relative_to(source).as_posix()
        if not relative:
            raise StagingError(
                "Unable to remove tmp or library path from the icon file path."
            )
        self.icon_path = relative
        return relative

    def copy_lve(self) -> list[str]:
        """Copy the available LVE executables into ``.library`` when encrypting.

        Returns the names of the copied executables in their fixed order.
        """
        if not self.arguments.uses_encryption():
            self.lve_files = []
            return []
        lve_folder = self.executable_dir / _LVE_FOLDER
        copied = []
        for name in LVE_EXECUTABLES:
            source = lve_folder / name
            if not source.exists():
                continue
            destination = self.dot_library_path / name
            try:
                copy_file(source, destination)
            except OSError as exc:
                raise StagingError(
                    f"Error while copying from {source} to {destination}."
                ) from exc
            copied.append(name)
        self.lve_files = copied
        return copied

    def copy_extra_files(self) -> bool:
        """Copy a ``.library`` folder found next to the program into the staged one.

        Returns whether such a folder existed.
        """
        extra = self.executable_dir / DOT_LIBRARY
        if not extra.exists():
            return False
        try:
            copy_directory(extra, self.dot_library_path)
        except OSError as exc:
            raise StagingError(f"Failed to copy extra files from {extra}: {exc}") from exc
        return True

    def delete(self) -> None:
        """Remove the staging folder and everything in it, if it exists."""
        if self._root is None or not self._root.exists():
            return
        try:
            remove_folder(self._root)
        except OSError as exc:
            raise StagingError(
                f"Failed to remove temporary files ({self._root}): {exc}"
            ) from exc

    def __enter__(self) -> "StagingArea":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.delete()