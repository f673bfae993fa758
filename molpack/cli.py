"""Command-line entry point that packs a library folder into a ``.mol`` container."""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Callable, Sequence

from molpack.archive import ArchiveError, create_zip_archive
from molpack.arguments import ArgumentError, PackageArguments, help_requested, help_text
from molpack.files import executable_directory
from molpack.manifest import write_manifest
from molpack.staging import StagingArea, StagingError

EXIT_OK = 0
EXIT_INVALID_ARGUMENTS = 1
EXIT_COPY_FOLDER = 2
EXIT_LIBRARY_FOLDER = 3
EXIT_ICON = 4
EXIT_LVE = 5
EXIT_EXTRA_FILES = 6
EXIT_MANIFEST = 7
EXIT_ENCRYPTION = 8
EXIT_ARCHIVE = 9

_STEP_ERRORS = (StagingError, ArchiveError, OSError, ValueError)


def _encrypt_files(arguments: PackageArguments) -> None:
    """Encrypt the staged Modelica files when encryption is asked for."""
    if arguments.uses_encryption():
        raise StagingError(
            "Failed to encrypt file: no cipher for Modelica files is available."
        )


def _pack(
    staging: StagingArea,
    arguments: PackageArguments,
    output_dir: str | os.PathLike[str] | None,
) -> int:
    """Run each packing step in order; return the exit code of the first failure."""
    library_name = arguments.library_name() or ""
    encrypted = arguments.uses_encryption()
    steps: list[tuple[int, Callable[[], object]]] = [
        (EXIT_COPY_FOLDER, staging.copy_folder_structure),
        (EXIT_LIBRARY_FOLDER, staging.create_library_folder),
        (EXIT_ICON, staging.prepare_icon_file),
        (EXIT_LVE, staging.copy_lve),
        (EXIT_EXTRA_FILES, staging.copy_extra_files),
        (
            EXIT_MANIFEST,
            lambda: write_manifest(
                staging.dot_library_path,
                arguments,
                staging.lve_files,
                staging.icon_path,
            ),
        ),
        (EXIT_ENCRYPTION, lambda: _encrypt_files(arguments)),
        (
            EXIT_ARCHIVE,
            lambda: create_zip_archive(
                staging.root, library_name, output_dir, encrypted
            ),
        ),
    ]
    for code, step in steps:
        try:
            step()
        except _STEP_ERRORS as exc:
            print(exc)
            return code
    return EXIT_OK


def run(
    argv: Sequence[str] | None = None,
    output_dir: str | os.PathLike[str] | None = None,
    executable_dir: str | os.PathLike[str] | None = None,
) -> int:
    """Pack a library as described by ``argv`` (without the program name).

    The container is written to ``output_dir`` (default: the current
    directory); LVE executables and extra files are looked up next to
    ``executable_dir`` (default: the running program's directory).
    Returns the process exit code.
    """
    args = list(sys.argv[1:] if argv is None else argv)

    if help_requested(args):
        print(help_text(), end="")
        sys.stdout.flush()
        return EXIT_OK

    print("\nValidating arguments.")
    exe_dir = Path(executable_dir) if executable_dir is not None else executable_directory()
    try:
        arguments = PackageArguments.parse(args)
        arguments.validate_all(exe_dir / "LVE")
    except ArgumentError as exc:
        print(f"Error: {exc}")
        return EXIT_INVALID_ARGUMENTS

    print("Start packing library.")
    staging = StagingArea(arguments, exe_dir)
    code = _pack(staging, arguments, output_dir)
    if code != EXIT_OK:
        try:
            staging.delete()
        except StagingError:
            pass
        return code

    try:
        staging.delete()
    except StagingError:
        print(f"Ignoring failure to remove temporary files ({staging.source_path})")
        return EXIT_OK

    print("Library is done.")
    return EXIT_OK


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point for the command; ``argv`` excludes the program name."""
    args = list(sys.argv[1:] if argv is None else argv)
    if not args:
        print("Too few arguments.")
        print("For usage use -h or --help")
        return EXIT_INVALID_ARGUMENTS
    return run(args)


if __name__ == "__main__":
    sys.exit(main())