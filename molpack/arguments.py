"""Command-line arguments for packing a library, with their validation and help text."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Iterable, Sequence

from molpack.files import executable_directory, validate_path

LIBRARY_PATH = "librarypath"
ENABLED = "enabled"
TITLE = "title"
DESCRIPTION = "description"
LIBRARY_VERSION = "version"
BUILD_NUMBER = "build"
BUILD_DATE = "date"
LANGUAGE_VERSION = "language"
COPYRIGHT = "copyright"
LICENSE = "license"
ENCRYPT = "encrypt"
ICON_PATH = "icon"
TOOLS_FILE = "tools"
DEPENDENCIES_FILE = "dependencies"
HELP = "--help"
SHORT_HELP = "-h"

VALID_ARGUMENTS = (
    LIBRARY_PATH,
    ENABLED,
    TITLE,
    DESCRIPTION,
    LIBRARY_VERSION,
    BUILD_NUMBER,
    BUILD_DATE,
    LANGUAGE_VERSION,
    COPYRIGHT,
    LICENSE,
    ENCRYPT,
    ICON_PATH,
    TOOLS_FILE,
    DEPENDENCIES_FILE,
)

MANDATORY_ARGUMENTS = (LIBRARY_PATH, LIBRARY_VERSION, LANGUAGE_VERSION)

HELP_ARGUMENTS = (HELP, SHORT_HELP)

LVE_EXECUTABLES = (
    "lve_win32.exe",
    "lve_win64.exe",
    "lve_linux32",
    "lve_linux64",
    "lve_darwin64",
)

_IS_WINDOWS = os.name == "nt"


class ArgumentError(ValueError):
    """Raised when the command-line arguments are invalid."""


def _count_lve(directory: Path) -> int:
    return sum((directory / name).exists() for name in LVE_EXECUTABLES)


class PackageArguments:
    """The argument names and values given on the command line, in the order given."""

    def __init__(self, values: dict[str, str] | None = None) -> None:
        self._values: dict[str, str] = dict(values or {})

    @classmethod
    def parse(cls, argv: Sequence[str]) -> "PackageArguments":
        """Read ``-name value`` pairs; ``argv`` excludes the program name.

        The first character of each argument name is dropped before lookup.
        """
        values: dict[str, str] = {}
        args = iter(argv)
        for argument in args:
            name = argument[1:]
            if not name or name not in VALID_ARGUMENTS:
                raise ArgumentError(f"Argument {argument} is not valid.")
            if name in values:
                raise ArgumentError(f"Can not add argument {name} twice.")
            value = next(args, "")
            if value == "":
                raise ArgumentError(f"Argument {name} is missing a value.")
            values[name] = value
        return cls(values)

    def get(self, key: str) -> str | None:
        """Return the value of an argument, or None if it was not given."""
        return self._values.get(key)

    def __contains__(self, key: object) -> bool:
        return key in self._values

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._values!r})"

    def validate_mandatory(self) -> None:
        """Raise if any mandatory argument is missing."""
        for key in MANDATORY_ARGUMENTS:
            if key not in self:
                raise ArgumentError(f"Mandatory argument {key} is missing.")

    def validate_library_path(self) -> None:
        """Check that the library path is an existing directory; trailing separators are trimmed."""
        value = self.get(LIBRARY_PATH)
        if value is None:
            raise ArgumentError("No path for the top-level library exists.")
        try:
            self._values[LIBRARY_PATH] = validate_path(value)
        except (ValueError, OSError) as exc:
            raise ArgumentError(str(exc)) from exc

    def validate_encryption(self, lve_directory: str | os.PathLike[str] | None = None) -> None:
        """Raise if encryption is asked for but no LVE executable exists.

        ``lve_directory`` is the directory holding the LVE executables; it
        defaults to ``LVE`` next to the running program.
        """
        if not self.uses_encryption():
            return
        directory = (
            Path(lve_directory)
            if lve_directory is not None
            else executable_directory() / "LVE"
        )
        if _count_lve(directory) == 0:
            raise ArgumentError("No LVE was found. Encryption not possible.")

    def validate_xml_file(self, key: str) -> None:
        """Raise if the argument is given and the XML file it names does not exist."""
        value = self.get(key)
        if value is not None and not os.path.exists(value):
            raise ArgumentError(f'Xml-file "{value}" was not found.')

    def validate_icon(self) -> None:
        """Raise if an icon is given and the file does not exist."""
        value = self.get(ICON_PATH)
        if value is not None and not os.path.exists(value):
            raise ArgumentError(f"Icon file {value} doesn't exist.")

    def validate_all(self, lve_directory: str | os.PathLike[str] | None = None) -> None:
        """Run every validation in turn, stopping at the first failure."""
        self.validate_mandatory()
        self.validate_library_path()
        self.validate_encryption(lve_directory)
        self.validate_xml_file(TOOLS_FILE)
        self.validate_xml_file(DEPENDENCIES_FILE)
        self.validate_icon()

    def library_name(self) -> str | None:
        """Return the last folder name of the library path, or None without one."""
        path = self.get(LIBRARY_PATH)
        if path is None:
            return None
        if not _IS_WINDOWS and len(path) > 1 and path.endswith("/"):
            path = path[:-1]
        separators = "/\\" if _IS_WINDOWS else "/"
        cut = max(path.rfind(sep) for sep in separators)
        return path[cut + 1:] if cut >= 0 else path

    def uses_encryption(self) -> bool:
        """Tell whether the encrypt argument is given as ``true`` (any case)."""
        value = self.get(ENCRYPT)
        return value is not None and value.lower() == "true"


def help_requested(argv: Iterable[str]) -> bool:
    """Tell whether any argument asks for help; ``argv`` excludes the program name."""
    return any(argument in HELP_ARGUMENTS for argument in argv)


def wrap_text(text: str, width: int, level: int) -> str:
    """Wrap words into lines shorter than ``width``, each indented by ``level`` tabs."""
    indent = "\t" * level
    parts = [indent]
    size = len(text)
    printed = 0
    i = 0
    while i < size:
        end = text.find(" ", i)
        if end < 0:
            end = size
        word = text[i:end]
        if printed + len(word) >= width:
            parts.append("\n" + indent)
            printed = 0
        printed += len(word)
        parts.append(word)
        i = end + 1
        printed += 1
        if i < size:
            parts.append(" ")
    parts.append("\n")
    return "".join(parts)


_LINE_WIDTH = 80
_TAB_WIDTH = 8

_OPTION_HELP = (
    (BUILD_NUMBER, "Build number of the library."),
    (COPYRIGHT, "Textual copyright information."),
    (BUILD_DATE, "Release date of the library."),
    (
        DEPENDENCIES_FILE,
        "Adds a list of libraries (in an xml file) that this library depends on. If the "
        "supplied path to the dependency-xml file is wrong the tool will abort.",
    ),
    (DESCRIPTION, "Description of the library."),
    (ENABLED, "If the library should be loaded by default."),
    (
        ENCRYPT,
        "If the value of this argument is true then LVEs must be copied to the .library "
        "directory of the source structure. If the path to copy from is wrong or LVEs are "
        "missing or have the wrong names the tool will abort.",
    ),
    (None, "Print help information."),
    (
        ICON_PATH,
        "An icon to use for the library. If the supplied path to the icon file is wrong or "
        "the file can't be located in the library structure the tool will abort.",
    ),
    (LICENSE, "Textual license information."),
    (TITLE, "Official title of the library."),
    (
        TOOLS_FILE,
        "Adds a list of Modelica tools (in an xml file) that this library is compatible "
        "with. If the supplied path to the tool-xml file is wrong the tool will abort.",
    ),
)

_MANDATORY_HELP = (
    (LANGUAGE_VERSION, "Version of the Modelica language the library uses."),
    (
        LIBRARY_PATH,
        "Path to the top-level directory. If this argument is missing or the path is "
        "wrong, the tool will abort since it's not possible to build a container.",
    ),
    (LIBRARY_VERSION, "The version number of the library."),
)


def _option_block(name: str | None, description: str) -> str:
    heading = f"\t{SHORT_HELP}, {HELP}\n" if name is None else f"\t-{name}\n"
    return heading + wrap_text(description, _LINE_WIDTH - _TAB_WIDTH * 2, 2)


def help_text() -> str:
    """Return the usage text printed for ``-h`` and ``--help``."""
    parts = [
        "SYNOPSIS\n",
        "\tpackagetool <-arg1> <value1> <-arg2> <value2> ...\n",
        "\n",
        "DESCRIPTION\n",
        wrap_text(
            "Tool for packaging a Modelica library into a container for distribution. "
            "The container is a zip file with a .mol file extension. It contains one "
            "top-level directory and several subdirectories according to the Modelica "
            "structure.",
            _LINE_WIDTH - _TAB_WIDTH,
            1,
        ),
        "\n",
        "\tMandatory:\n",
    ]
    parts.extend(_option_block(name, text) for name, text in _MANDATORY_HELP)
    parts.append("\n")
    parts.append("\tOptional:\n")
    parts.extend(_option_block(name, text) for name, text in _OPTION_HELP)
    return "".join(parts)