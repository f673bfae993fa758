"""Writing the ``manifest.xml`` that describes a packed library."""

from __future__ import annotations

import io
import os
from pathlib import Path
from typing import Iterable

from molpack.arguments import (
    BUILD_DATE,
    BUILD_NUMBER,
    COPYRIGHT,
    DEPENDENCIES_FILE,
    DESCRIPTION,
    ENABLED,
    ICON_PATH,
    LANGUAGE_VERSION,
    LIBRARY_VERSION,
    LICENSE,
    TITLE,
    TOOLS_FILE,
    PackageArguments,
)
from molpack.files import DOT_LIBRARY

MANIFEST_NAME = "manifest.xml"
XML_DECLARATION = '<?xml version="1.0" encoding="utf-8"?>\n'
_INDENT = "\t"
_ESCAPES = {"<": "&lt;", ">": "&gt;", '"': "&quot;", "&": "&amp;"}


def escape_text(text: str) -> str:
    """Replace the XML reserved characters ``< > " &`` with entities."""
    return "".join(_ESCAPES.get(char, char) for char in text)


def extract_platform(filename: str) -> str:
    """Return the platform part of an LVE file name.

    That is the text after the first ``_`` up to the first ``.``; an empty
    string when the name has no ``_``.
    """
    _, underscore, rest = filename.partition("_")
    if not underscore:
        return ""
    return rest.split(".", 1)[0]


class XmlWriter:
    """A small streaming XML writer with tab indentation."""

    def __init__(self) -> None:
        self._out = io.StringIO()
        self._indent = 0
        self._in_attributes = False
        self._on_new_line = True

    def write_raw(self, text: str) -> None:
        """Write text as it is, without escaping or indentation."""
        self._out.write(text)

    def _add_indent(self) -> None:
        if self._on_new_line:
            self._out.write(_INDENT * self._indent)
        self._on_new_line = False

    def _end_attributes(self, add_newline: bool) -> None:
        if self._in_attributes:
            self._out.write(">")
            self._in_attributes = False
            if add_newline:
                self._out.write("\n")
                self._on_new_line = True

    def open(self, element: str) -> None:
        """Start an element; attributes may follow until content is added."""
        self._end_attributes(True)
        self._add_indent()
        self._out.write(f"<{element}")
        self._in_attributes = True
        self._on_new_line = False
        self._indent += 1

    def close(self, element: str) -> None:
        """End an element, as ``/>`` if it has no content."""
        self._indent -= 1
        if self._in_attributes:
            self._out.write("/>\n")
            self._in_attributes = False
        else:
            self._add_indent()
            self._out.write(f"</{element}>\n")
        self._on_new_line = True

    def attribute(self, name: str, value: str) -> None:
        """Add an attribute to the element just opened."""
        self._out.write(f' {name}="{escape_text(value)}"')

    def text(self, text: str, separate_line: bool = False) -> None:
        """Add escaped text content, on its own line if ``separate_line``."""
        self._end_attributes(separate_line)
        self._add_indent()
        self._out.write(escape_text(text))
        if separate_line:
            self._out.write("\n")
            self._on_new_line = True

    def paste_file(self, path: str | os.PathLike[str]) -> None:
        """Copy the lines of an XML file, except its first line, into the output.

        Only newline-terminated lines are copied; the first one copied is indented.
        """
        with open(path, encoding="utf-8") as handle:
            content = handle.read()
        for line in content.split("\n")[1:-1]:
            self._add_indent()
            self._out.write(line + "\n")
        self._on_new_line = True

    def getvalue(self) -> str:
        """Return everything written so far."""
        return self._out.getvalue()


def _value_attribute(
    writer: XmlWriter, name: str, arguments: PackageArguments, key: str
) -> None:
    value = arguments.get(key)
    if value is not None:
        writer.attribute(name, value)


def _value_element_text(
    writer: XmlWriter,
    element: str,
    arguments: PackageArguments,
    key: str,
    separate_line: bool,
) -> None:
    value = arguments.get(key)
    if value is not None:
        writer.open(element)
        writer.text(value, separate_line)
        writer.close(element)


def _value_element_attribute(
    writer: XmlWriter,
    element: str,
    attribute: str,
    arguments: PackageArguments,
    key: str,
) -> None:
    value = arguments.get(key)
    if value is not None:
        writer.open(element)
        writer.attribute(attribute, value)
        writer.close(element)


def _add_header(writer: XmlWriter) -> None:
    writer.write_raw(XML_DECLARATION)
    writer.open("archive")
    writer.open("manifest")
    writer.attribute("version", "1.0")
    writer.close("manifest")


def _add_library_header(writer: XmlWriter, arguments: PackageArguments) -> None:
    name = arguments.library_name()
    if name is None:
        raise ValueError("No library path given; the library id is unknown.")
    writer.open("library")
    writer.attribute("id", name)
    _value_attribute(writer, "enabled", arguments, ENABLED)
    _value_element_text(writer, "title", arguments, TITLE, False)
    _value_element_text(writer, "description", arguments, DESCRIPTION, True)

    number = arguments.get(LIBRARY_VERSION)
    if number is not None:
        writer.open("version")
        writer.attribute("number", number)
        _value_attribute(writer, "build", arguments, BUILD_NUMBER)
        _value_attribute(writer, "date", arguments, BUILD_DATE)
        writer.close("version")

    _value_element_attribute(writer, "language", "version", arguments, LANGUAGE_VERSION)
    _value_element_text(writer, "copyright", arguments, COPYRIGHT, True)
    _value_element_text(writer, "license", arguments, LICENSE, True)


def _add_encryption(
    writer: XmlWriter, arguments: PackageArguments, lve_files: Iterable[str]
) -> None:
    if not arguments.uses_encryption():
        return
    writer.open("encryption")
    for name in lve_files:
        if not name:
            continue
        writer.open("executable")
        writer.attribute("path", f"{DOT_LIBRARY}/{name}")
        writer.attribute("platform", extract_platform(name))
        writer.attribute("licensing", "true")
        writer.close("executable")
    writer.close("encryption")


def _add_icon(
    writer: XmlWriter, arguments: PackageArguments, icon_path: str | None
) -> None:
    if ICON_PATH not in arguments:
        return
    if icon_path is None:
        raise ValueError("An icon was given but its path in the library is unknown.")
    writer.open("icon")
    writer.attribute("file", icon_path)
    writer.close("icon")


def build_manifest(
    arguments: PackageArguments,
    lve_files: Iterable[str] = (),
    icon_path: str | None = None,
) -> str:
    """Return the text of ``manifest.xml`` for the given arguments.

    ``lve_files`` names the LVE executables copied to ``.library``;
    ``icon_path`` is the icon's path relative to the library folder.
    """
    writer = XmlWriter()
    _add_header(writer)
    _add_library_header(writer, arguments)
    _add_encryption(writer, arguments, lve_files)
    _add_icon(writer, arguments, icon_path)
    for key in (TOOLS_FILE, DEPENDENCIES_FILE):
        path = arguments.get(key)
        if path is not None:
            writer.paste_file(path)
    writer.close("library")
    writer.close("archive")
    return writer.getvalue()


def write_manifest(
    directory: str | os.PathLike[str],
    arguments: PackageArguments,
    lve_files: Iterable[str] = (),
    icon_path: str | None = None,
) -> Path:
    """Write ``manifest.xml`` into ``directory`` and return its path."""
    content = build_manifest(arguments, lve_files, icon_path)
    target = Path(directory) / MANIFEST_NAME
    with open(target, "w", encoding="utf-8") as handle:
        handle.write(content)
    return target