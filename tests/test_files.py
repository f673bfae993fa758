import os
import stat
from pathlib import Path

import pytest

from molpack.files import (
    copy_directory,
    copy_file,
    executable_directory,
    extract_filename,
    extract_path,
    find_file,
    is_directory,
    is_encrypted_file,
    is_modelica_file,
    remove_folder,
    strip_prefix,
    validate_path,
)


@pytest.mark.parametrize(
    "name, expected",
    [
        ("package.mo", True),
        ("Model.MO", True),
        ("a.b.mo", True),
        ("package.moc", False),
        ("readme.txt", False),
        ("noextension", False),
        (None, False),
    ],
)
def test_is_modelica_file(name, expected):
    assert is_modelica_file(name) is expected


@pytest.mark.parametrize(
    "name, expected",
    [
        ("package.moc", True),
        ("Model.MOC", True),
        ("package.mo", False),
        ("file", False),
        (None, False),
    ],
)
def test_is_encrypted_file(name, expected):
    assert is_encrypted_file(name) is expected


def test_extract_filename_with_directories():
    assert extract_filename("lib/Resources/icon.png") == "icon.png"


def test_extract_filename_without_separator():
    assert extract_filename("icon.png") == "icon.png"


def test_extract_filename_trailing_separator_gives_empty():
    assert extract_filename("lib/dir/") == ""


def test_extract_path_and_filename_recombine():
    separator = "\\" if os.name == "nt" else "/"
    full = separator.join(["root", "sub", "program"])
    assert extract_path(full) + separator + extract_filename(full) == full


def test_extract_path_without_separator_returns_input():
    assert extract_path("program") == "program"


def test_extract_path_none():
    assert extract_path(None) is None


def test_is_directory(tmp_path):
    file_path = tmp_path / "f.txt"
    file_path.write_text("x")
    assert is_directory(tmp_path) is True
    assert is_directory(file_path) is False
    assert is_directory(tmp_path / "missing") is False


def test_validate_path_trims_trailing_slashes(tmp_path):
    assert validate_path(str(tmp_path) + "//") == str(tmp_path)


def test_validate_path_empty():
    with pytest.raises(ValueError, match="Path is empty!"):
        validate_path("")


def test_validate_path_none():
    with pytest.raises(ValueError):
        validate_path(None)


def test_validate_path_missing(tmp_path):
    with pytest.raises(FileNotFoundError, match="does not exist"):
        validate_path(tmp_path / "missing")


def test_validate_path_not_a_directory(tmp_path):
    file_path = tmp_path / "file.mo"
    file_path.write_text("model M end M;")
    with pytest.raises(NotADirectoryError, match="is not a directory"):
        validate_path(file_path)


def test_executable_directory_is_existing_absolute_dir():
    result = executable_directory()
    assert result.is_absolute()
    assert result.is_dir()


def test_copy_file_copies_content_and_mode(tmp_path):
    source = tmp_path / "lve_linux64"
    source.write_bytes(b"\x00\x01binary")
    os.chmod(source, 0o755)
    destination = tmp_path / "copy"
    result = copy_file(source, destination)
    assert result == destination
    assert destination.read_bytes() == b"\x00\x01binary"
    assert stat.S_IMODE(destination.stat().st_mode) == stat.S_IMODE(source.stat().st_mode)


def test_copy_file_missing_source(tmp_path):
    with pytest.raises(OSError):
        copy_file(tmp_path / "missing", tmp_path / "out")


def _make_tree(root: Path) -> None:
    (root / "Sub" / "Deep").mkdir(parents=True)
    (root / "package.mo").write_text("package Lib end Lib;")
    (root / "Sub" / "package.mo").write_text("package Sub end Sub;")
    (root / "Sub" / "Deep" / "icon.png").write_bytes(b"png")
    (root / ".library").mkdir()
    (root / ".library" / "manifest.xml").write_text("<archive/>")
    (root / "Sub" / ".library").write_text("skip me")


def _relative_files(root: Path) -> set:
    return {p.relative_to(root).as_posix() for p in root.rglob("*") if p.is_file()}


def test_copy_directory_copies_tree_and_skips_dot_library(tmp_path):
    source = tmp_path / "src"
    source.mkdir()
    _make_tree(source)
    destination = tmp_path / "dst"
    destination.mkdir()
    copy_directory(source, destination)

    expected = {f for f in _relative_files(source) if ".library" not in f.split("/")}
    assert _relative_files(destination) == expected
    assert not (destination / ".library").exists()
    assert (destination / "Sub" / "Deep" / "icon.png").read_bytes() == b"png"


def test_copy_directory_missing_source(tmp_path):
    with pytest.raises(OSError):
        copy_directory(tmp_path / "missing", tmp_path)


def test_remove_folder(tmp_path):
    target = tmp_path / "stage"
    target.mkdir()
    _make_tree(target)
    remove_folder(target)
    assert not target.exists()


def test_find_file_in_subdirectory(tmp_path):
    _make_tree(tmp_path)
    assert find_file("icon.png", tmp_path) == tmp_path / "Sub" / "Deep" / "icon.png"


def test_find_file_returns_first_depth_first(tmp_path):
    _make_tree(tmp_path)
    found = find_file("package.mo", tmp_path)
    assert found is not None
    assert found.name == "package.mo"
    assert found.is_file()


def test_find_file_missing(tmp_path):
    _make_tree(tmp_path)
    assert find_file("absent.png", tmp_path) is None


def test_find_file_ignores_directories_with_same_name(tmp_path):
    (tmp_path / "icon.png").mkdir()
    assert find_file("icon.png", tmp_path) is None


def test_find_file_unreadable_root(tmp_path):
    with pytest.raises(OSError):
        find_file("icon.png", tmp_path / "missing")


def test_strip_prefix_removes_prefix_and_separator():
    assert strip_prefix("/tmp/stage/Lib/package.mo", "/tmp/stage") == "Lib/package.mo"


def test_strip_prefix_round_trip(tmp_path):
    full = tmp_path / "Lib" / "Sub" / "file.mo"
    rest = strip_prefix(full, tmp_path)
    assert Path(tmp_path, rest) == full


def test_strip_prefix_of_prefix_itself_is_empty():
    assert strip_prefix("/tmp/stage", "/tmp/stage") == ""


def test_strip_prefix_rejects_other_path():
    with pytest.raises(ValueError):
        strip_prefix("/elsewhere/file.mo", "/tmp/stage")