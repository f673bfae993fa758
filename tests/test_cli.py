import tempfile
import zipfile

import pytest

from molpack.cli import main, run


@pytest.fixture
def workspace(tmp_path, monkeypatch):
    temp_root = tmp_path / "tmp"
    temp_root.mkdir()
    monkeypatch.setattr(tempfile, "tempdir", str(temp_root))

    library = tmp_path / "MyLib"
    library.mkdir()
    (library / "package.mo").write_text("package MyLib end MyLib;\n")
    sub = library / "sub"
    sub.mkdir()
    (sub / "icon.png").write_bytes(b"\x89PNG")
    (sub / "Model.mo").write_text("model Model end Model;\n")

    exe = tmp_path / "exe"
    exe.mkdir()
    out = tmp_path / "out"
    out.mkdir()
    return {
        "library": library,
        "exe": exe,
        "out": out,
        "temp_root": temp_root,
        "tmp": tmp_path,
    }


def _basic_args(library):
    return ["-librarypath", str(library), "-version", "1.0", "-language", "3.2"]


def test_help_prints_usage(capsys):
    assert run(["-h"]) == 0
    assert "SYNOPSIS" in capsys.readouterr().out


def test_main_help_long_form(capsys):
    assert main(["--help"]) == 0
    assert "Mandatory:" in capsys.readouterr().out


def test_main_without_arguments(capsys):
    assert main([]) == 1
    out = capsys.readouterr().out
    assert "Too few arguments." in out
    assert "For usage use -h or --help" in out


def test_invalid_argument(capsys, workspace):
    code = run(["-bogus", "x"], workspace["out"], workspace["exe"])
    assert code == 1
    assert "Argument -bogus is not valid." in capsys.readouterr().out


def test_missing_mandatory_argument(capsys, workspace):
    code = run(
        ["-librarypath", str(workspace["library"]), "-version", "1.0"],
        workspace["out"],
        workspace["exe"],
    )
    assert code == 1
    assert "Mandatory argument language is missing." in capsys.readouterr().out


def test_library_path_not_directory(workspace):
    args = ["-librarypath", str(workspace["tmp"] / "missing"), "-version", "1", "-language", "3"]
    assert run(args, workspace["out"], workspace["exe"]) == 1
    assert not list(workspace["out"].iterdir())


def test_full_run_creates_archive(capsys, workspace):
    icon = workspace["library"] / "sub" / "icon.png"
    args = _basic_args(workspace["library"]) + ["-icon", str(icon), "-title", "My Library"]
    code = run(args, workspace["out"], workspace["exe"])
    assert code == 0
    assert "Library is done." in capsys.readouterr().out

    target = workspace["out"] / "MyLib.mol"
    with zipfile.ZipFile(target) as archive:
        names = set(archive.namelist())
        manifest = archive.read("MyLib/.library/manifest.xml").decode("utf-8")
        assert archive.read("MyLib/package.mo") == b"package MyLib end MyLib;\n"
    assert "MyLib/sub/Model.mo" in names
    assert "MyLib/sub/icon.png" in names
    assert '<library id="MyLib">' in manifest
    assert '<icon file="sub/icon.png"/>' in manifest
    assert "<title>My Library</title>" in manifest
    assert list(workspace["temp_root"].iterdir()) == []


def test_trailing_slash_in_library_path(workspace):
    args = ["-librarypath", str(workspace["library"]) + "/", "-version", "1", "-language", "3"]
    assert run(args, workspace["out"], workspace["exe"]) == 0
    assert (workspace["out"] / "MyLib.mol").exists()


def test_existing_archive_is_replaced(workspace):
    target = workspace["out"] / "MyLib.mol"
    target.write_bytes(b"old content")
    assert run(_basic_args(workspace["library"]), workspace["out"], workspace["exe"]) == 0
    assert zipfile.is_zipfile(target)
    with zipfile.ZipFile(target) as archive:
        assert "MyLib/package.mo" in archive.namelist()


def test_tools_file_pasted_into_manifest(workspace):
    tools = workspace["tmp"] / "tools.xml"
    tools.write_text('<?xml version="1.0"?>\n<tools>\n</tools>\n')
    args = _basic_args(workspace["library"]) + ["-tools", str(tools)]
    assert run(args, workspace["out"], workspace["exe"]) == 0
    with zipfile.ZipFile(workspace["out"] / "MyLib.mol") as archive:
        manifest = archive.read("MyLib/.library/manifest.xml").decode("utf-8")
    assert "<tools>" in manifest
    assert '<?xml version="1.0"?>' not in manifest


def test_missing_tools_file_fails_validation(capsys, workspace):
    missing = workspace["tmp"] / "nothere.xml"
    args = _basic_args(workspace["library"]) + ["-tools", str(missing)]
    assert run(args, workspace["out"], workspace["exe"]) == 1
    assert "was not found." in capsys.readouterr().out


def test_extra_files_next_to_executable(workspace):
    extra = workspace["exe"] / ".library"
    extra.mkdir()
    (extra / "extra.dll").write_bytes(b"dll")
    assert run(_basic_args(workspace["library"]), workspace["out"], workspace["exe"]) == 0
    with zipfile.ZipFile(workspace["out"] / "MyLib.mol") as archive:
        assert archive.read("MyLib/.library/extra.dll") == b"dll"


def test_encryption_without_lve_fails_validation(workspace):
    args = _basic_args(workspace["library"]) + ["-encrypt", "true"]
    assert run(args, workspace["out"], workspace["exe"]) == 1


def test_encryption_step_fails_and_cleans_up(workspace):
    lve = workspace["exe"] / "LVE"
    lve.mkdir()
    (lve / "lve_linux64").write_bytes(b"binary")
    args = _basic_args(workspace["library"]) + ["-encrypt", "TRUE"]
    assert run(args, workspace["out"], workspace["exe"]) == 8
    assert not (workspace["out"] / "MyLib.mol").exists()
    assert list(workspace["temp_root"].iterdir()) == []


def test_icon_not_in_library_fails(capsys, workspace):
    outside = workspace["tmp"] / "other.png"
    outside.write_bytes(b"x")
    args = _basic_args(workspace["library"]) + ["-icon", str(outside)]
    assert run(args, workspace["out"], workspace["exe"]) == 4
    assert "Unable to locate the icon file" in capsys.readouterr().out
    assert list(workspace["temp_root"].iterdir()) == []