# molpack

`molpack` packages a Modelica library directory into a container for
distribution. The container is a zip archive with a `.mol` extension. It
holds the library's top-level directory, with a `.library` directory inside
it that contains a generated `manifest.xml`.

## Installation

```
pip install .
```

## Usage

Arguments are given as `-name value` pairs:

```
molpack -librarypath path/to/MyLibrary -version 1.0.0 -language 3.2
```

This writes `MyLibrary.mol` to the current directory, replacing any
earlier file of that name. The library is first copied into a temporary
staging folder (any `.library` entries in the source are skipped), which
is removed when packing is finished.

Running `molpack` with no arguments prints a short usage hint.

### Mandatory arguments

- `-language` — version of the Modelica language the library uses.
- `-librarypath` — path to the top-level directory of the library. It must
  be an existing directory; trailing slashes are trimmed. Its last folder
  name becomes the library id and the archive name.
- `-version` — version number of the library.

### Optional arguments

- `-build` — build number of the library.
- `-copyright` — textual copyright information.
- `-date` — release date of the library.
- `-dependencies` — XML file listing libraries this library depends on.
  Every line after the first is pasted into the manifest.
- `-description` — description of the library.
- `-enabled` — whether the library should be loaded by default.
- `-encrypt` — `true` (any case) asks for encryption; see below.
- `-icon` — icon file for the library. The file must exist, and a file of
  the same name must exist inside the library; its path relative to the
  library is written to the manifest.
- `-license` — textual license information.
- `-title` — official title of the library.
- `-tools` — XML file listing Modelica tools the library is compatible
  with. Every line after the first is pasted into the manifest.
- `-h`, `--help` — print help information.

Each argument may be given only once, and every argument needs a value.

If a `.library` directory sits next to the running program, its contents
are copied into the container's `.library` directory as well.

### Exit status

| Code | Meaning |
|------|---------|
| 0 | Success, or help printed |
| 1 | Invalid or missing arguments |
| 2 | Copying the library to the staging folder failed |
| 3 | Creating the `.library` folder failed |
| 4 | The icon could not be found in the library |
| 5 | Copying LVE executables failed |
| 6 | Copying extra `.library` files failed |
| 7 | Writing `manifest.xml` failed |
| 8 | Encryption failed |
| 9 | Writing the archive failed |

## What it does not do

`molpack` does not encrypt Modelica files. With `-encrypt true`, the
arguments are accepted only if at least one library vendor executable
(`lve_win32.exe`, `lve_win64.exe`, `lve_linux32`, `lve_linux64`,
`lve_darwin64`) is found in an `LVE` directory next to the program; those
are copied into `.library` and listed in the manifest, but the encryption
step then fails with exit status 8 and no container is written.

## Use from Python

```python
from molpack.cli import run

status = run(
    ["-librarypath", "MyLibrary", "-version", "1.0", "-language", "3.2"],
    output_dir=".",
)
```

`run` takes the arguments without the program name and returns the exit
status above. `executable_dir` may be given to say where the `LVE` and
`.library` directories are looked up.

The building blocks:

- `molpack.arguments` — `PackageArguments.parse`, its `validate_*`
  methods, `library_name`, `uses_encryption`, and `help_text`.
- `molpack.staging` — `StagingArea`, a context manager for the temporary
  copy of the library, and `count_lve`.
- `molpack.manifest` — `build_manifest` and `write_manifest`, built on
  `XmlWriter`.
- `molpack.archive` — `create_zip_archive` and `zip_directory`.
- `molpack.files` — path and file helpers.