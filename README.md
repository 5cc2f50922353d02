# fck

A small command-line toolkit for everyday file checks:

- **hash** (`h`): compute MD5, SHA-1, SHA-256 or SHA-512 checksums of files,
  directories or wildcard patterns.
- **size** (`s`): show the size of files and directories in human-readable units.
- **check** (`c`): verify files against a checksum file, or compare two directories.
- **find** (`f`): search a directory tree by name, type, size, modification time and more.

Messages are printed in Chinese. Status lines are coloured when written to a
terminal, unless the `NO_COLOR` environment variable is set.

## Installation

```
pip install .
```

This installs the `fck` command. It needs no packages beyond the standard library.

## Usage

```
fck -h
fck -v
```

`-h`, `help` or no arguments at all print the overview; `-v` or `version`
prints the program name and installed version. Every subcommand takes `-h`
for its own help. An unknown subcommand does nothing. On failure the command
prints the error and exits with status 1.

### Hashing

```
fck hash -t sha256 file.iso
fck hash -r -j 4 some/dir
fck hash -r -w some/dir
```

`-t` picks the algorithm (`md5`, `sha1`, `sha256`, `sha512`; `md5` by default),
`-r` walks directories recursively, `-j` sets the number of concurrent workers
(1 by default, must be greater than 0), and `-w` writes the results to
`checksum.hash` in the current directory instead of printing them.

Each result is printed as `digest<TAB>path`; in `checksum.hash` the path is
quoted, after a `#algorithm#timestamp` header line. Without `-r`,
subdirectories are reported as skipped. Symbolic links are skipped. A path
containing `*`, `?`, `[`, `]`, `{` or `}` is expanded as a wildcard pattern.
The first error stops the files not yet started. With `-w` and several paths,
`checksum.hash` is started afresh for each path, so it ends up holding the
checksums of the last one.

### Sizes

```
fck size some/dir file.txt "logs/*"
```

Each size is printed with a binary unit (`B`, `KB`, `MB`, `GB`, `TB`, `PB`)
and at most two decimals, followed by the path. A directory's size is the
sum of the sizes of everything under it. A path containing `*` is expanded
as a pattern, and paths given after such a pattern are not handled.

### Checking

Verify the files listed in a checksum file written by `fck hash -w`:

```
fck check -f checksum.hash
```

The algorithm is read from the file's header. Listed paths are resolved from
the current directory; missing files are warned about and skipped, and each
file whose digest differs is reported with the last eight characters of the
expected and actual digests.

Compare two directories by file name and content:

```
fck check -a dir_a -b dir_b -t sha1
fck check -a dir_a -b dir_b -w
```

Files are matched by name alone, wherever they sit in each tree. The report
lists files with differing digests, files found only in A, files found only
in B, and totals. With `-w` it is written to `check_dir.check` in the current
directory. `-f` takes precedence over `-a` and `-b`.

### Finding

```
fck find -p . -k report
fck find -p . -k log -f -size +5M
fck find -p . -k tmp -d -m 2 -hidden
fck find -p . -k conf -mtime -7 -full
```

Prints every entry under `-p` whose name contains the keyword `-k` (plain
text, matched case-insensitively unless `-c` is given). Entries are visited
with each directory's contents sorted by name.

Flags: `-f` files only, `-d` directories only, `-l` symbolic links only,
`-ro` read-only entries only, `-c` case-sensitive matching, `-m` maximum
depth (`-1`, the default, for no limit), `-size` size filter (`+N` larger
than, `-N` smaller than; units `B`/`K`/`M`/`G`, either case), `-mtime`
modification-time filter in days (`+N` modified within the last N days,
`-N` modified before then), `-full` print absolute paths, `-hidden` include
hidden entries. Names starting with `.` and longer than two characters count
as hidden; on Windows the hidden file attribute counts too. A hidden
directory whose name matches is not entered unless `-hidden` is given.

## Using it from Python

```python
from fck.hashing import checksum
from fck.size import human_readable_size, path_size
from fck.find import FindOptions, find

print(checksum("file.txt", "sha256"))
print(human_readable_size(1536))  # 1.5KB
print(human_readable_size(path_size(".")))

for path in find(FindOptions(path=".", keyword="conf", files_only=True)):
    print(path)
```

Other entry points:

- `fck.algorithms`: `hasher_factory(name)`, `supported_names()`,
  `UnsupportedAlgorithmError`.
- `fck.hashing`: `collect_files`, `walk_dir`, `hash_files`, `run_hash`,
  `buffer_size`, `HashError`.
- `fck.check`: `parse_checksum_file`, `verify_checksum_file`, `list_files`,
  `compare_dirs` (returns a `Comparison`), `render_comparison`, `run_check`,
  `CheckError`.
- `fck.find`: `match_file_size`, `match_file_time`,
  `validate_size_condition`, `run_find`, `FindError`.
- `fck.tools`: `Console`, `last8`, `is_hidden`, `is_read_only`.
- `fck.cli`: `build_parser`, `run`, `main`.

## Running the tests

```
pip install ".[test]"
pytest
```