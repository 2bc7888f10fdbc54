# fpsbios

Tools for putting together a console BIOS ROM image from its component
files, and Python models of several of the IOP kernel services that such
an image carries.

## Installation

```
pip install .
```

For running the tests:

```
pip install ".[test]"
pytest
```

## Building a ROM image

A ROM image is a sequence of files, each starting on a 16-byte boundary,
described by a `ROMDIR` table of 16-byte entries (a 10-byte name, a 2-byte
extended-info size and a 4-byte file size), closed by an all-zero entry.
Building one takes three steps, all run in the directory that holds the
component files.

1. Write the `ROMVER` file from a version and a build number. The record
   is the two numbers as two digits each, `PD`, today's date as
   `YYYYMMDD`, a newline and a NUL byte. The numbers may be written in
   decimal, octal (`0` prefix) or hex (`0x` prefix):

   ```
   fpsbios-romver 0 1
   ```

2. Write the `ROMDIR` table (and an empty `EXTINFO` file) listing the files
   in the order they go into the image. The name `ROMDIR` stands for the
   table itself; a missing file is reported with a warning and left out.
   Names are cut at a comma and at nine characters:

   ```
   fpsbios-romdir RESET ROMDIR ROMVER IOPBOOT EELOAD SYSMEM LOADCORE
   ```

3. Write the image, reading `ROMDIR` and copying each listed file to its
   offset, zero-filling the space between files. An entry whose name
   starts with `-` is not copied but still takes up its space. A file that
   is missing or whose size does not match its entry is reported and
   skipped. Nothing is padded after the last file:

   ```
   fpsbios-romgen fps2bios
   ```

Each command prints usage and exits with status 1 when its arguments are
missing.

## Library

The same work is available from Python:

- `fpsbios.romdir`: `RomdirEntry` (with `pack` and `unpack`),
  `RomFileInfo`, `round_up`, `parse_romdir`, `build_romdir`,
  `find_romdir` (the offset of the table, found by its `RESET` entry;
  raises `LookupError` if absent) and `locate_file`, which finds a file's
  offset and size in a ROM image (raises `KeyError` if the name is not
  listed).
- `fpsbios.romver`: `make_romver`, which returns the record as bytes, and
  `write_romver`; both take an optional `datetime.date`.
- `fpsbios.romgen`: `layout`, which works out where each entry lands as a
  list of `Placement` records, and `build_image`, which writes into an
  open binary file and returns the placements written and those skipped.

```python
from fpsbios.romdir import RomdirEntry, parse_romdir, round_up

round_up(0x123, 16)  # 0x130
table = RomdirEntry("RESET", 0, 0x2000).pack() + bytes(16)
parse_romdir(table)  # [RomdirEntry(name='RESET', ext_size=0, file_size=8192)]
```

Models of IOP kernel services:

- `fpsbios.sysmem.SystemMemory`: the system memory allocator, handing out
  memory in 256-byte units with the `AllocStrategy` strategies (`FIRST`,
  `LAST`, or `LATER` at a given address). `alloc` returns the block
  address or `None`; `free` raises `ValueError` or `LookupError` when the
  block cannot be freed. `mem_size`, `max_free_size`, `total_free_size`,
  `block_top_address`, `block_size` and `blocks` report on the memory.
- `fpsbios.sysclib`: the kernel C library's character classes
  (`CharClass`, `char_class`, `isspace`, `isdigit`, `isalpha`, `isupper`,
  `islower`, `isxdigit`, `toupper`, `tolower`), byte and string searching
  and comparison (`memchr`, `memcmp`, `strcmp`, `strncmp`, `strchr`,
  `strrchr`, `strspn`, `strcspn`, `strpbrk`, `strstr`, which return an
  index or `None`), and `strtol`, which returns `(value, end)` clamped to
  the 32-bit range.
- `fpsbios.timrman.TimerManager`: allocation of the six hardware timers
  (`HardTimer`) with `alloc`, `refer` and `free`, and access to their
  mode, counter, compare and hold registers, kept in the `registers`
  dictionary; `intr_code` maps a timer id to its interrupt number.
- `fpsbios.vblank.VblankManager`: up to 16 prioritised handlers for the
  vertical-blank start (list 0) and end (any other number) interrupts;
  `dispatch` runs a list and drops handlers that return 0.
- `fpsbios.errors`: the exceptions these raise, all derived from
  `KernelError`, which carries the numeric error code;
  `KernelError.for_code` builds the matching exception from a code.

## What this package does not do

The kernel-service classes are models held in Python objects: they do not
run IOP code, load modules, touch real hardware registers or emulate the
processor. Setting `interrupt_context` on a `TimerManager` or
`VblankManager` only makes its services refuse the call as they would from
an interrupt handler. The tools write the `EXTINFO` file empty and always
record an extended-info size of 0.