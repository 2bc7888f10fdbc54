"""ROM directory (ROMDIR) tables: entry packing, parsing, building and lookup."""

from __future__ import annotations

import logging
import os
import struct
import sys
from dataclasses import dataclass
from typing import Iterable, Sequence

ENTRY_SIZE = 16
NAME_SIZE = 10
SEARCH_LIMIT = 0x1000
MARKER = b"RESET"

_ENTRY = struct.Struct("<10sHI")

logger = logging.getLogger(__name__)


def round_up(value: int, multiple: int) -> int:
    """Round ``value`` up to the next multiple of a power of two."""
    return (value + multiple - 1) & ~(multiple - 1)


@dataclass(frozen=True)
class RomdirEntry:
    """One 16-byte record of a ROMDIR table."""

    name: str
    ext_size: int = 0
    file_size: int = 0

    def pack(self) -> bytes:
        raw = self.name.encode("latin-1")
        if len(raw) > NAME_SIZE:
            raise ValueError(f"entry name {self.name!r} exceeds {NAME_SIZE} bytes")
        return _ENTRY.pack(raw, self.ext_size, self.file_size)

    @classmethod
    def unpack(cls, data: bytes) -> "RomdirEntry":
        if len(data) != ENTRY_SIZE:
            raise ValueError(f"a ROMDIR entry is {ENTRY_SIZE} bytes, got {len(data)}")
        raw, ext_size, file_size = _ENTRY.unpack(bytes(data))
        name = raw.split(b"\0", 1)[0].decode("latin-1")
        return cls(name, ext_size, file_size)


@dataclass(frozen=True)
class RomFileInfo:
    """Where a file named in the ROMDIR lives inside the image."""

    name: str
    offset: int
    size: int


def parse_romdir(data: bytes) -> list[RomdirEntry]:
    """Read entries until an entry with an empty name or the end of the data."""
    entries = []
    for pos in range(0, len(data) - ENTRY_SIZE + 1, ENTRY_SIZE):
        chunk = data[pos : pos + ENTRY_SIZE]
        if chunk[0] == 0:
            break
        entries.append(RomdirEntry.unpack(chunk))
    return entries


def _collect(paths: Iterable[os.PathLike | str]) -> tuple[list[RomdirEntry], list[str]]:
    args = [os.fspath(p) for p in paths]
    entries: list[RomdirEntry] = []
    missing: list[str] = []
    for arg in args:
        if arg == "ROMDIR":
            entries.append(RomdirEntry("ROMDIR", 0, len(args) * ENTRY_SIZE + ENTRY_SIZE))
            continue
        try:
            size = os.stat(arg).st_size
        except OSError:
            missing.append(arg)
            continue
        name = arg.split(",", 1)[0][:9]
        entries.append(RomdirEntry(name, 0, size & 0xFFFFFFFF))
    return entries, missing


def _pack_table(entries: Iterable[RomdirEntry]) -> bytes:
    return b"".join(entry.pack() for entry in entries) + bytes(ENTRY_SIZE)


def build_romdir(paths: Iterable[os.PathLike | str]) -> bytes:
    """Build a ROMDIR table for the given files; missing files are skipped."""
    entries, missing = _collect(paths)
    for path in missing:
        logger.warning("%s file is missing", path)
    return _pack_table(entries)


def find_romdir(image: bytes, start: int = 0, end: int = SEARCH_LIMIT) -> int:
    """Return the offset of the ROMDIR table (the ``RESET`` entry) in an image."""
    pos = bytes(image).find(MARKER, start, end + len(MARKER) - 1)
    if pos < 0:
        raise LookupError("no ROMDIR table found in image")
    return pos


def locate_file(image: bytes, name: str) -> RomFileInfo:
    """Find the offset and size of a named file inside a ROM image."""
    base = find_romdir(image)
    key = name[:NAME_SIZE]
    offset = 0
    for entry in parse_romdir(image[base:]):
        if entry.name == key:
            return RomFileInfo(entry.name, offset, entry.file_size)
        offset += round_up(entry.file_size, 16)
    raise KeyError(name)


def main(argv: Sequence[str] | None = None) -> int:
    args = sys.argv[1:] if argv is None else list(argv)
    print("fps2bios romdir generator")
    if not args:
        print("usage: romdir infile1 [infile2...]")
        return 1

    entries, missing = _collect(args)
    for path in missing:
        print(f"warning: {path} file is missing")

    try:
        with open("ROMDIR", "wb") as romdir:
            romdir.write(_pack_table(entries))
    except OSError:
        print("failed to create ROMDIR")
        return 1
    try:
        with open("EXTINFO", "wb"):
            pass
    except OSError:
        print("failed to create EXTINFO")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())