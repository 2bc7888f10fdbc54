"""Assembly of a ROM image from the files listed in a ROMDIR table."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Iterable, Sequence

from .romdir import RomdirEntry, parse_romdir


@dataclass(frozen=True)
class Placement:
    """A file and the offset it occupies in the image."""

    name: str
    offset: int
    size: int


def layout(entries: Iterable[RomdirEntry]) -> list[Placement]:
    """Place entries on 16-byte boundaries; entries named ``-...`` only reserve space."""
    placements = []
    offset = 0
    for entry in entries:
        if not entry.name.startswith("-"):
            placements.append(Placement(entry.name, offset, entry.file_size))
        offset = (entry.file_size + offset + 15) & 0xFFFFFFF0
    return placements


def _read_exact(path: Path, size: int) -> bytes | None:
    try:
        data = path.read_bytes()
    except OSError:
        return None
    return data if len(data) == size else None


def build_image(
    entries: Iterable[RomdirEntry], source_dir: os.PathLike | str, out: BinaryIO
) -> tuple[list[Placement], list[Placement]]:
    """Write the files into ``out`` at their offsets, zero-filling the gaps.

    Returns the placements written and those skipped because the file was
    missing or of the wrong size. Nothing is padded after the last file.
    """
    source = Path(source_dir)
    written: list[Placement] = []
    missing: list[Placement] = []
    for placement in layout(entries):
        data = _read_exact(source / placement.name, placement.size)
        if data is None:
            missing.append(placement)
            continue
        gap = placement.offset - out.tell()
        if gap > 0:
            out.write(bytes(gap))
        out.write(data)
        written.append(placement)
    return written, missing


def main(argv: Sequence[str] | None = None) -> int:
    args = sys.argv[1:] if argv is None else list(argv)
    print("PS2 ROMGEN v0.1 no padding")
    if not args:
        print("Usage: ps2romgen <filename>\n\tfilename=name of the biosfile to create")
        print("\n\tPut in the same directory with ps2romgen all the files from bios")
        return 1

    try:
        table = Path("ROMDIR").read_bytes()
    except OSError:
        print("Could not find the ROMDIR file")
        return 1
    entries = parse_romdir(table)

    print("\n      Name   Offset(hex)       Size(hex)\n----------------------------------------")
    with open(args[0], "wb") as out:
        written, _ = build_image(entries, ".", out)

    done = set(written)
    for placement in layout(entries):
        if placement in done:
            print(f"{placement.name:>10}\t{placement.offset:8X}\t{placement.size:8X}")
        else:
            print(f"Could not find a file {placement.name} of {placement.size} bytes")

    print(f"Done ({args[0]})")
    return 0


if __name__ == "__main__":
    sys.exit(main())