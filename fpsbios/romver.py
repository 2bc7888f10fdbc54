"""Generation of the ROMVER version record."""

from __future__ import annotations

import datetime
import os
import re
import sys
from typing import Sequence

_C_INT = re.compile(r"\s*([+-]?)(0[xX][0-9a-fA-F]+|0[0-7]*|[1-9][0-9]*)")


def _parse_c_int(text: str) -> int:
    """Parse a leading integer the way strtol with base 0 does; 0 if none."""
    match = _C_INT.match(text)
    if not match:
        return 0
    sign, digits = match.groups()
    if digits[:2].lower() == "0x":
        value = int(digits[2:], 16)
    elif digits.startswith("0"):
        value = int(digits, 8)
    else:
        value = int(digits)
    return -value if sign == "-" else value


def _two_digits(value: int) -> str:
    sign = "-" if value < 0 else ""
    return f"{sign}{abs(value):02d}"


def make_romver(version: int, build: int, date: datetime.date | None = None) -> bytes:
    """Return the ROMVER contents: version, build, ``PD``, date, newline and NUL."""
    stamp = (date or datetime.date.today()).strftime("%Y%m%d")
    text = f"{_two_digits(version)}{_two_digits(build)}PD{stamp}\n"
    return text.encode("ascii") + b"\0"


def write_romver(
    path: os.PathLike | str, version: int, build: int, date: datetime.date | None = None
) -> None:
    """Write a ROMVER record to ``path``."""
    with open(path, "wb") as out:
        out.write(make_romver(version, build, date))


def main(argv: Sequence[str] | None = None) -> int:
    args = sys.argv[1:] if argv is None else list(argv)
    print("fps2bios romver generator")
    if len(args) < 2:
        print("usage: romver version build")
        return 1
    try:
        write_romver("ROMVER", _parse_c_int(args[0]), _parse_c_int(args[1]))
    except OSError:
        print("failed to create ROMVER")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())