"""Character classification and C-style string routines of the IOP system library.

Strings are ``str`` or ``bytes``; like C strings they end at the first NUL.
Routines that return a position in C return an index here, or ``None``
where C returns a null pointer.
"""

from __future__ import annotations

from enum import IntFlag

LONG_MAX = 2**31 - 1
LONG_MIN = -(2**31)


class CharClass(IntFlag):
    """Character class bits, as stored in the ctype table."""

    UPPER = 0x01
    LOWER = 0x02
    DIGIT = 0x04
    SPACE = 0x08
    PUNCT = 0x10
    CONTROL = 0x20
    HEX = 0x40
    BLANK = 0x80


def _build_table() -> tuple[CharClass, ...]:
    def classify(code: int) -> CharClass:
        if 9 <= code <= 13:
            return CharClass.CONTROL | CharClass.SPACE
        if code < 32 or code == 127:
            return CharClass.CONTROL
        if code == 32:
            return CharClass.SPACE | CharClass.BLANK
        if 48 <= code <= 57:
            return CharClass.DIGIT
        if 65 <= code <= 70:
            return CharClass.UPPER | CharClass.HEX
        if 71 <= code <= 90:
            return CharClass.UPPER
        if 97 <= code <= 102:
            return CharClass.LOWER | CharClass.HEX
        if 103 <= code <= 122:
            return CharClass.LOWER
        if code < 128:
            return CharClass.PUNCT
        return CharClass(0)

    return tuple(classify(code) for code in range(256))


_TABLE = _build_table()

Char = "int | str"
Text = "str | bytes"


def _code(ch: int | str) -> int:
    if isinstance(ch, str):
        if len(ch) != 1:
            raise ValueError(f"expected a single character, got {ch!r}")
        return ord(ch)
    return int(ch)


def _cstr(text: str | bytes) -> bytes:
    raw = text.encode("latin-1") if isinstance(text, str) else bytes(text)
    return raw.split(b"\0", 1)[0]


def _at(data: bytes, index: int) -> int:
    return data[index] if index < len(data) else 0


def _signed_byte(value: int) -> int:
    value &= 0xFF
    return value - 0x100 if value & 0x80 else value


def char_class(ch: int | str) -> CharClass:
    """Class bits of a character; codes outside 0..255 have none."""
    code = _code(ch)
    return _TABLE[code] if 0 <= code < 256 else CharClass(0)


def isspace(ch: int | str) -> bool:
    return bool(char_class(ch) & CharClass.SPACE)


def isdigit(ch: int | str) -> bool:
    return bool(char_class(ch) & CharClass.DIGIT)


def isalpha(ch: int | str) -> bool:
    return bool(char_class(ch) & (CharClass.UPPER | CharClass.LOWER))


def isupper(ch: int | str) -> bool:
    return bool(char_class(ch) & CharClass.UPPER)


def islower(ch: int | str) -> bool:
    return bool(char_class(ch) & CharClass.LOWER)


def isxdigit(ch: int | str) -> bool:
    return bool(char_class(ch) & (CharClass.HEX | CharClass.DIGIT))


def _convert(ch: int | str, needed: CharClass, delta: int) -> int | str:
    code = _signed_byte(_code(ch))
    result = _signed_byte(code + delta) if char_class(code) & needed else code
    return chr(result & 0xFF) if isinstance(ch, str) else result


def toupper(ch: int | str) -> int | str:
    """Upper-case a character; integer results are sign-extended bytes."""
    return _convert(ch, CharClass.LOWER, -32)


def tolower(ch: int | str) -> int | str:
    """Lower-case a character; integer results are sign-extended bytes."""
    return _convert(ch, CharClass.UPPER, 32)


def memchr(data: bytes, ch: int, length: int) -> int | None:
    """Index of the first byte equal to ``ch & 0xFF`` within ``length`` bytes."""
    if length <= 0:
        return None
    pos = bytes(data[:length]).find(bytes([ch & 0xFF]))
    return None if pos < 0 else pos


def memcmp(a: bytes, b: bytes, length: int) -> int:
    """Compare ``length`` bytes: 0 if equal, 1 if ``a`` is lower, -1 if higher."""
    if length <= 0:
        return 0
    if len(a) < length or len(b) < length:
        raise ValueError(f"both buffers must hold at least {length} bytes")
    for x, y in zip(a[:length], b[:length]):
        if x != y:
            return 1 if x < y else -1
    return 0


def strcmp(a: str | bytes, b: str | bytes) -> int:
    """Difference of the first differing characters, as unsigned bytes."""
    s1, s2 = _cstr(a), _cstr(b)
    i = 0
    while _at(s1, i) != 0 and _at(s1, i) == _at(s2, i):
        i += 1
    return _at(s1, i) - _at(s2, i)


def strncmp(a: str | bytes, b: str | bytes, n: int) -> int:
    """Like :func:`strcmp` but looking at no more than ``n`` characters."""
    s1, s2 = _cstr(a), _cstr(b)
    i = 0
    while n != 0:
        n -= 1
        if _at(s1, i) != _at(s2, i):
            break
        if n == 0 or _at(s1, i) == 0:
            break
        i += 1
    else:
        return 0
    return _at(s1, i) - _at(s2, i)


def strchr(s: str | bytes, c: int | str) -> int | None:
    """Index of the first ``c``; searching for 0 finds the terminator."""
    data, code = _cstr(s), _code(c)
    if code == 0:
        return len(data)
    pos = data.find(bytes([code])) if 0 < code < 256 else -1
    return None if pos < 0 else pos


def strrchr(s: str | bytes, c: int | str) -> int | None:
    """Index of the last ``c``; searching for 0 finds the terminator."""
    data, code = _cstr(s), _code(c)
    if code == 0:
        return len(data)
    pos = data.rfind(bytes([code])) if 0 < code < 256 else -1
    return None if pos < 0 else pos


def strspn(s: str | bytes, accept: str | bytes) -> int:
    """Length of the leading run of characters found in ``accept``."""
    data, allowed = _cstr(s), set(_cstr(accept))
    count = 0
    for byte in data:
        if byte not in allowed:
            break
        count += 1
    return count


def strcspn(s: str | bytes, reject: str | bytes) -> int:
    """Length of the leading run of characters not found in ``reject``."""
    data, stop = _cstr(s), set(_cstr(reject))
    count = 0
    for byte in data:
        if byte in stop:
            break
        count += 1
    return count


def strpbrk(s: str | bytes, accept: str | bytes) -> int | None:
    """Index of the first character that is in ``accept``."""
    data, allowed = _cstr(s), set(_cstr(accept))
    return next((i for i, byte in enumerate(data) if byte in allowed), None)


def strstr(haystack: str | bytes, needle: str | bytes) -> int | None:
    """Index of the first occurrence of ``needle``; an empty needle matches at 0."""
    pos = _cstr(haystack).find(_cstr(needle))
    return None if pos < 0 else pos


def _digit_value(c: int) -> int | None:
    if isdigit(c):
        return c - ord("0")
    if isalpha(c):
        return c - (ord("A") - 10 if isupper(c) else ord("a") - 10)
    return None


def strtol(text: str | bytes, base: int = 10) -> tuple[int, int]:
    """Parse a 32-bit signed integer.

    Returns ``(value, end)`` where ``end`` is the index just past the last
    digit used, or 0 when no digits were found. Out-of-range values clamp to
    ``LONG_MIN``/``LONG_MAX``. A base of 0 picks 16, 8 or 10 from the prefix.
    """
    if base < 0 or base == 1 or base > 36:
        raise ValueError(f"invalid base {base}")
    data = _cstr(text)
    i = 0
    c = _at(data, i)
    i += 1
    while isspace(c):
        c = _at(data, i)
        i += 1
    negative = False
    if c == ord("-"):
        negative = True
        c = _at(data, i)
        i += 1
    elif c == ord("+"):
        c = _at(data, i)
        i += 1
    if base in (0, 16) and c == ord("0") and _at(data, i) in (ord("x"), ord("X")):
        c = _at(data, i + 1)
        i += 2
        base = 16
    if base == 0:
        base = 8 if c == ord("0") else 10

    limit = -LONG_MIN if negative else LONG_MAX
    cutlim = limit % base
    cutoff = limit // base
    acc = 0
    consumed = 0  # 1 when digits were used, -1 on overflow
    while True:
        digit = _digit_value(c)
        if digit is None or digit >= base:
            break
        if consumed < 0 or acc > cutoff or (acc == cutoff and digit > cutlim):
            consumed = -1
        else:
            consumed = 1
            acc = acc * base + digit
        c = _at(data, i)
        i += 1

    if consumed < 0:
        value = LONG_MIN if negative else LONG_MAX
    else:
        value = -acc if negative else acc
    return value, (i - 1 if consumed else 0)