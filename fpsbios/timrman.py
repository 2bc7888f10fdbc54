"""IOP hardware timer manager: allocation of the six root counters and register access."""

from __future__ import annotations

from dataclasses import dataclass

from .errors import ERROR_UNK, IntrContextError, KernelError, NoTimerError

RTC0 = 0xBF801100
RTC1 = 0xBF801110
RTC2 = 0xBF801120
RTC3 = 0xBF801480
RTC4 = 0xBF801490
RTC5 = 0xBF8014A0
RTC_HOLDREGS = 0xBF8014B0
RTC_HOLDMODE = 0xBF8014C0

TC_SYSCLOCK = 1
TC_PIXEL = 2
TC_HLINE = 4
TC_HOLD = 8

TIMER_SIZE_16 = 16
TIMER_SIZE_32 = 32

TIMER_PRESCALE_1 = 1
TIMER_PRESCALE_8 = 8
TIMER_PRESCALE_16 = 16
TIMER_PRESCALE_256 = 256

INT_RTC0 = 0x04
INT_RTC1 = 0x05
INT_RTC2 = 0x06
INT_RTC3 = 0x0E
INT_RTC4 = 0x0F
INT_RTC5 = 0x10

_INTR_CODES = {
    RTC0: INT_RTC0,
    RTC1: INT_RTC1,
    RTC2: INT_RTC2,
    RTC3: INT_RTC3,
    RTC4: INT_RTC4,
    RTC5: INT_RTC5,
}


@dataclass
class HardTimer:
    """One hardware counter and how many users hold it."""

    hwreg: int
    source: int
    size: int
    prescale: int
    allocated: int = 0

    @property
    def timid(self) -> int:
        return self.hwreg >> 2


def _default_timers() -> list[HardTimer]:
    return [
        HardTimer(RTC2, TC_SYSCLOCK, TIMER_SIZE_16, TIMER_PRESCALE_8),
        HardTimer(RTC5, TC_SYSCLOCK, TIMER_SIZE_32, TIMER_PRESCALE_256),
        HardTimer(RTC4, TC_SYSCLOCK, TIMER_SIZE_32, TIMER_PRESCALE_256),
        HardTimer(RTC3, TC_SYSCLOCK | TC_HLINE, TIMER_SIZE_32, TIMER_PRESCALE_1),
        HardTimer(RTC0, TC_SYSCLOCK | TC_PIXEL | TC_HOLD, TIMER_SIZE_16, TIMER_PRESCALE_1),
        HardTimer(RTC1, TC_SYSCLOCK | TC_HLINE | TC_HOLD, TIMER_SIZE_16, TIMER_PRESCALE_1),
    ]


def intr_code(timid: int) -> int:
    """Interrupt number raised by the timer with id ``timid``."""
    try:
        return _INTR_CODES[timid << 2]
    except KeyError:
        raise KernelError(f"unknown timer id {timid:#x}", code=ERROR_UNK) from None


class TimerManager:
    """Hands out hardware timers and reads and writes their registers.

    ``registers`` maps register addresses to their contents; addresses never
    written read as zero. Set ``interrupt_context`` to model calls made from
    an interrupt handler, where allocation services are refused.
    """

    def __init__(self) -> None:
        self.timers: list[HardTimer] = _default_timers()
        self.registers: dict[int, int] = {}
        self.interrupt_context = False

    def _check_context(self) -> None:
        if self.interrupt_context:
            raise IntrContextError()

    def _read(self, address: int, bits: int, signed: bool = False) -> int:
        value = self.registers.get(address, 0) & ((1 << bits) - 1)
        if signed and value & (1 << (bits - 1)):
            value -= 1 << bits
        return value

    def _write(self, address: int, value: int, bits: int) -> None:
        self.registers[address] = value & ((1 << bits) - 1)

    # ------------------------------------------------------------ allocation

    def alloc(self, source: int, size: int, prescale: int) -> int:
        """Take a free timer matching the request; return its id."""
        self._check_context()
        for timer in self.timers:
            if (
                not timer.allocated
                and timer.source & source
                and timer.size == size
                and timer.prescale >= prescale
            ):
                timer.allocated += 1
                return timer.timid
        raise NoTimerError()

    def refer(self, source: int, size: int, mode: int, modemask: int) -> int:
        """Share an already allocated timer whose mode matches; return its id."""
        self._check_context()
        for timer in self.timers:
            if (
                timer.allocated
                and timer.source & source
                and timer.size == size
                and (self.status(timer.timid) & modemask) == mode
            ):
                timer.allocated += 1
                return timer.timid
        raise NoTimerError()

    def free(self, timid: int) -> None:
        """Drop one hold on the timer ``timid``."""
        self._check_context()
        timer = next((t for t in self.timers if t.hwreg == timid << 2), None)
        if timer is None or not timer.allocated:
            raise NoTimerError()
        timer.allocated -= 1

    # ------------------------------------------------------------- registers

    def set_mode(self, timid: int, mode: int) -> None:
        self._write((timid << 2) + 4, mode, 16)

    def status(self, timid: int) -> int:
        return self._read((timid << 2) + 4, 16)

    def set_counter(self, timid: int, count: int) -> None:
        address = timid << 2
        self._write(address, count, 16 if address < RTC3 else 32)

    def counter(self, timid: int) -> int:
        """Counter value; 16-bit counters are sign-extended to 32 bits."""
        address = timid << 2
        if address < RTC3:
            return self._read(address, 16, signed=True) & 0xFFFFFFFF
        return self._read(address, 32)

    def set_compare(self, timid: int, compare: int) -> None:
        address = (timid << 2) + 8
        self._write(address, compare, 16 if address < RTC3 else 32)

    def compare(self, timid: int) -> int:
        """Compare value; 16-bit registers are sign-extended to 32 bits."""
        address = (timid << 2) + 8
        if address < RTC3:
            return self._read(address, 16, signed=True) & 0xFFFFFFFF
        return self._read(address, 32)

    def set_hold_mode(self, holdnum: int, mode: int) -> None:
        shift = holdnum * 4
        current = self._read(RTC_HOLDMODE, 32)
        self._write(RTC_HOLDMODE, (current & ~(0xF << shift)) | ((mode & 0xF) << shift), 32)

    def hold_mode(self, holdnum: int) -> int:
        return (self._read(RTC_HOLDMODE, 32) >> (holdnum * 4)) & 0xF

    def hold_reg(self, holdnum: int) -> int:
        return self._read(RTC_HOLDREGS + holdnum * 4, 32)