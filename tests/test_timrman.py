import pytest

from fpsbios.errors import IntrContextError, KernelError, NoTimerError
from fpsbios.timrman import (
    INT_RTC2,
    INT_RTC3,
    INT_RTC5,
    RTC0,
    RTC2,
    RTC3,
    RTC_HOLDREGS,
    TC_HLINE,
    TC_SYSCLOCK,
    TIMER_PRESCALE_1,
    TIMER_PRESCALE_8,
    TIMER_SIZE_16,
    TIMER_SIZE_32,
    TimerManager,
    intr_code,
)


@pytest.fixture
def tm():
    return TimerManager()


def test_alloc_takes_first_matching_timer(tm):
    timid = tm.alloc(TC_SYSCLOCK, TIMER_SIZE_16, TIMER_PRESCALE_8)
    assert timid << 2 == RTC2


def test_alloc_exhausted_raises(tm):
    tm.alloc(TC_SYSCLOCK, TIMER_SIZE_16, TIMER_PRESCALE_8)
    with pytest.raises(NoTimerError):
        tm.alloc(TC_SYSCLOCK, TIMER_SIZE_16, TIMER_PRESCALE_8)


def test_alloc_matches_source_bits(tm):
    timid = tm.alloc(TC_HLINE, TIMER_SIZE_32, TIMER_PRESCALE_1)
    assert timid << 2 == RTC3


def test_free_then_alloc_returns_same_timer(tm):
    timid = tm.alloc(TC_SYSCLOCK, TIMER_SIZE_16, TIMER_PRESCALE_8)
    tm.free(timid)
    assert tm.alloc(TC_SYSCLOCK, TIMER_SIZE_16, TIMER_PRESCALE_8) == timid


def test_free_unallocated_raises(tm):
    with pytest.raises(NoTimerError):
        tm.free(RTC0 >> 2)


def test_free_unknown_timer_raises(tm):
    with pytest.raises(NoTimerError):
        tm.free(0x100)


def test_refer_shares_allocated_timer(tm):
    timid = tm.alloc(TC_SYSCLOCK, TIMER_SIZE_16, TIMER_PRESCALE_8)
    tm.set_mode(timid, 0x100)
    assert tm.refer(TC_SYSCLOCK, TIMER_SIZE_16, 0x100, 0x100) == timid
    tm.free(timid)
    tm.free(timid)
    with pytest.raises(NoTimerError):
        tm.free(timid)


def test_refer_with_no_matching_mode_raises(tm):
    tm.alloc(TC_SYSCLOCK, TIMER_SIZE_16, TIMER_PRESCALE_8)
    with pytest.raises(NoTimerError):
        tm.refer(TC_SYSCLOCK, TIMER_SIZE_16, 0x100, 0x100)


def test_interrupt_context_refused(tm):
    tm.interrupt_context = True
    with pytest.raises(IntrContextError):
        tm.alloc(TC_SYSCLOCK, TIMER_SIZE_16, TIMER_PRESCALE_8)
    with pytest.raises(IntrContextError):
        tm.free(RTC2 >> 2)


def test_mode_round_trip(tm):
    tm.set_mode(RTC2 >> 2, 0x58)
    assert tm.status(RTC2 >> 2) == 0x58


def test_counter_round_trip_16_and_32(tm):
    tm.set_counter(RTC0 >> 2, 0x1234)
    tm.set_counter(RTC3 >> 2, 0x12345678)
    assert tm.counter(RTC0 >> 2) == 0x1234
    assert tm.counter(RTC3 >> 2) == 0x12345678


def test_16_bit_counter_truncates(tm):
    tm.set_counter(RTC0 >> 2, 0x12345)
    assert tm.counter(RTC0 >> 2) == 0x2345


def test_16_bit_counter_sign_extends(tm):
    tm.set_counter(RTC0 >> 2, 0x8000)
    assert tm.counter(RTC0 >> 2) == 0xFFFF8000


def test_compare_round_trip(tm):
    tm.set_compare(RTC2 >> 2, 0x4000)
    tm.set_compare(RTC3 >> 2, 0x10000000)
    assert tm.compare(RTC2 >> 2) == 0x4000
    assert tm.compare(RTC3 >> 2) == 0x10000000


def test_hold_mode_nibbles_independent(tm):
    tm.set_hold_mode(1, 0xA)
    tm.set_hold_mode(2, 0x3)
    assert tm.hold_mode(1) == 0xA
    assert tm.hold_mode(2) == 0x3
    assert tm.hold_mode(0) == 0


def test_hold_mode_masks_to_nibble(tm):
    tm.set_hold_mode(0, 0x1F)
    assert tm.hold_mode(0) == 0xF
    assert tm.hold_mode(1) == 0


def test_hold_reg_reads_register(tm):
    tm.registers[RTC_HOLDREGS + 4] = 0xCAFE
    assert tm.hold_reg(1) == 0xCAFE


@pytest.mark.parametrize("hwreg, code", [(RTC2, INT_RTC2), (RTC3, INT_RTC3), (0xBF8014A0, INT_RTC5)])
def test_intr_code(hwreg, code):
    assert intr_code(hwreg >> 2) == code


def test_intr_code_unknown_raises():
    with pytest.raises(KernelError) as info:
        intr_code(0x1234)
    assert info.value.code == -1