import pytest

from fpsbios.sysmem import FREE, MAX_MEM_SIZE, AllocStrategy, SystemMemory

MEM = 2 * 1024 * 1024
TABLE = 0x1500


def make():
    return SystemMemory(MEM, TABLE)


def check_layout(mem):
    blocks = mem.blocks()
    expected = 0
    for address, size, _ in blocks:
        assert address == expected
        assert size > 0
        expected += size
    assert expected == mem.mem_size()
    assert mem.total_free_size() == sum(s for _, s, used in blocks if not used)


def test_initial_layout():
    mem = make()
    blocks = mem.blocks()
    assert blocks[0] == (0, TABLE, True)
    assert blocks[1] == (TABLE, 256, True)
    assert mem.first_free == TABLE + 256
    assert mem.total_free_size() == MEM - TABLE - 256
    check_layout(mem)


def test_mem_size_capped():
    assert SystemMemory(16 * 1024 * 1024, TABLE).mem_size() == MAX_MEM_SIZE


def test_mem_size_rounded_down():
    assert SystemMemory(MEM + 100, TABLE).mem_size() == MEM


def test_too_small_memory():
    with pytest.raises(ValueError):
        SystemMemory(TABLE, TABLE)


def test_alloc_first_sequential():
    mem = make()
    a = mem.alloc(1000)
    b = mem.alloc(1000)
    assert a == mem.first_free
    size = mem.block_size(a)
    assert size % 256 == 0 and 1000 <= size < 1256
    assert b - a == size
    check_layout(mem)


def test_alloc_last_ends_at_top():
    mem = make()
    a = mem.alloc(1000, AllocStrategy.LAST)
    assert a + mem.block_size(a) == mem.mem_size()
    assert mem.block_top_address(a) == a
    check_layout(mem)


def test_alloc_zero_and_too_large():
    mem = make()
    assert mem.alloc(0) is None
    assert mem.alloc(MEM) is None
    check_layout(mem)


def test_alloc_later_at_address():
    mem = make()
    target = mem.first_free + 0x10000
    assert mem.alloc(512, AllocStrategy.LATER, target) == target
    assert mem.block_top_address(target) == target
    assert mem.block_top_address(mem.first_free) == mem.first_free | FREE
    check_layout(mem)


def test_alloc_later_rejects_bad_addresses():
    mem = make()
    assert mem.alloc(512, AllocStrategy.LATER, mem.first_free + 1) is None
    assert mem.alloc(512, AllocStrategy.LATER, TABLE) is None


def test_unknown_strategy():
    with pytest.raises(ValueError):
        make().alloc(256, 3)


def test_free_restores_layout():
    mem = make()
    initial = mem.blocks()
    addresses = [mem.alloc(n) for n in (300, 5000, 256, 70000)]
    for address in addresses:
        mem.free(address)
    assert mem.blocks() == initial


def test_free_merges_both_neighbours():
    mem = make()
    initial = mem.blocks()
    a, b, c = mem.alloc(256), mem.alloc(512), mem.alloc(768)
    mem.free(a)
    mem.free(c)
    check_layout(mem)
    mem.free(b)
    assert mem.blocks() == initial


def test_free_errors():
    mem = make()
    a = mem.alloc(1000)
    with pytest.raises(ValueError):
        mem.free(a + 1)
    with pytest.raises(ValueError):
        mem.free(TABLE)
    with pytest.raises(LookupError):
        mem.free(0)
    mem.free(a)
    with pytest.raises(LookupError):
        mem.free(a)


def test_block_size_flags():
    mem = make()
    a = mem.alloc(1000)
    assert mem.block_size(a) & FREE == 0
    top_free = mem.blocks()[-1][0]
    assert mem.block_size(top_free) & FREE == FREE


def test_block_query_outside_memory():
    mem = make()
    with pytest.raises(LookupError):
        mem.block_top_address(MEM + 256)
    with pytest.raises(LookupError):
        mem.block_size(MEM + 256)


def test_max_and_total_free():
    mem = make()
    mem.alloc(256, AllocStrategy.LATER, mem.first_free + 0x40000)
    assert mem.max_free_size() < mem.total_free_size()
    free_sizes = [s for _, s, used in mem.blocks() if not used]
    assert mem.max_free_size() == max(free_sizes)


def test_many_allocations_grow_and_shrink_tables():
    mem = make()
    initial = mem.blocks()
    addresses = [mem.alloc(256) for _ in range(60)]
    assert None not in addresses
    assert len(set(addresses)) == len(addresses)
    assert len(mem.blocks()) > 31
    check_layout(mem)
    for address in addresses:
        mem.free(address)
    assert mem.blocks() == initial