"""IOP system memory manager: a block allocator working in 256-byte units."""

from __future__ import annotations

import contextlib
from dataclasses import dataclass
from enum import IntEnum

from .romdir import round_up

UNIT = 256
MAX_MEM_SIZE = 8 * 1024 * 1024 - UNIT  # 0x007FFF00
USED = 0x00000000
FREE = 0x80000000

_ELEMENTS_PER_TABLE = 31
_CHECK_ELEMENT = 27
_FIRST_FREEABLE = 2
_TABLE_SIZE = 256
_TABLE_ALLOC_SIZE = _TABLE_SIZE - 4
_ADDRESS_MASK = 0x7FFF


class AllocStrategy(IntEnum):
    """Where a new block is carved from."""

    FIRST = 0
    LAST = 1
    LATER = 2


@dataclass
class _Block:
    address: int  # in 256-byte units
    size: int  # in 256-byte units
    allocated: bool


class SystemMemory:
    """Tracks used and free blocks of IOP memory.

    Blocks are kept ordered by address. The bookkeeping tables live in the
    managed memory themselves: the first one at ``table_address`` and further
    ones are allocated and released as the number of blocks grows and shrinks.
    """

    def __init__(self, mem_size: int, table_address: int = 0x1500) -> None:
        if mem_size < 0 or table_address < 0:
            raise ValueError("memory size and table address must not be negative")
        table = round_up(table_address, UNIT)
        size = min(MAX_MEM_SIZE, mem_size) & ~(UNIT - 1)
        if size < table + _TABLE_SIZE:
            raise ValueError("memory is too small to hold the allocation table")

        self._mem_size = size
        self._tables: list[int] = [table]
        self._blocks: list[_Block] = [_Block(0, size // UNIT, False)]

        # Reserve everything below the table, then the table itself.
        self._alloc(AllocStrategy.FIRST, table, 0)
        self._maintain()
        placed = self._alloc(AllocStrategy.FIRST, _TABLE_ALLOC_SIZE, 0)
        self._maintain()
        if placed != table:
            raise ValueError("allocation table could not be placed at its address")

        self.first_free = next(
            (b.address * UNIT for b in self._blocks if not b.allocated), None
        )

    # ------------------------------------------------------------------ queries

    def mem_size(self) -> int:
        """Size of the managed memory in bytes."""
        return self._mem_size

    def max_free_size(self) -> int:
        """Size in bytes of the largest free block."""
        return max((b.size for b in self._blocks if not b.allocated), default=0) * UNIT

    def total_free_size(self) -> int:
        """Sum in bytes of all free blocks."""
        return sum(b.size for b in self._blocks if not b.allocated) * UNIT

    def _find(self, address: int) -> _Block:
        for block in self._blocks:
            start = block.address * UNIT
            # The block's extent is compared in bytes against its size in units,
            # exactly as the resident manager does.
            if start <= address < start + block.size:
                return block
        raise LookupError(f"no block contains address {address:#x}")

    def block_top_address(self, address: int) -> int:
        """Start address of the block holding ``address``, with FREE set if free."""
        block = self._find(address)
        return block.address * UNIT + (USED if block.allocated else FREE)

    def block_size(self, address: int) -> int:
        """Size of the block holding ``address``, with FREE set if free."""
        block = self._find(address)
        return (block.size * UNIT) | (USED if block.allocated else FREE)

    def blocks(self) -> list[tuple[int, int, bool]]:
        """All blocks in address order as ``(address, size, allocated)`` in bytes."""
        return [(b.address * UNIT, b.size * UNIT, b.allocated) for b in self._blocks]

    # --------------------------------------------------------------- operations

    def alloc(
        self, size: int, strategy: AllocStrategy | int = AllocStrategy.FIRST, address: int = 0
    ) -> int | None:
        """Allocate ``size`` bytes; return the block address or None if impossible."""
        result = self._alloc(AllocStrategy(strategy), size, address)
        self._maintain()
        return result

    def free(self, address: int) -> None:
        """Release the allocated block starting at ``address``."""
        if address in self._tables:
            raise ValueError(f"{address:#x} holds an allocation table")
        self._release(address)
        self._maintain()

    # ---------------------------------------------------------------- internals

    def _capacity(self) -> int:
        return _ELEMENTS_PER_TABLE * len(self._tables)

    def _has_room(self, extra: int) -> bool:
        return len(self._blocks) + extra <= self._capacity()

    def _split_front(self, index: int, units: int) -> int:
        """Allocate the first ``units`` of the free block at ``index``."""
        block = self._blocks[index]
        if block.size != units:
            rest = _Block((block.address + units) & _ADDRESS_MASK, block.size - units, False)
            self._blocks.insert(index + 1, rest)
            block.size = units
        block.allocated = True
        return block.address * UNIT

    def _alloc(self, strategy: AllocStrategy, size: int, address: int) -> int | None:
        units = (size + UNIT - 1) // UNIT
        if units <= 0:
            return None
        fits = [
            i for i, b in enumerate(self._blocks) if not b.allocated and b.size >= units
        ]

        if strategy is AllocStrategy.FIRST:
            if not fits:
                return None
            index = fits[0]
            if self._blocks[index].size != units and not self._has_room(1):
                return None
            return self._split_front(index, units)

        if strategy is AllocStrategy.LAST:
            if not fits:
                return None
            block = self._blocks[fits[-1]]
            if block.size == units:
                block.allocated = True
                return block.address * UNIT
            if not self._has_room(1):
                return None
            block.size -= units
            taken = _Block((block.address + block.size) & _ADDRESS_MASK, units, True)
            self._blocks.insert(fits[-1] + 1, taken)
            return taken.address * UNIT

        # AllocStrategy.LATER: a block at a given address.
        if address & (UNIT - 1):
            return None
        wanted = address // UNIT
        for index, block in enumerate(self._blocks):
            if wanted < block.address:
                return None
            if not block.allocated and block.address + block.size >= wanted + units:
                break
        else:
            return None

        front = block.address < wanted
        remaining = block.address + block.size - wanted
        if not self._has_room(int(front) + int(remaining != units)):
            return None
        if front:
            block.size -= remaining
            tail = _Block((block.address + block.size) & _ADDRESS_MASK, remaining, False)
            self._blocks.insert(index + 1, tail)
            index += 1
        return self._split_front(index, units)

    def _release(self, address: int) -> None:
        if address & (UNIT - 1):
            raise ValueError(f"{address:#x} is not a multiple of {UNIT}")
        wanted = address // UNIT
        index = next(
            (
                i
                for i in range(_FIRST_FREEABLE, len(self._blocks))
                if self._blocks[i].address == wanted
            ),
            None,
        )
        if index is None:
            raise LookupError(f"no freeable block at {address:#x}")
        block = self._blocks[index]
        if not block.allocated:
            raise LookupError(f"block at {address:#x} is already free")

        block.allocated = False
        remove = []
        if index + 1 < len(self._blocks) and not self._blocks[index + 1].allocated:
            block.size += self._blocks[index + 1].size
            remove.append(index + 1)
        if index > _FIRST_FREEABLE and not self._blocks[index - 1].allocated:
            self._blocks[index - 1].size += block.size
            remove.append(index)
        for i in sorted(remove, reverse=True):
            del self._blocks[i]

    def _maintain(self) -> None:
        count = len(self._tables)
        if len(self._blocks) > _ELEMENTS_PER_TABLE * (count - 1) + _CHECK_ELEMENT:
            table = self._alloc(AllocStrategy.FIRST, _TABLE_SIZE, 0)
            if table is not None:
                self._tables.append(table)

        count = len(self._tables)
        if count >= 2 and len(self._blocks) <= _ELEMENTS_PER_TABLE * (count - 2) + _CHECK_ELEMENT:
            with contextlib.suppress(LookupError, ValueError):
                self._release(self._tables.pop())