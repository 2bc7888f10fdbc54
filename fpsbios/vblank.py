"""Vertical blank handler registry with priority-ordered handler lists."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable

from .errors import AlreadyExistsError, IntrContextError, NotFoundError, OutOfMemoryError

CAPACITY = 16
DEFAULT_PRIORITY = 128

VBLANK_START = 0x1
IN_VBLANK = 0x2
VBLANK_END = 0x4
NON_VBLANK = 0x8

SYSTEM_VBLANK_SEEN = 0x200

Handler = Callable[[Any], int]


@dataclass(eq=False)
class _Node:
    priority: int
    handler: Handler
    arg: Any


class VblankManager:
    """Keeps handlers for the vblank-start (0) and vblank-end (non-zero) interrupts.

    At most ``CAPACITY`` handlers exist at once; two of them are the manager's
    own, which maintain the ``flags`` event bits. A handler that returns 0
    when dispatched is removed.
    """

    def __init__(self) -> None:
        self.interrupt_context = False
        self.flags = 0
        self.count = 0
        self.system_status = 0
        self._lists: tuple[list[_Node], list[_Node]] = ([], [])
        self.register(0, DEFAULT_PRIORITY, self._on_start, self)
        self.register(1, DEFAULT_PRIORITY, self._on_end, self)

    def _on_start(self, _arg: Any) -> int:
        self.flags |= VBLANK_START
        self.flags |= IN_VBLANK
        self.flags &= ~(VBLANK_START | NON_VBLANK)
        return 1

    def _on_end(self, _arg: Any) -> int:
        self.flags |= VBLANK_END
        self.flags |= NON_VBLANK
        self.flags &= ~(IN_VBLANK | VBLANK_END)
        return 1

    def _list(self, number: int) -> list[_Node]:
        return self._lists[1 if number else 0]

    def _used(self) -> int:
        return sum(len(entries) for entries in self._lists)

    def register(self, number: int, priority: int, handler: Handler, arg: Any = None) -> None:
        """Add ``handler`` to list ``number``; it is called with ``arg``."""
        if self.interrupt_context:
            raise IntrContextError()
        if self._used() >= CAPACITY:
            raise OutOfMemoryError()
        entries = self._list(number)
        if any(node.handler == handler for node in entries):
            raise AlreadyExistsError()
        # The new node goes right after the first node of larger priority
        # value, or to the front of the list when there is none.
        position = next(
            (i + 1 for i, node in enumerate(entries) if priority < node.priority), 0
        )
        entries.insert(position, _Node(priority, handler, arg))

    def release(self, number: int, handler: Handler) -> None:
        """Remove ``handler`` from list ``number``."""
        if self.interrupt_context:
            raise IntrContextError()
        entries = self._list(number)
        for node in entries:
            if node.handler == handler:
                entries.remove(node)
                return
        raise NotFoundError()

    def dispatch(self, number: int) -> None:
        """Run the handlers of list ``number`` as the interrupt would."""
        entries = self._list(number)
        if not number:
            if self.count == 0:
                self.system_status |= SYSTEM_VBLANK_SEEN
            self.count += 1
        for node in list(entries):
            if node.handler(node.arg) == 0 and any(n is node for n in entries):
                entries.remove(node)

    def handlers(self, number: int) -> list[tuple[int, Handler, Any]]:
        """``(priority, handler, arg)`` for each handler of list ``number``, in call order."""
        return [(node.priority, node.handler, node.arg) for node in self._list(number)]