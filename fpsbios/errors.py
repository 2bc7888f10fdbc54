"""Error codes reported by the IOP kernel modules, raised as exceptions."""

from __future__ import annotations

ERROR_OK = 0
ERROR_UNK = -1
ERROR_BAD_EXCODE = -50
ERROR_EXCODE_NOTFOUND = -51
ERROR_USED_EXCODE = -52
ERROR_INTR_CONTEXT = -100
ERROR_DOES_EXIST = -104
ERROR_DOESNOT_EXIST = -105
ERROR_NO_TIMER = -150
ERROR_NOT_IRX = -201
ERROR_FILE_NOT_FOUND = -203
ERROR_FILE_ERROR = -204
ERROR_NO_MEM = -400
ERROR_SEMACOUNT_ZERO = -400


class KernelError(Exception):
    """A failure reported by a kernel service, carrying its numeric code."""

    code = ERROR_UNK
    default_message = "kernel service failed"

    def __init__(self, message: str | None = None, code: int | None = None) -> None:
        if code is not None:
            self.code = code
        super().__init__(message or self.default_message)

    @classmethod
    def for_code(cls, code: int, message: str | None = None) -> "KernelError":
        """Build the exception that matches a numeric kernel error code."""
        kind = _BY_CODE.get(code)
        if kind is None:
            return KernelError(message, code=code)
        return kind(message)


class IntrContextError(KernelError):
    """The service may not be called from an interrupt handler."""

    code = ERROR_INTR_CONTEXT
    default_message = "called from interrupt context"


class AlreadyExistsError(KernelError):
    """The item is already registered."""

    code = ERROR_DOES_EXIST
    default_message = "already registered"


class NotFoundError(KernelError):
    """The item is not registered."""

    code = ERROR_DOESNOT_EXIST
    default_message = "not registered"


class NoTimerError(KernelError):
    """No hardware timer satisfies the request."""

    code = ERROR_NO_TIMER
    default_message = "no suitable hardware timer"


class OutOfMemoryError(KernelError):
    """No memory or free slot is left."""

    code = ERROR_NO_MEM
    default_message = "out of memory"


_BY_CODE: dict[int, type[KernelError]] = {
    kind.code: kind
    for kind in (IntrContextError, AlreadyExistsError, NotFoundError, NoTimerError, OutOfMemoryError)
}