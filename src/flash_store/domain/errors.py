"""Error taxonomy for the key-value store.

Every failure raised by this package derives from FlashStoreError, so callers
can catch the whole family at once. The concrete kinds also derive from the
matching builtin exception (KeyError, ValueError, RuntimeError) so that code
written against plain Python containers keeps working.

Kinds:
    - NotFoundError: the engine has no entry for a key. FlashStore.get()
      turns it into None; it never leaves the facade from get().
    - ValidationError: invalid range options or keys, raised before any I/O.
    - EngineError: the storage engine failed (I/O, permissions, corruption,
      map full). The native exception is kept as __cause__.
    - CodecError: a value or key could not be encoded or decoded. Reported
      separately from EngineError so callers can tell a data problem from an
      engine problem.
    - StoreClosedError: the store handle has been closed or destroyed.
"""

from __future__ import annotations


class FlashStoreError(Exception):
    """Base class for all store errors."""

    pass


class NotFoundError(FlashStoreError, KeyError):
    """Raised by the engine port when a key has no entry."""

    def __init__(self, key: bytes) -> None:
        self.key = key
        super().__init__(key)

    def __str__(self) -> str:
        return f"Key not found: {self.key!r}"


class ValidationError(FlashStoreError, ValueError):
    """Raised when options or keys are invalid."""

    pass


class EngineError(FlashStoreError):
    """Raised when the underlying storage engine fails."""

    def __init__(self, message: str, operation: str | None = None) -> None:
        self.operation = operation
        super().__init__(message)


class CodecError(FlashStoreError, ValueError):
    """Raised when a key or value cannot be encoded or decoded."""

    pass


class StoreClosedError(FlashStoreError, RuntimeError):
    """Raised when an operation needs an open store but the handle is closed."""

    pass
