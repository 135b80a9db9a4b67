"""Codec ports for translating typed keys and values to bytes.

The engine only stores bytes. A ValueCodec turns a typed value into bytes on
write and back on read; a KeyCodec does the same for keys. Key encoding also
fixes iteration order, since the engine orders entries by the encoded bytes.

Codecs are pluggable so the storage format can change without touching the
facade. There is no versioning: data written with one value codec cannot be
read back with another.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import Protocol, TypeVar

K = TypeVar("K")
V = TypeVar("V")


class ValueCodec(Protocol[V]):
    """Protocol for value serialization.

    Implementations must be stateless and safe to call from worker threads.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Short format name, e.g. "json"."""
        ...

    @abstractmethod
    def encode(self, value: V) -> bytes:
        """Serialize a value.

        Args:
            value: The value to serialize.

        Returns:
            The encoded bytes.

        Raises:
            CodecError: If the value is outside the format's type system.
        """
        ...

    @abstractmethod
    def decode(self, data: bytes) -> V:
        """Deserialize bytes produced by encode().

        Args:
            data: The stored bytes.

        Returns:
            The decoded value.

        Raises:
            CodecError: If the bytes are not valid for the format.
        """
        ...


class KeyCodec(Protocol[K]):
    """Protocol for key serialization.

    encode() must be order-preserving for the key type it accepts: the byte
    order of encoded keys is the iteration order callers observe.
    """

    @abstractmethod
    def encode(self, key: K) -> bytes:
        """Serialize a key.

        Raises:
            CodecError: If the key has the wrong type.
            ValidationError: If the key is empty.
        """
        ...

    @abstractmethod
    def decode(self, data: bytes) -> K:
        """Deserialize a stored key.

        Raises:
            CodecError: If the bytes cannot be decoded.
        """
        ...
