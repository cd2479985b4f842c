from __future__ import annotations
from typing import Any, Dict, Optional, Protocol, Union, runtime_checkable

from keyczar.keys.key_type import KeyType


Bytes = Union[bytes, bytearray, memoryview]


# ---- Streams ---- #
@runtime_checkable
class SigningStream(Protocol):

    def digest_size(self) -> int:
        ...

    def init_sign(self) -> None:
        ...

    def update_sign(self, data: Bytes) -> None:
        ...

    def sign(self, output: Optional[bytearray] = None) -> bytes:
        ...


@runtime_checkable
class VerifyingStream(Protocol):

    def digest_size(self) -> int:
        ...

    def init_verify(self) -> None:
        ...

    def update_verify(self, data: Bytes) -> None:
        ...

    def verify(self, signature: Bytes) -> bool:
        ...


# ---- Keys ---- #
@runtime_checkable
class KeyczarKey(Protocol):
    """What a key management layer needs from any key, whatever its algorithm."""

    size: int

    def hash(self) -> bytes:
        ...

    def key_gen_algorithm(self) -> str:
        ...

    def type(self) -> KeyType:
        ...

    def get_stream(self) -> Any:
        ...

    def to_json(self) -> Dict[str, Any]:
        ...


@runtime_checkable
class KeyczarPrivateKey(KeyczarKey, Protocol):

    def get_public(self) -> KeyczarKey:
        ...
