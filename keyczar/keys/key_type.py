from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple


# ---- Key type variants ---- #
class KeyType(Enum):
    # name, default size, acceptable sizes, reserved signature size
    DSA_PRIV = ("DSA_PRIV", 1024, (1024, 2048, 3072), 48)
    DSA_PUB = ("DSA_PUB", 1024, (1024, 2048, 3072), 48)

    def __init__(self, type_name: str, default_size: int, sizes: Tuple[int, ...], output_size: int):
        self.type_name = type_name
        self.default_size = default_size
        self.sizes = sizes
        self.output_size = output_size

    def is_acceptable_size(self, size: int) -> bool:
        return size in self.sizes


@dataclass(frozen=True)
class KeyParameters:
    key_size: int

    @classmethod
    def default(cls, key_type: KeyType, key_size: Optional[int] = None) -> "KeyParameters":
        return cls(key_size=key_type.default_size if key_size is None else key_size)
