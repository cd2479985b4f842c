from __future__ import annotations
from typing import Optional, Union

from keyczar.keys.dsa_private import DsaPrivateKey
from keyczar.keys.dsa_public import DsaPublicKey
from keyczar.keys.errors import KeyczarError
from keyczar.keys.key_type import KeyParameters, KeyType


Key = Union[DsaPrivateKey, DsaPublicKey]


# ---- Dispatch on key type ---- #
def generate_key(key_type: KeyType, params: Optional[KeyParameters] = None) -> Key:
    match key_type:
        case KeyType.DSA_PRIV:
            return DsaPrivateKey.generate(params or KeyParameters.default(key_type))
        case _:
            raise KeyczarError(f"keys of type {key_type.type_name} cannot be generated directly")


def read_key(key_type: KeyType, text: Union[str, bytes]) -> Key:
    match key_type:
        case KeyType.DSA_PRIV:
            return DsaPrivateKey.read(text)
        case KeyType.DSA_PUB:
            return DsaPublicKey.read(text)
        case _:
            raise KeyczarError(f"unsupported key type: {key_type.type_name}")
