from __future__ import annotations
from typing import Tuple
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import dsa
from loguru import logger


KEY_GEN_ALGORITHM = "DSA"
SIG_ALGORITHM = "SHA1withDSA"

_SIG_HASHES = {
    "SHA1withDSA": hashes.SHA1,
}


# ---- Key pair generation ---- #
def generate_key_pair(algorithm: str, size: int) -> Tuple[dsa.DSAPublicKey, dsa.DSAPrivateKey]:
    if algorithm != KEY_GEN_ALGORITHM:
        raise ValueError(f"unsupported key generation algorithm: {algorithm}")
    logger.debug("Generating {} key pair of {} bits... ", algorithm, size)
    sk = dsa.generate_private_key(key_size=size)
    return sk.public_key(), sk


# ---- Signature primitive: running hash fed by update, consumed by sign/verify ---- #
def signature_hash(algorithm: str) -> hashes.HashAlgorithm:
    try:
        return _SIG_HASHES[algorithm]()
    except KeyError:
        raise ValueError(f"unsupported signature algorithm: {algorithm}") from None


def new_signature_context(algorithm: str) -> hashes.Hash:
    return hashes.Hash(signature_hash(algorithm))
