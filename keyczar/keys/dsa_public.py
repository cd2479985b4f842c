from __future__ import annotations
import json
from typing import Any, Dict, Optional, Union
from cryptography.exceptions import InvalidSignature, UnsupportedAlgorithm
from cryptography.hazmat.primitives.asymmetric import dsa
from cryptography.hazmat.primitives.asymmetric.utils import Prehashed, decode_dss_signature
from loguru import logger

from keyczar.common.b64url import int_to_b64u, b64u_to_int, ub64u, is_b64u
from keyczar.common.canon import canon, prefix_hash, strip_leading_zeros
from keyczar.keys.errors import ActivationError, CryptoInitError, MalformedKeyError, VerificationError
from keyczar.keys.interfaces import Bytes
from keyczar.keys.key_type import KeyType
from keyczar.keys.provider import KEY_GEN_ALGORITHM, SIG_ALGORITHM, new_signature_context, signature_hash


DSA_DIGEST_SIZE = 48
KEY_HASH_SIZE = 4

_FIELDS = ("p", "q", "g", "y")


def require_size(obj: Dict[str, Any]) -> int:
    size = obj.get("size")
    # bool is an int subclass, a record with "size": true is still malformed
    if not isinstance(size, int) or isinstance(size, bool) or size <= 0:
        raise MalformedKeyError(f"invalid size: {size!r}")
    return size


def require_b64u(obj: Dict[str, Any], field: str) -> str:
    value = obj.get(field)
    if not isinstance(value, str) or not is_b64u(value):
        raise MalformedKeyError(f"missing or invalid field: {field}")
    return value


class DsaPublicKey:
    """DSA public key: domain parameters p, q, g and the public value y.

    The base64url strings are the serialized form and are kept as read, the
    native handle is derived from them by activate().
    """

    def __init__(self, size: int, p: str, q: str, g: str, y: str,
                 handle: Optional[dsa.DSAPublicKey] = None) -> None:
        self.size = size
        self.p = p
        self.q = q
        self.g = g
        self.y = y
        self._handle = handle

    # ---- Construction ---- #
    @classmethod
    def from_handle(cls, key: Union[dsa.DSAPublicKey, dsa.DSAPrivateKey]) -> "DsaPublicKey":
        if isinstance(key, dsa.DSAPrivateKey):
            key = key.public_key()
        numbers = key.public_numbers()
        params = numbers.parameter_numbers
        return cls(
            size=params.p.bit_length(),
            p=int_to_b64u(params.p),
            q=int_to_b64u(params.q),
            g=int_to_b64u(params.g),
            y=int_to_b64u(numbers.y),
            handle=key,
        )

    @classmethod
    def from_json(cls, obj: Any) -> "DsaPublicKey":
        # inert: call activate() before use
        if not isinstance(obj, dict):
            raise MalformedKeyError("public key record must be a JSON object")
        size = require_size(obj)
        p, q, g, y = (require_b64u(obj, f) for f in _FIELDS)
        return cls(size, p, q, g, y)

    @classmethod
    def read(cls, text: Union[str, bytes]) -> "DsaPublicKey":
        try:
            obj = json.loads(text)
        except (ValueError, TypeError) as e:
            raise MalformedKeyError(f"public key is not valid JSON: {e}") from e
        return cls.from_json(obj).activate()

    def to_json(self) -> Dict[str, Any]:
        return {"size": self.size, "p": self.p, "q": self.q, "g": self.g, "y": self.y}

    def to_json_string(self) -> str:
        return canon(self.to_json())

    # ---- Activation ---- #
    @property
    def active(self) -> bool:
        return self._handle is not None

    def activate(self) -> "DsaPublicKey":
        if self._handle is not None:
            raise ActivationError("public key is already active")
        try:
            p, q, g, y = (b64u_to_int(getattr(self, f)) for f in _FIELDS)
        except ValueError as e:
            raise MalformedKeyError(f"public key field is not base64url: {e}") from e
        try:
            params = dsa.DSAParameterNumbers(p=p, q=q, g=g)
            self._handle = dsa.DSAPublicNumbers(y=y, parameter_numbers=params).public_key()
        except (ValueError, TypeError, UnsupportedAlgorithm) as e:
            raise ActivationError(f"provider rejected public key: {e}") from e
        logger.debug("Activated DSA public key of {} bits", self.size)
        return self

    @property
    def handle(self) -> Optional[dsa.DSAPublicKey]:
        return self._handle

    # ---- Key surface ---- #
    def hash(self) -> bytes:
        chunks = [strip_leading_zeros(ub64u(getattr(self, f))) for f in _FIELDS]
        return prefix_hash(*chunks)[:KEY_HASH_SIZE]

    def key_gen_algorithm(self) -> str:
        return KEY_GEN_ALGORITHM

    def type(self) -> KeyType:
        return KeyType.DSA_PUB

    def get_stream(self) -> "DsaVerifyingStream":
        return DsaVerifyingStream(self)

    def __repr__(self) -> str:
        return f"DsaPublicKey(size={self.size}, hash={self.hash().hex()}, active={self.active})"


class DsaVerifyingStream:
    """One verification session at a time: init_verify, update_verify*, verify."""

    def __init__(self, key: DsaPublicKey) -> None:
        self._key = key
        self._ctx = None

    def digest_size(self) -> int:
        return DSA_DIGEST_SIZE

    def init_verify(self) -> None:
        if self._key.handle is None:
            raise CryptoInitError("public key has not been activated")
        self._ctx = new_signature_context(SIG_ALGORITHM)

    def update_verify(self, data: Bytes) -> None:
        if self._ctx is None:
            raise VerificationError("update_verify called before init_verify")
        self._ctx.update(bytes(data))

    def verify(self, signature: Bytes) -> bool:
        if self._ctx is None:
            raise VerificationError("verify called before init_verify")
        ctx, self._ctx = self._ctx, None
        digest = ctx.finalize()
        sig = bytes(signature)
        try:
            decode_dss_signature(sig)
        except ValueError as e:
            raise VerificationError(f"malformed DSA signature: {e}") from e
        try:
            self._key.handle.verify(sig, digest, Prehashed(signature_hash(SIG_ALGORITHM)))
            return True
        except InvalidSignature:
            return False
